from __future__ import annotations

from dataclasses import dataclass
from typing import Dict
from typing_extensions import TypeAlias

from .token_types import Tok

# ---------- Value Model ----------

@dataclass(frozen=True)
class LoxNil:
    def __repr__(self) -> str:
        return "nil"

@dataclass(frozen=True)
class LoxBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass(frozen=True)
class LoxNumber:
    value: float
    def __repr__(self) -> str:
        text = str(self.value)
        return text[:-2] if text.endswith(".0") else text

@dataclass(frozen=True)
class LoxString:
    value: str
    def __repr__(self) -> str:
        return f'"{self.value}"'

LoxValue: TypeAlias = LoxNil | LoxBool | LoxNumber | LoxString

NIL = LoxNil()

# ---------- Exceptions ----------

class LoxRuntimeError(Exception):
    """Evaluation failure tied to the token that caused it."""

    def __init__(self, token: Tok, message: str):
        super().__init__(message)
        self.token = token
        self.message = message

    def __str__(self) -> str:
        return f"{self.message} (line {self.token.line})"

# ---------- Bindings ----------

class Frame:
    """Flat global binding store; names are never scoped to blocks."""

    def __init__(self) -> None:
        self.vars: Dict[str, LoxValue] = {}

    def define(self, name: str, val: LoxValue) -> None:
        self.vars[name] = val

    def get(self, name: Tok) -> LoxValue:
        if name.lexeme in self.vars:
            return self.vars[name.lexeme]

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Tok, val: LoxValue) -> None:
        if name.lexeme in self.vars:
            self.vars[name.lexeme] = val
            return

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def __contains__(self, name: str) -> bool:
        return name in self.vars
