"""Error-reporting collaborator shared by the lexer driver, parser and evaluator."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import List, Optional, TextIO

from .token_types import TT, Tok
from .types import LoxRuntimeError


@dataclass(frozen=True)
class Diagnostic:
    """One reported problem: ``kind`` is ``lex``, ``parse`` or ``runtime``."""

    kind: str
    line: int
    message: str
    text: str


class ErrorReporter:
    """Formats errors, writes them to ``stream`` and remembers what was seen."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stderr
        self.diagnostics: List[Diagnostic] = []
        self.had_error = False
        self.had_runtime_error = False
        self.last_runtime_error: Optional[LoxRuntimeError] = None

    def lex_error(self, line: int, message: str) -> None:
        self._emit("lex", line, message, f"[line {line}] Error: {message}")
        self.had_error = True

    def parse_error(self, token: Tok, message: str) -> None:
        where = " at end" if token.type == TT.EOF else f" at '{token.lexeme}'"
        self._emit("parse", token.line, message, f"[line {token.line}] Error{where}: {message}")
        self.had_error = True

    def runtime_error(self, error: LoxRuntimeError) -> None:
        line = error.token.line
        self._emit("runtime", line, error.message, f"{error.message}\n[line {line}]")
        self.had_runtime_error = True
        self.last_runtime_error = error

    def reset(self) -> None:
        """Forget earlier failures; diagnostics already written stay written."""
        self.diagnostics.clear()
        self.had_error = False
        self.had_runtime_error = False
        self.last_runtime_error = None

    def messages(self, kind: Optional[str] = None) -> List[str]:
        return [d.message for d in self.diagnostics if kind is None or d.kind == kind]

    def _emit(self, kind: str, line: int, message: str, text: str) -> None:
        self.diagnostics.append(Diagnostic(kind=kind, line=line, message=message, text=text))
        print(text, file=self.stream)
