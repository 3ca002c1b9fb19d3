from __future__ import annotations

import os as _os

from .types import (
    LoxValue,
    LoxNil,
    LoxBool,
    LoxNumber,
    LoxString,
)

_TRUTHY_FLAGS = {"1", "true", "yes", "on"}


def debug_py_trace_enabled() -> bool:
    """Whether runtime errors should also dump the Python traceback."""
    return _os.environ.get("LOX_DEBUG_PY_TRACE", "").strip().lower() in _TRUTHY_FLAGS


def lox_equals(lhs: LoxValue, rhs: LoxValue) -> bool:
    match (lhs, rhs):
        case (LoxNil(), LoxNil()):
            return True
        case (LoxNumber(value=a), LoxNumber(value=b)):
            return a == b
        case (LoxString(value=a), LoxString(value=b)):
            return a == b
        case (LoxBool(value=a), LoxBool(value=b)):
            return a == b
        case _:
            return False


def format_number(num: float) -> str:
    text = str(num)
    if text.endswith(".0"):
        return text[:-2]
    return text


def stringify(value: LoxValue) -> str:
    match value:
        case LoxNil():
            return "nil"
        case LoxBool(value=b):
            return "true" if b else "false"
        case LoxNumber(value=num):
            return format_number(num)
        case LoxString(value=s):
            return s
        case _:
            raise TypeError(f"Unexpected value type {type(value).__name__}")
