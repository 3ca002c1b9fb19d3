from __future__ import annotations

from typing import Tuple

from ..token_types import TT, Tok
from ..types import (
    LoxBool,
    LoxNumber,
    LoxRuntimeError,
    LoxString,
    LoxValue,
)
from ..utils import lox_equals, stringify
from .helpers import is_truthy

def require_number(op: Tok, operand: LoxValue) -> float:
    if isinstance(operand, LoxNumber):
        return operand.value

    raise LoxRuntimeError(op, "Operand must be a number.")

def require_numbers(op: Tok, lhs: LoxValue, rhs: LoxValue) -> Tuple[float, float]:
    if isinstance(lhs, LoxNumber) and isinstance(rhs, LoxNumber):
        return lhs.value, rhs.value

    raise LoxRuntimeError(op, "Operand must be numbers.")

def apply_unary_operator(op: Tok, rhs: LoxValue) -> LoxValue:
    match op.type:
        case TT.NEG:
            return LoxBool(not is_truthy(rhs))
        case TT.MINUS:
            return LoxNumber(-require_number(op, rhs))
    raise LoxRuntimeError(op, f"Unknown unary operator '{op.lexeme}'.")

def _add(op: Tok, lhs: LoxValue, rhs: LoxValue) -> LoxValue:
    match (lhs, rhs):
        case (LoxNumber(value=a), LoxNumber(value=b)):
            return LoxNumber(a + b)
        case (LoxString(value=a), LoxString(value=b)):
            return LoxString(a + b)
        case (LoxString(), LoxNumber()) | (LoxNumber(), LoxString()):
            return LoxString(stringify(lhs) + stringify(rhs))
        case _:
            raise LoxRuntimeError(op, "Operands must be two numbers or two strings.")

def apply_binary_operator(op: Tok, lhs: LoxValue, rhs: LoxValue) -> LoxValue:
    match op.type:
        case TT.PLUS:
            return _add(op, lhs, rhs)
        case TT.MINUS:
            a, b = require_numbers(op, lhs, rhs)
            return LoxNumber(a - b)
        case TT.STAR:
            a, b = require_numbers(op, lhs, rhs)
            return LoxNumber(a * b)
        case TT.SLASH:
            a, b = require_numbers(op, lhs, rhs)
            if b == 0:
                raise LoxRuntimeError(op, "Division by zero.")
            return LoxNumber(a / b)
        case TT.GT:
            a, b = require_numbers(op, lhs, rhs)
            return LoxBool(a > b)
        case TT.GTE:
            a, b = require_numbers(op, lhs, rhs)
            return LoxBool(a >= b)
        case TT.LT:
            a, b = require_numbers(op, lhs, rhs)
            return LoxBool(a < b)
        case TT.LTE:
            a, b = require_numbers(op, lhs, rhs)
            return LoxBool(a <= b)
        case TT.EQ:
            return LoxBool(lox_equals(lhs, rhs))
        case TT.NEQ:
            return LoxBool(not lox_equals(lhs, rhs))
    raise LoxRuntimeError(op, f"Unknown binary operator '{op.lexeme}'.")
