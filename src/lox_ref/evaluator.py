from __future__ import annotations

import sys
from typing import Iterable, Optional, TextIO

from .nodes import (
    Assign,
    Binary,
    Expr,
    Expression,
    Grouping,
    Literal,
    Print,
    Stmt,
    Unary,
    Var,
    Variable,
    Node,
    leading_token,
)
from .reporting import ErrorReporter
from .types import NIL, Frame, LoxRuntimeError, LoxValue
from .utils import stringify
from .eval.expr import apply_binary_operator, apply_unary_operator

# ---------------- Public API ----------------

def interpret(
    statements: Iterable[Stmt],
    frame: Frame,
    reporter: ErrorReporter,
    out: Optional[TextIO] = None,
) -> bool:
    """Execute statements in order; a runtime error is reported and ends the unit.

    Returns False when a runtime error stopped execution.
    """
    out = out if out is not None else sys.stdout

    stmt = None
    try:
        for stmt in statements:
            exec_stmt(stmt, frame, out)
    except LoxRuntimeError as e:
        reporter.runtime_error(e)
        return False
    except RecursionError as e:
        reporter.runtime_error(_too_deep(stmt).with_traceback(e.__traceback__))
        return False

    return True

def interpret_expression(
    expr: Expr,
    frame: Frame,
    reporter: ErrorReporter,
    out: Optional[TextIO] = None,
) -> bool:
    """Evaluate one expression and print its value; nothing is printed on error."""
    out = out if out is not None else sys.stdout

    try:
        value = eval_node(expr, frame)
    except LoxRuntimeError as e:
        reporter.runtime_error(e)
        return False
    except RecursionError as e:
        reporter.runtime_error(_too_deep(expr).with_traceback(e.__traceback__))
        return False

    print(stringify(value), file=out)
    return True

def _too_deep(node: Optional[Node]) -> LoxRuntimeError:
    # Flat operator chains parse in a loop but evaluate one frame per operand.
    token = leading_token(node) if node is not None else None
    if token is None:
        raise RecursionError("no token to report the nesting error at")
    return LoxRuntimeError(token, "Expression nests too deeply.")

# ---------------- Core evaluator ----------------

def exec_stmt(stmt: Stmt, frame: Frame, out: TextIO) -> None:
    match stmt:
        case Expression(expression=expr):
            eval_node(expr, frame)
        case Print(expression=expr):
            print(stringify(eval_node(expr, frame)), file=out)
        case Var(name=name, initializer=init):
            value = NIL if init is None else eval_node(init, frame)
            frame.define(name.lexeme, value)
        case _:
            raise TypeError(f"Unknown statement: {type(stmt).__name__}")

def eval_node(n: Expr, frame: Frame) -> LoxValue:
    match n:
        case Literal(value=value):
            return value
        case Grouping(expression=inner):
            return eval_node(inner, frame)
        case Unary(operator=op, right=right):
            return apply_unary_operator(op, eval_node(right, frame))
        case Binary(left=left, operator=op, right=right):
            # Right operand first; side effects are observable in this order.
            rhs = eval_node(right, frame)
            lhs = eval_node(left, frame)
            return apply_binary_operator(op, lhs, rhs)
        case Variable(name=name):
            return frame.get(name)
        case Assign(name=name, value=value_node):
            value = eval_node(value_node, frame)
            frame.assign(name, value)
            return value
        case _:
            raise TypeError(f"Unknown node: {type(n).__name__}")
