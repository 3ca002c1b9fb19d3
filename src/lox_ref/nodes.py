"""AST node variants produced by the parser and consumed by the evaluator.

Every node is a frozen dataclass that owns its children outright; the tree is
built once by the parser and only read afterwards.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union
from typing_extensions import TypeAlias

from lark import Token, Tree

from .token_types import Tok
from .types import LoxBool, LoxNil, LoxNumber, LoxString, LoxValue
from .utils import stringify

# ---------- Expressions ----------

@dataclass(frozen=True)
class Literal:
    value: LoxValue

@dataclass(frozen=True)
class Grouping:
    expression: 'Expr'

@dataclass(frozen=True)
class Unary:
    operator: Tok
    right: 'Expr'

@dataclass(frozen=True)
class Binary:
    left: 'Expr'
    operator: Tok
    right: 'Expr'

@dataclass(frozen=True)
class Variable:
    name: Tok

@dataclass(frozen=True)
class Assign:
    name: Tok
    value: 'Expr'

Expr: TypeAlias = Union[Literal, Grouping, Unary, Binary, Variable, Assign]

# ---------- Statements ----------

@dataclass(frozen=True)
class Expression:
    expression: Expr

@dataclass(frozen=True)
class Print:
    expression: Expr

@dataclass(frozen=True)
class Var:
    name: Tok
    initializer: Optional[Expr] = None

Stmt: TypeAlias = Union[Expression, Print, Var]

Node: TypeAlias = Union[Expr, Stmt]

# ---------- Rendering ----------

def render_expr(node: Node) -> str:
    """Render a node as a parenthesised prefix form, e.g. ``(+ 1 (* 2 3))``."""
    match node:
        case Literal(value=LoxString(value=s)):
            return s
        case Literal(value=value):
            return stringify(value)
        case Grouping(expression=inner):
            return _parenthesize("group", inner)
        case Unary(operator=op, right=right):
            return _parenthesize(op.lexeme, right)
        case Binary(left=left, operator=op, right=right):
            return _parenthesize(op.lexeme, left, right)
        case Variable(name=name):
            return name.lexeme
        case Assign(name=name, value=value):
            return f"(= {name.lexeme} {render_expr(value)})"
        case Expression(expression=expr):
            return _parenthesize("expr", expr)
        case Print(expression=expr):
            return _parenthesize("print", expr)
        case Var(name=name, initializer=None):
            return f"(var {name.lexeme})"
        case Var(name=name, initializer=init):
            return f"(var {name.lexeme} {render_expr(init)})"
        case _:
            raise TypeError(f"Unknown node: {type(node).__name__}")

def _parenthesize(label: str, *parts: Node) -> str:
    return "(" + " ".join([label, *(render_expr(p) for p in parts)]) + ")"

_LITERAL_KINDS = {
    LoxNil: "NIL",
    LoxBool: "BOOL",
    LoxNumber: "NUMBER",
    LoxString: "STRING",
}

def _tok(tok: Tok) -> Token:
    return Token(tok.type.name, tok.lexeme, line=tok.line, column=tok.column)

def to_tree(node: Node) -> Tree:
    """Convert a node into a lark Tree so it can be inspected or ``pretty()``-printed."""
    match node:
        case Literal(value=value):
            return Tree('literal', [Token(_LITERAL_KINDS[type(value)], repr(value))])
        case Grouping(expression=inner):
            return Tree('group', [to_tree(inner)])
        case Unary(operator=op, right=right):
            return Tree('unary', [_tok(op), to_tree(right)])
        case Binary(left=left, operator=op, right=right):
            return Tree('binary', [to_tree(left), _tok(op), to_tree(right)])
        case Variable(name=name):
            return Tree('variable', [_tok(name)])
        case Assign(name=name, value=value):
            return Tree('assign', [_tok(name), to_tree(value)])
        case Expression(expression=expr):
            return Tree('exprstmt', [to_tree(expr)])
        case Print(expression=expr):
            return Tree('printstmt', [to_tree(expr)])
        case Var(name=name, initializer=init):
            children = [_tok(name)]
            if init is not None:
                children.append(to_tree(init))
            return Tree('vardecl', children)
        case _:
            raise TypeError(f"Unknown node: {type(node).__name__}")

def leading_token(node: Node) -> Optional[Tok]:
    """Leftmost token held by ``node``, found without recursing.

    Literals carry no token, so a bare literal yields None.
    """
    found: Optional[Tok] = None
    while True:
        match node:
            case Var(name=name) | Variable(name=name) | Assign(name=name):
                return name
            case Expression(expression=inner) | Print(expression=inner) | Grouping(expression=inner):
                node = inner
            case Unary(operator=op):
                return op
            case Binary(left=left, operator=op):
                found = op
                node = left
            case _:
                return found
