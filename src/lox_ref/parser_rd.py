"""
Recursive Descent Parser for Lox

Structure:
- Lexer: Token stream from source
- Parser: Recursive descent, one method per precedence level
- AST: frozen node variants from nodes.py

Malformed declarations are reported as soon as they are detected, skipped
with panic-mode recovery, and left out of the returned statement list.
"""

import logging
from typing import List, Optional

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
)
from .reporting import ErrorReporter
from .token_types import TT, Tok
from .types import NIL, LoxBool, LoxNumber, LoxString

logger = logging.getLogger(__name__)

# Tokens that can begin a statement; recovery stops in front of them.
STATEMENT_STARTS = frozenset({
    TT.CLASS,
    TT.FUN,
    TT.VAR,
    TT.FOR,
    TT.IF,
    TT.WHILE,
    TT.PRINT,
    TT.RETURN,
})

# ============================================================================
# Parser
# ============================================================================

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Tok):
        self.message = message
        self.token = token
        super().__init__(f"{message} at line {token.line}, col {token.column}")

class Parser:
    """
    Recursive descent parser for Lox.

    Expression precedence (lowest to highest):
    1. assignment (=, right-associative)
    2. equality (==, !=)
    3. comparison (>, >=, <, <=)
    4. term (-, +)
    5. factor (/, *)
    6. unary (!, -)
    7. primary (literals, identifiers, parens)

    A Parser instance owns its cursor and parses one token list once.
    """

    def __init__(self, tokens: List[Tok], reporter: Optional[ErrorReporter] = None):
        if not tokens or tokens[-1].type != TT.EOF:
            raise ValueError("token list must end with an EOF token")
        self.tokens = tokens
        self.pos = 0
        self.reporter = reporter if reporter is not None else ErrorReporter()

    # ========================================================================
    # Token Navigation
    # ========================================================================

    @property
    def current(self) -> Tok:
        return self.tokens[self.pos]

    @property
    def previous(self) -> Tok:
        return self.tokens[self.pos - 1]

    def is_at_end(self) -> bool:
        return self.current.type == TT.EOF

    def advance(self) -> Tok:
        """Consume current token and move to next; EOF is never consumed"""
        if not self.is_at_end():
            self.pos += 1
        return self.previous

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        if self.is_at_end():
            return False
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: str) -> Tok:
        """Consume token of expected type or raise error"""
        if self.check(token_type):
            return self.advance()
        raise self.error(self.current, message)

    def error(self, token: Tok, message: str) -> ParseError:
        """Report at the point of detection; the caller decides whether to raise"""
        self.reporter.parse_error(token, message)
        return ParseError(message, token)

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> List[Stmt]:
        """Parse entire program"""
        stmts: List[Stmt] = []

        while not self.is_at_end():
            stmt = self.parse_declaration()
            if stmt is not None:
                stmts.append(stmt)

        logger.debug("parsed %d statement(s) from %d token(s)", len(stmts), len(self.tokens))
        return stmts

    def parse_expression(self) -> Optional[Expr]:
        """Parse a single expression that must run to EOF; None after an error"""
        try:
            expr = self.parse_expr()
            if not self.is_at_end():
                raise self.error(self.current, "Expect end of expression.")
            return expr
        except ParseError:
            return None
        except RecursionError:
            self.error(self.current, "Expression nests too deeply.")
            return None

    def synchronize(self) -> None:
        """Discard tokens up to the next statement boundary"""
        skipped = self.advance()

        while not self.is_at_end():
            if self.previous.type == TT.SEMI:
                break

            if self.current.type in STATEMENT_STARTS:
                break

            self.advance()

        logger.debug("recovered after line %d, resuming at %r", skipped.line, self.current)

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_declaration(self) -> Optional[Stmt]:
        """
        declaration → varDecl | statement

        Returns None when the declaration failed to parse; the error has
        already been reported and the cursor sits on the next boundary.
        """
        try:
            if self.match(TT.VAR):
                return self.parse_var_decl()
            return self.parse_statement()
        except ParseError:
            self.synchronize()
            return None
        except RecursionError:
            self.error(self.current, "Expression nests too deeply.")
            self.synchronize()
            return None

    def parse_var_decl(self) -> Stmt:
        """varDecl → "var" IDENTIFIER ( "=" expression )? ";" """
        name = self.expect(TT.IDENT, "Expect variable name.")

        initializer = None
        if self.match(TT.ASSIGN):
            initializer = self.parse_expr()

        self.expect(TT.SEMI, "Expect ';' after variable declaration.")
        return Var(name, initializer)

    def parse_statement(self) -> Stmt:
        """statement → printStmt | exprStmt"""
        if self.match(TT.PRINT):
            return self.parse_print_stmt()

        return self.parse_expr_stmt()

    def parse_print_stmt(self) -> Stmt:
        value = self.parse_expr()
        self.expect(TT.SEMI, "Expect ';' after value.")
        return Print(value)

    def parse_expr_stmt(self) -> Stmt:
        value = self.parse_expr()
        self.expect(TT.SEMI, "Expect ';' after statement.")
        return Expression(value)

    # ========================================================================
    # Expressions
    # ========================================================================

    def parse_expr(self) -> Expr:
        """expression → assignment"""
        return self.parse_assignment()

    def parse_assignment(self) -> Expr:
        """
        assignment → IDENTIFIER "=" assignment | equality

        The target is parsed as an ordinary expression first. A target that
        is not a variable is reported but does not abort the statement.
        """
        expr = self.parse_equality()

        if self.match(TT.ASSIGN):
            equals = self.previous
            value = self.parse_assignment()

            if isinstance(expr, Variable):
                return Assign(expr.name, value)

            self.error(equals, "Invalid assignment target")

        return expr

    def _parse_left_assoc(self, operand, *ops: TT) -> Expr:
        expr = operand()

        while self.match(*ops):
            op = self.previous
            right = operand()
            expr = Binary(expr, op, right)

        return expr

    def parse_equality(self) -> Expr:
        """equality → comparison ( ( "!=" | "==" ) comparison )*"""
        return self._parse_left_assoc(self.parse_comparison, TT.NEQ, TT.EQ)

    def parse_comparison(self) -> Expr:
        """comparison → term ( ( ">" | ">=" | "<" | "<=" ) term )*"""
        return self._parse_left_assoc(self.parse_term, TT.GT, TT.GTE, TT.LT, TT.LTE)

    def parse_term(self) -> Expr:
        """term → factor ( ( "-" | "+" ) factor )*"""
        return self._parse_left_assoc(self.parse_factor, TT.MINUS, TT.PLUS)

    def parse_factor(self) -> Expr:
        """factor → unary ( ( "/" | "*" ) unary )*"""
        return self._parse_left_assoc(self.parse_unary, TT.SLASH, TT.STAR)

    def parse_unary(self) -> Expr:
        """unary → ( "!" | "-" ) unary | primary"""
        if self.match(TT.NEG, TT.MINUS):
            op = self.previous
            right = self.parse_unary()
            return Unary(op, right)

        return self.parse_primary()

    def parse_primary(self) -> Expr:
        """
        primary → NUMBER | STRING | "true" | "false" | "nil"
                | "(" expression ")" | IDENTIFIER
        """
        if self.match(TT.FALSE):
            return Literal(LoxBool(False))
        if self.match(TT.TRUE):
            return Literal(LoxBool(True))
        if self.match(TT.NIL):
            return Literal(NIL)

        if self.match(TT.NUMBER):
            return Literal(LoxNumber(float(self.previous.literal)))
        if self.match(TT.STRING):
            return Literal(LoxString(str(self.previous.literal)))

        if self.match(TT.LPAR):
            expr = self.parse_expr()
            self.expect(TT.RPAR, "Expect ')' after expression.")
            return Grouping(expr)

        if self.match(TT.IDENT):
            return Variable(self.previous)

        raise self.error(self.current, "Expect expression.")

# ============================================================================
# Convenience
# ============================================================================

def parse_tokens(tokens: List[Tok], reporter: Optional[ErrorReporter] = None) -> List[Stmt]:
    return Parser(tokens, reporter).parse()


def parse_source(source: str, reporter: Optional[ErrorReporter] = None) -> List[Stmt]:
    """
    Parse Lox source code to a statement list.

    Raises LexError for malformed source text; parse errors are reported
    through ``reporter`` and never raised.
    """
    from .lexer_rd import tokenize

    return parse_tokens(tokenize(source), reporter)
