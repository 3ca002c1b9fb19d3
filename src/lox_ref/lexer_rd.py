"""
Lexer for Lox - Recursive Descent Parser

Tokenizes Lox source code into a stream of tokens.

Features:
- Single-pass tokenization
- Position tracking (line, column)
- Line comments (// ...)
- Multi-line string literals
"""

from typing import List, Optional, Union

from .token_types import TT, Tok

# ============================================================================
# Lexer Implementation
# ============================================================================

class Lexer:
    """
    Lox lexer.

    Whitespace and comments never produce tokens; every other lexeme does.
    The token list always ends with a single EOF token.
    """

    # Keyword mapping
    KEYWORDS = {
        'and': TT.AND,
        'class': TT.CLASS,
        'else': TT.ELSE,
        'false': TT.FALSE,
        'for': TT.FOR,
        'fun': TT.FUN,
        'if': TT.IF,
        'nil': TT.NIL,
        'or': TT.OR,
        'print': TT.PRINT,
        'return': TT.RETURN,
        'super': TT.SUPER,
        'this': TT.THIS,
        'true': TT.TRUE,
        'var': TT.VAR,
        'while': TT.WHILE,
    }

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('!=', TT.NEQ),
        ('==', TT.EQ),
        ('<=', TT.LTE),
        ('>=', TT.GTE),

        # Single-character operators
        ('!', TT.NEG),
        ('=', TT.ASSIGN),
        ('<', TT.LT),
        ('>', TT.GT),
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('*', TT.STAR),
        ('/', TT.SLASH),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        ('.', TT.DOT),
        (',', TT.COMMA),
        (';', TT.SEMI),
    ]

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []

        # Start of the lexeme being scanned
        self.start = 0
        self.start_line = 1
        self.start_column = 1

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.start = self.pos
            self.start_line = self.line
            self.start_column = self.column
            self.scan_token()

        self.start = self.pos
        self.start_line = self.line
        self.start_column = self.column
        self.emit(TT.EOF)
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        # Skip whitespace (not newlines)
        if self.skip_whitespace():
            return

        # Newlines
        if self.peek() == '\n':
            self.scan_newline()
            return

        # Comments
        if self.peek() == '/' and self.peek(1) == '/':
            self.skip_comment()
            return

        # String literals
        if self.peek() == '"':
            self.scan_string()
            return

        # Numbers
        if _is_digit(self.peek()):
            self.scan_number()
            return

        # Identifiers and keywords
        if _is_alpha(self.peek()):
            self.scan_identifier()
            return

        self.scan_operator()

    def scan_newline(self):
        """Consume a newline and move to the next line"""
        self.advance()
        self.line += 1
        self.column = 1

    def scan_string(self):
        """Scan a double-quoted string; strings may span lines"""
        self.advance()  # Opening quote

        while self.peek() != '"' and self.pos < len(self.source):
            if self.peek() == '\n':
                self.scan_newline()
            else:
                self.advance()

        if self.pos >= len(self.source):
            raise LexError("Unterminated string.", self.start_line, self.start_column)

        self.advance()  # Closing quote
        self.emit(TT.STRING, self.source[self.start + 1:self.pos - 1])

    def scan_number(self):
        """Scan number literal"""
        # Integer part
        while _is_digit(self.peek()):
            self.advance()

        # Decimal part; a trailing '.' stays a separate token
        if self.peek() == '.' and _is_digit(self.peek(1)):
            self.advance()  # .
            while _is_digit(self.peek()):
                self.advance()

        self.emit(TT.NUMBER, float(self.source[self.start:self.pos]))

    def scan_identifier(self):
        """Scan identifier or keyword"""
        while _is_alpha(self.peek()) or _is_digit(self.peek()):
            self.advance()

        # Check if keyword
        value = self.source[self.start:self.pos]
        token_type = self.KEYWORDS.get(value, TT.IDENT)
        self.emit(token_type)

    def scan_operator(self):
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                self.emit(op_type)
                return

        raise LexError("Unexpected character.", self.line, self.column)

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        if n < 0:
            raise ValueError(f"advance() requires n >= 0, got {n}")
        result = self.source[self.pos:self.pos + n]
        self.pos += n
        self.column += n
        return result

    def skip_whitespace(self) -> bool:
        """Skip whitespace (not newlines), return True if any skipped"""
        skipped = False
        while self.peek() in (' ', '\t', '\r'):
            self.advance()
            skipped = True
        return skipped

    def skip_comment(self):
        """Skip comment until end of line"""
        while self.peek() not in ('\n', '\0'):
            self.advance()

    def emit(self, token_type: TT, literal: Optional[Union[float, str]] = None):
        """Emit a token for the lexeme scanned since self.start"""
        tok = Tok(
            type=token_type,
            lexeme=self.source[self.start:self.pos],
            literal=literal,
            line=self.start_line,
            column=self.start_column,
        )
        self.tokens.append(tok)

def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"

def _is_alpha(ch: str) -> bool:
    return "a" <= ch <= "z" or "A" <= ch <= "Z" or ch == "_"

class LexError(Exception):
    """Lexical analysis error"""
    def __init__(self, message: str, line: int, column: int):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"{message} at line {line}, col {column}")

def tokenize(source: str) -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source)
    return lexer.tokenize()
