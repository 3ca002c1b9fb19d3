"""prompt_toolkit lexer for live Lox syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import LexError, tokenize
from .token_types import TT

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
}

_KEYWORD_TT = {
    TT.AND, TT.CLASS, TT.ELSE, TT.FUN, TT.FOR, TT.IF, TT.OR,
    TT.PRINT, TT.RETURN, TT.SUPER, TT.THIS, TT.VAR, TT.WHILE,
}

_OPERATOR_TT = {
    TT.PLUS, TT.MINUS, TT.STAR, TT.SLASH, TT.NEG, TT.ASSIGN,
    TT.EQ, TT.NEQ, TT.LT, TT.LTE, TT.GT, TT.GTE,
}


def _group_for(tok_type: TT) -> str:
    if tok_type in _KEYWORD_TT:
        return "keyword"
    if tok_type in _OPERATOR_TT:
        return "operator"
    match tok_type:
        case TT.TRUE | TT.FALSE:
            return "boolean"
        case TT.NIL:
            return "constant"
        case TT.NUMBER:
            return "number"
        case TT.STRING:
            return "string"
        case TT.IDENT:
            return "identifier"
        case _:
            return "punctuation"


def _gap(text: str) -> StyleAndTextTuples:
    """Unstyled text between tokens; a ``//`` in it starts a comment."""
    idx = text.find("//")
    if idx < 0:
        return [("", text)]

    spans: StyleAndTextTuples = []
    if idx > 0:
        spans.append(("", text[:idx]))
    spans.append((GROUP_STYLE["comment"], text[idx:]))
    return spans


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    try:
        tokens = tokenize(text)
    except LexError:
        return [("", text)]

    result: StyleAndTextTuples = []
    pos = 0

    for tok in tokens:
        if tok.type == TT.EOF:
            continue

        start = tok.column - 1
        if start > pos:
            result.extend(_gap(text[pos:start]))

        result.append((GROUP_STYLE.get(_group_for(tok.type), ""), tok.lexeme))
        pos = start + len(tok.lexeme)

    # Trailing text (whitespace or a comment).
    if pos < len(text):
        result.extend(_gap(text[pos:]))

    return result if result else [("", text)]


class LoxLexer(Lexer):
    """prompt_toolkit Lexer that highlights Lox source using the RD lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
