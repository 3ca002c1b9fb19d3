from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from .evaluator import interpret, interpret_expression
from .lexer_rd import LexError, tokenize
from .nodes import Node, leading_token, to_tree
from .parser_rd import Parser
from .reporting import ErrorReporter
from .token_types import TT, Tok
from .types import Frame
from .utils import debug_py_trace_enabled

logger = logging.getLogger(__name__)

EXIT_USAGE = 64
EXIT_DATAERR = 65
EXIT_SOFTWARE = 70

def _scan(src: str, reporter: ErrorReporter) -> Optional[List[Tok]]:
    try:
        tokens = tokenize(src)
    except LexError as exc:
        reporter.lex_error(exc.line, exc.message)
        return None

    logger.debug("scanned %d token(s)", len(tokens))
    return tokens

def _dump_ast(nodes: Sequence[Node], reporter: ErrorReporter, out: TextIO) -> bool:
    """Print the lark tree of each node; trees too deep to render are reported."""
    for node in nodes:
        try:
            text = to_tree(node).pretty()
        except RecursionError:
            token = leading_token(node)
            if token is None:
                raise
            reporter.parse_error(token, "Expression nests too deeply.")
            return False
        print(text, end="", file=out)
    return True

def run(
    src: str,
    frame: Optional[Frame] = None,
    reporter: Optional[ErrorReporter] = None,
    out: Optional[TextIO] = None,
    show_ast: bool = False,
) -> Frame:
    """Scan, parse and execute ``src`` against ``frame``.

    Nothing executes when a lex or parse error was reported. The frame is
    returned so callers can inspect or reuse the bindings.
    """
    frame = frame if frame is not None else Frame()
    reporter = reporter if reporter is not None else ErrorReporter()
    out = out if out is not None else sys.stdout

    tokens = _scan(src, reporter)
    if tokens is not None:
        _run_tokens(tokens, frame, reporter, out, show_ast)
    return frame

def _run_tokens(tokens: List[Tok], frame: Frame, reporter: ErrorReporter, out: TextIO, show_ast: bool) -> None:
    statements = Parser(tokens, reporter).parse()
    if reporter.had_error:
        logger.debug("skipping execution after parse errors")
        return

    if show_ast:
        _dump_ast(statements, reporter, out)
        return

    interpret(statements, frame, reporter, out)

def _is_bare_expression(tokens: List[Tok]) -> bool:
    """True for input such as ``1 + 2`` that has no statement syntax at all."""
    if len(tokens) < 2:
        return False

    first, last = tokens[0], tokens[-2]
    return first.type not in (TT.VAR, TT.PRINT) and last.type != TT.SEMI

def repl_eval(
    src: str,
    frame: Frame,
    reporter: ErrorReporter,
    out: Optional[TextIO] = None,
    show_ast: bool = False,
) -> bool:
    """Run one REPL entry; a bare expression has its value printed.

    Returns False if any error was reported for this entry.
    """
    out = out if out is not None else sys.stdout
    reporter.reset()

    tokens = _scan(src, reporter)
    if tokens is None:
        return False

    if not _is_bare_expression(tokens):
        _run_tokens(tokens, frame, reporter, out, show_ast)
        return not (reporter.had_error or reporter.had_runtime_error)

    expr = Parser(tokens, reporter).parse_expression()
    if expr is None:
        return False

    if show_ast:
        return _dump_ast([expr], reporter, out)

    return interpret_expression(expr, frame, reporter, out)

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Otherwise the argument names a script file.
    """

    if arg is None or arg == "-":
        return sys.stdin.read()

    candidate = Path(arg)
    if not candidate.is_file():
        raise SystemExit(f"No such file: {arg}")

    return candidate.read_text(encoding="utf-8")

def _exit_code(reporter: ErrorReporter) -> int:
    if reporter.had_error:
        return EXIT_DATAERR
    if reporter.had_runtime_error:
        return EXIT_SOFTWARE
    return 0

def print_py_trace(reporter: ErrorReporter) -> None:
    """Dump the Python traceback of the last runtime error when LOX_DEBUG_PY_TRACE is set."""
    err = reporter.last_runtime_error
    if err is None or not debug_py_trace_enabled():
        return

    print("\nPython traceback:", file=sys.stderr)
    print("".join(traceback.format_tb(err.__traceback__)), file=sys.stderr, end="")

def main(argv: Optional[List[str]] = None) -> int:
    show_ast = False
    arg = None
    it = iter(sys.argv[1:] if argv is None else argv)

    for token in it:
        if token == "--ast":
            show_ast = True
            continue

        if token == "--debug":
            logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
            continue

        if token in ("-h", "--help"):
            print("Usage: lox-ref [--ast] [--debug] [script | -]")
            return 0

        if token.startswith("--"):
            print(f"Unknown option: {token}", file=sys.stderr)
            return EXIT_USAGE

        if arg is None:
            arg = token
        else:
            print("Usage: lox-ref [--ast] [--debug] [script | -]", file=sys.stderr)
            return EXIT_USAGE

    if arg is None and sys.stdin.isatty():
        from .repl import repl

        repl(show_ast=show_ast)
        return 0

    source = _load_source(arg)
    reporter = ErrorReporter()
    run(source, reporter=reporter, show_ast=show_ast)
    print_py_trace(reporter)
    return _exit_code(reporter)

if __name__ == "__main__":
    sys.exit(main())
