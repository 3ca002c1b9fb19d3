"""Interactive REPL for Lox, powered by prompt_toolkit."""

from __future__ import annotations

import logging
import os
import re
import sys
from dataclasses import dataclass, field

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.shortcuts import clear

from .repl_highlight import LoxLexer
from .reporting import ErrorReporter
from .runner import print_py_trace, repl_eval
from .types import Frame
from .utils import debug_py_trace_enabled

logger = logging.getLogger(__name__)

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/ast": ("Toggle printing the syntax tree instead of running", ""),
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Reset the REPL environment", ""),
}


@dataclass
class ReplState:
    """Mutable session state so slash commands can swap pieces out."""

    frame: Frame = field(default_factory=Frame)
    reporter: ErrorReporter = field(default_factory=ErrorReporter)
    show_ast: bool = False


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display=f"{cmd} {hint}" if hint else cmd,
                    display_meta=desc,
                )


def handle_slash(line: str, state: ReplState) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/ast":
        state.show_ast = not state.show_ast
        print(f"AST mode: {'on' if state.show_ast else 'off'}")
        return True

    if cmd == "/py-traceback":
        if arg.lower() in ("on", "1", "true", "yes"):
            os.environ["LOX_DEBUG_PY_TRACE"] = "1"
        elif arg.lower() in ("off", "0", "false", "no"):
            os.environ.pop("LOX_DEBUG_PY_TRACE", None)
        elif arg == "":
            # Toggle.
            if debug_py_trace_enabled():
                os.environ.pop("LOX_DEBUG_PY_TRACE", None)
            else:
                os.environ["LOX_DEBUG_PY_TRACE"] = "1"
        else:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        state_txt = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {state_txt}")
        return True

    if cmd == "/reset":
        state.frame = Frame()
        print("Environment reset.")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def eval_entry(text: str, state: ReplState) -> None:
    """Evaluate one submitted entry; errors are reported, never raised."""
    text = normalize(text)
    if not text.strip():
        return

    if handle_slash(text, state):
        return

    ok = repl_eval(text, state.frame, state.reporter, show_ast=state.show_ast)
    if not ok:
        logger.debug("entry failed with %d diagnostic(s)", len(state.reporter.diagnostics))
        print_py_trace(state.reporter)


def repl(show_ast: bool = False) -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    state = ReplState(show_ast=show_ast)

    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        lexer=LoxLexer(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
    )

    print("lox repl. Ctrl-D to exit, / for commands")

    while True:
        try:
            text = session.prompt("> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        eval_entry(text, state)
