from __future__ import annotations

import os

import pytest

from lox_ref.repl import ReplState, _SlashCompleter, eval_entry, handle_slash, normalize
from lox_ref.repl_highlight import GROUP_STYLE, LoxLexer, _highlight_line
from lox_ref.types import Frame
from tests.support.harness import quiet_reporter


@pytest.fixture
def state() -> ReplState:
    return ReplState(reporter=quiet_reporter())


def test_non_slash_line_is_not_a_command(state: ReplState) -> None:
    assert handle_slash("1 / 2", state) is False


def test_ast_toggle(state: ReplState, capsys: pytest.CaptureFixture[str]) -> None:
    assert handle_slash("/ast", state)
    assert state.show_ast
    assert handle_slash("/ast", state)
    assert not state.show_ast
    assert capsys.readouterr().out == "AST mode: on\nAST mode: off\n"


def test_reset_replaces_frame(state: ReplState, capsys: pytest.CaptureFixture[str]) -> None:
    old = state.frame
    eval_entry("var a = 1;", state)

    assert handle_slash("/reset", state)
    assert state.frame is not old
    assert "a" not in state.frame
    assert capsys.readouterr().out == "Environment reset.\n"


def test_py_traceback_switch(
    state: ReplState,
    capsys: pytest.CaptureFixture[str],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("LOX_DEBUG_PY_TRACE", "0")

    handle_slash("/py-traceback on", state)
    assert os.environ["LOX_DEBUG_PY_TRACE"] == "1"
    handle_slash("/py-traceback", state)
    assert "LOX_DEBUG_PY_TRACE" not in os.environ
    handle_slash("/py-traceback", state)
    handle_slash("/py-traceback off", state)

    assert capsys.readouterr().out == (
        "Python traceback: on\n"
        "Python traceback: off\n"
        "Python traceback: on\n"
        "Python traceback: off\n"
    )


def test_py_traceback_bad_argument(state: ReplState, capsys: pytest.CaptureFixture[str]) -> None:
    assert handle_slash("/py-traceback maybe", state)
    assert capsys.readouterr().err == "Usage: /py-traceback [on|off]\n"


def test_unknown_command(state: ReplState, capsys: pytest.CaptureFixture[str]) -> None:
    assert handle_slash("/frobnicate now", state)
    assert capsys.readouterr().err == "Unknown command: /frobnicate\n"


def test_normalize_strips_invisible_characters() -> None:
    assert normalize("\ufeffprint 1;\r") == "print 1;"
    assert normalize("1 +\u200b 2") == "1 + 2"


def test_eval_entry_session(state: ReplState, capsys: pytest.CaptureFixture[str]) -> None:
    for entry in ("var x = 4;", "x * x", "   ", "print x;"):
        eval_entry(entry, state)

    assert capsys.readouterr().out == "16\n4\n"


def test_eval_entry_reports_errors_without_raising(state: ReplState) -> None:
    eval_entry("x", state)
    assert state.reporter.messages("runtime") == ["Undefined variable 'x'."]

    eval_entry("print ;", state)
    assert state.reporter.messages("parse") == ["Expect expression."]


def test_eval_entry_respects_ast_mode(state: ReplState, capsys: pytest.CaptureFixture[str]) -> None:
    state.show_ast = True
    eval_entry("var y = 1;", state)

    assert "y" not in state.frame
    assert capsys.readouterr().out == "vardecl\n  y\n  literal\t1\n"


def test_fresh_state_defaults() -> None:
    fresh = ReplState()
    assert isinstance(fresh.frame, Frame)
    assert fresh.show_ast is False


def test_slash_completer_offers_matching_commands() -> None:
    from prompt_toolkit.document import Document

    completions = list(_SlashCompleter().get_completions(Document("/py"), None))
    assert [c.text for c in completions] == ["/py-traceback"]
    assert completions[0].display_text == "/py-traceback [on|off]"
    assert completions[0].display_meta_text == "Toggle Python traceback on errors"

    (reset,) = _SlashCompleter().get_completions(Document("/re"), None)
    assert reset.display_text == "/reset"
    assert list(_SlashCompleter().get_completions(Document("1 + "), None)) == []


def test_highlight_preserves_text() -> None:
    line = 'var greeting = "hi" + 1; // note'
    fragments = _highlight_line(line)
    assert "".join(text for _, text in fragments) == line


def test_highlight_groups() -> None:
    fragments = _highlight_line('print nil != "s" + 2.5;')
    styled = {text: style for style, text in fragments if text.strip()}

    assert styled["print"] == GROUP_STYLE["keyword"]
    assert styled["nil"] == GROUP_STYLE["constant"]
    assert styled['"s"'] == GROUP_STYLE["string"]
    assert styled["2.5"] == GROUP_STYLE["number"]
    assert styled["!="] == GROUP_STYLE["operator"]


def test_highlight_trailing_comment() -> None:
    fragments = _highlight_line("x; // done")
    assert fragments[-1] == (GROUP_STYLE["comment"], "// done")


def test_highlight_falls_back_on_lex_error() -> None:
    assert _highlight_line('"open') == [("", '"open')]
    assert _highlight_line("") == [("", "")]


def test_lexer_highlights_each_line() -> None:
    from prompt_toolkit.document import Document

    get_line = LoxLexer().lex_document(Document("true\nfalse"))
    assert get_line(0) == [(GROUP_STYLE["boolean"], "true")]
    assert get_line(1) == [(GROUP_STYLE["boolean"], "false")]
    assert get_line(5) == [("", "")]
