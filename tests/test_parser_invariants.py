from __future__ import annotations

import io

import pytest

from lox_ref.lexer_rd import tokenize
from lox_ref.nodes import Expression, Literal, Print, render_expr
from lox_ref.parser_rd import Parser
from lox_ref.reporting import ErrorReporter
from lox_ref.runner import EXIT_DATAERR, EXIT_SOFTWARE, main, repl_eval
from lox_ref.token_types import TT, Tok
from lox_ref.types import Frame, LoxNumber
from tests.support.harness import parse_statements, quiet_reporter, run_program


def test_recovery_after_bad_var_declaration() -> None:
    stmts, reporter = parse_statements("var ; print 1;")

    assert len(reporter.diagnostics) == 1
    assert reporter.messages() == ["Expect variable name."]
    assert len(stmts) == 1
    assert isinstance(stmts[0], Print)
    assert stmts[0].expression == Literal(LoxNumber(1.0))


def test_each_malformed_statement_reports_once() -> None:
    source = "print ; var 1; print 2; (3; print 4;"
    stmts, reporter = parse_statements(source)

    assert reporter.messages() == [
        "Expect expression.",
        "Expect variable name.",
        "Expect ')' after expression.",
    ]
    assert [render_expr(s) for s in stmts] == ["(print 2)", "(print 4)"]


def test_recovery_stops_before_statement_keyword() -> None:
    # No semicolon separates the broken expression from the next print.
    stmts, reporter = parse_statements("1 + + print 5;")

    assert reporter.messages() == ["Expect expression."]
    assert [render_expr(s) for s in stmts] == ["(print 5)"]


def test_failed_declarations_are_omitted_not_none() -> None:
    stmts, _ = parse_statements("var; var; var;")
    assert stmts == []
    assert None not in stmts


def test_invalid_assignment_target_is_not_fatal() -> None:
    stmts, reporter = parse_statements("1 = 2; print 3;")

    assert reporter.messages() == ["Invalid assignment target"]
    assert reporter.diagnostics[0].text == "[line 1] Error at '=': Invalid assignment target"
    # The left-hand side survives as an ordinary expression statement.
    assert len(stmts) == 2
    assert stmts[0] == Expression(Literal(LoxNumber(1.0)))
    assert render_expr(stmts[1]) == "(print 3)"


@pytest.mark.parametrize(
    "source",
    [
        pytest.param("(a) = 1;", id="grouped-target"),
        pytest.param("a + b = 1;", id="binary-target"),
        pytest.param("-a = 1;", id="unary-target"),
    ],
)
def test_invalid_assignment_targets(source: str) -> None:
    stmts, reporter = parse_statements(source)
    assert reporter.messages() == ["Invalid assignment target"]
    assert len(stmts) == 1


@pytest.mark.parametrize(
    "source",
    [
        pytest.param(")", id="lone-close"),
        pytest.param("var", id="lone-var"),
        pytest.param("print", id="lone-print"),
        pytest.param("((((", id="open-parens"),
        pytest.param("= = = ;;;", id="operators"),
        pytest.param("var x = ; var y = ; print", id="repeated"),
    ],
)
def test_parse_always_terminates(source: str) -> None:
    stmts, reporter = parse_statements(source)
    assert reporter.had_error
    assert isinstance(stmts, list)


def test_parse_is_idempotent() -> None:
    source = "var a = 1 + 2 * 3; print -a == (4 - a); a = a / 2;"
    first, _ = parse_statements(source)
    second, _ = parse_statements(source)

    assert first == second


def test_parser_does_not_mutate_tokens() -> None:
    tokens = tokenize("var a = 1; print a;")
    snapshot = list(tokens)
    Parser(tokens, ErrorReporter(stream=io.StringIO())).parse()

    assert tokens == snapshot


def test_parser_requires_eof_sentinel() -> None:
    with pytest.raises(ValueError):
        Parser([Tok(TT.NUMBER, "1", 1.0, 1, 1)])


def test_parse_expression_rejects_trailing_tokens() -> None:
    reporter = ErrorReporter(stream=io.StringIO())
    expr = Parser(tokenize("1 2"), reporter).parse_expression()

    assert expr is None
    assert reporter.messages() == ["Expect end of expression."]


def test_deep_nesting_is_reported_not_raised() -> None:
    depth = 5000
    source = "print " + "(" * depth + "1" + ")" * depth + "; print 2;"
    stmts, reporter = parse_statements(source)

    assert reporter.messages() == ["Expression nests too deeply."]
    assert isinstance(stmts, list)


LONG_CHAIN_TERMS = 3000


def _long_chain() -> str:
    return " + ".join(["1"] * LONG_CHAIN_TERMS)


def test_long_flat_chain_parses_without_error() -> None:
    stmts, reporter = parse_statements(f"print {_long_chain()};")
    assert not reporter.had_error
    assert len(stmts) == 1


def test_long_flat_chain_reports_runtime_error() -> None:
    out, reporter = run_program(f"print 0;\nprint {_long_chain()};\nprint 2;")

    assert out == "0\n"
    assert reporter.diagnostics[-1].text == "Expression nests too deeply.\n[line 2]"
    assert reporter.had_runtime_error


def test_long_flat_chain_in_repl_expression() -> None:
    out = io.StringIO()
    reporter = quiet_reporter()

    assert not repl_eval(_long_chain(), Frame(), reporter, out)
    assert out.getvalue() == ""
    assert reporter.messages("runtime") == ["Expression nests too deeply."]


def test_long_flat_chain_exit_code(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    script = tmp_path / "chain.lox"
    script.write_text(f"print {_long_chain()};\n", encoding="utf-8")

    assert main([str(script)]) == EXIT_SOFTWARE
    assert capsys.readouterr().err == "Expression nests too deeply.\n[line 1]\n"


def test_long_flat_chain_ast_dump_is_reported(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    script = tmp_path / "chain.lox"
    script.write_text(f"print {_long_chain()};\n", encoding="utf-8")

    assert main(["--ast", str(script)]) == EXIT_DATAERR
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == "[line 1] Error at '+': Expression nests too deeply.\n"
