"""Test class CalculatorRepl."""
import io

import pytest

from infix_calculator.common.environment import Environment
from infix_calculator.repl.session import CalculatorRepl


def run_session(text: str, **kwargs) -> tuple:
    repl = CalculatorRepl(color=False, prompt="", **kwargs)
    stdout = io.StringIO()
    status = repl.run(io.StringIO(text), stdout)
    return status, stdout.getvalue().splitlines(), repl


def test_run_prints_one_value_per_line():
    status, lines, _ = run_session("1+2\n  10-3-2  \n~0\n")
    assert status == 0
    assert lines[:3] == ["3", "5", "-1"]


def test_run_keeps_variables_across_lines():
    _, lines, repl = run_session("a=5\na+1\nb=a*a\n")
    assert lines[:3] == ["5", "6", "25"]
    assert repl.env.snapshot() == {"a": 5, "b": 25}


def test_run_reports_errors_and_continues():
    _, lines, repl = run_session("5/0\n(1+2\n4\n")
    assert lines[0] == "error: Division by zero"
    assert lines[1].startswith("error: ")
    assert lines[2] == "4"
    assert repl.line_number == 3


def test_run_skips_blank_lines():
    _, lines, repl = run_session("\n   \n7\n")
    assert lines[0] == "7"
    assert repl.line_number == 1


def test_run_without_trailing_newline():
    status, lines, _ = run_session("2*3")
    assert status == 0
    assert lines[0] == "6"


def test_run_empty_input():
    status, lines, _ = run_session("")
    assert status == 0
    assert not any(lines)


def test_colored_prompt():
    repl = CalculatorRepl()
    stdout = io.StringIO()
    repl.run(io.StringIO("1\n"), stdout)
    assert stdout.getvalue().startswith("\033[35m>>> \033[0m")


def test_evaluate_line_uses_given_environment():
    env = Environment(bindings={"x": 41})
    repl = CalculatorRepl(env=env)
    outcome = repl.evaluate_line("x = x + 1")
    assert outcome.ok and outcome.result == 42
    assert outcome.line == 1
    assert env.get("x") == 42


def test_evaluate_line_token_bound():
    repl = CalculatorRepl(max_tokens=2)
    outcome = repl.evaluate_line("1+2")
    assert not outcome.ok
    assert "Too many tokens" in outcome.error


@pytest.mark.parametrize("max_tokens", [0, -1])
def test_invalid_token_bound(max_tokens):
    with pytest.raises(ValueError):
        CalculatorRepl(max_tokens=max_tokens)


def test_run_survives_very_long_literal():
    """A literal longer than Python's int string limit does not end the session."""
    status, lines, repl = run_session("1" * 5000 + "\n2+2\n")
    assert status == 0
    assert lines[1] == "4"
    assert repl.line_number == 2
