"""Tests for result rendering."""

import io
import pytest
from rich.console import Console
from ripl.lib.printer import result_format, result_print
from ripl.lib.values import Symbol
from ripl.models.dataModel import EvaluationResult


@pytest.mark.parametrize(
    "value,expected",
    [
        (3, "=> 3"),
        (None, "=> nil"),
        ("hi", '=> "hi"'),
        (Symbol("ok"), "=> :ok"),
        ([1, "a", None], '=> [1, "a", nil]'),
        (2.5, "=> 2.5"),
        (True, "=> true"),
    ],
)
def test_value_lines(value, expected: str) -> None:
    assert result_format(EvaluationResult(value=value), "=> ") == expected


def test_error_line() -> None:
    result = EvaluationResult(error="divided by 0", error_class="ZeroDivisionError", success=False)
    assert result_format(result, "=> ") == "=> ZeroDivisionError: divided by 0"


def test_markup_like_values_print_verbatim() -> None:
    output = io.StringIO()
    result_print(EvaluationResult(value="[bold]x[/bold]"), Console(file=output), "=> ")
    assert output.getvalue() == '=> "[bold]x[/bold]"\n'


def test_errors_print_on_one_line() -> None:
    output = io.StringIO()
    result = EvaluationResult(error="x" * 200, error_class="RuntimeError", success=False)
    result_print(result, Console(file=output, width=40), "=> ")
    assert output.getvalue().count("\n") == 1
