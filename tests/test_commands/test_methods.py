"""Tests for the method listing command."""

import io
from click.testing import CliRunner
from rich.console import Console
from ripl.commands.methods import methods
from ripl.config.settings import App
from ripl.lib.context import ExecutionContext
from ripl.lib.evaluator import evaluate
from ripl.models.dataModel import CommandSession, InputFragment


def define(context: ExecutionContext, source: str) -> None:
    result = evaluate(InputFragment(lines=[source]), context, Console(file=io.StringIO()))
    assert result.success


def session_make(context: ExecutionContext, output: io.StringIO) -> CommandSession:
    return CommandSession(context=context, output=Console(file=output), settings=App())


def test_no_methods() -> None:
    output = io.StringIO()
    result = CliRunner().invoke(methods, [], obj=session_make(ExecutionContext(), output))
    assert result.exit_code == 0
    assert "No methods defined." in output.getvalue()


def test_lists_defined_methods_sorted() -> None:
    context = ExecutionContext()
    define(context, "def zed(a, b)\n  a + b\nend\n")
    define(context, "def alpha\n  1\nend\n")
    output = io.StringIO()
    result = CliRunner().invoke(methods, [], obj=session_make(context, output))
    assert result.exit_code == 0
    assert output.getvalue().splitlines() == [
        "Defined methods:",
        "- alpha()",
        "- zed(a, b)",
    ]
