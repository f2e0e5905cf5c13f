"""
Tests for variable management commands.
"""

from typing import Final
import pytest
import click
from click.testing import CliRunner
from ripl.commands import var
from ripl.config.settings import App
from ripl.lib.context import ExecutionContext
from ripl.models.dataModel import CommandSession
from rich.console import Console
import io
import re

ERROR_NOT_FOUND: Final[str] = "Variable '{0}' not found."
SUCCESS_DELETE: Final[str] = "Variable '{0}' deleted successfully."


@pytest.fixture
def runner() -> CliRunner:
    """Provides a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def captured_output() -> io.StringIO:
    """Captures console output."""
    return io.StringIO()


@pytest.fixture
def session(captured_output: io.StringIO) -> CommandSession:
    """A session whose context holds a couple of bindings."""
    context = ExecutionContext()
    context.assign("x", 10)
    context.assign("names", ["ann", "bob"])
    return CommandSession(
        context=context, output=Console(file=captured_output, width=120), settings=App()
    )


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from text."""
    ansi_escape = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")
    return ansi_escape.sub("", text)


def test_var_command_group(runner: CliRunner) -> None:
    """Test the variable command group structure."""
    assert isinstance(var.var, click.Group)
    for cmd in ["set", "show", "showall", "delete"]:
        assert cmd in var.var.commands


@pytest.mark.parametrize(
    "command,args,error_message",
    [
        ("set", [], "Missing argument"),
        ("set", ["name"], "Missing argument"),
        ("show", [], "Missing argument"),
        ("show", ["a", "b"], "Got unexpected extra argument"),
        ("delete", [], "Missing argument"),
    ],
)
def test_command_validation(
    runner: CliRunner, session: CommandSession, command: str, args: list[str], error_message: str
) -> None:
    """Test argument validation for each subcommand."""
    result = runner.invoke(var.var, [command] + args, obj=session)
    assert result.exit_code != 0
    assert error_message in result.output


def test_show_existing(runner: CliRunner, session: CommandSession, captured_output: io.StringIO) -> None:
    result = runner.invoke(var.var, ["show", "names"], obj=session)
    assert result.exit_code == 0
    assert strip_ansi(captured_output.getvalue()).strip() == 'names: ["ann", "bob"]'


def test_show_missing(runner: CliRunner, session: CommandSession, captured_output: io.StringIO) -> None:
    result = runner.invoke(var.var, ["show", "nope"], obj=session)
    assert result.exit_code == 0
    assert ERROR_NOT_FOUND.format("nope") in strip_ansi(captured_output.getvalue())


def test_showall_lists_bindings(
    runner: CliRunner, session: CommandSession, captured_output: io.StringIO
) -> None:
    result = runner.invoke(var.var, ["showall"], obj=session)
    assert result.exit_code == 0
    output = strip_ansi(captured_output.getvalue())
    for text in ["Name", "Class", "Value", "x", "Integer", "10", "Array"]:
        assert text in output


def test_showall_empty(runner: CliRunner, captured_output: io.StringIO) -> None:
    session = CommandSession(
        context=ExecutionContext(), output=Console(file=captured_output), settings=App()
    )
    result = runner.invoke(var.var, ["showall"], obj=session)
    assert result.exit_code == 0
    assert "No variables defined." in strip_ansi(captured_output.getvalue())


def test_set_evaluates_expression(
    runner: CliRunner, session: CommandSession, captured_output: io.StringIO
) -> None:
    result = runner.invoke(var.var, ["set", "y", "x", "*", "3"], obj=session)
    assert result.exit_code == 0
    assert session.context.lookup("y") == 30
    assert "Variable 'y' set to 30" in strip_ansi(captured_output.getvalue())


def test_set_program_output_goes_to_session(
    runner: CliRunner, session: CommandSession, captured_output: io.StringIO
) -> None:
    result = runner.invoke(var.var, ["set", "y", 'puts("side")'], obj=session)
    assert result.exit_code == 0
    assert strip_ansi(captured_output.getvalue()).splitlines()[0] == "side"


def test_set_reports_evaluation_error(
    runner: CliRunner, session: CommandSession, captured_output: io.StringIO
) -> None:
    result = runner.invoke(var.var, ["set", "y", "missing + 1"], obj=session)
    assert result.exit_code == 0
    assert not session.context.contains("y")
    assert "NameError" in strip_ansi(captured_output.getvalue())


@pytest.mark.parametrize("name", ["Const", "1abc", "a-b"])
def test_set_rejects_bad_names(
    runner: CliRunner, session: CommandSession, captured_output: io.StringIO, name: str
) -> None:
    result = runner.invoke(var.var, ["set", name, "1"], obj=session)
    assert result.exit_code == 0
    assert f"'{name}' is not a variable name." in strip_ansi(captured_output.getvalue())


def test_delete(runner: CliRunner, session: CommandSession, captured_output: io.StringIO) -> None:
    result = runner.invoke(var.var, ["delete", "x"], obj=session)
    assert result.exit_code == 0
    assert not session.context.contains("x")
    assert SUCCESS_DELETE.format("x") in strip_ansi(captured_output.getvalue())


def test_delete_missing(runner: CliRunner, session: CommandSession, captured_output: io.StringIO) -> None:
    result = runner.invoke(var.var, ["delete", "zzz"], obj=session)
    assert result.exit_code == 0
    assert ERROR_NOT_FOUND.format("zzz") in strip_ansi(captured_output.getvalue())
