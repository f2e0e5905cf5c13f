"""Tests for meta command dispatch."""

import io
import pytest
from rich.console import Console
from ripl.config.settings import App
from ripl.lib.command import command_process
from ripl.lib.context import ExecutionContext


@pytest.fixture
def context() -> ExecutionContext:
    context = ExecutionContext()
    context.assign("x", 5)
    return context


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


def run(line: str, context: ExecutionContext, output: io.StringIO, settings: App | None = None) -> bool:
    return command_process(line, context, Console(file=output), settings or App())


def test_exit_returns_false(context: ExecutionContext, output: io.StringIO) -> None:
    assert run("/exit", context, output) is False


def test_help_lists_commands(context: ExecutionContext, output: io.StringIO) -> None:
    assert run("/help", context, output) is True
    text = output.getvalue()
    assert "Available Commands" in text
    assert "- methods:" in text
    assert "- var:" in text


def test_var_show_reaches_context(context: ExecutionContext, output: io.StringIO) -> None:
    assert run("/var show x", context, output) is True
    assert output.getvalue().strip() == "x: 5"


def test_var_set_with_quoted_expression(context: ExecutionContext, output: io.StringIO) -> None:
    assert run("/var set y 'x + 1'", context, output) is True
    assert context.lookup("y") == 6


def test_custom_prefix_is_honoured(context: ExecutionContext, output: io.StringIO) -> None:
    settings = App(commandPrefix=":")
    assert run(":var show x", context, output, settings) is True
    assert output.getvalue().strip() == "x: 5"
    assert run(":exit", context, output, settings) is False


def test_help_usage_uses_prefix(context: ExecutionContext, output: io.StringIO) -> None:
    run(":help", context, output, App(commandPrefix=":"))
    assert "Usage: :" in output.getvalue()


def test_unknown_command_reports_error(context: ExecutionContext, output: io.StringIO) -> None:
    assert run("/frobnicate", context, output) is True
    assert "No such command" in output.getvalue()


def test_empty_command(context: ExecutionContext, output: io.StringIO) -> None:
    assert run("/", context, output) is True
    assert "No command provided." in output.getvalue()


def test_unbalanced_quotes(context: ExecutionContext, output: io.StringIO) -> None:
    assert run("/var set y 'oops", context, output) is True
    assert "Error parsing input" in output.getvalue()
