"""Tests for the ripl entry point."""

import io
from unittest.mock import patch
import pytest
from rich.console import Console
from ripl import ripl
from ripl.config.settings import appsettings
from ripl.models.dataModel import InputMode


@pytest.fixture
def captured_output():
    output = io.StringIO()
    with patch("ripl.lib.printer.console", Console(file=output)):
        yield output


@pytest.fixture(autouse=True)
def settings_restore():
    with patch.object(appsettings, "beQuiet", True), patch.object(appsettings, "strictParse", True):
        yield


def test_eval_prints_result(captured_output: io.StringIO) -> None:
    assert ripl.main(["-e", "[1, 2, 3].map { |x| x * 2 }"]) == 0
    assert captured_output.getvalue().strip() == "=> [2, 4, 6]"


def test_eval_error_sets_exit_status(captured_output: io.StringIO) -> None:
    assert ripl.main(["--eval", "1 / 0"]) == 1
    assert captured_output.getvalue().strip() == "=> ZeroDivisionError: divided by 0"


def test_eval_incomplete_fragment(captured_output: io.StringIO) -> None:
    assert ripl.main(["-e", "def f"]) == 1
    assert "unexpected end-of-input" in captured_output.getvalue()


def test_version_flag_exits() -> None:
    with pytest.raises(SystemExit) as excinfo:
        ripl.main(["-V"])
    assert excinfo.value.code == 0


def test_flags_update_settings(captured_output: io.StringIO) -> None:
    ripl.main(["--lenient", "--verbose", "-e", "1"])
    assert appsettings.strictParse is False
    assert appsettings.beQuiet is False


def test_stdin_mode_runs_stream_loop() -> None:
    with (
        patch("ripl.ripl.mode_detect", return_value=InputMode(has_stdin=True, use_repl=False)),
        patch("ripl.ripl.repl_do") as mock_repl,
        patch("ripl.ripl.signal.signal"),
    ):
        assert ripl.main([]) == 0
    source = mock_repl.call_args.args[0]
    assert type(source).__name__ == "StreamLineSource"
    assert mock_repl.call_args.kwargs == {}


def test_interactive_mode_shows_banner() -> None:
    with (
        patch("ripl.ripl.mode_detect", return_value=InputMode()),
        patch("ripl.ripl.REPLSession") as mock_session,
        patch("ripl.ripl.repl_do") as mock_repl,
        patch("ripl.ripl.console", Console(file=io.StringIO())),
    ):
        assert ripl.main([]) == 0
    mock_repl.assert_called_once_with(mock_session.return_value, banner=True)


def test_keyboard_interrupt_is_handled() -> None:
    output = io.StringIO()
    with (
        patch("ripl.ripl.mode_detect", return_value=InputMode()),
        patch("ripl.ripl.REPLSession"),
        patch("ripl.ripl.repl_do", side_effect=KeyboardInterrupt),
        patch("ripl.ripl.console", Console(file=output)),
    ):
        assert ripl.main([]) == 0
    assert "Program interrupted by user" in output.getvalue()
