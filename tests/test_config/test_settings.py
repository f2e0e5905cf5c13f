# tests/test_config/test_settings.py
import pytest
from pydantic import ValidationError
from ripl.config.settings import App


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "RIPL_BEQUIET",
        "RIPL_PROMPT",
        "RIPL_RESULTMARKER",
        "RIPL_EXITCOMMANDS",
        "RIPL_STRICTPARSE",
        "RIPL_COMMANDPREFIX",
        "RIPL_RECURSIONLIMIT",
    ):
        monkeypatch.delenv(name, raising=False)


def test_app_default_settings():
    app = App()
    assert app.beQuiet is True
    assert app.prompt == ">> "
    assert app.continuationPrompt == ".. "
    assert app.resultMarker == "=> "
    assert app.exitCommands == ["exit", "quit"]
    assert app.commandPrefix == "/"
    assert app.strictParse is True
    assert app.recursionLimit == 4000


def test_app_env_override(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("RIPL_BEQUIET", "false")
    monkeypatch.setenv("RIPL_RESULTMARKER", "-> ")
    monkeypatch.setenv("RIPL_STRICTPARSE", "false")
    monkeypatch.setenv("RIPL_EXITCOMMANDS", '["bye"]')

    app = App()
    assert app.beQuiet is False
    assert app.resultMarker == "-> "
    assert app.strictParse is False
    assert app.exitCommands == ["bye"]


def test_app_invalid_command_prefix():
    with pytest.raises(ValidationError) as exc_info:
        App(commandPrefix="  ")
    assert "commandPrefix cannot be empty" in str(exc_info.value)


def test_app_invalid_recursion_limit():
    with pytest.raises(ValidationError) as exc_info:
        App(recursionLimit=10)
    assert "recursionLimit must be at least 100" in str(exc_info.value)


@pytest.mark.parametrize(
    "line,expected",
    [
        ("exit", True),
        ("  quit  ", True),
        ("/exit", True),
        ("exit()", False),
        ("exiting = 1", False),
    ],
)
def test_exit_is(line: str, expected: bool):
    assert App().exit_is(line) is expected


def test_command_is_uses_prefix():
    app = App(commandPrefix=":")
    assert app.command_is(":var showall")
    assert not app.command_is("/var showall")
