"""
settings.py

Application configuration for the ripl REPL engine.

Features:
- Centralized configuration using Pydantic settings
- Every field can be overridden by an environment variable with the RIPL_
  prefix (e.g. RIPL_RESULTMARKER="-> ")

Usage:
Import appsettings for configuration values.
"""

from typing import Final
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class App(BaseSettings):
    """
    Application settings model.

    Attributes:
        beQuiet: Suppress debug logging output
        prompt: Primary prompt shown when a new fragment starts
        continuationPrompt: Continuation indicator shown while a fragment is incomplete
        resultMarker: Fixed prefix of every result line
        exitCommands: Bare input lines that terminate the loop
        commandPrefix: Prefix that routes a line to the meta command palette
        strictParse: Distinguish truncated input from genuine syntax errors.
            When False every parse failure is treated as incomplete input
        promptEcho: Echo prompts when reading from a non-interactive stream
        recursionLimit: Lower bound for the interpreter recursion limit
    """

    beQuiet: bool = True
    prompt: str = ">> "
    continuationPrompt: str = ".. "
    resultMarker: str = "=> "
    exitCommands: list[str] = ["exit", "quit"]
    commandPrefix: str = "/"
    strictParse: bool = True
    promptEcho: bool = True
    recursionLimit: int = 4000

    model_config = SettingsConfigDict(
        env_prefix="RIPL_",
        case_sensitive=False,
        extra="allow",
    )

    @field_validator("commandPrefix")
    @classmethod
    def commandPrefix_check(cls, value: str) -> str:
        if not value or value.isspace():
            raise ValueError("commandPrefix cannot be empty")
        return value

    @field_validator("recursionLimit")
    @classmethod
    def recursionLimit_check(cls, value: int) -> int:
        if value < 100:
            raise ValueError("recursionLimit must be at least 100")
        return value

    def exit_is(self, line: str) -> bool:
        """True if the stripped line is an exit command."""
        stripped: str = line.strip()
        return stripped in self.exitCommands or stripped == f"{self.commandPrefix}exit"

    def command_is(self, line: str) -> bool:
        """True if the line is routed to the meta command palette."""
        return line.lstrip().startswith(self.commandPrefix)


# Create the application settings instance
appsettings: Final[App] = App()
