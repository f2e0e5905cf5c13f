"""
Command processing for ripl.

Lines starting with the command prefix are split with shell rules and handed
to the Click command palette. A CommandSession (the persistent
ExecutionContext, the loop's console and its settings) travels as the Click
context object so commands can inspect and edit bindings.
"""

import shlex
import click
from typing import Final, Optional
from rich.console import Console
from rich.markup import escape
from ripl.commands.app import cli
from ripl.config.settings import App, appsettings
from ripl.lib.context import ExecutionContext
from ripl.lib.log import LOG
from ripl.models.dataModel import CommandSession

console: Final[Console] = Console()


def command_process(
    user_input: str,
    context: ExecutionContext,
    output: Optional[Console] = None,
    settings: Optional[App] = None,
) -> bool:
    """Handle a prefixed meta command.

    Args:
        user_input: The command line, including its prefix
        context: The loop's execution context
        output: Console command output and errors are printed to
        settings: Settings supplying the command prefix

    Returns:
        bool: True to continue the loop, False to exit

    Note:
        Handles special commands:
        - /exit: Terminates processing
        - /help: Shows command help
        Other commands are passed to Click CLI
    """
    session: CommandSession = CommandSession(
        context=context,
        output=output or console,
        settings=settings or appsettings,
    )
    prefix: str = session.settings.commandPrefix
    try:
        parts: list[str] = shlex.split(user_input.strip()[len(prefix) :])
    except ValueError as e:
        LOG(f"Error parsing command: {e}")
        session.output.print(f"[bold red]Error parsing input: {escape(str(e))}[/bold red]")
        return True

    if not parts:
        session.output.print("[bold red]Error: No command provided.[/bold red]")
        return True

    command: str = parts[0]
    args: list[str] = parts[1:]

    try:
        if command == "exit":
            return False

        full_command: list[str] = ["--help"] if command == "help" else [command] + args
        cli.main(
            args=full_command,
            prog_name=prefix,
            standalone_mode=False,
            obj=session,
        )
        return True

    except click.exceptions.UsageError as e:
        session.output.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        return True
    except click.exceptions.Abort:
        return True
    except SystemExit:
        return True
    except Exception as e:
        LOG(f"Command processing error: {e}")
        session.output.print(f"[bold red]Unexpected error:[/bold red] {escape(str(e))}")
        return True
