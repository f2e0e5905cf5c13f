"""
Defines the meta command palette of the ripl REPL.

This module provides:
- The root `cli` command group, dispatched for prefixed input lines.
- Registration of subcommands from other modules.

Usage:
Import `cli` and run it with the session's ExecutionContext as `obj`.
"""

import click
from ripl.commands.base import RichGroup
from ripl.commands.methods import methods
from ripl.commands.var import var


@click.group(
    cls=RichGroup,
    help="""
    ripl Command Palette

    Inspect the session with subcommands. Type exit or /exit to quit.
    """,
)
def cli() -> None:
    """
    The root Click command group for ripl.
    """
    pass


cli: click.Group = cli

cli.add_command(var)
cli.add_command(methods)
