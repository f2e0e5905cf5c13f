"""
Method listing command.

- /methods: List the methods defined with `def` on the current subject.
"""

from rich.markup import escape
import click
from ripl.commands.base import RichCommand, rich_help
from ripl.models.dataModel import CommandSession


@click.command(
    cls=RichCommand,
    short_help="List defined methods",
    help=rich_help(
        command="methods",
        description="List the methods defined in this session.",
        usage="/methods",
        args={},
    ),
)
@click.pass_obj
def methods(session: CommandSession) -> None:
    defined = session.context.subject.methods
    if not defined:
        session.output.print("[bold yellow]No methods defined.[/bold yellow]")
        return
    session.output.print("[bold green]Defined methods:[/bold green]")
    for name, function in sorted(defined.items()):
        session.output.print(
            f"- [cyan]{escape(name)}[/cyan]({escape(', '.join(function.params))})",
            highlight=False,
        )
