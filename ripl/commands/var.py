"""
Variable Management Commands

This module provides meta commands for inspecting and editing the bindings
of the persistent execution context. The CommandSession arrives as the Click
context object; output goes to the session console.

Commands:
- /var set <name> <expression>: Evaluate an expression and bind the result.
- /var show <name>: Show a binding's value.
- /var showall: List all bindings.
- /var delete <name>: Remove a binding.
"""

from rich.markup import escape
from rich.table import Table
import click
from ripl.commands.base import RichGroup, RichCommand, rich_help
from ripl.lib.evaluator import evaluate
from ripl.lib.log import LOG
from ripl.lib.values import class_name, inspect
from ripl.models.dataModel import CommandSession, EvaluationResult, InputFragment


@click.group(
    cls=RichGroup,
    short_help="Inspect and edit variables",
    help="""
    Variable Management

    Commands to inspect and edit the bindings of the session.
    """,
)
def var() -> None:
    """
    Root group for variable-related commands.
    """
    pass


var: click.Group = var


def name_check(session: CommandSession, name: str) -> bool:
    if name.isidentifier() and not name[0].isupper():
        return True
    session.output.print(f"[bold red]Error: '{escape(name)}' is not a variable name.[/bold red]")
    return False


@var.command(
    cls=RichCommand,
    help=rich_help(
        command="set",
        description="Evaluate an expression and bind its value to a variable.",
        usage="/var set <name> <expression>",
        args={
            "<name>": "The name of the variable to set.",
            "<expression>": "Expression whose value is bound to the name.",
        },
    ),
)
@click.argument("name", type=str)
@click.argument("expression", nargs=-1, required=True)
@click.pass_obj
def set(session: CommandSession, name: str, expression: tuple[str, ...]) -> None:
    """
    Binds the value of an expression in the session context.

    :param session: The invoking session.
    :param name: The name of the variable.
    :param expression: Expression text, possibly split over several words.
    """
    if not name_check(session, name):
        return
    source: str = " ".join(expression)
    result: EvaluationResult = evaluate(
        InputFragment(lines=[source + "\n"]), session.context, session.output
    )
    if not result.success:
        session.output.print(
            f"[bold red]Error: {result.error_class}: {escape(result.error or '')}[/bold red]"
        )
        return
    session.context.assign(name, result.value)
    LOG(f"Variable '{name}' set from meta command")
    session.output.print(
        f"[bold green]Variable '{name}' set to[/bold green] {escape(inspect(result.value))}",
        highlight=False,
    )


@var.command(
    cls=RichCommand,
    help=rich_help(
        command="show",
        description="Show the value of a variable.",
        usage="/var show <name>",
        args={
            "<name>": "The name of the variable to show.",
        },
    ),
)
@click.argument("name", type=str)
@click.pass_obj
def show(session: CommandSession, name: str) -> None:
    """
    Show a variable's value from the execution context.

    :param session: The invoking session.
    :param name: The name of the variable.
    """
    if not session.context.contains(name):
        session.output.print(f"[bold red]Variable '{escape(name)}' not found.[/bold red]")
        return
    session.output.print(
        f"[bold cyan]{escape(name)}:[/bold cyan] {escape(inspect(session.context.lookup(name)))}",
        highlight=False,
    )


@var.command(
    cls=RichCommand,
    help=rich_help(
        command="showall",
        description="Show a table of all variables.",
        usage="/var showall",
        args={},
    ),
)
@click.pass_obj
def showall(session: CommandSession) -> None:
    """
    Displays all bindings of the execution context.
    """
    names: list[str] = session.context.local_names()
    if not names:
        session.output.print("[bold yellow]No variables defined.[/bold yellow]")
        return
    table: Table = Table(title="Variables", show_lines=False)
    table.add_column("Name", style="cyan")
    table.add_column("Class", style="magenta")
    table.add_column("Value", style="white")
    for name in names:
        value = session.context.lookup(name)
        table.add_row(escape(name), class_name(value), escape(inspect(value)))
    session.output.print(table)


@var.command(
    cls=RichCommand,
    help=rich_help(
        command="delete",
        description="Delete a variable.",
        usage="/var delete <name>",
        args={
            "<name>": "The name of the variable to delete.",
        },
    ),
)
@click.argument("name", type=str)
@click.pass_obj
def delete(session: CommandSession, name: str) -> None:
    """
    Removes a variable from the execution context.

    :param session: The invoking session.
    :param name: The name of the variable to delete.
    """
    if session.context.unbind(name):
        session.output.print(f"[bold green]Variable '{escape(name)}' deleted successfully.[/bold green]")
    else:
        session.output.print(f"[bold red]Variable '{escape(name)}' not found.[/bold red]")
