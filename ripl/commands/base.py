"""
Base classes for Rich-enhanced Click commands and groups.

This module defines:
- `RichGroup`: A Click group whose help lists its subcommands with Rich markup.
- `RichCommand`: A Click command whose help is rendered inside a Rich panel.
- `rich_help`: Builder for the help text of individual commands.

Meta commands are typed at the REPL prompt, so usage lines are shown with the
command prefix (`/var show NAME`) rather than a program name.
"""

from typing import Optional
from rich.console import Console
from rich.panel import Panel
import click
from ripl.config.settings import appsettings
from ripl.lib.log import LOG
from ripl.models.dataModel import CommandSession

console: Console = Console()


def session_get(ctx: click.Context) -> Optional[CommandSession]:
    return ctx.find_object(CommandSession)


def output_get(ctx: click.Context) -> Console:
    """Console of the invoking session, or the module console outside a session."""
    session: Optional[CommandSession] = session_get(ctx)
    return session.output if session is not None else console


def rich_help(command: str, description: str, usage: str, args: dict) -> str:
    """
    Generate Rich-enhanced help text for commands.

    :param command: The command name.
    :param description: Description of the command.
    :param usage: Usage syntax for the command.
    :param args: Dictionary of arguments and their descriptions.
    :return: Formatted Rich help string.
    """
    help_text = f"[bold cyan]{description}[/bold cyan]\n\n"
    help_text += f"[bold yellow]Usage:[/bold yellow]\n    [green]{usage}[/green]\n"
    if args:
        help_text += "\n[bold yellow]Arguments:[/bold yellow]\n"
        for arg, desc in args.items():
            help_text += f"    [green]{arg}[/green]: {desc}\n"
    return help_text


class RichGroup(click.Group):
    """
    A Click Group that renders its help message with Rich.

    Methods:
        format_help(ctx, formatter): Renders the group-level help message.
    """

    def format_help(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        output: Console = output_get(ctx)
        session: Optional[CommandSession] = session_get(ctx)
        try:
            prefix: str = (session.settings if session else appsettings).commandPrefix
            info_name: str = (ctx.info_name or "").lstrip(prefix)
            path: str = f"{prefix}{info_name} " if info_name else prefix
            output.print(
                f"[bold yellow]Usage:[/bold yellow] [cyan]{path}[/cyan]"
                f"[magenta]COMMAND [ARGS]...[/magenta]\n"
            )

            if self.help:
                output.print(f"[bold cyan]{self.help.strip()}[/bold cyan]\n")

            if self.commands:
                output.print("[bold green]Available Commands:[/bold green]")
                for name, command in sorted(self.commands.items()):
                    output.print(
                        f"- [cyan]{name}[/cyan]: [white]{command.short_help or 'No description available.'}[/white]"
                    )
                output.print()
        except Exception as e:
            LOG(f"Help rendering error: {e}")
            output.print(f"[bold red]Help rendering error:[/bold red] {e}")


class RichCommand(click.Command):
    """
    A Click Command that renders its help text inside a Rich panel.
    """

    def format_help(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        output: Console = output_get(ctx)
        try:
            help_text = self.help or "No help text available."
            panel_width = max(len(line) for line in help_text.splitlines()) + 10
            panel_width = min(panel_width, 80)
            panel = Panel(help_text, expand=False, width=panel_width, border_style="cyan")
            output.print(panel)
        except Exception as e:
            LOG(f"Help rendering error: {e}")
            output.print(f"[bold red]Help rendering error:[/bold red] {e}")
