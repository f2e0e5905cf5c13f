"""
Printer: render an EvaluationResult as one result line.

Values print as `<marker><inspect(value)>`, errors as
`<marker><ErrorClass>: <message>`. Result text is escaped before it reaches
Rich so values that look like markup print verbatim.
"""

from typing import Final, Optional
from rich.console import Console
from rich.markup import escape
from ripl.config.settings import appsettings
from ripl.lib.values import inspect
from ripl.models.dataModel import EvaluationResult

console: Final[Console] = Console()


def result_format(result: EvaluationResult, marker: Optional[str] = None) -> str:
    marker = appsettings.resultMarker if marker is None else marker
    if result.success:
        return f"{marker}{inspect(result.value)}"
    return f"{marker}{result.error_class}: {result.error}"


def result_print(
    result: EvaluationResult,
    output: Optional[Console] = None,
    marker: Optional[str] = None,
) -> None:
    """Print a result line; errors are shown in red."""
    text: str = escape(result_format(result, marker))
    if not result.success:
        text = f"[bold red]{text}[/bold red]"
    (output or console).print(text, highlight=False, emoji=False, soft_wrap=True)
