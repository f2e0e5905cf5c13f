"""
ripl Main Module.

This module serves as the main entry point for ripl, a minimal
read-eval-print loop for a small Ruby-flavoured expression language.

Features:
- Accumulates multi-line input until it forms a complete fragment
- Evaluates every fragment against one persistent execution context
- Prints each result behind a fixed result marker
- Supports three input modes: direct evaluation, stdin, and interactive REPL
- Handles graceful termination on user interruption

Examples:
    Start interactive REPL:
        $ ripl

    Evaluate one fragment:
        $ ripl --eval "[1, 2, 3].map { |x| x * 2 }"

    Run a script through the loop:
        $ ripl < session.rb
        $ cat session.rb | ripl --lenient

Note:
    Input priority order:
    1. --eval argument (if provided)
    2. stdin (if available)
    3. interactive REPL (default)
"""

from argparse import Namespace, ArgumentParser, ArgumentDefaultsHelpFormatter
import signal
import sys
from types import FrameType
from typing import Final, Optional
from rich.console import Console
from ripl.config.settings import appsettings
from ripl.lib.context import ExecutionContext
from ripl.lib.evaluator import evaluate
from ripl.lib.input import REPLSession, StreamLineSource, mode_detect
from ripl.lib.log import LOG
from ripl.lib.printer import result_print
from ripl.lib.repl import repl_do
from ripl.models.dataModel import EvaluationResult, InputFragment, InputMode

__version__: Final[str] = "0.1.0"

DISPLAY_TITLE: Final[
    str
] = """
█▀█ █ █▀█ █
█▀▄ █ █▀▀ █▄▄
"""

console: Final[Console] = Console()

parser: Final[ArgumentParser] = ArgumentParser(
    description="A minimal read-eval-print loop for a Ruby-flavoured expression language.",
    formatter_class=ArgumentDefaultsHelpFormatter,
)
parser.add_argument("-e", "--eval", type=str, help="Evaluate one fragment and exit")
parser.add_argument(
    "--lenient",
    action="store_true",
    help="Treat every parse failure as incomplete input",
)
parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
parser.add_argument(
    "-V", "--version", action="version", version=f"%(prog)s {__version__}"
)


def settings_apply(options: Namespace) -> None:
    """Fold command line options into the application settings."""
    if options.verbose:
        appsettings.beQuiet = False
    if options.lenient:
        appsettings.strictParse = False
    if sys.getrecursionlimit() < appsettings.recursionLimit:
        sys.setrecursionlimit(appsettings.recursionLimit)
    LOG(f"Settings: strictParse={appsettings.strictParse}")


def eval_do(text: str) -> int:
    """Evaluate a single fragment and print its result.

    Returns:
        int: Exit status, 1 if the fragment produced an error
    """
    fragment: InputFragment = InputFragment(lines=[text if text.endswith("\n") else text + "\n"])
    result: EvaluationResult = evaluate(fragment, ExecutionContext())
    result_print(result)
    return 0 if result.success else 1


def signal_handle(sig: int, frame: Optional[FrameType]) -> None:
    """Signal handler for graceful interruption.

    Args:
        sig: Signal number
        frame: Current stack frame
    """
    console.print("\n[bold red]Interrupt received.[/bold red] [bold cyan]Exiting.[/bold cyan]")
    sys.exit(0)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Command line arguments, defaults to sys.argv[1:]

    Returns:
        int: Process exit status
    """
    options: Namespace = parser.parse_args(argv)
    settings_apply(options)

    mode: InputMode = mode_detect(options.eval)
    try:
        if mode.eval_string is not None:
            return eval_do(mode.eval_string)

        if mode.has_stdin:
            signal.signal(signal.SIGINT, signal_handle)
            repl_do(StreamLineSource(sys.stdin, echo=appsettings.promptEcho))
        else:
            console.print(DISPLAY_TITLE)
            repl_do(REPLSession(), banner=True)
    except KeyboardInterrupt:
        console.print("\n[bold cyan]Program interrupted by user. Exiting.[/bold cyan]")
    return 0

