"""
REPL implementation for ripl.

This module provides the Loop Driver, managing:
- The AwaitingInput -> Evaluating -> Printing cycle
- The one persistent ExecutionContext
- Directive handling (exit commands, meta commands)
- Graceful termination on end-of-input or interrupt
"""

from typing import Final, Optional
from rich.console import Console
from ripl.config.settings import App, appsettings
from ripl.lib.command import command_process
from ripl.lib.context import ExecutionContext
from ripl.lib.errors import IncompleteInputError, StreamEnded
from ripl.lib.evaluator import evaluate
from ripl.lib.input import LineSource
from ripl.lib.log import LOG
from ripl.lib.printer import result_print
from ripl.lib.reader import Reader
from ripl.models.dataModel import (
    EvaluationResult,
    FaultKind,
    FragmentKind,
    InputFragment,
    LoopState,
)

console: Final[Console] = Console()


class ReplLoop:
    """The read-evaluate-print state machine.

    Attributes:
        state: Current LoopState
        context: The persistent execution context shared by every evaluation
        reader: Fragment source
        output: Console results and program output go to
        last_result: Result of the most recent evaluation, if any
    """

    def __init__(
        self,
        source: LineSource,
        context: Optional[ExecutionContext] = None,
        output: Optional[Console] = None,
        settings: Optional[App] = None,
    ) -> None:
        self.settings: App = settings or appsettings
        self.state: LoopState = LoopState.AWAITING_INPUT
        self.context: ExecutionContext = context if context is not None else ExecutionContext()
        self.reader: Reader = Reader(source, self.settings)
        self.output: Console = output or console
        self.last_result: Optional[EvaluationResult] = None

    def _transition(self, state: LoopState) -> None:
        LOG(f"{self.state.value} -> {state.value}")
        self.state = state

    def directive_handle(self, text: str) -> None:
        if self.settings.exit_is(text):
            self._transition(LoopState.TERMINATED)
            return
        if not command_process(text, self.context, self.output, self.settings):
            self._transition(LoopState.TERMINATED)

    def step(self) -> LoopState:
        """Run one read-evaluate-print cycle and return the resulting state."""
        if self.state is LoopState.TERMINATED:
            return self.state
        try:
            fragment: InputFragment = self.reader.read()
        except IncompleteInputError as e:
            self.last_result = EvaluationResult(
                error=e.message,
                error_class=e.classification,
                fault=FaultKind.INCOMPLETE,
                success=False,
            )
            result_print(self.last_result, self.output, self.settings.resultMarker)
            self._transition(LoopState.TERMINATED)
            return self.state
        except StreamEnded:
            self._transition(LoopState.TERMINATED)
            return self.state

        if fragment.kind is FragmentKind.DIRECTIVE:
            self.directive_handle(fragment.text.strip())
            return self.state

        self._transition(LoopState.EVALUATING)
        result: EvaluationResult = evaluate(fragment, self.context, self.output)
        self._transition(LoopState.PRINTING)
        result_print(result, self.output, self.settings.resultMarker)
        self.last_result = result
        self._transition(LoopState.AWAITING_INPUT)
        return self.state

    def run(self) -> Optional[EvaluationResult]:
        """Cycle until an exit command or end-of-input.

        Returns:
            The last evaluation result, if any fragment was evaluated
        """
        while self.state is not LoopState.TERMINATED:
            try:
                self.step()
            except KeyboardInterrupt:
                self.output.print("\n[bold yellow]Interrupted.[/bold yellow]")
                self._transition(LoopState.TERMINATED)
        return self.last_result


def repl_do(source: LineSource, banner: bool = False) -> Optional[EvaluationResult]:
    """Main REPL entry point.

    Flow:
    1. Print welcome banner (interactive sessions)
    2. Run the loop until exit condition
    3. Print exit message (interactive sessions)
    """
    if banner:
        console.print(
            """
        [cyan]Welcome to the ripl REPL!
        [green]Type [white]exit[green] or [white]/exit[green] to quit.
        [green]Use [white]/help[green] for command list.
        """
        )
    result: Optional[EvaluationResult] = ReplLoop(source).run()
    if banner:
        console.print("[bold cyan]REPL session terminated[/bold cyan]")
    return result
