"""
Line sources for the Reader.

The Reader asks a line source for one line at a time, passing the prompt to
show. Two sources exist:

- `REPLSession`: interactive terminal input through prompt_toolkit, with an
  in-memory history (nothing is written to disk)
- `StreamLineSource`: any text stream (a pipe, a redirected file, a StringIO
  in tests); prompts are optionally echoed together with the line read

`mode_detect()` decides which one the entry point uses.
"""

import sys
from typing import Final, Optional, Protocol, TextIO
from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from rich.console import Console
from rich.markup import escape
from ripl.lib.log import LOG
from ripl.models.dataModel import InputMode, InputResult

console: Final[Console] = Console()


class LineSource(Protocol):
    def line_read(self, prompt: str) -> InputResult: ...


class REPLSession:
    """Manages interactive input with history support."""

    def __init__(self) -> None:
        self.session: PromptSession = PromptSession(
            history=InMemoryHistory(),
            enable_history_search=True,
        )

    def line_read(self, prompt: str) -> InputResult:
        """Get one line of user input.

        Returns:
            InputResult containing:
                - text: The line, without its terminator
                - continue_loop: False on end-of-input (Ctrl-D) or interrupt
                - error: Set when input stopped abnormally
        """
        try:
            text: str = self.session.prompt(prompt)
            return InputResult(text=text, continue_loop=True)
        except EOFError:
            return InputResult(text="", continue_loop=False)
        except KeyboardInterrupt:
            return InputResult(text="", continue_loop=False, error="Interrupt received")


class StreamLineSource:
    """Read lines from a text stream.

    Attributes:
        stream: Source of lines
        output: Console prompts are echoed to
        echo: Whether to echo the prompt and the line read
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        output: Optional[Console] = None,
        echo: bool = True,
    ) -> None:
        self.stream: TextIO = stream or sys.stdin
        self.output: Console = output or console
        self.echo: bool = echo

    def line_read(self, prompt: str) -> InputResult:
        try:
            raw: str = self.stream.readline()
        except (OSError, ValueError) as e:
            LOG(f"Error reading input stream: {e}")
            return InputResult(text="", continue_loop=False, error=f"Input error: {e}")
        if raw == "":
            return InputResult(text="", continue_loop=False)
        text: str = raw.rstrip("\r\n")
        if self.echo:
            self.output.print(
                f"[dim]{escape(prompt)}[/dim]{escape(text)}", highlight=False, soft_wrap=True
            )
        return InputResult(text=text, continue_loop=True)


def mode_detect(eval_string: str | None = None) -> InputMode:
    """Detect the appropriate input mode.

    Args:
        eval_string: Fragment given on the command line, if any

    Returns:
        InputMode indicating how to handle input

    Note:
        Priority order:
        1. Eval string
        2. Stdin content
        3. REPL mode
    """
    try:
        if eval_string is not None:
            return InputMode(has_stdin=False, eval_string=eval_string, use_repl=False)
        if not sys.stdin.isatty():
            return InputMode(has_stdin=True, eval_string=None, use_repl=False)
        return InputMode(has_stdin=False, eval_string=None, use_repl=True)

    except Exception as e:
        LOG(f"Error detecting input mode: {e}")
        return InputMode(has_stdin=False, eval_string=None, use_repl=True)
