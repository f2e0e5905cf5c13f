"""
dataModel.py

Data models shared by the Reader, Evaluator and Loop Driver. The models
leverage Pydantic for validation and type safety.

Features:
- Input fragments accumulated by the Reader
- Evaluation results (tagged Value / Error variant)
- Loop Driver states
- Input collection and input mode detection
- The session handed to meta commands
"""

from pydantic import BaseModel, Field, ConfigDict
from typing import Any, Optional
from enum import Enum
from rich.console import Console
from ripl.config.settings import App
from ripl.lib.context import ExecutionContext


class FragmentKind(Enum):
    """
    Enum for what a fragment carries.
    """

    CODE = "code"
    DIRECTIVE = "directive"


class FaultKind(Enum):
    """
    Enum for fault classes surfaced as Error results.
    """

    SYNTAX = "syntax"
    RUNTIME = "runtime"
    INCOMPLETE = "incomplete"


class Completeness(Enum):
    """
    Outcome of the completeness predicate.
    """

    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    INVALID = "invalid"


class LoopState(Enum):
    """
    Loop Driver states.
    """

    AWAITING_INPUT = "AwaitingInput"
    EVALUATING = "Evaluating"
    PRINTING = "Printing"
    TERMINATED = "Terminated"


class InputFragment(BaseModel):
    """One accumulated unit of input text.

    Attributes:
        lines: Accumulated lines, each with its line terminator
        kind: Code to evaluate, or a directive (exit / meta command)
        tree: Parse tree when the Reader already parsed the fragment
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    lines: list[str] = Field(default_factory=list)
    kind: FragmentKind = FragmentKind.CODE
    tree: Optional[Any] = Field(default=None, exclude=True)

    @property
    def text(self) -> str:
        return "".join(self.lines)


class EvaluationResult(BaseModel):
    """Result of evaluating one fragment.

    Either a Value (success=True, value holds it) or an Error
    (success=False, error holds the message).

    Attributes:
        value: The language-level value on success
        error: Human-readable message on failure
        error_class: Ruby-style error class name (NameError, TypeError, ...)
        fault: Which fault family produced the error
        success: Whether evaluation succeeded
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    value: Any = None
    error: str | None = None
    error_class: str | None = None
    fault: FaultKind | None = None
    success: bool = True


class InputResult(BaseModel):
    """Result of input collection operation.

    Attributes:
        text: The collected input line, without its terminator
        continue_loop: False once the input stream has ended
        error: Optional error message if input collection failed
    """

    text: str
    continue_loop: bool
    error: str | None = None


class InputMode(BaseModel):
    """Input mode determination.

    Attributes:
        has_stdin: Whether stdin is a pipe or redirected file
        eval_string: Fragment passed with --eval, if any
        use_repl: Whether to use the interactive prompt
    """

    has_stdin: bool = False
    eval_string: str | None = None
    use_repl: bool = True


class CommandSession(BaseModel):
    """What a meta command acts on; passed to Click as the context object.

    Attributes:
        context: The loop's persistent execution context
        output: Console command output is printed to
        settings: Settings of the running loop (command prefix, ...)
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    context: ExecutionContext
    output: Console
    settings: App
