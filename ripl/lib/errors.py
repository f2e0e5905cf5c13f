"""
Fault taxonomy for the REPL engine.

- ParseIncomplete: buffer is not yet a full fragment; the Reader keeps reading
- SyntaxFault: fragment is structurally invalid; reported as an Error result
- RuntimeFault: raised while evaluating; reported as an Error result
- StreamEnded: input exhausted; the loop terminates gracefully
- IncompleteInputError: input exhausted in the middle of a fragment
"""

from typing import Optional


class ReplError(Exception):
    """Base class for every fault the engine raises on purpose."""

    classification: str = "StandardError"

    def __init__(self, message: str, classification: Optional[str] = None) -> None:
        super().__init__(message)
        self.message: str = message
        if classification:
            self.classification = classification

    def __str__(self) -> str:
        return self.message


class ParseIncomplete(ReplError):
    classification = "SyntaxError"


class SyntaxFault(ReplError):
    classification = "SyntaxError"


class RuntimeFault(ReplError):
    """Evaluation failure, classified with a Ruby-style error class name."""

    classification = "RuntimeError"


class StreamEnded(ReplError):
    classification = "EOFError"


class IncompleteInputError(StreamEnded):
    classification = "SyntaxError"


def name_error(name: str) -> RuntimeFault:
    return RuntimeFault(
        f"undefined local variable or method '{name}' for main", "NameError"
    )


def no_method_error(name: str, type_name: str) -> RuntimeFault:
    return RuntimeFault(
        f"undefined method '{name}' for an instance of {type_name}", "NoMethodError"
    )


def argument_error(given: int, expected: str) -> RuntimeFault:
    return RuntimeFault(
        f"wrong number of arguments (given {given}, expected {expected})",
        "ArgumentError",
    )
