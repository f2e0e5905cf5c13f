"""
The Reader: accumulate input lines into one complete fragment.

Each line is appended, with its terminator, to a buffer that is handed to the
completeness predicate. A complete (or invalid) buffer is returned to the loop;
an incomplete one keeps the Reader asking for lines behind the continuation
prompt. Exit commands and meta commands on the first line of a fragment are
returned as directives without being parsed.
"""

from typing import Optional
from lark import Tree
from ripl.config.settings import App, appsettings
from ripl.lib.errors import IncompleteInputError, StreamEnded
from ripl.lib.input import LineSource
from ripl.lib.log import LOG
from ripl.lib.parser import fragment_classify
from ripl.models.dataModel import Completeness, FragmentKind, InputFragment, InputResult


class Reader:
    """Pull lines from a line source until they form a fragment.

    Attributes:
        source: Where lines come from (prompt session or stream)
        settings: Prompts, exit commands and the parse policy
    """

    def __init__(self, source: LineSource, settings: Optional[App] = None) -> None:
        self.source: LineSource = source
        self.settings: App = settings or appsettings

    def prompt_get(self, lines: list[str]) -> str:
        return self.settings.continuationPrompt if lines else self.settings.prompt

    def directive_is(self, line: str) -> bool:
        return self.settings.exit_is(line) or self.settings.command_is(line)

    def read(self) -> InputFragment:
        """Read one fragment.

        Returns:
            InputFragment: code (with its parse tree when it parsed) or a directive

        Raises:
            IncompleteInputError: the stream ended in the middle of a fragment
            StreamEnded: the stream ended between fragments
        """
        lines: list[str] = []
        while True:
            result: InputResult = self.source.line_read(self.prompt_get(lines))
            if not result.continue_loop:
                if result.error:
                    LOG(f"Input stopped: {result.error}")
                if lines:
                    raise IncompleteInputError("syntax error, unexpected end-of-input")
                raise StreamEnded("end of input")

            line: str = result.text
            if not lines:
                if not line.strip():
                    continue
                if self.directive_is(line):
                    LOG(f"Directive: {line.strip()}")
                    return InputFragment(lines=[line + "\n"], kind=FragmentKind.DIRECTIVE)

            lines.append(line + "\n")
            verdict: Completeness
            tree: Optional[Tree]
            verdict, tree = fragment_classify("".join(lines), self.settings.strictParse)
            if verdict is Completeness.INCOMPLETE:
                LOG(f"Fragment incomplete after {len(lines)} line(s)")
                continue
            LOG(f"Fragment {verdict.value} after {len(lines)} line(s)")
            return InputFragment(lines=lines, tree=tree)
