"""
Parsing and the completeness predicate.

The grammar lives next to this module in `grammar.lark` and is compiled once
into an LALR parser. Two entry points are exposed:

- `parse_fragment(text)` returns the parse tree or raises `ParseIncomplete`
  (the text was truncated) / `SyntaxFault` (the text can never parse)
- `completeness_check(text)` answers the Reader's question without raising

Truncation is recognised from the shape of the lark error: the parser ran
into the `$END` token, or the lexer stopped on an unterminated string literal.
Anything else is a genuine syntax error.
"""

from functools import lru_cache
from typing import Iterator, Optional
from lark import Lark, Token, Tree
from lark.exceptions import (
    UnexpectedCharacters,
    UnexpectedEOF,
    UnexpectedInput,
    UnexpectedToken,
)
from lark.lark import PostLex
from ripl.lib.errors import ParseIncomplete, SyntaxFault
from ripl.lib.log import LOG
from ripl.models.dataModel import Completeness

QUOTES: str = "\"'"


class NewlineFilter(PostLex):
    """Drop newlines that cannot end a statement.

    A newline is swallowed when the previous token expects an operand
    (binary operators, `=`, `,`, opening brackets), while inside `()`/`[]`,
    or when the next token closes a bracket or continues a method chain.

    `if` and `unless` directly after a complete operand are retyped as
    statement modifiers, so `break if done` never opens an `if` expression.
    """

    CONTINUATION_TYPES: frozenset[str] = frozenset(
        {
            "PLUS", "MINUS", "STAR", "SLASH", "PERCENT", "POW", "SHL",
            "EQ", "NE", "LT", "LE", "GT", "GE", "AND_OP", "OR_OP",
            "AND", "OR", "NOT", "BANG", "ASSIGN", "AUG_ASSIGN", "ARROW",
            "RANGE_OP", "COMMA", "DOT", "LPAR", "LSQB", "LBRACE",
        }
    )
    OPERAND_END_TYPES: frozenset[str] = frozenset(
        {
            "NAME", "PRED_NAME", "INT", "FLOAT", "STRING", "SYMBOL",
            "RPAR", "RSQB", "RBRACE", "END", "TRUE", "FALSE", "NIL", "SELF",
            "RETURN", "BREAK", "NEXT",
        }
    )
    MODIFIERS: dict[str, str] = {"IF": "_IF_MOD", "UNLESS": "_UNLESS_MOD"}
    LEADING_TYPES: frozenset[str] = frozenset({"RPAR", "RSQB", "RBRACE", "DOT"})
    OPENERS: frozenset[str] = frozenset({"LPAR", "LSQB"})
    CLOSERS: frozenset[str] = frozenset({"RPAR", "RSQB"})

    always_accept = ("_NL",)

    def process(self, stream: Iterator[Token]) -> Iterator[Token]:
        depth: int = 0
        previous: str | None = None
        pending: Token | None = None
        for token in stream:
            if token.type == "_NL":
                if depth > 0 or previous in self.CONTINUATION_TYPES:
                    continue
                pending = pending or token
                continue
            if pending is not None:
                if token.type not in self.LEADING_TYPES:
                    yield pending
                    previous = pending.type
                pending = None
            if token.type in self.MODIFIERS and previous in self.OPERAND_END_TYPES:
                token = Token.new_borrow_pos(self.MODIFIERS[token.type], token.value, token)
            if token.type in self.OPENERS:
                depth += 1
            elif token.type in self.CLOSERS and depth > 0:
                depth -= 1
            previous = token.type
            yield token
        if pending is not None:
            yield pending


@lru_cache(maxsize=1)
def parser_get() -> Lark:
    """Compile the grammar once per process."""
    LOG("Compiling expression grammar")
    return Lark.open(
        "grammar.lark",
        rel_to=__file__,
        parser="lalr",
        lexer="basic",
        postlex=NewlineFilter(),
        maybe_placeholders=False,
    )


def truncation_is(error: UnexpectedInput, text: str) -> bool:
    """True if the parse failed only because the input stopped too early."""
    if isinstance(error, UnexpectedEOF):
        return True
    if isinstance(error, UnexpectedToken):
        return error.token.type == "$END"
    if isinstance(error, UnexpectedCharacters):
        return 0 <= error.pos_in_stream < len(text) and text[error.pos_in_stream] in QUOTES
    return False


def error_describe(error: UnexpectedInput, text: str) -> str:
    """Render a lark error the way Ruby reports syntax errors."""
    if isinstance(error, UnexpectedToken):
        if error.token.type == "$END":
            return "syntax error, unexpected end-of-input"
        if error.token.type == "_NL":
            found: str = "end-of-line"
        else:
            found = f"'{error.token.value}'"
        return f"syntax error, unexpected {found} (line {error.line}, column {error.column})"
    if isinstance(error, UnexpectedCharacters):
        if text[error.pos_in_stream] in QUOTES:
            return "unterminated string meets end of file"
        return (
            f"syntax error, unexpected character '{error.char}' "
            f"(line {error.line}, column {error.column})"
        )
    return "syntax error, unexpected end-of-input"


def parse_fragment(text: str) -> Tree:
    """Parse a fragment into a tree.

    Raises:
        ParseIncomplete: the text is a truncated fragment
        SyntaxFault: the text is structurally invalid
    """
    try:
        return parser_get().parse(text)
    except UnexpectedInput as e:
        message: str = error_describe(e, text)
        if truncation_is(e, text):
            raise ParseIncomplete(message) from e
        raise SyntaxFault(message) from e


def fragment_classify(text: str, strict: bool = True) -> tuple[Completeness, Optional[Tree]]:
    """Classify a text buffer and keep the tree when it parsed.

    Args:
        text: Accumulated buffer
        strict: When False, every parse failure counts as incomplete

    Returns:
        Completeness verdict and the parse tree (None unless complete)
    """
    try:
        tree: Tree = parse_fragment(text)
    except ParseIncomplete:
        return Completeness.INCOMPLETE, None
    except SyntaxFault as e:
        if not strict:
            return Completeness.INCOMPLETE, None
        LOG(f"Syntax error in buffer: {e}")
        return Completeness.INVALID, None
    return Completeness.COMPLETE, tree


def completeness_check(text: str, strict: bool = True) -> Completeness:
    """Classify a text buffer as a complete, truncated or invalid fragment."""
    verdict, _ = fragment_classify(text, strict)
    return verdict
