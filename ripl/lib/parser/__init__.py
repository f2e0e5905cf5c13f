"""
Parser package for the ripl expression language.

Provides the LALR parser built from `grammar.lark` and the completeness
predicate used by the Reader.
"""

from .syntax import (
    NewlineFilter,
    completeness_check,
    fragment_classify,
    parse_fragment,
    parser_get,
)

__all__ = [
    "NewlineFilter",
    "completeness_check",
    "fragment_classify",
    "parse_fragment",
    "parser_get",
]
