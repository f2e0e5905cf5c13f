"""
Runtime values of the expression language and their textual rendering.

Language values map onto Python objects where the semantics line up:
Integer -> int, Float -> float, Rational -> Fraction, String -> str,
true/false -> bool, nil -> None, Array -> list, Hash -> dict keyed by
HashKey. The remaining kinds are small classes defined here.
"""

import math
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any, Callable, Iterator, Optional
from ripl.lib.errors import RuntimeFault


@dataclass(frozen=True)
class Symbol:
    name: str


@dataclass(frozen=True)
class Range:
    """Integer range; `exclusive` drops the last element (a...b)."""

    first: Any
    last: Any
    exclusive: bool = False

    def span(self) -> range:
        """The integers the range covers, without materialising them."""
        if not isinstance(self.first, int) or not isinstance(self.last, int):
            raise RuntimeFault(
                f"can't iterate from {class_name(self.first)}", "TypeError"
            )
        stop: int = self.last if self.exclusive else self.last + 1
        return range(self.first, stop)

    def __iter__(self) -> Iterator[int]:
        return iter(self.span())

    def __contains__(self, item: Any) -> bool:
        if not number_is(item):
            return False
        if self.exclusive:
            return self.first <= item < self.last
        return self.first <= item <= self.last


@dataclass
class Function:
    """A method defined with `def`."""

    name: str
    params: list[str]
    body: Any


@dataclass
class MainObject:
    """The implicit subject of top-level code: Ruby's `main`."""

    methods: dict[str, Function] = field(default_factory=dict)


@dataclass(frozen=True)
class ClassRef:
    """A built-in class referenced by its constant name (Integer, Array, ...)."""

    name: str


# A block handed to a built-in method, already bound to its scope.
Block = Callable[..., Any]


@dataclass(frozen=True, eq=False)
class HashKey:
    """A Hash key; two keys match when they are eql? (same class, equal value)."""

    value: Any

    def __eq__(self, other: object) -> bool:
        return isinstance(other, HashKey) and eql(self.value, other.value)

    def __hash__(self) -> int:
        return hash(key_signature(self.value))


def key_signature(value: Any) -> Any:
    if isinstance(value, list):
        return ("Array", tuple(key_signature(item) for item in value))
    if isinstance(value, dict):
        return ("Hash", frozenset((key, key_signature(item)) for key, item in value.items()))
    if isinstance(value, (Function, MainObject)):
        return (class_name(value), id(value))
    return (class_name(value), value)


def hash_key(value: Any) -> HashKey:
    """Wrap a value for use as a Hash key; arrays and hashes are keyed by content."""
    return HashKey(value)


def number_is(value: Any) -> bool:
    return isinstance(value, (int, float, Fraction)) and not isinstance(value, bool)


def truthy(value: Any) -> bool:
    """Only nil and false are false."""
    return value is not None and value is not False


def equal(left: Any, right: Any) -> bool:
    if isinstance(left, bool) or isinstance(right, bool):
        return left is right
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(
            equal(a, b) for a, b in zip(left, right)
        )
    if isinstance(left, dict) and isinstance(right, dict):
        return left.keys() == right.keys() and all(
            equal(value, right[key]) for key, value in left.items()
        )
    return left == right


def eql(left: Any, right: Any) -> bool:
    """Ruby's eql?: like ==, but 1 and 1.0 differ."""
    if class_name(left) != class_name(right):
        return False
    if isinstance(left, list):
        return len(left) == len(right) and all(eql(a, b) for a, b in zip(left, right))
    if isinstance(left, dict):
        return left.keys() == right.keys() and all(
            eql(value, right[key]) for key, value in left.items()
        )
    return left == right


def class_name(value: Any) -> str:
    """Ruby class name of a value, used in messages and by `.class`."""
    if value is None:
        return "NilClass"
    if value is True:
        return "TrueClass"
    if value is False:
        return "FalseClass"
    names: dict[type, str] = {
        int: "Integer",
        float: "Float",
        Fraction: "Rational",
        str: "String",
        list: "Array",
        dict: "Hash",
        Symbol: "Symbol",
        Range: "Range",
        Function: "Method",
        MainObject: "Object",
        ClassRef: "Class",
    }
    return names.get(type(value), type(value).__name__)


STRING_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\x1b": "\\e",
    "\0": "\\0",
}


def string_inspect(text: str) -> str:
    body: str = "".join(STRING_ESCAPES.get(ch, ch) for ch in text)
    body = body.replace("#{", "\\#{")
    return f'"{body}"'


def float_render(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    text: str = repr(value)
    if "e" in text:
        mantissa, exponent = text.split("e")
        if "." not in mantissa:
            mantissa += ".0"
        sign: str = "-" if exponent.startswith("-") else "+"
        return f"{mantissa}e{sign}{exponent.lstrip('+-').zfill(2)}"
    return text


def inspect(value: Any, seen: Optional[set[int]] = None) -> str:
    """Developer-facing rendering, as printed after the result marker."""
    seen = seen or set()
    if value is None:
        return "nil"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, float):
        return float_render(value)
    if isinstance(value, Fraction):
        return f"({value.numerator}/{value.denominator})"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return string_inspect(value)
    if isinstance(value, Symbol):
        return f":{value.name}"
    if isinstance(value, Range):
        dots: str = "..." if value.exclusive else ".."
        return f"{inspect(value.first)}{dots}{inspect(value.last)}"
    if isinstance(value, (list, dict)):
        if id(value) in seen:
            return "[...]" if isinstance(value, list) else "{...}"
        seen = seen | {id(value)}
        if isinstance(value, list):
            return "[" + ", ".join(inspect(item, seen) for item in value) + "]"
        pairs: str = ", ".join(
            f"{inspect(k.value, seen)} => {inspect(v, seen)}" for k, v in value.items()
        )
        return "{" + pairs + "}"
    if isinstance(value, MainObject):
        return "main"
    if isinstance(value, ClassRef):
        return value.name
    if isinstance(value, Function):
        return f"#<Method: main.{value.name}({', '.join(value.params)})>"
    return repr(value)


def to_s(value: Any) -> str:
    """User-facing rendering, as used by puts and interpolation."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, Symbol):
        return value.name
    if isinstance(value, Fraction):
        return f"{value.numerator}/{value.denominator}"
    return inspect(value)

