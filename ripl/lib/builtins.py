"""
Built-in operators, functions and methods of the expression language.

Methods are registered per Ruby class name with the `method` decorator and
looked up by `method_get`: the receiver's own class first, then Numeric
(for Integer and Float), Enumerable (for Array, Hash and Range) and finally
Object. Every method receives the receiver, the evaluated arguments and the
block (or None).
"""

import functools
import itertools
import math
from fractions import Fraction
from typing import Any, Callable, Iterable, Iterator, Optional, TYPE_CHECKING
from ripl.lib.errors import RuntimeFault, argument_error
from ripl.lib.values import (
    Block,
    ClassRef,
    HashKey,
    MainObject,
    Range,
    Symbol,
    class_name,
    equal,
    hash_key,
    inspect,
    number_is,
    to_s,
    truthy,
)

if TYPE_CHECKING:
    from ripl.lib.evaluator import Evaluator

Method = Callable[[Any, list[Any], Optional[Block]], Any]
BuiltinFunction = Callable[["Evaluator", list[Any], Optional[Block]], Any]

METHODS: dict[str, dict[str, Method]] = {}
FUNCTIONS: dict[str, BuiltinFunction] = {}

CONSTANTS: dict[str, ClassRef] = {
    name: ClassRef(name)
    for name in (
        "Integer", "Float", "String", "Symbol", "Array", "Hash", "Range",
        "NilClass", "TrueClass", "FalseClass", "Object", "Method", "Class",
        "StandardError", "RuntimeError", "ArgumentError", "TypeError",
        "NameError", "NoMethodError", "ZeroDivisionError", "IndexError",
        "KeyError", "StopIteration", "Rational",
    )
}

ENUMERABLE_OWNERS: frozenset[str] = frozenset({"Array", "Hash", "Range"})


# --------------------------------------------------------------------------
# Helpers
# --------------------------------------------------------------------------


def receiver_describe(value: Any) -> str:
    if isinstance(value, MainObject):
        return "main"
    if value is None:
        return "nil"
    if value is True or value is False:
        return inspect(value)
    return f"an instance of {class_name(value)}"


def method_missing(name: str, receiver: Any) -> RuntimeFault:
    return RuntimeFault(
        f"undefined method '{name}' for {receiver_describe(receiver)}",
        "NoMethodError",
    )


def arity_check(args: list[Any], low: int, high: Optional[int] = None) -> None:
    high = low if high is None else high
    if len(args) < low or (high >= 0 and len(args) > high):
        if high < 0:
            expected: str = f"{low}+"
        elif low == high:
            expected = str(low)
        else:
            expected = f"{low}..{high}"
        raise argument_error(len(args), expected)


def block_require(block: Optional[Block]) -> Block:
    if block is None:
        raise RuntimeFault("no block given (yield)", "LocalJumpError")
    return block


def integer_require(value: Any, what: str = "Integer") -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise RuntimeFault(
            f"no implicit conversion of {class_name(value)} into {what}", "TypeError"
        )
    return value


def spaceship(left: Any, right: Any) -> Optional[int]:
    """Three-way comparison; None when the values are not comparable."""
    if number_is(left) and number_is(right):
        return (left > right) - (left < right)
    if isinstance(left, str) and isinstance(right, str):
        return (left > right) - (left < right)
    if isinstance(left, Symbol) and isinstance(right, Symbol):
        return (left.name > right.name) - (left.name < right.name)
    if isinstance(left, list) and isinstance(right, list):
        for a, b in zip(left, right):
            result: Optional[int] = spaceship(a, b)
            if result is None or result != 0:
                return result
        return (len(left) > len(right)) - (len(left) < len(right))
    return None


def compare(left: Any, right: Any) -> int:
    result: Optional[int] = spaceship(left, right)
    if result is None:
        raise RuntimeFault(
            f"comparison of {class_name(left)} with {class_name(right)} failed",
            "ArgumentError",
        )
    return result


sort_key = functools.cmp_to_key(compare)


def items_of(receiver: Any) -> list[Any]:
    """Elements an Enumerable method iterates over."""
    return list(each_of(receiver))


def each_of(receiver: Any) -> Iterator[Any]:
    """Lazy element stream for methods that may stop early; ranges are never materialised."""
    if isinstance(receiver, dict):
        return iter([[key.value, value] for key, value in receiver.items()])
    if isinstance(receiver, Range):
        return iter(receiver)
    return iter(list(receiver))


def contains(items: Iterable[Any], value: Any) -> bool:
    return any(equal(item, value) for item in items)


# --------------------------------------------------------------------------
# Operators
# --------------------------------------------------------------------------


def coercion_error(op: str, left: Any, right: Any) -> RuntimeFault:
    if number_is(left):
        return RuntimeFault(
            f"{receiver_describe(right) if right is None else class_name(right)} "
            f"can't be coerced into {class_name(left)}",
            "TypeError",
        )
    if op == "*" and isinstance(left, (str, list)):
        return RuntimeFault(
            f"no implicit conversion of {class_name(right)} into Integer", "TypeError"
        )
    if (isinstance(left, str) and op in ("+", "<<")) or (
        isinstance(left, list) and op in ("+", "-")
    ):
        return RuntimeFault(
            f"no implicit conversion of {class_name(right)} into {class_name(left)}",
            "TypeError",
        )
    return method_missing(op, left)


def exact_is(value: Any) -> bool:
    return not isinstance(value, float)


def divide(left: Any, right: Any) -> Any:
    if exact_is(left) and exact_is(right):
        if right == 0:
            raise RuntimeFault("divided by 0", "ZeroDivisionError")
        if isinstance(left, int) and isinstance(right, int):
            return left // right
        return Fraction(left) / right
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def modulo(left: Any, right: Any) -> Any:
    if right == 0:
        if exact_is(left) and exact_is(right):
            raise RuntimeFault("divided by 0", "ZeroDivisionError")
        return math.nan
    return left % right


def binary_op(op: str, left: Any, right: Any) -> Any:
    """Apply an arithmetic or `<<` operator."""
    numbers: bool = number_is(left) and number_is(right)
    if op == "+":
        if numbers:
            return left + right
        if isinstance(left, str) and isinstance(right, str):
            return left + right
        if isinstance(left, list) and isinstance(right, list):
            return left + right
    elif op == "-":
        if numbers:
            return left - right
        if isinstance(left, list) and isinstance(right, list):
            return [item for item in left if not contains(right, item)]
    elif op == "*":
        if numbers:
            return left * right
        if isinstance(left, (str, list)) and number_is(right):
            count: int = integer_require(right)
            if count < 0:
                raise RuntimeFault("negative argument", "ArgumentError")
            return left * count
        if isinstance(left, list) and isinstance(right, str):
            return right.join(to_s(item) for item in left)
    elif op == "/":
        if numbers:
            return divide(left, right)
    elif op == "%":
        if numbers:
            return modulo(left, right)
    elif op == "**":
        if numbers:
            if isinstance(left, int) and isinstance(right, int) and right < 0:
                if left == 0:
                    raise RuntimeFault("divided by 0", "ZeroDivisionError")
                return Fraction(left) ** right
            try:
                return left**right
            except OverflowError:
                return math.inf
            except ZeroDivisionError:
                raise RuntimeFault("divided by 0", "ZeroDivisionError")
    elif op == "<<":
        if isinstance(left, list):
            left.append(right)
            return left
        if isinstance(left, str) and isinstance(right, str):
            return left + right
        if isinstance(left, int) and not isinstance(left, bool):
            return left << integer_require(right)
    raise coercion_error(op, left, right)


def compare_op(op: str, left: Any, right: Any) -> bool:
    if op == "==":
        return equal(left, right)
    if op == "!=":
        return not equal(left, right)
    result: int = compare(left, right)
    return {
        "<": result < 0,
        "<=": result <= 0,
        ">": result > 0,
        ">=": result >= 0,
    }[op]


def index_get(receiver: Any, index: Any) -> Any:
    if isinstance(receiver, (list, str)):
        if isinstance(index, Range):
            start: int = integer_require(index.first)
            stop: int = integer_require(index.last)
            if start < 0:
                start += len(receiver)
            if stop < 0:
                stop += len(receiver)
            if start < 0 or start > len(receiver):
                return None
            return receiver[start : stop if index.exclusive else stop + 1]
        position: int = integer_require(index)
        if -len(receiver) <= position < len(receiver):
            return receiver[position]
        return None
    if isinstance(receiver, dict):
        return receiver.get(hash_key(index))
    raise method_missing("[]", receiver)


def index_set(receiver: Any, index: Any, value: Any) -> Any:
    if isinstance(receiver, list):
        position: int = integer_require(index)
        if position < -len(receiver):
            raise RuntimeFault(
                f"index {position} too small for array; minimum: -{len(receiver)}",
                "IndexError",
            )
        if position >= len(receiver):
            receiver.extend([None] * (position - len(receiver) + 1))
        receiver[position] = value
        return value
    if isinstance(receiver, dict):
        receiver[hash_key(index)] = value
        return value
    if isinstance(receiver, str):
        raise RuntimeFault("can't modify frozen String", "FrozenError")
    raise method_missing("[]=", receiver)


# --------------------------------------------------------------------------
# Registration
# --------------------------------------------------------------------------


def method(owner: str, *names: str) -> Callable[[Method], Method]:
    def register(fn: Method) -> Method:
        for name in names:
            METHODS.setdefault(owner, {})[name] = fn
        return fn

    return register


def function(*names: str) -> Callable[[BuiltinFunction], BuiltinFunction]:
    def register(fn: BuiltinFunction) -> BuiltinFunction:
        for name in names:
            FUNCTIONS[name] = fn
        return fn

    return register


def method_get(receiver: Any, name: str) -> Optional[Method]:
    owner: str = class_name(receiver)
    chain: list[str] = [owner]
    if owner in ("Integer", "Float", "Rational"):
        chain.append("Numeric")
    if owner in ENUMERABLE_OWNERS:
        chain.append("Enumerable")
    chain.append("Object")
    for link in chain:
        found: Optional[Method] = METHODS.get(link, {}).get(name)
        if found is not None:
            return found
    return None


# --------------------------------------------------------------------------
# Functions
# --------------------------------------------------------------------------


def puts_lines(value: Any) -> list[str]:
    if isinstance(value, list):
        if not value:
            return [""]
        return [line for item in value for line in puts_lines(item)]
    return [to_s(value)]


@function("puts")
def fn_puts(evaluator: "Evaluator", args: list[Any], block: Optional[Block]) -> None:
    lines: list[str] = [line for arg in args for line in puts_lines(arg)] or [""]
    evaluator.write("".join(line if line.endswith("\n") else line + "\n" for line in lines))
    return None


@function("print")
def fn_print(evaluator: "Evaluator", args: list[Any], block: Optional[Block]) -> None:
    evaluator.write("".join(to_s(arg) for arg in args))
    return None


@function("p")
def fn_p(evaluator: "Evaluator", args: list[Any], block: Optional[Block]) -> Any:
    for arg in args:
        evaluator.write(inspect(arg) + "\n")
    if not args:
        return None
    return args[0] if len(args) == 1 else list(args)


@function("raise")
def fn_raise(evaluator: "Evaluator", args: list[Any], block: Optional[Block]) -> None:
    arity_check(args, 0, 2)
    if not args:
        raise RuntimeFault("unhandled exception", "RuntimeError")
    if isinstance(args[0], ClassRef):
        message: str = to_s(args[1]) if len(args) > 1 else args[0].name
        raise RuntimeFault(message, args[0].name)
    raise RuntimeFault(to_s(args[0]), "RuntimeError")


@function("loop")
def fn_loop(evaluator: "Evaluator", args: list[Any], block: Optional[Block]) -> None:
    body: Block = block_require(block)
    while True:
        body()


@function("local_variables")
def fn_local_variables(
    evaluator: "Evaluator", args: list[Any], block: Optional[Block]
) -> list[Symbol]:
    arity_check(args, 0)
    return [Symbol(name) for name in evaluator.context.local_names()]


@function("Integer")
def fn_integer(evaluator: "Evaluator", args: list[Any], block: Optional[Block]) -> int:
    arity_check(args, 1)
    value: Any = args[0]
    if number_is(value):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip().replace("_", ""), 0)
        except ValueError:
            pass
    raise RuntimeFault(f"invalid value for Integer(): {inspect(value)}", "ArgumentError")


@function("Float")
def fn_float(evaluator: "Evaluator", args: list[Any], block: Optional[Block]) -> float:
    arity_check(args, 1)
    value: Any = args[0]
    if number_is(value):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip().replace("_", ""))
        except ValueError:
            pass
    raise RuntimeFault(f"invalid value for Float(): {inspect(value)}", "ArgumentError")


# --------------------------------------------------------------------------
# Object
# --------------------------------------------------------------------------


@method("Object", "inspect")
def obj_inspect(receiver: Any, args: list[Any], block: Optional[Block]) -> str:
    return inspect(receiver)


@method("Object", "to_s")
def obj_to_s(receiver: Any, args: list[Any], block: Optional[Block]) -> str:
    return to_s(receiver)


@method("Object", "class")
def obj_class(receiver: Any, args: list[Any], block: Optional[Block]) -> ClassRef:
    return ClassRef(class_name(receiver))


@method("Object", "nil?")
def obj_nil(receiver: Any, args: list[Any], block: Optional[Block]) -> bool:
    return receiver is None


@method("Object", "dup")
def obj_dup(receiver: Any, args: list[Any], block: Optional[Block]) -> Any:
    if isinstance(receiver, (list, dict)):
        return receiver.copy()
    return receiver


@method("NilClass", "to_a")
def nil_to_a(receiver: Any, args: list[Any], block: Optional[Block]) -> list[Any]:
    return []


@method("NilClass", "to_i")
def nil_to_i(receiver: Any, args: list[Any], block: Optional[Block]) -> int:
    return 0


# --------------------------------------------------------------------------
# Numeric
# --------------------------------------------------------------------------


@method("Numeric", "abs")
def num_abs(receiver: Any, args: list[Any], block: Optional[Block]) -> Any:
    return abs(receiver)


@method("Numeric", "zero?")
def num_zero(receiver: Any, args: list[Any], block: Optional[Block]) -> bool:
    return receiver == 0


@method("Numeric", "positive?")
def num_positive(receiver: Any, args: list[Any], block: Optional[Block]) -> bool:
    return receiver > 0


@method("Numeric", "negative?")
def num_negative(receiver: Any, args: list[Any], block: Optional[Block]) -> bool:
    return receiver < 0


@method("Numeric", "to_i", "to_int", "truncate")
def num_to_i(receiver: Any, args: list[Any], block: Optional[Block]) -> int:
    if isinstance(receiver, float) and (math.isnan(receiver) or math.isinf(receiver)):
        raise RuntimeFault(float_name(receiver), "FloatDomainError")
    return int(receiver)


@method("Numeric", "to_f")
def num_to_f(receiver: Any, args: list[Any], block: Optional[Block]) -> float:
    return float(receiver)


@method("Numeric", "round")
def num_round(receiver: Any, args: list[Any], block: Optional[Block]) -> Any:
    arity_check(args, 0, 1)
    digits: int = integer_require(args[0]) if args else 0
    if isinstance(receiver, int):
        return receiver if digits >= 0 else int(round(receiver, digits))
    # round half away from zero
    factor: float = 10.0**digits
    rounded: float = math.floor(abs(receiver) * factor + 0.5) / factor
    rounded = math.copysign(rounded, receiver)
    return int(rounded) if digits <= 0 else rounded


@method("Numeric", "floor")
def num_floor(receiver: Any, args: list[Any], block: Optional[Block]) -> int:
    return math.floor(receiver)


@method("Numeric", "ceil")
def num_ceil(receiver: Any, args: list[Any], block: Optional[Block]) -> int:
    return math.ceil(receiver)


@method("Numeric", "divmod")
def num_divmod(receiver: Any, args: list[Any], block: Optional[Block]) -> list[Any]:
    arity_check(args, 1)
    quotient: Any = divide(receiver, args[0])
    if isinstance(quotient, Fraction) or (
        isinstance(quotient, float) and math.isfinite(quotient)
    ):
        quotient = math.floor(quotient)
    return [quotient, modulo(receiver, args[0])]


@method("Numeric", "clamp")
def num_clamp(receiver: Any, args: list[Any], block: Optional[Block]) -> Any:
    arity_check(args, 2)
    low, high = args
    if compare(receiver, low) < 0:
        return low
    if compare(receiver, high) > 0:
        return high
    return receiver


@method("Integer", "times")
def int_times(receiver: int, args: list[Any], block: Optional[Block]) -> int:
    body: Block = block_require(block)
    for i in range(receiver):
        body(i)
    return receiver


@method("Integer", "upto")
def int_upto(receiver: int, args: list[Any], block: Optional[Block]) -> int:
    arity_check(args, 1)
    body: Block = block_require(block)
    for i in range(receiver, integer_require(args[0]) + 1):
        body(i)
    return receiver


@method("Integer", "downto")
def int_downto(receiver: int, args: list[Any], block: Optional[Block]) -> int:
    arity_check(args, 1)
    body: Block = block_require(block)
    for i in range(receiver, integer_require(args[0]) - 1, -1):
        body(i)
    return receiver


@method("Integer", "even?")
def int_even(receiver: int, args: list[Any], block: Optional[Block]) -> bool:
    return receiver % 2 == 0


@method("Integer", "odd?")
def int_odd(receiver: int, args: list[Any], block: Optional[Block]) -> bool:
    return receiver % 2 == 1


@method("Integer", "succ")
def int_succ(receiver: int, args: list[Any], block: Optional[Block]) -> int:
    return receiver + 1


@method("Integer", "pred")
def int_pred(receiver: int, args: list[Any], block: Optional[Block]) -> int:
    return receiver - 1


@method("Integer", "digits")
def int_digits(receiver: int, args: list[Any], block: Optional[Block]) -> list[int]:
    if receiver < 0:
        raise RuntimeFault("out of domain", "Math::DomainError")
    return [int(d) for d in reversed(str(receiver))]


@method("Float", "nan?")
def float_nan(receiver: float, args: list[Any], block: Optional[Block]) -> bool:
    return math.isnan(receiver)


def float_name(value: float) -> str:
    return "NaN" if math.isnan(value) else ("Infinity" if value > 0 else "-Infinity")


# --------------------------------------------------------------------------
# String and Symbol
# --------------------------------------------------------------------------


@method("String", "length", "size")
def str_length(receiver: str, args: list[Any], block: Optional[Block]) -> int:
    return len(receiver)


@method("String", "upcase")
def str_upcase(receiver: str, args: list[Any], block: Optional[Block]) -> str:
    return receiver.upper()


@method("String", "downcase")
def str_downcase(receiver: str, args: list[Any], block: Optional[Block]) -> str:
    return receiver.lower()


@method("String", "capitalize")
def str_capitalize(receiver: str, args: list[Any], block: Optional[Block]) -> str:
    return receiver.capitalize()


@method("String", "swapcase")
def str_swapcase(receiver: str, args: list[Any], block: Optional[Block]) -> str:
    return receiver.swapcase()


@method("String", "reverse")
def str_reverse(receiver: str, args: list[Any], block: Optional[Block]) -> str:
    return receiver[::-1]


@method("String", "strip")
def str_strip(receiver: str, args: list[Any], block: Optional[Block]) -> str:
    return receiver.strip()


@method("String", "chomp")
def str_chomp(receiver: str, args: list[Any], block: Optional[Block]) -> str:
    return receiver.removesuffix("\n").removesuffix("\r")


@method("String", "split")
def str_split(receiver: str, args: list[Any], block: Optional[Block]) -> list[str]:
    arity_check(args, 0, 1)
    if not args or args[0] == " ":
        return receiver.split()
    separator: str = to_s(args[0])
    if separator == "":
        return list(receiver)
    parts: list[str] = receiver.split(separator)
    while parts and parts[-1] == "":
        parts.pop()
    return parts


@method("String", "chars")
def str_chars(receiver: str, args: list[Any], block: Optional[Block]) -> list[str]:
    return list(receiver)


@method("String", "lines")
def str_lines(receiver: str, args: list[Any], block: Optional[Block]) -> list[str]:
    return receiver.splitlines(keepends=True)


@method("String", "each_char")
def str_each_char(receiver: str, args: list[Any], block: Optional[Block]) -> str:
    body: Block = block_require(block)
    for ch in receiver:
        body(ch)
    return receiver


@method("String", "include?")
def str_include(receiver: str, args: list[Any], block: Optional[Block]) -> bool:
    arity_check(args, 1)
    if not isinstance(args[0], str):
        raise RuntimeFault(
            f"no implicit conversion of {class_name(args[0])} into String", "TypeError"
        )
    return args[0] in receiver


@method("String", "start_with?")
def str_start_with(receiver: str, args: list[Any], block: Optional[Block]) -> bool:
    return any(receiver.startswith(to_s(prefix)) for prefix in args)


@method("String", "end_with?")
def str_end_with(receiver: str, args: list[Any], block: Optional[Block]) -> bool:
    return any(receiver.endswith(to_s(suffix)) for suffix in args)


@method("String", "empty?")
def str_empty(receiver: str, args: list[Any], block: Optional[Block]) -> bool:
    return receiver == ""


@method("String", "to_i")
def str_to_i(receiver: str, args: list[Any], block: Optional[Block]) -> int:
    digits: str = ""
    for i, ch in enumerate(receiver.strip()):
        if ch.isdigit() or (i == 0 and ch in "+-"):
            digits += ch
        else:
            break
    try:
        return int(digits)
    except ValueError:
        return 0


@method("String", "to_f")
def str_to_f(receiver: str, args: list[Any], block: Optional[Block]) -> float:
    text: str = receiver.strip()
    for end in range(len(text), 0, -1):
        try:
            return float(text[:end])
        except ValueError:
            continue
    return 0.0


@method("String", "to_sym")
def str_to_sym(receiver: str, args: list[Any], block: Optional[Block]) -> Symbol:
    return Symbol(receiver)


@method("String", "sub")
def str_sub(receiver: str, args: list[Any], block: Optional[Block]) -> str:
    arity_check(args, 2)
    return receiver.replace(to_s(args[0]), to_s(args[1]), 1)


@method("String", "gsub")
def str_gsub(receiver: str, args: list[Any], block: Optional[Block]) -> str:
    arity_check(args, 2)
    return receiver.replace(to_s(args[0]), to_s(args[1]))


@method("String", "count")
def str_count(receiver: str, args: list[Any], block: Optional[Block]) -> int:
    arity_check(args, 1)
    return sum(1 for ch in receiver if ch in to_s(args[0]))


@method("String", "index")
def str_index(receiver: str, args: list[Any], block: Optional[Block]) -> Optional[int]:
    arity_check(args, 1)
    found: int = receiver.find(to_s(args[0]))
    return None if found < 0 else found


@method("String", "center")
def str_center(receiver: str, args: list[Any], block: Optional[Block]) -> str:
    arity_check(args, 1, 2)
    return receiver.center(integer_require(args[0]), to_s(args[1]) if len(args) > 1 else " ")


@method("String", "ljust")
def str_ljust(receiver: str, args: list[Any], block: Optional[Block]) -> str:
    arity_check(args, 1, 2)
    return receiver.ljust(integer_require(args[0]), to_s(args[1]) if len(args) > 1 else " ")


@method("String", "rjust")
def str_rjust(receiver: str, args: list[Any], block: Optional[Block]) -> str:
    arity_check(args, 1, 2)
    return receiver.rjust(integer_require(args[0]), to_s(args[1]) if len(args) > 1 else " ")


@method("Symbol", "to_sym")
def sym_to_sym(receiver: Symbol, args: list[Any], block: Optional[Block]) -> Symbol:
    return receiver


@method("Symbol", "length", "size")
def sym_length(receiver: Symbol, args: list[Any], block: Optional[Block]) -> int:
    return len(receiver.name)


# --------------------------------------------------------------------------
# Enumerable (Array, Hash, Range)
# --------------------------------------------------------------------------


@method("Enumerable", "each")
def enum_each(receiver: Any, args: list[Any], block: Optional[Block]) -> Any:
    body: Block = block_require(block)
    for item in each_of(receiver):
        body(item)
    return receiver


@method("Enumerable", "each_with_index")
def enum_each_with_index(receiver: Any, args: list[Any], block: Optional[Block]) -> Any:
    body: Block = block_require(block)
    for index, item in enumerate(each_of(receiver)):
        body(item, index)
    return receiver


@method("Enumerable", "each_with_object")
def enum_each_with_object(receiver: Any, args: list[Any], block: Optional[Block]) -> Any:
    arity_check(args, 1)
    body: Block = block_require(block)
    for item in each_of(receiver):
        body(item, args[0])
    return args[0]


@method("Enumerable", "map", "collect")
def enum_map(receiver: Any, args: list[Any], block: Optional[Block]) -> list[Any]:
    body: Block = block_require(block)
    return [body(item) for item in items_of(receiver)]


@method("Enumerable", "flat_map")
def enum_flat_map(receiver: Any, args: list[Any], block: Optional[Block]) -> list[Any]:
    body: Block = block_require(block)
    result: list[Any] = []
    for item in items_of(receiver):
        mapped: Any = body(item)
        if isinstance(mapped, list):
            result.extend(mapped)
        else:
            result.append(mapped)
    return result


@method("Enumerable", "select", "filter")
def enum_select(receiver: Any, args: list[Any], block: Optional[Block]) -> list[Any]:
    body: Block = block_require(block)
    return [item for item in items_of(receiver) if truthy(body(item))]


@method("Enumerable", "reject")
def enum_reject(receiver: Any, args: list[Any], block: Optional[Block]) -> list[Any]:
    body: Block = block_require(block)
    return [item for item in items_of(receiver) if not truthy(body(item))]


@method("Enumerable", "partition")
def enum_partition(receiver: Any, args: list[Any], block: Optional[Block]) -> list[Any]:
    body: Block = block_require(block)
    accepted: list[Any] = []
    rejected: list[Any] = []
    for item in items_of(receiver):
        (accepted if truthy(body(item)) else rejected).append(item)
    return [accepted, rejected]


@method("Enumerable", "find", "detect")
def enum_find(receiver: Any, args: list[Any], block: Optional[Block]) -> Any:
    body: Block = block_require(block)
    for item in each_of(receiver):
        if truthy(body(item)):
            return item
    return None


@method("Enumerable", "find_index")
def enum_find_index(receiver: Any, args: list[Any], block: Optional[Block]) -> Optional[int]:
    for index, item in enumerate(each_of(receiver)):
        if (block is not None and truthy(block(item))) or (args and equal(item, args[0])):
            return index
    return None


@method("Enumerable", "reduce", "inject")
def enum_reduce(receiver: Any, args: list[Any], block: Optional[Block]) -> Any:
    arity_check(args, 0, 2)
    items: list[Any] = items_of(receiver)
    operator: Optional[str] = None
    if args and isinstance(args[-1], Symbol) and (len(args) == 2 or block is None):
        operator = args[-1].name
        args = args[:-1]
    if args:
        accumulator: Any = args[0]
    elif items:
        accumulator = items.pop(0)
    else:
        return None
    for item in items:
        if operator is not None:
            accumulator = binary_op(operator, accumulator, item)
        else:
            accumulator = block_require(block)(accumulator, item)
    return accumulator


@method("Enumerable", "sum")
def enum_sum(receiver: Any, args: list[Any], block: Optional[Block]) -> Any:
    arity_check(args, 0, 1)
    total: Any = args[0] if args else 0
    for item in items_of(receiver):
        total = binary_op("+", total, block(item) if block else item)
    return total


@method("Enumerable", "count")
def enum_count(receiver: Any, args: list[Any], block: Optional[Block]) -> int:
    arity_check(args, 0, 1)
    items: list[Any] = items_of(receiver)
    if args:
        return sum(1 for item in items if equal(item, args[0]))
    if block is not None:
        return sum(1 for item in items if truthy(block(item)))
    return len(items)


@method("Enumerable", "min")
def enum_min(receiver: Any, args: list[Any], block: Optional[Block]) -> Any:
    items: list[Any] = items_of(receiver)
    return min(items, key=sort_key) if items else None


@method("Enumerable", "max")
def enum_max(receiver: Any, args: list[Any], block: Optional[Block]) -> Any:
    items: list[Any] = items_of(receiver)
    return max(items, key=sort_key) if items else None


@method("Enumerable", "min_by")
def enum_min_by(receiver: Any, args: list[Any], block: Optional[Block]) -> Any:
    body: Block = block_require(block)
    items: list[Any] = items_of(receiver)
    return min(items, key=lambda item: sort_key(body(item))) if items else None


@method("Enumerable", "max_by")
def enum_max_by(receiver: Any, args: list[Any], block: Optional[Block]) -> Any:
    body: Block = block_require(block)
    items: list[Any] = items_of(receiver)
    return max(items, key=lambda item: sort_key(body(item))) if items else None


@method("Enumerable", "sort")
def enum_sort(receiver: Any, args: list[Any], block: Optional[Block]) -> list[Any]:
    items: list[Any] = items_of(receiver)
    if block is not None:
        return sorted(items, key=functools.cmp_to_key(lambda a, b: integer_require(block(a, b))))
    return sorted(items, key=sort_key)


@method("Enumerable", "sort_by")
def enum_sort_by(receiver: Any, args: list[Any], block: Optional[Block]) -> list[Any]:
    body: Block = block_require(block)
    return sorted(items_of(receiver), key=lambda item: sort_key(body(item)))


@method("Enumerable", "include?", "member?")
def enum_include(receiver: Any, args: list[Any], block: Optional[Block]) -> bool:
    arity_check(args, 1)
    return contains(each_of(receiver), args[0])


@method("Enumerable", "to_a", "entries")
def enum_to_a(receiver: Any, args: list[Any], block: Optional[Block]) -> list[Any]:
    return items_of(receiver)


@method("Enumerable", "first")
def enum_first(receiver: Any, args: list[Any], block: Optional[Block]) -> Any:
    arity_check(args, 0, 1)
    if args:
        return enum_take(receiver, args, block)
    return next(each_of(receiver), None)


@method("Enumerable", "take")
def enum_take(receiver: Any, args: list[Any], block: Optional[Block]) -> list[Any]:
    arity_check(args, 1)
    count: int = integer_require(args[0])
    if count < 0:
        raise RuntimeFault("attempt to take negative size", "ArgumentError")
    return list(itertools.islice(each_of(receiver), count))


@method("Enumerable", "drop")
def enum_drop(receiver: Any, args: list[Any], block: Optional[Block]) -> list[Any]:
    arity_check(args, 1)
    return items_of(receiver)[integer_require(args[0]) :]


@method("Enumerable", "take_while")
def enum_take_while(receiver: Any, args: list[Any], block: Optional[Block]) -> list[Any]:
    body: Block = block_require(block)
    result: list[Any] = []
    for item in each_of(receiver):
        if not truthy(body(item)):
            break
        result.append(item)
    return result


@method("Enumerable", "drop_while")
def enum_drop_while(receiver: Any, args: list[Any], block: Optional[Block]) -> list[Any]:
    body: Block = block_require(block)
    items: list[Any] = items_of(receiver)
    for index, item in enumerate(items):
        if not truthy(body(item)):
            return items[index:]
    return []


@method("Enumerable", "all?")
def enum_all(receiver: Any, args: list[Any], block: Optional[Block]) -> bool:
    return all(truthy(block(item) if block else item) for item in each_of(receiver))


@method("Enumerable", "any?")
def enum_any(receiver: Any, args: list[Any], block: Optional[Block]) -> bool:
    return any(truthy(block(item) if block else item) for item in each_of(receiver))


@method("Enumerable", "none?")
def enum_none(receiver: Any, args: list[Any], block: Optional[Block]) -> bool:
    return not enum_any(receiver, args, block)


@method("Enumerable", "group_by")
def enum_group_by(receiver: Any, args: list[Any], block: Optional[Block]) -> dict[Any, list[Any]]:
    body: Block = block_require(block)
    groups: dict[HashKey, list[Any]] = {}
    for item in items_of(receiver):
        groups.setdefault(hash_key(body(item)), []).append(item)
    return groups


@method("Enumerable", "tally")
def enum_tally(receiver: Any, args: list[Any], block: Optional[Block]) -> dict[Any, int]:
    counts: dict[HashKey, int] = {}
    for item in items_of(receiver):
        key: HashKey = hash_key(item)
        counts[key] = counts.get(key, 0) + 1
    return counts


@method("Enumerable", "each_slice")
def enum_each_slice(receiver: Any, args: list[Any], block: Optional[Block]) -> Any:
    arity_check(args, 1)
    size: int = integer_require(args[0])
    if size <= 0:
        raise RuntimeFault("invalid slice size", "ArgumentError")
    items: list[Any] = items_of(receiver)
    slices: list[list[Any]] = [items[i : i + size] for i in range(0, len(items), size)]
    if block is None:
        return slices
    for chunk in slices:
        block(chunk)
    return receiver


@method("Enumerable", "zip")
def enum_zip(receiver: Any, args: list[Any], block: Optional[Block]) -> list[Any]:
    others: list[list[Any]] = [items_of(other) for other in args]
    return [
        [item] + [other[i] if i < len(other) else None for other in others]
        for i, item in enumerate(items_of(receiver))
    ]


@method("Enumerable", "uniq")
def enum_uniq(receiver: Any, args: list[Any], block: Optional[Block]) -> list[Any]:
    result: list[Any] = []
    seen: set[HashKey] = set()
    for item in items_of(receiver):
        key: HashKey = hash_key(block(item) if block else item)
        if key not in seen:
            seen.add(key)
            result.append(item)
    return result


@method("Enumerable", "to_h")
def enum_to_h(receiver: Any, args: list[Any], block: Optional[Block]) -> dict[Any, Any]:
    result: dict[HashKey, Any] = {}
    for item in items_of(receiver):
        pair: Any = block(item) if block else item
        if not isinstance(pair, list) or len(pair) != 2:
            raise RuntimeFault(
                f"wrong element type {class_name(pair)} (expected array)", "TypeError"
            )
        result[hash_key(pair[0])] = pair[1]
    return result


# --------------------------------------------------------------------------
# Array
# --------------------------------------------------------------------------


@method("Array", "length", "size")
def arr_length(receiver: list[Any], args: list[Any], block: Optional[Block]) -> int:
    return len(receiver)


@method("Array", "empty?")
def arr_empty(receiver: list[Any], args: list[Any], block: Optional[Block]) -> bool:
    return not receiver


@method("Array", "last")
def arr_last(receiver: list[Any], args: list[Any], block: Optional[Block]) -> Any:
    arity_check(args, 0, 1)
    if args:
        count: int = integer_require(args[0])
        return receiver[-count:] if count else []
    return receiver[-1] if receiver else None


@method("Array", "push", "append")
def arr_push(receiver: list[Any], args: list[Any], block: Optional[Block]) -> list[Any]:
    receiver.extend(args)
    return receiver


@method("Array", "pop")
def arr_pop(receiver: list[Any], args: list[Any], block: Optional[Block]) -> Any:
    return receiver.pop() if receiver else None


@method("Array", "shift")
def arr_shift(receiver: list[Any], args: list[Any], block: Optional[Block]) -> Any:
    return receiver.pop(0) if receiver else None


@method("Array", "unshift", "prepend")
def arr_unshift(receiver: list[Any], args: list[Any], block: Optional[Block]) -> list[Any]:
    receiver[0:0] = args
    return receiver


@method("Array", "concat")
def arr_concat(receiver: list[Any], args: list[Any], block: Optional[Block]) -> list[Any]:
    for other in args:
        if not isinstance(other, list):
            raise RuntimeFault(
                f"no implicit conversion of {class_name(other)} into Array", "TypeError"
            )
        receiver.extend(other)
    return receiver


@method("Array", "delete")
def arr_delete(receiver: list[Any], args: list[Any], block: Optional[Block]) -> Any:
    arity_check(args, 1)
    found: bool = contains(receiver, args[0])
    receiver[:] = [item for item in receiver if not equal(item, args[0])]
    return args[0] if found else None


@method("Array", "clear")
def arr_clear(receiver: list[Any], args: list[Any], block: Optional[Block]) -> list[Any]:
    receiver.clear()
    return receiver


@method("Array", "reverse")
def arr_reverse(receiver: list[Any], args: list[Any], block: Optional[Block]) -> list[Any]:
    return receiver[::-1]


@method("Array", "join")
def arr_join(receiver: list[Any], args: list[Any], block: Optional[Block]) -> str:
    arity_check(args, 0, 1)
    separator: str = to_s(args[0]) if args else ""
    return separator.join(
        arr_join(item, args, block) if isinstance(item, list) else to_s(item)
        for item in receiver
    )


@method("Array", "flatten")
def arr_flatten(receiver: list[Any], args: list[Any], block: Optional[Block]) -> list[Any]:
    result: list[Any] = []
    for item in receiver:
        if isinstance(item, list):
            result.extend(arr_flatten(item, args, block))
        else:
            result.append(item)
    return result


@method("Array", "compact")
def arr_compact(receiver: list[Any], args: list[Any], block: Optional[Block]) -> list[Any]:
    return [item for item in receiver if item is not None]


@method("Array", "index")
def arr_index(receiver: list[Any], args: list[Any], block: Optional[Block]) -> Optional[int]:
    return enum_find_index(receiver, args, block)


@method("Array", "rotate")
def arr_rotate(receiver: list[Any], args: list[Any], block: Optional[Block]) -> list[Any]:
    arity_check(args, 0, 1)
    if not receiver:
        return []
    shift: int = (integer_require(args[0]) if args else 1) % len(receiver)
    return receiver[shift:] + receiver[:shift]


# --------------------------------------------------------------------------
# Hash
# --------------------------------------------------------------------------


@method("Hash", "length", "size")
def hash_length(receiver: dict[HashKey, Any], args: list[Any], block: Optional[Block]) -> int:
    return len(receiver)


@method("Hash", "empty?")
def hash_empty(receiver: dict[HashKey, Any], args: list[Any], block: Optional[Block]) -> bool:
    return not receiver


@method("Hash", "keys")
def hash_keys(receiver: dict[HashKey, Any], args: list[Any], block: Optional[Block]) -> list[Any]:
    return [key.value for key in receiver]


@method("Hash", "values")
def hash_values(receiver: dict[HashKey, Any], args: list[Any], block: Optional[Block]) -> list[Any]:
    return list(receiver.values())


@method("Hash", "key?", "has_key?", "include?", "member?")
def hash_has_key(receiver: dict[HashKey, Any], args: list[Any], block: Optional[Block]) -> bool:
    arity_check(args, 1)
    return hash_key(args[0]) in receiver


@method("Hash", "value?", "has_value?")
def hash_has_value(receiver: dict[HashKey, Any], args: list[Any], block: Optional[Block]) -> bool:
    arity_check(args, 1)
    return contains(receiver.values(), args[0])


@method("Hash", "fetch")
def hash_fetch(receiver: dict[HashKey, Any], args: list[Any], block: Optional[Block]) -> Any:
    arity_check(args, 1, 2)
    key: HashKey = hash_key(args[0])
    if key in receiver:
        return receiver[key]
    if len(args) > 1:
        return args[1]
    if block is not None:
        return block(args[0])
    raise RuntimeFault(f"key not found: {inspect(args[0])}", "KeyError")


@method("Hash", "delete")
def hash_delete(receiver: dict[HashKey, Any], args: list[Any], block: Optional[Block]) -> Any:
    arity_check(args, 1)
    return receiver.pop(hash_key(args[0]), None)


@method("Hash", "merge")
def hash_merge(receiver: dict[HashKey, Any], args: list[Any], block: Optional[Block]) -> dict[HashKey, Any]:
    merged: dict[HashKey, Any] = dict(receiver)
    for other in args:
        if not isinstance(other, dict):
            raise RuntimeFault(
                f"no implicit conversion of {class_name(other)} into Hash", "TypeError"
            )
        merged.update(other)
    return merged


@method("Hash", "each", "each_pair")
def hash_each(receiver: dict[HashKey, Any], args: list[Any], block: Optional[Block]) -> dict[HashKey, Any]:
    body: Block = block_require(block)
    for key, value in list(receiver.items()):
        body([key.value, value])
    return receiver


@method("Hash", "select", "filter")
def hash_select(receiver: dict[HashKey, Any], args: list[Any], block: Optional[Block]) -> dict[HashKey, Any]:
    body: Block = block_require(block)
    return {k: v for k, v in receiver.items() if truthy(body(k.value, v))}


@method("Hash", "reject")
def hash_reject(receiver: dict[HashKey, Any], args: list[Any], block: Optional[Block]) -> dict[HashKey, Any]:
    body: Block = block_require(block)
    return {k: v for k, v in receiver.items() if not truthy(body(k.value, v))}


@method("Hash", "transform_values")
def hash_transform_values(
    receiver: dict[HashKey, Any], args: list[Any], block: Optional[Block]
) -> dict[HashKey, Any]:
    body: Block = block_require(block)
    return {k: body(v) for k, v in receiver.items()}


@method("Hash", "invert")
def hash_invert(receiver: dict[HashKey, Any], args: list[Any], block: Optional[Block]) -> dict[HashKey, Any]:
    return {hash_key(v): k.value for k, v in receiver.items()}


# --------------------------------------------------------------------------
# Range
# --------------------------------------------------------------------------


@method("Range", "first", "begin")
def range_first(receiver: Range, args: list[Any], block: Optional[Block]) -> Any:
    if args:
        return enum_first(receiver, args, block)
    return receiver.first


@method("Range", "last")
def range_last(receiver: Range, args: list[Any], block: Optional[Block]) -> Any:
    if args:
        count: int = integer_require(args[0])
        if count < 0:
            raise RuntimeFault("negative array size", "ArgumentError")
        return list(receiver.span()[-count:]) if count else []
    return receiver.last


@method("Range", "size")
def range_size(receiver: Range, args: list[Any], block: Optional[Block]) -> int:
    span: range = receiver.span()
    return max(0, span.stop - span.start)


@method("Range", "include?", "member?", "cover?")
def range_include(receiver: Range, args: list[Any], block: Optional[Block]) -> bool:
    arity_check(args, 1)
    return args[0] in receiver


@method("Range", "exclude_end?")
def range_exclude_end(receiver: Range, args: list[Any], block: Optional[Block]) -> bool:
    return receiver.exclusive


@method("Range", "step")
def range_step(receiver: Range, args: list[Any], block: Optional[Block]) -> Any:
    arity_check(args, 1)
    stride: int = integer_require(args[0])
    if stride <= 0:
        raise RuntimeFault("step can't be negative or zero", "ArgumentError")
    stepped: range = receiver.span()[::stride]
    if block is None:
        return list(stepped)
    for item in stepped:
        block(item)
    return receiver
