"""
evaluator.py

Execute parsed fragments against the persistent ExecutionContext.

The Evaluator walks the lark parse tree top-down (a lark `Interpreter`), so
control flow constructs decide themselves which subtrees run. Faults raised
anywhere in the walk are turned into an Error `EvaluationResult` by
`evaluate()`; nothing escapes to the Loop Driver.

Control flow inside the tree is carried by three internal signals:

- `BreakSignal`: `break` inside `while`/`until` or a block
- `NextSignal`: `next` inside `while`/`until` or a block
- `ReturnSignal`: `return` inside a method body
"""

import re
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional
from lark import Token, Tree
from lark.visitors import Interpreter
from rich.console import Console
from ripl.lib import builtins
from ripl.lib.context import ExecutionContext
from ripl.lib.errors import (
    ParseIncomplete,
    ReplError,
    RuntimeFault,
    SyntaxFault,
    argument_error,
    name_error,
)
from ripl.lib.log import LOG
from ripl.lib.parser import parse_fragment
from ripl.lib.values import (
    Block,
    Function,
    HashKey,
    MainObject,
    Range,
    Symbol,
    hash_key,
    number_is,
    to_s,
    truthy,
)
from ripl.models.dataModel import EvaluationResult, FaultKind, InputFragment

console: Console = Console()

ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "e": "\x1b",
    "s": " ",
    "0": "\0",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "v": "\v",
}

UNICODE_ESCAPE: re.Pattern[str] = re.compile(r"u([0-9a-fA-F]{4})")


class BreakSignal(Exception):
    def __init__(self, value: Any = None) -> None:
        super().__init__()
        self.value: Any = value


class NextSignal(Exception):
    def __init__(self, value: Any = None) -> None:
        super().__init__()
        self.value: Any = value


class ReturnSignal(Exception):
    def __init__(self, value: Any = None) -> None:
        super().__init__()
        self.value: Any = value


class BlockBreak(Exception):
    """A `break` that left a block; unwinds to the call the block was given to."""

    def __init__(self, tag: object, value: Any) -> None:
        super().__init__()
        self.tag: object = tag
        self.value: Any = value


class Evaluator(Interpreter):
    """Tree-walking evaluator bound to one execution context.

    Attributes:
        context: Scope the current subtree runs in; swapped while running
            blocks and method bodies
        console: Destination of `puts`, `print` and `p`
    """

    def __init__(self, context: ExecutionContext, output: Optional[Console] = None) -> None:
        self.context: ExecutionContext = context
        self.console: Console = output or console

    def write(self, text: str) -> None:
        self.console.print(
            text,
            end="",
            markup=False,
            highlight=False,
            emoji=False,
            soft_wrap=True,
        )

    @contextmanager
    def scope(self, context: ExecutionContext) -> Iterator[ExecutionContext]:
        outer: ExecutionContext = self.context
        self.context = context
        try:
            yield context
        finally:
            self.context = outer

    # ---------------------------------------------------------------- statements

    def start(self, tree: Tree) -> Any:
        return self.visit(tree.children[0])

    def body(self, tree: Tree) -> Any:
        value: Any = None
        for statement in tree.children:
            value = self.visit(statement)
        return value

    def if_modifier(self, tree: Tree) -> Any:
        statement, condition = tree.children
        if truthy(self.visit(condition)):
            return self.visit(statement)
        return None

    def unless_modifier(self, tree: Tree) -> Any:
        statement, condition = tree.children
        if not truthy(self.visit(condition)):
            return self.visit(statement)
        return None

    def return_stmt(self, tree: Tree) -> Any:
        raise ReturnSignal(self.value_optional(tree))

    def break_stmt(self, tree: Tree) -> Any:
        raise BreakSignal(self.value_optional(tree))

    def next_stmt(self, tree: Tree) -> Any:
        raise NextSignal(self.value_optional(tree))

    def value_optional(self, tree: Tree) -> Any:
        return self.visit(tree.children[0]) if tree.children else None

    def def_stmt(self, tree: Tree) -> Symbol:
        name: Token = tree.children[0]
        params: list[str] = []
        if len(tree.children) == 3:
            params = [str(token) for token in tree.children[1].children]
        if len(set(params)) != len(params):
            raise SyntaxFault("duplicated argument name")
        self.context.method_define(Function(str(name), params, tree.children[-1]))
        LOG(f"Defined method {name}({', '.join(params)})")
        return Symbol(str(name))

    # ----------------------------------------------------------------- control flow

    def if_expr(self, tree: Tree) -> Any:
        condition, then_body, *rest = tree.children
        if truthy(self.visit(condition)):
            return self.visit(then_body)
        for clause in rest:
            if clause.data == "elsif_clause":
                if truthy(self.visit(clause.children[0])):
                    return self.visit(clause.children[1])
            else:
                return self.visit(clause.children[0])
        return None

    def unless_expr(self, tree: Tree) -> Any:
        condition, then_body, *rest = tree.children
        if not truthy(self.visit(condition)):
            return self.visit(then_body)
        if rest:
            return self.visit(rest[0].children[0])
        return None

    def loop_run(self, condition: Tree, body: Tree, until: bool) -> Any:
        while truthy(self.visit(condition)) != until:
            try:
                self.visit(body)
            except NextSignal:
                continue
            except BreakSignal as signal:
                return signal.value
        return None

    def while_expr(self, tree: Tree) -> Any:
        return self.loop_run(tree.children[0], tree.children[1], until=False)

    def until_expr(self, tree: Tree) -> Any:
        return self.loop_run(tree.children[0], tree.children[1], until=True)

    # ------------------------------------------------------------------ operators

    def and_op(self, tree: Tree) -> Any:
        left: Any = self.visit(tree.children[0])
        if not truthy(left):
            return left
        return self.visit(tree.children[1])

    def or_op(self, tree: Tree) -> Any:
        left: Any = self.visit(tree.children[0])
        if truthy(left):
            return left
        return self.visit(tree.children[1])

    def not_op(self, tree: Tree) -> bool:
        return not truthy(self.visit(tree.children[-1]))

    def neg(self, tree: Tree) -> Any:
        operand: Any = self.visit(tree.children[-1])
        if not number_is(operand):
            raise builtins.method_missing("-@", operand)
        return -operand

    def binop(self, tree: Tree) -> Any:
        left, op, right = tree.children
        return builtins.binary_op(str(op), self.visit(left), self.visit(right))

    def compare(self, tree: Tree) -> bool:
        left, op, right = tree.children
        return builtins.compare_op(str(op), self.visit(left), self.visit(right))

    def range_lit(self, tree: Tree) -> Range:
        first, op, last = tree.children
        return Range(self.visit(first), self.visit(last), exclusive=str(op) == "...")

    # ----------------------------------------------------------------- assignment

    def assign(self, tree: Tree) -> Any:
        name, value = tree.children
        return self.context.assign(str(name), self.visit(value))

    def aug_assign(self, tree: Tree) -> Any:
        name, op, value = tree.children
        current: Any = self.context.lookup(str(name)) if self.context.contains(str(name)) else None
        result: Any = builtins.binary_op(str(op)[0], current, self.visit(value))
        return self.context.assign(str(name), result)

    def index_assign(self, tree: Tree) -> Any:
        receiver, index, value = (self.visit(child) for child in tree.children)
        return builtins.index_set(receiver, index, value)

    def index(self, tree: Tree) -> Any:
        receiver, index = (self.visit(child) for child in tree.children)
        return builtins.index_get(receiver, index)

    # ------------------------------------------------------------------- literals

    def int_lit(self, tree: Tree) -> int:
        return int(tree.children[0])

    def float_lit(self, tree: Tree) -> float:
        return float(tree.children[0])

    def symbol_lit(self, tree: Tree) -> Symbol:
        return Symbol(str(tree.children[0])[1:])

    def true_lit(self, tree: Tree) -> bool:
        return True

    def false_lit(self, tree: Tree) -> bool:
        return False

    def nil_lit(self, tree: Tree) -> None:
        return None

    def self_ref(self, tree: Tree) -> MainObject:
        return self.context.subject

    def array_lit(self, tree: Tree) -> list[Any]:
        return [self.visit(child) for child in tree.children]

    def hash_lit(self, tree: Tree) -> dict[HashKey, Any]:
        result: dict[HashKey, Any] = {}
        for pair in tree.children:
            key: HashKey = hash_key(self.visit(pair.children[0]))
            result[key] = self.visit(pair.children[1])
        return result

    def string_lit(self, tree: Tree) -> str:
        token: str = str(tree.children[0])
        if token[0] == "'":
            return re.sub(r"\\([\\'])", r"\1", token[1:-1])
        return self.string_interpolate(token[1:-1])

    def string_interpolate(self, raw: str) -> str:
        """Process escapes and `#{...}` segments of a double-quoted literal."""
        parts: list[str] = []
        i: int = 0
        while i < len(raw):
            ch: str = raw[i]
            if ch == "\\" and i + 1 < len(raw):
                escaped: str = raw[i + 1]
                unicode: Optional[re.Match[str]] = UNICODE_ESCAPE.match(raw, i + 1)
                if unicode:
                    parts.append(chr(int(unicode.group(1), 16)))
                    i = unicode.end()
                    continue
                parts.append(ESCAPES.get(escaped, escaped))
                i += 2
            elif raw.startswith("#{", i):
                end: int = self.interpolation_end(raw, i + 2)
                code: str = raw[i + 2 : end]
                value: Any = self.visit(parse_fragment(code)) if code.strip() else None
                parts.append(to_s(value))
                i = end + 1
            else:
                parts.append(ch)
                i += 1
        return "".join(parts)

    @staticmethod
    def interpolation_end(raw: str, start: int) -> int:
        depth: int = 1
        for position in range(start, len(raw)):
            if raw[position] == "{":
                depth += 1
            elif raw[position] == "}":
                depth -= 1
                if depth == 0:
                    return position
        raise SyntaxFault("unterminated string interpolation")

    # ------------------------------------------------------------ names and calls

    def var(self, tree: Tree) -> Any:
        name: str = str(tree.children[0])
        if self.context.contains(name):
            return self.context.lookup(name)
        function: Optional[Function] = self.context.method_find(name)
        if function is not None:
            return self.function_invoke(function, [])
        if name in builtins.CONSTANTS:
            return builtins.CONSTANTS[name]
        if name in builtins.FUNCTIONS:
            return builtins.FUNCTIONS[name](self, [], None)
        if name[0].isupper():
            raise RuntimeFault(f"uninitialized constant {name}", "NameError")
        raise name_error(name)

    def call_args(self, tree: Tree) -> list[Any]:
        return [self.visit(child) for child in tree.children]

    def call_parts(self, children: list[Any]) -> tuple[list[Any], Optional[Tree]]:
        """Split trailing `call_args` / `block` subtrees of a call node."""
        args: list[Any] = []
        block: Optional[Tree] = None
        for child in children:
            if isinstance(child, Tree) and child.data == "call_args":
                args = self.visit(child)
            elif isinstance(child, Tree) and child.data == "block":
                block = child
        return args, block

    def func_call(self, tree: Tree) -> Any:
        name: str = str(tree.children[0])
        args, block_tree = self.call_parts(tree.children[1:])
        function: Optional[Function] = self.context.method_find(name)
        if function is not None:
            return self.function_invoke(function, args)
        builtin: Optional[Callable[..., Any]] = builtins.FUNCTIONS.get(name)
        if builtin is None:
            raise builtins.method_missing(name, self.context.subject)
        return self.with_block(block_tree, lambda block: builtin(self, args, block))

    def method_call(self, tree: Tree) -> Any:
        receiver: Any = self.visit(tree.children[0])
        name: str = str(tree.children[1])
        args, block_tree = self.call_parts(tree.children[2:])
        if isinstance(receiver, MainObject):
            function: Optional[Function] = self.context.method_find(name)
            if function is not None:
                return self.function_invoke(function, args)
        method: Optional[builtins.Method] = builtins.method_get(receiver, name)
        if method is None:
            raise builtins.method_missing(name, receiver)
        return self.with_block(block_tree, lambda block: method(receiver, args, block))

    def with_block(self, block_tree: Optional[Tree], call: Callable[[Optional[Block]], Any]) -> Any:
        """Run a call with its block; a `break` in the block ends the call."""
        if block_tree is None:
            return call(None)
        tag: object = object()
        try:
            return call(self.block_make(block_tree, tag))
        except BlockBreak as signal:
            if signal.tag is not tag:
                raise
            return signal.value

    def block_make(self, tree: Tree, tag: object) -> Block:
        params: list[str] = []
        if len(tree.children) == 2:
            params = [str(token) for token in tree.children[0].children]
        body: Tree = tree.children[-1]
        defining: ExecutionContext = self.context

        def block(*args: Any) -> Any:
            if len(params) > 1 and len(args) == 1 and isinstance(args[0], list):
                args = tuple(args[0])
            scope: ExecutionContext = defining.block_scope()
            for position, name in enumerate(params):
                scope.bindings[name] = args[position] if position < len(args) else None
            with self.scope(scope):
                try:
                    return self.visit(body)
                except NextSignal as signal:
                    return signal.value
                except BreakSignal as signal:
                    raise BlockBreak(tag, signal.value)

        return block

    def function_invoke(self, function: Function, args: list[Any]) -> Any:
        if len(args) != len(function.params):
            raise argument_error(len(args), str(len(function.params)))
        scope: ExecutionContext = self.context.method_scope()
        scope.bindings.update(zip(function.params, args))
        with self.scope(scope):
            try:
                return self.visit(function.body)
            except ReturnSignal as signal:
                return signal.value
            except BreakSignal:
                raise SyntaxFault("Invalid break")
            except NextSignal:
                raise SyntaxFault("Invalid next")


def error_result(error: ReplError, fault: FaultKind) -> EvaluationResult:
    return EvaluationResult(
        error=error.message,
        error_class=error.classification,
        fault=fault,
        success=False,
    )


def evaluate(
    fragment: InputFragment,
    context: ExecutionContext,
    output: Optional[Console] = None,
) -> EvaluationResult:
    """Evaluate a fragment against the persistent context.

    Args:
        fragment: A complete fragment, with or without a parse tree
        context: The loop's execution context; bindings are written to it
        output: Console for program output, defaults to the module console

    Returns:
        EvaluationResult: Value on success, Error for any fault
    """
    evaluator: Evaluator = Evaluator(context, output)
    try:
        tree: Tree = fragment.tree if fragment.tree is not None else parse_fragment(fragment.text)
        value: Any = evaluator.visit(tree)
    except ParseIncomplete as e:
        return error_result(e, FaultKind.INCOMPLETE)
    except SyntaxFault as e:
        return error_result(e, FaultKind.SYNTAX)
    except RuntimeFault as e:
        LOG(f"{e.classification}: {e.message}")
        return error_result(e, FaultKind.RUNTIME)
    except ReturnSignal as signal:
        value = signal.value
    except (BreakSignal, BlockBreak):
        return error_result(SyntaxFault("Invalid break"), FaultKind.SYNTAX)
    except NextSignal:
        return error_result(SyntaxFault("Invalid next"), FaultKind.SYNTAX)
    except RecursionError:
        return error_result(
            RuntimeFault("stack level too deep", "SystemStackError"), FaultKind.RUNTIME
        )
    except Exception as e:
        LOG(f"Unexpected evaluation failure: {e!r}")
        return error_result(RuntimeFault(str(e) or type(e).__name__), FaultKind.RUNTIME)
    return EvaluationResult(value=value)
