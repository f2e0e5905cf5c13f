"""
The persistent execution context.

One `ExecutionContext` is created when the loop starts and is passed by
reference into every evaluation, so bindings made by one fragment are visible
to the next. Blocks and method bodies run in child contexts:

- a block scope sees the enclosing bindings; assigning a name that already
  exists outside updates it there, new names stay in the block
- a method scope starts empty and shares only the subject
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Self
from ripl.lib.values import Function, MainObject


@dataclass
class ExecutionContext:
    """Bindings plus the implicit subject of unqualified method lookups.

    Attributes:
        bindings: Names bound in this scope
        subject: Receiver of unqualified calls (`self`)
        parent: Enclosing scope, None for top-level and method scopes
    """

    bindings: dict[str, Any] = field(default_factory=dict)
    subject: MainObject = field(default_factory=MainObject)
    parent: Optional["ExecutionContext"] = None

    def scope_find(self: Self, name: str) -> Optional["ExecutionContext"]:
        """Return the innermost scope that binds `name`, if any."""
        scope: Optional[ExecutionContext] = self
        while scope is not None:
            if name in scope.bindings:
                return scope
            scope = scope.parent
        return None

    def contains(self: Self, name: str) -> bool:
        return self.scope_find(name) is not None

    def lookup(self: Self, name: str) -> Any:
        """Resolve a binding.

        Raises:
            KeyError: If no scope binds the name
        """
        scope: Optional[ExecutionContext] = self.scope_find(name)
        if scope is None:
            raise KeyError(name)
        return scope.bindings[name]

    def assign(self: Self, name: str, value: Any) -> Any:
        scope: Optional[ExecutionContext] = self.scope_find(name)
        (scope or self).bindings[name] = value
        return value

    def unbind(self: Self, name: str) -> bool:
        """Remove a local binding. Returns False if it was not bound here."""
        return self.bindings.pop(name, _MISSING) is not _MISSING

    def method_find(self: Self, name: str) -> Optional[Function]:
        return self.subject.methods.get(name)

    def method_define(self: Self, function: Function) -> None:
        self.subject.methods[function.name] = function

    def block_scope(self: Self) -> "ExecutionContext":
        return ExecutionContext(subject=self.subject, parent=self)

    def method_scope(self: Self) -> "ExecutionContext":
        return ExecutionContext(subject=self.subject)

    def local_names(self: Self) -> list[str]:
        """Visible binding names, innermost scope first."""
        names: list[str] = []
        scope: Optional[ExecutionContext] = self
        while scope is not None:
            names.extend(n for n in scope.bindings if n not in names)
            scope = scope.parent
        return names


_MISSING: Any = object()
