"""Runtime state: scopes, trace and pending control flow."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from conch.ast import LastStatement


@dataclass(frozen=True, slots=True)
class ExecutionOptions:
    """Limits applied while executing a script."""

    max_call_depth: int = 64

    def __post_init__(self) -> None:
        if self.max_call_depth < 1:
            raise ValueError("max_call_depth must be positive")


@dataclass(slots=True, eq=False)
class Scope:
    """One frame of the variable scope chain."""

    vars: dict[str, object] = field(default_factory=dict)
    up: Scope | None = None
    root: bool = False

    def child(self, *, root: bool = False) -> Scope:
        return Scope(up=self, root=root)

    def find(self, name: str) -> Scope | None:
        """Innermost frame that defines `name`."""
        scope: Scope | None = self
        while scope is not None:
            if name in scope.vars:
                return scope
            scope = scope.up
        return None

    def has(self, name: str) -> bool:
        return self.find(name) is not None

    def get(self, name: str) -> object:
        scope = self.find(name)
        if scope is None:
            return None
        return scope.vars[name]

    def assign(self, name: str, value: object) -> None:
        scope = self.find(name) or self
        scope.vars[name] = value

    def visible(self) -> dict[str, object]:
        """Every visible binding, inner frames shadowing outer ones."""
        frames: list[Scope] = []
        scope: Scope | None = self
        while scope is not None:
            frames.append(scope)
            scope = scope.up

        names: dict[str, object] = {}
        for frame in reversed(frames):
            names.update(frame.vars)
        return names


@dataclass(frozen=True, slots=True)
class TraceEntry:
    fn: object
    origin: Literal["host", "script"]
    fn_name: str | None = None
    line: int | None = None


@dataclass(frozen=True, slots=True)
class PendingStatement:
    """A `break`, `continue` or `return` waiting for its handler."""

    scope: Scope
    node: LastStatement
    values: tuple[object, ...] = ()


@dataclass(slots=True)
class ExecutionState:
    globals: dict[str, object]
    scope: Scope
    trace: list[TraceEntry] = field(default_factory=list)
    last_statement: PendingStatement | None = None
    options: ExecutionOptions = field(default_factory=ExecutionOptions)
    call_depth: int = 0


def create_state(options: ExecutionOptions | None = None) -> ExecutionState:
    return ExecutionState(
        globals={},
        scope=Scope(root=True),
        options=options or ExecutionOptions(),
    )
