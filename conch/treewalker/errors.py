"""Runtime failure type."""

from __future__ import annotations

from typing import TYPE_CHECKING

from conch.text import TextRange

if TYPE_CHECKING:
    from conch.treewalker.state import TraceEntry


class ScriptError(Exception):
    """A runtime failure inside a script.

    Carries the failing span and a snapshot of the call trace taken where the
    error was raised, since trace entries are popped while it propagates.
    """

    def __init__(
        self,
        message: str,
        span: TextRange | None = None,
        trace: tuple[TraceEntry, ...] = (),
    ) -> None:
        super().__init__(message)
        self.message = message
        self.span = span
        self.trace = trace

    def describe(self) -> str:
        if self.span is None:
            return self.message
        return f"{self.message} [{self.span.start}, {self.span.end})"

    def __str__(self) -> str:
        return self.describe()
