"""Diagnostics core types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from conch.text import TextRange

if TYPE_CHECKING:
    from conch.diagnostics.codes import DiagnosticSpec

Severity = Literal["error", "warning"]


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Structured issue emitted by the lexer, parser and analyzer."""

    code: str
    message: str
    range: TextRange
    severity: Severity = "error"
    hint: str | None = None
    category: str | None = None

    @property
    def why(self) -> str:
        return self.message

    @property
    def span(self) -> TextRange:
        return self.range

    @staticmethod
    def from_spec(spec: DiagnosticSpec, range: TextRange, message: str | None = None) -> Diagnostic:
        return Diagnostic(
            code=spec.code,
            message=spec.message if message is None else message,
            range=range,
            severity=spec.severity,
            hint=spec.hint,
            category=spec.category,
        )


Issue = Diagnostic
