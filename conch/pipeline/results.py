"""Run result carriers for the public entrypoints."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RunResult:
    """Outcome of one `run`.

    `values` holds the returned values of a successful run (None when the
    input was empty); `why` holds the failure messages otherwise.
    """

    ok: bool
    values: list[object] | None = None
    why: list[str] | None = None
