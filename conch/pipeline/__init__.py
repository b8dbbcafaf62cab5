"""Host-facing VM and run/analyze entrypoints."""

from conch.pipeline.entrypoints import analyze, run
from conch.pipeline.results import RunResult
from conch.pipeline.vm import TypeAnalysisInfo, attach_info, create_vm, set_command, set_variable

__all__ = [
    "RunResult",
    "TypeAnalysisInfo",
    "analyze",
    "attach_info",
    "create_vm",
    "run",
    "set_command",
    "set_variable",
]
