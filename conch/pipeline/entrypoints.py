"""Public entrypoints: run and analyze source text against a VM."""

from __future__ import annotations

import logging

from conch.analysis import AnalysisOptions, AnalysisResult, LanguageVm
from conch.analysis import analyze as _analyze
from conch.parser import ParserOptions, parse
from conch.pipeline.results import RunResult
from conch.treewalker import execute

log = logging.getLogger(__name__)


def run(vm: LanguageVm, text: str, options: ParserOptions | None = None) -> RunResult:
    """Parse and execute `text`.

    Parser issues only fail the run when no tree could be built at all;
    otherwise the tree is executed and any error node reached fails there.
    """
    parsed = parse(text, options=options)
    if parsed.result is None:
        if parsed.issues:
            return RunResult(ok=False, why=[issue.message for issue in parsed.issues])
        return RunResult(ok=True, values=None)

    outcome = execute(vm.state, parsed.result, text)
    if outcome.err is not None:
        log.debug("Run failed: %s", outcome.err.describe())
        return RunResult(ok=False, why=[outcome.err.describe()])

    values = None if outcome.values is None else list(outcome.values)
    return RunResult(ok=True, values=values)


def analyze(
    vm: LanguageVm,
    text: str,
    cursor: int,
    options: AnalysisOptions | None = None,
) -> AnalysisResult:
    return _analyze(vm, text, cursor, options)
