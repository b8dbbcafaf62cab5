#!/usr/bin/env python3
"""Quick perf benchmark for parsing and analyzing conch scripts."""

from __future__ import annotations

import argparse
import statistics
import time
from pathlib import Path

from tqdm import tqdm

from conch import create_vm, parse
from conch.analysis import analyze, parse_cached


def _collect_files(root: Path) -> list[Path]:
    return sorted(path for path in root.rglob("*.conch") if path.is_file())


def _run_once(texts: list[str], *, label: str, show_progress: bool, with_analysis: bool) -> tuple[float, int]:
    vm = create_vm()
    start = time.perf_counter()
    total_issues = 0
    iterator = tqdm(texts, desc=label, unit="file") if show_progress else texts
    for text in iterator:
        if with_analysis:
            total_issues += len(analyze(vm, text, len(text)).issues)
        else:
            total_issues += len(parse(text).issues)
    return time.perf_counter() - start, total_issues


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark conch parsing throughput")
    parser.add_argument("root", type=Path, help="Directory with *.conch files")
    parser.add_argument("--runs", type=int, default=5, help="Measured runs")
    parser.add_argument("--warmups", type=int, default=1, help="Warmup runs")
    parser.add_argument("--analyze", action="store_true", help="Run the analyzer instead of the bare parser")
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable tqdm progress bars (useful for pure timing)",
    )
    args = parser.parse_args()

    files = _collect_files(args.root)
    if not files:
        print(f"No *.conch files under {args.root}")
        return 1
    texts = [path.read_text(encoding="utf-8") for path in files]

    for index in range(args.warmups):
        _run_once(texts, label=f"warmup {index + 1}", show_progress=not args.no_progress, with_analysis=args.analyze)

    durations: list[float] = []
    total_issues = 0
    for index in range(args.runs):
        # Every measured run starts with a cold parse cache.
        parse_cached.cache_clear()
        duration, total_issues = _run_once(
            texts,
            label=f"run {index + 1}",
            show_progress=not args.no_progress,
            with_analysis=args.analyze,
        )
        durations.append(duration)

    print(f"files={len(files)} issues={total_issues}")
    print(f"mean={statistics.mean(durations):.4f}s min={min(durations):.4f}s max={max(durations):.4f}s")
    if len(durations) > 1:
        print(f"stdev={statistics.stdev(durations):.4f}s")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
