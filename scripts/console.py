#!/usr/bin/env python3
"""Interactive conch console with a few demo host commands.

Lines starting with `?` list completions for the rest of the line with the
cursor at its end, e.g. `?&pri`.
"""

from __future__ import annotations

import argparse
import logging
import sys

from conch import (
    CommandArgument,
    CommandType,
    LiteralType,
    UnionType,
    analyze,
    attach_info,
    create_vm,
    run,
    set_command,
    set_variable,
    version,
)
from conch.analysis import LanguageVm
from conch.diagnostics import format_diagnostic
from conch.treewalker import format_value, to_display_string


def build_vm() -> LanguageVm:
    vm = create_vm()

    def print_command(*values: object) -> None:
        print(" ".join(to_display_string(value) for value in values))

    def add(*values: float) -> float:
        return sum(values)

    def log_level(level: str) -> str:
        logging.getLogger().setLevel(level.upper())
        return level

    set_command(vm, "print", print_command)
    set_command(vm, "add", add)
    set_command(vm, "loglevel", log_level)
    set_variable(vm, "version", version)

    attach_info(
        vm,
        "print",
        CommandType("print", "Print values to the console", (CommandArgument("values", varargs=True),)),
    )
    attach_info(
        vm,
        "loglevel",
        CommandType(
            "loglevel",
            "Change the root log level",
            (
                CommandArgument(
                    "level",
                    type=UnionType(tuple(LiteralType(name) for name in ("debug", "info", "warning", "error"))),
                ),
            ),
        ),
    )
    return vm


def complete(vm: LanguageVm, text: str) -> None:
    result = analyze(vm, text, len(text))
    if result.additional_info is not None:
        info = result.additional_info
        print(f"  {info.name}: {info.type}" + (f"  ({info.description})" if info.description else ""))
    for suggestion in result.suggestions:
        print(f"  {suggestion.display}")
    for issue in result.issues:
        print(f"  ! {format_diagnostic(issue)}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Interactive conch console")
    parser.add_argument("-c", "--command", help="Run one line and exit")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)
    vm = build_vm()

    if args.command is not None:
        return 0 if execute_line(vm, args.command) else 1

    while True:
        try:
            line = input("> ")
        except EOFError:
            print()
            return 0
        if line.startswith("?"):
            complete(vm, line[1:])
        else:
            execute_line(vm, line)


def execute_line(vm: LanguageVm, line: str) -> bool:
    result = run(vm, line)
    if not result.ok:
        for message in result.why or ():
            print(f"error: {message}", file=sys.stderr)
        return False
    if result.values:
        print(", ".join(format_value(value) for value in result.values))
    return True


if __name__ == "__main__":
    sys.exit(main())
