#!/usr/bin/env python3
"""Print the token stream of a conch source file or snippet."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from conch.lexer import Lexer, dump_tokens


def main() -> int:
    parser = argparse.ArgumentParser(description="Dump conch tokens with ranges and flags")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("path", nargs="?", type=Path, help="Source file to tokenize")
    source.add_argument("-e", "--expr", help="Tokenize this text instead of a file")
    parser.add_argument(
        "--no-diagnostics",
        action="store_true",
        help="Do not print lexer diagnostics after the tokens",
    )
    args = parser.parse_args()

    text = args.expr if args.expr is not None else args.path.read_text(encoding="utf-8")
    lexer = Lexer(text)
    tokens = lexer.lex()
    diagnostics = lexer.diagnostics
    dump_tokens(tokens, None if args.no_diagnostics else diagnostics)
    return 1 if diagnostics else 0


if __name__ == "__main__":
    sys.exit(main())
