"""Parser infrastructure (token source + recursive-descent parser)."""

from conch.parser.grammar import (
    parse_block,
    parse_expression,
    parse_expression_or_command,
    parse_source,
    parse_statement,
)
from conch.parser.options import ParserOptions
from conch.parser.parse import ParseOutput, parse
from conch.parser.parse_lists import ParseSeparatedList
from conch.parser.parse_recovery import ParseRecoveryTokenSet, RecoveryError
from conch.parser.parser import Parser, ParserProgress
from conch.parser.token_source import TokenSource

__all__ = [
    "ParseOutput",
    "ParseRecoveryTokenSet",
    "ParseSeparatedList",
    "Parser",
    "ParserOptions",
    "ParserProgress",
    "RecoveryError",
    "TokenSource",
    "parse",
    "parse_block",
    "parse_expression",
    "parse_expression_or_command",
    "parse_source",
    "parse_statement",
]
