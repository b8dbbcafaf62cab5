"""Diagnostics."""

from conch.diagnostics.codes import (
    ANALYSIS_ARGUMENT_COUNT,
    ANALYSIS_TOO_DEEP,
    ANALYSIS_TYPE_MISMATCH,
    ANALYSIS_UNKNOWN_COMMAND,
    ANALYSIS_UNKNOWN_VARIABLE,
    LEXER_INVALID_CHARACTER,
    LEXER_UNTERMINATED_STRING,
    PARSER_EXPECTED_EXPRESSION,
    PARSER_EXPECTED_TOKEN,
    PARSER_INVALID_ASSIGNMENT,
    PARSER_MISSING_SEPARATOR,
    PARSER_TOO_DEEP,
    PARSER_UNEXPECTED_TOKEN,
    PARSER_UNREACHABLE_STATEMENT,
    DiagnosticSpec,
)
from conch.diagnostics.diagnostic import Diagnostic, Issue, Severity
from conch.diagnostics.report import (
    collect_diagnostics,
    format_diagnostic,
    has_errors,
    sort_diagnostics,
)

__all__ = [
    "ANALYSIS_ARGUMENT_COUNT",
    "ANALYSIS_TOO_DEEP",
    "ANALYSIS_TYPE_MISMATCH",
    "ANALYSIS_UNKNOWN_COMMAND",
    "ANALYSIS_UNKNOWN_VARIABLE",
    "LEXER_INVALID_CHARACTER",
    "LEXER_UNTERMINATED_STRING",
    "PARSER_EXPECTED_EXPRESSION",
    "PARSER_EXPECTED_TOKEN",
    "PARSER_INVALID_ASSIGNMENT",
    "PARSER_MISSING_SEPARATOR",
    "PARSER_TOO_DEEP",
    "PARSER_UNEXPECTED_TOKEN",
    "PARSER_UNREACHABLE_STATEMENT",
    "Diagnostic",
    "DiagnosticSpec",
    "Issue",
    "Severity",
    "collect_diagnostics",
    "format_diagnostic",
    "has_errors",
    "sort_diagnostics",
]
