"""Diagnostic codes and messages."""

from dataclasses import dataclass
from typing import Final, Literal

Severity = Literal["error", "warning"]


@dataclass(frozen=True, slots=True)
class DiagnosticSpec:
    code: str
    message: str
    hint: str | None = None
    severity: Severity = "error"
    category: str | None = None


LEXER_INVALID_CHARACTER: Final[DiagnosticSpec] = DiagnosticSpec(
    code="LEXER_INVALID_CHARACTER",
    message="Unrecognized characters.",
    severity="error",
    category="lexer",
)

LEXER_UNTERMINATED_STRING: Final[DiagnosticSpec] = DiagnosticSpec(
    code="LEXER_UNTERMINATED_STRING",
    message="Unterminated string literal.",
    hint="Close the string with the same quote it was opened with.",
    severity="error",
    category="lexer",
)

PARSER_EXPECTED_TOKEN: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_EXPECTED_TOKEN",
    message="Expected token",
    severity="error",
    category="parser",
)

PARSER_EXPECTED_EXPRESSION: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_EXPECTED_EXPRESSION",
    message="Expected an expression",
    severity="error",
    category="parser",
)

PARSER_UNEXPECTED_TOKEN: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_UNEXPECTED_TOKEN",
    message="Unexpected token",
    severity="error",
    category="parser",
)

PARSER_MISSING_SEPARATOR: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_MISSING_SEPARATOR",
    message="Expected `,` between list items",
    severity="error",
    category="parser",
)

PARSER_UNREACHABLE_STATEMENT: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_UNREACHABLE_STATEMENT",
    message="Statements cannot follow `break`, `continue` or `return` in the same block",
    severity="error",
    category="parser",
)

PARSER_INVALID_ASSIGNMENT: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_INVALID_ASSIGNMENT",
    message="Cannot assign to a computed variable root",
    hint="Assign to `$name`, `name` or a suffix such as `$table.field`.",
    severity="error",
    category="parser",
)

PARSER_TOO_DEEP: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_TOO_DEEP",
    message="Expression nesting is too deep",
    severity="error",
    category="parser",
)

ANALYSIS_UNKNOWN_COMMAND: Final[DiagnosticSpec] = DiagnosticSpec(
    code="ANALYSIS_UNKNOWN_COMMAND",
    message="Unknown command",
    severity="error",
    category="analysis",
)

ANALYSIS_ARGUMENT_COUNT: Final[DiagnosticSpec] = DiagnosticSpec(
    code="ANALYSIS_ARGUMENT_COUNT",
    message="Wrong number of arguments",
    severity="error",
    category="analysis",
)

ANALYSIS_TYPE_MISMATCH: Final[DiagnosticSpec] = DiagnosticSpec(
    code="ANALYSIS_TYPE_MISMATCH",
    message="Argument does not match the declared type",
    severity="error",
    category="analysis",
)

ANALYSIS_UNKNOWN_VARIABLE: Final[DiagnosticSpec] = DiagnosticSpec(
    code="ANALYSIS_UNKNOWN_VARIABLE",
    message="Unknown variable",
    hint="Assign the variable before reading it.",
    severity="warning",
    category="analysis",
)

ANALYSIS_TOO_DEEP: Final[DiagnosticSpec] = DiagnosticSpec(
    code="ANALYSIS_TOO_DEEP",
    message="Input is nested too deeply to analyze",
    severity="warning",
    category="analysis",
)
