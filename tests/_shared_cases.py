"""Centralized conch source cases used across lexer/parser/interpreter tests."""

from __future__ import annotations

from dataclasses import dataclass
import textwrap
from typing import Literal, cast


@dataclass(frozen=True, slots=True)
class ConchCase:
    name: str
    source: str
    should_parse_cleanly: bool = True


def _dedent(text: str) -> str:
    return textwrap.dedent(text).lstrip()


PARSER_CASES: tuple[ConchCase, ...] = (
    ConchCase(name="binary_arithmetic", source="3 + 4\n"),
    ConchCase(name="assign_global_and_dollar_names", source="x = 1\n$y = 2\n"),
    ConchCase(name="command_with_words_and_negative_number", source='print hello "world" 1 -2\n'),
    ConchCase(name="nested_expression_command", source="&print (&add 1 2)\n"),
    ConchCase(
        name="if_elseif_else",
        source=_dedent(
            """
            if ($x > 1) {
                print big
            } elseif ($x == 1) {
                print one
            } else {
                print small
            }
            """
        ),
    ),
    ConchCase(
        name="while_loop",
        source=_dedent(
            """
            i = 0
            while ($i < 3) {
                i = $i + 1
            }
            """
        ),
    ),
    ConchCase(
        name="for_over_vector_with_lambda",
        source=_dedent(
            """
            for ([1, 2, 3]) |v, i| {
                print $v $i
            }
            """
        ),
    ),
    ConchCase(
        name="tables_and_vectors",
        source=_dedent(
            """
            t = {a = 1, b = "two", [3] = true, 4}
            v = [1, [2, 3]]
            print $t.a $v.[2].[1]
            """
        ),
    ),
    ConchCase(
        name="lambda_with_return",
        source=_dedent(
            """
            add2 = |a, b| { return $a + $b }
            print (&add2 1 2)
            """
        ),
    ),
    ConchCase(
        name="comments_and_semicolons",
        source=_dedent(
            """
            -- a comment
            x = 1; y = 2 -- trailing
            print $x; print $y
            """
        ),
    ),
    ConchCase(name="string_escapes", source="print \"a\\\"b\" 'c\\n'\n"),
    ConchCase(name="unary_and_logic", source="ok = !false and (1 < 2 or nil)\n"),
    ConchCase(name="concat_and_power", source='msg = "n=" .. 2 ^ 3 ^ 2\n'),
    ConchCase(name="dollar_paren_read", source='print $("x")\n'),
    ConchCase(name="hyphenated_command_name", source="set-volume 10\n"),
)

INVALID_CASES: tuple[ConchCase, ...] = (
    ConchCase(name="missing_vector_close", source="$x = [1, 2,", should_parse_cleanly=False),
    ConchCase(name="stray_closing_paren", source="x = 1 )\n", should_parse_cleanly=False),
    ConchCase(name="unterminated_string", source='print "abc\n', should_parse_cleanly=False),
    ConchCase(
        name="statement_after_break",
        source="for (3) |i| {\n    break\n    print $i\n}\n",
        should_parse_cleanly=False,
    ),
    ConchCase(name="assign_to_dollar_paren", source='$("x") = 5\n', should_parse_cleanly=False),
    ConchCase(name="if_without_condition", source="if { print hi }\n", should_parse_cleanly=False),
    ConchCase(name="invalid_character", source="x = 1 @ 2\n", should_parse_cleanly=False),
    ConchCase(name="missing_operand", source="x = 1 +\n", should_parse_cleanly=False),
)

ALL_CONCH_CASES: tuple[ConchCase, ...] = PARSER_CASES + INVALID_CASES

type CaseName = Literal[
    "binary_arithmetic",
    "assign_global_and_dollar_names",
    "command_with_words_and_negative_number",
    "nested_expression_command",
    "if_elseif_else",
    "while_loop",
    "for_over_vector_with_lambda",
    "tables_and_vectors",
    "lambda_with_return",
    "comments_and_semicolons",
    "string_escapes",
    "unary_and_logic",
    "concat_and_power",
    "dollar_paren_read",
    "hyphenated_command_name",
    "missing_vector_close",
    "stray_closing_paren",
    "unterminated_string",
    "statement_after_break",
    "assign_to_dollar_paren",
    "if_without_condition",
    "invalid_character",
    "missing_operand",
]

CASE_BY_NAME: dict[CaseName, ConchCase] = cast(
    dict[CaseName, ConchCase],
    {case.name: case for case in ALL_CONCH_CASES},
)


def case_source(name: CaseName) -> str:
    return CASE_BY_NAME[name].source


def case_id(case: ConchCase) -> str:
    return case.name
