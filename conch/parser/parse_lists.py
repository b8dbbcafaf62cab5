"""Reusable separated-list parse loop."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from conch.ast import SeparatedItem
from conch.diagnostics import PARSER_EXPECTED_EXPRESSION, PARSER_MISSING_SEPARATOR
from conch.lexer import TokenKind
from conch.parser.parser import Parser, ParserProgress

T = TypeVar("T")


@dataclass(slots=True)
class ParseSeparatedList(Generic[T]):
    """Comma separated list between delimiters.

    Each item keeps its own trailing separator. A missing element before a
    comma becomes a `None` item; a missing comma between two elements is
    reported and parsing continues.
    """

    parse_element: Callable[[Parser], T | None]
    is_at_element_start: Callable[[Parser], bool]
    is_at_list_end: Callable[[Parser], bool]
    element_name: str = "expression"
    separator: TokenKind = TokenKind.COMMA

    def parse_list(self, parser: Parser) -> tuple[SeparatedItem[T | None], ...]:
        items: list[SeparatedItem[T | None]] = []
        progress = ParserProgress()

        while not parser.at(TokenKind.EOF) and not self.is_at_list_end(parser):
            progress.assert_progressing(parser)
            start = parser.position

            value: T | None = None
            if self.is_at_element_start(parser):
                value = self.parse_element(parser)

            if value is None:
                if not parser.at(self.separator):
                    break
                parser.error_at(PARSER_EXPECTED_EXPRESSION, parser.current_range, f"Expected {self.element_name}")

            separator = parser.eat(self.separator)
            items.append(SeparatedItem(value, separator, parser.span_from(start)))

            if separator is None and not self.is_at_list_end(parser):
                if not self.is_at_element_start(parser):
                    break
                parser.error_at(PARSER_MISSING_SEPARATOR, parser.current_range)

        return tuple(items)
