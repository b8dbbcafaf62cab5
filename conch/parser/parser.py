"""Recursive-descent parser core."""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from conch.diagnostics import (
    PARSER_EXPECTED_TOKEN,
    PARSER_TOO_DEEP,
    Diagnostic,
    DiagnosticSpec,
)
from conch.lexer import Token, TokenKind, display_kind
from conch.parser.options import ParserOptions
from conch.parser.token_source import TokenSource
from conch.text import TextRange


@dataclass(slots=True)
class ParserProgress:
    """Detect parser stalls inside list-style loops."""

    _position: int | None = None

    def has_progressed(self, parser: "Parser") -> bool:
        has_progressed = self._position is None or self._position < parser.position
        self._position = parser.position
        return has_progressed

    def assert_progressing(self, parser: "Parser") -> None:
        if not self.has_progressed(parser):
            raise RuntimeError(f"Parser stopped making progress at {parser.current.name} {parser.current_range}")


class Parser:
    """Parser over a trivia-free token stream that builds AST nodes directly.

    Node spans are computed with `span_from`, which always ends at the last
    consumed token, so a node never claims text it did not parse.
    """

    def __init__(self, source: TokenSource, options: ParserOptions | None = None) -> None:
        self._source = source
        self._options = options or ParserOptions()
        self._diagnostics: list[Diagnostic] = []
        self._last_end = 0
        self._depth = 0
        self._too_deep_reported = False

    @property
    def source(self) -> TokenSource:
        return self._source

    @property
    def options(self) -> ParserOptions:
        return self._options

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return self._diagnostics

    @property
    def current(self) -> TokenKind:
        return self._source.current

    @property
    def current_token(self) -> Token:
        return self._source.current_token

    @property
    def current_range(self) -> TextRange:
        return self._source.current_range

    @property
    def position(self) -> int:
        return self._source.current_range.start

    @property
    def has_preceding_line_break(self) -> bool:
        return self._source.has_preceding_line_break

    @property
    def has_preceding_trivia(self) -> bool:
        return self._source.has_preceding_trivia

    @property
    def is_too_deep(self) -> bool:
        return self._depth > self._options.max_depth

    def at(self, kind: TokenKind) -> bool:
        return self.current == kind

    def at_set(self, kinds: frozenset[TokenKind] | set[TokenKind]) -> bool:
        return self.current in kinds

    def nth(self, n: int) -> TokenKind:
        return self._source.nth(n)

    def nth_token(self, n: int) -> Token:
        return self._source.nth_token(n)

    @contextmanager
    def nested(self, levels: int = 1) -> Iterator[None]:
        self._depth += levels
        try:
            yield
        finally:
            self._depth -= levels

    def report_too_deep(self) -> None:
        if not self._too_deep_reported:
            self._too_deep_reported = True
            self._diagnostics.append(Diagnostic.from_spec(PARSER_TOO_DEEP, self.current_range))

    def bump(self) -> Token:
        token = self._source.bump()
        if token.kind != TokenKind.EOF:
            self._last_end = token.range.end
        return token

    def eat(self, kind: TokenKind) -> Token | None:
        if self.current == kind:
            return self.bump()
        return None

    def expect(self, kind: TokenKind, opener: Token | None = None) -> Token | None:
        token = self.eat(kind)
        if token is not None:
            return token
        message = f"Expected `{display_kind(kind)}`"
        if opener is not None:
            message += f" to close `{opener.text}` at {opener.range.start}"
        if self.at(TokenKind.EOF):
            message += " but reached the end of input"
        else:
            message += f" but found `{self.current_token.text}`"
        self.error_at(PARSER_EXPECTED_TOKEN, self.current_range, message)
        return None

    def error_at(self, spec: DiagnosticSpec, range: TextRange, message: str | None = None) -> None:
        self.error(Diagnostic.from_spec(spec, range, message))

    def error(self, diagnostic: Diagnostic) -> None:
        if self._diagnostics:
            previous = self._diagnostics[-1]
            if previous.range.start == diagnostic.range.start:
                return
        self._diagnostics.append(diagnostic)

    def span_from(self, start: int) -> TextRange:
        return TextRange(start, max(start, self._last_end))

    def finish(self) -> list[Diagnostic]:
        return self._diagnostics
