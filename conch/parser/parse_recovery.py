"""Token-set based parser recovery."""

from dataclasses import dataclass, replace
from enum import StrEnum

from conch.ast import ErrorNode
from conch.lexer import Token, TokenKind
from conch.parser.parser import Parser


class RecoveryError(StrEnum):
    EOF = "eof"


@dataclass(frozen=True, slots=True)
class ParseRecoveryTokenSet:
    """Recover by consuming tokens into an ErrorNode until a safe token is reached."""

    recovery_set: frozenset[TokenKind]
    line_break: bool = False

    def enable_recovery_on_line_break(self) -> "ParseRecoveryTokenSet":
        return replace(self, line_break=True)

    def recover(self, parser: Parser) -> tuple[ErrorNode | None, RecoveryError | None]:
        """Skip the offending token plus everything up to the next safe token."""
        if parser.at(TokenKind.EOF):
            return None, RecoveryError.EOF

        start = parser.position
        tokens: list[Token] = [parser.bump()]
        while not parser.at(TokenKind.EOF) and not self.is_at_recovered(parser):
            tokens.append(parser.bump())

        return ErrorNode(tuple(tokens), parser.span_from(start)), None

    def is_at_recovered(self, parser: Parser) -> bool:
        return parser.at_set(self.recovery_set) or (self.line_break and parser.has_preceding_line_break)
