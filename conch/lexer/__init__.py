"""Lexer."""

from conch.lexer.lexer import (
    Lexer,
    dump_tokens,
    is_identifier,
    number_value,
    string_value,
    token_text,
    tokenize,
)
from conch.lexer.tokens import (
    KEYWORDS,
    Token,
    TokenFlags,
    TokenKind,
    display_kind,
)

__all__ = [
    "KEYWORDS",
    "Lexer",
    "Token",
    "TokenFlags",
    "TokenKind",
    "display_kind",
    "dump_tokens",
    "is_identifier",
    "number_value",
    "string_value",
    "token_text",
    "tokenize",
]
