"""Lexer tokens."""

from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import Final

from conch.text import TextRange


class TokenKind(IntEnum):
    # -------------------------
    # Special / sentinels
    # -------------------------
    EOF = 1

    # -------------------------
    # Trivia tokens (emitted by the lexer)
    # -------------------------
    WHITESPACE = 10
    COMMENT = 11

    # -------------------------
    # Line terminators
    # -------------------------
    NEWLINE = 15  # \n
    SEMICOLON = 16  # ;

    # -------------------------
    # Identifiers / literals
    # -------------------------
    IDENTIFIER = 20
    STRING = 21
    NUMBER = 22
    ERROR = 23  # run of unrecognized characters

    # -------------------------
    # Operators (multi-char included)
    # -------------------------
    EQUAL_EQUAL = 30  # ==
    NOT_EQUAL = 31  # !=
    TILDE_EQUAL = 32  # ~=
    GREATER_THAN = 33  # >
    LESS_THAN = 34  # <
    GREATER_THAN_OR_EQUAL = 35  # >=
    LESS_THAN_OR_EQUAL = 36  # <=
    STAR = 37  # *
    SLASH = 38  # /
    MINUS = 39  # -
    PLUS = 40  # +
    SLASH_SLASH = 41  # //
    CARET = 42  # ^
    PERCENT = 43  # %
    DOT_DOT = 44  # ..
    AND = 45  # and
    OR = 46  # or
    BANG = 47  # !

    # -------------------------
    # Symbols
    # -------------------------
    AMP = 50  # &
    EQUAL = 51  # =
    LPAREN = 52  # (
    RPAREN = 53  # )
    DOLLAR = 54  # $
    COMMA = 55  # ,
    LBRACE = 56  # {
    RBRACE = 57  # }
    LBRACKET = 58  # [
    RBRACKET = 59  # ]
    PIPE = 60  # |
    DOT = 61  # .

    # -------------------------
    # Keywords
    # -------------------------
    TRUE = 70
    FALSE = 71
    NIL = 72
    IF = 73
    ELSE = 74
    ELSEIF = 75
    WHILE = 76
    FOR = 77
    RETURN = 78
    BREAK = 79
    CONTINUE = 80

    @property
    def is_trivia(self) -> bool:
        return self in (TokenKind.WHITESPACE, TokenKind.COMMENT)

    @property
    def is_keyword(self) -> bool:
        return TokenKind.TRUE <= self <= TokenKind.CONTINUE

    @property
    def is_binary_operator(self) -> bool:
        return TokenKind.EQUAL_EQUAL <= self <= TokenKind.OR


KEYWORDS: Final[dict[str, TokenKind]] = {
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
    "nil": TokenKind.NIL,
    "if": TokenKind.IF,
    "else": TokenKind.ELSE,
    "elseif": TokenKind.ELSEIF,
    "while": TokenKind.WHILE,
    "for": TokenKind.FOR,
    "return": TokenKind.RETURN,
    "break": TokenKind.BREAK,
    "continue": TokenKind.CONTINUE,
    "and": TokenKind.AND,
    "or": TokenKind.OR,
}

TOKEN_DISPLAY: Final[dict[TokenKind, str]] = {
    TokenKind.EOF: "end of input",
    TokenKind.NEWLINE: "line break",
    TokenKind.SEMICOLON: ";",
    TokenKind.IDENTIFIER: "identifier",
    TokenKind.STRING: "string",
    TokenKind.NUMBER: "number",
    TokenKind.ERROR: "invalid characters",
    TokenKind.EQUAL_EQUAL: "==",
    TokenKind.NOT_EQUAL: "!=",
    TokenKind.TILDE_EQUAL: "~=",
    TokenKind.GREATER_THAN: ">",
    TokenKind.LESS_THAN: "<",
    TokenKind.GREATER_THAN_OR_EQUAL: ">=",
    TokenKind.LESS_THAN_OR_EQUAL: "<=",
    TokenKind.STAR: "*",
    TokenKind.SLASH: "/",
    TokenKind.MINUS: "-",
    TokenKind.PLUS: "+",
    TokenKind.SLASH_SLASH: "//",
    TokenKind.CARET: "^",
    TokenKind.PERCENT: "%",
    TokenKind.DOT_DOT: "..",
    TokenKind.AND: "and",
    TokenKind.OR: "or",
    TokenKind.BANG: "!",
    TokenKind.AMP: "&",
    TokenKind.EQUAL: "=",
    TokenKind.LPAREN: "(",
    TokenKind.RPAREN: ")",
    TokenKind.DOLLAR: "$",
    TokenKind.COMMA: ",",
    TokenKind.LBRACE: "{",
    TokenKind.RBRACE: "}",
    TokenKind.LBRACKET: "[",
    TokenKind.RBRACKET: "]",
    TokenKind.PIPE: "|",
    TokenKind.DOT: ".",
    **{kind: word for word, kind in KEYWORDS.items()},
}


def display_kind(kind: TokenKind) -> str:
    """Human readable token name for diagnostics."""
    return TOKEN_DISPLAY.get(kind, kind.name.lower())


class TokenFlags(IntFlag):
    """Token metadata flags."""

    NONE = 0
    PRECEDING_LINE_BREAK = 1 << 0  # NEWLINE before
    PRECEDING_TRIVIA = 1 << 1  # whitespace, comment or newline before
    UNTERMINATED = 1 << 2
    HAS_ESCAPE = 1 << 3


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexed token (trivia or non-trivia)."""

    kind: TokenKind
    text: str
    range: TextRange
    flags: TokenFlags = TokenFlags.NONE

    @property
    def span(self) -> TextRange:
        return self.range

    def has_preceding_line_break(self) -> bool:
        return bool(self.flags & TokenFlags.PRECEDING_LINE_BREAK)

    def has_preceding_trivia(self) -> bool:
        return bool(self.flags & TokenFlags.PRECEDING_TRIVIA)

    def is_unterminated(self) -> bool:
        return bool(self.flags & TokenFlags.UNTERMINATED)
