"""Lexer."""

from conch.diagnostics import (
    LEXER_INVALID_CHARACTER,
    LEXER_UNTERMINATED_STRING,
    Diagnostic,
)
from conch.lexer.tokens import KEYWORDS, Token, TokenFlags, TokenKind
from conch.text import TextRange

_SINGLE_CHAR_TOKENS: dict[str, TokenKind] = {
    "*": TokenKind.STAR,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "^": TokenKind.CARET,
    "%": TokenKind.PERCENT,
    "/": TokenKind.SLASH,
    ">": TokenKind.GREATER_THAN,
    "<": TokenKind.LESS_THAN,
    "!": TokenKind.BANG,
    "&": TokenKind.AMP,
    "=": TokenKind.EQUAL,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "$": TokenKind.DOLLAR,
    ",": TokenKind.COMMA,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    "|": TokenKind.PIPE,
    ".": TokenKind.DOT,
    ";": TokenKind.SEMICOLON,
}

_DOUBLE_CHAR_TOKENS: dict[str, TokenKind] = {
    "==": TokenKind.EQUAL_EQUAL,
    "!=": TokenKind.NOT_EQUAL,
    "~=": TokenKind.TILDE_EQUAL,
    ">=": TokenKind.GREATER_THAN_OR_EQUAL,
    "<=": TokenKind.LESS_THAN_OR_EQUAL,
    "//": TokenKind.SLASH_SLASH,
    "..": TokenKind.DOT_DOT,
}

_ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
    "\\": "\\",
    '"': '"',
    "'": "'",
}


class Lexer:
    """Lossless lexer that emits trivia, line terminators and tokens.

    Lexing never fails: characters that cannot start any token are grouped
    into a single ERROR token and reported once.
    """

    def __init__(self, source: str) -> None:
        self._source = source
        self._position = 0
        self._current_start = 0
        self._current_flags = TokenFlags.NONE
        self._after_newline = False
        self._after_trivia = False
        self._diagnostics: list[Diagnostic] = []

    @property
    def source(self) -> str:
        """Original source text."""
        return self._source

    @property
    def diagnostics(self) -> list[Diagnostic]:
        """List of diagnostics emitted during lexing."""
        return self._diagnostics

    @property
    def position(self) -> int:
        return self._position

    @property
    def is_eof(self) -> bool:
        return self._position >= len(self._source)

    @property
    def current_range(self) -> TextRange:
        return TextRange(self._current_start, self._position)

    @property
    def next_token(self) -> Token:
        self._current_start = self._position
        self._current_flags = TokenFlags.NONE
        if self._after_newline:
            self._current_flags |= TokenFlags.PRECEDING_LINE_BREAK
        if self._after_trivia:
            self._current_flags |= TokenFlags.PRECEDING_TRIVIA

        if self.is_eof:
            return Token(TokenKind.EOF, "", TextRange.empty(self._position), self._current_flags)

        kind = self._lex_token()
        token = Token(kind, self._source[self._current_start : self._position], self.current_range, self._current_flags)

        if kind == TokenKind.NEWLINE:
            self._after_newline = True
            self._after_trivia = True
        elif kind.is_trivia:
            self._after_trivia = True
        else:
            self._after_newline = False
            self._after_trivia = False

        return token

    def lex(self) -> list[Token]:
        tokens: list[Token] = []
        while True:
            token = self.next_token
            tokens.append(token)
            if token.kind == TokenKind.EOF:
                break
        return tokens

    def _lex_token(self) -> TokenKind:
        ch = self._current_char()

        if ch == "\n" or ch == "\r":
            self._consume_newline()
            return TokenKind.NEWLINE

        if ch == " " or ch == "\t":
            self._consume_whitespaces()
            return TokenKind.WHITESPACE

        if ch == "-" and self._peek_char() == "-":
            return self._lex_comment()

        if ch == '"' or ch == "'":
            return self._lex_string(ch)

        if _is_digit(ch):
            return self._lex_number()

        if _is_identifier_start(ch):
            return self._lex_identifier()

        double = self._source[self._position : self._position + 2]
        if double in _DOUBLE_CHAR_TOKENS:
            self._advance(2)
            return _DOUBLE_CHAR_TOKENS[double]

        if ch in _SINGLE_CHAR_TOKENS:
            self._advance(1)
            return _SINGLE_CHAR_TOKENS[ch]

        return self._lex_error()

    def _lex_comment(self) -> TokenKind:
        # Consume until end of line, do not consume the newline itself.
        self._advance(2)
        while not self.is_eof:
            ch = self._current_char()
            if ch == "\n" or ch == "\r":
                break
            self._advance(1)
        return TokenKind.COMMENT

    def _lex_string(self, quote: str) -> TokenKind:
        self._advance(1)
        closed = False

        while not self.is_eof:
            ch = self._current_char()
            if ch == quote:
                self._advance(1)
                closed = True
                break
            if ch == "\n" or ch == "\r":
                break
            if ch == "\\":
                self._current_flags |= TokenFlags.HAS_ESCAPE
                self._advance(1)
                if not self.is_eof and self._current_char() not in "\r\n":
                    self._advance(1)
                continue
            self._advance(1)

        if not closed:
            self._current_flags |= TokenFlags.UNTERMINATED
            self._diagnostics.append(Diagnostic.from_spec(LEXER_UNTERMINATED_STRING, self.current_range))

        return TokenKind.STRING

    def _lex_number(self) -> TokenKind:
        saw_dot = False
        while not self.is_eof:
            ch = self._current_char()
            if _is_digit(ch):
                self._advance(1)
                continue
            if ch == "." and not saw_dot and _is_digit(self._peek_char()):
                saw_dot = True
                self._advance(1)
                continue
            break
        return TokenKind.NUMBER

    def _lex_identifier(self) -> TokenKind:
        self._advance(1)
        while not self.is_eof and _is_identifier_continue(self._current_char()):
            self._advance(1)
        text = self._source[self._current_start : self._position]
        return KEYWORDS.get(text, TokenKind.IDENTIFIER)

    def _lex_error(self) -> TokenKind:
        self._advance(1)
        while not self.is_eof and not self._can_start_token():
            self._advance(1)
        self._diagnostics.append(
            Diagnostic.from_spec(
                LEXER_INVALID_CHARACTER,
                self.current_range,
                f"Unrecognized characters {self._source[self._current_start : self._position]!r}",
            )
        )
        return TokenKind.ERROR

    def _can_start_token(self) -> bool:
        ch = self._current_char()
        if ch in " \t\r\n\"'" or _is_digit(ch) or _is_identifier_start(ch):
            return True
        return ch in _SINGLE_CHAR_TOKENS or self._source[self._position : self._position + 2] in _DOUBLE_CHAR_TOKENS

    def _consume_whitespaces(self) -> None:
        while not self.is_eof:
            ch = self._current_char()
            if ch == " " or ch == "\t":
                self._advance(1)
                continue
            break

    def _consume_newline(self) -> None:
        if self._current_char() == "\r" and self._peek_char() == "\n":
            self._advance(2)
        else:
            self._advance(1)

    def _current_char(self) -> str:
        if self.is_eof:
            return "\0"
        return self._source[self._position]

    def _peek_char(self, ahead: int = 1) -> str:
        index = self._position + ahead
        if index >= len(self._source):
            return "\0"
        return self._source[index]

    def _advance(self, steps: int) -> None:
        self._position += steps


def _is_digit(ch: str) -> bool:
    # ASCII only; `str.isdigit` accepts superscripts and other Unicode digits.
    return "0" <= ch <= "9"


def _is_identifier_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _is_identifier_continue(ch: str) -> bool:
    return ch.isalnum() or ch == "_" or ch == "-"


def tokenize(source: str) -> list[Token]:
    """Lex the whole source, trivia included. Always ends with an EOF token."""
    return Lexer(source).lex()


def is_identifier(text: str) -> bool:
    """Whether text lexes as exactly one identifier (keywords excluded)."""
    if not text or not _is_identifier_start(text[0]):
        return False
    if not all(_is_identifier_continue(ch) for ch in text):
        return False
    return text not in KEYWORDS


def string_value(token: Token) -> str:
    """Decode a STRING token (quotes stripped, escapes resolved).

    Identifier tokens used as bare words decode to their own text.
    """
    if token.kind != TokenKind.STRING:
        return token.text

    text = token.text
    body = text[1:] if token.is_unterminated() else text[1:-1]
    if not token.flags & TokenFlags.HAS_ESCAPE:
        return body

    out: list[str] = []
    index = 0
    while index < len(body):
        ch = body[index]
        if ch == "\\" and index + 1 < len(body):
            escaped = body[index + 1]
            out.append(_ESCAPES.get(escaped, escaped))
            index += 2
            continue
        out.append(ch)
        index += 1
    return "".join(out)


def number_value(token: Token) -> int | float:
    if "." in token.text:
        return float(token.text)
    return int(token.text)


def token_text(source: str, token: Token) -> str:
    """Get the text of a token from the source string based on its range."""
    return source[token.range.start : token.range.end]


def dump_tokens(tokens: list[Token], diagnostics: list[Diagnostic] | None = None) -> None:
    """Print token list with kind, range, flags, and text for debugging."""
    for i, tok in enumerate(tokens):
        print(f"{i:03d} {tok.kind.name:<22} range={tok.range.as_tuple()} flags={tok.flags!r} text={tok.text!r}")

    if diagnostics is not None:
        print("\nDiagnostics:")
        for d in diagnostics:
            print(f"- {d.severity.upper()} {d.code} range={d.range.as_tuple()} message={d.message}")
