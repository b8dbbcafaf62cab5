"""Token source that hides trivia from the parser."""

from conch.diagnostics import Diagnostic
from conch.lexer import Lexer, Token, TokenKind
from conch.text import TextRange


class TokenSource:
    """Bridge between lexer and parser.

    Whitespace, comments and newlines are dropped from the parser's view.
    Line breaks survive as the PRECEDING_LINE_BREAK flag of the next token,
    which is what statement and argument boundaries are decided on.
    """

    def __init__(self, source: str) -> None:
        lexer = Lexer(source)
        self._text = source
        self._all_tokens = lexer.lex()
        self._tokens = [
            token
            for token in self._all_tokens
            if not token.kind.is_trivia and token.kind != TokenKind.NEWLINE
        ]
        self._diagnostics = lexer.diagnostics
        self._position = 0

    @property
    def text(self) -> str:
        return self._text

    @property
    def all_tokens(self) -> list[Token]:
        """Every lexed token, trivia included."""
        return self._all_tokens

    @property
    def current_token(self) -> Token:
        return self._tokens[self._position]

    @property
    def current(self) -> TokenKind:
        return self.current_token.kind

    @property
    def current_range(self) -> TextRange:
        return self.current_token.range

    @property
    def has_preceding_line_break(self) -> bool:
        return self.current_token.has_preceding_line_break()

    @property
    def has_preceding_trivia(self) -> bool:
        return self.current_token.has_preceding_trivia()

    def nth_token(self, n: int) -> Token:
        index = min(self._position + n, len(self._tokens) - 1)
        return self._tokens[index]

    def nth(self, n: int) -> TokenKind:
        return self.nth_token(n).kind

    def bump(self) -> Token:
        token = self.current_token
        if token.kind != TokenKind.EOF:
            self._position += 1
        return token

    def is_empty(self) -> bool:
        """Whether the source holds nothing but trivia."""
        return len(self._tokens) == 1

    def finish(self) -> list[Diagnostic]:
        return self._diagnostics
