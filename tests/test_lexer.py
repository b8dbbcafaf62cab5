import pytest

from conch.lexer import (
    Lexer,
    Token,
    TokenFlags,
    TokenKind,
    display_kind,
    is_identifier,
    number_value,
    string_value,
    tokenize,
)
from tests._debug import debug_dump_diagnostics, debug_dump_tokens
from tests._shared_cases import ALL_CONCH_CASES, ConchCase, case_id, case_source


def lex(text: str) -> list[Token]:
    tokens = tokenize(text)
    debug_dump_tokens("lex", text, tokens)
    return tokens


def kinds(text: str) -> list[TokenKind]:
    return [token.kind for token in lex(text) if not token.kind.is_trivia]


def test_simple_assignment_tokens() -> None:
    tokens = lex("x = 1")

    assert [token.kind for token in tokens] == [
        TokenKind.IDENTIFIER,
        TokenKind.WHITESPACE,
        TokenKind.EQUAL,
        TokenKind.WHITESPACE,
        TokenKind.NUMBER,
        TokenKind.EOF,
    ]
    assert tokens[0].text == "x"
    assert tokens[4].range.as_tuple() == (4, 5)
    assert tokens[-1].range.as_tuple() == (5, 5)


def test_empty_source_is_only_eof() -> None:
    tokens = lex("")
    assert len(tokens) == 1
    assert tokens[0].kind == TokenKind.EOF
    assert tokens[0].range.is_empty()


def test_keywords_are_recognized() -> None:
    assert kinds("if elseif else while for return break continue true false nil and or") == [
        TokenKind.IF,
        TokenKind.ELSEIF,
        TokenKind.ELSE,
        TokenKind.WHILE,
        TokenKind.FOR,
        TokenKind.RETURN,
        TokenKind.BREAK,
        TokenKind.CONTINUE,
        TokenKind.TRUE,
        TokenKind.FALSE,
        TokenKind.NIL,
        TokenKind.AND,
        TokenKind.OR,
        TokenKind.EOF,
    ]


def test_token_kind_groups() -> None:
    assert TokenKind.WHILE.is_keyword
    assert not TokenKind.AND.is_keyword
    assert TokenKind.AND.is_binary_operator
    assert TokenKind.DOT_DOT.is_binary_operator
    assert not TokenKind.BANG.is_binary_operator
    assert not TokenKind.EQUAL.is_binary_operator


def test_multi_char_operators_win_over_single_char() -> None:
    assert kinds("== != ~= >= <= // .. > < / .") == [
        TokenKind.EQUAL_EQUAL,
        TokenKind.NOT_EQUAL,
        TokenKind.TILDE_EQUAL,
        TokenKind.GREATER_THAN_OR_EQUAL,
        TokenKind.LESS_THAN_OR_EQUAL,
        TokenKind.SLASH_SLASH,
        TokenKind.DOT_DOT,
        TokenKind.GREATER_THAN,
        TokenKind.LESS_THAN,
        TokenKind.SLASH,
        TokenKind.DOT,
        TokenKind.EOF,
    ]


def test_numbers_and_concatenation_dots() -> None:
    tokens = [token for token in lex("1.5 1..2") if not token.kind.is_trivia]

    assert [token.text for token in tokens] == ["1.5", "1", "..", "2", ""]
    assert number_value(tokens[0]) == 1.5
    assert number_value(tokens[1]) == 1
    assert isinstance(number_value(tokens[1]), int)


def test_identifiers_may_contain_hyphens_and_digits() -> None:
    tokens = lex("set-volume2 _x")
    assert tokens[0].kind == TokenKind.IDENTIFIER
    assert tokens[0].text == "set-volume2"
    assert tokens[2].text == "_x"


def test_comment_runs_to_end_of_line() -> None:
    tokens = lex("-- hi there\nx")

    assert tokens[0].kind == TokenKind.COMMENT
    assert tokens[0].text == "-- hi there"
    assert tokens[1].kind == TokenKind.NEWLINE
    assert tokens[2].kind == TokenKind.IDENTIFIER


def test_line_break_and_trivia_flags() -> None:
    tokens = lex("a -1\r\nb")
    minus = tokens[2]
    one = tokens[3]
    b = tokens[5]

    assert minus.kind == TokenKind.MINUS
    assert minus.has_preceding_trivia()
    assert not minus.has_preceding_line_break()
    assert not one.has_preceding_trivia()
    assert tokens[4].kind == TokenKind.NEWLINE
    assert tokens[4].text == "\r\n"
    assert b.has_preceding_line_break()
    assert b.flags & TokenFlags.PRECEDING_TRIVIA


def test_string_values_and_escapes() -> None:
    tokens = lex("\"a\\\"b\" 'c\\n' \"plain\"")
    strings = [token for token in tokens if token.kind == TokenKind.STRING]

    assert [string_value(token) for token in strings] == ['a"b', "c\n", "plain"]
    assert strings[0].flags & TokenFlags.HAS_ESCAPE
    assert not strings[2].flags & TokenFlags.HAS_ESCAPE


def test_unterminated_string_is_reported_and_recovered() -> None:
    lexer = Lexer('print "abc\nnext')
    tokens = lexer.lex()
    debug_dump_diagnostics("unterminated", lexer.diagnostics)

    string = tokens[2]
    assert string.kind == TokenKind.STRING
    assert string.is_unterminated()
    assert string_value(string) == "abc"
    assert [diagnostic.code for diagnostic in lexer.diagnostics] == ["LEXER_UNTERMINATED_STRING"]
    assert lexer.diagnostics[0].range.as_tuple() == (6, 10)
    assert tokens[4].text == "next"


def test_invalid_characters_are_grouped_into_one_error_token() -> None:
    lexer = Lexer("a @# b")
    tokens = lexer.lex()

    error = tokens[2]
    assert error.kind == TokenKind.ERROR
    assert error.text == "@#"
    assert len(lexer.diagnostics) == 1
    assert lexer.diagnostics[0].code == "LEXER_INVALID_CHARACTER"
    assert lexer.diagnostics[0].range.as_tuple() == (2, 4)
    assert tokens[4].text == "b"


def test_identifier_value_of_bare_word_is_its_text() -> None:
    word = lex("hello")[0]
    assert string_value(word) == "hello"


def test_is_identifier_excludes_keywords() -> None:
    assert is_identifier("print")
    assert is_identifier("set-volume")
    assert not is_identifier("if")
    assert not is_identifier("1abc")
    assert not is_identifier("")


def test_display_kind_uses_source_spelling() -> None:
    assert display_kind(TokenKind.RBRACKET) == "]"
    assert display_kind(TokenKind.EOF) == "end of input"
    assert display_kind(TokenKind.ELSEIF) == "elseif"


@pytest.mark.parametrize("case", ALL_CONCH_CASES, ids=case_id)
def test_lexing_is_lossless(case: ConchCase) -> None:
    tokens = lex(case.source)

    assert "".join(token.text for token in tokens) == case.source
    assert tokens[-1].kind == TokenKind.EOF
    for before, after in zip(tokens, tokens[1:]):
        assert before.range.end == after.range.start


def test_shared_case_lookup() -> None:
    assert case_source("binary_arithmetic") == "3 + 4\n"


def test_non_ascii_digits_are_invalid_characters() -> None:
    lexer = Lexer("x = ²")
    tokens = lexer.lex()

    assert tokens[4].kind == TokenKind.ERROR
    assert tokens[4].text == "²"
    assert [diagnostic.code for diagnostic in lexer.diagnostics] == ["LEXER_INVALID_CHARACTER"]


def test_non_ascii_digit_ends_a_number() -> None:
    assert kinds("1٣") == [TokenKind.NUMBER, TokenKind.ERROR, TokenKind.EOF]
