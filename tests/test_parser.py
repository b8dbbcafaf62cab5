import pytest

from conch.ast import (
    Assign,
    Command,
    ErrorNode,
    ExpressionBinary,
    ExpressionCommand,
    ExpressionEvaluate,
    ExpressionLambda,
    ExpressionNumber,
    ExpressionStatement,
    ExpressionString,
    ExpressionTable,
    ExpressionUnary,
    ExpressionVector,
    For,
    If,
    Return,
    TableFieldExpressionKey,
    TableFieldNameKey,
    TableFieldNoKey,
    Var,
    VarRootGlobal,
    VarRootName,
    VarSuffixExpressionIndex,
    VarSuffixNameIndex,
    While,
    walk,
)
from conch.lexer import TokenKind
from conch.parser import (
    ParseOutput,
    Parser,
    ParseRecoveryTokenSet,
    ParserOptions,
    RecoveryError,
    TokenSource,
    parse,
)
from conch.text import slice_text_range
from tests._debug import debug_dump_ast, debug_dump_diagnostics
from tests._shared_cases import INVALID_CASES, PARSER_CASES, ConchCase, case_id, case_source


def _parse(name: str, source: str, options: ParserOptions | None = None) -> ParseOutput:
    parsed = parse(source, options)
    debug_dump_ast(name, parsed.result, source)
    debug_dump_diagnostics(name, parsed.issues)
    return parsed


def _codes(parsed: ParseOutput) -> list[str]:
    return [issue.code for issue in parsed.issues]


def _single_statement(source: str):
    parsed = _parse("single_statement", source)
    assert parsed.issues == []
    assert parsed.result is not None
    assert len(parsed.result.block.body) == 1
    return parsed.result.block.body[0]


@pytest.mark.parametrize("case", PARSER_CASES, ids=case_id)
def test_valid_cases_parse_cleanly(case: ConchCase) -> None:
    parsed = _parse(case.name, case.source)

    assert parsed.issues == []
    assert parsed.result is not None
    assert parsed.result.span.as_tuple() == (0, len(case.source))
    for node in walk(parsed.result.block):
        span = getattr(node, "span", None)
        if span is not None:
            assert parsed.result.span.contains_range(span)


@pytest.mark.parametrize("case", INVALID_CASES, ids=case_id)
def test_invalid_cases_report_issues_and_keep_a_tree(case: ConchCase) -> None:
    parsed = _parse(case.name, case.source)

    assert parsed.issues != []
    assert parsed.has_errors
    assert parsed.result is not None


@pytest.mark.parametrize("case", PARSER_CASES + INVALID_CASES, ids=case_id)
def test_parsing_is_deterministic(case: ConchCase) -> None:
    assert parse(case.source) == parse(case.source)


def test_empty_and_trivia_only_input_has_no_result() -> None:
    assert parse("").result is None
    assert parse("").issues == []
    assert parse("  -- only a comment\n\n").result is None


def test_binary_expression_statement() -> None:
    statement = _single_statement(case_source("binary_arithmetic"))

    assert isinstance(statement, ExpressionStatement)
    expression = statement.expression
    assert isinstance(expression, ExpressionBinary)
    assert expression.operator.kind == TokenKind.PLUS
    assert isinstance(expression.left, ExpressionNumber)
    assert expression.left.token.text == "3"
    assert isinstance(expression.right, ExpressionNumber)
    assert expression.right.token.text == "4"
    assert expression.span.as_tuple() == (0, 5)


def test_multiplication_binds_tighter_than_addition() -> None:
    expression = _single_statement("1 + 2 * 3").expression

    assert expression.operator.kind == TokenKind.PLUS
    assert isinstance(expression.right, ExpressionBinary)
    assert expression.right.operator.kind == TokenKind.STAR


def test_subtraction_is_left_associative() -> None:
    expression = _single_statement("1 - 2 - 3").expression

    assert isinstance(expression.left, ExpressionBinary)
    assert expression.right.token.text == "3"


def test_power_and_concat_are_right_associative() -> None:
    power = _single_statement("2 ^ 3 ^ 2").expression
    assert isinstance(power.left, ExpressionNumber)
    assert isinstance(power.right, ExpressionBinary)

    concat = _single_statement('"a" .. "b" .. "c"').expression
    assert concat.operator.kind == TokenKind.DOT_DOT
    assert isinstance(concat.right, ExpressionBinary)


def test_unary_binds_tighter_than_power() -> None:
    expression = _single_statement("-2 ^ 2").expression

    assert isinstance(expression, ExpressionBinary)
    assert isinstance(expression.left, ExpressionUnary)


def test_comparison_binds_tighter_than_logic() -> None:
    expression = _single_statement("1 < 2 and 3 > 2").expression

    assert expression.operator.kind == TokenKind.AND
    assert expression.left.operator.kind == TokenKind.LESS_THAN
    assert expression.right.operator.kind == TokenKind.GREATER_THAN


def test_line_break_ends_a_binary_expression() -> None:
    source = "x = 1\n+ 2"
    parsed = _parse("line_break_binary", source)

    assert parsed.result is not None
    first, second = parsed.result.block.body
    assert isinstance(first, Assign)
    assert isinstance(first.value, ExpressionNumber)
    assert isinstance(second, ErrorNode)
    assert _codes(parsed) == ["PARSER_UNEXPECTED_TOKEN"]
    assert parsed.issues[0].range.as_tuple() == (6, 9)
    assert parsed.issues[0].message == "Unexpected `+`, expected a statement"


def test_command_arguments_are_words_literals_and_negative_numbers() -> None:
    statement = _single_statement(case_source("command_with_words_and_negative_number"))

    assert isinstance(statement, Command)
    assert statement.var.global_name == "print"
    word, quoted, number, negative = statement.arguments
    assert isinstance(word, ExpressionString)
    assert word.token.kind == TokenKind.IDENTIFIER
    assert isinstance(quoted, ExpressionString)
    assert quoted.token.kind == TokenKind.STRING
    assert isinstance(number, ExpressionNumber)
    assert isinstance(negative, ExpressionUnary)
    assert negative.operator.kind == TokenKind.MINUS


def test_spaced_minus_is_subtraction_but_attached_minus_is_an_argument() -> None:
    subtraction = _single_statement("x - 1")
    assert isinstance(subtraction, ExpressionStatement)
    assert isinstance(subtraction.expression, ExpressionBinary)

    command = _single_statement("x -1")
    assert isinstance(command, Command)
    assert len(command.arguments) == 1
    assert isinstance(command.arguments[0], ExpressionUnary)


def test_dotted_identifier_argument_is_a_variable() -> None:
    statement = _single_statement("print config.volume")

    argument = statement.arguments[0]
    assert isinstance(argument, Var)
    assert isinstance(argument.root, VarRootGlobal)
    assert isinstance(argument.suffixes[0], VarSuffixNameIndex)


def test_command_arguments_stop_at_binary_operator() -> None:
    parsed = _parse("argument_stop", "print 1 + 2")

    assert parsed.result is not None
    statement = parsed.result.block.body[0]
    assert isinstance(statement, Command)
    assert len(statement.arguments) == 1
    assert _codes(parsed) == ["PARSER_UNEXPECTED_TOKEN"]


def test_var_chain_suffixes() -> None:
    statement = _single_statement("print $t.a.[1]")

    var = statement.arguments[0]
    assert isinstance(var.root, VarRootName)
    assert var.root.name.text == "t"
    assert isinstance(var.suffixes[0], VarSuffixNameIndex)
    assert isinstance(var.suffixes[1], VarSuffixExpressionIndex)
    assert var.span.as_tuple() == (6, 14)


def test_expression_command_statement_and_nested_command() -> None:
    statement = _single_statement(case_source("nested_expression_command"))

    assert isinstance(statement, ExpressionCommand)
    assert statement.command is not None
    (argument,) = statement.command.arguments
    assert isinstance(argument, ExpressionEvaluate)
    assert isinstance(argument.command.value, ExpressionCommand)


def test_if_with_elseif_and_else() -> None:
    statement = _single_statement(case_source("if_elseif_else"))

    assert isinstance(statement, If)
    assert statement.first_branch.condition is not None
    assert len(statement.branches) == 1
    assert statement.else_branch is not None
    assert statement.else_branch.block is not None


def test_while_and_for_shapes() -> None:
    parsed = _parse("while_loop", case_source("while_loop"))
    assert parsed.result is not None
    assert isinstance(parsed.result.block.body[1], While)

    statement = _single_statement(case_source("for_over_vector_with_lambda"))
    assert isinstance(statement, For)
    assert isinstance(statement.expression.value, ExpressionVector)
    assert isinstance(statement.body, ExpressionLambda)
    assert statement.body.body.parameter_names == ("v", "i")


def test_table_field_forms() -> None:
    statement = _single_statement('t = {a = 1, [2] = "b", 3, [4, 5]}')

    assert isinstance(statement.value, ExpressionTable)
    fields = [item.value for item in statement.value.values.value]
    assert isinstance(fields[0], TableFieldNameKey)
    assert isinstance(fields[1], TableFieldExpressionKey)
    assert isinstance(fields[2], TableFieldNoKey)
    assert isinstance(fields[3], TableFieldNoKey)
    assert isinstance(fields[3].value, ExpressionVector)


def test_lambda_body_ends_with_return() -> None:
    statement = _single_statement("f = |a, b| { return $a, $b }")

    assert isinstance(statement.value, ExpressionLambda)
    block = statement.value.body.block.value
    assert block.body == ()
    assert isinstance(block.last_statement, Return)
    assert len(block.last_statement.values) == 2


def test_missing_vector_close_keeps_elements() -> None:
    source = case_source("missing_vector_close")
    parsed = _parse("missing_vector_close", source)

    assert _codes(parsed) == ["PARSER_EXPECTED_TOKEN"]
    assert parsed.issues[0].message == "Expected `]` to close `[` at 5 but reached the end of input"
    assert parsed.result is not None
    statement = parsed.result.block.body[0]
    assert isinstance(statement, Assign)
    assert isinstance(statement.value, ExpressionVector)
    assert [item.value.token.text for item in statement.value.contents.value] == ["1", "2"]


def test_missing_separator_is_reported_and_parsing_continues() -> None:
    parsed = _parse("missing_separator", "[1 2]")

    assert _codes(parsed) == ["PARSER_MISSING_SEPARATOR"]
    statement = parsed.result.block.body[0]
    assert len(statement.expression.contents.value) == 2


def test_recovery_between_valid_statements() -> None:
    parsed = _parse("recovery", "x = 1 )\ny = 2")

    assert parsed.result is not None
    body = parsed.result.block.body
    assert [type(statement) for statement in body] == [Assign, ErrorNode, Assign]
    assert _codes(parsed) == ["PARSER_UNEXPECTED_TOKEN"]
    assert parsed.issues[0].message == "Unexpected `)`, after statement"
    assert parsed.issues[0].range.as_tuple() == (6, 7)


def test_statement_may_follow_block_on_same_line() -> None:
    parsed = _parse("after_block", "while (false) { x = 1 } y = 2\nif (true) { x = 1 } return 0")

    assert parsed.issues == []
    body = parsed.result.block.body
    assert [type(statement) for statement in body] == [While, Assign, If]
    assert isinstance(parsed.result.block.last_statement, Return)


def test_statement_after_non_block_on_same_line_is_unexpected() -> None:
    parsed = _parse("after_table", "x = {} y = 2")

    assert _codes(parsed) == ["PARSER_UNEXPECTED_TOKEN"]
    assert parsed.issues[0].message == "Unexpected `y`, after statement"


def test_invalid_characters_are_reported_once() -> None:
    parsed = _parse("invalid_start", "@\nx = 1")

    assert _codes(parsed) == ["LEXER_INVALID_CHARACTER"]
    assert [type(statement) for statement in parsed.result.block.body] == [ErrorNode, Assign]


def test_statements_after_break_are_unreachable() -> None:
    source = case_source("statement_after_break")
    parsed = _parse("statement_after_break", source)

    assert _codes(parsed) == ["PARSER_UNREACHABLE_STATEMENT"]
    assert slice_text_range(source, parsed.issues[0].range) == "print $i"


def test_assigning_to_dollar_paren_root_is_invalid() -> None:
    parsed = _parse("assign_to_dollar_paren", case_source("assign_to_dollar_paren"))

    assert _codes(parsed) == ["PARSER_INVALID_ASSIGNMENT"]
    assert parsed.issues[0].range.as_tuple() == (0, 6)
    assert isinstance(parsed.result.block.body[0], Assign)


def test_missing_condition_is_reported() -> None:
    parsed = _parse("if_without_condition", case_source("if_without_condition"))

    assert "PARSER_EXPECTED_TOKEN" in _codes(parsed)
    statement = parsed.result.block.body[0]
    assert isinstance(statement, If)
    assert statement.first_branch.condition is None
    assert statement.first_branch.block is not None


def test_nesting_limit_is_reported_once() -> None:
    source = "x = " + "(" * 20 + "1" + ")" * 20
    parsed = _parse("too_deep", source, ParserOptions(max_depth=5))

    assert _codes(parsed).count("PARSER_TOO_DEEP") == 1
    assert parsed.result is not None


def test_default_nesting_limit_does_not_overflow_the_stack() -> None:
    source = "[" * 300 + "]" * 300
    parsed = parse(source)

    assert "PARSER_TOO_DEEP" in _codes(parsed)


def test_long_binary_chain_counts_against_nesting_limit() -> None:
    parsed = _parse("long_chain", " + ".join(["1"] * 3000))

    assert _codes(parsed).count("PARSER_TOO_DEEP") == 1
    assert parsed.result is not None


def test_binary_chain_within_nesting_limit_parses_cleanly() -> None:
    parsed = _parse("short_chain", " + ".join(["1"] * 40))

    assert parsed.issues == []
    statement = parsed.result.block.body[0]
    assert isinstance(statement.expression, ExpressionBinary)


def test_parser_options_reject_non_positive_depth() -> None:
    with pytest.raises(ValueError):
        ParserOptions(max_depth=0)


def test_recovery_token_set_stops_at_line_break() -> None:
    parser = Parser(TokenSource(") ) ]\nx"))
    recovery = ParseRecoveryTokenSet(frozenset({TokenKind.SEMICOLON})).enable_recovery_on_line_break()

    node, error = recovery.recover(parser)

    assert error is None
    assert node is not None
    assert [token.text for token in node.tokens] == [")", ")", "]"]
    assert parser.current_token.text == "x"


def test_recovery_token_set_reports_eof() -> None:
    parser = Parser(TokenSource(""))
    node, error = ParseRecoveryTokenSet(frozenset()).recover(parser)

    assert node is None
    assert error == RecoveryError.EOF
