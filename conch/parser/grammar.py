"""Recursive-descent grammar for conch statements and expressions."""

from typing import Final

from conch.ast import (
    Assign,
    Block,
    Break,
    Command,
    Continue,
    Delimited,
    ElseBranch,
    ElseIfBranch,
    ErrorNode,
    Expression,
    ExpressionBinary,
    ExpressionBoolean,
    ExpressionCommand,
    ExpressionEvaluate,
    ExpressionLambda,
    ExpressionNil,
    ExpressionNumber,
    ExpressionStatement,
    ExpressionString,
    ExpressionTable,
    ExpressionUnary,
    ExpressionVector,
    For,
    FunctionBody,
    If,
    IfBranch,
    LastStatement,
    Return,
    SimpleExpression,
    Statement,
    TableField,
    TableFieldExpressionKey,
    TableFieldNameKey,
    TableFieldNoKey,
    Var,
    VarRoot,
    VarRootGlobal,
    VarRootName,
    VarRootParen,
    VarSuffix,
    VarSuffixExpressionIndex,
    VarSuffixNameIndex,
    While,
)
from conch.diagnostics import (
    PARSER_EXPECTED_EXPRESSION,
    PARSER_EXPECTED_TOKEN,
    PARSER_INVALID_ASSIGNMENT,
    PARSER_UNEXPECTED_TOKEN,
    PARSER_UNREACHABLE_STATEMENT,
)
from conch.lexer import Token, TokenKind
from conch.parser.parse_lists import ParseSeparatedList
from conch.parser.parse_recovery import ParseRecoveryTokenSet
from conch.parser.parser import Parser, ParserProgress
from conch.text import TextRange

# Lowest to highest. Unary operators bind tighter than all of these.
BINARY_PRECEDENCE: Final[dict[TokenKind, int]] = {
    TokenKind.AND: 1,
    TokenKind.OR: 1,
    TokenKind.EQUAL_EQUAL: 2,
    TokenKind.NOT_EQUAL: 2,
    TokenKind.TILDE_EQUAL: 2,
    TokenKind.GREATER_THAN: 2,
    TokenKind.LESS_THAN: 2,
    TokenKind.GREATER_THAN_OR_EQUAL: 2,
    TokenKind.LESS_THAN_OR_EQUAL: 2,
    TokenKind.DOT_DOT: 3,
    TokenKind.PLUS: 4,
    TokenKind.MINUS: 4,
    TokenKind.STAR: 5,
    TokenKind.SLASH: 5,
    TokenKind.SLASH_SLASH: 5,
    TokenKind.PERCENT: 5,
    TokenKind.CARET: 6,
}
RIGHT_ASSOCIATIVE: Final[frozenset[TokenKind]] = frozenset({TokenKind.CARET, TokenKind.DOT_DOT})

SIMPLE_EXPRESSION_START: Final[frozenset[TokenKind]] = frozenset(
    {
        TokenKind.NIL,
        TokenKind.TRUE,
        TokenKind.FALSE,
        TokenKind.NUMBER,
        TokenKind.STRING,
        TokenKind.IDENTIFIER,
        TokenKind.DOLLAR,
        TokenKind.LPAREN,
        TokenKind.LBRACKET,
        TokenKind.LBRACE,
        TokenKind.PIPE,
        TokenKind.MINUS,
        TokenKind.BANG,
        TokenKind.ERROR,
    }
)
EXPRESSION_START: Final[frozenset[TokenKind]] = SIMPLE_EXPRESSION_START | {TokenKind.AMP}
LAST_STATEMENT_START: Final[frozenset[TokenKind]] = frozenset({TokenKind.BREAK, TokenKind.CONTINUE, TokenKind.RETURN})
STATEMENT_END: Final[frozenset[TokenKind]] = frozenset({TokenKind.SEMICOLON, TokenKind.RBRACE, TokenKind.EOF})

_OPENERS: Final[frozenset[TokenKind]] = frozenset({TokenKind.LPAREN, TokenKind.LBRACKET, TokenKind.LBRACE})
_CLOSERS: Final[frozenset[TokenKind]] = frozenset({TokenKind.RPAREN, TokenKind.RBRACKET, TokenKind.RBRACE})


# -------------------------
# Blocks and statements
# -------------------------


def parse_source(parser: Parser) -> Block:
    """Parse the whole input as the root block."""
    block = parse_block(parser, frozenset({TokenKind.EOF}), start=0)
    return Block(block.body, block.last_statement, TextRange(0, len(parser.source.text)))


def parse_block(parser: Parser, stop_set: frozenset[TokenKind], *, start: int) -> Block:
    body: list[Statement] = []
    last_statement: LastStatement | None = None
    recovery = ParseRecoveryTokenSet(stop_set | {TokenKind.SEMICOLON}).enable_recovery_on_line_break()
    progress = ParserProgress()

    while not parser.at(TokenKind.EOF) and not parser.at_set(stop_set):
        progress.assert_progressing(parser)

        if parser.eat(TokenKind.SEMICOLON) is not None:
            continue

        if parser.at_set(LAST_STATEMENT_START):
            last_statement = parse_last_statement(parser)
            break

        if parser.at(TokenKind.ERROR):
            # Already reported by the lexer.
            node, _ = recovery.recover(parser)
            if node is not None:
                body.append(node)
            continue

        statement = parse_statement(parser)
        if statement is None:
            _recover_statement(parser, recovery, body, "expected a statement")
            continue

        body.append(statement)
        if not at_statement_end(parser) and not _ends_with_block(parser, statement):
            _recover_statement(parser, recovery, body, "after statement")

    if last_statement is not None:
        _skip_unreachable(parser, stop_set)

    return Block(tuple(body), last_statement, parser.span_from(start))


def _recover_statement(parser: Parser, recovery: ParseRecoveryTokenSet, body: list[Statement], context: str) -> None:
    text = parser.current_token.text
    node, _ = recovery.recover(parser)
    if node is None:
        return
    parser.error_at(PARSER_UNEXPECTED_TOKEN, node.span, f"Unexpected `{text}`, {context}")
    body.append(node)


def parse_braced_block(parser: Parser) -> Delimited[Block]:
    left = parser.bump()
    if parser.is_too_deep:
        error = too_deep(parser)
        body = (error,) if error is not None else ()
        return Delimited(left, Block(body, None, parser.span_from(left.range.end)), None)

    with parser.nested():
        block = parse_block(parser, frozenset({TokenKind.RBRACE}), start=left.range.end)
    right = parser.expect(TokenKind.RBRACE, left)
    return Delimited(left, block, right)


def at_statement_end(parser: Parser) -> bool:
    return parser.has_preceding_line_break or parser.at_set(STATEMENT_END)


def _ends_with_block(parser: Parser, statement: Statement) -> bool:
    # A closing `}` separates `if`, `while` and `for` from what follows on the same line.
    if not isinstance(statement, (If, While, For)):
        return False
    end = statement.span.end
    return parser.source.text[end - 1 : end] == "}"


def parse_statement(parser: Parser) -> Statement | None:
    match parser.current:
        case TokenKind.IF:
            return _parse_if(parser)
        case TokenKind.WHILE:
            return _parse_while(parser)
        case TokenKind.FOR:
            return _parse_for(parser)
        case TokenKind.AMP:
            return parse_expression_command(parser)
        case TokenKind.IDENTIFIER | TokenKind.DOLLAR:
            return _parse_var_statement(parser)

    if not parser.at_set(SIMPLE_EXPRESSION_START):
        return None
    expression = parse_expression(parser)
    if expression is None:
        return None
    return ExpressionStatement(expression, expression.span)


def parse_last_statement(parser: Parser) -> LastStatement:
    token = parser.bump()
    if token.kind == TokenKind.BREAK:
        return Break(token, token.range)
    if token.kind == TokenKind.CONTINUE:
        return Continue(token, token.range)

    values = ()
    if not at_statement_end(parser):
        values = _RETURN_VALUES.parse_list(parser)
    return Return(token, values, parser.span_from(token.range.start))


def _skip_unreachable(parser: Parser, stop_set: frozenset[TokenKind]) -> None:
    start: int | None = None
    depth = 0
    while not parser.at(TokenKind.EOF):
        if depth == 0 and parser.at_set(stop_set):
            break
        if start is None and parser.at(TokenKind.SEMICOLON):
            parser.bump()
            continue
        if start is None:
            start = parser.position
        if parser.at_set(_OPENERS):
            depth += 1
        elif parser.at_set(_CLOSERS) and depth > 0:
            depth -= 1
        parser.bump()

    if start is not None:
        parser.error_at(PARSER_UNREACHABLE_STATEMENT, parser.span_from(start))


def _parse_var_statement(parser: Parser) -> Statement:
    start = parser.position
    var = parse_var(parser)

    if parser.at(TokenKind.EQUAL):
        equals = parser.bump()
        if isinstance(var.root, VarRootParen) and not var.suffixes:
            parser.error_at(PARSER_INVALID_ASSIGNMENT, var.span)
        value = _parse_required_expression(parser, f"Expected a value after `{equals.text}`")
        return Assign(var, equals, value, parser.span_from(start))

    if _at_binary_operator(parser) and not _at_negative_argument(parser):
        expression = parse_binary_rest(parser, var)
        return ExpressionStatement(expression, expression.span)

    return parse_command(parser, var)


def _parse_if(parser: Parser) -> If:
    token = parser.bump()
    first_branch = _parse_if_branch(parser)

    branches: list[ElseIfBranch] = []
    while parser.at(TokenKind.ELSEIF):
        ifelse = parser.bump()
        branch = _parse_if_branch(parser)
        branches.append(ElseIfBranch(ifelse, branch, parser.span_from(ifelse.range.start)))

    else_branch = None
    if parser.at(TokenKind.ELSE):
        else_token = parser.bump()
        block = _parse_required_block(parser, else_token)
        else_branch = ElseBranch(else_token, block, parser.span_from(else_token.range.start))

    return If(token, first_branch, tuple(branches), else_branch, parser.span_from(token.range.start))


def _parse_if_branch(parser: Parser) -> IfBranch:
    start = parser.position
    condition = _parse_condition(parser)
    block = _parse_required_block(parser)
    return IfBranch(condition, block, parser.span_from(start))


def _parse_while(parser: Parser) -> While:
    token = parser.bump()
    condition = _parse_condition(parser)
    block = _parse_required_block(parser)
    return While(token, condition, block, parser.span_from(token.range.start))


def _parse_for(parser: Parser) -> For:
    token = parser.bump()
    expression = _parse_condition(parser)

    body = None
    if parser.at_set(EXPRESSION_START) and not parser.has_preceding_line_break:
        body = parse_expression_or_command(parser)
    else:
        parser.error_at(PARSER_EXPECTED_EXPRESSION, parser.current_range, "Expected a loop body such as `|v| { ... }`")
    return For(token, expression, body, parser.span_from(token.range.start))


def _parse_condition(parser: Parser) -> Delimited[Expression | ExpressionCommand | None] | None:
    if not parser.at(TokenKind.LPAREN):
        parser.error_at(PARSER_EXPECTED_TOKEN, parser.current_range, "Expected `(` to start the condition")
        return None
    left = parser.bump()
    value = _parse_required_expression(parser, "Expected a condition")
    right = parser.expect(TokenKind.RPAREN, left)
    return Delimited(left, value, right)


def _parse_required_block(parser: Parser, after: Token | None = None) -> Delimited[Block] | None:
    if parser.at(TokenKind.LBRACE):
        return parse_braced_block(parser)
    message = "Expected `{` to start a block"
    if after is not None:
        message = f"Expected `{{` after `{after.text}`"
    parser.error_at(PARSER_EXPECTED_TOKEN, parser.current_range, message)
    return None


# -------------------------
# Expressions
# -------------------------


def is_at_expression_start(parser: Parser) -> bool:
    return parser.at_set(EXPRESSION_START)


def parse_expression_or_command(parser: Parser) -> Expression | ExpressionCommand | None:
    if parser.at(TokenKind.AMP):
        return parse_expression_command(parser)
    return parse_expression(parser)


def parse_expression(parser: Parser, min_precedence: int = 1) -> Expression | None:
    left = parse_simple_expression(parser)
    if left is None:
        return None
    return parse_binary_rest(parser, left, min_precedence)


def parse_binary_rest(parser: Parser, left: Expression, min_precedence: int = 1) -> Expression:
    """Precedence climbing over binary operators that follow `left`.

    Every folded operator nests `left` one level deeper, so a long chain
    counts against `max_depth` like explicit nesting does.
    """
    chain = 0
    while _at_binary_operator(parser):
        precedence = BINARY_PRECEDENCE[parser.current]
        if precedence < min_precedence:
            break

        operator = parser.bump()
        chain += 1
        next_min = precedence if operator.kind in RIGHT_ASSOCIATIVE else precedence + 1
        with parser.nested(chain):
            right = parse_expression(parser, next_min)
        if right is None:
            parser.error_at(
                PARSER_EXPECTED_EXPRESSION,
                parser.current_range,
                f"Expected an expression after `{operator.text}`",
            )

        left = ExpressionBinary(left, operator, right, parser.span_from(left.span.start))
        if right is None:
            break
    return left


def parse_simple_expression(parser: Parser, *, argument: bool = False) -> SimpleExpression | None:
    """Parse one operand.

    In command argument position a bare identifier is a word (a string)
    rather than a global variable, unless it is followed by `.`.
    """
    if parser.is_too_deep:
        return too_deep(parser)

    with parser.nested():
        return _parse_simple_expression(parser, argument)


def _parse_simple_expression(parser: Parser, argument: bool) -> SimpleExpression | None:
    match parser.current:
        case TokenKind.NIL:
            token = parser.bump()
            return ExpressionNil(token, token.range)
        case TokenKind.TRUE | TokenKind.FALSE:
            token = parser.bump()
            return ExpressionBoolean(token, token.range)
        case TokenKind.NUMBER:
            token = parser.bump()
            return ExpressionNumber(token, token.range)
        case TokenKind.STRING:
            token = parser.bump()
            return ExpressionString(token, token.range)
        case TokenKind.IDENTIFIER:
            if argument and parser.nth(1) != TokenKind.DOT:
                token = parser.bump()
                return ExpressionString(token, token.range)
            return parse_var(parser)
        case TokenKind.DOLLAR:
            return parse_var(parser)
        case TokenKind.LPAREN:
            return _parse_evaluate(parser)
        case TokenKind.LBRACKET:
            return _parse_vector(parser)
        case TokenKind.LBRACE:
            return _parse_table(parser)
        case TokenKind.PIPE:
            return _parse_lambda(parser)
        case TokenKind.MINUS | TokenKind.BANG:
            return _parse_unary(parser)
        case TokenKind.ERROR:
            token = parser.bump()
            return ErrorNode((token,), token.range)
    return None


def too_deep(parser: Parser) -> ErrorNode | None:
    """Report excessive nesting and swallow the rest of the input."""
    parser.report_too_deep()
    if parser.at(TokenKind.EOF):
        return None
    start = parser.position
    tokens: list[Token] = []
    while not parser.at(TokenKind.EOF):
        tokens.append(parser.bump())
    return ErrorNode(tuple(tokens), parser.span_from(start))


def _parse_unary(parser: Parser) -> ExpressionUnary:
    operator = parser.bump()
    value = parse_simple_expression(parser)
    if value is None:
        parser.error_at(PARSER_EXPECTED_EXPRESSION, parser.current_range, f"Expected an expression after `{operator.text}`")
    return ExpressionUnary(operator, value, parser.span_from(operator.range.start))


def _parse_evaluate(parser: Parser) -> ExpressionEvaluate:
    left = parser.bump()
    value = None
    if not parser.at(TokenKind.RPAREN):
        value = _parse_required_expression(parser, "Expected an expression or command")
    right = parser.expect(TokenKind.RPAREN, left)
    return ExpressionEvaluate(Delimited(left, value, right), parser.span_from(left.range.start))


def _parse_vector(parser: Parser) -> ExpressionVector:
    left = parser.bump()
    contents = _VECTOR_ITEMS.parse_list(parser)
    right = parser.expect(TokenKind.RBRACKET, left)
    return ExpressionVector(Delimited(left, contents, right), parser.span_from(left.range.start))


def _parse_table(parser: Parser) -> ExpressionTable:
    left = parser.bump()
    fields = _TABLE_FIELDS.parse_list(parser)
    right = parser.expect(TokenKind.RBRACE, left)
    return ExpressionTable(Delimited(left, fields, right), parser.span_from(left.range.start))


def _parse_table_field(parser: Parser) -> TableField | None:
    start = parser.position

    if parser.at(TokenKind.IDENTIFIER) and parser.nth(1) == TokenKind.EQUAL:
        name = parser.bump()
        equals = parser.bump()
        value = _parse_required_expression(parser, f"Expected a value for `{name.text}`")
        return TableFieldNameKey(name, equals, value, parser.span_from(start))

    if parser.at(TokenKind.LBRACKET) and _bracket_key_follows(parser):
        left = parser.bump()
        key = _parse_required_expression(parser, "Expected a key expression")
        right = parser.expect(TokenKind.RBRACKET, left)
        equals = parser.expect(TokenKind.EQUAL)
        value = _parse_required_expression(parser, "Expected a value") if equals is not None else None
        return TableFieldExpressionKey(Delimited(left, key, right), equals, value, parser.span_from(start))

    value = parse_expression_or_command(parser)
    if value is None:
        return None
    return TableFieldNoKey(value, parser.span_from(start))


def _bracket_key_follows(parser: Parser) -> bool:
    """Whether the `[` at the cursor closes and is followed by `=`."""
    depth = 0
    n = 0
    while True:
        kind = parser.nth(n)
        if kind == TokenKind.EOF:
            return False
        if kind == TokenKind.LBRACKET:
            depth += 1
        elif kind == TokenKind.RBRACKET:
            depth -= 1
            if depth == 0:
                return parser.nth(n + 1) == TokenKind.EQUAL
        n += 1


def _parse_lambda(parser: Parser) -> ExpressionLambda:
    left = parser.bump()
    parameters = _PARAMETERS.parse_list(parser)
    right = parser.expect(TokenKind.PIPE, left)

    block = None
    if parser.at(TokenKind.LBRACE):
        block = parse_braced_block(parser)

    span = parser.span_from(left.range.start)
    return ExpressionLambda(FunctionBody(Delimited(left, parameters, right), block, span), span)


def _parse_parameter(parser: Parser) -> Token | None:
    return parser.eat(TokenKind.IDENTIFIER)


def _parse_required_expression(parser: Parser, message: str) -> Expression | ExpressionCommand | None:
    value = parse_expression_or_command(parser)
    if value is None:
        parser.error_at(PARSER_EXPECTED_EXPRESSION, parser.current_range, message)
    return value


def _at_binary_operator(parser: Parser) -> bool:
    return parser.current in BINARY_PRECEDENCE and not parser.has_preceding_line_break


def _at_negative_argument(parser: Parser) -> bool:
    # `print -1` passes -1, `x - 1` subtracts.
    return (
        parser.at(TokenKind.MINUS)
        and parser.has_preceding_trivia
        and not parser.nth_token(1).has_preceding_trivia()
    )


# -------------------------
# Variables and commands
# -------------------------


def parse_var(parser: Parser) -> Var:
    start = parser.position
    root = _parse_var_root(parser)
    suffixes: list[VarSuffix] = []
    while parser.at(TokenKind.DOT):
        suffixes.append(_parse_var_suffix(parser))
    return Var(root, tuple(suffixes), parser.span_from(start))


def _parse_var_root(parser: Parser) -> VarRoot:
    if parser.at(TokenKind.IDENTIFIER):
        token = parser.bump()
        return VarRootGlobal(token, token.range)

    dollar = parser.bump()
    start = dollar.range.start
    if parser.at(TokenKind.IDENTIFIER) and not parser.has_preceding_trivia:
        name = parser.bump()
        return VarRootName(dollar, name, parser.span_from(start))

    if parser.at(TokenKind.LPAREN) and not parser.has_preceding_trivia:
        left = parser.bump()
        node = _parse_required_expression(parser, "Expected an expression naming the variable")
        right = parser.expect(TokenKind.RPAREN, left)
        return VarRootParen(dollar, Delimited(left, node, right), parser.span_from(start))

    parser.error_at(PARSER_EXPECTED_TOKEN, parser.current_range, "Expected a variable name after `$`")
    return VarRootName(dollar, None, parser.span_from(start))


def _parse_var_suffix(parser: Parser) -> VarSuffix:
    period = parser.bump()
    start = period.range.start

    if parser.at(TokenKind.IDENTIFIER):
        name = parser.bump()
        return VarSuffixNameIndex(period, name, parser.span_from(start))

    if parser.at(TokenKind.LBRACKET):
        left = parser.bump()
        node = _parse_required_expression(parser, "Expected an index expression")
        right = parser.expect(TokenKind.RBRACKET, left)
        return VarSuffixExpressionIndex(period, Delimited(left, node, right), parser.span_from(start))

    parser.error_at(PARSER_EXPECTED_TOKEN, parser.current_range, "Expected a field name or `[` after `.`")
    return VarSuffixNameIndex(period, None, parser.span_from(start))


def parse_expression_command(parser: Parser) -> ExpressionCommand:
    prefix = parser.bump()
    command = None
    if parser.at_set({TokenKind.IDENTIFIER, TokenKind.DOLLAR}):
        command = parse_command(parser, parse_var(parser))
    else:
        parser.error_at(PARSER_EXPECTED_TOKEN, parser.current_range, "Expected a command name after `&`")
    return ExpressionCommand(prefix, command, parser.span_from(prefix.range.start))


def parse_command(parser: Parser, var: Var) -> Command:
    arguments: list[SimpleExpression] = []
    progress = ParserProgress()
    while not _at_argument_end(parser):
        progress.assert_progressing(parser)
        argument = parse_simple_expression(parser, argument=True)
        if argument is None:
            break
        arguments.append(argument)
    return Command(var, tuple(arguments), parser.span_from(var.span.start))


def _at_argument_end(parser: Parser) -> bool:
    if at_statement_end(parser):
        return True
    if parser.at(TokenKind.MINUS):
        return not _at_negative_argument(parser)
    return parser.current in BINARY_PRECEDENCE


_VECTOR_ITEMS: Final = ParseSeparatedList(
    parse_element=parse_expression_or_command,
    is_at_element_start=is_at_expression_start,
    is_at_list_end=lambda parser: parser.at(TokenKind.RBRACKET),
)

_TABLE_FIELDS: Final = ParseSeparatedList(
    parse_element=_parse_table_field,
    is_at_element_start=is_at_expression_start,
    is_at_list_end=lambda parser: parser.at(TokenKind.RBRACE),
    element_name="table field",
)

_PARAMETERS: Final = ParseSeparatedList(
    parse_element=_parse_parameter,
    is_at_element_start=lambda parser: parser.at(TokenKind.IDENTIFIER),
    is_at_list_end=lambda parser: parser.at(TokenKind.PIPE),
    element_name="parameter name",
)

_RETURN_VALUES: Final = ParseSeparatedList(
    parse_element=parse_expression_or_command,
    is_at_element_start=lambda parser: is_at_expression_start(parser) and not parser.has_preceding_line_break,
    is_at_list_end=at_statement_end,
)
