from conch.ast import (
    Assign,
    Command,
    ExpressionBinary,
    ExpressionNumber,
    ExpressionStatement,
    ExpressionVector,
    FunctionBody,
    Var,
    iter_children,
    walk,
)
from conch.lexer import Token
from conch.parser import parse
from tests._debug import debug_dump_ast
from tests._shared_cases import case_source


def _body(source: str):
    parsed = parse(source)
    debug_dump_ast("ast", parsed.result, source)
    assert parsed.result is not None
    return parsed.result.block.body


def test_delimited_span_without_closing_token_ends_at_contents() -> None:
    (statement,) = _body(case_source("missing_vector_close"))

    assert isinstance(statement, Assign)
    vector = statement.value
    assert isinstance(vector, ExpressionVector)
    assert vector.contents.right is None
    assert vector.contents.span.as_tuple() == (5, 11)
    assert vector.span.as_tuple() == (5, 11)


def test_delimited_span_with_closing_token() -> None:
    (statement,) = _body("[1, 2]")

    assert statement.expression.contents.span.as_tuple() == (0, 6)


def test_separated_items_keep_their_own_separator() -> None:
    (statement,) = _body("[1, 2]")
    first, second = statement.expression.contents.value

    assert first.separator is not None
    assert first.separator.text == ","
    assert second.separator is None


def test_global_name_only_for_plain_identifiers() -> None:
    plain, dollar, dotted = _body("print\n$x\nconfig.volume")

    assert isinstance(plain, Command)
    assert plain.var.global_name == "print"
    assert dollar.var.global_name is None
    assert dotted.var.global_name is None


def test_function_body_parameter_names() -> None:
    (statement,) = _body("f = |a, b, c| { }")

    body = statement.value.body
    assert isinstance(body, FunctionBody)
    assert body.parameter_names == ("a", "b", "c")


def test_iter_children_skips_tokens_unless_asked() -> None:
    (statement,) = _body("1 + 2")
    assert isinstance(statement, ExpressionStatement)
    binary = statement.expression
    assert isinstance(binary, ExpressionBinary)

    children = list(iter_children(binary))
    assert [type(child) for child in children] == [ExpressionNumber, ExpressionNumber]

    with_tokens = list(iter_children(binary, include_tokens=True))
    assert isinstance(with_tokens[1], Token)
    assert with_tokens[1].text == "+"


def test_walk_is_pre_order() -> None:
    (statement,) = _body("print $t.a 1")

    kinds = [type(node).__name__ for node in walk(statement)]
    assert kinds[0] == "Command"
    assert kinds[1] == "Var"
    assert kinds.index("VarRootName") < kinds.index("VarSuffixNameIndex") < kinds.index("ExpressionNumber")


def test_nodes_are_hashable_and_comparable() -> None:
    first = _body("x = [1, 2]")[0]
    second = _body("x = [1, 2]")[0]

    assert first == second
    assert isinstance(first.target, Var)
    assert hash(first.target.span) == hash(second.target.span)
