import pytest

from conch.analysis import (
    CommandArgument,
    CommandType,
    FieldMetadata,
    FunctionType,
    IntersectionType,
    LiteralType,
    StrangeType,
    Suggestion,
    TableType,
    UnionType,
    accepts_nil,
    describe_type,
    match_eval_value,
    suggestions_for_type,
)

NUMBER = StrangeType(
    type="number",
    id="number",
    match=lambda value: isinstance(value, (int, float)) and not isinstance(value, bool),
)
STRING = StrangeType(type="string", id="string", match=lambda value: isinstance(value, str))
NIL = LiteralType(None)


def test_literal_exact_and_loose_matching() -> None:
    on = LiteralType("on")

    assert match_eval_value("on", on, exact=True) is on
    assert match_eval_value("o", on, exact=True) is None
    assert match_eval_value("o", on) is on
    assert match_eval_value("x", on) is None


def test_literal_numbers_and_booleans_do_not_mix() -> None:
    assert match_eval_value(1.0, LiteralType(1), exact=True) is not None
    assert match_eval_value(1, LiteralType(True), exact=True) is None
    assert match_eval_value(None, NIL, exact=True) is NIL


def test_union_is_or_of_members() -> None:
    a, b = LiteralType("a"), LiteralType("b")
    union = UnionType((a, b))

    assert match_eval_value("b", union, exact=True) is b
    assert match_eval_value("a", union, exact=True) is a
    assert match_eval_value("c", union, exact=True) is None
    assert match_eval_value("c", UnionType(()), exact=True) is None


def test_intersection_is_and_of_members() -> None:
    has_x = TableType(fields={"x": NUMBER})
    has_y = TableType(fields={"y": STRING})
    both = IntersectionType((has_x, has_y))

    assert match_eval_value({"x": 1, "y": "a"}, both, exact=True) is both
    assert match_eval_value({"x": 1}, both, exact=True) is None
    assert match_eval_value({"x": "no", "y": "a"}, both, exact=True) is None


def test_table_present_fields_must_match() -> None:
    point = TableType(fields={"x": NUMBER, "y": NUMBER})

    assert match_eval_value({"x": 1, "y": 2}, point, exact=True) is point
    assert match_eval_value({"x": "1", "y": 2}, point, exact=True) is None
    assert match_eval_value({"x": "1", "y": 2}, point) is None


def test_table_absent_fields_only_fail_exact_matching() -> None:
    point = TableType(fields={"x": NUMBER, "y": NUMBER})
    optional_y = TableType(fields={"x": NUMBER, "y": UnionType((NUMBER, NIL))})

    assert match_eval_value({"x": 1}, point) is point
    assert match_eval_value({"x": 1}, point, exact=True) is None
    assert match_eval_value({"x": 1}, optional_y, exact=True) is optional_y


def test_table_indexer_and_value_types() -> None:
    numbers = TableType(value=NUMBER)
    by_name = TableType(indexer=STRING, value=NUMBER)

    assert match_eval_value([1, 2, 3], numbers, exact=True) is numbers
    assert match_eval_value([1, "two"], numbers, exact=True) is None
    assert match_eval_value({"a": 1}, by_name, exact=True) is by_name
    assert match_eval_value({1: 1}, by_name, exact=True) is None
    assert match_eval_value("not a table", numbers) is None


def test_function_and_command_types_need_callables() -> None:
    assert match_eval_value(print, FunctionType(), exact=True) is not None
    assert match_eval_value(5, FunctionType(), exact=True) is None
    assert match_eval_value(len, CommandType("len"), exact=True) is not None


def test_strange_type_callbacks() -> None:
    anything = StrangeType(type="any", id="any")
    strict = StrangeType(
        type="id",
        id="id",
        match=lambda value: isinstance(value, str),
        exact_match=lambda value: isinstance(value, str) and value.startswith("id_"),
    )

    assert match_eval_value(object(), anything, exact=True) is anything
    assert match_eval_value("i", strict) is strict
    assert match_eval_value("i", strict, exact=True) is None
    assert match_eval_value("id_1", strict, exact=True) is strict


def test_strange_type_can_delegate_to_a_type() -> None:
    color = StrangeType(type="color", id="color", match=UnionType((LiteralType("red"), LiteralType("blue"))))

    assert match_eval_value("red", color, exact=True) is color
    assert match_eval_value("green", color, exact=True) is None


def test_unknown_type_is_rejected() -> None:
    with pytest.raises(TypeError):
        match_eval_value(1, "number")  # type: ignore[arg-type]


def test_accepts_nil() -> None:
    assert accepts_nil(UnionType((NUMBER, NIL)))
    assert not accepts_nil(NUMBER)
    assert not accepts_nil(None)


def test_describe_type() -> None:
    give = CommandType(
        "give",
        "Give an item",
        (
            CommandArgument("item", type=UnionType((LiteralType("sword"), LiteralType("shield")))),
            CommandArgument("count", type=UnionType((NUMBER, NIL))),
        ),
    )

    assert describe_type(give) == "give <item> [count]"
    assert describe_type(give.arguments[0]) == '"sword" | "shield"'
    assert describe_type(TableType(fields={"x": NUMBER}, fields_metadata={"x": FieldMetadata("x axis")})) == "{x: number}"
    assert describe_type(TableType(value=NUMBER)) == "{number}"
    assert describe_type(FunctionType(("a", "b"))) == "function(a, b)"
    assert describe_type(None) == "any"
    assert describe_type(CommandType("echo", arguments=(CommandArgument("values", varargs=True),))) == "echo <values...>"


def test_suggestions_for_literal_union() -> None:
    mode = UnionType((LiteralType("on"), LiteralType("off"), LiteralType("two words")))

    assert [suggestion.text for suggestion in suggestions_for_type(mode, "")] == ["on", "off", '"two words"']
    assert suggestions_for_type(NUMBER, "") == []


def test_strange_type_suggestions() -> None:
    players = StrangeType(
        type="player",
        id="player",
        suggestions=lambda text: ["alice", Suggestion(text="bob", display="Bob")],
    )

    suggestions = suggestions_for_type(players, "")
    assert [(suggestion.text, suggestion.display) for suggestion in suggestions] == [
        ("alice", "alice"),
        ("bob", "Bob"),
    ]
