"""Structural matching of runtime values against analysis types."""

from conch.analysis.types import (
    CommandArgument,
    CommandType,
    FunctionType,
    IntersectionType,
    LiteralType,
    StrangeType,
    Suggestion,
    TableType,
    Type,
    UnionType,
)
from conch.lexer import is_identifier
from conch.treewalker import format_value, values_equal


def match_eval_value(value: object, type: Type, exact: bool = False) -> Type | None:
    """Return the type that `value` matches, or None.

    Loose matching (`exact=False`) is used while an argument is still being
    typed: a string literal type then also accepts any prefix of itself.
    """
    match type:
        case LiteralType():
            return type if _match_literal(value, type, exact) else None
        case TableType():
            return type if _match_table(value, type, exact) else None
        case FunctionType() | CommandType():
            return type if callable(value) else None
        case UnionType():
            for member in type.fields:
                matched = match_eval_value(value, member, exact)
                if matched is not None:
                    return matched
            return None
        case IntersectionType():
            for member in type.fields:
                if match_eval_value(value, member, exact) is None:
                    return None
            return type
        case StrangeType():
            return type if type.matches(value, exact=exact) else None
    raise TypeError(f"Not an analysis type: {type!r}")


def _match_literal(value: object, type: LiteralType, exact: bool) -> bool:
    if not exact and isinstance(type.value, str) and isinstance(value, str):
        return type.value.startswith(value)
    return values_equal(value, type.value)


def _match_table(value: object, type: TableType, exact: bool) -> bool:
    if isinstance(value, list):
        items: dict[object, object] = {index: item for index, item in enumerate(value, start=1)}
    elif isinstance(value, dict):
        items = value
    else:
        return False

    fields = type.fields or {}
    for key, item in items.items():
        if key in fields:
            if match_eval_value(item, fields[key], exact) is None:
                return False
            continue
        if type.indexer is not None and match_eval_value(key, type.indexer, exact) is None:
            return False
        if type.value is not None and match_eval_value(item, type.value, exact) is None:
            return False

    # Absent declared fields only fail exact matching, and only when nil is not allowed.
    if exact:
        for key, field_type in fields.items():
            if key not in items and match_eval_value(None, field_type, True) is None:
                return False
    return True


def accepts_nil(type: Type | None) -> bool:
    return type is not None and match_eval_value(None, type, True) is not None


def describe_type(type: Type | CommandArgument | None) -> str:
    """Human readable rendering of a type for completion details."""
    match type:
        case None:
            return "any"
        case LiteralType():
            return format_value(type.value)
        case TableType():
            if type.fields:
                inner = ", ".join(f"{_key_name(key)}: {describe_type(field)}" for key, field in type.fields.items())
                return "{" + inner + "}"
            if type.value is not None:
                return f"{{{describe_type(type.value)}}}"
            return "table"
        case FunctionType():
            return f"function({', '.join(type.argument_names)})"
        case CommandType():
            return " ".join([type.name, *(_argument_signature(argument) for argument in type.arguments)])
        case UnionType():
            return " | ".join(describe_type(member) for member in type.fields) or "never"
        case IntersectionType():
            return " & ".join(describe_type(member) for member in type.fields) or "any"
        case StrangeType():
            return type.type
        case CommandArgument():
            return describe_type(type.type)
    raise TypeError(f"Not an analysis type: {type!r}")


def _argument_signature(argument: CommandArgument) -> str:
    dots = "..." if argument.varargs else ""
    if accepts_nil(argument.type):
        return f"[{argument.name}{dots}]"
    return f"<{argument.name}{dots}>"


def _key_name(key: object) -> str:
    return key if isinstance(key, str) else format_value(key)


def suggestions_for_type(type: Type, text: str) -> list[Suggestion]:
    """Values worth offering for an argument of `type`, unfiltered."""
    match type:
        case LiteralType():
            rendered = _render_literal(type.value)
            return [Suggestion(text=rendered, display=rendered)]
        case UnionType() | IntersectionType():
            suggestions: list[Suggestion] = []
            for member in type.fields:
                suggestions.extend(suggestions_for_type(member, text))
            return suggestions
        case StrangeType():
            return type.suggest(text)
    return []


def _render_literal(value: object) -> str:
    if isinstance(value, str) and is_identifier(value):
        return value
    return format_value(value)
