"""Runtime values and their conversions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from conch.ast import FunctionBody

if TYPE_CHECKING:
    from conch.treewalker.interpreter import Interpreter
    from conch.treewalker.state import Scope


class Lambda:
    """A script function value.

    Holds its defining scope by reference. Host code may call it like any
    Python function; a failure raises `ScriptError`.
    """

    __slots__ = ("body", "scope", "_interpreter")

    def __init__(self, body: FunctionBody, scope: Scope, interpreter: Interpreter) -> None:
        self.body = body
        self.scope = scope
        self._interpreter = interpreter

    @property
    def parameter_names(self) -> tuple[str, ...]:
        return self.body.parameter_names

    def __call__(self, *args: object) -> object:
        return unpack_values(self._interpreter.call_lambda(self, list(args)))

    def __repr__(self) -> str:
        return f"<lambda |{', '.join(self.parameter_names)}|>"


def is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_table_key(value: object) -> bool:
    """Strings, numbers and booleans; nil and containers cannot key a table."""
    return isinstance(value, (str, int, float))


def is_truthy(value: object) -> bool:
    return value is not None and value is not False


def is_callable(value: object) -> bool:
    return callable(value)


def type_name(value: object) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, dict):
        return "table"
    if isinstance(value, list):
        return "vector"
    if callable(value):
        return "function"
    return "object"


def values_equal(left: object, right: object) -> bool:
    if type_name(left) != type_name(right):
        return False
    return left == right


def pack_values(result: object) -> tuple[object, ...]:
    """Host return value to script values: None is none, a tuple is several."""
    if result is None:
        return ()
    if isinstance(result, tuple):
        return result
    return (result,)


def unpack_values(values: tuple[object, ...]) -> object:
    if not values:
        return None
    if len(values) == 1:
        return values[0]
    return values


def first_value(values: tuple[object, ...]) -> object:
    return values[0] if values else None


def format_number(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_display_string(value: object) -> str:
    """String form used by `..` and by the console.

    Raises `ValueError` for integers past the int-to-str digit limit.
    """
    if isinstance(value, str):
        return value
    if is_number(value):
        return format_number(value)
    return format_value(value)


def format_value(value: object) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        try:
            return format_number(value)
        except ValueError:
            return f"<{int(value).bit_length()}-bit integer>"
    if isinstance(value, str):
        return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'
    if isinstance(value, list):
        return "[" + ", ".join(format_value(item) for item in value) + "]"
    if isinstance(value, dict):
        fields = ", ".join(f"{_format_key(key)} = {format_value(item)}" for key, item in value.items())
        return "{" + fields + "}"
    if isinstance(value, Lambda):
        return repr(value)
    if callable(value):
        return f"<function {getattr(value, '__name__', type(value).__name__)}>"
    return str(value)


def _format_key(key: object) -> str:
    if isinstance(key, str) and key.isidentifier():
        return key
    return f"[{format_value(key)}]"
