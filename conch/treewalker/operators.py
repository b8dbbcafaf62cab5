"""Binary and unary operator semantics."""

from collections.abc import Callable
from typing import Final

from conch.lexer import TokenKind
from conch.treewalker.values import (
    is_number,
    is_truthy,
    to_display_string,
    type_name,
    values_equal,
)


class OperatorError(Exception):
    """Operand mismatch; the interpreter attaches the span."""


def _arithmetic(verb: str, apply: Callable[[int | float, int | float], object], *, zero_check: bool = False):
    def operation(left: object, right: object) -> object:
        if not (is_number(left) and is_number(right)):
            raise OperatorError(f"Cannot {verb} {type_name(left)} and {type_name(right)}")
        if zero_check and right == 0:
            raise OperatorError("Division by zero")
        try:
            result = apply(left, right)
        except OverflowError as exc:
            raise OperatorError(f"Number too large to {verb}") from exc
        if isinstance(result, complex):
            raise OperatorError(f"Cannot {verb} {left} and {right}: result is not a real number")
        return result

    return operation


def _comparison(apply: Callable[[object, object], bool]):
    def operation(left: object, right: object) -> object:
        if is_number(left) and is_number(right):
            return apply(left, right)
        if isinstance(left, str) and isinstance(right, str):
            return apply(left, right)
        raise OperatorError(f"Cannot compare {type_name(left)} with {type_name(right)}")

    return operation


def _concat(left: object, right: object) -> object:
    for operand in (left, right):
        if isinstance(operand, (dict, list)) or callable(operand):
            raise OperatorError(f"Cannot concatenate a {type_name(operand)} value")
    try:
        return to_display_string(left) + to_display_string(right)
    except ValueError as exc:
        raise OperatorError("Cannot concatenate a number with that many digits") from exc


BINARY_OPERATIONS: Final[dict[TokenKind, Callable[[object, object], object]]] = {
    TokenKind.PLUS: _arithmetic("add", lambda a, b: a + b),
    TokenKind.MINUS: _arithmetic("subtract", lambda a, b: a - b),
    TokenKind.STAR: _arithmetic("multiply", lambda a, b: a * b),
    TokenKind.SLASH: _arithmetic("divide", lambda a, b: a / b, zero_check=True),
    TokenKind.SLASH_SLASH: _arithmetic("divide", lambda a, b: a // b, zero_check=True),
    TokenKind.PERCENT: _arithmetic("take the modulo of", lambda a, b: a % b, zero_check=True),
    TokenKind.CARET: _arithmetic("exponentiate", lambda a, b: a**b),
    TokenKind.LESS_THAN: _comparison(lambda a, b: a < b),
    TokenKind.LESS_THAN_OR_EQUAL: _comparison(lambda a, b: a <= b),
    TokenKind.GREATER_THAN: _comparison(lambda a, b: a > b),
    TokenKind.GREATER_THAN_OR_EQUAL: _comparison(lambda a, b: a >= b),
    TokenKind.EQUAL_EQUAL: values_equal,
    TokenKind.NOT_EQUAL: lambda a, b: not values_equal(a, b),
    TokenKind.TILDE_EQUAL: lambda a, b: not values_equal(a, b),
    TokenKind.DOT_DOT: _concat,
}


def binary_operation(kind: TokenKind, left: object, right: object) -> object:
    """Apply a non short-circuit binary operator."""
    operation = BINARY_OPERATIONS.get(kind)
    if operation is None:
        raise OperatorError(f"Unsupported binary operator {kind.name}")
    return operation(left, right)


def unary_operation(kind: TokenKind, value: object) -> object:
    if kind == TokenKind.BANG:
        return not is_truthy(value)
    if kind == TokenKind.MINUS:
        if not is_number(value):
            raise OperatorError(f"Cannot negate {type_name(value)}")
        return -value
    raise OperatorError(f"Unsupported unary operator {kind.name}")
