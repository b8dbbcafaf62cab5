"""Generic traversal over AST nodes."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import fields

from conch.ast.model import Delimited, SeparatedItem
from conch.lexer import Token


def iter_children(node: object, *, include_tokens: bool = False) -> Iterator[object]:
    """Yield the direct AST children of a node in document order.

    `Delimited` and `SeparatedItem` wrappers are flattened away; their tokens
    are yielded only with `include_tokens=True`.
    """
    for field in fields(node):  # type: ignore[arg-type]
        if field.name in ("span", "kind"):
            continue
        yield from _flatten(getattr(node, field.name), include_tokens)


def _flatten(value: object, include_tokens: bool) -> Iterator[object]:
    if value is None:
        return
    if isinstance(value, Token):
        if include_tokens:
            yield value
        return
    if isinstance(value, tuple):
        for item in value:
            yield from _flatten(item, include_tokens)
        return
    if isinstance(value, Delimited):
        yield from _flatten(value.left, include_tokens)
        yield from _flatten(value.value, include_tokens)
        yield from _flatten(value.right, include_tokens)
        return
    if isinstance(value, SeparatedItem):
        yield from _flatten(value.value, include_tokens)
        yield from _flatten(value.separator, include_tokens)
        return
    yield value


def walk(node: object) -> Iterator[object]:
    """Pre-order traversal of a node and all of its descendants."""
    yield node
    for child in iter_children(node):
        yield from walk(child)
