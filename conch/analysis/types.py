"""Structural type model used by the analysis engine."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Literal

from conch.diagnostics import Diagnostic
from conch.text import TextRange
from conch.treewalker import ExecutionState

type LiteralValue = str | bool | int | float | None
type SuggestionKind = Literal["expression", "assign"]


@dataclass(frozen=True, slots=True)
class Metadata:
    name: str
    description: str
    type: str


@dataclass(frozen=True, slots=True)
class Suggestion:
    """One completion candidate. `replace` spans exactly the text it overwrites."""

    text: str
    display: str
    replace: TextRange | None = None
    kind: SuggestionKind | None = None
    metadata: Metadata | None = None


@dataclass(frozen=True, slots=True)
class LiteralType:
    """Matches only one exact value."""

    value: LiteralValue
    kind: Literal["literal"] = "literal"


@dataclass(frozen=True, slots=True)
class FieldMetadata:
    description: str | None = None


@dataclass(frozen=True, slots=True, eq=False)
class TableType:
    """Table (or vector) shape.

    `fields` types known keys; `indexer` and `value` type every other key and
    its value, for homogeneous collections.
    """

    fields: Mapping[object, Type] | None = None
    fields_metadata: Mapping[object, FieldMetadata] | None = None
    indexer: Type | None = None
    value: Type | None = None
    kind: Literal["table"] = "table"


@dataclass(frozen=True, slots=True)
class FunctionType:
    argument_names: tuple[str, ...] = ()
    kind: Literal["function"] = "function"


@dataclass(frozen=True, slots=True)
class CommandArgument:
    name: str
    description: str = ""
    type: Type | None = None
    varargs: bool = False
    kind: Literal["argument"] = "argument"


@dataclass(frozen=True, slots=True)
class CommandType:
    name: str
    description: str | None = None
    arguments: tuple[CommandArgument, ...] = ()
    kind: Literal["command"] = "command"


@dataclass(frozen=True, slots=True)
class UnionType:
    fields: tuple[Type, ...]
    kind: Literal["union"] = "union"


@dataclass(frozen=True, slots=True)
class IntersectionType:
    fields: tuple[Type, ...]
    kind: Literal["intersection"] = "intersection"


type Matcher = Type | Callable[[object], bool]
type SuggestionSource = Type | Callable[[str], Sequence[Suggestion | str]]


@dataclass(frozen=True, slots=True, eq=False)
class StrangeType:
    """Host-defined type with its own matching and suggestions.

    `match` and `exact_match` are either a `Type` to delegate to or a
    predicate. When absent, every value matches. Subclasses may override
    `matches` and `suggest` directly.
    """

    type: str
    id: str
    match: Matcher | None = None
    exact_match: Matcher | None = None
    suggestions: SuggestionSource | None = None
    convert: Callable[[object], object] | None = None
    kind: Literal["strange"] = "strange"

    def matches(self, value: object, *, exact: bool = False) -> bool:
        from conch.analysis.matching import match_eval_value

        matcher = self.exact_match if exact and self.exact_match is not None else self.match
        if matcher is None:
            return True
        if is_type(matcher):
            return match_eval_value(value, matcher, exact) is not None
        return bool(matcher(value))

    def suggest(self, text: str) -> list[Suggestion]:
        from conch.analysis.matching import suggestions_for_type

        source = self.suggestions
        if source is None:
            return []
        if is_type(source):
            return suggestions_for_type(source, text)
        return [item if isinstance(item, Suggestion) else Suggestion(text=item, display=item) for item in source(text)]


type Type = (
    LiteralType | TableType | FunctionType | CommandType | UnionType | IntersectionType | StrangeType
)

TYPE_CLASSES: tuple[type, ...] = (
    LiteralType,
    TableType,
    FunctionType,
    CommandType,
    UnionType,
    IntersectionType,
    StrangeType,
)


def is_type(value: object) -> bool:
    return isinstance(value, TYPE_CLASSES)


@dataclass(frozen=True, slots=True)
class AdditionalInfo:
    name: str
    description: str | None
    type: str


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    replace: TextRange
    suggestions: list[Suggestion]
    issues: list[Diagnostic]
    additional_info: AdditionalInfo | None = None


@dataclass(frozen=True, slots=True)
class AnalysisOptions:
    max_suggestions: int = 50
    report_unknown_variables: bool = True


@dataclass(slots=True)
class LanguageVm:
    """Execution state plus the type information attached by the host."""

    state: ExecutionState
    global_metadata: dict[str, Type] = field(default_factory=dict)
    vars_metadata: dict[str, Type] = field(default_factory=dict)
