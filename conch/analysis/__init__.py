"""Structural types, completion and semantic diagnostics."""

from conch.analysis.analyzer import UNKNOWN, AnalysisWalker, analyze, parse_cached, rank_suggestions
from conch.analysis.matching import accepts_nil, describe_type, match_eval_value, suggestions_for_type
from conch.analysis.types import (
    AdditionalInfo,
    AnalysisOptions,
    AnalysisResult,
    CommandArgument,
    CommandType,
    FieldMetadata,
    FunctionType,
    IntersectionType,
    LanguageVm,
    LiteralType,
    Metadata,
    StrangeType,
    Suggestion,
    SuggestionKind,
    TableType,
    Type,
    UnionType,
    is_type,
)

__all__ = [
    "UNKNOWN",
    "AdditionalInfo",
    "AnalysisOptions",
    "AnalysisResult",
    "AnalysisWalker",
    "CommandArgument",
    "CommandType",
    "FieldMetadata",
    "FunctionType",
    "IntersectionType",
    "LanguageVm",
    "LiteralType",
    "Metadata",
    "StrangeType",
    "Suggestion",
    "SuggestionKind",
    "TableType",
    "Type",
    "UnionType",
    "accepts_nil",
    "analyze",
    "describe_type",
    "is_type",
    "match_eval_value",
    "parse_cached",
    "rank_suggestions",
    "suggestions_for_type",
]
