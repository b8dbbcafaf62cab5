"""conch: an embeddable command scripting language."""

from conch.analysis import (
    AnalysisOptions,
    AnalysisResult,
    CommandArgument,
    CommandType,
    FunctionType,
    IntersectionType,
    LanguageVm,
    LiteralType,
    StrangeType,
    Suggestion,
    TableType,
    UnionType,
    match_eval_value,
)
from conch.parser import ParseOutput, ParserOptions, parse
from conch.pipeline import (
    RunResult,
    TypeAnalysisInfo,
    analyze,
    attach_info,
    create_vm,
    run,
    set_command,
    set_variable,
)
from conch.treewalker import ExecutionOptions, Lambda, ScriptError

version = "0.1.0"

__all__ = [
    "AnalysisOptions",
    "AnalysisResult",
    "CommandArgument",
    "CommandType",
    "ExecutionOptions",
    "FunctionType",
    "IntersectionType",
    "Lambda",
    "LanguageVm",
    "LiteralType",
    "ParseOutput",
    "ParserOptions",
    "RunResult",
    "ScriptError",
    "StrangeType",
    "Suggestion",
    "TableType",
    "TypeAnalysisInfo",
    "UnionType",
    "analyze",
    "attach_info",
    "create_vm",
    "match_eval_value",
    "parse",
    "run",
    "set_command",
    "set_variable",
    "version",
]
