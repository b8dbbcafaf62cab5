"""Completion and semantic diagnostics over partial input.

The analyzer walks the (possibly partial) AST in document order, tracking
which variables are visible, and records what is expected at the cursor:
a command name, an argument of a declared type, a local variable or a table
field. Semantic issues are collected for the whole input along the way.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Final

from conch.analysis.matching import accepts_nil, describe_type, match_eval_value, suggestions_for_type
from conch.analysis.types import (
    AdditionalInfo,
    AnalysisOptions,
    AnalysisResult,
    CommandArgument,
    CommandType,
    LanguageVm,
    Metadata,
    Suggestion,
    SuggestionKind,
    TableType,
    Type,
)
from conch.ast import (
    Assign,
    Block,
    Command,
    Delimited,
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
    If,
    Return,
    SimpleExpression,
    Statement,
    TableFieldExpressionKey,
    TableFieldNameKey,
    Var,
    VarRootGlobal,
    VarRootName,
    VarRootParen,
    VarSuffixNameIndex,
    While,
)
from conch.diagnostics import (
    ANALYSIS_ARGUMENT_COUNT,
    ANALYSIS_TOO_DEEP,
    ANALYSIS_TYPE_MISMATCH,
    ANALYSIS_UNKNOWN_COMMAND,
    ANALYSIS_UNKNOWN_VARIABLE,
    Diagnostic,
    DiagnosticSpec,
    sort_diagnostics,
)
from conch.lexer import TokenKind, number_value, string_value
from conch.parser import ParseOutput, parse
from conch.text import TextRange, cover_all
from conch.treewalker import OperatorError, binary_operation, format_value, is_table_key, unary_operation

log = logging.getLogger(__name__)

type Node = Expression | ExpressionCommand


class _Unknown:
    """Marker for values that cannot be evaluated statically."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "UNKNOWN"


UNKNOWN: Final = _Unknown()

_LITERAL_NODES = (ExpressionString, ExpressionNumber, ExpressionBoolean, ExpressionNil)


@dataclass(frozen=True, slots=True)
class Completion:
    replace: TextRange
    candidates: list[Suggestion]
    prefix: str
    additional_info: AdditionalInfo | None = None


@lru_cache(maxsize=64)
def parse_cached(text: str) -> ParseOutput:
    log.debug("Analysis parse cache miss (%d chars)", len(text))
    return parse(text)


def analyze(
    vm: LanguageVm,
    text: str,
    cursor: int,
    options: AnalysisOptions | None = None,
) -> AnalysisResult:
    """Suggestions and issues for `text` with the caret at `cursor`."""
    resolved_options = options or AnalysisOptions()
    cursor = max(0, min(cursor, len(text)))
    parsed = parse_cached(text)

    walker = AnalysisWalker(vm, text, cursor, resolved_options)
    if parsed.result is not None:
        try:
            walker.walk_root(parsed.result.block)
        except RecursionError:
            log.debug("Analysis stopped: recursion limit reached")
            walker.issue(ANALYSIS_TOO_DEEP, parsed.result.block.span, ANALYSIS_TOO_DEEP.message)
            walker.completion = None

    completion = walker.completion or walker.statement_start_completion()
    issues = sort_diagnostics([*parsed.issues, *walker.issues])
    if completion is None:
        return AnalysisResult(replace=TextRange.empty(cursor), suggestions=[], issues=issues)

    return AnalysisResult(
        replace=completion.replace,
        suggestions=rank_suggestions(completion, resolved_options.max_suggestions),
        issues=issues,
        additional_info=completion.additional_info,
    )


def rank_suggestions(completion: Completion, limit: int) -> list[Suggestion]:
    """Prefix filter (case-insensitive), exact-case prefix matches first, then alphabetical."""
    prefix = completion.prefix
    lowered = prefix.lower()
    seen: set[str] = set()
    ranked: list[Suggestion] = []
    for suggestion in completion.candidates:
        if suggestion.text in seen or not suggestion.text.lower().startswith(lowered):
            continue
        seen.add(suggestion.text)
        if suggestion.replace is None:
            suggestion = replace(suggestion, replace=completion.replace)
        ranked.append(suggestion)

    ranked.sort(key=lambda suggestion: (not suggestion.text.startswith(prefix), suggestion.text.lower(), suggestion.text))
    return ranked[:limit]


class AnalysisWalker:
    def __init__(self, vm: LanguageVm, text: str, cursor: int, options: AnalysisOptions) -> None:
        self.vm = vm
        self.text = text
        self.cursor = cursor
        self.options = options
        self.frames: list[dict[str, object]] = [vm.state.scope.visible()]
        self.issues: list[Diagnostic] = []
        self.completion: Completion | None = None

    # -------------------------
    # Scopes
    # -------------------------

    @contextmanager
    def frame(self, names: dict[str, object] | None = None) -> Iterator[None]:
        self.frames.append(dict(names or {}))
        try:
            yield
        finally:
            self.frames.pop()

    def lookup(self, name: str) -> tuple[bool, object]:
        for frame in reversed(self.frames):
            if name in frame:
                return True, frame[name]
        return False, UNKNOWN

    def define(self, name: str, value: object) -> None:
        for frame in reversed(self.frames):
            if name in frame:
                frame[name] = value
                return
        self.frames[-1][name] = value

    def visible_names(self) -> list[str]:
        names: dict[str, None] = {}
        for frame in self.frames:
            names.update(dict.fromkeys(frame))
        names.update(dict.fromkeys(self.vm.vars_metadata))
        return list(names)

    # -------------------------
    # Statements
    # -------------------------

    def walk_root(self, block: Block) -> None:
        with self.frame():
            self.walk_block_body(block)

    def walk_block(self, block: Delimited[Block] | None) -> None:
        if block is None:
            return
        with self.frame():
            self.walk_block_body(block.value)

    def walk_block_body(self, block: Block) -> None:
        for statement in block.body:
            self.walk_statement(statement)
        if isinstance(block.last_statement, Return):
            for item in block.last_statement.values:
                self.walk_optional(item.value)

    def walk_statement(self, statement: Statement) -> None:
        match statement:
            case Command():
                self.walk_command(statement, kind=None)
            case ExpressionCommand():
                self.walk_expression_command(statement)
            case ExpressionStatement():
                self.walk_expression(statement.expression)
            case Assign():
                self.walk_assign(statement)
            case If():
                branches = [statement.first_branch, *(branch.branch for branch in statement.branches)]
                for branch in branches:
                    if branch.condition is not None:
                        self.walk_optional(branch.condition.value)
                    self.walk_block(branch.block)
                if statement.else_branch is not None:
                    self.walk_block(statement.else_branch.block)
            case While():
                if statement.condition is not None:
                    self.walk_optional(statement.condition.value)
                self.walk_block(statement.block)
            case For():
                if statement.expression is not None:
                    self.walk_optional(statement.expression.value)
                self.walk_optional(statement.body)
            case ErrorNode():
                pass

    def walk_assign(self, node: Assign) -> None:
        target = node.target
        self.walk_optional(node.value)

        if target.suffixes:
            self.walk_var(target, "assign")
            return

        name = self.assigned_name(target)
        root = target.root
        token = root.token if isinstance(root, VarRootGlobal) else getattr(root, "name", None)
        if isinstance(root, VarRootName) and token is None and root.dollar.range.end == self.cursor:
            self.complete_locals(TextRange.empty(self.cursor), "", "assign")
        elif token is not None and token.range.contains_inclusive(self.cursor):
            self.complete_locals(token.range, token.text, "assign")
        elif isinstance(root, VarRootParen) and root.node.value is not None:
            self.walk_expression(root.node.value)

        if name is not None:
            value = self.static_value(node.value) if node.value is not None else UNKNOWN
            self.define(name, value)

    def assigned_name(self, var: Var) -> str | None:
        root = var.root
        if isinstance(root, VarRootGlobal):
            return root.token.text
        if isinstance(root, VarRootName) and root.name is not None:
            return root.name.text
        return None

    # -------------------------
    # Expressions
    # -------------------------

    def walk_optional(self, node: Node | None) -> None:
        if node is not None:
            self.walk_expression(node)

    def walk_expression(self, node: Node, kind: SuggestionKind | None = "expression") -> None:
        match node:
            case ExpressionBinary():
                self.walk_expression(node.left)
                self.walk_optional(node.right)
            case ExpressionUnary():
                self.walk_optional(node.value)
            case ExpressionVector():
                for item in node.contents.value:
                    self.walk_optional(item.value)
            case ExpressionTable():
                for item in node.values.value:
                    field = item.value
                    if isinstance(field, TableFieldExpressionKey):
                        self.walk_optional(field.key.value)
                    if field is not None:
                        self.walk_optional(field.value)
            case ExpressionLambda():
                self.walk_lambda(node)
            case ExpressionEvaluate():
                self.walk_optional(node.command.value)
            case Var():
                self.walk_var(node, kind)
            case ExpressionCommand():
                self.walk_expression_command(node)

    def walk_lambda(self, node: ExpressionLambda) -> None:
        body = node.body
        if body.block is None:
            return
        with self.frame(dict.fromkeys(body.parameter_names, UNKNOWN)):
            self.walk_block_body(body.block.value)

    def walk_var(self, var: Var, kind: SuggestionKind | None) -> None:
        root = var.root
        if isinstance(root, VarRootGlobal):
            token = root.token
            if token.range.contains_inclusive(self.cursor):
                self.complete_globals(token.range, token.text, kind)
        elif isinstance(root, VarRootName):
            if root.name is None:
                if root.dollar.range.end == self.cursor:
                    self.complete_locals(TextRange.empty(self.cursor), "", kind)
            elif root.name.range.contains_inclusive(self.cursor):
                self.complete_locals(root.name.range, root.name.text, kind)
            elif self.options.report_unknown_variables and not self.is_known_variable(root.name.text):
                self.issue(
                    ANALYSIS_UNKNOWN_VARIABLE,
                    root.span,
                    f"Unknown variable `${root.name.text}`",
                )
        else:
            self.walk_optional(root.node.value)

        for index, suffix in enumerate(var.suffixes):
            if isinstance(suffix, VarSuffixNameIndex):
                if suffix.name is None:
                    if suffix.period.range.end == self.cursor:
                        self.complete_fields(var, index, TextRange.empty(self.cursor), "")
                elif suffix.name.range.contains_inclusive(self.cursor):
                    self.complete_fields(var, index, suffix.name.range, suffix.name.text)
            else:
                self.walk_optional(suffix.node.value)

    def is_known_variable(self, name: str) -> bool:
        found, _ = self.lookup(name)
        return found or name in self.vm.vars_metadata

    # -------------------------
    # Commands
    # -------------------------

    def walk_expression_command(self, node: ExpressionCommand) -> None:
        if node.command is None:
            if node.prefix.range.end == self.cursor:
                self.complete_globals(TextRange.empty(self.cursor), "", "expression")
            return
        self.walk_command(node.command, kind="expression")

    def walk_command(self, node: Command, kind: SuggestionKind | None) -> None:
        var = node.var
        name = var.global_name
        command_type = self.command_type(name)

        if name is None:
            self.walk_var(var, kind)
        else:
            token = var.root.token
            if token.range.contains_inclusive(self.cursor):
                self.complete_globals(token.range, token.text, kind)
            if name not in self.vm.state.globals and not self.lookup(name)[0]:
                self.issue(ANALYSIS_UNKNOWN_COMMAND, var.span, f"Unknown command `{name}`")

        arguments = effective_arguments(node)
        index = self.argument_index_at_cursor(node, arguments)
        if index is not None:
            self.complete_argument(command_type, arguments, index)

        for argument in node.arguments:
            self.walk_expression(argument)

        if command_type is not None:
            self.check_arguments(node, command_type, arguments)

    def command_type(self, name: str | None) -> CommandType | None:
        if name is None:
            return None
        metadata = self.vm.global_metadata.get(name)
        return metadata if isinstance(metadata, CommandType) else None

    def argument_index_at_cursor(self, node: Command, arguments: list[SimpleExpression]) -> int | None:
        cursor = self.cursor
        if cursor <= node.var.span.end:
            return None
        for index, argument in enumerate(arguments):
            if argument.span.contains_inclusive(cursor):
                return index
        if cursor > node.span.end:
            return len(arguments) if self.is_blank(node.span.end, cursor) else None
        return sum(1 for argument in arguments if argument.span.end < cursor)

    def complete_argument(self, command_type: CommandType | None, arguments: list[SimpleExpression], index: int) -> None:
        argument = arguments[index] if index < len(arguments) else None
        spec = argument_spec(command_type, index)

        candidates: list[Suggestion] = []
        if argument is None:
            replace_range, prefix = TextRange.empty(self.cursor), ""
        elif isinstance(argument, _LITERAL_NODES):
            replace_range, prefix = argument.token.range, argument.token.text
        else:
            replace_range, prefix = TextRange.empty(self.cursor), ""

        info = None
        if spec is not None:
            info = AdditionalInfo(name=spec.name, description=spec.description, type=describe_type(spec.type))
            if spec.type is not None and (argument is None or isinstance(argument, _LITERAL_NODES)):
                candidates = suggestions_for_type(spec.type, prefix)

        self.completion = Completion(replace_range, candidates, prefix, info)

    def check_arguments(self, node: Command, command_type: CommandType, arguments: list[SimpleExpression]) -> None:
        specs = command_type.arguments
        has_varargs = bool(specs) and specs[-1].varargs

        if not has_varargs and len(arguments) > len(specs):
            extra = cover_all(*(argument.span for argument in arguments[len(specs) :]))
            if extra is not None:
                self.issue(
                    ANALYSIS_ARGUMENT_COUNT,
                    extra,
                    f"`{command_type.name}` takes {len(specs)} argument(s) but {len(arguments)} were given",
                )

        required = [spec for spec in specs if not spec.varargs and not accepts_nil(spec.type)]
        missing = [spec for position, spec in enumerate(specs) if spec in required and position >= len(arguments)]
        if missing and not self.cursor_at_end(node.span):
            self.issue(
                ANALYSIS_ARGUMENT_COUNT,
                node.var.span,
                f"Missing argument `{missing[0].name}` for `{command_type.name}`",
            )

        for index, argument in enumerate(arguments):
            spec = argument_spec(command_type, index)
            if spec is None or spec.type is None:
                continue
            value = self.static_value(argument)
            if value is UNKNOWN:
                continue
            exact = not argument.span.contains_inclusive(self.cursor)
            if match_eval_value(value, spec.type, exact) is None:
                self.issue(
                    ANALYSIS_TYPE_MISMATCH,
                    argument.span,
                    f"Argument `{spec.name}` expects {describe_type(spec.type)}, got {format_value(value)}",
                )

    # -------------------------
    # Completion sources
    # -------------------------

    def complete_globals(self, replace_range: TextRange, prefix: str, kind: SuggestionKind | None) -> None:
        candidates = [
            Suggestion(text=name, display=name, kind=kind, metadata=self.metadata_for(name, self.vm.global_metadata))
            for name in self.vm.state.globals
        ]
        info = None
        command_type = self.command_type(prefix)
        if command_type is not None:
            info = AdditionalInfo(
                name=command_type.name,
                description=command_type.description,
                type=describe_type(command_type),
            )
        self.completion = Completion(replace_range, candidates, prefix, info)

    def complete_locals(self, replace_range: TextRange, prefix: str, kind: SuggestionKind | None) -> None:
        candidates = [
            Suggestion(text=name, display=f"${name}", kind=kind, metadata=self.metadata_for(name, self.vm.vars_metadata))
            for name in self.visible_names()
        ]
        self.completion = Completion(replace_range, candidates, prefix)

    def complete_fields(self, var: Var, index: int, replace_range: TextRange, prefix: str) -> None:
        value, value_type = self.resolve_var(var, index)
        candidates: list[Suggestion] = []

        if isinstance(value, dict):
            for key in value:
                if isinstance(key, str):
                    candidates.append(Suggestion(text=key, display=key, kind="expression"))

        if isinstance(value_type, TableType) and value_type.fields:
            field_metadata = value_type.fields_metadata or {}
            for key, field_type in value_type.fields.items():
                if not isinstance(key, str):
                    continue
                description = field_metadata[key].description if key in field_metadata else None
                metadata = Metadata(name=key, description=description or "", type=describe_type(field_type))
                candidates.append(Suggestion(text=key, display=key, kind="expression", metadata=metadata))

        self.completion = Completion(replace_range, candidates, prefix)

    def metadata_for(self, name: str, source: dict[str, Type]) -> Metadata | None:
        attached = source.get(name)
        if attached is None:
            return None
        if isinstance(attached, CommandType):
            return Metadata(name=attached.name, description=attached.description or "", type=describe_type(attached))
        return Metadata(name=name, description="", type=describe_type(attached))

    def statement_start_completion(self) -> Completion | None:
        """Offer commands when the cursor sits where a new statement would begin."""
        line_start = max(self.text.rfind(stop, 0, self.cursor) for stop in ("\n", ";", "{")) + 1
        if not self.is_blank(line_start, self.cursor):
            return None
        candidates = [
            Suggestion(text=name, display=name, metadata=self.metadata_for(name, self.vm.global_metadata))
            for name in self.vm.state.globals
        ]
        return Completion(TextRange.empty(self.cursor), candidates, "")

    # -------------------------
    # Static evaluation
    # -------------------------

    def resolve_var(self, var: Var, suffix_count: int | None = None) -> tuple[object, Type | None]:
        """Static value and attached type of a var chain, up to `suffix_count` suffixes."""
        root = var.root
        value: object = UNKNOWN
        value_type: Type | None = None
        if isinstance(root, VarRootGlobal):
            name = root.token.text
            if name in self.vm.state.globals:
                value = self.vm.state.globals[name]
            else:
                value = self.lookup(name)[1]
            value_type = self.vm.global_metadata.get(name)
        elif isinstance(root, VarRootName) and root.name is not None:
            value = self.lookup(root.name.text)[1]
            value_type = self.vm.vars_metadata.get(root.name.text)

        suffixes = var.suffixes if suffix_count is None else var.suffixes[:suffix_count]
        for suffix in suffixes:
            if isinstance(suffix, VarSuffixNameIndex):
                key: object = suffix.name.text if suffix.name is not None else UNKNOWN
            else:
                key = self.static_value(suffix.node.value) if suffix.node.value is not None else UNKNOWN
            value = static_index(value, key)
            value_type = field_type(value_type, key)
        return value, value_type

    def static_value(self, node: Node | None) -> object:
        match node:
            case ExpressionNil():
                return None
            case ExpressionBoolean():
                return node.token.kind == TokenKind.TRUE
            case ExpressionNumber():
                try:
                    return number_value(node.token)
                except ValueError:
                    return UNKNOWN
            case ExpressionString():
                return string_value(node.token)
            case ExpressionUnary():
                value = self.static_value(node.value)
                if value is UNKNOWN:
                    return UNKNOWN
                try:
                    return unary_operation(node.operator.kind, value)
                except OperatorError:
                    return UNKNOWN
            case ExpressionBinary():
                return self.static_binary(node)
            case ExpressionVector():
                items = [self.static_value(item.value) if item.value is not None else UNKNOWN for item in node.contents.value]
                return UNKNOWN if any(item is UNKNOWN for item in items) else items
            case ExpressionTable():
                return self.static_table(node)
            case ExpressionEvaluate():
                return None if node.command.value is None else self.static_value(node.command.value)
            case Var():
                return self.resolve_var(node)[0]
        return UNKNOWN

    def static_binary(self, node: ExpressionBinary) -> object:
        # `and`/`or` short-circuit at runtime; `^` is never folded.
        if node.operator.kind in (TokenKind.AND, TokenKind.OR, TokenKind.CARET) or node.right is None:
            return UNKNOWN
        left = self.static_value(node.left)
        right = self.static_value(node.right)
        if left is UNKNOWN or right is UNKNOWN:
            return UNKNOWN
        try:
            return binary_operation(node.operator.kind, left, right)
        except OperatorError:
            return UNKNOWN

    def static_table(self, node: ExpressionTable) -> object:
        table: dict[object, object] = {}
        position = 1
        for item in node.values.value:
            field = item.value
            if field is None or field.value is None:
                return UNKNOWN
            if isinstance(field, TableFieldNameKey):
                key: object = field.name.text
            elif isinstance(field, TableFieldExpressionKey):
                key = self.static_value(field.key.value) if field.key.value is not None else UNKNOWN
            else:
                key = position
                position += 1
            value = self.static_value(field.value)
            if key is UNKNOWN or not is_table_key(key) or value is UNKNOWN:
                return UNKNOWN
            if value is not None:
                table[key] = value
        return table

    # -------------------------
    # Helpers
    # -------------------------

    def issue(self, spec: DiagnosticSpec, span: TextRange, message: str) -> None:
        self.issues.append(Diagnostic.from_spec(spec, span, message))

    def is_blank(self, start: int, end: int) -> bool:
        return start <= end and self.text[start:end].strip(" \t") == ""

    def cursor_at_end(self, span: TextRange) -> bool:
        """Whether the user is still typing at the end of `span`."""
        if not span.start <= self.cursor:
            return False
        return self.cursor <= span.end or self.is_blank(span.end, self.cursor)


def effective_arguments(node: Command) -> list[SimpleExpression]:
    """Arguments that contribute a value; an empty `()` contributes none."""
    return [
        argument
        for argument in node.arguments
        if not (isinstance(argument, ExpressionEvaluate) and argument.command.value is None)
    ]


def argument_spec(command_type: CommandType | None, index: int) -> CommandArgument | None:
    if command_type is None or not command_type.arguments:
        return None
    specs = command_type.arguments
    if index < len(specs):
        return specs[index]
    if specs[-1].varargs:
        return specs[-1]
    return None


def static_index(value: object, key: object) -> object:
    if key is UNKNOWN:
        return UNKNOWN
    if isinstance(value, dict):
        return value.get(key, UNKNOWN) if is_table_key(key) else UNKNOWN
    if isinstance(value, list) and isinstance(key, int) and not isinstance(key, bool):
        return value[key - 1] if 1 <= key <= len(value) else UNKNOWN
    return UNKNOWN


def field_type(table_type: Type | None, key: object) -> Type | None:
    if not isinstance(table_type, TableType):
        return None
    if table_type.fields and is_table_key(key) and key in table_type.fields:
        return table_type.fields[key]
    return table_type.value
