"""Tree-walking interpreter."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from conch.ast import (
    Assign,
    Ast,
    Block,
    Break,
    Command,
    Continue,
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
    LastStatement,
    Return,
    Statement,
    TableFieldExpressionKey,
    TableFieldNameKey,
    Var,
    VarRootGlobal,
    VarRootName,
    VarRootParen,
    VarSuffix,
    VarSuffixNameIndex,
    While,
)
from conch.lexer import TokenKind, number_value, string_value
from conch.text import TextRange, line_number
from conch.treewalker.errors import ScriptError
from conch.treewalker.operators import OperatorError, binary_operation, unary_operation
from conch.treewalker.state import ExecutionState, PendingStatement, Scope, TraceEntry
from conch.treewalker.values import (
    Lambda,
    first_value,
    format_value,
    is_number,
    is_table_key,
    is_truthy,
    pack_values,
    type_name,
)

log = logging.getLogger(__name__)

type Node = Expression | ExpressionCommand


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    ok: bool
    values: tuple[object, ...] | None = None
    err: ScriptError | None = None


def execute(state: ExecutionState, ast: Ast, source: str = "") -> ExecutionResult:
    """Run `ast` against `state` in a fresh frame that is discarded afterwards.

    Runtime failures never escape: they come back as `ok=False`.
    """
    interpreter = Interpreter(state, source)
    previous = state.scope
    state.scope = previous.child(root=True)
    try:
        values = interpreter.run_root(ast.block)
    except RecursionError:
        # Nesting outside a lambda call, e.g. formatting a table that contains itself.
        return _failed(state, ScriptError("Maximum recursion depth exceeded"))
    except ScriptError as error:
        return _failed(state, error)
    finally:
        state.scope = previous

    log.debug("Script finished with %d value(s)", len(values or ()))
    return ExecutionResult(ok=True, values=values)


def _failed(state: ExecutionState, error: ScriptError) -> ExecutionResult:
    state.trace.clear()
    state.last_statement = None
    log.debug("Script failed: %s", error.describe())
    return ExecutionResult(ok=False, err=error)


class Interpreter:
    def __init__(self, state: ExecutionState, source: str = "") -> None:
        self.state = state
        self.source = source

    def error(self, message: str, span: TextRange | None) -> ScriptError:
        return ScriptError(message, span, tuple(self.state.trace))

    # -------------------------
    # Blocks and statements
    # -------------------------

    def run_root(self, block: Block) -> tuple[object, ...] | None:
        result: tuple[object, ...] | None = None
        for statement in block.body:
            result = self.execute_statement(statement)
            if self.state.last_statement is not None:
                break
        else:
            if block.last_statement is not None:
                self.execute_last_statement(block.last_statement)

        pending = self.state.last_statement
        if pending is None:
            return result
        self.state.last_statement = None
        if isinstance(pending.node, Return):
            return pending.values
        raise self.error(f"`{pending.node.token.text}` used outside of a loop", pending.node.span)

    @contextmanager
    def push_scope(self, scope: Scope) -> Iterator[Scope]:
        previous = self.state.scope
        self.state.scope = scope
        try:
            yield scope
        finally:
            self.state.scope = previous

    def execute_block(self, block: Block) -> None:
        with self.push_scope(self.state.scope.child()):
            self.execute_block_body(block)

    def execute_block_body(self, block: Block) -> None:
        for statement in block.body:
            self.execute_statement(statement)
            if self.state.last_statement is not None:
                return
        if block.last_statement is not None:
            self.execute_last_statement(block.last_statement)

    def execute_last_statement(self, node: LastStatement) -> None:
        values: tuple[object, ...] = ()
        if isinstance(node, Return):
            values = tuple(self.require_value(item.value, item.span) for item in node.values)
        self.state.last_statement = PendingStatement(self.state.scope, node, values)

    def execute_statement(self, statement: Statement) -> tuple[object, ...] | None:
        """Execute one statement; expression and command statements yield their values."""
        match statement:
            case Command():
                return self.call_command(statement)
            case ExpressionCommand():
                return self.call_expression_command(statement)
            case ExpressionStatement():
                return (self.evaluate(statement.expression),)
            case Assign():
                self.execute_assign(statement)
            case If():
                self.execute_if(statement)
            case While():
                self.execute_while(statement)
            case For():
                self.execute_for(statement)
            case ErrorNode():
                raise self.invalid_syntax(statement)
        return None

    def execute_if(self, node: If) -> None:
        branches = [node.first_branch, *(branch.branch for branch in node.branches)]
        for branch in branches:
            if branch.condition is None:
                raise self.error("Incomplete `if` condition", branch.span)
            condition = self.require_value(branch.condition.value, branch.condition.span)
            if is_truthy(condition):
                if branch.block is None:
                    raise self.error("Missing block for `if` branch", branch.span)
                self.execute_block(branch.block.value)
                return

        if node.else_branch is not None:
            if node.else_branch.block is None:
                raise self.error("Missing block for `else`", node.else_branch.span)
            self.execute_block(node.else_branch.block.value)

    def execute_while(self, node: While) -> None:
        if node.condition is None or node.block is None:
            raise self.error("Incomplete `while` loop", node.span)

        while is_truthy(self.require_value(node.condition.value, node.condition.span)):
            self.execute_block(node.block.value)
            if self.consume_loop_control():
                break

    def execute_for(self, node: For) -> None:
        if node.expression is None or node.body is None:
            raise self.error("Incomplete `for` loop", node.span)

        subject = self.require_value(node.expression.value, node.expression.span)
        body = self.evaluate(node.body)
        if not isinstance(body, Lambda):
            raise self.error(f"`for` body must be a lambda, got {type_name(body)}", node.body.span)

        for arguments in self.iterate(subject, node.expression.span):
            self.call_lambda(body, arguments, loop=True)
            if self.consume_loop_control():
                break

    def iterate(self, subject: object, span: TextRange) -> Iterator[list[object]]:
        if isinstance(subject, list):
            for index, value in enumerate(list(subject), start=1):
                yield [value, index]
        elif isinstance(subject, dict):
            for key, value in list(subject.items()):
                yield [value, key]
        elif is_number(subject):
            if not math.isfinite(subject):
                raise self.error(f"Cannot iterate over {format_value(subject)}", span)
            for index in range(1, int(subject) + 1):
                yield [index]
        else:
            raise self.error(f"Cannot iterate over {type_name(subject)}", span)

    def consume_loop_control(self) -> bool:
        """Handle a pending statement after one loop iteration; True stops the loop."""
        pending = self.state.last_statement
        if pending is None:
            return False
        if isinstance(pending.node, Break):
            self.state.last_statement = None
            return True
        if isinstance(pending.node, Continue):
            self.state.last_statement = None
            return False
        return True

    def execute_assign(self, node: Assign) -> None:
        value = self.require_value(node.value, node.span)
        target = node.target

        if not target.suffixes:
            name = self.scope_name(target)
            self.state.scope.assign(name, value)
            return

        container = self.evaluate_root(target)
        for suffix in target.suffixes[:-1]:
            container = self.index(container, self.suffix_key(suffix), suffix.span)
        last = target.suffixes[-1]
        self.set_index(container, self.suffix_key(last), value, last.span)

    def scope_name(self, var: Var) -> str:
        root = var.root
        if isinstance(root, VarRootGlobal):
            return root.token.text
        if isinstance(root, VarRootName):
            if root.name is None:
                raise self.error("Missing variable name after `$`", root.span)
            return root.name.text
        name = self.require_value(root.node.value, root.span)
        if not isinstance(name, str):
            raise self.error(f"Variable name must be a string, got {type_name(name)}", root.span)
        return name

    def set_index(self, container: object, key: object, value: object, span: TextRange) -> None:
        if container is None:
            raise self.error(f"Attempt to index nil with {format_value(key)}", span)
        if isinstance(container, dict):
            key = self.table_key(key, span)
            if value is None:
                container.pop(key, None)
            else:
                container[key] = value
            return

        if isinstance(container, list):
            index = self.vector_index(key, span)
            if 1 <= index <= len(container):
                container[index - 1] = value
            elif index == len(container) + 1:
                container.append(value)
            else:
                raise self.error(f"Vector index {index} out of range", span)
            return

        # Host objects are read-only from scripts.
        raise self.error(f"Cannot set a field on {type_name(container)}", span)

    # -------------------------
    # Commands
    # -------------------------

    def call_expression_command(self, node: ExpressionCommand) -> tuple[object, ...]:
        if node.command is None:
            raise self.error("Missing command after `&`", node.span)
        return self.call_command(node.command)

    def call_command(self, node: Command) -> tuple[object, ...]:
        name = var_display_name(node.var)
        callee = self.resolve_callee(node.var)

        arguments: list[object] = []
        for argument in node.arguments:
            if isinstance(argument, ExpressionEvaluate) and argument.command.value is None:
                continue
            arguments.append(self.evaluate(argument))

        if not callable(callee):
            if not arguments:
                return (callee,)
            raise self.error(f"`{name}` is not callable (got {type_name(callee)})", node.var.span)

        return self.invoke(callee, arguments, name, node.span)

    def resolve_callee(self, var: Var) -> object:
        name = var.global_name
        if name is not None and name not in self.state.globals and not self.state.scope.has(name):
            raise self.error(f"Unknown command `{name}`", var.span)
        return self.evaluate_var(var)

    def invoke(self, callee: object, arguments: list[object], name: str, span: TextRange) -> tuple[object, ...]:
        origin = "script" if isinstance(callee, Lambda) else "host"
        line = line_number(self.source, span.start) if self.source else None
        self.state.trace.append(TraceEntry(fn=callee, origin=origin, fn_name=name, line=line))
        try:
            if isinstance(callee, Lambda):
                return self.call_lambda(callee, arguments)
            try:
                result = callee(*arguments)
            except ScriptError:
                raise
            except Exception as exc:
                log.debug("Host command %s raised %r", name, exc)
                raise self.error(f"Command `{name}` failed: {exc}", span) from exc
            return pack_values(result)
        finally:
            self.state.trace.pop()

    def call_lambda(self, function: Lambda, arguments: list[object], *, loop: bool = False) -> tuple[object, ...]:
        """Call a script function.

        Return is consumed here. In loop mode every pending statement is left
        for the enclosing `for` to handle.
        """
        if self.state.call_depth >= self.state.options.max_call_depth:
            raise self.error("Maximum call depth exceeded", function.body.span)

        frame = function.scope.child(root=True)
        for index, name in enumerate(function.parameter_names):
            frame.vars[name] = arguments[index] if index < len(arguments) else None

        self.state.call_depth += 1
        try:
            with self.push_scope(frame):
                if function.body.block is not None:
                    self.execute_block_body(function.body.block.value)
        except RecursionError as exc:
            # Deep bodies can exhaust the Python stack before `max_call_depth` is reached.
            raise self.error("Maximum recursion depth exceeded", function.body.span) from exc
        finally:
            self.state.call_depth -= 1

        pending = self.state.last_statement
        if pending is None or loop:
            return ()
        self.state.last_statement = None
        if isinstance(pending.node, Return):
            return pending.values
        raise self.error(f"`{pending.node.token.text}` cannot escape a lambda", pending.node.span)

    # -------------------------
    # Expressions
    # -------------------------

    def require_value(self, node: Node | None, span: TextRange) -> object:
        if node is None:
            raise self.error("Missing expression", span)
        return self.evaluate(node)

    def evaluate(self, node: Node) -> object:
        match node:
            case ExpressionNil():
                return None
            case ExpressionBoolean():
                return node.token.kind == TokenKind.TRUE
            case ExpressionNumber():
                try:
                    return number_value(node.token)
                except ValueError as exc:
                    raise self.error("Number literal has too many digits", node.span) from exc
            case ExpressionString():
                return string_value(node.token)
            case ExpressionBinary():
                return self.evaluate_binary(node)
            case ExpressionUnary():
                value = self.require_value(node.value, node.span)
                try:
                    return unary_operation(node.operator.kind, value)
                except OperatorError as exc:
                    raise self.error(str(exc), node.span) from exc
            case ExpressionVector():
                return [self.require_value(item.value, item.span) for item in node.contents.value]
            case ExpressionTable():
                return self.evaluate_table(node)
            case ExpressionLambda():
                return Lambda(node.body, self.state.scope, self)
            case ExpressionEvaluate():
                inner = node.command.value
                return None if inner is None else self.evaluate(inner)
            case Var():
                return self.evaluate_var(node)
            case ExpressionCommand():
                return first_value(self.call_expression_command(node))
            case ErrorNode():
                raise self.invalid_syntax(node)
        raise self.error(f"Cannot evaluate {type(node).__name__}", getattr(node, "span", None))

    def evaluate_binary(self, node: ExpressionBinary) -> object:
        left = self.evaluate(node.left)
        kind = node.operator.kind
        if kind == TokenKind.AND:
            return self.require_value(node.right, node.span) if is_truthy(left) else left
        if kind == TokenKind.OR:
            return left if is_truthy(left) else self.require_value(node.right, node.span)

        right = self.require_value(node.right, node.span)
        try:
            return binary_operation(kind, left, right)
        except OperatorError as exc:
            raise self.error(str(exc), node.span) from exc

    def evaluate_table(self, node: ExpressionTable) -> dict[object, object]:
        table: dict[object, object] = {}
        position = 1
        for item in node.values.value:
            field = item.value
            if field is None:
                continue
            if isinstance(field, TableFieldNameKey):
                key: object = field.name.text
            elif isinstance(field, TableFieldExpressionKey):
                key = self.table_key(self.require_value(field.key.value, field.span), field.span)
            else:
                key = position
                position += 1
            value = self.require_value(field.value, field.span)
            if value is not None:
                table[key] = value
        return table

    def evaluate_var(self, var: Var) -> object:
        value = self.evaluate_root(var)
        for suffix in var.suffixes:
            value = self.index(value, self.suffix_key(suffix), suffix.span)
        return value

    def evaluate_root(self, var: Var) -> object:
        root = var.root
        if isinstance(root, VarRootGlobal):
            name = root.token.text
            if name in self.state.globals:
                return self.state.globals[name]
            return self.state.scope.get(name)
        if isinstance(root, (VarRootName, VarRootParen)):
            return self.state.scope.get(self.scope_name(var))
        raise self.error("Invalid variable", var.span)

    def suffix_key(self, suffix: VarSuffix) -> object:
        if isinstance(suffix, VarSuffixNameIndex):
            if suffix.name is None:
                raise self.error("Missing field name after `.`", suffix.span)
            return suffix.name.text
        return self.require_value(suffix.node.value, suffix.span)

    def index(self, container: object, key: object, span: TextRange) -> object:
        if container is None:
            raise self.error(f"Attempt to index nil with {format_value(key)}", span)
        if isinstance(container, dict):
            return None if key is None else container.get(self.table_key(key, span))
        if isinstance(container, list):
            index = self.vector_index(key, span)
            if 1 <= index <= len(container):
                return container[index - 1]
            return None
        if isinstance(container, (str, bool, int, float)):
            raise self.error(f"Cannot index {type_name(container)}", span)
        if not isinstance(key, str):
            raise self.error(f"Cannot index an object with {type_name(key)}", span)
        if key.startswith("_"):
            raise self.error(f"Cannot access private field `{key}`", span)
        return getattr(container, key, None)

    def table_key(self, key: object, span: TextRange) -> object:
        if key is None:
            raise self.error("Table key cannot be nil", span)
        if not is_table_key(key):
            raise self.error(f"Table key must be a string, number or boolean, got {type_name(key)}", span)
        return key

    def vector_index(self, key: object, span: TextRange) -> int:
        if not is_number(key) or (isinstance(key, float) and not key.is_integer()):
            raise self.error(f"Vectors are indexed by whole numbers, got {format_value(key)}", span)
        return int(key)

    def invalid_syntax(self, node: ErrorNode) -> ScriptError:
        text = " ".join(token.text for token in node.tokens)
        return self.error(f"Cannot execute invalid syntax `{text}`", node.span)


def var_display_name(var: Var) -> str:
    """Readable name of a var chain, used in traces and error messages."""
    root = var.root
    if isinstance(root, VarRootGlobal):
        parts = [root.token.text]
    elif isinstance(root, VarRootName):
        parts = ["$" + (root.name.text if root.name is not None else "")]
    else:
        parts = ["$(...)"]
    for suffix in var.suffixes:
        if isinstance(suffix, VarSuffixNameIndex):
            parts.append("." + (suffix.name.text if suffix.name is not None else ""))
        else:
            parts.append(".[...]")
    return "".join(parts)
