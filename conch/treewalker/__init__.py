"""Tree-walking interpreter."""

from conch.treewalker.errors import ScriptError
from conch.treewalker.interpreter import ExecutionResult, Interpreter, execute, var_display_name
from conch.treewalker.operators import OperatorError, binary_operation, unary_operation
from conch.treewalker.state import (
    ExecutionOptions,
    ExecutionState,
    PendingStatement,
    Scope,
    TraceEntry,
    create_state,
)
from conch.treewalker.values import (
    Lambda,
    format_value,
    is_callable,
    is_number,
    is_table_key,
    is_truthy,
    pack_values,
    to_display_string,
    type_name,
    unpack_values,
    values_equal,
)

__all__ = [
    "ExecutionOptions",
    "ExecutionResult",
    "ExecutionState",
    "Interpreter",
    "Lambda",
    "OperatorError",
    "PendingStatement",
    "Scope",
    "ScriptError",
    "TraceEntry",
    "binary_operation",
    "create_state",
    "execute",
    "format_value",
    "is_callable",
    "is_number",
    "is_table_key",
    "is_truthy",
    "pack_values",
    "to_display_string",
    "type_name",
    "unary_operation",
    "unpack_values",
    "values_equal",
]
