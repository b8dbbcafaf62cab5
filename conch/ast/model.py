"""AST data model for conch source.

Every part that can be missing because of a parse error is optional, so a
tree always describes "what was parsed so far" rather than "what is valid".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

from conch.lexer import Token
from conch.text import TextRange

V = TypeVar("V")


@dataclass(frozen=True, slots=True)
class Delimited(Generic[V]):
    """`left value right` where the closing token may be missing."""

    left: Token
    value: V
    right: Token | None

    @property
    def span(self) -> TextRange:
        end = self.right.range.end if self.right is not None else _end_of(self.value, self.left.range.end)
        return TextRange(self.left.range.start, end)


@dataclass(frozen=True, slots=True)
class SeparatedItem(Generic[V]):
    """One list element together with its own trailing separator."""

    value: V
    separator: Token | None
    span: TextRange


type Separated[T] = tuple[SeparatedItem[T], ...]


# -------------------------
# Expressions
# -------------------------


@dataclass(frozen=True, slots=True)
class ExpressionNil:
    token: Token
    span: TextRange
    kind: Literal["nil"] = "nil"


@dataclass(frozen=True, slots=True)
class ExpressionBoolean:
    token: Token
    span: TextRange
    kind: Literal["boolean"] = "boolean"


@dataclass(frozen=True, slots=True)
class ExpressionNumber:
    token: Token
    span: TextRange
    kind: Literal["number"] = "number"


@dataclass(frozen=True, slots=True)
class ExpressionString:
    """Quoted string, or a bare identifier word in command argument position."""

    token: Token
    span: TextRange
    kind: Literal["string"] = "string"


@dataclass(frozen=True, slots=True)
class ExpressionBinary:
    left: Expression
    operator: Token
    right: Expression | None
    span: TextRange
    kind: Literal["binary"] = "binary"


@dataclass(frozen=True, slots=True)
class ExpressionUnary:
    operator: Token
    value: Expression | None
    span: TextRange
    kind: Literal["unary"] = "unary"


@dataclass(frozen=True, slots=True)
class ExpressionVector:
    contents: Delimited[Separated[Expression | ExpressionCommand | None]]
    span: TextRange
    kind: Literal["vector"] = "vector"


@dataclass(frozen=True, slots=True)
class TableFieldNameKey:
    """`name = value`"""

    name: Token
    equals: Token
    value: Expression | ExpressionCommand | None
    span: TextRange
    kind: Literal["name_key"] = "name_key"


@dataclass(frozen=True, slots=True)
class TableFieldExpressionKey:
    """`[key] = value`"""

    key: Delimited[Expression | ExpressionCommand | None]
    equals: Token | None
    value: Expression | ExpressionCommand | None
    span: TextRange
    kind: Literal["expression_key"] = "expression_key"


@dataclass(frozen=True, slots=True)
class TableFieldNoKey:
    value: Expression | ExpressionCommand | None
    span: TextRange
    kind: Literal["nokey"] = "nokey"


type TableField = TableFieldNameKey | TableFieldExpressionKey | TableFieldNoKey


@dataclass(frozen=True, slots=True)
class ExpressionTable:
    values: Delimited[Separated[TableField]]
    span: TextRange
    kind: Literal["table"] = "table"


@dataclass(frozen=True, slots=True)
class FunctionBody:
    arguments: Delimited[Separated[Token | None]]
    block: Delimited[Block] | None
    span: TextRange

    @property
    def parameter_names(self) -> tuple[str, ...]:
        return tuple(item.value.text for item in self.arguments.value if item.value is not None)


@dataclass(frozen=True, slots=True)
class ExpressionLambda:
    body: FunctionBody
    span: TextRange
    kind: Literal["lambda"] = "lambda"


@dataclass(frozen=True, slots=True)
class ExpressionEvaluate:
    """Parenthesized expression or command: `(1 + 2)`, `(&add 1 2)`, `()`."""

    command: Delimited[Expression | ExpressionCommand | None]
    span: TextRange
    kind: Literal["evaluate"] = "evaluate"


# -------------------------
# Variables
# -------------------------


@dataclass(frozen=True, slots=True)
class VarRootGlobal:
    token: Token
    span: TextRange
    kind: Literal["global"] = "global"


@dataclass(frozen=True, slots=True)
class VarRootName:
    """`$name`"""

    dollar: Token
    name: Token | None
    span: TextRange
    kind: Literal["name"] = "name"


@dataclass(frozen=True, slots=True)
class VarRootParen:
    """`$(expr)`"""

    dollar: Token
    node: Delimited[Expression | ExpressionCommand | None]
    span: TextRange
    kind: Literal["paren"] = "paren"


type VarRoot = VarRootGlobal | VarRootName | VarRootParen


@dataclass(frozen=True, slots=True)
class VarSuffixNameIndex:
    """`.name`"""

    period: Token
    name: Token | None
    span: TextRange
    kind: Literal["name_index"] = "name_index"


@dataclass(frozen=True, slots=True)
class VarSuffixExpressionIndex:
    """`.[expr]`"""

    period: Token
    node: Delimited[Expression | ExpressionCommand | None]
    span: TextRange
    kind: Literal["expression_index"] = "expression_index"


type VarSuffix = VarSuffixNameIndex | VarSuffixExpressionIndex


@dataclass(frozen=True, slots=True)
class Var:
    root: VarRoot
    suffixes: tuple[VarSuffix, ...]
    span: TextRange
    kind: Literal["var"] = "var"

    @property
    def global_name(self) -> str | None:
        """Name of a plain global reference (no suffixes), if this is one."""
        if isinstance(self.root, VarRootGlobal) and not self.suffixes:
            return self.root.token.text
        return None


# -------------------------
# Commands
# -------------------------


@dataclass(frozen=True, slots=True)
class Command:
    var: Var
    arguments: tuple[SimpleExpression, ...]
    span: TextRange
    kind: Literal["command"] = "command"


@dataclass(frozen=True, slots=True)
class ExpressionCommand:
    """`&command args`"""

    prefix: Token
    command: Command | None
    span: TextRange
    kind: Literal["command_expression"] = "command_expression"


@dataclass(frozen=True, slots=True)
class ErrorNode:
    """Tokens skipped by recovery; kept so no input is silently dropped."""

    tokens: tuple[Token, ...]
    span: TextRange
    kind: Literal["error"] = "error"


type SimpleExpression = (
    ExpressionNil
    | ExpressionBoolean
    | ExpressionNumber
    | ExpressionString
    | ExpressionTable
    | ExpressionLambda
    | ExpressionEvaluate
    | Var
    | ExpressionUnary
    | ExpressionVector
    | ErrorNode
)

type Expression = SimpleExpression | ExpressionBinary


# -------------------------
# Statements
# -------------------------


@dataclass(frozen=True, slots=True)
class Continue:
    token: Token
    span: TextRange
    kind: Literal["continue"] = "continue"


@dataclass(frozen=True, slots=True)
class Break:
    token: Token
    span: TextRange
    kind: Literal["break"] = "break"


@dataclass(frozen=True, slots=True)
class Return:
    token: Token
    values: Separated[Expression | ExpressionCommand | None]
    span: TextRange
    kind: Literal["return"] = "return"


type LastStatement = Continue | Break | Return


@dataclass(frozen=True, slots=True)
class IfBranch:
    condition: Delimited[Expression | ExpressionCommand | None] | None
    block: Delimited[Block] | None
    span: TextRange


@dataclass(frozen=True, slots=True)
class ElseIfBranch:
    ifelse: Token
    branch: IfBranch
    span: TextRange


@dataclass(frozen=True, slots=True)
class ElseBranch:
    token: Token
    block: Delimited[Block] | None
    span: TextRange


@dataclass(frozen=True, slots=True)
class If:
    token: Token
    first_branch: IfBranch
    branches: tuple[ElseIfBranch, ...]
    else_branch: ElseBranch | None
    span: TextRange
    kind: Literal["if"] = "if"


@dataclass(frozen=True, slots=True)
class While:
    token: Token
    condition: Delimited[Expression | ExpressionCommand | None] | None
    block: Delimited[Block] | None
    span: TextRange
    kind: Literal["while"] = "while"


@dataclass(frozen=True, slots=True)
class For:
    token: Token
    expression: Delimited[Expression | ExpressionCommand | None] | None
    body: Expression | ExpressionCommand | None
    span: TextRange
    kind: Literal["for"] = "for"


@dataclass(frozen=True, slots=True)
class Assign:
    target: Var
    equals: Token
    value: Expression | ExpressionCommand | None
    span: TextRange
    kind: Literal["assign"] = "assign"


@dataclass(frozen=True, slots=True)
class ExpressionStatement:
    """A statement that is only evaluated for its value, e.g. `3 + 4`."""

    expression: Expression
    span: TextRange
    kind: Literal["expression_statement"] = "expression_statement"


type Statement = If | While | For | Command | ExpressionCommand | Assign | ExpressionStatement | ErrorNode


@dataclass(frozen=True, slots=True)
class Block:
    body: tuple[Statement, ...]
    last_statement: LastStatement | None
    span: TextRange


@dataclass(frozen=True, slots=True)
class Ast:
    block: Block

    @property
    def span(self) -> TextRange:
        return self.block.span


def _end_of(value: object, fallback: int) -> int:
    if isinstance(value, tuple):
        return value[-1].span.end if value else fallback
    span = getattr(value, "span", None)
    if isinstance(span, TextRange):
        return span.end
    if isinstance(value, Token):
        return value.range.end
    return fallback


__all__ = [
    "Assign",
    "Ast",
    "Block",
    "Break",
    "Command",
    "Continue",
    "Delimited",
    "ElseBranch",
    "ElseIfBranch",
    "ErrorNode",
    "Expression",
    "ExpressionBinary",
    "ExpressionBoolean",
    "ExpressionCommand",
    "ExpressionEvaluate",
    "ExpressionLambda",
    "ExpressionNil",
    "ExpressionNumber",
    "ExpressionStatement",
    "ExpressionString",
    "ExpressionTable",
    "ExpressionUnary",
    "ExpressionVector",
    "For",
    "FunctionBody",
    "If",
    "IfBranch",
    "LastStatement",
    "Return",
    "Separated",
    "SeparatedItem",
    "SimpleExpression",
    "Statement",
    "TableField",
    "TableFieldExpressionKey",
    "TableFieldNameKey",
    "TableFieldNoKey",
    "Var",
    "VarRoot",
    "VarRootGlobal",
    "VarRootName",
    "VarRootParen",
    "VarSuffix",
    "VarSuffixExpressionIndex",
    "VarSuffixNameIndex",
    "While",
]
