"""Typed AST for conch source."""

from conch.ast.model import (
    Assign,
    Ast,
    Block,
    Break,
    Command,
    Continue,
    Delimited,
    ElseBranch,
    ElseIfBranch,
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
    FunctionBody,
    If,
    IfBranch,
    LastStatement,
    Return,
    Separated,
    SeparatedItem,
    SimpleExpression,
    Statement,
    TableField,
    TableFieldExpressionKey,
    TableFieldNameKey,
    TableFieldNoKey,
    Var,
    VarRoot,
    VarRootGlobal,
    VarRootName,
    VarRootParen,
    VarSuffix,
    VarSuffixExpressionIndex,
    VarSuffixNameIndex,
    While,
)
from conch.ast.visit import iter_children, walk

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
    "iter_children",
    "walk",
]
