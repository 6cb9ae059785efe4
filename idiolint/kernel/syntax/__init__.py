"""Syntax trees consumed by the lint engine."""

from idiolint.kernel.syntax.nodes import (
    AnonymousFunction,
    Assignment,
    BinaryOp,
    Block,
    CallExpr,
    Comprehension,
    Conditional,
    FieldAccess,
    ForLoop,
    FunctionDef,
    Identifier,
    IndexExpr,
    Keyword,
    Literal,
    Macro,
    MacroDef,
    Module,
    NodeKind,
    Parameter,
    Paren,
    Return,
    SplatExpr,
    StructDef,
    StructField,
    SyntaxNode,
    TupleLiteral,
    TypeAnnotation,
    TypeAssert,
    TypeParam,
    UnaryOp,
    UnionType,
    VectorLiteral,
    WhileLoop,
)
from idiolint.kernel.syntax.span import PositionIndex, Span
from idiolint.kernel.syntax.tree import NodeDraft, SourceUnit, SyntaxTree, TreeBuilder, build_tree

__all__ = [
    "AnonymousFunction",
    "Assignment",
    "BinaryOp",
    "Block",
    "CallExpr",
    "Comprehension",
    "Conditional",
    "FieldAccess",
    "ForLoop",
    "FunctionDef",
    "Identifier",
    "IndexExpr",
    "Keyword",
    "Literal",
    "Macro",
    "MacroDef",
    "Module",
    "NodeDraft",
    "NodeKind",
    "Parameter",
    "Paren",
    "PositionIndex",
    "Return",
    "SourceUnit",
    "Span",
    "SplatExpr",
    "StructDef",
    "StructField",
    "SyntaxNode",
    "SyntaxTree",
    "TreeBuilder",
    "TupleLiteral",
    "TypeAnnotation",
    "TypeAssert",
    "TypeParam",
    "UnaryOp",
    "UnionType",
    "VectorLiteral",
    "WhileLoop",
    "build_tree",
]
