"""Syntax node kinds.

Every node is a frozen dataclass tagged with a :class:`NodeKind`. Child
references are integer ids into the owning :class:`~idiolint.kernel.syntax.tree.SyntaxTree`
arena, never direct object references, so a tree has a single owner and no
cycles. Each class lists its child-reference fields in ``CHILD_FIELDS``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from idiolint.kernel.syntax.span import Span


class NodeKind(str, Enum):
    """Tag of a syntax node variant."""

    MODULE = "module"
    BLOCK = "block"
    IDENTIFIER = "identifier"
    LITERAL = "literal"
    KEYWORD = "keyword"
    BINARY_OP = "binary_op"
    UNARY_OP = "unary_op"
    ASSIGNMENT = "assignment"
    CALL_EXPR = "call_expr"
    INDEX_EXPR = "index_expr"
    FIELD_ACCESS = "field_access"
    PAREN = "paren"
    TUPLE_LITERAL = "tuple_literal"
    VECTOR_LITERAL = "vector_literal"
    COMPREHENSION = "comprehension"
    SPLAT_EXPR = "splat_expr"
    TYPE_ASSERT = "type_assert"
    TYPE_ANNOTATION = "type_annotation"
    UNION_TYPE = "union_type"
    TYPE_PARAM = "type_param"
    PARAMETER = "parameter"
    FUNCTION_DEF = "function_def"
    ANONYMOUS_FUNCTION = "anonymous_function"
    STRUCT_DEF = "struct_def"
    STRUCT_FIELD = "struct_field"
    MACRO = "macro"
    MACRO_DEF = "macro_def"
    CONDITIONAL = "conditional"
    FOR_LOOP = "for_loop"
    WHILE_LOOP = "while_loop"
    RETURN = "return"


@dataclass(frozen=True, slots=True, kw_only=True)
class SyntaxNode:
    """Common part of every node variant."""

    kind: ClassVar[NodeKind]
    CHILD_FIELDS: ClassVar[tuple[str, ...]] = ()

    id: int
    span: Span

    def child_ids(self) -> tuple[int, ...]:
        """Ids of the direct children in source order."""
        ids: list[int] = []
        for name in self.CHILD_FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, tuple):
                ids.extend(value)
            else:
                ids.append(value)
        return tuple(sorted(ids))


@dataclass(frozen=True, slots=True, kw_only=True)
class Module(SyntaxNode):
    kind = NodeKind.MODULE
    CHILD_FIELDS = ("body",)

    body: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class Block(SyntaxNode):
    kind = NodeKind.BLOCK
    CHILD_FIELDS = ("statements",)

    statements: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class Identifier(SyntaxNode):
    kind = NodeKind.IDENTIFIER

    name: str


@dataclass(frozen=True, slots=True, kw_only=True)
class Literal(SyntaxNode):
    """Literal value; ``literal_type`` is one of int, float, string, char, bool, symbol, colon."""

    kind = NodeKind.LITERAL

    value: str
    literal_type: str


@dataclass(frozen=True, slots=True, kw_only=True)
class Keyword(SyntaxNode):
    """Bare keyword statement (``break``, ``continue``, ``using ...``, ``export ...``)."""

    kind = NodeKind.KEYWORD

    word: str


@dataclass(frozen=True, slots=True, kw_only=True)
class BinaryOp(SyntaxNode):
    kind = NodeKind.BINARY_OP
    CHILD_FIELDS = ("left", "right")

    op: str
    left: int
    right: int


@dataclass(frozen=True, slots=True, kw_only=True)
class UnaryOp(SyntaxNode):
    kind = NodeKind.UNARY_OP
    CHILD_FIELDS = ("operand",)

    op: str
    operand: int


@dataclass(frozen=True, slots=True, kw_only=True)
class Assignment(SyntaxNode):
    """Plain (``=``) or updating (``+=``, ``*=``...) assignment."""

    kind = NodeKind.ASSIGNMENT
    CHILD_FIELDS = ("target", "value")

    op: str
    target: int
    value: int


@dataclass(frozen=True, slots=True, kw_only=True)
class CallExpr(SyntaxNode):
    kind = NodeKind.CALL_EXPR
    CHILD_FIELDS = ("callee", "args", "kwargs")

    callee: int
    args: tuple[int, ...] = ()
    kwargs: tuple[int, ...] = ()
    broadcast: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class IndexExpr(SyntaxNode):
    kind = NodeKind.INDEX_EXPR
    CHILD_FIELDS = ("target", "indices")

    target: int
    indices: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldAccess(SyntaxNode):
    kind = NodeKind.FIELD_ACCESS
    CHILD_FIELDS = ("target",)

    target: int
    field: str


@dataclass(frozen=True, slots=True, kw_only=True)
class Paren(SyntaxNode):
    """A single expression wrapped in parentheses."""

    kind = NodeKind.PAREN
    CHILD_FIELDS = ("inner",)

    inner: int


@dataclass(frozen=True, slots=True, kw_only=True)
class TupleLiteral(SyntaxNode):
    kind = NodeKind.TUPLE_LITERAL
    CHILD_FIELDS = ("elements",)

    elements: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class VectorLiteral(SyntaxNode):
    kind = NodeKind.VECTOR_LITERAL
    CHILD_FIELDS = ("elements",)

    elements: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class Comprehension(SyntaxNode):
    """``[element for variable in iterable if condition]`` or a bare generator."""

    kind = NodeKind.COMPREHENSION
    CHILD_FIELDS = ("element", "variable", "iterable", "condition")

    element: int
    variable: int
    iterable: int
    condition: int | None = None
    generator: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class SplatExpr(SyntaxNode):
    kind = NodeKind.SPLAT_EXPR
    CHILD_FIELDS = ("operand",)

    operand: int


@dataclass(frozen=True, slots=True, kw_only=True)
class TypeAssert(SyntaxNode):
    """``value::T`` in expression position; ``value`` is None for a bare ``::T``."""

    kind = NodeKind.TYPE_ASSERT
    CHILD_FIELDS = ("value", "annotation")

    value: int | None
    annotation: int


@dataclass(frozen=True, slots=True, kw_only=True)
class TypeAnnotation(SyntaxNode):
    """A type expression: a (possibly dotted) head name with optional curly parameters."""

    kind = NodeKind.TYPE_ANNOTATION
    CHILD_FIELDS = ("params",)

    name: str
    name_span: Span
    params: tuple[int, ...] = ()
    subtype_bound: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class UnionType(SyntaxNode):
    kind = NodeKind.UNION_TYPE
    CHILD_FIELDS = ("members",)

    members: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class TypeParam(SyntaxNode):
    """Static parameter declared in a ``where`` clause or a struct's curly braces."""

    kind = NodeKind.TYPE_PARAM
    CHILD_FIELDS = ("bound",)

    name: str
    bound: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Parameter(SyntaxNode):
    kind = NodeKind.PARAMETER
    CHILD_FIELDS = ("annotation", "default")

    name: str
    name_span: Span
    annotation: int | None = None
    default: int | None = None
    is_splat: bool = False
    keyword: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class FunctionDef(SyntaxNode):
    """Named method definition, long (``function ... end``) or short (``f(x) = ...``) form.

    ``where_span`` covers the whole ``where`` clause including the whitespace
    in front of it, so deleting it leaves a well-formed signature.
    """

    kind = NodeKind.FUNCTION_DEF
    CHILD_FIELDS = ("params", "return_type", "type_params", "body")

    name: str
    name_span: Span
    params: tuple[int, ...] = ()
    type_params: tuple[int, ...] = ()
    return_type: int | None = None
    body: int
    short_form: bool = False
    where_span: Span | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class AnonymousFunction(SyntaxNode):
    kind = NodeKind.ANONYMOUS_FUNCTION
    CHILD_FIELDS = ("params", "body")

    params: tuple[int, ...] = ()
    body: int


@dataclass(frozen=True, slots=True, kw_only=True)
class StructField(SyntaxNode):
    kind = NodeKind.STRUCT_FIELD
    CHILD_FIELDS = ("annotation", "default")

    name: str
    annotation: int | None = None
    default: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class StructDef(SyntaxNode):
    kind = NodeKind.STRUCT_DEF
    CHILD_FIELDS = ("type_params", "supertype", "fields", "constructors")

    name: str
    name_span: Span
    mutable: bool = False
    type_params: tuple[int, ...] = ()
    supertype: int | None = None
    fields: tuple[int, ...] = ()
    constructors: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class Macro(SyntaxNode):
    """Macro invocation ``@name args...`` or ``@name(args...)``."""

    kind = NodeKind.MACRO
    CHILD_FIELDS = ("args",)

    name: str
    args: tuple[int, ...] = ()
    parenthesized: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class MacroDef(SyntaxNode):
    kind = NodeKind.MACRO_DEF
    CHILD_FIELDS = ("params", "body")

    name: str
    name_span: Span
    params: tuple[int, ...] = ()
    body: int


@dataclass(frozen=True, slots=True, kw_only=True)
class Conditional(SyntaxNode):
    """``if``/``elseif`` branch or a ternary (``keyword == "?"``).

    ``orelse`` is either a nested ``elseif`` Conditional or the ``else`` Block.
    """

    kind = NodeKind.CONDITIONAL
    CHILD_FIELDS = ("test", "then", "orelse")

    keyword: str
    test: int
    then: int
    orelse: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ForLoop(SyntaxNode):
    kind = NodeKind.FOR_LOOP
    CHILD_FIELDS = ("variable", "iterable", "body")

    variable: int
    iterable: int
    body: int


@dataclass(frozen=True, slots=True, kw_only=True)
class WhileLoop(SyntaxNode):
    kind = NodeKind.WHILE_LOOP
    CHILD_FIELDS = ("test", "body")

    test: int
    body: int


@dataclass(frozen=True, slots=True, kw_only=True)
class Return(SyntaxNode):
    kind = NodeKind.RETURN
    CHILD_FIELDS = ("value",)

    value: int | None = None
