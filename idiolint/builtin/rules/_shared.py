"""Small tree queries shared by the built-in rules."""

from __future__ import annotations

from collections.abc import Iterator

from idiolint.kernel.linting.context import RuleContext
from idiolint.kernel.syntax.nodes import (
    CallExpr,
    FieldAccess,
    FunctionDef,
    Identifier,
    IndexExpr,
    Paren,
    SyntaxNode,
    TypeAnnotation,
    UnionType,
)


def short_name(name: str) -> str:
    """Last segment of a dotted name (``Base.push!`` -> ``push!``)."""
    return name.rsplit(".", 1)[-1]


def unwrap_parens(node: SyntaxNode, context: RuleContext) -> SyntaxNode:
    while isinstance(node, Paren):
        node = context.get(node.inner)
    return node


def callee_name(call: CallExpr, context: RuleContext) -> str | None:
    """Name of the called function when it is a plain or dotted identifier."""
    callee = context.get(call.callee)
    if isinstance(callee, Identifier):
        return callee.name
    if isinstance(callee, FieldAccess):
        return callee.field
    return None


def base_identifier(node: SyntaxNode, context: RuleContext) -> Identifier | None:
    """Innermost identifier of an ``a[i].f[j]`` style access chain."""
    node = unwrap_parens(node, context)
    while isinstance(node, IndexExpr | FieldAccess):
        node = unwrap_parens(context.get(node.target), context)
    return node if isinstance(node, Identifier) else None


def union_member_names(union: UnionType, context: RuleContext) -> list[str]:
    """Head names of a union's members, flattening nested unions."""
    names: list[str] = []
    for member_id in union.members:
        member = context.get(member_id)
        if isinstance(member, UnionType):
            names.extend(union_member_names(member, context))
        elif isinstance(member, TypeAnnotation):
            names.append(member.name)
    return names


def function_params(function: FunctionDef, context: RuleContext) -> Iterator[SyntaxNode]:
    for param_id in function.params:
        yield context.get(param_id)
