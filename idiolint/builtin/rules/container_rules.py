"""Container rules: splat re-collection and abstract element types."""

from __future__ import annotations

from collections.abc import Iterator

from idiolint.kernel.linting import type_lattice as lattice
from idiolint.kernel.linting.context import RuleContext
from idiolint.kernel.linting.models import Category, Fix, Severity, TextEdit
from idiolint.kernel.linting.rules import BaseRule, Match
from idiolint.kernel.syntax.nodes import (
    CallExpr,
    NodeKind,
    SplatExpr,
    SyntaxNode,
    TupleLiteral,
    TypeAnnotation,
    VectorLiteral,
)
from idiolint.kernel.syntax.span import Span

_CONCRETE_CONTAINERS = frozenset({"Array", "Vector", "Matrix", "Dict", "Set"})


class SplatOveruseRule(BaseRule):
    """``f([xs...])`` or ``f((xs...,))``: splatting only to collect again."""

    rule_id = "splat-overuse"
    category = Category.CONTAINER
    severity = Severity.WARNING
    description = "Splatted value is immediately re-collected into a container"
    node_kinds = frozenset({NodeKind.CALL_EXPR})

    def matches(self, node: SyntaxNode, context: RuleContext) -> Iterator[Match]:
        if not isinstance(node, CallExpr):
            return
        for arg_id in node.args:
            literal = context.get(arg_id)
            if not isinstance(literal, VectorLiteral | TupleLiteral) or len(literal.elements) != 1:
                continue
            splat = context.get(literal.elements[0])
            if not isinstance(splat, SplatExpr):
                continue
            operand = context.get(splat.operand)
            yield Match(
                literal.span,
                "Splatting into a one-element literal re-collects the value; pass it directly",
                {
                    "edits": (
                        TextEdit.delete(Span(literal.span.start, operand.span.start)),
                        TextEdit.delete(Span(operand.span.end, literal.span.end)),
                    )
                },
            )

    def fix(self, node: SyntaxNode, match: Match, context: RuleContext) -> Fix | None:
        return Fix("Pass the iterable without splatting", match.data["edits"])


class AbstractContainerEltypeRule(BaseRule):
    """Concrete container declared with ``Any`` or an abstract element type."""

    rule_id = "abstract-container-eltype"
    category = Category.CONTAINER
    severity = Severity.INFO
    description = "Container has an abstract element type"
    node_kinds = frozenset({NodeKind.TYPE_ANNOTATION})

    def matches(self, node: SyntaxNode, context: RuleContext) -> Iterator[Match]:
        if not isinstance(node, TypeAnnotation) or node.name not in _CONCRETE_CONTAINERS:
            return
        abstract = []
        for param_id in node.params:
            param = context.get(param_id)
            if (
                isinstance(param, TypeAnnotation)
                and not param.subtype_bound
                and not param.params
                and param.name != "Function"
                and lattice.is_known(param.name)
                and lattice.is_abstract(param.name)
            ):
                abstract.append(param.name)
        if abstract:
            yield Match(
                node.span,
                f"'{node.name}' with abstract element type {', '.join(abstract)} stores "
                "boxed values; use a concrete type or a type parameter",
            )
