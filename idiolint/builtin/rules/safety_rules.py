"""Safety rules: absent-value fields and unchecked memory access."""

from __future__ import annotations

from collections.abc import Iterator

from idiolint.builtin.rules._shared import callee_name, short_name, union_member_names
from idiolint.kernel.linting import type_lattice as lattice
from idiolint.kernel.linting.context import RuleContext
from idiolint.kernel.linting.models import Category, Severity
from idiolint.kernel.linting.rules import BaseRule, Match
from idiolint.kernel.syntax.nodes import (
    CallExpr,
    Macro,
    NodeKind,
    StructField,
    SyntaxNode,
    UnionType,
)


class NullableFieldRule(BaseRule):
    """Struct field typed as a union with ``Nothing`` or ``Missing``.

    Flag only: whether the field should really be optional is a design
    decision, so constructors are deliberately not inspected.
    """

    rule_id = "nullable-field"
    category = Category.SAFETY
    severity = Severity.WARNING
    description = "Struct field may hold an absent value"
    node_kinds = frozenset({NodeKind.STRUCT_FIELD})

    def matches(self, node: SyntaxNode, context: RuleContext) -> Iterator[Match]:
        if not isinstance(node, StructField) or node.annotation is None:
            return
        annotation = context.get(node.annotation)
        if not isinstance(annotation, UnionType):
            return
        members = union_member_names(annotation, context)
        absent = [name for name in members if name in lattice.ABSENT_MARKERS]
        if absent and len(absent) < len(members):
            yield Match(
                node.span,
                f"Field '{node.name}' may be {' or '.join(absent)}; every reader must "
                "handle the absent case",
            )


class UnsafeInterfaceRule(BaseRule):
    """``@inbounds`` in a function that neither checks bounds nor admits to being unsafe."""

    rule_id = "unsafe-interface"
    category = Category.SAFETY
    severity = Severity.WARNING
    description = "@inbounds without bounds checking in a function not named unsafe_*"
    node_kinds = frozenset({NodeKind.MACRO})

    def matches(self, node: SyntaxNode, context: RuleContext) -> Iterator[Match]:
        function = context.enclosing_function
        if not isinstance(node, Macro) or node.name != "inbounds" or function is None:
            return
        if short_name(function.name).startswith("unsafe_"):
            return
        for child in context.descendants(function):
            if isinstance(child, Macro) and child.name == "boundscheck":
                return
            if isinstance(child, CallExpr) and callee_name(child, context) == "checkbounds":
                return
        yield Match(
            node.span,
            f"'@inbounds' in '{function.name}' without a bounds check; check bounds "
            "first or name the function 'unsafe_...'",
        )
