"""Macro rules."""

from __future__ import annotations

from collections.abc import Iterator

from idiolint.builtin.rules._shared import callee_name
from idiolint.kernel.linting.context import RuleContext
from idiolint.kernel.linting.models import Category, Severity
from idiolint.kernel.linting.rules import BaseRule, Match
from idiolint.kernel.syntax.nodes import CallExpr, Macro, NodeKind, SyntaxNode


class EvalInFunctionRule(BaseRule):
    """``@eval`` / ``eval(...)`` inside a function body.

    Evaluating code at run time defeats compilation and usually hides a
    missing macro or a dispatch table.
    """

    rule_id = "eval-in-function"
    category = Category.MACRO
    severity = Severity.WARNING
    description = "eval used inside a function"
    node_kinds = frozenset({NodeKind.MACRO, NodeKind.CALL_EXPR})

    def matches(self, node: SyntaxNode, context: RuleContext) -> Iterator[Match]:
        function = context.enclosing_function
        if function is None:
            return
        if isinstance(node, Macro) and node.name == "eval":
            used = "@eval"
        elif isinstance(node, CallExpr) and callee_name(node, context) == "eval":
            used = "eval(...)"
        else:
            return
        yield Match(node.span, f"'{used}' inside function '{function.name}' runs at every call")
