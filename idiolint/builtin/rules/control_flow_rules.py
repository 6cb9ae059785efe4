"""Control-flow rules: wrapper lambdas and parenthesized conditions."""

from __future__ import annotations

from collections.abc import Iterator

from idiolint.kernel.linting.context import RuleContext
from idiolint.kernel.linting.models import Category, Fix, Severity, TextEdit
from idiolint.kernel.linting.rules import BaseRule, Match
from idiolint.kernel.syntax.nodes import (
    AnonymousFunction,
    Assignment,
    CallExpr,
    Conditional,
    Identifier,
    NodeKind,
    Parameter,
    Paren,
    SyntaxNode,
    WhileLoop,
)
from idiolint.kernel.syntax.span import Span


class RedundantWrapperLambdaRule(BaseRule):
    """``x -> f(x)`` where plain ``f`` would do."""

    rule_id = "redundant-wrapper-lambda"
    category = Category.CONTROL_FLOW
    severity = Severity.WARNING
    description = "Anonymous function only forwards its argument to another function"
    node_kinds = frozenset({NodeKind.ANONYMOUS_FUNCTION})

    def matches(self, node: SyntaxNode, context: RuleContext) -> Iterator[Match]:
        if not isinstance(node, AnonymousFunction) or len(node.params) != 1:
            return
        param = context.get(node.params[0])
        if not isinstance(param, Parameter):
            return
        if param.annotation is not None or param.default is not None or param.is_splat:
            return

        call = context.get(node.body)
        if not isinstance(call, CallExpr) or call.broadcast or call.kwargs:
            return
        if len(call.args) != 1:
            return
        callee = context.get(call.callee)
        argument = context.get(call.args[0])
        if not isinstance(callee, Identifier) or callee.name == param.name:
            return
        if not isinstance(argument, Identifier) or argument.name != param.name:
            return
        yield Match(
            node.span,
            f"'{param.name} -> {callee.name}({param.name})' can be written as '{callee.name}'",
            {"callee": callee.name},
        )

    def fix(self, node: SyntaxNode, match: Match, context: RuleContext) -> Fix | None:
        callee = match.data["callee"]
        return Fix.replace(match.span, callee, f"Pass '{callee}' directly")


class ParenthesizedConditionRule(BaseRule):
    """``if (cond)`` / ``while (cond)``: the parentheses add nothing."""

    rule_id = "parenthesized-condition"
    category = Category.CONTROL_FLOW
    severity = Severity.INFO
    description = "Condition is wrapped in redundant parentheses"
    node_kinds = frozenset({NodeKind.CONDITIONAL, NodeKind.WHILE_LOOP})

    def matches(self, node: SyntaxNode, context: RuleContext) -> Iterator[Match]:
        if isinstance(node, Conditional):
            if node.keyword not in ("if", "elseif"):
                return
            keyword, body_id = node.keyword, node.then
        elif isinstance(node, WhileLoop):
            keyword, body_id = "while", node.body
        else:
            return

        outer = context.get(node.test)
        if not isinstance(outer, Paren):
            return
        inner: SyntaxNode = outer
        while isinstance(inner, Paren):
            inner = context.get(inner.inner)
        if isinstance(inner, Assignment):
            return

        # Keep the tokens apart once the parentheses are gone
        opening = " " if outer.span.start == node.span.start + len(keyword) else ""
        body = context.get(body_id)
        closing = " " if body.span.start == outer.span.end else ""
        yield Match(
            outer.span,
            f"Parentheses around the '{keyword}' condition are not needed",
            {
                "edits": (
                    TextEdit(Span(outer.span.start, inner.span.start), opening),
                    TextEdit(Span(inner.span.end, outer.span.end), closing),
                )
            },
        )

    def fix(self, node: SyntaxNode, match: Match, context: RuleContext) -> Fix | None:
        return Fix("Remove redundant parentheses", match.data["edits"])
