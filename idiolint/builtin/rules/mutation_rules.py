"""Mutation rules."""

from __future__ import annotations

from collections.abc import Iterator

from idiolint.builtin.rules._shared import base_identifier, callee_name, short_name, unwrap_parens
from idiolint.kernel.linting.context import RuleContext
from idiolint.kernel.linting.models import Applicability, Category, Fix, Severity
from idiolint.kernel.linting.rules import BaseRule, Match
from idiolint.kernel.syntax.nodes import (
    Assignment,
    CallExpr,
    FieldAccess,
    FunctionDef,
    Identifier,
    IndexExpr,
    NodeKind,
    Parameter,
    SyntaxNode,
)

MUTATION_SUFFIX = "!"


class MutatingNamingRule(BaseRule):
    """Function that modifies one of its arguments but has no ``!`` suffix.

    An argument counts as modified when the body assigns into one of its
    elements or fields (``a[i] = ...``, ``a.f += ...``), broadcasts into it
    (``a .= ...``), or passes it as the first argument of a ``!`` function.

    The rename fix only touches the definition, so it is marked unsafe: every
    call site keeps the old name, including calls in the same file. A rule
    sees only its bounded context window and cannot rewrite them safely.
    """

    rule_id = "mutating-naming"
    category = Category.MUTATION
    severity = Severity.WARNING
    description = "Function mutates an argument but its name lacks the '!' suffix"
    node_kinds = frozenset({NodeKind.FUNCTION_DEF})

    def matches(self, node: SyntaxNode, context: RuleContext) -> Iterator[Match]:
        if not isinstance(node, FunctionDef):
            return
        name = short_name(node.name)
        if name.endswith(MUTATION_SUFFIX) or not (name[:1].isalpha() or name[:1] == "_"):
            return
        params = {
            param.name
            for param in (context.get(param_id) for param_id in node.params)
            if isinstance(param, Parameter)
        }
        if not params:
            return

        mutated = self._first_mutated(node, params, context)
        if mutated is None:
            return
        yield Match(
            node.name_span,
            f"Function '{name}' mutates its argument '{mutated}'; "
            f"name it '{name}{MUTATION_SUFFIX}'",
            {"renamed": node.name + MUTATION_SUFFIX},
        )

    def fix(self, node: SyntaxNode, match: Match, context: RuleContext) -> Fix | None:
        return Fix.replace(
            match.span,
            match.data["renamed"],
            f"Rename to '{match.data['renamed']}' (definition only)",
            Applicability.UNSAFE,
        )

    def _first_mutated(
        self, function: FunctionDef, params: set[str], context: RuleContext
    ) -> str | None:
        body = context.get(function.body)
        for child in context.descendants(body):
            if isinstance(child, Assignment):
                target = unwrap_parens(context.get(child.target), context)
                if isinstance(target, IndexExpr | FieldAccess):
                    base = base_identifier(target, context)
                    if base is not None and base.name in params:
                        return base.name
                elif (
                    isinstance(target, Identifier)
                    and child.op.startswith(".")
                    and target.name in params
                ):
                    return target.name
            elif isinstance(child, CallExpr) and child.args:
                called = callee_name(child, context)
                if called is None or not called.endswith(MUTATION_SUFFIX):
                    continue
                first = base_identifier(context.get(child.args[0]), context)
                if first is not None and first.name in params:
                    return first.name
        return None
