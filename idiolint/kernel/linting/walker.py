"""Single-pass, pre-order rule dispatch over a syntax tree."""

from __future__ import annotations

from collections.abc import Sequence

from idiolint.core.logging import get_logger
from idiolint.kernel.exceptions import RuleInternalError
from idiolint.kernel.linting.collector import DiagnosticCollector
from idiolint.kernel.linting.context import RuleContext
from idiolint.kernel.linting.models import Diagnostic, DiagnosticKind, Fix, Severity
from idiolint.kernel.linting.rules import Match, Rule
from idiolint.kernel.syntax.nodes import FunctionDef, NodeKind, SyntaxNode
from idiolint.kernel.syntax.tree import SyntaxTree

logger = get_logger(__name__)


class TreeWalker:
    """Visits every node once in source order and runs the applicable rules.

    Rules are bucketed by the node kinds they declare interest in; a rule with
    ``node_kinds = None`` is offered every node. Any exception a rule raises
    while matching becomes one ``rule-internal-error`` diagnostic and the walk
    carries on with the next rule. A fixer that raises leaves its finding
    without a fix and adds a ``rule-internal-error`` diagnostic of its own.
    """

    __slots__ = ("_rules", "_by_kind", "_universal")

    def __init__(self, rules: Sequence[Rule]) -> None:
        self._rules = tuple(rules)
        self._by_kind: dict[NodeKind, list[Rule]] = {}
        self._universal: list[Rule] = []
        for rule in self._rules:
            if rule.node_kinds is None:
                self._universal.append(rule)
                continue
            for kind in rule.node_kinds:
                self._by_kind.setdefault(kind, []).append(rule)

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def rules_for(self, kind: NodeKind) -> list[Rule]:
        specific = self._by_kind.get(kind, [])
        if not self._universal:
            return specific
        wanted = {id(rule) for rule in specific} | {id(rule) for rule in self._universal}
        return [rule for rule in self._rules if id(rule) in wanted]

    def walk(self, tree: SyntaxTree, collector: DiagnosticCollector) -> None:
        # (function id, subtree end) of the enclosing function definitions
        functions: list[tuple[FunctionDef, int]] = []
        for node in tree:
            while functions and functions[-1][1] <= node.id:
                functions.pop()
            rules = self.rules_for(node.kind)
            if rules:
                context = RuleContext(
                    tree,
                    node,
                    tree.parent(node.id),
                    functions[-1][0] if functions else None,
                )
                for rule in rules:
                    self._run_rule(rule, node, context, collector)
            if isinstance(node, FunctionDef):
                functions.append((node, tree.subtree_end(node.id)))

    def _run_rule(
        self,
        rule: Rule,
        node: SyntaxNode,
        context: RuleContext,
        collector: DiagnosticCollector,
    ) -> None:
        try:
            matches = list(rule.matches(node, context))
        except Exception as exc:
            logger.warning(
                "Rule {rule_id} failed on node {node_id}: {error}",
                rule_id=rule.rule_id,
                node_id=node.id,
                error=str(exc),
            )
            error = RuleInternalError(rule.rule_id, node.id, exc)
            collector.add(_internal_error(error, rule, node))
            return

        for match in matches:
            collector.add(
                Diagnostic(
                    rule_id=rule.rule_id,
                    category=rule.category,
                    severity=rule.severity,
                    span=match.span,
                    message=match.message,
                    fix=self._fix_for(rule, node, match, context, collector),
                )
            )

    def _fix_for(
        self,
        rule: Rule,
        node: SyntaxNode,
        match: Match,
        context: RuleContext,
        collector: DiagnosticCollector,
    ) -> Fix | None:
        try:
            return rule.fix(node, match, context)
        except Exception as exc:
            # The finding stands without its suggestion.
            logger.warning(
                "Fixer of {rule_id} failed on node {node_id}: {error}",
                rule_id=rule.rule_id,
                node_id=node.id,
                error=str(exc),
            )
            error = RuleInternalError(rule.rule_id, node.id, exc, stage="fixer")
            collector.add(_internal_error(error, rule, node))
            return None


def _internal_error(error: RuleInternalError, rule: Rule, node: SyntaxNode) -> Diagnostic:
    return Diagnostic(
        rule_id=rule.rule_id,
        category=rule.category,
        severity=Severity.WARNING,
        span=node.span,
        message=str(error),
        kind=DiagnosticKind.RULE_INTERNAL_ERROR,
    )
