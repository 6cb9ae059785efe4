"""Analysis entry points."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from idiolint.core.logging import get_logger
from idiolint.kernel.linting.collector import DiagnosticCollector
from idiolint.kernel.linting.models import (
    AnalysisResult,
    Category,
    Diagnostic,
    DiagnosticKind,
    Severity,
)
from idiolint.kernel.linting.rules import Rule, RuleRegistry
from idiolint.kernel.linting.walker import TreeWalker
from idiolint.kernel.syntax.span import Span
from idiolint.kernel.syntax.tree import SyntaxTree

logger = get_logger(__name__)

PARSE_UNAVAILABLE_ID = "parse-unavailable"


def analyze(
    tree: SyntaxTree,
    registry: RuleRegistry,
    categories: Iterable[Category] | None = None,
    rule_ids: Iterable[str] | None = None,
    *,
    exclude: Iterable[str] = (),
    path: str = "<memory>",
) -> AnalysisResult:
    """Run every enabled rule over ``tree`` and return its sorted diagnostics.

    Pure with respect to the tree. Running it twice on the same tree with
    the same registry gives equal results.

    Raises
    ------
    UnknownRuleError
        If ``rule_ids`` or ``exclude`` names an unregistered rule
    """
    rules = registry.enabled(categories, rule_ids, exclude=exclude)
    return analyze_with_rules(tree, rules, path=path)


def analyze_with_rules(
    tree: SyntaxTree, rules: Sequence[Rule], *, path: str = "<memory>"
) -> AnalysisResult:
    """Same as :func:`analyze` for an already resolved rule list."""
    collector = DiagnosticCollector(path)
    TreeWalker(rules).walk(tree, collector)
    result = collector.finish()
    logger.debug(
        "Analyzed {path}: {count} diagnostic(s) from {rules} rule(s)",
        path=path,
        count=len(result),
        rules=len(rules),
    )
    return result


def parse_unavailable_result(path: str, reason: str) -> AnalysisResult:
    """File-level result for a unit the loader could not parse."""
    diagnostic = Diagnostic(
        rule_id=PARSE_UNAVAILABLE_ID,
        category=None,
        severity=Severity.ERROR,
        span=Span(0, 0, 1, 1),
        message=f"Could not parse file: {reason}",
        kind=DiagnosticKind.PARSE_UNAVAILABLE,
    )
    return AnalysisResult(diagnostics=(diagnostic,), path=path)
