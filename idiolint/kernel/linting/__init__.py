"""Rule matching, diagnostic collection and fix application."""

from idiolint.kernel.linting.collector import DiagnosticCollector
from idiolint.kernel.linting.context import RuleContext
from idiolint.kernel.linting.engine import (
    PARSE_UNAVAILABLE_ID,
    analyze,
    analyze_with_rules,
    parse_unavailable_result,
)
from idiolint.kernel.linting.fixes import FixConflict, FixOutcome, apply_fixes
from idiolint.kernel.linting.models import (
    AnalysisResult,
    Applicability,
    Category,
    Diagnostic,
    DiagnosticKind,
    Fix,
    Severity,
    TextEdit,
)
from idiolint.kernel.linting.report import ReportRow, build_report_rows, report_row
from idiolint.kernel.linting.rules import BaseRule, Match, PredicateRule, Rule, RuleRegistry
from idiolint.kernel.linting.walker import TreeWalker

__all__ = [
    "PARSE_UNAVAILABLE_ID",
    "AnalysisResult",
    "Applicability",
    "BaseRule",
    "Category",
    "Diagnostic",
    "DiagnosticCollector",
    "DiagnosticKind",
    "Fix",
    "FixConflict",
    "FixOutcome",
    "Match",
    "PredicateRule",
    "ReportRow",
    "Rule",
    "RuleContext",
    "RuleRegistry",
    "Severity",
    "TextEdit",
    "TreeWalker",
    "analyze",
    "analyze_with_rules",
    "apply_fixes",
    "build_report_rows",
    "parse_unavailable_result",
    "report_row",
]
