"""Flat report rows handed to the formatting layer."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from idiolint.kernel.linting.models import AnalysisResult, Diagnostic
from idiolint.kernel.syntax.span import PositionIndex


@dataclass(frozen=True, slots=True)
class ReportRow:
    """One diagnostic, flattened for text or JSON output."""

    file: str
    rule_id: str
    category: str | None
    severity: str
    line: int
    column: int
    end_line: int
    end_column: int
    message: str
    has_fix: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "ruleId": self.rule_id,
            "category": self.category,
            "severity": self.severity,
            "line": self.line,
            "column": self.column,
            "endLine": self.end_line,
            "endColumn": self.end_column,
            "message": self.message,
            "hasFix": self.has_fix,
        }


def report_row(path: str, diagnostic: Diagnostic, index: PositionIndex | None = None) -> ReportRow:
    span = diagnostic.span
    if index is not None:
        end_line, end_column = index.end_position(span)
    else:
        end_line, end_column = span.line, span.column + span.length
    return ReportRow(
        file=path,
        rule_id=diagnostic.rule_id,
        category=diagnostic.category.value if diagnostic.category is not None else None,
        severity=diagnostic.severity.value,
        line=span.line,
        column=span.column,
        end_line=end_line,
        end_column=end_column,
        message=diagnostic.message,
        has_fix=diagnostic.has_fix,
    )


def build_report_rows(
    results: Iterable[tuple[AnalysisResult, PositionIndex | None]],
) -> list[ReportRow]:
    """Rows for several results, ordered by file path then diagnostic position."""
    ordered = sorted(results, key=lambda item: item[0].path)
    return [
        report_row(result.path, diagnostic, index)
        for result, index in ordered
        for diagnostic in result.diagnostics
    ]
