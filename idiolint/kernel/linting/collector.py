"""Per-unit diagnostic accumulation."""

from __future__ import annotations

from collections.abc import Iterable

from idiolint.kernel.linting.models import AnalysisResult, Diagnostic
from idiolint.kernel.syntax.span import Span


class DiagnosticCollector:
    """Accumulates the diagnostics of one source unit.

    Exact duplicates (same rule id, span and kind) collapse to the first one
    added; nothing else is ever dropped. Owned by a single worker for the
    duration of one file.
    """

    __slots__ = ("_path", "_diagnostics", "_seen")

    def __init__(self, path: str = "<memory>") -> None:
        self._path = path
        self._diagnostics: list[Diagnostic] = []
        self._seen: set[tuple[str, Span]] = set()

    def __len__(self) -> int:
        return len(self._diagnostics)

    def add(self, diagnostic: Diagnostic) -> bool:
        """Record ``diagnostic``; returns False if it duplicated an earlier one."""
        key = diagnostic.dedup_key
        if key in self._seen:
            return False
        self._seen.add(key)
        self._diagnostics.append(diagnostic)
        return True

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self.add(diagnostic)

    def finish(self) -> AnalysisResult:
        ordered = sorted(self._diagnostics, key=lambda diagnostic: diagnostic.sort_key)
        return AnalysisResult(diagnostics=tuple(ordered), path=self._path)
