"""Multi-file lint runs.

Files are independent: each task loads one source unit, analyses it with its
own collector and optionally rewrites it. The registry is only read. Tasks
are bounded by a semaphore and joined with ``asyncio.gather``; the merged
report is sorted afterwards, so completion order never leaks into output.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from idiolint.compiler.loader import ReaderLoader, SourceLoader
from idiolint.core.logging import get_logger
from idiolint.kernel.exceptions import ParseUnavailableError, ValidationError
from idiolint.kernel.linting.engine import analyze_with_rules, parse_unavailable_result
from idiolint.kernel.linting.fixes import FixOutcome, apply_fixes
from idiolint.kernel.linting.models import AnalysisResult, Category, Severity
from idiolint.kernel.linting.report import ReportRow, build_report_rows
from idiolint.kernel.linting.rules import Rule, RuleRegistry
from idiolint.kernel.syntax.span import PositionIndex

logger = get_logger(__name__)


class CancellationToken:
    """Run-scoped cancellation signal, safe to set from any thread.

    The runner checks it before starting each file; a file already in
    progress always finishes, so no partial per-file state is reported.
    """

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True, slots=True)
class FileReport:
    """Outcome for one file."""

    result: AnalysisResult
    index: PositionIndex | None = None
    fix_outcome: FixOutcome | None = None

    @property
    def path(self) -> str:
        return self.result.path


@dataclass(frozen=True, slots=True)
class RunReport:
    """Merged outcome of a run, ordered by file path.

    Attributes
    ----------
    files : tuple[FileReport, ...]
        Reports of every file that was processed
    cancelled : bool
        True if cancellation stopped the run before all files started
    skipped : tuple[str, ...]
        Paths never started because of cancellation
    """

    files: tuple[FileReport, ...] = ()
    cancelled: bool = False
    skipped: tuple[str, ...] = field(default_factory=tuple)

    def rows(self) -> list[ReportRow]:
        return build_report_rows((report.result, report.index) for report in self.files)

    @property
    def diagnostic_count(self) -> int:
        return sum(len(report.result) for report in self.files)

    @property
    def has_errors(self) -> bool:
        return any(report.result.has_errors for report in self.files)

    @property
    def fixes_applied(self) -> int:
        return sum(
            report.fix_outcome.applied_count for report in self.files if report.fix_outcome
        )

    def counts_by_severity(self) -> dict[Severity, int]:
        counts = dict.fromkeys(Severity, 0)
        for report in self.files:
            for severity, count in report.result.counts_by_severity.items():
                counts[severity] += count
        return counts


class LintRunner:
    """Analyses many files concurrently against one registry.

    Parameters
    ----------
    registry : RuleRegistry
        Rules to run; only read during the run
    loader : SourceLoader | None
        Produces syntax trees; defaults to the built-in reader
    categories, rule_ids, exclude
        Rule filters, resolved once up front
    max_workers : int, default=4
        Files processed concurrently
    fix : bool, default=False
        Write fixed text back to each file
    unsafe_fixes : bool, default=False
        Include fixes marked unsafe when fixing

    Raises
    ------
    UnknownRuleError
        If a filter names an unregistered rule
    ValidationError
        If ``max_workers`` is below 1
    """

    def __init__(
        self,
        registry: RuleRegistry,
        loader: SourceLoader | None = None,
        categories: Iterable[Category] | None = None,
        rule_ids: Iterable[str] | None = None,
        exclude: Iterable[str] = (),
        max_workers: int = 4,
        fix: bool = False,
        unsafe_fixes: bool = False,
    ) -> None:
        if max_workers < 1:
            raise ValidationError("max_workers", "must be at least 1", max_workers)
        self.loader = loader or ReaderLoader()
        self.rules: Sequence[Rule] = registry.enabled(categories, rule_ids, exclude=exclude)
        self.max_workers = max_workers
        self.fix = fix
        self.unsafe_fixes = unsafe_fixes

    async def run(
        self, paths: Iterable[str | Path], token: CancellationToken | None = None
    ) -> RunReport:
        """Lint every path and return the merged, path-ordered report."""
        token = token or CancellationToken()
        unique = sorted({str(path) for path in paths})
        semaphore = asyncio.Semaphore(self.max_workers)
        logger.info(
            "Linting {count} file(s) with {rules} rule(s)",
            count=len(unique),
            rules=len(self.rules),
        )

        async def process(path: str) -> FileReport | None:
            async with semaphore:
                if token.cancelled:
                    return None
                return await asyncio.to_thread(self._process_file, path)

        outcomes = await asyncio.gather(*(process(path) for path in unique))

        files = tuple(
            sorted((outcome for outcome in outcomes if outcome is not None), key=lambda r: r.path)
        )
        skipped = tuple(path for path, outcome in zip(unique, outcomes) if outcome is None)
        if skipped:
            logger.warning(
                "Run cancelled: {count} file(s) not started", count=len(skipped)
            )
        logger.info(
            "Lint finished: {files} file(s), {count} diagnostic(s)",
            files=len(files),
            count=sum(len(report.result) for report in files),
        )
        return RunReport(files=files, cancelled=bool(skipped), skipped=skipped)

    def run_sync(
        self, paths: Iterable[str | Path], token: CancellationToken | None = None
    ) -> RunReport:
        """Blocking wrapper around :meth:`run`."""
        return asyncio.run(self.run(paths, token))

    def _process_file(self, path: str) -> FileReport:
        """Lint one file; every failure stays confined to this file's report."""
        try:
            unit = self.loader.load(path)
        except ParseUnavailableError as e:
            return FileReport(parse_unavailable_result(path, e.reason))
        except Exception as e:
            logger.warning("Loader failed on {path}: {error}", path=path, error=str(e))
            return FileReport(parse_unavailable_result(path, f"{type(e).__name__}: {e}"))

        try:
            result = analyze_with_rules(unit.tree, self.rules, path=path)
        except Exception as e:
            logger.warning("Analysis of {path} failed: {error}", path=path, error=str(e))
            return FileReport(parse_unavailable_result(path, f"{type(e).__name__}: {e}"))
        if not self.fix:
            return FileReport(result, unit.index)

        try:
            outcome = apply_fixes(unit.text, result, include_unsafe=self.unsafe_fixes)
            if outcome.changed:
                Path(path).write_text(outcome.text, encoding="utf-8")
                logger.debug("Rewrote {path}", path=path)
        except (ValidationError, OSError) as e:
            logger.warning("Cannot fix {path}: {error}", path=path, error=str(e))
            return FileReport(result, unit.index)
        return FileReport(result, unit.index, outcome)
