"""Mechanical application of suggested fixes."""

from __future__ import annotations

from dataclasses import dataclass

from idiolint.core.logging import get_logger
from idiolint.kernel.exceptions import ValidationError
from idiolint.kernel.linting.models import AnalysisResult, Diagnostic, Fix, TextEdit
from idiolint.kernel.syntax.span import Span

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class FixConflict:
    """A fix withheld because its edits overlap another fix's edits."""

    rule_id: str
    span: Span
    conflicts_with: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class FixOutcome:
    """Rewritten buffer plus what was applied and what was withheld."""

    text: str
    applied: tuple[Diagnostic, ...] = ()
    conflicts: tuple[FixConflict, ...] = ()
    skipped_unsafe: int = 0

    @property
    def applied_count(self) -> int:
        return len(self.applied)

    @property
    def changed(self) -> bool:
        return bool(self.applied)


def apply_fixes(buffer: str, result: AnalysisResult, *, include_unsafe: bool = False) -> FixOutcome:
    """Apply every eligible, non-conflicting fix in ``result`` to ``buffer``.

    Eligible means safe, or unsafe when ``include_unsafe`` is set. Whenever two
    eligible fixes overlap, both are withheld and reported as
    :class:`FixConflict`; no precedence is guessed.

    Raises
    ------
    ValidationError
        If an edit's span lies outside ``buffer``
    """
    candidates: list[tuple[Diagnostic, Fix]] = []
    skipped_unsafe = 0
    for diagnostic in result.diagnostics:
        if diagnostic.fix is None:
            continue
        if diagnostic.fix.is_safe or include_unsafe:
            candidates.append((diagnostic, diagnostic.fix))
        else:
            skipped_unsafe += 1

    clashes: dict[int, list[str]] = {}
    for i, (first, first_fix) in enumerate(candidates):
        for j in range(i + 1, len(candidates)):
            second, second_fix = candidates[j]
            if first_fix.overlaps(second_fix):
                clashes.setdefault(i, []).append(second.rule_id)
                clashes.setdefault(j, []).append(first.rule_id)

    conflicts: list[FixConflict] = []
    applied: list[Diagnostic] = []
    edits: list[TextEdit] = []
    for position, (diagnostic, fix) in enumerate(candidates):
        if position in clashes:
            others = tuple(sorted(set(clashes[position])))
            conflicts.append(FixConflict(diagnostic.rule_id, diagnostic.span, others))
            logger.warning(
                "Withholding fix of {rule_id} at {line}:{column}: overlaps {others}",
                rule_id=diagnostic.rule_id,
                line=diagnostic.span.line,
                column=diagnostic.span.column,
                others=", ".join(others),
            )
            continue
        applied.append(diagnostic)
        edits.extend(fix.edits)

    text = _rewrite(buffer, edits)
    if applied:
        logger.info(
            "Applied {count} fix(es) to {path}", count=len(applied), path=result.path
        )
    return FixOutcome(
        text=text,
        applied=tuple(applied),
        conflicts=tuple(conflicts),
        skipped_unsafe=skipped_unsafe,
    )


def _rewrite(buffer: str, edits: list[TextEdit]) -> str:
    for edit in edits:
        if edit.span.end > len(buffer):
            raise ValidationError(
                "edit.span", f"must lie within the buffer (length {len(buffer)})", edit.span
            )
    # Back to front so earlier offsets stay valid
    text = buffer
    for edit in sorted(edits, key=lambda e: (e.span.start, e.span.end), reverse=True):
        text = text[: edit.span.start] + edit.replacement + text[edit.span.end :]
    return text
