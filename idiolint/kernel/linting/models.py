"""Core models for the idiolint linting engine."""

from __future__ import annotations

import dataclasses
from collections import Counter
from dataclasses import dataclass
from enum import Enum

from idiolint.kernel.exceptions import ValidationError
from idiolint.kernel.syntax.span import Span


class Severity(str, Enum):
    """Diagnostic severity, most severe first."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2}


class Category(str, Enum):
    """Rule grouping used for selective enabling.

    Declaration order is the registry's primary sort order.
    """

    TYPING = "typing"
    NAMING = "naming"
    MUTATION = "mutation"
    CONTAINER = "container"
    CONTROL_FLOW = "control-flow"
    MACRO = "macro"
    SAFETY = "safety"

    @property
    def order(self) -> int:
        return _CATEGORY_ORDER[self]


_CATEGORY_ORDER = {category: position for position, category in enumerate(Category)}


class DiagnosticKind(str, Enum):
    """What produced a diagnostic."""

    FINDING = "finding"
    RULE_INTERNAL_ERROR = "rule-internal-error"
    PARSE_UNAVAILABLE = "parse-unavailable"


class Applicability(str, Enum):
    """Whether a fix may be applied without human review."""

    SAFE = "safe"
    UNSAFE = "unsafe"


@dataclass(frozen=True, slots=True)
class TextEdit:
    """Replace the text covered by ``span`` with ``replacement``."""

    span: Span
    replacement: str

    @classmethod
    def delete(cls, span: Span) -> TextEdit:
        return cls(span, "")


@dataclass(frozen=True, slots=True)
class Fix:
    """A suggested rewrite made of non-overlapping text edits."""

    description: str
    edits: tuple[TextEdit, ...]
    applicability: Applicability = Applicability.SAFE

    def __post_init__(self) -> None:
        if not self.edits:
            raise ValidationError("fix.edits", "a fix needs at least one edit")
        ordered = sorted(self.edits, key=lambda edit: (edit.span.start, edit.span.end))
        for first, second in zip(ordered, ordered[1:], strict=False):
            if first.span.overlaps(second.span):
                raise ValidationError(
                    "fix.edits", "edits of one fix must not overlap", self.description
                )

    @classmethod
    def replace(
        cls,
        span: Span,
        replacement: str,
        description: str,
        applicability: Applicability = Applicability.SAFE,
    ) -> Fix:
        """Single-edit fix."""
        return cls(description, (TextEdit(span, replacement),), applicability)

    @property
    def is_safe(self) -> bool:
        return self.applicability is Applicability.SAFE

    def overlaps(self, other: Fix) -> bool:
        return any(mine.span.overlaps(theirs.span) for mine in self.edits for theirs in other.edits)


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single finding reported for a source unit."""

    rule_id: str
    category: Category | None
    severity: Severity
    span: Span
    message: str
    fix: Fix | None = None
    kind: DiagnosticKind = DiagnosticKind.FINDING

    @property
    def has_fix(self) -> bool:
        return self.fix is not None

    @property
    def sort_key(self) -> tuple[int, int, int, int, str, str]:
        return (
            self.span.line,
            self.span.column,
            self.span.start,
            self.span.end,
            self.rule_id,
            self.message,
        )

    @property
    def dedup_key(self) -> tuple[str, Span, DiagnosticKind]:
        return (self.rule_id, self.span, self.kind)


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Sorted, de-duplicated diagnostics of one source unit.

    Created by one full walk and never mutated afterwards.
    """

    diagnostics: tuple[Diagnostic, ...] = ()
    path: str = "<memory>"

    def __len__(self) -> int:
        return len(self.diagnostics)

    def with_path(self, path: str) -> AnalysisResult:
        return dataclasses.replace(self, path=path)

    @property
    def errors(self) -> list[Diagnostic]:
        """Diagnostics with severity 'error'."""
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        """Diagnostics with severity 'warning'."""
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    @property
    def info(self) -> list[Diagnostic]:
        """Diagnostics with severity 'info'."""
        return [d for d in self.diagnostics if d.severity is Severity.INFO]

    @property
    def fixable(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.has_fix]

    @property
    def counts_by_severity(self) -> dict[Severity, int]:
        counts = Counter(d.severity for d in self.diagnostics)
        return {severity: counts.get(severity, 0) for severity in Severity}

    @property
    def counts_by_category(self) -> dict[Category, int]:
        counts = Counter(d.category for d in self.diagnostics if d.category is not None)
        return {category: counts.get(category, 0) for category in Category}

    @property
    def is_clean(self) -> bool:
        """True if no diagnostics were found."""
        return len(self.diagnostics) == 0

    @property
    def has_errors(self) -> bool:
        """True if any error-level diagnostics exist."""
        return any(d.severity is Severity.ERROR for d in self.diagnostics)
