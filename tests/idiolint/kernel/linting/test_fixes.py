"""Tests for idiolint.kernel.linting.fixes."""

import pytest

from idiolint.kernel.exceptions import ValidationError
from idiolint.kernel.linting.fixes import apply_fixes
from idiolint.kernel.linting.models import (
    AnalysisResult,
    Applicability,
    Category,
    Diagnostic,
    Fix,
    Severity,
    TextEdit,
)
from idiolint.kernel.syntax.span import Span

BUFFER = "foo(x::Int) = bar(x)"


def _fixed(rule_id: str, fix: Fix | None) -> Diagnostic:
    start = fix.edits[0].span.start if fix else 0
    return Diagnostic(
        rule_id=rule_id,
        category=Category.TYPING,
        severity=Severity.WARNING,
        span=Span(start, start + 1, 1, start + 1),
        message=rule_id,
        fix=fix,
    )


def _result(*diagnostics: Diagnostic) -> AnalysisResult:
    return AnalysisResult(diagnostics=diagnostics)


class TestApplyFixes:
    def test_no_fixes_leaves_text(self) -> None:
        outcome = apply_fixes(BUFFER, _result(_fixed("plain", None)))
        assert outcome.text == BUFFER
        assert not outcome.changed
        assert outcome.applied_count == 0

    def test_single_fix(self) -> None:
        outcome = apply_fixes(
            BUFFER, _result(_fixed("widen", Fix.replace(Span(7, 10), "Integer", "widen")))
        )
        assert outcome.text == "foo(x::Integer) = bar(x)"
        assert outcome.changed

    def test_several_fixes_keep_offsets(self) -> None:
        outcome = apply_fixes(
            BUFFER,
            _result(
                _fixed("rename", Fix.replace(Span(0, 3), "foo_long", "rename")),
                _fixed("widen", Fix.replace(Span(7, 10), "Integer", "widen")),
                _fixed("call", Fix.replace(Span(14, 17), "baz", "call")),
            ),
        )
        assert outcome.text == "foo_long(x::Integer) = baz(x)"
        assert outcome.applied_count == 3

    def test_multi_edit_fix(self) -> None:
        fix = Fix("wrap", (TextEdit(Span(14, 14), "("), TextEdit(Span(20, 20), ")")))
        outcome = apply_fixes(BUFFER, _result(_fixed("wrap", fix)))
        assert outcome.text == "foo(x::Int) = (bar(x))"

    def test_overlapping_fixes_are_both_withheld(self, log_messages) -> None:
        outcome = apply_fixes(
            BUFFER,
            _result(
                _fixed("first", Fix.replace(Span(4, 10), "y", "first")),
                _fixed("second", Fix.replace(Span(7, 11), "Integer)", "second")),
                _fixed("third", Fix.replace(Span(14, 17), "baz", "third")),
            ),
        )
        assert outcome.text == "foo(x::Int) = baz(x)"
        assert [d.rule_id for d in outcome.applied] == ["third"]
        assert {c.rule_id for c in outcome.conflicts} == {"first", "second"}
        first = next(c for c in outcome.conflicts if c.rule_id == "first")
        assert first.conflicts_with == ("second",)
        assert any("Withholding fix of first" in m for m in log_messages)

    def test_unsafe_fixes_skipped_by_default(self) -> None:
        unsafe = Fix.replace(Span(0, 3), "foo!", "rename", Applicability.UNSAFE)
        result = _result(_fixed("rename", unsafe))
        skipped = apply_fixes(BUFFER, result)
        assert skipped.text == BUFFER
        assert skipped.skipped_unsafe == 1

        applied = apply_fixes(BUFFER, result, include_unsafe=True)
        assert applied.text.startswith("foo!(x::Int)")
        assert applied.skipped_unsafe == 0

    def test_skipped_unsafe_fix_cannot_conflict(self) -> None:
        result = _result(
            _fixed("rename", Fix.replace(Span(0, 3), "foo!", "r", Applicability.UNSAFE)),
            _fixed("other", Fix.replace(Span(0, 3), "fob", "o")),
        )
        outcome = apply_fixes(BUFFER, result)
        assert outcome.text.startswith("fob(")
        assert outcome.conflicts == ()

    def test_edit_outside_buffer(self) -> None:
        result = _result(_fixed("far", Fix.replace(Span(100, 105), "x", "far")))
        with pytest.raises(ValidationError):
            apply_fixes(BUFFER, result)
