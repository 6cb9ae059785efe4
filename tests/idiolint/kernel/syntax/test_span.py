"""Tests for idiolint.kernel.syntax.span."""

import pytest

from idiolint.kernel.exceptions import ValidationError
from idiolint.kernel.syntax.span import PositionIndex, Span


class TestSpan:
    def test_length(self) -> None:
        assert Span(3, 10).length == 7
        assert Span(4, 4).length == 0

    def test_start_after_end_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Span(5, 2)

    def test_negative_start_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Span(-1, 2)

    def test_contains(self) -> None:
        outer = Span(0, 10)
        assert outer.contains(Span(2, 5))
        assert outer.contains(outer)
        assert not outer.contains(Span(8, 12))

    def test_overlap_is_half_open(self) -> None:
        assert Span(0, 5).overlaps(Span(4, 8))
        assert not Span(0, 5).overlaps(Span(5, 8))
        assert not Span(5, 8).overlaps(Span(0, 5))

    def test_insertions_at_same_offset_overlap(self) -> None:
        assert Span(3, 3).overlaps(Span(3, 3))
        assert Span(3, 3).overlaps(Span(3, 6))

    def test_frozen(self) -> None:
        span = Span(0, 1)
        with pytest.raises(AttributeError):
            span.start = 2  # type: ignore[misc]


class TestPositionIndex:
    def test_first_line(self) -> None:
        index = PositionIndex("abc\ndef\n")
        assert index.position(0) == (1, 1)
        assert index.position(2) == (1, 3)

    def test_following_lines(self) -> None:
        index = PositionIndex("abc\ndef\nghi")
        assert index.position(4) == (2, 1)
        assert index.position(10) == (3, 3)
        assert index.line_count == 3

    def test_end_of_buffer_is_valid(self) -> None:
        index = PositionIndex("ab")
        assert index.position(2) == (1, 3)

    def test_out_of_range(self) -> None:
        with pytest.raises(ValidationError):
            PositionIndex("ab").position(3)

    def test_span_carries_start_position(self) -> None:
        index = PositionIndex("x = 1\ny = 2\n")
        span = index.span(6, 11)
        assert (span.line, span.column) == (2, 1)
        assert index.end_position(span) == (2, 6)
