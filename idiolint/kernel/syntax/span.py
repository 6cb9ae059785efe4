"""Source positions: spans and the offset-to-line/column index."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass

from idiolint.kernel.exceptions import ValidationError


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open ``[start, end)`` range of character offsets into a source buffer.

    ``line`` and ``column`` are 1-based and describe ``start``. Spans always
    refer to the original, unmodified buffer.
    """

    start: int
    end: int
    line: int = 1
    column: int = 1

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValidationError("span.start", "must be non-negative", self.start)
        if self.start > self.end:
            raise ValidationError("span", "start must not exceed end", (self.start, self.end))

    @property
    def length(self) -> int:
        return self.end - self.start

    def contains(self, other: Span) -> bool:
        """True if ``other`` lies entirely inside this span."""
        return self.start <= other.start and other.end <= self.end

    def overlaps(self, other: Span) -> bool:
        """True if the two ranges share at least one offset.

        Two empty spans at the same offset also overlap: they describe
        insertions whose relative order would be ambiguous.
        """
        if self.start == other.start:
            return True
        return self.start < other.end and other.start < self.end


class PositionIndex:
    """Maps character offsets of one source buffer to 1-based (line, column)."""

    __slots__ = ("_line_starts", "_length")

    def __init__(self, text: str) -> None:
        starts = [0]
        for offset, char in enumerate(text):
            if char == "\n":
                starts.append(offset + 1)
        self._line_starts = tuple(starts)
        self._length = len(text)

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def position(self, offset: int) -> tuple[int, int]:
        """Return the 1-based ``(line, column)`` of ``offset``.

        Raises
        ------
        ValidationError
            If the offset lies outside the buffer
        """
        if offset < 0 or offset > self._length:
            raise ValidationError("offset", f"must be within 0..{self._length}", offset)
        line = bisect_right(self._line_starts, offset)
        return line, offset - self._line_starts[line - 1] + 1

    def span(self, start: int, end: int) -> Span:
        """Build a span whose line/column are derived from ``start``."""
        line, column = self.position(start)
        return Span(start, end, line, column)

    def end_position(self, span: Span) -> tuple[int, int]:
        """Return the 1-based ``(line, column)`` of the span's end offset."""
        return self.position(span.end)
