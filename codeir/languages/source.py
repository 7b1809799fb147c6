"""Map byte offsets in a source buffer to IR positions."""

from __future__ import annotations

from bisect import bisect_right

from codeir.core.models import Position


class SourceText:
    """Line index over UTF-8 source bytes.

    Parsers report byte offsets; the IR wants 1-based line and column numbers
    and a 0-based character offset. Undecodable bytes count as one character.
    """

    def __init__(self, source: bytes) -> None:
        self._source = source
        self._line_starts = [0]
        pos = source.find(b"\n")
        while pos != -1:
            self._line_starts.append(pos + 1)
            pos = source.find(b"\n", pos + 1)

        # Character offset of each line start
        self._char_starts = [0]
        for start, next_start in zip(self._line_starts, self._line_starts[1:]):
            line = source[start:next_start].decode("utf-8", errors="replace")
            self._char_starts.append(self._char_starts[-1] + len(line))

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def _line_of(self, byte_offset: int) -> int:
        return bisect_right(self._line_starts, byte_offset) - 1

    def _chars(self, start: int, end: int) -> int:
        return len(self._source[start:end].decode("utf-8", errors="replace"))

    def line_start(self, line: int) -> int:
        """Byte offset where the 1-based ``line`` begins."""
        return self._line_starts[line - 1]

    def position_at(self, byte_offset: int) -> Position:
        """Position of the character starting at ``byte_offset``."""
        row = self._line_of(byte_offset)
        prefix = self._chars(self._line_starts[row], byte_offset)
        return Position(line=row + 1, column=prefix + 1, offset=self._char_starts[row] + prefix)

    def last_position_before(self, byte_offset: int) -> Position:
        """Position of the last character that ends at ``byte_offset`` (exclusive)."""
        if byte_offset <= 0:
            return Position(line=1, column=1, offset=0)
        row = self._line_of(byte_offset - 1)
        prefix = self._chars(self._line_starts[row], byte_offset)
        return Position(
            line=row + 1,
            column=max(prefix, 1),
            offset=max(self._char_starts[row] + prefix - 1, 0),
        )

    def position_at_line_column(self, line: int, byte_column: int) -> Position:
        """Position for a 1-based line and a 0-based byte column."""
        return self.position_at(self.line_start(line) + byte_column)

    def span(self, start_byte: int, end_byte: int) -> tuple[Position, Position] | None:
        """Start and inclusive end positions, or None for an empty span."""
        if end_byte <= start_byte:
            return None
        return self.position_at(start_byte), self.last_position_before(end_byte)
