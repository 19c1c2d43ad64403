"""Read-only cursor over Shuttle source text."""

from __future__ import annotations

from bisect import bisect_right

from .constants import WHITESPACE


class Scanner:
    """Cursor over a string of code points.

    The scanner never fails: reading past the end yields ``""``. Interpreting
    what it sees is left to the parser.
    """

    __slots__ = ("_line_starts", "length", "pos", "text")

    text: str
    length: int
    pos: int
    _line_starts: list[int] | None

    def __init__(self, text: str) -> None:
        self.text = text
        self.length = len(text)
        self.pos = 0
        self._line_starts = None

    def at_end(self) -> bool:
        return self.pos >= self.length

    def peek(self, ahead: int = 0) -> str:
        index = self.pos + ahead
        if index < self.length:
            return self.text[index]
        return ""

    def advance(self, count: int = 1) -> str:
        start = self.pos
        self.pos = min(self.pos + count, self.length)
        return self.text[start : self.pos]

    def startswith(self, prefix: str) -> bool:
        return self.text.startswith(prefix, self.pos)

    def skip_whitespace(self) -> bool:
        """Advance past whitespace. Returns True if anything was skipped."""
        start = self.pos
        text = self.text
        while self.pos < self.length and text[self.pos] in WHITESPACE:
            self.pos += 1
        return self.pos != start

    def consume_until(self, stop_chars: frozenset[str] | str) -> str:
        """Consume characters until one of ``stop_chars`` or the end."""
        start = self.pos
        text = self.text
        while self.pos < self.length and text[self.pos] not in stop_chars:
            self.pos += 1
        return text[start : self.pos]

    def find(self, needle: str, start: int | None = None) -> int:
        return self.text.find(needle, self.pos if start is None else start)

    def location(self, offset: int) -> tuple[int, int]:
        """Map an offset to a 1-based (line, column) pair."""
        if self._line_starts is None:
            starts = [0]
            index = self.text.find("\n")
            while index != -1:
                starts.append(index + 1)
                index = self.text.find("\n", index + 1)
            self._line_starts = starts
        line_index = bisect_right(self._line_starts, offset) - 1
        return line_index + 1, offset - self._line_starts[line_index] + 1
