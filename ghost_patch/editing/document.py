"""
Document surface — the small capability set the engine needs from a host.

Any host (editor bridge, CLI harness, test double) provides these five
members; :class:`StringDocument` is the in-memory implementation.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class Position:
    """Zero-based line and character."""
    line: int
    character: int = 0


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    @classmethod
    def from_lines(cls, start_line: int, end_line: Optional[int] = None) -> "Range":
        """Range covering whole line numbers (cursor-style when only one given)."""
        if end_line is None:
            end_line = start_line
        return cls(Position(start_line, 0), Position(end_line, 0))


@dataclass(frozen=True)
class TextLine:
    line_number: int
    text: str

    @property
    def is_empty_or_whitespace(self) -> bool:
        return not self.text.strip()


@runtime_checkable
class TextDocument(Protocol):
    uri: str

    @property
    def line_count(self) -> int: ...

    def get_text(self, range: Optional[Range] = None) -> str: ...

    def line_at(self, line: int) -> TextLine: ...

    def offset_at(self, position: Position) -> int: ...

    def position_at(self, offset: int) -> Position: ...


class StringDocument:
    """A document backed by a plain string.

    Positions and offsets outside the document are clamped into it, the
    way editors treat them.
    """

    def __init__(
        self,
        text: str,
        uri: str = "untitled:document",
        language_id: str = "plaintext",
    ) -> None:
        self.uri = uri
        self.language_id = language_id
        self._text = text
        self._raw_lines = text.split("\n")
        self._line_starts: list[int] = []
        offset = 0
        for raw in self._raw_lines:
            self._line_starts.append(offset)
            offset += len(raw) + 1

    @property
    def line_count(self) -> int:
        return len(self._raw_lines)

    def get_text(self, range: Optional[Range] = None) -> str:
        if range is None:
            return self._text
        start = self.offset_at(range.start)
        end = self.offset_at(range.end)
        return self._text[min(start, end):max(start, end)]

    def line_at(self, line: int) -> TextLine:
        if not 0 <= line < self.line_count:
            raise IndexError(f"Line {line} out of range (0-{self.line_count - 1})")
        return TextLine(line, self._raw_lines[line].rstrip("\r"))

    def offset_at(self, position: Position) -> int:
        line = min(max(position.line, 0), self.line_count - 1)
        text = self._raw_lines[line].rstrip("\r")
        character = min(max(position.character, 0), len(text))
        return self._line_starts[line] + character

    def position_at(self, offset: int) -> Position:
        offset = min(max(offset, 0), len(self._text))
        line = bisect.bisect_right(self._line_starts, offset) - 1
        text = self._raw_lines[line].rstrip("\r")
        return Position(line, min(offset - self._line_starts[line], len(text)))
