"""Tests for the in-memory document surface."""

import pytest

from ghost_patch.editing.document import Position, Range, StringDocument, TextDocument


SAMPLE = "first\nsecond line\n\nlast"


class TestStringDocument:
    def test_satisfies_protocol(self):
        assert isinstance(StringDocument(SAMPLE), TextDocument)

    def test_line_count_and_lines(self):
        doc = StringDocument(SAMPLE)
        assert doc.line_count == 4
        assert doc.line_at(1).text == "second line"
        assert doc.line_at(2).is_empty_or_whitespace

    def test_line_out_of_range(self):
        with pytest.raises(IndexError):
            StringDocument(SAMPLE).line_at(4)

    def test_offsets_round_trip(self):
        doc = StringDocument(SAMPLE)
        for offset in range(len(SAMPLE) + 1):
            assert doc.offset_at(doc.position_at(offset)) == offset

    def test_position_at(self):
        doc = StringDocument(SAMPLE)
        assert doc.position_at(SAMPLE.index("line")) == Position(1, 7)

    def test_positions_are_clamped(self):
        doc = StringDocument(SAMPLE)
        assert doc.offset_at(Position(99, 99)) == len(SAMPLE)
        assert doc.offset_at(Position(0, 99)) == len("first")
        assert doc.position_at(-5) == Position(0, 0)

    def test_get_text_with_range(self):
        doc = StringDocument(SAMPLE)
        assert doc.get_text() == SAMPLE
        assert doc.get_text(Range(Position(1, 0), Position(1, 6))) == "second"

    def test_crlf_lines(self):
        doc = StringDocument("a\r\nb")
        assert doc.line_at(0).text == "a"
        assert doc.offset_at(Position(1, 0)) == 3


class TestRange:
    def test_from_lines(self):
        selection = Range.from_lines(4)
        assert selection.is_empty
        assert selection.start == Position(4, 0)

    def test_multi_line(self):
        selection = Range.from_lines(2, 8)
        assert not selection.is_empty
        assert selection.end.line == 8
