"""Tests for the PatchApplier."""

import itertools

from ghost_patch.editing.change_parser import ChangeRequest
from ghost_patch.editing.locator import FuzzyLocator
from ghost_patch.editing.patch_applier import DROP_NOT_FOUND, DROP_OVERLAP, PatchApplier


SAMPLE_FILE = """\
import os
import sys

def authenticate_user(username, password):
    user = db.find(username)
    return user.check_password(password)

def helper():
    return 42
"""


class TestApplyChanges:
    def test_single_replacement(self):
        change = ChangeRequest(
            "    user = db.find(username)\n",
            "    if not username:\n        return False\n    user = db.find(username)\n",
        )
        result = PatchApplier().apply(SAMPLE_FILE, [change])

        assert result.changed
        assert len(result.applied) == 1
        assert result.dropped == []
        assert "    if not username:\n        return False\n" in result.content
        assert "def helper():" in result.content
        assert result.original == SAMPLE_FILE

    def test_multiple_changes_keep_offsets_valid(self):
        changes = [
            ChangeRequest("import os", "import os.path"),
            ChangeRequest("return 42", "return 43"),
        ]
        result = PatchApplier().apply(SAMPLE_FILE, changes)
        assert "import os.path\n" in result.content
        assert "return 43\n" in result.content
        assert [c.strategy for c in result.applied] == ["exact", "exact"]

    def test_not_found_is_dropped(self):
        result = PatchApplier().apply(SAMPLE_FILE, [ChangeRequest("def missing():", "x")])
        assert result.content == SAMPLE_FILE
        assert not result.changed
        assert result.dropped[0].reason == DROP_NOT_FOUND

    def test_custom_locator_is_used(self):
        applier = PatchApplier(FuzzyLocator(max_search_chars=1))
        result = applier.apply("value = fetch(url)\n", [ChangeRequest("value = fetch (url)", "v")])
        assert result.dropped[0].reason == DROP_NOT_FOUND


class TestOverlap:
    def test_overlapping_change_dropped(self):
        content = "line1\nline2\nline3\n"
        changes = [
            ChangeRequest("line1\nline2", "X"),
            ChangeRequest("line2\nline3", "Y"),
        ]
        result = PatchApplier().apply(content, changes)

        assert result.content == "X\nline3\n"
        assert len(result.applied) == 1
        assert result.dropped[0].change == changes[1]
        assert result.dropped[0].reason == DROP_OVERLAP
        assert len(result.warnings) == 1

    def test_accepted_spans_are_pairwise_disjoint(self):
        content = "alpha()\n\nbeta()\n\ngamma()\n"
        changes = [
            ChangeRequest("alpha()", "ALPHA()"),
            # trimmed match widened back over the blank line to alpha's end
            ChangeRequest("\n\n\nbeta()\n", "\n\nBETA()\n"),
            ChangeRequest("gamma()", "GAMMA()"),
            ChangeRequest("beta()\n\ngamma", "x"),
        ]
        result = PatchApplier().apply(content, changes)

        assert [c.strategy for c in result.applied] == ["exact", "trimmed", "exact"]
        assert (result.applied[1].start_index, result.applied[1].end_index) == (7, 16)
        assert [d.reason for d in result.dropped] == [DROP_OVERLAP]
        for a, b in itertools.combinations(result.applied, 2):
            assert a.end_index <= b.start_index or b.end_index <= a.start_index
        assert "ALPHA()" in result.content
        assert "BETA()" in result.content
        assert "GAMMA()" in result.content

    def test_leading_line_breaks_not_doubled(self):
        content = "a\nfoo()\nb\n"
        result = PatchApplier().apply(content, [ChangeRequest("\n\nfoo()\n", "\n\nbar()\n")])
        assert result.content == "a\n\nbar()\nb\n"

    def test_adjacent_changes_do_not_overlap(self):
        content = "ab"
        result = PatchApplier().apply(content, [ChangeRequest("a", "1"), ChangeRequest("b", "2")])
        assert result.content == "12"
        assert result.dropped == []


class TestBlankLinePreservation:
    def test_blank_line_after_match_carried_into_replacement(self):
        content = "const x = 1;\n\nconst y = 2;"
        result = PatchApplier().apply(content, [ChangeRequest("const x = 1;\n", "const x = 2;\n")])
        applied = result.applied[0]
        assert applied.start_index == 0
        assert applied.replace_text == "const x = 2;\n\n"

    def test_replacement_already_ending_with_breaks_untouched(self):
        content = "a\n\nb"
        result = PatchApplier().apply(content, [ChangeRequest("a\n", "A\n\n")])
        assert result.applied[0].replace_text == "A\n\n"

    def test_search_without_newline_untouched(self):
        content = "a\n\nb"
        result = PatchApplier().apply(content, [ChangeRequest("a", "A")])
        assert result.content == "A\n\nb"
