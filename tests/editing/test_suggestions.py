"""Tests for operation grouping, selection, dismissal and the suggestion store."""

import pytest

from ghost_patch.errors import DocumentRequiredError
from ghost_patch.editing.document import Range, StringDocument
from ghost_patch.editing.operations import Operation, OperationKind, diff_to_operations
from ghost_patch.editing.suggestions import (
    GroupKind, OperationGroup, SuggestionFile, SuggestionStore, group_operations,
)


def _delete(line: int) -> Operation:
    return Operation(OperationKind.DELETION, line, f"old {line}", line, line)


def _add(line: int, old_line: int) -> Operation:
    return Operation(OperationKind.ADDITION, line, f"new {line}", old_line, line)


OLD_CONTENT = "\n".join(f"line{i}" for i in range(20))

# line2 becomes two lines; two lines are inserted before line16
NEW_CONTENT = "\n".join(
    ["line0", "line1", "LINE2a", "LINE2b"]
    + [f"line{i}" for i in range(3, 16)]
    + ["new_a", "new_b"]
    + [f"line{i}" for i in range(16, 20)]
)

ONLY_SECOND_GROUP = "\n".join(
    [f"line{i}" for i in range(16)] + ["new_a", "new_b"] + [f"line{i}" for i in range(16, 20)]
)

ONLY_FIRST_GROUP = "\n".join(
    ["line0", "line1", "LINE2a", "LINE2b"] + [f"line{i}" for i in range(3, 20)]
)


def _two_group_file() -> SuggestionFile:
    suggestion_file = SuggestionFile("file:///sample.txt")
    suggestion_file.add_operations(diff_to_operations(OLD_CONTENT, NEW_CONTENT))
    return suggestion_file


class TestGrouping:
    def test_nearby_and_distant_operations(self):
        groups = group_operations([_delete(5), _delete(6), _delete(50)])
        assert [len(g) for g in groups] == [2, 1]
        assert groups[1].start_line == 50

    def test_gap_threshold_is_inclusive(self):
        assert len(group_operations([_delete(0), _delete(3)])) == 1
        assert len(group_operations([_delete(0), _delete(4)])) == 2

    def test_custom_gap(self):
        assert len(group_operations([_delete(0), _delete(10)], max_gap=10)) == 1

    def test_unsorted_input_is_ordered(self):
        groups = group_operations([_delete(50), _delete(5)])
        assert [g.start_line for g in groups] == [5, 50]

    def test_group_kind(self):
        assert group_operations([_delete(1)])[0].kind is GroupKind.DELETION
        assert group_operations([_add(1, 1)])[0].kind is GroupKind.ADDITION
        assert group_operations([_delete(1), _add(1, 2)])[0].kind is GroupKind.EDIT

    def test_line_delta(self):
        group = group_operations([_delete(1), _add(1, 2), _add(2, 2)])[0]
        assert (group.added, group.removed, group.line_delta) == (2, 1, 1)

    def test_no_operations_no_groups(self):
        assert group_operations([]) == []


class TestSelection:
    def test_closest_group_to_selection(self):
        suggestion_file = SuggestionFile("file:///a.ts")
        suggestion_file.add_operations([_delete(5), _delete(6), _delete(50)])
        assert suggestion_file.select_closest_group(Range.from_lines(45, 55)) == 1
        assert suggestion_file.selected_group.start_line == 50

    def test_tie_goes_to_earlier_group(self):
        suggestion_file = SuggestionFile("file:///a.ts")
        suggestion_file.add_operations([_delete(10), _delete(20)])
        assert suggestion_file.select_closest_group(Range.from_lines(15)) == 0

    def test_selection_before_all_groups_picks_first(self):
        suggestion_file = SuggestionFile("file:///a.ts")
        suggestion_file.add_operations([_delete(10), _delete(30)])
        assert suggestion_file.select_closest_group(Range.from_lines(0)) == 0

    def test_selection_after_all_groups_picks_last(self):
        suggestion_file = SuggestionFile("file:///a.ts")
        suggestion_file.add_operations([_delete(10), _delete(30)])
        assert suggestion_file.select_closest_group(Range.from_lines(99)) == 1

    def test_empty_group_has_no_distance(self):
        assert OperationGroup(()).distance_to(0, 0) is None
        assert len(OperationGroup(())) == 0

    def test_empty_group_never_selected(self):
        suggestion_file = SuggestionFile("file:///a.ts")
        suggestion_file.add_operation(_delete(40))
        real = suggestion_file.groups[0]
        suggestion_file._groups = (OperationGroup(()), real)
        # the empty group comes first and the selection sits on line 0
        assert suggestion_file.select_closest_group(Range.from_lines(0)) == 1
        assert suggestion_file.selected_group is real

    def test_only_empty_group_selects_nothing(self):
        suggestion_file = SuggestionFile("file:///a.ts")
        suggestion_file.add_operation(_delete(0))
        suggestion_file._groups = (OperationGroup(()),)
        assert suggestion_file.select_closest_group(Range.from_lines(0)) is None

    def test_empty_file_selects_nothing(self):
        suggestion_file = SuggestionFile("file:///a.ts")
        assert suggestion_file.select_closest_group(Range.from_lines(3)) is None
        assert suggestion_file.select_next_group() is None
        assert suggestion_file.selected_group is None

    def test_next_and_previous_wrap(self):
        suggestion_file = SuggestionFile("file:///a.ts")
        suggestion_file.add_operations([_delete(0), _delete(10), _delete(20)])
        assert suggestion_file.select_next_group() == 0
        assert suggestion_file.select_next_group() == 1
        assert suggestion_file.select_next_group() == 2
        assert suggestion_file.select_next_group() == 0
        assert suggestion_file.select_previous_group() == 2

    def test_previous_without_selection_picks_last(self):
        suggestion_file = SuggestionFile("file:///a.ts")
        suggestion_file.add_operations([_delete(0), _delete(10)])
        assert suggestion_file.select_previous_group() == 1

    def test_select_group_out_of_range(self):
        suggestion_file = SuggestionFile("file:///a.ts")
        suggestion_file.add_operation(_delete(0))
        with pytest.raises(IndexError):
            suggestion_file.select_group(1)

    def test_selection_from_document_offsets(self):
        document = StringDocument(OLD_CONTENT, uri="file:///sample.txt")
        suggestion_file = _two_group_file()
        offset = document.offset_at(Range.from_lines(17).start)
        assert suggestion_file.select_closest_group_in(document, offset) == 1

    def test_selection_without_document_raises(self):
        with pytest.raises(DocumentRequiredError):
            _two_group_file().select_closest_group_in(None, 0)


class TestDismissAndApply:
    def test_apply_all(self):
        assert _two_group_file().apply_to(OLD_CONTENT) == NEW_CONTENT

    def test_dismiss_first_group_shifts_later_additions(self):
        suggestion_file = _two_group_file()
        suggestion_file.select_group(0)
        dismissed = suggestion_file.dismiss_selected_group()

        assert dismissed.line_delta == 1
        assert suggestion_file.selected_group_index is None
        assert len(suggestion_file.groups) == 1
        assert suggestion_file.apply_to(OLD_CONTENT) == ONLY_SECOND_GROUP

    def test_dismiss_last_group(self):
        suggestion_file = _two_group_file()
        suggestion_file.select_group(1)
        suggestion_file.dismiss_selected_group()
        assert suggestion_file.apply_to(OLD_CONTENT) == ONLY_FIRST_GROUP

    def test_dismiss_without_selection(self):
        suggestion_file = _two_group_file()
        assert suggestion_file.dismiss_selected_group() is None
        assert len(suggestion_file.groups) == 2

    def test_apply_single_group(self):
        suggestion_file = _two_group_file()
        assert suggestion_file.apply_group(OLD_CONTENT, 0) == ONLY_FIRST_GROUP
        assert suggestion_file.apply_group(OLD_CONTENT, 1) == ONLY_SECOND_GROUP


class TestSuggestionStore:
    def test_finalize_prunes_and_selects_first(self):
        store = SuggestionStore()
        store.add_file("file:///empty.ts")
        store.add_file("file:///a.ts").add_operations([_delete(5), _delete(50)])
        store.finalize()

        assert len(store) == 1
        assert "file:///empty.ts" not in store
        assert store.primary_file.selected_group_index == 0
        assert store.has_suggestions()

    def test_add_file_is_idempotent(self):
        store = SuggestionStore()
        assert store.add_file("u") is store.add_file("u")

    def test_apply_to_content(self):
        store = SuggestionStore()
        store.add_file("file:///sample.txt").add_operations(
            diff_to_operations(OLD_CONTENT, NEW_CONTENT)
        )
        assert store.apply_to_content(OLD_CONTENT, "file:///sample.txt") == NEW_CONTENT
        assert store.apply_to_content(OLD_CONTENT, "file:///other.txt") == OLD_CONTENT

    def test_clear(self):
        store = SuggestionStore()
        store.add_file("u").add_operation(_delete(0))
        store.clear()
        assert len(store) == 0
        assert store.primary_file is None
        assert not store.has_suggestions()
