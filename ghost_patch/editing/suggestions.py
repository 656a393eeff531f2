"""
Suggestion store — per-document operations, their proximity groups, and
cursor-relative group selection.

Operations are grouped by their old-content line: after a stable sort,
neighbours at most ``group_max_gap`` lines apart share a group. Each group is
one navigable edit unit for the host.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, Optional

from ..config import DEFAULT_GROUP_MAX_GAP
from ..errors import DocumentRequiredError
from .document import Range, TextDocument
from .operations import Operation, apply_operations

logger = logging.getLogger(__name__)


class GroupKind(str, enum.Enum):
    ADDITION = "+"
    DELETION = "-"
    EDIT = "/"


@dataclass(frozen=True)
class OperationGroup:
    """Line-adjacent operations treated as one edit unit."""
    operations: tuple[Operation, ...]

    def __len__(self) -> int:
        return len(self.operations)

    def __iter__(self) -> Iterator[Operation]:
        return iter(self.operations)

    @property
    def kind(self) -> GroupKind:
        has_add = any(op.is_addition for op in self.operations)
        has_delete = any(op.is_deletion for op in self.operations)
        if has_add and has_delete:
            return GroupKind.EDIT
        return GroupKind.DELETION if has_delete else GroupKind.ADDITION

    @property
    def start_line(self) -> int:
        return min(op.old_line for op in self.operations)

    @property
    def end_line(self) -> int:
        return max(op.old_line for op in self.operations)

    @property
    def added(self) -> int:
        return sum(1 for op in self.operations if op.is_addition)

    @property
    def removed(self) -> int:
        return sum(1 for op in self.operations if op.is_deletion)

    @property
    def line_delta(self) -> int:
        """Net number of lines this group adds to the document."""
        return self.added - self.removed

    def distance_to(self, start_line: int, end_line: int) -> Optional[int]:
        """Smallest line distance from any member to ``[start_line, end_line]``.

        Returns None for a group without operations.
        """
        best: Optional[int] = None
        for op in self.operations:
            if op.old_line < start_line:
                distance = start_line - op.old_line
            elif op.old_line > end_line:
                distance = op.old_line - end_line
            else:
                return 0
            if best is None or distance < best:
                best = distance
        return best


def group_operations(
    operations: Iterable[Operation],
    max_gap: int = DEFAULT_GROUP_MAX_GAP,
) -> list[OperationGroup]:
    """Cluster operations whose old lines are at most *max_gap* apart."""
    ordered = sorted(operations, key=lambda op: op.old_line)
    groups: list[OperationGroup] = []
    current: list[Operation] = []

    for op in ordered:
        if current and op.old_line - current[-1].old_line > max_gap:
            groups.append(OperationGroup(tuple(current)))
            current = []
        current.append(op)

    if current:
        groups.append(OperationGroup(tuple(current)))
    return groups


class SuggestionFile:
    """Operations, groups and selection state for one document."""

    def __init__(self, uri: str, group_max_gap: int = DEFAULT_GROUP_MAX_GAP) -> None:
        self.uri = uri
        self._group_max_gap = group_max_gap
        self._operations: list[Operation] = []
        self._groups: Optional[tuple[OperationGroup, ...]] = None
        self.selected_group_index: Optional[int] = None

    def __repr__(self) -> str:
        return (
            f"SuggestionFile({self.uri!r}, operations={len(self._operations)}, "
            f"selected={self.selected_group_index})"
        )

    # ------------------------------------------------------------------
    # Operations and groups
    # ------------------------------------------------------------------

    def add_operation(self, operation: Operation) -> None:
        self._operations.append(operation)
        self._groups = None

    def add_operations(self, operations: Iterable[Operation]) -> None:
        self._operations.extend(operations)
        self._groups = None

    @property
    def operations(self) -> tuple[Operation, ...]:
        return tuple(self._operations)

    @property
    def groups(self) -> tuple[OperationGroup, ...]:
        if self._groups is None:
            self._groups = tuple(group_operations(self._operations, self._group_max_gap))
        return self._groups

    def has_operations(self) -> bool:
        return bool(self._operations)

    @property
    def selected_group(self) -> Optional[OperationGroup]:
        index = self.selected_group_index
        if index is None or index >= len(self.groups):
            return None
        return self.groups[index]

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_group(self, index: int) -> None:
        if not 0 <= index < len(self.groups):
            raise IndexError(f"Group {index} out of range (have {len(self.groups)})")
        self.selected_group_index = index

    def select_first_group(self) -> Optional[int]:
        self.selected_group_index = 0 if self.groups else None
        return self.selected_group_index

    def select_next_group(self) -> Optional[int]:
        count = len(self.groups)
        if count == 0:
            self.selected_group_index = None
        elif self.selected_group_index is None:
            self.selected_group_index = 0
        else:
            self.selected_group_index = (self.selected_group_index + 1) % count
        return self.selected_group_index

    def select_previous_group(self) -> Optional[int]:
        count = len(self.groups)
        if count == 0:
            self.selected_group_index = None
        elif self.selected_group_index is None:
            self.selected_group_index = count - 1
        else:
            self.selected_group_index = (self.selected_group_index - 1) % count
        return self.selected_group_index

    def select_closest_group(self, selection: Range) -> Optional[int]:
        """Select the group nearest to the selection's line span.

        Ties go to the lowest group index. With no groups the selection
        becomes None.
        """
        start_line = min(selection.start.line, selection.end.line)
        end_line = max(selection.start.line, selection.end.line)

        best_index: Optional[int] = None
        best_distance: Optional[int] = None
        for index, group in enumerate(self.groups):
            distance = group.distance_to(start_line, end_line)
            if distance is None:
                continue
            if best_distance is None or distance < best_distance:
                best_index, best_distance = index, distance
            if distance == 0:
                break

        self.selected_group_index = best_index
        return best_index

    def select_closest_group_in(
        self,
        document: Optional[TextDocument],
        start_offset: int,
        end_offset: Optional[int] = None,
    ) -> Optional[int]:
        """Select the group closest to a host selection given as offsets."""
        if document is None:
            raise DocumentRequiredError(
                f"A document is required to translate offsets for {self.uri}"
            )
        if end_offset is None:
            end_offset = start_offset
        selection = Range(document.position_at(start_offset), document.position_at(end_offset))
        return self.select_closest_group(selection)

    # ------------------------------------------------------------------
    # Dismissal and application
    # ------------------------------------------------------------------

    def dismiss_selected_group(self) -> Optional[OperationGroup]:
        """Drop the selected group's operations and clear the selection.

        Additions in later groups move up by the dismissed group's line
        delta, so the remaining operations still apply cleanly to the
        original content.
        """
        dismissed = self.selected_group
        if dismissed is None:
            return None

        index = self.selected_group_index
        delta = dismissed.line_delta
        remaining: list[Operation] = []
        for position, group in enumerate(self.groups):
            if position < index:
                remaining.extend(group.operations)
            elif position > index:
                remaining.extend(
                    replace(op, line=op.line - delta, new_line=op.new_line - delta)
                    if op.is_addition else op
                    for op in group.operations
                )

        self._operations = remaining
        self._groups = None
        self.selected_group_index = None
        logger.debug(
            "[Suggest] Dismissed group %d (%d operation(s)) in %s",
            index, len(dismissed), self.uri,
        )
        return dismissed

    def apply_to(self, content: str) -> str:
        """Apply every operation to *content*."""
        return apply_operations(content, self._operations)

    def apply_group(self, content: str, index: int) -> str:
        """Apply only group *index* to *content*.

        Additions are moved back by the line delta of all earlier groups,
        which are not applied.
        """
        groups = self.groups
        if not 0 <= index < len(groups):
            raise IndexError(f"Group {index} out of range (have {len(groups)})")
        shift = sum(group.line_delta for group in groups[:index])
        ops = [
            replace(op, line=op.line - shift, new_line=op.new_line - shift)
            if op.is_addition else op
            for op in groups[index].operations
        ]
        return apply_operations(content, ops)


class SuggestionStore:
    """All suggestion files of one suggestion cycle, keyed by URI."""

    def __init__(self, group_max_gap: int = DEFAULT_GROUP_MAX_GAP) -> None:
        self._group_max_gap = group_max_gap
        self._files: dict[str, SuggestionFile] = {}

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, uri: str) -> bool:
        return uri in self._files

    def add_file(self, uri: str) -> SuggestionFile:
        if uri not in self._files:
            self._files[uri] = SuggestionFile(uri, self._group_max_gap)
        return self._files[uri]

    def get_file(self, uri: str) -> Optional[SuggestionFile]:
        return self._files.get(uri)

    @property
    def files(self) -> tuple[SuggestionFile, ...]:
        return tuple(self._files.values())

    @property
    def primary_file(self) -> Optional[SuggestionFile]:
        return next(iter(self._files.values()), None)

    def has_suggestions(self) -> bool:
        return any(f.has_operations() for f in self._files.values())

    def prune_empty(self) -> None:
        """Forget files that ended up without operations."""
        for uri in [uri for uri, f in self._files.items() if not f.has_operations()]:
            del self._files[uri]

    def finalize(self) -> None:
        """Prune empty files and select the first group of the rest."""
        self.prune_empty()
        for f in self._files.values():
            f.select_first_group()

    def clear(self) -> None:
        self._files.clear()

    def apply_to_content(self, content: str, uri: str) -> str:
        """Apply all operations of *uri* to *content* (unchanged if unknown)."""
        f = self._files.get(uri)
        if f is None:
            return content
        return f.apply_to(content)
