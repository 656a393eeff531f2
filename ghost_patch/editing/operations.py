"""
Operations — line-level additions and deletions derived from diff hunks,
and the host-level algorithm that applies them back to text.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from .hunk_differ import (
    DEFAULT_CONTEXT_LINES, OP_ADD, OP_DELETE, DiffHunk, compute_hunks, split_lines,
)

logger = logging.getLogger(__name__)


class OperationKind(str, enum.Enum):
    ADDITION = "+"
    DELETION = "-"


@dataclass(frozen=True)
class Operation:
    """One line added or removed.

    ``line`` is 0-based and uses new-content numbering for an addition and
    old-content numbering for a deletion. ``old_line`` / ``new_line`` carry
    both numberings as they stood when the operation was emitted; for an
    addition ``old_line`` is the old-content line it is inserted before.
    """
    kind: OperationKind
    line: int
    content: str
    old_line: int
    new_line: int

    @property
    def is_addition(self) -> bool:
        return self.kind is OperationKind.ADDITION

    @property
    def is_deletion(self) -> bool:
        return self.kind is OperationKind.DELETION


def walk_hunk(hunk: DiffHunk) -> tuple[list[Operation], int, int]:
    """Turn one hunk into operations.

    Returns the operations and the final (old, new) 1-based counters, which
    always equal ``hunk.old_end`` / ``hunk.new_end``.
    """
    operations: list[Operation] = []
    old_counter = hunk.old_start
    new_counter = hunk.new_start

    for entry in hunk.lines:
        if entry.op == OP_ADD:
            operations.append(Operation(
                kind=OperationKind.ADDITION,
                line=new_counter - 1,
                content=entry.text,
                old_line=old_counter - 1,
                new_line=new_counter - 1,
            ))
            new_counter += 1
        elif entry.op == OP_DELETE:
            operations.append(Operation(
                kind=OperationKind.DELETION,
                line=old_counter - 1,
                content=entry.text,
                old_line=old_counter - 1,
                new_line=new_counter - 1,
            ))
            old_counter += 1
        else:
            old_counter += 1
            new_counter += 1

    return operations, old_counter, new_counter


def build_operations(hunks: list[DiffHunk]) -> list[Operation]:
    """Flatten all hunks into one operation list, in diff order."""
    operations: list[Operation] = []
    for hunk in hunks:
        hunk_ops, old_end, new_end = walk_hunk(hunk)
        if (old_end, new_end) != (hunk.old_end, hunk.new_end):
            logger.error(
                "[Diff] Hunk %s ended at -%d +%d", hunk.header, old_end, new_end,
            )
        operations.extend(hunk_ops)
    return operations


def diff_to_operations(
    old: str,
    new: str,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> list[Operation]:
    return build_operations(compute_hunks(old, new, context_lines))


def apply_operations(content: str, operations) -> str:
    """Apply operations to *content* the way a host editor would.

    Deletions are removed from the highest old line down, then additions
    are inserted from the lowest new line up. For operations produced from
    ``old`` → ``new`` this returns ``new`` exactly.
    """
    lines = split_lines(content)

    deletions = sorted(
        (op for op in operations if op.is_deletion),
        key=lambda op: op.line,
        reverse=True,
    )
    for op in deletions:
        if 0 <= op.line < len(lines):
            del lines[op.line]
        else:
            logger.warning(
                "[Apply] Invalid line %d for deletion (max: %d)",
                op.line, len(lines) - 1,
            )

    additions = sorted(
        (op for op in operations if op.is_addition),
        key=lambda op: op.line,
    )
    for op in additions:
        if op.line < 0:
            logger.warning("[Apply] Invalid negative line %d for insertion", op.line)
            continue
        if op.line > len(lines):
            logger.warning(
                "[Apply] Line %d past end for insertion (max: %d), appending",
                op.line, len(lines),
            )
        lines.insert(op.line, op.content)

    return "\n".join(lines)
