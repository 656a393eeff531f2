"""
Hunk differ — unified-diff hunks between two versions of a document.

Content is split on ``"\\n"`` only, so a trailing newline shows up as a final
empty line and ``"\\r"`` stays part of its line. This keeps the hunks exactly
invertible by :func:`ghost_patch.editing.operations.apply_operations`.
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass, field

DEFAULT_CONTEXT_LINES = 3

OP_CONTEXT = " "
OP_DELETE = "-"
OP_ADD = "+"


@dataclass(frozen=True)
class HunkLine:
    op: str
    text: str


@dataclass
class DiffHunk:
    """A contiguous block of context, deleted and added lines.

    ``old_start`` / ``new_start`` are the 1-based numbers of the first line
    the hunk covers in each version, even when that side is empty.
    """
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: list[HunkLine] = field(default_factory=list)

    @property
    def old_end(self) -> int:
        return self.old_start + self.old_lines

    @property
    def new_end(self) -> int:
        return self.new_start + self.new_lines

    @property
    def header(self) -> str:
        """The ``@@ -a,b +c,d @@`` line, using the unified-diff convention
        of naming the preceding line for an empty range."""
        return "@@ -{} +{} @@".format(
            _format_range(self.old_start, self.old_lines),
            _format_range(self.new_start, self.new_lines),
        )

    @property
    def additions(self) -> int:
        return sum(1 for line in self.lines if line.op == OP_ADD)

    @property
    def deletions(self) -> int:
        return sum(1 for line in self.lines if line.op == OP_DELETE)


def _format_range(start: int, length: int) -> str:
    if length == 1:
        return str(start)
    if length == 0:
        return f"{start - 1},0"
    return f"{start},{length}"


def split_lines(content: str) -> list[str]:
    return content.split("\n")


def compute_hunks(
    old: str,
    new: str,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> list[DiffHunk]:
    """Return the hunks turning *old* into *new* (empty if they are equal)."""
    if old == new:
        return []

    old_lines = split_lines(old)
    new_lines = split_lines(new)
    matcher = difflib.SequenceMatcher(None, old_lines, new_lines, autojunk=False)

    hunks: list[DiffHunk] = []
    for group in matcher.get_grouped_opcodes(context_lines):
        i1, i2 = group[0][1], group[-1][2]
        j1, j2 = group[0][3], group[-1][4]

        lines: list[HunkLine] = []
        for tag, a1, a2, b1, b2 in group:
            if tag == "equal":
                lines.extend(HunkLine(OP_CONTEXT, text) for text in old_lines[a1:a2])
                continue
            # Deletions of a replaced region come before its additions
            if tag in ("replace", "delete"):
                lines.extend(HunkLine(OP_DELETE, text) for text in old_lines[a1:a2])
            if tag in ("replace", "insert"):
                lines.extend(HunkLine(OP_ADD, text) for text in new_lines[b1:b2])

        hunks.append(DiffHunk(
            old_start=i1 + 1,
            old_lines=i2 - i1,
            new_start=j1 + 1,
            new_lines=j2 - j1,
            lines=lines,
        ))

    return hunks


def format_hunks(
    hunks: list[DiffHunk],
    fromfile: str = "a",
    tofile: str = "b",
) -> str:
    """Render hunks as unified diff text (no trailing newline)."""
    if not hunks:
        return ""
    out = [f"--- {fromfile}", f"+++ {tofile}"]
    for hunk in hunks:
        out.append(hunk.header)
        out.extend(line.op + line.text for line in hunk.lines)
    return "\n".join(out)
