"""
Patch applier — locates search/replace requests in the document and
substitutes them without ever letting two edits touch the same span.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .change_parser import ChangeRequest
from .locator import FuzzyLocator

logger = logging.getLogger(__name__)

DROP_NOT_FOUND = "not_found"
DROP_OVERLAP = "overlap"


@dataclass(frozen=True)
class AppliedChange:
    """A located change, ready for substitution."""
    search_text: str
    replace_text: str
    start_index: int
    end_index: int          # exclusive
    strategy: str = "exact"

    def overlaps(self, start: int, end: int) -> bool:
        return start < self.end_index and end > self.start_index


@dataclass(frozen=True)
class DroppedChange:
    """A change request that was not applied, and why."""
    change: ChangeRequest
    reason: str


@dataclass
class ApplyResult:
    """Result of applying a set of change requests to one document."""
    original: str = ""
    content: str = ""
    applied: list[AppliedChange] = field(default_factory=list)
    dropped: list[DroppedChange] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.content != self.original


class PatchApplier:
    """Apply located, non-overlapping search/replace edits to text."""

    def __init__(self, locator: FuzzyLocator | None = None) -> None:
        self._locator = locator or FuzzyLocator()

    def apply(self, content: str, changes: list[ChangeRequest]) -> ApplyResult:
        """Locate every change in *content* and substitute the accepted ones.

        Changes are considered in order. A change whose span overlaps an
        already-accepted one is dropped entirely; the earlier one wins.
        Substitution then runs from the highest start offset down so that
        earlier offsets stay valid.

        Parameters
        ----------
        content:
            Current document content.
        changes:
            Change requests in response order.

        Returns
        -------
        ApplyResult
            The modified content plus the accepted and dropped changes.
        """
        result = ApplyResult(original=content, content=content)

        for change in changes:
            applied = self._locate(content, change, result)
            if applied is not None:
                result.applied.append(applied)

        result.content = self._substitute(content, result.applied)
        logger.debug(
            "[Patch] Applied %d change(s), dropped %d",
            len(result.applied), len(result.dropped),
        )
        return result

    # ------------------------------------------------------------------
    # Location and acceptance
    # ------------------------------------------------------------------

    def _locate(
        self,
        content: str,
        change: ChangeRequest,
        result: ApplyResult,
    ) -> AppliedChange | None:
        match = self._locator.locate(content, change.search_text)
        if not match.found:
            logger.warning(
                "[Patch] Search text not found, skipping: %r",
                change.search_text[:50],
            )
            result.dropped.append(DroppedChange(change, DROP_NOT_FOUND))
            return None

        start, end = match.index, match.end
        if any(existing.overlaps(start, end) for existing in result.applied):
            message = f"Skipping overlapping change at {start}-{end}: {change.search_text[:50]!r}"
            logger.warning("[Patch] %s", message)
            result.warnings.append(message)
            result.dropped.append(DroppedChange(change, DROP_OVERLAP))
            return None

        return AppliedChange(
            search_text=change.search_text,
            replace_text=self._preserve_blank_lines(content, change, end),
            start_index=start,
            end_index=end,
            strategy=match.strategy,
        )

    @staticmethod
    def _preserve_blank_lines(content: str, change: ChangeRequest, end: int) -> str:
        """Carry blank lines the search text stopped short of into the replacement."""
        replacement = change.replace_text
        if not change.search_text.endswith("\n"):
            return replacement

        extra = 0
        while end + extra < len(content) and content[end + extra] == "\n":
            extra += 1
        if extra == 0:
            return replacement

        breaks = "\n" * extra
        if replacement.endswith("\n" + breaks):
            return replacement
        return replacement.rstrip() + "\n" + breaks

    @staticmethod
    def _substitute(content: str, applied: list[AppliedChange]) -> str:
        """Splice every accepted change in, bottom-up."""
        for change in sorted(applied, key=lambda c: c.start_index, reverse=True):
            content = (
                content[:change.start_index]
                + change.replace_text
                + content[change.end_index:]
            )
        return content
