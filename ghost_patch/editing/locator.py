"""
Fuzzy locator — finds where a model's search text sits in the document.

Strategies run in order and the first success wins:

1. ``exact``              : plain substring match
2. ``trailing_newline``   : search minus its final line break, followed by a
                            line break or end of content
3. ``normalized``         : both sides normalized, offsets mapped back
4. ``trimmed``            : search stripped of surrounding whitespace
5. (guard)                : fragments that look incomplete stop here
6. ``flexible_whitespace``: any whitespace run matches any whitespace run,
                            accepted only if brackets balance
7. ``first_tokens``       : first three tokens, accepted unconditionally

Steps 6 and 7 use regular expressions and are skipped when the search text
or the content exceed the configured limits.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .normalizer import DEFAULT_TAB_WIDTH, map_to_original, normalize
from .partial_guard import is_complete, looks_incomplete

logger = logging.getLogger(__name__)

_WS_SPLIT = re.compile(r"(\s+)")
_FIRST_TOKEN_COUNT = 3


@dataclass(frozen=True)
class MatchResult:
    """Location of a search text in original document coordinates."""
    found: bool
    index: int = -1
    end: int = -1           # exclusive end of the matched span
    strategy: str = ""

    @property
    def length(self) -> int:
        return self.end - self.index if self.found else 0


NOT_FOUND = MatchResult(found=False)


def _flexible_pattern(text: str) -> str:
    """Escape every non-whitespace run; whitespace runs become ``\\s+``."""
    parts = _WS_SPLIT.split(text)
    return "".join(
        r"\s+" if part.isspace() else re.escape(part)
        for part in parts
        if part
    )


def _widen_span(content: str, search: str, start: int, end: int) -> tuple[int, int]:
    """Pull surrounding whitespace into a trimmed match.

    When the search text began with line breaks or indentation, or ended
    with a line break, the located span is widened the same way so the
    replacement (which carries them too) does not double them up. At most
    as many leading line breaks are taken as the search text had.
    """
    lead = search[:len(search) - len(search.lstrip())]
    if lead.endswith((" ", "\t")):
        while start > 0 and content[start - 1] in " \t":
            start -= 1
    breaks = lead.count("\n") + lead.replace("\r\n", "").count("\r")
    while breaks and start > 0 and content[start - 1] in "\r\n":
        if start >= 2 and content[start - 2:start] == "\r\n":
            start -= 2
        else:
            start -= 1
        breaks -= 1
    if search.endswith(("\n", "\r")):
        while end < len(content) and content[end] in " \t":
            end += 1
        if content.startswith("\r\n", end):
            end += 2
        elif end < len(content) and content[end] in "\r\n":
            end += 1
    return start, end


class FuzzyLocator:
    """Locate search text in content with an ordered strategy cascade."""

    def __init__(
        self,
        tab_width: int = DEFAULT_TAB_WIDTH,
        max_search_chars: int = 2000,
        max_content_chars: int = 500_000,
    ) -> None:
        self._tab_width = tab_width
        self._max_search_chars = max_search_chars
        self._max_content_chars = max_content_chars

    @classmethod
    def from_config(cls, config) -> "FuzzyLocator":
        return cls(
            tab_width=config.TAB_WIDTH,
            max_search_chars=config.FALLBACK_MAX_SEARCH_CHARS,
            max_content_chars=config.FALLBACK_MAX_CONTENT_CHARS,
        )

    def locate(self, content: str, search: str) -> MatchResult:
        """Return the best-effort location of *search* inside *content*."""
        if not search.strip() or not content:
            return NOT_FOUND

        # 1. Exact
        index = content.find(search)
        if index != -1:
            return MatchResult(True, index, index + len(search), "exact")

        # 2. Model dropped a trailing blank line
        result = self._match_without_trailing_newline(content, search)
        if result.found:
            return result

        # 3. Normalized whitespace
        result = self._match_normalized(content, search)
        if result.found:
            return result

        # 4. Trimmed
        trimmed = search.strip()
        if trimmed != search:
            index = content.find(trimmed)
            if index != -1:
                start, end = _widen_span(content, search, index, index + len(trimmed))
                return MatchResult(True, start, end, "trimmed")

        # 5. Never fuzzy-match fragments of a larger construct
        if looks_incomplete(search):
            logger.warning(
                "[Locator] Potential partial match rejected: %r",
                search[:100],
            )
            return NOT_FOUND

        if len(search) > self._max_search_chars or len(content) > self._max_content_chars:
            logger.debug(
                "[Locator] Skipping regex fallback (search=%d chars, content=%d chars)",
                len(search), len(content),
            )
            return NOT_FOUND

        # 6. Flexible whitespace
        match = re.search(_flexible_pattern(trimmed), content)
        if match is not None:
            if is_complete(match.group(0), search):
                start, end = _widen_span(content, search, match.start(), match.end())
                return MatchResult(True, start, end, "flexible_whitespace")
            logger.debug(
                "[Locator] Flexible match at %d has unbalanced brackets, ignored",
                match.start(),
            )

        # 7. Last resort: the first few tokens
        tokens = trimmed.split()[:_FIRST_TOKEN_COUNT]
        match = re.search(r"\s+".join(re.escape(t) for t in tokens), content)
        if match is not None:
            start = match.start()
            logger.debug("[Locator] Falling back to first-token match at %d", start)
            return MatchResult(
                True, start, min(start + len(search), len(content)), "first_tokens",
            )

        return NOT_FOUND

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    @staticmethod
    def _match_without_trailing_newline(content: str, search: str) -> MatchResult:
        if search.endswith("\r\n"):
            stripped = search[:-2]
        elif search.endswith("\n"):
            stripped = search[:-1]
        else:
            return NOT_FOUND
        if not stripped:
            return NOT_FOUND

        index = content.find(stripped)
        if index == -1:
            return NOT_FOUND

        after = index + len(stripped)
        if after >= len(content):
            return MatchResult(True, index, after, "trailing_newline")
        if content.startswith("\r\n", after):
            return MatchResult(True, index, after + 2, "trailing_newline")
        if content[after] in "\r\n":
            return MatchResult(True, index, after + 1, "trailing_newline")
        return NOT_FOUND

    def _match_normalized(self, content: str, search: str) -> MatchResult:
        norm_content = normalize(content, self._tab_width)
        norm_search = normalize(search, self._tab_width)
        if not norm_search.strip():
            return NOT_FOUND

        index = norm_content.find(norm_search)
        if index == -1:
            return NOT_FOUND

        start = map_to_original(content, norm_content, index)
        end = map_to_original(content, norm_content, index + len(norm_search))
        return MatchResult(True, start, max(start, end), "normalized")


def find_best_match(content: str, search: str) -> int:
    """Return the offset of *search* in *content*, or -1 if not found."""
    return FuzzyLocator().locate(content, search).index
