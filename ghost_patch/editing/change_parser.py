"""
Change block parser — extracts edit requests from the raw model response.

Two formats are understood:

Search/replace blocks::

    <change>
    <search><![CDATA[old code]]></search>
    <replace><![CDATA[new code]]></replace>
    </change>

Full block (the complete new content of the active document)::

    path/to/file.ts
    ```ts
    new content
    ```

If the search/replace markers are present the response is parsed only as
search/replace blocks; otherwise a fence marker selects the full-block
format; anything else yields no edits. Parsing never raises.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Markers
_CHANGE_OPEN = "<change>"
_SEARCH_OPEN = "<search>"
_REPLACE_OPEN = "<replace>"
_FENCE = "```"

# Patterns
_CHANGE_PATTERN = re.compile(
    r"<change>\s*"
    r"<search>\s*<!\[CDATA\[(.*?)\]\]>\s*</search>\s*"
    r"<replace>\s*<!\[CDATA\[(.*?)\]\]>\s*</replace>\s*"
    r"</change>",
    re.DOTALL,
)


class ResponseFormat(enum.Enum):
    NONE = "none"
    SEARCH_REPLACE = "search_replace"
    FULL_BLOCK = "full_block"


@dataclass(frozen=True)
class ChangeRequest:
    """A single search/replace edit proposed by the model."""
    search_text: str
    replace_text: str


@dataclass
class ParsedResponse:
    """Everything extracted from one response."""
    format: ResponseFormat = ResponseFormat.NONE
    changes: list[ChangeRequest] = field(default_factory=list)
    full_content: str | None = None     # FULL_BLOCK only
    label: str = ""                     # filename line before the fence
    language: str = ""                  # fence info string

    @property
    def is_empty(self) -> bool:
        if self.format is ResponseFormat.FULL_BLOCK:
            return self.full_content is None
        return not self.changes


def has_search_replace_markers(text: str) -> bool:
    return _CHANGE_OPEN in text and _SEARCH_OPEN in text and _REPLACE_OPEN in text


class ChangeBlockParser:
    """Parse model responses into change requests."""

    def parse(self, response: str) -> ParsedResponse:
        """Detect the response format and extract its edits.

        Parameters
        ----------
        response:
            The raw (finished) response text.

        Returns
        -------
        ParsedResponse
            The extracted edits; ``format`` is ``NONE`` and the result is
            empty when nothing recognizable was found.
        """
        if not response:
            return ParsedResponse()

        if has_search_replace_markers(response):
            return self._parse_search_replace(response)

        if _FENCE in response:
            return self._parse_full_block(response)

        logger.debug("[Parser] No recognizable edit format in response")
        return ParsedResponse()

    # ------------------------------------------------------------------
    # Internal parsing
    # ------------------------------------------------------------------

    def _parse_search_replace(self, response: str) -> ParsedResponse:
        changes = [
            ChangeRequest(search_text=m.group(1), replace_text=m.group(2))
            for m in _CHANGE_PATTERN.finditer(response)
        ]
        if not changes:
            logger.warning(
                "[Parser] Search/replace markers present but no complete change block"
            )
            return ParsedResponse()

        logger.debug("[Parser] Parsed %d change block(s)", len(changes))
        return ParsedResponse(format=ResponseFormat.SEARCH_REPLACE, changes=changes)

    def _parse_full_block(self, response: str) -> ParsedResponse:
        """Collect the first fenced block, and the label line before it."""
        label = ""
        language = ""
        code_lines: list[str] = []
        in_block = False
        closed = False

        for raw_line in response.split("\n"):
            line = raw_line.strip()

            if line.startswith(_FENCE):
                if not in_block:
                    in_block = True
                    language = line[len(_FENCE):].strip()
                    continue
                closed = True
                break

            if in_block:
                code_lines.append(raw_line)
            elif not label and line:
                label = line

        if not in_block or not code_lines:
            logger.debug("[Parser] Fence present but no code inside")
            return ParsedResponse()

        if not closed:
            logger.debug("[Parser] Code block was not closed, using what was received")

        return ParsedResponse(
            format=ResponseFormat.FULL_BLOCK,
            full_content="\n".join(code_lines),
            label=label,
            language=language,
        )
