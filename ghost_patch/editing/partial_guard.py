"""
Partial match guard — structural completeness checks for search text.

A search text that is only a fragment of a larger construct (a declaration
header, a block opened but never closed) must not be fuzzy-matched: replacing
the fragment would duplicate the rest of the construct.
"""

from __future__ import annotations

import re

_DECLARATION_HEADER = re.compile(
    r"^(?:export\s+)?(?:async\s+)?"
    r"(?:const|let|var|function|class|interface|type|def|fn|func)"
    r"\s+\w+\s*[=:]?\s*$"
)

_BRACKET_PAIRS = (("{", "}"), ("(", ")"), ("[", "]"))


def looks_incomplete(pattern: str) -> bool:
    """Return True if *pattern* looks like an incomplete code fragment.

    That is a bare declaration header, or more opening than closing braces,
    parentheses or brackets.
    """
    trimmed = pattern.strip()
    if not trimmed:
        return False

    if _DECLARATION_HEADER.match(trimmed):
        return True

    for open_ch, close_ch in _BRACKET_PAIRS:
        if trimmed.count(open_ch) > trimmed.count(close_ch):
            return True

    return False


def is_complete(matched_span: str, pattern: str) -> bool:
    """Check bracket balance of *matched_span* for each bracket type in *pattern*."""
    for open_ch, close_ch in _BRACKET_PAIRS:
        if open_ch not in pattern and close_ch not in pattern:
            continue
        if matched_span.count(open_ch) != matched_span.count(close_ch):
            return False
    return True
