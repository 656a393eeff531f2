"""
Text normalizer — canonical whitespace for comparison only.

Normalized text is never written back; offsets found in normalized text are
mapped back to the original with :func:`map_to_original`.
"""

from __future__ import annotations

import re

DEFAULT_TAB_WIDTH = 4

_TRAILING_WS = re.compile(r"[ \t]+$", re.MULTILINE)


def normalize(text: str, tab_width: int = DEFAULT_TAB_WIDTH) -> str:
    """Unify line endings, expand tabs and strip per-line trailing whitespace.

    Normalizing already-normalized text returns it unchanged.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = text.replace("\t", " " * tab_width)
    return _TRAILING_WS.sub("", text)


def _run_end(text: str, start: int) -> int:
    """Return the index just past the whitespace run starting at *start*."""
    end = start
    while end < len(text) and text[end].isspace():
        end += 1
    return end


def map_to_original(original: str, normalized: str, normalized_index: int) -> int:
    """Map an offset in ``normalize(original)`` back to *original*.

    Both strings are walked in lockstep. Where they disagree on a whitespace
    run, the original pointer consumes its whole run and the normalized
    pointer consumes the collapsed counterpart. If the target offset falls
    inside a collapsed run, the result lands at the same distance from the
    end of the original run.
    """
    orig = 0
    norm = 0
    while norm < normalized_index and orig < len(original):
        oc = original[orig]
        nc = normalized[norm] if norm < len(normalized) else ""

        if oc == nc:
            orig += 1
            norm += 1
        elif oc.isspace():
            orig_end = _run_end(original, orig)
            norm_end = _run_end(normalized, norm)
            if norm_end > normalized_index:
                return max(orig, orig_end - (norm_end - normalized_index))
            orig = orig_end
            norm = norm_end
        else:
            # Normalization only touches whitespace; keep walking regardless
            orig += 1
            norm += 1

    return orig
