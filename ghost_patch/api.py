"""
Programmatic API — turn a finished model response into navigable suggestions.

Example usage::

    from ghost_patch import SuggestionContext, StringDocument, build_suggestions

    doc = StringDocument(source, uri="file:///src/app.ts")
    result = build_suggestions(response_text, SuggestionContext(document=doc))
    if result.has_suggestions():
        group = result.primary_file.selected_group
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .config import Config
from .errors import DocumentRequiredError
from .editing.change_parser import ChangeBlockParser, ParsedResponse, ResponseFormat
from .editing.document import Range, TextDocument
from .editing.hunk_differ import compute_hunks
from .editing.locator import FuzzyLocator
from .editing.metrics import log_suggestion_metric
from .editing.operations import build_operations
from .editing.patch_applier import ApplyResult, PatchApplier
from .editing.streaming import StreamingResponseParser
from .editing.suggestions import SuggestionFile, SuggestionStore

logger = logging.getLogger(__name__)


@dataclass
class SuggestionContext:
    """Everything one suggestion cycle needs, passed explicitly per call."""
    document: Optional[TextDocument]
    selection: Optional[Range] = None
    config: Config = field(default_factory=Config)


@dataclass
class SuggestionResult:
    """Structured result returned by :func:`build_suggestions`."""
    store: SuggestionStore
    parsed: ParsedResponse
    apply_result: Optional[ApplyResult] = None
    original_content: str = ""
    modified_content: str = ""

    def has_suggestions(self) -> bool:
        return self.store.has_suggestions()

    @property
    def primary_file(self) -> Optional[SuggestionFile]:
        return self.store.primary_file


def build_suggestions(response_text: str, context: SuggestionContext) -> SuggestionResult:
    """Parse, locate, apply, diff and group one finished response.

    Args:
        response_text: The complete model response.
        context: Document, optional host selection and configuration.

    Returns:
        A :class:`SuggestionResult`. Unrecognized responses and edits that
        cannot be located produce fewer (or no) suggestions, never an error.

    Raises:
        DocumentRequiredError: if ``context.document`` is None.
    """
    parsed = ChangeBlockParser().parse(response_text)
    return build_suggestions_from_parsed(parsed, context)


def finish_stream(stream: StreamingResponseParser, context: SuggestionContext) -> SuggestionResult:
    """Finish an accumulated stream and build suggestions from it."""
    return build_suggestions_from_parsed(stream.finish(), context)


def build_suggestions_from_parsed(
    parsed: ParsedResponse,
    context: SuggestionContext,
) -> SuggestionResult:
    document = context.document
    if document is None:
        raise DocumentRequiredError("A document is required to build suggestions")

    config = context.config
    store = SuggestionStore(group_max_gap=config.GROUP_MAX_GAP)
    current = document.get_text()
    modified = current
    apply_result: Optional[ApplyResult] = None

    if parsed.format is ResponseFormat.SEARCH_REPLACE:
        applier = PatchApplier(FuzzyLocator.from_config(config))
        apply_result = applier.apply(current, parsed.changes)
        modified = apply_result.content
    elif parsed.format is ResponseFormat.FULL_BLOCK and parsed.full_content is not None:
        modified = parsed.full_content
        if (config.PRESERVE_TRAILING_NEWLINE
                and current.endswith("\n") and not modified.endswith("\n")):
            modified += "\n"

    if modified != current:
        hunks = compute_hunks(current, modified, config.DIFF_CONTEXT_LINES)
        store.add_file(document.uri).add_operations(build_operations(hunks))

    store.finalize()
    if context.selection is not None:
        for suggestion_file in store.files:
            suggestion_file.select_closest_group(context.selection)

    result = SuggestionResult(
        store=store,
        parsed=parsed,
        apply_result=apply_result,
        original_content=current,
        modified_content=modified,
    )

    primary = store.primary_file
    logger.info(
        "[Suggest] %s: %d change(s) parsed, %d applied, %d group(s) for %s",
        parsed.format.value,
        len(parsed.changes),
        len(apply_result.applied) if apply_result else int(modified != current),
        len(primary.groups) if primary else 0,
        document.uri,
    )

    if config.METRICS_ENABLED:
        log_suggestion_metric(_metric_entry(result), metrics_dir=config.METRICS_DIR)

    return result


def _metric_entry(result: SuggestionResult) -> dict:
    apply_result = result.apply_result
    primary = result.primary_file
    return {
        "format": result.parsed.format.value,
        "changes_parsed": len(result.parsed.changes),
        "changes_applied": len(apply_result.applied) if apply_result else 0,
        "changes_dropped": len(apply_result.dropped) if apply_result else 0,
        "strategies": [c.strategy for c in apply_result.applied] if apply_result else [],
        "operations": len(primary.operations) if primary else 0,
        "groups": len(primary.groups) if primary else 0,
    }
