"""Edit location, application, diffing and grouping for model suggestions."""

from .normalizer import normalize, map_to_original
from .partial_guard import looks_incomplete, is_complete
from .locator import FuzzyLocator, MatchResult, find_best_match
from .change_parser import ChangeBlockParser, ChangeRequest, ParsedResponse, ResponseFormat
from .patch_applier import PatchApplier, ApplyResult, AppliedChange, DroppedChange
from .hunk_differ import DiffHunk, HunkLine, compute_hunks, format_hunks
from .operations import (
    Operation, OperationKind, build_operations, diff_to_operations, apply_operations,
)
from .suggestions import (
    GroupKind, OperationGroup, SuggestionFile, SuggestionStore, group_operations,
)
from .document import Position, Range, TextDocument, TextLine, StringDocument
from .streaming import StreamingResponseParser, StreamState, PartialResult
from .metrics import log_suggestion_metric, read_suggestion_stats

__all__ = [
    "normalize", "map_to_original",
    "looks_incomplete", "is_complete",
    "FuzzyLocator", "MatchResult", "find_best_match",
    "ChangeBlockParser", "ChangeRequest", "ParsedResponse", "ResponseFormat",
    "PatchApplier", "ApplyResult", "AppliedChange", "DroppedChange",
    "DiffHunk", "HunkLine", "compute_hunks", "format_hunks",
    "Operation", "OperationKind", "build_operations", "diff_to_operations",
    "apply_operations",
    "GroupKind", "OperationGroup", "SuggestionFile", "SuggestionStore",
    "group_operations",
    "Position", "Range", "TextDocument", "TextLine", "StringDocument",
    "StreamingResponseParser", "StreamState", "PartialResult",
    "log_suggestion_metric", "read_suggestion_stats",
]
