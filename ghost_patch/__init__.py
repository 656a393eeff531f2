"""ghost_patch — turn LLM edit responses into grouped, navigable suggestions."""

from .api import (
    SuggestionContext, SuggestionResult, build_suggestions, build_suggestions_from_parsed,
    finish_stream,
)
from .config import Config, DEFAULT_GROUP_MAX_GAP
from .errors import (
    GhostError, DocumentRequiredError, StreamStateError, ConfigError, BenchmarkCaseError,
)
from .editing.document import Position, Range, StringDocument, TextDocument
from .editing.streaming import StreamingResponseParser

__version__ = "0.1.0"

__all__ = [
    "SuggestionContext", "SuggestionResult", "build_suggestions",
    "build_suggestions_from_parsed", "finish_stream",
    "Config", "DEFAULT_GROUP_MAX_GAP",
    "GhostError", "DocumentRequiredError", "StreamStateError", "ConfigError",
    "BenchmarkCaseError",
    "Position", "Range", "StringDocument", "TextDocument",
    "StreamingResponseParser",
]
