"""
Error hierarchy for programming-contract violations.

Data-shaped failures (unparsable responses, search text not found,
overlapping edits) are never raised; they come back as result fields.
Only misuse of the API raises one of these.
"""

from __future__ import annotations

from datetime import datetime, timezone


class GhostError(Exception):
    """Base class for all ghost_patch errors."""

    code = "GHOST_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.timestamp = datetime.now(timezone.utc)

    def details(self) -> dict:
        """Return a dict suitable for structured logging."""
        return {
            "name": type(self).__name__,
            "code": self.code,
            "message": str(self),
            "timestamp": self.timestamp.isoformat(),
        }


class DocumentRequiredError(GhostError):
    """Raised when an operation needs a document and none was given."""

    code = "GHOST_CONTEXT_ERROR"


class StreamStateError(GhostError):
    """Raised when the streaming accumulator is used out of order."""

    code = "GHOST_STREAM_STATE_ERROR"

    def __init__(self, message: str, state: str | None = None) -> None:
        super().__init__(message)
        self.state = state

    def details(self) -> dict:
        data = super().details()
        data["state"] = self.state
        return data


class ConfigError(GhostError):
    """Raised for invalid configuration values."""

    code = "GHOST_CONFIG_ERROR"

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key

    def details(self) -> dict:
        data = super().details()
        data["key"] = self.key
        return data


class BenchmarkCaseError(GhostError):
    """Raised when a benchmark case directory is malformed."""

    code = "GHOST_BENCH_ERROR"
