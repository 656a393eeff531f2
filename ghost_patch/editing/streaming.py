"""
Streaming accumulator — collects response chunks until the response is done.

States::

    IDLE --feed--> ACCUMULATING --finish--> COMPLETE
      ^                                        |
      +----------------- reset ----------------+

Progress is reported while accumulating, but edits are only parsed once, in
:meth:`StreamingResponseParser.finish`, so nothing downstream ever sees a
half-built suggestion.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from ..errors import StreamStateError
from .change_parser import ChangeBlockParser, ParsedResponse

logger = logging.getLogger(__name__)

_CHANGE_CLOSE = "</change>"


class StreamState(str, enum.Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"
    COMPLETE = "complete"


@dataclass(frozen=True)
class PartialResult:
    state: StreamState
    buffered_chars: int
    completed_changes: int


class StreamingResponseParser:
    """Explicit state machine around :class:`ChangeBlockParser`."""

    def __init__(self, parser: ChangeBlockParser | None = None) -> None:
        self._parser = parser or ChangeBlockParser()
        self._chunks: list[str] = []
        self._buffered = 0
        self._completed_changes = 0
        self._tail = ""
        self._result: ParsedResponse | None = None
        self.state = StreamState.IDLE

    def feed(self, chunk: str) -> PartialResult:
        """Append a chunk and report progress."""
        if self.state is StreamState.COMPLETE:
            raise StreamStateError(
                "Stream already finished; call reset() before feeding again",
                state=self.state.value,
            )
        self.state = StreamState.ACCUMULATING
        if chunk:
            self._chunks.append(chunk)
            self._buffered += len(chunk)
            # Keep enough of the previous tail to spot a marker split across chunks
            window = self._tail + chunk
            self._completed_changes += window.count(_CHANGE_CLOSE)
            self._tail = window[-(len(_CHANGE_CLOSE) - 1):]
        return self.progress()

    def finish(self) -> ParsedResponse:
        """Parse everything received so far and move to COMPLETE."""
        if self.state is StreamState.COMPLETE and self._result is not None:
            return self._result
        self._result = self._parser.parse("".join(self._chunks))
        self.state = StreamState.COMPLETE
        logger.debug(
            "[Stream] Finished after %d chars: %s",
            self._buffered, self._result.format.value,
        )
        return self._result

    def reset(self) -> None:
        """Drop all buffered text and return to IDLE."""
        self._chunks.clear()
        self._buffered = 0
        self._completed_changes = 0
        self._tail = ""
        self._result = None
        self.state = StreamState.IDLE

    def progress(self) -> PartialResult:
        return PartialResult(
            state=self.state,
            buffered_chars=self._buffered,
            completed_changes=self._completed_changes,
        )

    @property
    def text(self) -> str:
        return "".join(self._chunks)
