"""Domain-level exceptions.

Decoders raise framing errors for output they cannot parse; the stream
driver raises stream errors for I/O faults. Errors raised from a request
carry the partial AnalysisBatch decoded before the fault so callers can
still use it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from domain.model.analysis import AnalysisBatch


class MorphError(Exception):
    """Base class for all morphology bridge errors."""

    def __init__(self, message: str, *, partial: AnalysisBatch | None = None):
        self.partial = partial
        super().__init__(message)


class StreamError(MorphError):
    """Read or write failure on the duplex stream, or premature end-of-stream."""


class ProtocolFramingError(MorphError):
    """Engine output could not be parsed or did not match the request.

    ``offset`` is the UTF-8 byte offset into ``raw_line`` where parsing
    diverged, when it is known.
    """

    def __init__(
        self,
        message: str,
        *,
        raw_line: str | None = None,
        offset: int | None = None,
        partial: AnalysisBatch | None = None,
    ):
        self.raw_line = raw_line
        self.offset = offset
        super().__init__(message, partial=partial)

    def __str__(self) -> str:
        message = super().__str__()
        if self.raw_line is None:
            return message
        if self.offset is None:
            return f"{message}: {self.raw_line!r}"
        return f"{message} at byte {self.offset}: {self.raw_line!r}"


class MalformedAnalysisError(ProtocolFramingError):
    """A single analysis entry inside a response line could not be decoded."""

    def __init__(self, message: str, *, entry: str, raw_line: str | None = None, offset: int | None = None):
        self.entry = entry
        super().__init__(message, raw_line=raw_line, offset=offset)


class EngineUnavailableError(MorphError):
    """The mystem executable could not be started."""
