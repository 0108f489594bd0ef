"""Stream protocol driver: one request/response cycle with the engine.

Flow:
    tokens → writer task ──(frames)──→ engine stdin
                  │
                  └─ WRITE_DONE ─┐
                                 ▼
    engine stdout → reader task → bounded channel → driver state machine → AnalysisBatch

The writer and reader run as separate threads so a large request cannot
deadlock against an engine that starts answering before it has read the
whole input. The driver finishes only after the writer reported
completion and the expected number of response lines arrived.

There is no cancellation: a caller that needs a deadline must put it on
the underlying stream. A driver allows one in-flight request at a time.

A stream is unusable after any FAILED request: unread response lines may
still be queued on it and an abandoned reader thread may still be blocked
in readline. Restart the engine (or open a fresh stream) before the next
request; MorphService does this automatically.
"""

import logging
import os
import queue
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

from domain.model.analysis import AnalysisBatch, WordResult
from domain.model.errors import ProtocolFramingError, StreamError
from domain.model.grammeme_table import DEFAULT_GRAMMEME_TABLE, GrammemeTable
from port.stream import DuplexStreamPort, ResponseFormat
from utils.analysis_decoder import DEFAULT_MALFORMED_POLICY, MalformedPolicy, decode_word_line
from utils.framing import frame_units, split_tokens
from utils.mystem_json import decode_json_line

logger = logging.getLogger(__name__)

CHANNEL_SIZE = int(os.getenv('MYSTEM_CHANNEL_SIZE', '64'))
_PUT_POLL_SECONDS = 0.1
_ABANDON_JOIN_SECONDS = 0.5


class DriverState(str, Enum):
    """Lifecycle of a single request."""
    IDLE = 'idle'
    SENDING = 'sending'
    AWAITING = 'awaiting'
    COLLECTING = 'collecting'
    COMPLETE = 'complete'
    FAILED = 'failed'


class _EventKind(str, Enum):
    WRITE_DONE = 'write_done'
    WRITE_FAILED = 'write_failed'
    LINE = 'line'
    EOF = 'eof'
    READ_FAILED = 'read_failed'


@dataclass(frozen=True)
class _Event:
    kind: _EventKind
    payload: Any = None


class StreamProtocolDriver:
    """Drives the line protocol over a DuplexStreamPort.

    Text output yields exactly one response line per submitted token, so
    the batch is positionally aligned with the tokens. With JSON output
    each line answers one submitted unit and may expand to several words.
    """

    def __init__(
        self,
        stream: DuplexStreamPort,
        *,
        table: GrammemeTable = DEFAULT_GRAMMEME_TABLE,
        policy: MalformedPolicy = DEFAULT_MALFORMED_POLICY,
        response_format: ResponseFormat = ResponseFormat.TEXT,
        channel_size: int = CHANNEL_SIZE,
    ):
        self._stream = stream
        self._table = table
        self._policy = MalformedPolicy(policy)
        self._format = ResponseFormat(response_format)
        self._channel_size = channel_size
        self._busy = threading.Lock()
        self.state = DriverState.IDLE

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def analyze(self, units: str | Sequence[str]) -> AnalysisBatch:
        """Submit text (split into word tokens) or ready tokens; return their analyses.

        Raises:
            StreamError: I/O fault or the stream closed early. ``partial``
                holds the words decoded before the fault.
            ProtocolFramingError: a response line could not be decoded or
                did not answer the token it was correlated with.
            ValueError: a text-format unit holds more than one token.
            RuntimeError: another request is in flight on this driver.
        """
        tokens = self._prepare(units)
        if not tokens:
            return AnalysisBatch()

        if not self._busy.acquire(blocking=False):
            raise RuntimeError("A request is already in flight on this stream")
        try:
            return self._exchange(tokens)
        finally:
            self._busy.release()

    # ------------------------------------------------------------------
    # Request cycle
    # ------------------------------------------------------------------

    def _prepare(self, units: str | Sequence[str]) -> list[str]:
        if isinstance(units, str):
            return split_tokens(units)
        tokens = list(units)
        if self._format is ResponseFormat.TEXT:
            for token in tokens:
                if len(token.split()) != 1:
                    raise ValueError(f"Text-format units must be single tokens, got {token!r}")
        return tokens

    def _exchange(self, tokens: list[str]) -> AnalysisBatch:
        channel: queue.Queue[_Event] = queue.Queue(maxsize=self._channel_size)
        stop = threading.Event()
        expected = len(tokens)
        words: list[WordResult] = []

        self._transition(DriverState.SENDING, tokens=expected)
        writer = threading.Thread(
            target=self._write_all, args=(frame_units(tokens), channel, stop),
            name='mystem-writer', daemon=True,
        )
        reader = threading.Thread(
            target=self._read_lines, args=(expected, channel, stop),
            name='mystem-reader', daemon=True,
        )
        writer.start()
        reader.start()

        write_done = False
        received = 0
        try:
            while not (write_done and received == expected):
                event = channel.get()
                if event.kind is _EventKind.WRITE_DONE:
                    write_done = True
                    if self.state is DriverState.SENDING:
                        self._transition(DriverState.AWAITING)
                elif event.kind is _EventKind.LINE:
                    if self.state is not DriverState.COLLECTING:
                        self._transition(DriverState.COLLECTING)
                    words.extend(self._decode(event.payload, tokens[received]))
                    received += 1
                elif event.kind is _EventKind.EOF:
                    raise StreamError(f"Stream closed after {received} of {expected} response lines")
                elif event.kind is _EventKind.WRITE_FAILED:
                    raise StreamError("Failed to write request") from event.payload
                elif event.kind is _EventKind.READ_FAILED:
                    raise StreamError("Failed to read response") from event.payload
        except (StreamError, ProtocolFramingError) as e:
            stop.set()
            # A reader blocked in readline is released only by closing the stream
            writer.join(_ABANDON_JOIN_SECONDS)
            reader.join(_ABANDON_JOIN_SECONDS)
            e.partial = AnalysisBatch(tuple(words))
            self._transition(DriverState.FAILED, error=str(e), decoded=len(words))
            logger.warning(
                "Analysis request failed",
                extra={"error": str(e), "error_type": type(e).__name__, "decoded": len(words), "expected": expected},
            )
            raise

        writer.join()
        reader.join()
        self._transition(DriverState.COMPLETE, words=len(words))
        return AnalysisBatch(tuple(words))

    def _decode(self, line: str, token: str) -> list[WordResult]:
        if self._format is ResponseFormat.JSON:
            results = decode_json_line(line, self._table, self._policy)
            if not results:
                raise ProtocolFramingError("Response line holds no tokens", raw_line=line.rstrip('\r\n'))
            # Compare the leading word only: the engine may split punctuation and numbers differently
            sent = split_tokens(token)[:1]
            answered = [word.text for word in results if split_tokens(word.text)][:1]
            if sent and answered != sent:
                raise ProtocolFramingError(
                    f"Response out of sync with submitted unit {token!r}",
                    raw_line=line.rstrip('\r\n'), offset=0,
                )
            return results

        result = decode_word_line(line, self._table, self._policy)
        if result.text != token:
            raise ProtocolFramingError(
                f"Response does not match submitted token {token!r}",
                raw_line=line.rstrip('\r\n'), offset=0,
            )
        return [result]

    def _transition(self, state: DriverState, **context: Any) -> None:
        logger.debug(
            "Driver state change",
            extra={"from_state": self.state.value, "to_state": state.value, **context},
        )
        self.state = state

    # ------------------------------------------------------------------
    # Writer / reader tasks
    # ------------------------------------------------------------------

    def _write_all(self, frames: list[str], channel: queue.Queue, stop: threading.Event) -> None:
        try:
            for frame in frames:
                if stop.is_set():
                    return
                self._stream.write(frame)
            self._stream.flush()
        except (OSError, ValueError) as e:
            # ValueError: write to a closed file object
            _offer(channel, _Event(_EventKind.WRITE_FAILED, e), stop)
            return
        _offer(channel, _Event(_EventKind.WRITE_DONE), stop)

    def _read_lines(self, expected: int, channel: queue.Queue, stop: threading.Event) -> None:
        received = 0
        while received < expected and not stop.is_set():
            try:
                line = self._stream.readline()
            except (OSError, ValueError) as e:
                _offer(channel, _Event(_EventKind.READ_FAILED, e), stop)
                return
            if not line:
                _offer(channel, _Event(_EventKind.EOF), stop)
                return
            if not line.strip():
                logger.debug("Skipping blank response line")
                continue
            received += 1
            if not _offer(channel, _Event(_EventKind.LINE, line), stop):
                return


def _offer(channel: queue.Queue, event: _Event, stop: threading.Event) -> bool:
    """Put ``event`` on the bounded channel unless the request was abandoned."""
    while not stop.is_set():
        try:
            channel.put(event, timeout=_PUT_POLL_SECONDS)
            return True
        except queue.Full:
            continue
    return False
