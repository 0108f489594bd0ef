"""Morphological analysis service: caller-side policy around the driver.

The driver performs exactly one request/response cycle. This service adds
what a caller needs on top: a dead engine, or one left behind by a failed
request, is restarted before the next request, and a request that fails
with a StreamError is retried on a fresh process. Framing errors are never
retried, since the engine would give the same answer again.
"""

import logging
import os
from typing import Sequence

from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from domain.model.analysis import AnalysisBatch
from domain.model.errors import MorphError, StreamError
from domain.model.grammeme_table import DEFAULT_GRAMMEME_TABLE, GrammemeTable
from port.stream import EnginePort, ResponseFormat
from services.stream_protocol import StreamProtocolDriver
from utils.analysis_decoder import DEFAULT_MALFORMED_POLICY, MalformedPolicy

logger = logging.getLogger(__name__)

RETRY_ATTEMPTS = int(os.getenv('MYSTEM_RETRY_ATTEMPTS', '2'))


class MorphService:
    """Analyzes Russian text with a persistent mystem engine.

    Usage:
        with MorphService() as morph:
            for word in morph.analyze("Связался с лучшим"):
                print(word.text, word.best.lex)
    """

    def __init__(
        self,
        engine: EnginePort | None = None,
        *,
        table: GrammemeTable = DEFAULT_GRAMMEME_TABLE,
        policy: MalformedPolicy = DEFAULT_MALFORMED_POLICY,
        response_format: ResponseFormat = ResponseFormat.TEXT,
        attempts: int = RETRY_ATTEMPTS,
        backoff_max: float = 2.0,
    ):
        if engine is None:
            from adapter.mystem.process import MystemProcessAdapter

            engine = MystemProcessAdapter(response_format=response_format)
        self._engine = engine
        self._driver = StreamProtocolDriver(
            engine, table=table, policy=policy, response_format=response_format,
        )
        self._attempts = max(1, attempts)
        self._backoff_max = backoff_max
        self._needs_restart = False

    def analyze(self, units: str | Sequence[str]) -> AnalysisBatch:
        """Analyze free text or ready tokens; see StreamProtocolDriver.analyze."""
        retrying = Retrying(
            retry=retry_if_exception_type(StreamError),
            stop=stop_after_attempt(self._attempts),
            wait=wait_exponential(multiplier=0.1, max=self._backoff_max),
            before_sleep=self._log_retry,
            reraise=True,
        )
        return retrying(self._analyze_once, units)

    def lemmatize(self, text: str) -> list[tuple[str, str]]:
        """(surface, best lemma) pairs for every word of ``text``."""
        return [(word.text, word.best.lex) for word in self.analyze(text)]

    def close(self) -> None:
        self._engine.terminate()

    def __enter__(self) -> 'MorphService':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------

    def _analyze_once(self, units: str | Sequence[str]) -> AnalysisBatch:
        if self._needs_restart or not self._engine.is_alive():
            self._engine.restart()
            self._needs_restart = False
        try:
            return self._driver.analyze(units)
        except MorphError:
            # Unread response lines may remain on the stream
            self._needs_restart = True
            raise

    def _log_retry(self, retry_state) -> None:
        logger.warning(
            "Retrying analysis on a fresh engine",
            extra={
                "attempt": retry_state.attempt_number,
                "error": str(retry_state.outcome.exception()),
            },
        )
