"""mystem process adapter.

Implements EnginePort by keeping one mystem process running and talking
to it over its stdin/stdout pipes. All subprocess handling is confined to
this adapter; the protocol driver only sees text lines.
"""

import logging
import os
import shlex
import subprocess

from domain.model.errors import EngineUnavailableError
from port.stream import ResponseFormat

logger = logging.getLogger(__name__)

MYSTEM_BIN = os.getenv('MYSTEM_BIN', 'mystem')
# -n: one word per line, -i: grammemes, --weight: lemma weights
MYSTEM_ARGS = shlex.split(os.getenv('MYSTEM_ARGS', '-n -i --weight'))

_JSON_FLAGS = ['--format', 'json']


class MystemProcessAdapter:
    """Adapter that runs mystem as a persistent subprocess.

    The process is started lazily on first use and reused across requests.
    An exited process is not restarted implicitly; callers check
    ``is_alive()`` and call ``restart()``.
    """

    def __init__(
        self,
        binary: str | None = None,
        args: list[str] | None = None,
        *,
        response_format: ResponseFormat = ResponseFormat.TEXT,
    ):
        self.binary = binary or MYSTEM_BIN
        self.args = list(MYSTEM_ARGS if args is None else args)
        if ResponseFormat(response_format) is ResponseFormat.JSON and '--format' not in self.args:
            self.args += _JSON_FLAGS
        self._process: subprocess.Popen | None = None

    @property
    def command(self) -> list[str]:
        return [self.binary, *self.args]

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process else None

    # ------------------------------------------------------------------
    # Process management
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Spawn the mystem process.

        Raises:
            EngineUnavailableError: the executable is missing or not runnable.
        """
        try:
            self._process = subprocess.Popen(
                self.command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                encoding='utf-8',
                bufsize=1,
            )
        except OSError as e:
            logger.error(
                "Failed to start mystem",
                extra={"command": self.command, "error": str(e)},
            )
            raise EngineUnavailableError(f"Cannot start {self.binary!r}: {e}") from e
        logger.info("mystem started", extra={"pid": self._process.pid, "command": self.command})

    def is_alive(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def restart(self) -> None:
        if self._process is not None:
            logger.warning(
                "Restarting mystem",
                extra={"pid": self._process.pid, "returncode": self._process.poll()},
            )
            self.terminate()
        self.start()

    def terminate(self) -> None:
        process, self._process = self._process, None
        if process is None:
            return
        for pipe in (process.stdin, process.stdout):
            if pipe is not None:
                try:
                    pipe.close()
                except OSError:
                    logger.debug("Pipe already closed", extra={"pid": process.pid})
        if process.poll() is None:
            process.terminate()
            try:
                process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait()

    def close_input(self) -> None:
        """Close mystem's stdin so it flushes and exits."""
        if self._process is not None and self._process.stdin is not None:
            self._process.stdin.close()

    # ------------------------------------------------------------------
    # DuplexStreamPort
    # ------------------------------------------------------------------

    def write(self, data: str) -> None:
        self._require().stdin.write(data)

    def flush(self) -> None:
        self._require().stdin.flush()

    def readline(self) -> str:
        return self._require().stdout.readline()

    def _require(self) -> subprocess.Popen:
        if self._process is None:
            self.start()
        return self._process

    def __enter__(self) -> 'MystemProcessAdapter':
        if self._process is None:
            self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.terminate()
