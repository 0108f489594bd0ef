"""In-memory implementation of EnginePort for testing."""

import threading
from collections import deque
from typing import Callable


class FakeDuplexStream:
    """Fake engine stream.

    Response lines come either from a preloaded script (``lines``) or from
    ``responder``, which is called with every complete request line and
    returns the lines to emit for it. When the script runs out, readline
    reports end-of-stream. ``restarts`` holds the scripts used after each
    ``restart()`` call.
    """

    def __init__(
        self,
        lines: list[str] | None = None,
        *,
        responder: Callable[[str], list[str]] | None = None,
        restarts: list[list[str]] | None = None,
        write_error: Exception | None = None,
        read_error: Exception | None = None,
        wait_timeout: float = 2.0,
    ):
        self._lines: deque[str] = deque(lines or [])
        self._responder = responder
        self._restarts: deque[list[str]] = deque(restarts or [])
        self._pending = ''
        self._cond = threading.Condition()
        self._closed = False
        self.write_error = write_error
        self.read_error = read_error
        self.wait_timeout = wait_timeout
        self.written: list[str] = []
        self.alive = True
        self.restart_count = 0
        self.terminated = False

    # ── DuplexStreamPort ──────────────────────────────────────

    def write(self, data: str) -> None:
        if self.write_error is not None:
            raise self.write_error
        with self._cond:
            self.written.append(data)
            if self._responder is None:
                return
            self._pending += data
            while '\n' in self._pending:
                request, self._pending = self._pending.split('\n', 1)
                self._lines.extend(self._responder(request))
            self._cond.notify_all()

    def flush(self) -> None:
        pass

    def readline(self) -> str:
        if self.read_error is not None:
            raise self.read_error
        with self._cond:
            if self._responder is not None:
                self._cond.wait_for(lambda: self._lines or self._closed, timeout=self.wait_timeout)
            if self._lines:
                line = self._lines.popleft()
                return line if line.endswith('\n') else line + '\n'
            return ''

    # ── EnginePort ────────────────────────────────────────────

    def is_alive(self) -> bool:
        return self.alive

    def restart(self) -> None:
        with self._cond:
            self.restart_count += 1
            self._lines = deque(self._restarts.popleft() if self._restarts else [])
            self._pending = ''
            self._closed = False
            self.alive = True
            self.read_error = None
            self.write_error = None

    def terminate(self) -> None:
        self.terminated = True
        self.close()

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self.alive = False
            self._cond.notify_all()

    @property
    def requests(self) -> list[str]:
        """Request lines written so far, without terminators."""
        return ''.join(self.written).splitlines()
