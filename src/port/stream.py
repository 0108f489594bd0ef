"""Stream port: outbound interface to the external analyzer's duplex stream."""

from enum import Enum
from typing import Protocol


class ResponseFormat(str, Enum):
    """Output notation the engine was started with."""
    TEXT = 'text'
    JSON = 'json'


class DuplexStreamPort(Protocol):
    """A writable sink and a readable source of UTF-8 text lines.

    Implementations wrap a subprocess pipe pair, a socket, or an in-memory
    buffer; nothing about how the stream was obtained crosses this
    boundary. Both directions may block. ``readline`` returns an empty
    string at end-of-stream and raises OSError on I/O faults.
    """

    def write(self, data: str) -> None: ...
    def flush(self) -> None: ...
    def readline(self) -> str: ...


class EnginePort(DuplexStreamPort, Protocol):
    """A duplex stream backed by a restartable engine process."""

    def is_alive(self) -> bool: ...
    def restart(self) -> None: ...
    def terminate(self) -> None: ...
