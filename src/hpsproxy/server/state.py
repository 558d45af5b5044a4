"""Shared request/response buffers of the proxy."""

from __future__ import annotations

import logging
import threading

from ..models.status import ChunkIndex

_LOGGER = logging.getLogger(__name__)


class NamedBuffer:
    """A byte value that is only ever swapped as a whole.

    Every buffer has its own lock, so unrelated characteristics never wait on
    each other. Values are stored as immutable bytes, which makes every read
    a snapshot of one complete prior write.
    """

    def __init__(self, name: str, initial: bytes = b""):
        self.name = name
        self._value = bytes(initial)
        self._lock = threading.Lock()

    def read(self) -> bytes:
        """Get the current value."""
        with self._lock:
            return self._value

    def replace(self, value: bytes) -> None:
        """Atomically replace the whole value."""
        new_value = bytes(value)
        with self._lock:
            self._value = new_value
        _LOGGER.debug("%s <- %d bytes", self.name, len(new_value))

    def __len__(self) -> int:
        with self._lock:
            return len(self._value)

    def __repr__(self) -> str:
        return f"NamedBuffer({self.name!r}, {len(self)} bytes)"


class SessionState:
    """Process-wide request/response slot.

    The headers and body buffers hold the request until a dispatch completes
    and the response afterwards.
    """

    def __init__(self) -> None:
        self.uri = NamedBuffer("http_uri")
        self.headers = NamedBuffer("http_headers")
        self.body = NamedBuffer("http_entity_body")
        self.status_code = NamedBuffer("http_status_code")
        self.security = NamedBuffer("https_security")
        self.chunk_index = NamedBuffer("headers_body_chunk_index", ChunkIndex().to_bytes())
        self.chunk_sizes = NamedBuffer("headers_body_chunk_sizes")

    @property
    def buffers(self) -> tuple[NamedBuffer, ...]:
        return (
            self.uri,
            self.headers,
            self.body,
            self.status_code,
            self.security,
            self.chunk_index,
            self.chunk_sizes,
        )

    def snapshot(self) -> dict[str, bytes]:
        """Get the current value of every buffer, keyed by buffer name."""
        return {buffer.name: buffer.read() for buffer in self.buffers}
