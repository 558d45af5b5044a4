"""MTU-sized paging of the HTTP Headers and HTTP Entity Body values."""

from __future__ import annotations

import logging
from enum import IntEnum

from ..exceptions import ProtocolError
from ..models.status import ChunkIndex

_LOGGER = logging.getLogger(__name__)


class ChunkCursor(IntEnum):
    """Which cursor of the Headers/Body Chunk Index a value is paged with."""
    HEADERS = 0
    BODY = 1


def cursor_value(chunk_index: bytes, cursor: ChunkCursor) -> int:
    """Read one cursor from a stored chunk index (missing bytes read as 0)."""
    index = ChunkIndex.from_bytes(chunk_index)
    return index.headers if cursor == ChunkCursor.HEADERS else index.body


def select_chunk(value: bytes, mtu: int, index: int) -> bytes:
    """Return the slice of ``value`` served for chunk ``index``.

    Values that fit in one read are returned whole whatever the index. An
    index past the end does not fail: the start is pulled back to
    ``len - (index - 1) * mtu`` and never below zero.

    Args:
        value: Full characteristic value
        mtu: Effective MTU (payload bytes per read)
        index: Client-written chunk cursor

    Returns:
        Bytes to answer the read with
    """
    total_len = len(value)
    if total_len <= mtu:
        return value

    start = index * mtu
    if start >= total_len:
        start = max(0, total_len - (index - 1) * mtu)
    end = min((index + 1) * mtu, total_len)
    return value[start:end]


class ChunkPager:
    """Serves paged reads of one buffer using one chunk index cursor."""

    def __init__(self, cursor: ChunkCursor):
        self.cursor = cursor

    def page(self, value: bytes, chunk_index: bytes, mtu: int) -> bytes:
        """Slice ``value`` according to the stored ``chunk_index``.

        Never mutates the chunk index; advancing it is up to the client.
        """
        if len(value) <= mtu:
            return value

        index = cursor_value(chunk_index, self.cursor)
        chunk = select_chunk(value, mtu, index)
        _LOGGER.debug(
            "Paged %s read: index=%d mtu=%d total=%d returned=%d",
            self.cursor.name.lower(),
            index,
            mtu,
            len(value),
            len(chunk),
        )
        return chunk


class ChunkAssembler:
    """Reassembles a paged value read from an HPS peripheral.

    The peripheral publishes the total length and the MTU it paged with in
    Headers/Body Chunk Sizes; every page but the last is exactly ``mtu``
    bytes long.
    """

    def __init__(self, total_length: int, mtu: int):
        """Initialize chunk assembler.

        Args:
            total_length: Total value length from Headers/Body Chunk Sizes
            mtu: Effective MTU the peripheral pages with
        """
        if mtu <= 0:
            raise ProtocolError(f"Invalid MTU for paging: {mtu}")
        self.total_length = total_length
        self.mtu = mtu
        self.chunks: dict[int, bytes] = {}
        self.complete = False

    @property
    def total_chunks(self) -> int:
        """Number of reads needed to fetch the whole value."""
        if self.total_length <= self.mtu:
            return 1
        return -(-self.total_length // self.mtu)

    def expected_length(self, index: int) -> int:
        """Length the page at ``index`` must have."""
        if self.total_chunks == 1:
            return self.total_length
        if index < self.total_chunks - 1:
            return self.mtu
        return self.total_length - self.mtu * (self.total_chunks - 1)

    def add_chunk(self, index: int, data: bytes) -> bool:
        """Add one page to the assembly.

        Args:
            index: Chunk index the page was read at
            data: Value returned by the read

        Returns:
            True if all pages received and assembly complete

        Raises:
            ProtocolError: If the index is out of range or the page has the wrong size
        """
        if not 0 <= index < self.total_chunks:
            raise ProtocolError(
                f"Chunk index {index} out of range (have {self.total_chunks} chunks)"
            )

        expected = self.expected_length(index)
        if len(data) != expected:
            raise ProtocolError(
                f"Chunk {index} has {len(data)} bytes, expected {expected}"
            )

        self.chunks[index] = bytes(data)

        if len(self.chunks) == self.total_chunks:
            self.complete = True
            return True

        return False

    def get_assembled_data(self) -> bytes:
        """Get assembled data from all pages.

        Raises:
            ProtocolError: If assembly not complete
        """
        if not self.complete:
            raise ProtocolError(
                f"Assembly incomplete: have {len(self.chunks)}/{self.total_chunks} chunks"
            )

        return b"".join(self.chunks[index] for index in sorted(self.chunks))

    @property
    def is_complete(self) -> bool:
        """Check if all pages received."""
        return self.complete

    @property
    def chunks_received(self) -> int:
        """Get number of pages received."""
        return len(self.chunks)
