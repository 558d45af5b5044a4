"""Fixed-layout values published by the proxy: status code, chunk index, chunk sizes."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from .enums import DataStatusBit

_U16_MAX = 0xFFFF
_U32_MAX = 0xFFFFFFFF


def _check_u32(name: str, value: int) -> None:
    if not 0 <= value <= _U32_MAX:
        raise ValueError(f"{name} out of range: {value} (must fit in 32 bits)")


@dataclass(frozen=True, slots=True)
class StatusCode:
    """Value of the HTTP Status Code characteristic.

    Format: [status:2 LE][data_status:1]
    """

    status_code: int
    data_status: DataStatusBit = DataStatusBit.NONE

    def __post_init__(self) -> None:
        if not 0 <= self.status_code <= _U16_MAX:
            raise ValueError(
                f"status_code out of range: {self.status_code} (must be 0-65535)"
            )

    @classmethod
    def for_response(
        cls,
        status_code: int,
        headers_length: int,
        body_length: int,
        mtu: int,
    ) -> StatusCode:
        """Build the status for a completed response.

        Headers and body each report RECEIVED when they fit into one read of
        ``mtu`` bytes and TRUNCATED otherwise.
        """
        bits = (
            DataStatusBit.HEADERS_RECEIVED
            if headers_length <= mtu
            else DataStatusBit.HEADERS_TRUNCATED
        )
        bits |= (
            DataStatusBit.BODY_RECEIVED
            if body_length <= mtu
            else DataStatusBit.BODY_TRUNCATED
        )
        return cls(status_code=status_code, data_status=bits)

    @property
    def headers_truncated(self) -> bool:
        return bool(self.data_status & DataStatusBit.HEADERS_TRUNCATED)

    @property
    def body_truncated(self) -> bool:
        return bool(self.data_status & DataStatusBit.BODY_TRUNCATED)

    def to_bytes(self) -> bytes:
        """Serialize to the 3-byte characteristic value."""
        return struct.pack("<HB", self.status_code, int(self.data_status))

    @classmethod
    def from_bytes(cls, data: bytes) -> StatusCode:
        """Parse a 3-byte characteristic value."""
        if len(data) != 3:
            raise ValueError(f"Status code must be exactly 3 bytes, got {len(data)}")
        status_code, bits = struct.unpack("<HB", data)
        return cls(status_code=status_code, data_status=DataStatusBit(bits))


@dataclass(frozen=True, slots=True)
class ChunkIndex:
    """Client-maintained read cursors for the headers and body values.

    Format: [headers:4 LE][body:4 LE]
    """

    headers: int = 0
    body: int = 0

    SIZE = 8

    def __post_init__(self) -> None:
        _check_u32("headers", self.headers)
        _check_u32("body", self.body)

    def to_bytes(self) -> bytes:
        return struct.pack("<II", self.headers, self.body)

    @classmethod
    def from_bytes(cls, data: bytes) -> ChunkIndex:
        """Parse a stored chunk index.

        Never fails: a cursor whose 4 bytes are missing reads as 0.
        """
        headers = struct.unpack_from("<I", data, 0)[0] if len(data) >= 4 else 0
        body = struct.unpack_from("<I", data, 4)[0] if len(data) >= 8 else 0
        return cls(headers=headers, body=body)

    @staticmethod
    def normalize(data: bytes) -> bytes:
        """Pad with zeros or cut ``data`` to exactly 8 bytes."""
        return bytes(data[:ChunkIndex.SIZE]).ljust(ChunkIndex.SIZE, b"\x00")


@dataclass(frozen=True, slots=True)
class ChunkSizes:
    """Paging metadata published after each completed request.

    Format: [headers_length:4 LE][body_length:4 LE][mtu:4 LE]
    """

    headers_length: int
    body_length: int
    mtu: int

    SIZE = 12

    def __post_init__(self) -> None:
        _check_u32("headers_length", self.headers_length)
        _check_u32("body_length", self.body_length)
        _check_u32("mtu", self.mtu)

    def headers_pages(self) -> int:
        """Number of reads needed to fetch the whole headers value."""
        return _page_count(self.headers_length, self.mtu)

    def body_pages(self) -> int:
        """Number of reads needed to fetch the whole body value."""
        return _page_count(self.body_length, self.mtu)

    def to_bytes(self) -> bytes:
        return struct.pack("<III", self.headers_length, self.body_length, self.mtu)

    @classmethod
    def from_bytes(cls, data: bytes) -> ChunkSizes:
        if len(data) != cls.SIZE:
            raise ValueError(f"Chunk sizes must be exactly 12 bytes, got {len(data)}")
        headers_length, body_length, mtu = struct.unpack("<III", data)
        return cls(headers_length=headers_length, body_length=body_length, mtu=mtu)


def _page_count(length: int, mtu: int) -> int:
    if length <= mtu or mtu <= 0:
        return 1
    return -(-length // mtu)
