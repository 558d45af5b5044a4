"""Validation and parsing of values read from an HPS peripheral."""

from __future__ import annotations

from ..exceptions import InvalidResponseError
from ..models.status import ChunkSizes, StatusCode


def parse_status_code(data: bytes) -> StatusCode:
    """Parse an HTTP Status Code read or notification.

    Format: [status:2 LE][data_status:1]

    Args:
        data: Raw characteristic value

    Returns:
        Parsed StatusCode

    Raises:
        InvalidResponseError: If the value is not exactly 3 bytes
    """
    if len(data) != 3:
        raise InvalidResponseError(
            f"Status code must be 3 bytes, got {len(data)}: {bytes(data).hex()}"
        )
    return StatusCode.from_bytes(bytes(data))


def parse_chunk_sizes(data: bytes) -> ChunkSizes:
    """Parse a Headers/Body Chunk Sizes read.

    Format: [headers_length:4 LE][body_length:4 LE][mtu:4 LE]

    Raises:
        InvalidResponseError: If the value is not exactly 12 bytes or the MTU is zero
    """
    if len(data) != ChunkSizes.SIZE:
        raise InvalidResponseError(
            f"Chunk sizes must be {ChunkSizes.SIZE} bytes, got {len(data)}"
        )
    sizes = ChunkSizes.from_bytes(bytes(data))
    if sizes.mtu == 0:
        raise InvalidResponseError("Chunk sizes report an MTU of 0")
    return sizes


def is_status_published(data: bytes) -> bool:
    """Check whether the peripheral has completed at least one request.

    The status value stays empty until the first completed dispatch.
    """
    return len(data) == 3
