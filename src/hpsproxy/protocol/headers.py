"""Header block encoding used by the HTTP Headers characteristic."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from ..models.http import Header

_LOGGER = logging.getLogger(__name__)

LINE_SEPARATOR = "\r\n"


def parse_header_block(data: bytes) -> list[Header]:
    """Parse a stored header block into (name, value) pairs.

    Lines are separated by CRLF and split on the first colon; both sides are
    trimmed. Lines without a colon or with an empty name are skipped.

    Args:
        data: Raw HTTP Headers value

    Returns:
        Header pairs in block order

    Raises:
        UnicodeDecodeError: If the block is not valid UTF-8
    """
    headers: list[Header] = []
    for line in data.decode("utf-8").split(LINE_SEPARATOR):
        name, sep, value = line.partition(":")
        name = name.strip()
        if not sep or not name:
            if line.strip():
                _LOGGER.debug("Skipping malformed header line %r", line)
            continue
        headers.append((name, value.strip()))
    return headers


def serialize_headers(headers: Mapping[str, str] | Iterable[Header]) -> bytes:
    """Serialize headers as ``"Name: Value\\r\\n"`` lines.

    Values decoded by the HTTP client with surrogate escapes are restored to
    their original bytes.
    """
    items = headers.items() if isinstance(headers, Mapping) else headers
    block = "".join(f"{name}: {value}{LINE_SEPARATOR}" for name, value in items)
    return block.encode("utf-8", "surrogateescape")
