"""HTTP Proxy Service wire protocol."""

from .chunking import ChunkAssembler, ChunkCursor, ChunkPager, cursor_value, select_chunk
from .commands import (
    DEFAULT_ATT_MTU,
    HEADERS_BODY_CHUNK_INDEX_UUID,
    HEADERS_BODY_CHUNK_SIZES_UUID,
    HTTP_CONTROL_POINT_UUID,
    HTTP_ENTITY_BODY_UUID,
    HTTP_HEADERS_UUID,
    HTTP_STATUS_CODE_UUID,
    HTTP_URI_UUID,
    HTTPS_SECURITY_UUID,
    MTU_OVERHEAD,
    SECURITY_NONE,
    SECURITY_VERIFIED,
    SERVICE_UUID,
    build_cancel_command,
    build_chunk_index_command,
    build_request_command,
    uuid16_to_uuid128,
)
from .headers import parse_header_block, serialize_headers
from .responses import is_status_published, parse_chunk_sizes, parse_status_code

__all__ = [
    "SERVICE_UUID",
    "HTTP_URI_UUID",
    "HTTP_HEADERS_UUID",
    "HTTP_STATUS_CODE_UUID",
    "HTTP_ENTITY_BODY_UUID",
    "HTTP_CONTROL_POINT_UUID",
    "HTTPS_SECURITY_UUID",
    "HEADERS_BODY_CHUNK_INDEX_UUID",
    "HEADERS_BODY_CHUNK_SIZES_UUID",
    "MTU_OVERHEAD",
    "DEFAULT_ATT_MTU",
    "SECURITY_NONE",
    "SECURITY_VERIFIED",
    "uuid16_to_uuid128",
    "build_request_command",
    "build_cancel_command",
    "build_chunk_index_command",
    "ChunkAssembler",
    "ChunkCursor",
    "ChunkPager",
    "cursor_value",
    "select_chunk",
    "parse_header_block",
    "serialize_headers",
    "parse_status_code",
    "parse_chunk_sizes",
    "is_status_published",
]
