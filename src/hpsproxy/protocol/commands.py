"""HTTP Proxy Service identifiers and client-side command builders."""

from __future__ import annotations

from ..models.enums import ControlOption, HttpMethod, Scheme, get_control_option
from ..models.status import ChunkIndex

_BASE_UUID = "0000{:04X}-0000-1000-8000-00805F9B34FB"


def uuid16_to_uuid128(short_uuid: int) -> str:
    """Expand a 16-bit SIG-assigned UUID onto the Bluetooth base UUID."""
    return _BASE_UUID.format(short_uuid)


# Service and characteristic UUIDs
SERVICE_UUID = uuid16_to_uuid128(0x1823)
HTTP_URI_UUID = uuid16_to_uuid128(0x2AB6)
HTTP_HEADERS_UUID = uuid16_to_uuid128(0x2AB7)
HTTP_STATUS_CODE_UUID = uuid16_to_uuid128(0x2AB8)
HTTP_ENTITY_BODY_UUID = uuid16_to_uuid128(0x2AB9)
HTTP_CONTROL_POINT_UUID = uuid16_to_uuid128(0x2ABA)
HTTPS_SECURITY_UUID = uuid16_to_uuid128(0x2ABB)
HEADERS_BODY_CHUNK_INDEX_UUID = uuid16_to_uuid128(0x2A9A)
HEADERS_BODY_CHUNK_SIZES_UUID = uuid16_to_uuid128(0x2AC0)

# MTU constants
MTU_OVERHEAD = 3  # ATT opcode (1) + handle (2)
DEFAULT_ATT_MTU = 23  # Used when the stack does not report a negotiated MTU

# HTTPS Security values
SECURITY_VERIFIED = b"\x01"
SECURITY_NONE = b"\x00"


def build_request_command(method: HttpMethod | str, secure: bool = False) -> bytes:
    """Build the control point value that starts a request.

    Args:
        method: HTTP method to issue
        secure: Use https instead of http (default: False)

    Returns:
        Command bytes: [opcode:1]
    """
    scheme = Scheme.SECURE if secure else Scheme.PLAIN
    return bytes([get_control_option(method, scheme)])


def build_cancel_command() -> bytes:
    """Build the control point value that cancels a request."""
    return bytes([ControlOption.CANCEL])


def build_chunk_index_command(headers: int = 0, body: int = 0) -> bytes:
    """Build the 8-byte Headers/Body Chunk Index value.

    Format:
        [headers:4 LE][body:4 LE]
    """
    return ChunkIndex(headers=headers, body=body).to_bytes()
