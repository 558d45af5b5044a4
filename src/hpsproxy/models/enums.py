from __future__ import annotations

from enum import Enum, IntEnum, IntFlag
from typing import Final


class ControlOption(IntEnum):
    """HTTP Control Point opcodes."""
    INVALID = 0
    GET = 1
    HEAD = 2
    POST = 3
    PUT = 4
    DELETE = 5
    SECURE_GET = 6
    SECURE_HEAD = 7
    SECURE_POST = 8
    SECURE_PUT = 9
    SECURE_DELETE = 10
    CANCEL = 11


class HttpMethod(str, Enum):
    """HTTP methods the control point can issue."""
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class Scheme(str, Enum):
    """URL scheme prepended to the stored URI."""
    PLAIN = "http"
    SECURE = "https"


class DataStatusBit(IntFlag):
    """Data status flags carried in the third byte of HTTP Status Code.

    The truncation flags are advisory: the proxy keeps the full response and
    only signals that the value does not fit into a single read.
    """
    NONE = 0
    HEADERS_RECEIVED = 0x01
    HEADERS_TRUNCATED = 0x02
    BODY_RECEIVED = 0x04
    BODY_TRUNCATED = 0x08


REQUEST_OPTIONS: Final[dict[ControlOption, tuple[HttpMethod, Scheme]]] = {
    ControlOption.GET: (HttpMethod.GET, Scheme.PLAIN),
    ControlOption.HEAD: (HttpMethod.HEAD, Scheme.PLAIN),
    ControlOption.POST: (HttpMethod.POST, Scheme.PLAIN),
    ControlOption.PUT: (HttpMethod.PUT, Scheme.PLAIN),
    ControlOption.DELETE: (HttpMethod.DELETE, Scheme.PLAIN),
    ControlOption.SECURE_GET: (HttpMethod.GET, Scheme.SECURE),
    ControlOption.SECURE_HEAD: (HttpMethod.HEAD, Scheme.SECURE),
    ControlOption.SECURE_POST: (HttpMethod.POST, Scheme.SECURE),
    ControlOption.SECURE_PUT: (HttpMethod.PUT, Scheme.SECURE),
    ControlOption.SECURE_DELETE: (HttpMethod.DELETE, Scheme.SECURE),
}


def get_control_option(method: HttpMethod | str, scheme: Scheme | str) -> ControlOption:
    """Get the control point opcode for a method/scheme pair.

    Raises:
        ValueError: If the method or scheme is not supported
    """
    pair = (HttpMethod(method), Scheme(scheme))
    for option, candidate in REQUEST_OPTIONS.items():
        if candidate == pair:
            return option
    raise ValueError(f"No control option for {pair[0].value} over {pair[1].value}")
