"""Data models for the HTTP Proxy Service."""

from .command import CommandKind, ControlCommand, decode_control_command
from .config import ServerConfig
from .enums import (
    ControlOption,
    DataStatusBit,
    HttpMethod,
    Scheme,
    get_control_option,
)
from .http import Header, HttpRequest, HttpResponse
from .result import DispatchOutcome, DispatchResult
from .status import ChunkIndex, ChunkSizes, StatusCode

__all__ = [
    "ChunkIndex",
    "ChunkSizes",
    "CommandKind",
    "ControlCommand",
    "ControlOption",
    "DataStatusBit",
    "DispatchOutcome",
    "DispatchResult",
    "Header",
    "HttpMethod",
    "HttpRequest",
    "HttpResponse",
    "Scheme",
    "ServerConfig",
    "StatusCode",
    "decode_control_command",
    "get_control_option",
]
