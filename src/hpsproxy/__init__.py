"""HTTP Proxy Service over Bluetooth Low Energy.

  Serves the Bluetooth HTTP Proxy Service (HPS) from a BlueZ host and drives
  remote HPS peripherals from a BLE central.
  """

from .client import HPSClient
from .exceptions import (
    BLEConnectionError,
    BLETimeoutError,
    HPSError,
    InvalidResponseError,
    PeripheralError,
    ProtocolError,
    TransportError,
)
from .models import (
    ChunkIndex,
    ChunkSizes,
    ControlCommand,
    ControlOption,
    DataStatusBit,
    DispatchOutcome,
    DispatchResult,
    HttpMethod,
    HttpRequest,
    HttpResponse,
    Scheme,
    ServerConfig,
    StatusCode,
    decode_control_command,
)
from .protocol import MTU_OVERHEAD, SERVICE_UUID
from .server import BluezPeripheral, HttpProxyService, SessionState, StatusNotifier
from .transport import AiohttpTransport, HttpTransport

__version__ = "0.1.0"

__all__ = [
    # Main API
    "HttpProxyService",
    "BluezPeripheral",
    "HPSClient",
    "AiohttpTransport",
    "HttpTransport",
    "SessionState",
    "StatusNotifier",
    # Exceptions
    "HPSError",
    "ProtocolError",
    "InvalidResponseError",
    "TransportError",
    "BLEConnectionError",
    "BLETimeoutError",
    "PeripheralError",
    # Models
    "ServerConfig",
    "ControlCommand",
    "DispatchResult",
    "DispatchOutcome",
    "HttpRequest",
    "HttpResponse",
    "StatusCode",
    "ChunkIndex",
    "ChunkSizes",
    # Enums
    "ControlOption",
    "DataStatusBit",
    "HttpMethod",
    "Scheme",
    # Utilities
    "decode_control_command",
    # Constants
    "SERVICE_UUID",
    "MTU_OVERHEAD",
]
