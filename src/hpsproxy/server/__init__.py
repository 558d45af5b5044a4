"""HTTP Proxy Service peripheral."""

from .bluez import BluezPeripheral
from .dispatcher import ControlPointDispatcher
from .notifier import StatusNotifier, Subscription
from .service import HttpProxyService
from .state import NamedBuffer, SessionState

__all__ = [
    "BluezPeripheral",
    "ControlPointDispatcher",
    "HttpProxyService",
    "NamedBuffer",
    "SessionState",
    "StatusNotifier",
    "Subscription",
]
