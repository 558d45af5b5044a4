"""Startup configuration for the proxy peripheral."""

from __future__ import annotations

from dataclasses import dataclass

from ..protocol.commands import DEFAULT_ATT_MTU, MTU_OVERHEAD


@dataclass(frozen=True)
class ServerConfig:
    """Settings consumed by the proxy at startup.

    Attributes:
        name: Local name put in the LE advertisement
        timeout: Outbound HTTP request timeout in seconds
        mtu: Effective MTU override in bytes (0 = use negotiated MTU)
        adapter: BlueZ adapter name
    """

    name: str = "HPS-Proxy"
    timeout: float = 60.0
    mtu: int = 0
    adapter: str = "hci0"

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("name must not be empty")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.mtu < 0:
            raise ValueError(f"mtu must not be negative, got {self.mtu}")

    def effective_mtu(self, negotiated_mtu: int | None) -> int:
        """Resolve the payload size usable for one characteristic read.

        The override wins only when it is smaller than the negotiated MTU;
        otherwise the ATT header overhead is subtracted from the negotiated
        value.
        """
        if not negotiated_mtu or negotiated_mtu <= MTU_OVERHEAD:
            negotiated_mtu = DEFAULT_ATT_MTU
        if 0 < self.mtu < negotiated_mtu:
            return self.mtu
        return negotiated_mtu - MTU_OVERHEAD
