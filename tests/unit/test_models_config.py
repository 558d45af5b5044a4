"""Test server configuration and effective MTU resolution."""

import pytest

from hpsproxy.models.config import ServerConfig


class TestServerConfig:
    """Test ServerConfig defaults and validation."""

    def test_defaults(self):
        """Test default configuration values."""
        config = ServerConfig()
        assert config.name == "HPS-Proxy"
        assert config.timeout == 60.0
        assert config.mtu == 0
        assert config.adapter == "hci0"

    def test_empty_name_rejected(self):
        """Test advertised name must not be empty."""
        with pytest.raises(ValueError, match="name"):
            ServerConfig(name="")

    def test_non_positive_timeout_rejected(self):
        """Test timeout must be positive."""
        with pytest.raises(ValueError, match="timeout"):
            ServerConfig(timeout=0)

    def test_negative_mtu_rejected(self):
        """Test MTU override must not be negative."""
        with pytest.raises(ValueError, match="mtu"):
            ServerConfig(mtu=-1)


class TestEffectiveMtu:
    """Test effective_mtu()."""

    def test_negotiated_minus_overhead(self):
        """Test no override subtracts the 3-byte ATT header."""
        assert ServerConfig().effective_mtu(185) == 182

    def test_override_smaller_than_negotiated(self):
        """Test a smaller override is used as is."""
        assert ServerConfig(mtu=20).effective_mtu(185) == 20

    def test_override_not_smaller_than_negotiated(self):
        """Test an override at or above the negotiated MTU is ignored."""
        assert ServerConfig(mtu=185).effective_mtu(185) == 182
        assert ServerConfig(mtu=500).effective_mtu(185) == 182

    @pytest.mark.parametrize("negotiated", [None, 0, 3])
    def test_unknown_negotiated_mtu_uses_default(self, negotiated):
        """Test a missing negotiated MTU falls back to the 23-byte default."""
        assert ServerConfig().effective_mtu(negotiated) == 20
