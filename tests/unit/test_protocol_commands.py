"""Test HPS identifiers and command builders."""

import pytest

from hpsproxy.protocol.commands import (
    HEADERS_BODY_CHUNK_INDEX_UUID,
    HEADERS_BODY_CHUNK_SIZES_UUID,
    HTTP_CONTROL_POINT_UUID,
    HTTP_URI_UUID,
    SERVICE_UUID,
    build_cancel_command,
    build_chunk_index_command,
    build_request_command,
    uuid16_to_uuid128,
)


class TestUuids:
    """Test 16-bit UUID expansion."""

    def test_service_uuid(self):
        """Test HPS service UUID on the Bluetooth base UUID."""
        assert SERVICE_UUID == "00001823-0000-1000-8000-00805F9B34FB"

    def test_characteristic_uuids(self):
        """Test characteristic UUIDs."""
        assert HTTP_URI_UUID.startswith("00002AB6-")
        assert HTTP_CONTROL_POINT_UUID.startswith("00002ABA-")
        assert HEADERS_BODY_CHUNK_INDEX_UUID.startswith("00002A9A-")
        assert HEADERS_BODY_CHUNK_SIZES_UUID.startswith("00002AC0-")

    def test_uuid16_to_uuid128(self):
        """Test arbitrary 16-bit expansion."""
        assert uuid16_to_uuid128(0x180F) == "0000180F-0000-1000-8000-00805F9B34FB"


class TestCommandBuilders:
    """Test control point and chunk index builders."""

    @pytest.mark.parametrize(
        ("method", "secure", "expected"),
        [
            ("GET", False, b"\x01"),
            ("HEAD", False, b"\x02"),
            ("POST", False, b"\x03"),
            ("PUT", False, b"\x04"),
            ("DELETE", False, b"\x05"),
            ("GET", True, b"\x06"),
            ("DELETE", True, b"\x0a"),
        ],
    )
    def test_build_request_command(self, method, secure, expected):
        """Test request opcodes."""
        assert build_request_command(method, secure) == expected

    def test_build_cancel_command(self):
        """Test cancel opcode."""
        assert build_cancel_command() == b"\x0b"

    def test_build_chunk_index_command(self):
        """Test 8-byte chunk index value."""
        assert build_chunk_index_command() == bytes(8)
        assert build_chunk_index_command(body=2) == bytes.fromhex("0000000002000000")
        assert build_chunk_index_command(headers=1) == bytes.fromhex("0100000000000000")

    def test_build_request_command_unknown_method(self):
        """Test unsupported method raises ValueError."""
        with pytest.raises(ValueError):
            build_request_command("OPTIONS")
