"""Test parsing of values read from an HPS peripheral."""

import pytest

from hpsproxy.exceptions import InvalidResponseError
from hpsproxy.protocol.responses import (
    is_status_published,
    parse_chunk_sizes,
    parse_status_code,
)


class TestParseStatusCode:
    """Test parse_status_code()."""

    def test_parse(self):
        """Test parsing a 200 with both received flags."""
        status = parse_status_code(bytearray.fromhex("c80005"))
        assert status.status_code == 200
        assert status.data_status == 0x05

    @pytest.mark.parametrize("data", [b"", b"\xc8", b"\xc8\x00\x05\x00"])
    def test_wrong_length(self, data):
        """Test anything but 3 bytes is rejected."""
        with pytest.raises(InvalidResponseError, match="3 bytes"):
            parse_status_code(data)


class TestParseChunkSizes:
    """Test parse_chunk_sizes()."""

    def test_parse(self):
        """Test parsing a published value."""
        sizes = parse_chunk_sizes(bytes.fromhex("1a000000" "32000000" "14000000"))
        assert sizes.headers_length == 26
        assert sizes.body_length == 50
        assert sizes.mtu == 20

    def test_empty_value(self):
        """Test an unpublished (empty) value is rejected."""
        with pytest.raises(InvalidResponseError, match="12 bytes"):
            parse_chunk_sizes(b"")

    def test_zero_mtu(self):
        """Test an MTU of 0 cannot be paged with."""
        with pytest.raises(InvalidResponseError, match="MTU of 0"):
            parse_chunk_sizes(bytes(12))


class TestIsStatusPublished:
    """Test is_status_published()."""

    def test_empty_snapshot(self):
        """Test the initial empty status counts as unpublished."""
        assert not is_status_published(b"")

    def test_published(self):
        """Test a 3-byte status counts as published."""
        assert is_status_published(b"\xc8\x00\x05")
