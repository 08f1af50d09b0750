"""Tests for device endpoint parsing."""

from __future__ import annotations

import pytest

from q6voiced import DeviceEndpoint


def test_parse_endpoint_reads_card_and_device() -> None:
    """A well-formed specifier yields the card and device numbers."""
    endpoint = DeviceEndpoint.parse("hw:1,0")
    assert endpoint == DeviceEndpoint(card=1, device=0)
    assert str(endpoint) == "hw:1,0"


def test_parse_endpoint_accepts_multi_digit_values() -> None:
    """Card and device numbers are not limited to a single digit."""
    assert DeviceEndpoint.parse("hw:12,34") == DeviceEndpoint(card=12, device=34)


@pytest.mark.parametrize(
    "text",
    [
        "hw:abc,0",
        "1,0",
        "hw:1",
        "hw:-1,0",
        "hw:1,0x",
        " hw:1,0",
        "plughw:1,0",
        "",
        "hw:99999999999999999999,0",
        "hw:0,4294967296",
    ],
)
def test_parse_endpoint_rejects_malformed_values(text: str) -> None:
    """Anything other than hw:<unsigned>,<unsigned> is rejected."""
    with pytest.raises(ValueError):
        DeviceEndpoint.parse(text)


def test_parse_endpoint_accepts_largest_unsigned_32_bit_value() -> None:
    """The upper bound matches an unsigned 32-bit integer."""
    endpoint = DeviceEndpoint.parse("hw:4294967295,0")
    assert endpoint.card == 2**32 - 1
