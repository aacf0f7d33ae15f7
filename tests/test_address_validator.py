"""Tests for payout address classification."""

import pytest

from app.core.address_validator import classify, is_valid_address, require_network
from app.core.exceptions import InvalidAddress, InvalidInput
from app.models.roles import Network


@pytest.mark.parametrize("address", [
    "0x" + "a" * 40,
    "0x" + "F" * 40,
    "0x742d35Cc6634C0532925a3b844Bc454e4438f44e",
])
def test_erc20_addresses(address):
    assert classify(address) == Network.ERC20


@pytest.mark.parametrize("address", [
    "T" + "A" * 33,
    "TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t",
    "T" + "1" * 33,
])
def test_trc20_addresses(address):
    assert classify(address) == Network.TRC20


@pytest.mark.parametrize("address", [
    "",
    "   ",
    "0xshort",
    "0x" + "a" * 39,
    "0x" + "a" * 41,
    "0x" + "g" * 40,
    "0X" + "a" * 40,
    "T" + "A" * 32,
    "T" + "A" * 34,
    "T" + "0" * 33,
    "T" + "O" * 33,
    "T" + "I" * 33,
    "T" + "l" * 33,
    "t" + "A" * 33,
    "1BoatSLRHtKNngkdXEeobR76b53LETtpyT",
])
def test_invalid_addresses(address):
    assert classify(address) is None
    assert not is_valid_address(address)


def test_non_strings_are_invalid():
    assert classify(None) is None
    assert classify(12345) is None


def test_surrounding_whitespace_is_ignored():
    assert classify("  0x" + "b" * 40 + "\n") == Network.ERC20
    assert classify("\tT" + "B" * 33 + " ") == Network.TRC20


def test_inner_whitespace_is_not_ignored():
    assert classify("0x" + "a" * 20 + " " + "a" * 20) is None


def test_classify_is_idempotent():
    address = "  T" + "z" * 33
    assert classify(address) == classify(address) == classify(address.strip())


def test_require_network_raises_invalid_address():
    with pytest.raises(InvalidAddress) as exc_info:
        require_network("0xshort")

    assert isinstance(exc_info.value, InvalidInput)
    assert "ERC20" in exc_info.value.message
    assert require_network("0x" + "c" * 40) == Network.ERC20
