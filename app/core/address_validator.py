"""
Payout address validation.

Classifies a destination address as an ERC20 (Ethereum) or TRC20 (Tron)
USDT address. Matching is done on the trimmed string.
"""

import re
from typing import Optional

from app.core.exceptions import InvalidAddress
from app.models.roles import Network

# 0x followed by 40 hex characters, 42 in total
ERC20_ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")

# T followed by 33 Base58 characters (no 0, O, I or l), 34 in total
TRC20_ADDRESS_PATTERN = re.compile(r"^T[1-9A-HJ-NP-Za-km-z]{33}$")


def classify(address: Optional[str]) -> Optional[Network]:
    """Return the network an address belongs to, or None if it is invalid"""
    if not isinstance(address, str):
        return None

    candidate = address.strip()

    if ERC20_ADDRESS_PATTERN.fullmatch(candidate):
        return Network.ERC20
    if TRC20_ADDRESS_PATTERN.fullmatch(candidate):
        return Network.TRC20
    return None


def is_valid_address(address: Optional[str]) -> bool:
    return classify(address) is not None


def require_network(address: Optional[str]) -> Network:
    """Classify an address, raising InvalidAddress when it matches no network"""
    network = classify(address)
    if network is None:
        raise InvalidAddress(address if isinstance(address, str) else "")
    return network
