from enum import Enum
from typing import List


class AccountRole(str, Enum):
    """Principal roles on the gateway"""
    ADMIN = "admin"          # Platform operator, moderates merchants and orders
    MERCHANT = "merchant"    # B2B customer submitting payout orders


class AccountStatus(str, Enum):
    """Merchant account lifecycle"""
    PENDING = "pending"        # Registered, awaiting admin approval
    ACTIVE = "active"
    SUSPENDED = "suspended"
    BANNED = "banned"          # Terminal


class OrderStatus(str, Enum):
    """Payout order lifecycle"""
    PENDING = "pending"
    COMPLETED = "completed"    # Terminal
    REJECTED = "rejected"      # Terminal


class Network(str, Enum):
    """USDT token standards accepted for payouts"""
    ERC20 = "ERC20"
    TRC20 = "TRC20"


class ApiKeyPermission(str, Enum):
    """Capabilities grantable to a merchant API key"""
    PAYOUT = "payout"
    PAYIN = "payin"
    BALANCE = "balance"


# Capabilities granted to a newly created key when none are requested
DEFAULT_API_KEY_PERMISSIONS: List[ApiKeyPermission] = [
    ApiKeyPermission.PAYOUT,
    ApiKeyPermission.PAYIN,
    ApiKeyPermission.BALANCE,
]


def initial_status_for_role(role: AccountRole) -> AccountStatus:
    """Admins are provisioned active; merchants start in the approval queue"""
    if role == AccountRole.ADMIN:
        return AccountStatus.ACTIVE
    return AccountStatus.PENDING
