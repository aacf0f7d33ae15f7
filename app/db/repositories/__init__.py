from .account_repository import AccountRepository
from .wallet_repository import WalletRepository
from .order_repository import OrderRepository
from .api_key_repository import ApiKeyRepository

__all__ = [
    "AccountRepository",
    "WalletRepository",
    "OrderRepository",
    "ApiKeyRepository",
]
