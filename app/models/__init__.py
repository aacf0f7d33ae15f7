from .roles import AccountRole, AccountStatus, OrderStatus, Network, ApiKeyPermission
from .schemas import AccountResponse, MerchantResponse, OrderResponse, WalletResponse, ApiKeyResponse

__all__ = [
    "AccountRole", "AccountStatus", "OrderStatus", "Network", "ApiKeyPermission",
    "AccountResponse", "MerchantResponse", "OrderResponse", "WalletResponse", "ApiKeyResponse",
]
