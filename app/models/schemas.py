from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from app.models.roles import AccountRole, AccountStatus, OrderStatus, Network, ApiKeyPermission


# -------------------------
# Auth
# -------------------------
class MerchantRegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    company_name: str = Field(..., min_length=1, max_length=200)
    contact_person: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


# -------------------------
# Accounts & wallets
# -------------------------
class WalletResponse(BaseModel):
    merchant_id: str
    balance: Decimal
    frozen_balance: Decimal
    total_deposit: Decimal
    total_payout: Decimal
    updated_at: Optional[datetime] = None


class AccountResponse(BaseModel):
    id: str
    email: str
    company_name: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    role: AccountRole
    status: AccountStatus
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    created_at: datetime


class MerchantResponse(AccountResponse):
    """Account as seen by admins, with its wallet"""
    balance: Optional[Decimal] = None
    wallet: Optional[WalletResponse] = None


class MerchantListResponse(BaseModel):
    merchants: List[MerchantResponse]
    counts: dict


class UpdateAccountStatusRequest(BaseModel):
    status: AccountStatus


class RechargeRequest(BaseModel):
    amount: Decimal


# -------------------------
# Orders
# -------------------------
class CreateOrderRequest(BaseModel):
    amount: Decimal
    address: str = Field(..., min_length=1, max_length=100)


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatus


class OrderResponse(BaseModel):
    id: str
    owner_id: str
    owner_email: Optional[str] = None
    amount: Decimal
    address: str
    network: Network
    status: OrderStatus
    processed_at: Optional[datetime] = None
    processed_by: Optional[str] = None
    created_at: datetime


# -------------------------
# API keys
# -------------------------
class CreateApiKeyRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    permissions: Optional[List[ApiKeyPermission]] = None


class ToggleApiKeyRequest(BaseModel):
    is_active: bool


class ApiKeyResponse(BaseModel):
    id: str
    name: str
    api_key: str
    is_active: bool
    permissions: List[ApiKeyPermission]
    created_at: datetime
    last_used_at: Optional[datetime] = None


class ApiKeyCreatedResponse(ApiKeyResponse):
    """Returned once at creation; the secret is never shown again"""
    secret_key: str


# -------------------------
# Notifications
# -------------------------
class TelegramMessageRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=4096)


class TelegramMessageResponse(BaseModel):
    success: bool
    message_id: int
