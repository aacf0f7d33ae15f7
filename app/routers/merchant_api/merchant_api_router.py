"""
Merchant Integration API
Server-to-server endpoints authenticated with X-API-Key / X-API-Secret headers
"""

from fastapi import APIRouter, Depends, HTTPException, status
from typing import Any, Dict

from app.core.dependencies import get_dispatcher, require_balance_key, require_payout_key
from app.db.connection import get_db
from app.db.repositories import WalletRepository
from app.models.schemas import CreateOrderRequest, OrderResponse, WalletResponse
from app.services.notifications import NotificationDispatcher
from app.services.order_service import OrderService

router = APIRouter()


@router.get("/balance", response_model=WalletResponse)
def get_balance(merchant: Dict[str, Any] = Depends(require_balance_key), db=Depends(get_db)):
    """Wallet balance for the key's merchant (requires the `balance` permission)"""
    wallet = WalletRepository(db).get_by_merchant(merchant["id"])
    if not wallet:
        raise HTTPException(status_code=404, detail="No wallet for this account")
    return wallet


@router.post("/payouts", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_payout(
    payload: CreateOrderRequest,
    merchant: Dict[str, Any] = Depends(require_payout_key),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    db=Depends(get_db),
):
    """Submit a payout order (requires the `payout` permission)"""
    return OrderService(db, dispatcher).create_order(merchant, payload.amount, payload.address)
