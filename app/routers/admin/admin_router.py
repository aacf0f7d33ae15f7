"""
Admin Router
Merchant approval, suspension, bans, wallet recharges and the pending order queue
"""

from fastapi import APIRouter, Depends, Query
from typing import Any, Dict, List, Optional
import logging

from app.core.dependencies import get_current_admin
from app.db.connection import get_db
from app.models.roles import AccountStatus
from app.models.schemas import (
    MerchantListResponse,
    MerchantResponse,
    OrderResponse,
    RechargeRequest,
    UpdateAccountStatusRequest,
    WalletResponse,
)
from app.services.moderation_service import ModerationService
from app.services.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/merchants", response_model=MerchantListResponse)
def get_merchants(
    merchant_status: Optional[AccountStatus] = Query(None, alias="status", description="Filter by account status"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_admin: Dict[str, Any] = Depends(get_current_admin),
    db=Depends(get_db),
):
    """
    List merchants with their wallet summary.

    `counts` always covers every status so the dashboard can show the
    pending / active / inactive tabs without extra calls.
    """
    service = ModerationService(db)
    merchants = service.list_merchants(
        current_admin,
        status=merchant_status.value if merchant_status else None,
        limit=limit,
        offset=offset,
    )
    return {"merchants": merchants, "counts": service.merchant_counts(current_admin)}


@router.get("/merchants/{account_id}", response_model=MerchantResponse)
def get_merchant(
    account_id: str,
    current_admin: Dict[str, Any] = Depends(get_current_admin),
    db=Depends(get_db),
):
    return ModerationService(db).get_account(current_admin, account_id)


@router.post("/merchants/{account_id}/status", response_model=MerchantResponse)
def update_merchant_status(
    account_id: str,
    payload: UpdateAccountStatusRequest,
    current_admin: Dict[str, Any] = Depends(get_current_admin),
    db=Depends(get_db),
):
    """
    Change a merchant's status.

    Allowed transitions:
    - pending → active, banned
    - active → suspended, banned
    - suspended → active, banned
    - banned is final
    """
    return ModerationService(db).set_account_status(current_admin, account_id, payload.status)


@router.post("/merchants/{account_id}/recharge", response_model=WalletResponse)
def recharge_merchant(
    account_id: str,
    payload: RechargeRequest,
    current_admin: Dict[str, Any] = Depends(get_current_admin),
    db=Depends(get_db),
):
    """Credit a merchant wallet by `amount` USDT"""
    return ModerationService(db).recharge(current_admin, account_id, payload.amount)


@router.get("/orders/pending", response_model=List[OrderResponse])
def get_pending_orders(
    limit: int = Query(100, ge=1, le=500),
    current_admin: Dict[str, Any] = Depends(get_current_admin),
    db=Depends(get_db),
):
    """Orders awaiting review, newest first"""
    return OrderService(db).list_pending_orders(current_admin, limit=limit)
