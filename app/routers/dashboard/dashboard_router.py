from fastapi import APIRouter, Depends
from typing import Any, Dict

from app.core.dependencies import get_current_account
from app.core.status_policy import can_moderate
from app.db.connection import get_db
from app.db.repositories import OrderRepository, WalletRepository
from app.models.roles import OrderStatus
from app.services.moderation_service import ModerationService

router = APIRouter()


@router.get("/stat", response_model=dict)
def get_dashboard(current_account: Dict[str, Any] = Depends(get_current_account), db=Depends(get_db)):
    """
    Landing page summary.

    Admins get the moderation queue sizes; merchants get their approval
    status and wallet.
    """
    if can_moderate(current_account):
        return {
            "role": current_account["role"],
            "merchants": ModerationService(db).merchant_counts(current_account),
            "pending_orders": OrderRepository(db).count_by_status(OrderStatus.PENDING.value),
        }

    wallet = WalletRepository(db).get_by_merchant(current_account["id"])
    return {
        "role": current_account["role"],
        "status": current_account["status"],
        "company_name": current_account.get("company_name"),
        "balance": str(wallet["balance"]) if wallet else None,
        "total_deposit": str(wallet["total_deposit"]) if wallet else None,
        "total_payout": str(wallet["total_payout"]) if wallet else None,
    }
