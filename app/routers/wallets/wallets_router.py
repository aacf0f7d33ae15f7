from fastapi import APIRouter, Depends, HTTPException
from typing import Any, Dict

from app.core.dependencies import get_current_account
from app.db.connection import get_db
from app.db.repositories import WalletRepository
from app.models.schemas import WalletResponse

router = APIRouter()


@router.get("", response_model=WalletResponse)
def get_my_wallet(current_account: Dict[str, Any] = Depends(get_current_account), db=Depends(get_db)):
    """Balance ledger for the current merchant"""
    wallet = WalletRepository(db).get_by_merchant(current_account["id"])
    if not wallet:
        raise HTTPException(status_code=404, detail="No wallet for this account")
    return wallet
