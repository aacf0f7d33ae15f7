from fastapi import BackgroundTasks, Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from typing import Any, Dict, Optional
from app.core.security import decode_token
from app.core.status_policy import can_moderate
from app.db.connection import get_db
from app.db.repositories import AccountRepository
from app.models.roles import AccountStatus
from app.services.api_key_service import ApiKeyService
from app.services.notifications import NotificationDispatcher, TelegramNotifier

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def get_current_account(token: str = Depends(oauth2_scheme), db=Depends(get_db)) -> Dict[str, Any]:
    """
    Resolve the bearer token to the full account record.

    Authorization decisions are always made on the stored record, never on
    claims copied into the token.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(token)
    if payload is None:
        raise credentials_exception

    account_id: Optional[str] = payload.get("sub")
    if account_id is None:
        raise credentials_exception

    account = AccountRepository(db).get_by_id(account_id)
    if account is None:
        raise credentials_exception

    if account["status"] in (AccountStatus.SUSPENDED.value, AccountStatus.BANNED.value):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Account is {account['status']}"
        )

    return account


def get_current_admin(current_account: Dict[str, Any] = Depends(get_current_account)) -> Dict[str, Any]:
    """Dependency for admin-only routes"""
    if not can_moderate(current_account):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges are required for this action"
        )
    return current_account


def get_notifier() -> TelegramNotifier:
    return TelegramNotifier()


def get_dispatcher(
    background_tasks: BackgroundTasks,
    notifier: TelegramNotifier = Depends(get_notifier),
) -> NotificationDispatcher:
    """Notifications go out after the response has been sent"""
    return NotificationDispatcher(notifier, background_tasks)


class ApiKeyChecker:
    """Dependency authenticating a merchant integration by API key and secret"""

    def __init__(self, required_permission: str):
        self.required_permission = required_permission

    def __call__(
        self,
        x_api_key: str = Header(...),
        x_api_secret: str = Header(...),
        db=Depends(get_db),
    ) -> Dict[str, Any]:
        key = ApiKeyService(db).verify(x_api_key, x_api_secret)
        if key is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or inactive API key"
            )

        if self.required_permission not in key["permissions"]:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"API key lacks the '{self.required_permission}' permission"
            )

        account = AccountRepository(db).get_by_id(key["merchant_id"])
        if not account or account["status"] != AccountStatus.ACTIVE.value:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Merchant account is not active"
            )
        return account


require_balance_key = ApiKeyChecker("balance")
require_payout_key = ApiKeyChecker("payout")
