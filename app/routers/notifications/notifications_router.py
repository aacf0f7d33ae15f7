from fastapi import APIRouter, Depends, HTTPException, status
from typing import Any, Dict
import logging

from app.core.dependencies import get_current_admin, get_notifier
from app.core.exceptions import NotificationFailed
from app.models.schemas import TelegramMessageRequest, TelegramMessageResponse
from app.services.notifications import TelegramNotifier

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/telegram", response_model=TelegramMessageResponse)
def send_telegram_message(
    payload: TelegramMessageRequest,
    current_admin: Dict[str, Any] = Depends(get_current_admin),
    notifier: TelegramNotifier = Depends(get_notifier),
):
    """Relay a free-form message to the operations Telegram chat (admin only)"""
    if not notifier.configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Telegram is not configured"
        )

    try:
        message_id = notifier.send_or_raise(payload.message)
    except NotificationFailed as e:
        logger.error(f"Telegram relay failed for admin {current_admin['id']}: {e.message}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

    return {"success": True, "message_id": message_id}
