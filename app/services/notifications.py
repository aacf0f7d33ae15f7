"""
Order notifications via the Telegram Bot API.

Delivery is best effort: the sender reports success or failure, and the
dispatcher swallows and logs every failure so that a notification can never
fail or roll back the operation that triggered it.
"""

import logging
from typing import Any, Dict, Optional

import requests
from fastapi import BackgroundTasks

from app.core.config import settings
from app.core.exceptions import NotificationFailed
from app.models.roles import OrderStatus

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """Sends plain messages to one Telegram chat"""

    def __init__(
        self,
        bot_token: Optional[str] = None,
        chat_id: Optional[str] = None,
        api_base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.bot_token = bot_token if bot_token is not None else settings.TELEGRAM_BOT_TOKEN
        self.chat_id = chat_id if chat_id is not None else settings.TELEGRAM_CHAT_ID
        self.api_base_url = (api_base_url or settings.TELEGRAM_API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.TELEGRAM_TIMEOUT_SECONDS

    @property
    def configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    def send_or_raise(self, message: str) -> int:
        """Send a message and return its Telegram message id; raise NotificationFailed otherwise"""
        if not self.configured:
            raise NotificationFailed("Telegram bot token or chat id not configured")
        if not message:
            raise NotificationFailed("Notification message is empty")

        url = f"{self.api_base_url}/bot{self.bot_token}/sendMessage"
        payload = {
            "chat_id": self.chat_id,
            "text": message,
            "parse_mode": "HTML",
        }

        try:
            response = requests.post(url, json=payload, timeout=self.timeout)
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise NotificationFailed(f"Telegram request failed: {e}")
        except ValueError:
            raise NotificationFailed(f"Telegram returned a non-JSON response (HTTP {response.status_code})")

        if not response.ok or not data.get("ok"):
            raise NotificationFailed(f"Telegram API error: {data.get('description') or 'unknown error'}")

        return data["result"]["message_id"]

    def send(self, message: str) -> bool:
        """Send a message; never raises"""
        try:
            message_id = self.send_or_raise(message)
        except NotificationFailed as e:
            logger.error(f"Failed to send Telegram notification: {e.message}")
            return False
        except Exception as e:
            logger.exception(f"Unexpected error sending Telegram notification: {e}")
            return False

        logger.info(f"Telegram notification sent (message_id={message_id})")
        return True


class NotificationDispatcher:
    """
    Queues notifications after the state change they describe.

    With BackgroundTasks the message is sent after the HTTP response is
    returned; without, it is sent inline. Either way failures are logged and
    dropped.
    """

    def __init__(self, notifier, background_tasks: Optional[BackgroundTasks] = None):
        self.notifier = notifier
        self.background_tasks = background_tasks

    def dispatch(self, message: str) -> None:
        if self.background_tasks is not None:
            self.background_tasks.add_task(self._deliver, message)
        else:
            self._deliver(message)

    def _deliver(self, message: str) -> None:
        try:
            if not self.notifier.send(message):
                logger.warning("Notification was not delivered")
        except Exception as e:
            logger.error(f"Notification sink raised: {e}")


def _short_address(address: Optional[str]) -> str:
    if not address:
        return "N/A"
    return f"{address[:10]}...{address[-8:]}"


def new_order_message(order: Dict[str, Any]) -> str:
    return (
        "🚀 New payout order!\n\n"
        f"Amount: {order['amount']} USDT\n"
        f"Address: {order['address']}\n"
        f"Network: {order['network']}"
    )


def order_transition_message(order: Dict[str, Any]) -> str:
    headline = {
        OrderStatus.COMPLETED.value: "✅ Payout confirmed",
        OrderStatus.REJECTED.value: "❌ Order rejected",
    }.get(order["status"], "ℹ️ Order updated")

    return (
        f"{headline}\n\n"
        f"Order ID: {order['id'][:8]}...\n"
        f"Amount: {order.get('amount', 'N/A')} USDT\n"
        f"Address: {_short_address(order.get('address'))}\n"
        f"Status: {order['status']}"
    )
