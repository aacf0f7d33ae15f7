"""
Payout order lifecycle.

Orders are created pending by an active account and moved exactly once to
completed or rejected by an admin. Wallet balances are not touched here.
"""

import logging
from typing import Any, Dict, List, Optional

from app.core.address_validator import require_network
from app.core.amounts import parse_amount
from app.core.exceptions import IllegalTransition, InvalidInput, NotFound, Unauthorized
from app.core.status_policy import can_moderate, check_order_transition, require_moderator
from app.db.repositories import AccountRepository, OrderRepository
from app.models.roles import AccountStatus, OrderStatus
from app.services.notifications import new_order_message, order_transition_message

logger = logging.getLogger(__name__)


class OrderService:

    def __init__(self, db, dispatcher=None):
        self.orders = OrderRepository(db)
        self.accounts = AccountRepository(db)
        self.dispatcher = dispatcher

    def _notify(self, message: str) -> None:
        if self.dispatcher is None:
            return
        try:
            self.dispatcher.dispatch(message)
        except Exception as e:
            logger.error(f"Could not queue notification: {e}")

    def create_order(self, actor: Optional[Dict[str, Any]], amount: Any, raw_address: str) -> Dict[str, Any]:
        """
        Create a pending payout order for the actor.

        Raises Unauthorized unless the actor is an active account,
        InvalidInput for a non-positive or malformed amount, and
        InvalidAddress when the address is neither ERC20 nor TRC20.
        """
        if not actor:
            raise Unauthorized("Authentication is required to create orders")
        if actor.get("status") != AccountStatus.ACTIVE.value:
            raise Unauthorized(f"Account is {actor.get('status')}; only active accounts can create orders")

        parsed_amount = parse_amount(amount)
        network = require_network(raw_address)
        address = raw_address.strip()

        order = self.orders.create(
            owner_id=actor["id"],
            amount=parsed_amount,
            address=address,
            network=network.value,
        )
        logger.info(f"Order {order['id']} created by {actor['id']}: {parsed_amount} USDT on {network.value}")

        self._notify(new_order_message(order))
        return order

    def transition_order(self, actor: Optional[Dict[str, Any]], order_id: str, target_status: Any) -> Dict[str, Any]:
        """
        Move a pending order to completed or rejected.

        Re-applying a terminal status is rejected with IllegalTransition,
        never treated as a no-op. The write is conditional on the status read
        here, so of two concurrent transitions only one can succeed.
        """
        require_moderator(actor)

        try:
            target = OrderStatus(target_status)
        except ValueError:
            raise InvalidInput(f"Unknown order status '{target_status}'")

        order = self.orders.get_by_id(order_id)
        if not order:
            raise NotFound("order", order_id)

        check_order_transition(order["status"], target)

        if not self.orders.update_status_if(order_id, order["status"], target.value, processed_by=actor.get("id")):
            current = self.orders.get_by_id(order_id)
            if not current:
                raise NotFound("order", order_id)
            logger.warning(f"Order {order_id} changed concurrently to {current['status']}; {target.value} refused")
            raise IllegalTransition("order", current["status"], target.value)

        updated = self.orders.get_by_id(order_id)
        logger.info(f"Order {order_id} {order['status']} -> {target.value} by {actor.get('id')}")

        self._notify(order_transition_message(updated))
        return updated

    def get_order(self, actor: Optional[Dict[str, Any]], order_id: str) -> Dict[str, Any]:
        if not actor:
            raise Unauthorized("Authentication is required")

        order = self.orders.get_by_id(order_id)
        # Merchants cannot probe for other merchants' order ids
        if not order or (order["owner_id"] != actor["id"] and not can_moderate(actor)):
            raise NotFound("order", order_id)
        return order

    def list_orders(self, actor: Optional[Dict[str, Any]], status: Optional[str] = None,
                    limit: int = 100, offset: int = 0) -> List[Dict[str, Any]]:
        """Admins see every order, merchants only their own; each carries owner_email"""
        if not actor:
            raise Unauthorized("Authentication is required")

        if status is not None:
            try:
                status = OrderStatus(status).value
            except ValueError:
                raise InvalidInput(f"Unknown order status '{status}'")

        owner_id = None if can_moderate(actor) else actor["id"]
        orders = self.orders.query(owner_id=owner_id, status=status, limit=limit, offset=offset)
        return self._with_owner_emails(orders)

    def list_pending_orders(self, actor: Optional[Dict[str, Any]], limit: int = 100) -> List[Dict[str, Any]]:
        require_moderator(actor)
        orders = self.orders.query(status=OrderStatus.PENDING.value, limit=limit)
        return self._with_owner_emails(orders)

    def _with_owner_emails(self, orders: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        owner_ids = list({order["owner_id"] for order in orders})
        emails = {account["id"]: account["email"] for account in self.accounts.get_by_ids(owner_ids)}
        for order in orders:
            order["owner_email"] = emails.get(order["owner_id"])
        return orders
