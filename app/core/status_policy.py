"""
Status Policy

Transition tables for merchant accounts and payout orders, and the
authorization predicate deciding who may invoke a transition.
"""

import logging
from typing import Any, Dict, FrozenSet, Optional

from app.core.config import settings
from app.core.exceptions import IllegalTransition, Unauthorized
from app.models.roles import AccountRole, AccountStatus, OrderStatus

logger = logging.getLogger(__name__)


ACCOUNT_TRANSITIONS: Dict[AccountStatus, FrozenSet[AccountStatus]] = {
    AccountStatus.PENDING: frozenset({AccountStatus.ACTIVE, AccountStatus.BANNED}),
    AccountStatus.ACTIVE: frozenset({AccountStatus.SUSPENDED, AccountStatus.BANNED}),
    AccountStatus.SUSPENDED: frozenset({AccountStatus.ACTIVE, AccountStatus.BANNED}),
    AccountStatus.BANNED: frozenset(),
}

ORDER_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.COMPLETED, OrderStatus.REJECTED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.REJECTED: frozenset(),
}


def _coerce(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        return None


def is_terminal_account_status(status: AccountStatus) -> bool:
    return not ACCOUNT_TRANSITIONS.get(status)


def is_terminal_order_status(status: OrderStatus) -> bool:
    return not ORDER_TRANSITIONS.get(status)


def can_transition_account(current: Any, target: Any) -> bool:
    current_status = _coerce(AccountStatus, current)
    target_status = _coerce(AccountStatus, target)
    if current_status is None or target_status is None:
        return False
    return target_status in ACCOUNT_TRANSITIONS[current_status]


def can_transition_order(current: Any, target: Any) -> bool:
    current_status = _coerce(OrderStatus, current)
    target_status = _coerce(OrderStatus, target)
    if current_status is None or target_status is None:
        return False
    return target_status in ORDER_TRANSITIONS[current_status]


def check_account_transition(current: Any, target: Any) -> AccountStatus:
    """Return the target status, or raise IllegalTransition"""
    if not can_transition_account(current, target):
        raise IllegalTransition("account", _status_text(current), _status_text(target))
    return AccountStatus(target)


def check_order_transition(current: Any, target: Any) -> OrderStatus:
    """Return the target status, or raise IllegalTransition"""
    if not can_transition_order(current, target):
        raise IllegalTransition("order", _status_text(current), _status_text(target))
    return OrderStatus(target)


def _status_text(value: Any) -> Optional[str]:
    if isinstance(value, (AccountStatus, OrderStatus)):
        return value.value
    return value


def can_moderate(actor: Optional[Dict[str, Any]]) -> bool:
    """
    Whether the resolved account may moderate accounts and orders.

    The role attribute is authoritative. The ADMIN_EMAILS setting is only
    consulted for an account record that carries no role at all, and every
    such grant is logged as a degraded-trust decision. An unresolved actor
    is never authorized.
    """
    if not actor:
        return False

    role = actor.get("role")
    if role:
        return role == AccountRole.ADMIN.value

    email = (actor.get("email") or "").strip().lower()
    if email and email in settings.ADMIN_EMAILS:
        logger.warning(
            f"Degraded-trust moderation grant: account {actor.get('id')} has no role, "
            f"authorized via ADMIN_EMAILS allow-list"
        )
        return True

    return False


def require_moderator(actor: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Return the actor, or raise Unauthorized if it cannot moderate"""
    if not can_moderate(actor):
        raise Unauthorized("Admin privileges are required for this action")
    return actor
