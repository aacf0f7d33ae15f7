"""Tests for the payout order lifecycle."""

import threading
from decimal import Decimal

import pytest

from app.core.exceptions import IllegalTransition, InvalidAddress, InvalidInput, NotFound, Unauthorized
from app.db.repositories import OrderRepository, WalletRepository
from app.services.auth_service import AuthService
from app.services.moderation_service import ModerationService
from app.services.notifications import NotificationDispatcher
from app.services.order_service import OrderService

from conftest import ERC20_ADDRESS, TRC20_ADDRESS, FakeNotifier


def count_orders(db):
    return db.fetch_value("SELECT COUNT(*) FROM orders")


def test_create_order_infers_network(db, active_merchant, dispatcher, notifier):
    service = OrderService(db, dispatcher)

    erc20 = service.create_order(active_merchant, "12.5", ERC20_ADDRESS)
    trc20 = service.create_order(active_merchant, 3, "  " + TRC20_ADDRESS + " ")

    assert erc20["status"] == "pending"
    assert erc20["network"] == "ERC20"
    assert erc20["amount"] == Decimal("12.5")
    assert erc20["owner_id"] == active_merchant["id"]
    assert trc20["network"] == "TRC20"
    assert trc20["address"] == TRC20_ADDRESS
    assert len(notifier.messages) == 2


@pytest.mark.parametrize("amount", [0, -1, "0", "-10.5", "abc"])
def test_non_positive_amount_creates_nothing(db, active_merchant, dispatcher, notifier, amount):
    with pytest.raises(InvalidInput):
        OrderService(db, dispatcher).create_order(active_merchant, amount, ERC20_ADDRESS)

    assert count_orders(db) == 0
    assert notifier.messages == []


def test_invalid_address_creates_nothing(db, active_merchant, dispatcher, notifier):
    with pytest.raises(InvalidAddress):
        OrderService(db, dispatcher).create_order(active_merchant, 10, "0xnot-an-address")

    assert count_orders(db) == 0
    assert notifier.messages == []


def test_pending_merchant_cannot_create_orders(db, merchant):
    with pytest.raises(Unauthorized):
        OrderService(db).create_order(merchant, 10, ERC20_ADDRESS)
    assert count_orders(db) == 0


def test_unresolved_actor_cannot_create_orders(db):
    with pytest.raises(Unauthorized):
        OrderService(db).create_order(None, 10, ERC20_ADDRESS)


def test_order_creation_does_not_touch_wallet(db, admin, active_merchant):
    ModerationService(db).recharge(admin, active_merchant["id"], 50)
    OrderService(db).create_order(active_merchant, 500, ERC20_ADDRESS)

    wallet = WalletRepository(db).get_by_merchant(active_merchant["id"])
    assert wallet["balance"] == Decimal("50")
    assert wallet["frozen_balance"] == Decimal("0")


def test_complete_order(db, admin, active_merchant, dispatcher, notifier):
    service = OrderService(db, dispatcher)
    order = service.create_order(active_merchant, 100, ERC20_ADDRESS)

    completed = service.transition_order(admin, order["id"], "completed")

    assert completed["status"] == "completed"
    assert completed["processed_by"] == admin["id"]
    assert completed["processed_at"] is not None
    assert completed["amount"] == order["amount"]
    assert completed["address"] == order["address"]
    assert completed["network"] == order["network"]
    assert "Payout confirmed" in notifier.messages[-1]


def test_reject_order(db, admin, active_merchant, dispatcher, notifier):
    service = OrderService(db, dispatcher)
    order = service.create_order(active_merchant, 100, TRC20_ADDRESS)

    rejected = service.transition_order(admin, order["id"], "rejected")

    assert rejected["status"] == "rejected"
    assert "Order rejected" in notifier.messages[-1]


@pytest.mark.parametrize("first,second", [
    ("completed", "rejected"),
    ("completed", "completed"),
    ("rejected", "completed"),
    ("rejected", "rejected"),
    ("completed", "pending"),
])
def test_terminal_orders_are_final(db, admin, active_merchant, first, second):
    service = OrderService(db)
    order = service.create_order(active_merchant, 100, ERC20_ADDRESS)
    service.transition_order(admin, order["id"], first)

    with pytest.raises(IllegalTransition):
        service.transition_order(admin, order["id"], second)

    assert OrderRepository(db).get_by_id(order["id"])["status"] == first


def test_merchant_cannot_transition_orders(db, active_merchant):
    service = OrderService(db)
    order = service.create_order(active_merchant, 100, ERC20_ADDRESS)

    with pytest.raises(Unauthorized):
        service.transition_order(active_merchant, order["id"], "completed")

    assert OrderRepository(db).get_by_id(order["id"])["status"] == "pending"


def test_transition_unknown_order(db, admin):
    with pytest.raises(NotFound):
        OrderService(db).transition_order(admin, "missing", "completed")


def test_transition_unknown_status(db, admin, active_merchant):
    service = OrderService(db)
    order = service.create_order(active_merchant, 100, ERC20_ADDRESS)

    with pytest.raises(InvalidInput):
        service.transition_order(admin, order["id"], "refunded")


def test_concurrent_transitions_only_one_wins(db, admin, active_merchant):
    service = OrderService(db)
    order = service.create_order(active_merchant, 100, ERC20_ADDRESS)
    barrier = threading.Barrier(2)
    outcomes = {}

    def attempt(target):
        barrier.wait()
        try:
            service.transition_order(admin, order["id"], target)
            outcomes[target] = "ok"
        except IllegalTransition:
            outcomes[target] = "refused"

    threads = [threading.Thread(target=attempt, args=(t,)) for t in ("completed", "rejected")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(outcomes.values()) == ["ok", "refused"]
    final = OrderRepository(db).get_by_id(order["id"])["status"]
    assert outcomes[final] == "ok"


def test_stale_read_loses_compare_and_set(db, admin, active_merchant):
    service = OrderService(db)
    order = service.create_order(active_merchant, 100, ERC20_ADDRESS)
    service.transition_order(admin, order["id"], "rejected")

    assert not OrderRepository(db).update_status_if(order["id"], "pending", "completed", admin["id"])
    assert OrderRepository(db).get_by_id(order["id"])["status"] == "rejected"


@pytest.mark.parametrize("sink", [FakeNotifier(fail=True), FakeNotifier(explode=True)])
def test_notification_failure_never_fails_the_operation(db, admin, active_merchant, sink):
    service = OrderService(db, NotificationDispatcher(sink))

    order = service.create_order(active_merchant, 100, ERC20_ADDRESS)
    completed = service.transition_order(admin, order["id"], "completed")

    assert completed["status"] == "completed"
    assert len(sink.messages) >= 2


def test_get_order_hides_other_merchants_orders(db, admin, active_merchant):
    other = AuthService(db).register_merchant("other@example.com", "other-password", "Other Co", "Bob")
    other = ModerationService(db).set_account_status(admin, other["id"], "active")
    service = OrderService(db)
    order = service.create_order(active_merchant, 100, ERC20_ADDRESS)

    assert service.get_order(active_merchant, order["id"])["id"] == order["id"]
    assert service.get_order(admin, order["id"])["id"] == order["id"]
    with pytest.raises(NotFound):
        service.get_order(other, order["id"])


def test_list_orders_scopes_by_actor(db, admin, active_merchant):
    other = AuthService(db).register_merchant("other@example.com", "other-password", "Other Co", "Bob")
    other = ModerationService(db).set_account_status(admin, other["id"], "active")
    service = OrderService(db)
    mine = service.create_order(active_merchant, 1, ERC20_ADDRESS)
    theirs = service.create_order(other, 2, TRC20_ADDRESS)
    service.transition_order(admin, theirs["id"], "completed")

    assert [o["id"] for o in service.list_orders(active_merchant)] == [mine["id"]]
    assert {o["id"] for o in service.list_orders(admin)} == {mine["id"], theirs["id"]}
    assert [o["id"] for o in service.list_orders(admin, status="completed")] == [theirs["id"]]

    pending = service.list_pending_orders(admin)
    assert [o["id"] for o in pending] == [mine["id"]]
    assert pending[0]["owner_email"] == "merchant@example.com"

    with pytest.raises(Unauthorized):
        service.list_pending_orders(active_merchant)
    with pytest.raises(InvalidInput):
        service.list_orders(admin, status="archived")
