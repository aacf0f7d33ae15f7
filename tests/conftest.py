"""Shared fixtures: a fresh SQLite file per test and a recording notifier."""

import pytest

from app.db.base import Database
from app.db.connection import DEFAULT_SCHEMA_PATH
from app.services.auth_service import AuthService
from app.services.moderation_service import ModerationService
from app.services.notifications import NotificationDispatcher

ERC20_ADDRESS = "0x" + "a" * 40
TRC20_ADDRESS = "T" + "A" * 33


class FakeNotifier:
    """Records messages instead of calling Telegram"""

    def __init__(self, fail: bool = False, explode: bool = False):
        self.messages = []
        self.fail = fail
        self.explode = explode

    @property
    def configured(self) -> bool:
        return True

    def send(self, message: str) -> bool:
        self.messages.append(message)
        if self.explode:
            raise RuntimeError("telegram is down")
        return not self.fail

    def send_or_raise(self, message: str) -> int:
        self.messages.append(message)
        return len(self.messages)


@pytest.fixture
def db(tmp_path):
    database = Database(str(tmp_path / "gateway.db"))
    database.init_schema(DEFAULT_SCHEMA_PATH)
    yield database
    database.close()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def dispatcher(notifier):
    return NotificationDispatcher(notifier)


@pytest.fixture
def admin(db):
    return AuthService(db).create_admin("admin@example.com", "admin-password")


@pytest.fixture
def merchant(db):
    return AuthService(db).register_merchant(
        email="merchant@example.com",
        password="merchant-password",
        company_name="Acme Payments Ltd",
        contact_person="Alice Chan",
        phone="+852 5555 0100",
    )


@pytest.fixture
def active_merchant(db, admin, merchant):
    return ModerationService(db).set_account_status(admin, merchant["id"], "active")
