"""Tests for registration and credential checks."""

import pytest

from app.core.exceptions import Conflict, InvalidInput, StoreUnavailable, Unauthorized
from app.core.security import create_access_token, decode_token
from app.db.repositories import AccountRepository, WalletRepository
from app.services.auth_service import AuthService
from app.services.moderation_service import ModerationService


def test_register_creates_pending_merchant_with_wallet(db, merchant):
    assert merchant["role"] == "merchant"
    assert merchant["status"] == "pending"
    assert merchant["password_hash"] != "merchant-password"
    assert WalletRepository(db).get_by_merchant(merchant["id"]) is not None


def test_admin_starts_active(admin):
    assert admin["role"] == "admin"
    assert admin["status"] == "active"


def test_duplicate_email_is_case_insensitive(db, merchant):
    with pytest.raises(Conflict):
        AuthService(db).register_merchant("MERCHANT@example.com", "another-password", "Dup", "Dup")


@pytest.mark.parametrize("kwargs", [
    {"password": "short"},
    {"company_name": "  "},
    {"contact_person": ""},
])
def test_registration_validation(db, kwargs):
    data = {
        "email": "new@example.com",
        "password": "long-enough",
        "company_name": "New Co",
        "contact_person": "Carol",
    }
    data.update(kwargs)

    with pytest.raises(InvalidInput):
        AuthService(db).register_merchant(**data)


def test_authenticate(db, merchant):
    service = AuthService(db)

    assert service.authenticate("Merchant@Example.com", "merchant-password")["id"] == merchant["id"]
    with pytest.raises(Unauthorized):
        service.authenticate("merchant@example.com", "wrong-password")
    with pytest.raises(Unauthorized):
        service.authenticate("nobody@example.com", "merchant-password")


def test_banned_accounts_cannot_sign_in(db, admin, merchant):
    ModerationService(db).set_account_status(admin, merchant["id"], "banned")

    with pytest.raises(Unauthorized) as exc_info:
        AuthService(db).authenticate("merchant@example.com", "merchant-password")
    assert exc_info.value.message == "Account is banned"


def test_access_token_round_trip():
    token = create_access_token({"sub": "account-1", "role": "merchant"})
    payload = decode_token(token)

    assert payload["sub"] == "account-1"
    assert payload["type"] == "access"
    assert decode_token(token + "x") is None
    assert decode_token("garbage") is None


def test_failed_wallet_creation_leaves_no_account(db, monkeypatch):
    def broken_create(self, merchant_id):
        raise StoreUnavailable("Database request failed: timed out")

    monkeypatch.setattr(WalletRepository, "create", broken_create)

    with pytest.raises(StoreUnavailable):
        AuthService(db).register_merchant("late@example.com", "late-password", "Late Co", "Eve")

    assert AccountRepository(db).get_by_email("late@example.com") is None
    assert db.fetch_value("SELECT COUNT(*) FROM profiles") == 0

    monkeypatch.undo()
    account = AuthService(db).register_merchant("late@example.com", "late-password", "Late Co", "Eve")
    assert WalletRepository(db).get_by_merchant(account["id"]) is not None
