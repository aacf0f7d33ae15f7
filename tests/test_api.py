"""End-to-end tests through the HTTP surface."""

import pytest
from fastapi.testclient import TestClient

from app.core.dependencies import get_notifier
from app.core.rate_limit import limiter
from app.db.connection import set_db
from app.main import app

from conftest import ERC20_ADDRESS, TRC20_ADDRESS


@pytest.fixture
def client(db, notifier):
    set_db(db)
    limiter.enabled = False
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    limiter.enabled = True
    set_db(None)


def login(client, email, password):
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin_headers(client, admin):
    return login(client, "admin@example.com", "admin-password")


def register(client, email="shop@example.com"):
    response = client.post("/auth/register", json={
        "email": email,
        "password": "shop-password",
        "company_name": "Shop Ltd",
        "contact_person": "Dana",
    })
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def merchant_headers(client, admin_headers):
    account = register(client)
    response = client.post(f"/admin/merchants/{account['id']}/status", json={"status": "active"},
                           headers=admin_headers)
    assert response.status_code == 200, response.text
    return login(client, "shop@example.com", "shop-password")


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_register_login_and_me(client):
    account = register(client)
    assert account["status"] == "pending"
    assert "password_hash" not in account

    headers = login(client, "shop@example.com", "shop-password")
    me = client.get("/auth/me", headers=headers).json()
    assert me["id"] == account["id"]
    assert float(me["balance"]) == 0
    assert me["wallet"]["merchant_id"] == account["id"]


def test_duplicate_registration_conflicts(client):
    register(client)
    response = client.post("/auth/register", json={
        "email": "SHOP@example.com",
        "password": "shop-password",
        "company_name": "Shop Ltd",
        "contact_person": "Dana",
    })
    assert response.status_code == 409
    assert response.json()["error"] == "conflict"


def test_bad_credentials(client):
    register(client)
    response = client.post("/auth/login", json={"email": "shop@example.com", "password": "wrong-password"})
    assert response.status_code == 401


def test_requests_without_token_are_rejected(client):
    assert client.get("/orders").status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Bearer nope"}).status_code == 401


def test_pending_merchant_cannot_order(client):
    register(client)
    headers = login(client, "shop@example.com", "shop-password")

    response = client.post("/orders", json={"amount": 10, "address": ERC20_ADDRESS}, headers=headers)

    assert response.status_code == 403
    assert client.get("/orders", headers=headers).json() == []


def test_order_lifecycle(client, admin_headers, merchant_headers, notifier):
    response = client.post("/orders", json={"amount": "100", "address": ERC20_ADDRESS}, headers=merchant_headers)
    assert response.status_code == 201, response.text
    order = response.json()
    assert order["status"] == "pending"
    assert order["network"] == "ERC20"
    assert "New payout order" in notifier.messages[-1]

    pending = client.get("/admin/orders/pending", headers=admin_headers).json()
    assert [o["id"] for o in pending] == [order["id"]]
    assert pending[0]["owner_email"] == "shop@example.com"

    response = client.post(f"/orders/{order['id']}/status", json={"status": "completed"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    assert "Payout confirmed" in notifier.messages[-1]

    response = client.post(f"/orders/{order['id']}/status", json={"status": "rejected"}, headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["error"] == "illegal_transition"

    fetched = client.get(f"/orders/{order['id']}", headers=merchant_headers).json()
    assert fetched["status"] == "completed"


@pytest.mark.parametrize("payload,error", [
    ({"amount": 0, "address": ERC20_ADDRESS}, "invalid_input"),
    ({"amount": -3, "address": TRC20_ADDRESS}, "invalid_input"),
    ({"amount": 5, "address": "0x1234"}, "invalid_address"),
])
def test_invalid_orders(client, merchant_headers, payload, error):
    response = client.post("/orders", json=payload, headers=merchant_headers)

    assert response.status_code == 400
    assert response.json()["error"] == error
    assert client.get("/orders", headers=merchant_headers).json() == []


def test_merchant_cannot_use_admin_routes(client, merchant_headers):
    assert client.get("/admin/merchants", headers=merchant_headers).status_code == 403
    assert client.get("/admin/orders/pending", headers=merchant_headers).status_code == 403


def test_admin_moderation(client, admin_headers):
    account = register(client)

    listing = client.get("/admin/merchants", params={"status": "pending"}, headers=admin_headers).json()
    assert [m["id"] for m in listing["merchants"]] == [account["id"]]
    assert listing["counts"]["pending"] == 1

    response = client.post(f"/admin/merchants/{account['id']}/status", json={"status": "suspended"},
                           headers=admin_headers)
    assert response.status_code == 409

    response = client.post(f"/admin/merchants/{account['id']}/status", json={"status": "banned"},
                           headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "banned"

    response = client.post("/auth/login", json={"email": "shop@example.com", "password": "shop-password"})
    assert response.status_code == 403


def test_recharge(client, admin_headers):
    account = register(client)

    response = client.post(f"/admin/merchants/{account['id']}/recharge", json={"amount": "25.5"},
                           headers=admin_headers)
    assert response.status_code == 200
    assert float(response.json()["balance"]) == 25.5

    response = client.post(f"/admin/merchants/{account['id']}/recharge", json={"amount": 0},
                           headers=admin_headers)
    assert response.status_code == 400

    merchant = client.get(f"/admin/merchants/{account['id']}", headers=admin_headers).json()
    assert float(merchant["balance"]) == 25.5

    assert client.post("/admin/merchants/missing/recharge", json={"amount": 1},
                       headers=admin_headers).status_code == 404


def test_suspended_merchant_token_is_refused(client, admin_headers, merchant_headers):
    me = client.get("/auth/me", headers=merchant_headers).json()
    client.post(f"/admin/merchants/{me['id']}/status", json={"status": "suspended"}, headers=admin_headers)

    assert client.get("/auth/me", headers=merchant_headers).status_code == 403


def test_wallet_and_dashboard(client, admin_headers, merchant_headers):
    me = client.get("/auth/me", headers=merchant_headers).json()
    client.post(f"/admin/merchants/{me['id']}/recharge", json={"amount": 10}, headers=admin_headers)

    wallet = client.get("/wallets", headers=merchant_headers).json()
    assert float(wallet["balance"]) == 10

    merchant_stats = client.get("/dashboard/stat", headers=merchant_headers).json()
    assert merchant_stats["status"] == "active"
    assert merchant_stats["balance"] == "10.00000000"

    admin_stats = client.get("/dashboard/stat", headers=admin_headers).json()
    assert admin_stats["merchants"]["active"] == 1
    assert admin_stats["pending_orders"] == 0

    assert client.get("/wallets", headers=admin_headers).status_code == 404


def test_api_keys_and_merchant_api(client, admin_headers, merchant_headers):
    response = client.post("/api-keys", json={"name": "Checkout", "permissions": ["balance"]},
                           headers=merchant_headers)
    assert response.status_code == 201
    key = response.json()
    key_headers = {"X-API-Key": key["api_key"], "X-API-Secret": key["secret_key"]}

    assert client.get("/v1/balance", headers=key_headers).status_code == 200
    response = client.post("/v1/payouts", json={"amount": 1, "address": TRC20_ADDRESS}, headers=key_headers)
    assert response.status_code == 403

    bad_headers = {"X-API-Key": key["api_key"], "X-API-Secret": "sk_wrong"}
    assert client.get("/v1/balance", headers=bad_headers).status_code == 401

    listed = client.get("/api-keys", headers=merchant_headers).json()
    assert "secret_key" not in listed[0]

    response = client.patch(f"/api-keys/{key['id']}", json={"is_active": False}, headers=merchant_headers)
    assert response.json()["is_active"] is False
    assert client.get("/v1/balance", headers=key_headers).status_code == 401

    assert client.delete(f"/api-keys/{key['id']}", headers=merchant_headers).status_code == 204
    assert client.get("/api-keys", headers=merchant_headers).json() == []


def test_payout_via_api_key(client, merchant_headers, notifier):
    key = client.post("/api-keys", json={"name": "Backend"}, headers=merchant_headers).json()
    key_headers = {"X-API-Key": key["api_key"], "X-API-Secret": key["secret_key"]}

    response = client.post("/v1/payouts", json={"amount": "7.25", "address": TRC20_ADDRESS}, headers=key_headers)

    assert response.status_code == 201
    assert response.json()["network"] == "TRC20"
    assert "New payout order" in notifier.messages[-1]


def test_telegram_relay(client, admin_headers, merchant_headers, notifier):
    response = client.post("/notifications/telegram", json={"message": "Maintenance at 02:00"},
                           headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert notifier.messages[-1] == "Maintenance at 02:00"

    response = client.post("/notifications/telegram", json={"message": "hi"}, headers=merchant_headers)
    assert response.status_code == 403
