"""
Merchant API key management.

The secret is generated once, returned once, and only its SHA-256 digest is
stored.
"""

import hashlib
import hmac
import logging
import secrets
from typing import Any, Dict, List, Optional

from app.core.exceptions import InvalidInput, NotFound, Unauthorized
from app.db.repositories import ApiKeyRepository
from app.models.roles import AccountRole, AccountStatus, ApiKeyPermission, DEFAULT_API_KEY_PERMISSIONS

logger = logging.getLogger(__name__)

API_KEY_PREFIX = "ak_"
SECRET_KEY_PREFIX = "sk_"
MAX_KEY_NAME_LENGTH = 100


def generate_api_key() -> str:
    return API_KEY_PREFIX + secrets.token_hex(16)


def generate_secret_key() -> str:
    return SECRET_KEY_PREFIX + secrets.token_urlsafe(32)


def hash_secret(secret: str) -> str:
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


class ApiKeyService:

    def __init__(self, db):
        self.keys = ApiKeyRepository(db)

    def _require_merchant(self, actor: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        if not actor:
            raise Unauthorized("Authentication is required")
        if actor.get("role") != AccountRole.MERCHANT.value:
            raise Unauthorized("Only merchant accounts own API keys")
        if actor.get("status") != AccountStatus.ACTIVE.value:
            raise Unauthorized(f"Account is {actor.get('status')}; API keys require an active account")
        return actor

    def create_key(self, actor: Optional[Dict[str, Any]], name: str,
                   permissions: Optional[List[str]] = None) -> Dict[str, Any]:
        """Create a key; the returned record carries the plain secret_key exactly once"""
        merchant = self._require_merchant(actor)

        name = (name or "").strip()
        if not name:
            raise InvalidInput("API key name is required")
        if len(name) > MAX_KEY_NAME_LENGTH:
            raise InvalidInput(f"API key name must be at most {MAX_KEY_NAME_LENGTH} characters")

        if permissions is None:
            granted = [p.value for p in DEFAULT_API_KEY_PERMISSIONS]
        else:
            try:
                granted = sorted({ApiKeyPermission(p).value for p in permissions})
            except ValueError:
                allowed = ", ".join(p.value for p in ApiKeyPermission)
                raise InvalidInput(f"Unknown API key permission; allowed: {allowed}")
            if not granted:
                raise InvalidInput("At least one permission is required")

        secret = generate_secret_key()
        record = self.keys.create(
            merchant_id=merchant["id"],
            name=name,
            api_key=generate_api_key(),
            secret_key_hash=hash_secret(secret),
            permissions=granted,
        )
        logger.info(f"API key {record['id']} created for merchant {merchant['id']}")

        result = public_view(record)
        result["secret_key"] = secret
        return result

    def list_keys(self, actor: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
        merchant = self._require_merchant(actor)
        return [public_view(record) for record in self.keys.list_for_merchant(merchant["id"])]

    def set_active(self, actor: Optional[Dict[str, Any]], key_id: str, is_active: bool) -> Dict[str, Any]:
        merchant = self._require_merchant(actor)
        if not self.keys.set_active(key_id, merchant["id"], is_active):
            raise NotFound("API key", key_id)
        return public_view(self.keys.get_by_id(key_id))

    def delete_key(self, actor: Optional[Dict[str, Any]], key_id: str) -> None:
        merchant = self._require_merchant(actor)
        if not self.keys.delete(key_id, merchant["id"]):
            raise NotFound("API key", key_id)
        logger.info(f"API key {key_id} deleted by merchant {merchant['id']}")

    def verify(self, api_key: str, secret: str) -> Optional[Dict[str, Any]]:
        """Return the active key record matching the credentials, recording its use"""
        record = self.keys.get_by_api_key(api_key)
        if not record or not record["is_active"]:
            return None
        if not hmac.compare_digest(record["secret_key_hash"], hash_secret(secret)):
            return None
        self.keys.touch(record["id"])
        return public_view(record)


def public_view(record: Dict[str, Any]) -> Dict[str, Any]:
    """A key record without its secret digest"""
    return {key: value for key, value in record.items() if key != "secret_key_hash"}
