from typing import Optional, List, Dict, Any
from app.db.base import Database
import uuid


class ApiKeyRepository:
    """Repository for merchant API key records"""

    def __init__(self, db: Database):
        self.db = db

    def _to_record(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return self.db.row_to_dict(row, json_fields=["permissions"])

    def create(self, merchant_id: str, name: str, api_key: str, secret_key_hash: str,
               permissions: List[str]) -> Dict[str, Any]:
        key_id = str(uuid.uuid4())
        query = """
            INSERT INTO api_keys (id, merchant_id, name, api_key, secret_key_hash,
                                  is_active, permissions, created_at)
            VALUES (?, ?, ?, ?, ?, 1, ?, ?)
        """
        params = (
            key_id,
            merchant_id,
            name,
            api_key,
            secret_key_hash,
            self.db.to_json(permissions) or "[]",
            self.db.now()
        )
        self.db.execute_write(query, params)
        return self.get_by_id(key_id)

    def get_by_id(self, key_id: str) -> Optional[Dict[str, Any]]:
        row = self.db.fetch_one("SELECT * FROM api_keys WHERE id = ?", (key_id,))
        return self._to_record(row) if row else None

    def get_by_api_key(self, api_key: str) -> Optional[Dict[str, Any]]:
        row = self.db.fetch_one("SELECT * FROM api_keys WHERE api_key = ?", (api_key,))
        return self._to_record(row) if row else None

    def list_for_merchant(self, merchant_id: str) -> List[Dict[str, Any]]:
        query = "SELECT * FROM api_keys WHERE merchant_id = ? ORDER BY created_at DESC"
        rows = self.db.fetch_all(query, (merchant_id,))
        return [self._to_record(row) for row in rows]

    def set_active(self, key_id: str, merchant_id: str, is_active: bool) -> bool:
        query = "UPDATE api_keys SET is_active = ? WHERE id = ? AND merchant_id = ?"
        return self.db.execute_write(query, (1 if is_active else 0, key_id, merchant_id)) == 1

    def touch(self, key_id: str) -> None:
        """Record a use of the key"""
        self.db.execute_write("UPDATE api_keys SET last_used_at = ? WHERE id = ?", (self.db.now(), key_id))

    def delete(self, key_id: str, merchant_id: str) -> bool:
        query = "DELETE FROM api_keys WHERE id = ? AND merchant_id = ?"
        return self.db.execute_write(query, (key_id, merchant_id)) == 1
