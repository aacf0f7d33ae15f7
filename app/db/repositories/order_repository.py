from typing import Optional, List, Dict, Any
from decimal import Decimal
from app.db.base import Database
from app.core.amounts import from_units, to_units
from app.models.roles import OrderStatus
import uuid


class OrderRepository:
    """Repository for payout order database operations"""

    def __init__(self, db: Database):
        self.db = db

    def _to_record(self, row: Dict[str, Any]) -> Dict[str, Any]:
        record = self.db.row_to_dict(row)
        record["amount"] = from_units(record["amount"])
        return record

    def create(self, owner_id: str, amount: Decimal, address: str, network: str) -> Dict[str, Any]:
        """Insert a new pending order"""
        order_id = str(uuid.uuid4())
        now = self.db.now()

        query = """
            INSERT INTO orders (id, owner_id, amount, address, network, status, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """
        params = (
            order_id,
            owner_id,
            to_units(amount),
            address,
            network,
            OrderStatus.PENDING.value,
            now,
            now
        )
        self.db.execute_write(query, params)
        return self.get_by_id(order_id)

    def get_by_id(self, order_id: str) -> Optional[Dict[str, Any]]:
        """Get order by ID"""
        query = "SELECT * FROM orders WHERE id = ?"
        row = self.db.fetch_one(query, (order_id,))
        return self._to_record(row) if row else None

    def query(self, owner_id: Optional[str] = None, status: Optional[str] = None,
              limit: int = 100, offset: int = 0) -> List[Dict[str, Any]]:
        """List orders, newest first"""
        clauses = []
        params: List[Any] = []
        if owner_id:
            clauses.append("owner_id = ?")
            params.append(owner_id)
        if status:
            clauses.append("status = ?")
            params.append(status)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        query = f"SELECT * FROM orders {where} ORDER BY created_at DESC LIMIT ? OFFSET ?"
        rows = self.db.fetch_all(query, tuple(params) + (limit, offset))
        return [self._to_record(row) for row in rows]

    def update_status_if(self, order_id: str, expected_status: str, new_status: str,
                         processed_by: Optional[str] = None) -> bool:
        """
        Compare-and-set an order's status.

        Only status and the processing metadata change. Returns False if the
        order is missing or its status is no longer expected_status.
        """
        now = self.db.now()
        query = """
            UPDATE orders
            SET status = ?, processed_at = ?, processed_by = ?, updated_at = ?
            WHERE id = ? AND status = ?
        """
        params = (new_status, now, processed_by, now, order_id, expected_status)
        return self.db.execute_write(query, params) == 1

    def count_by_status(self, status: str) -> int:
        query = "SELECT COUNT(*) FROM orders WHERE status = ?"
        return self.db.fetch_value(query, (status,)) or 0
