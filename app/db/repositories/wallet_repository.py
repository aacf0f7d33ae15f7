from typing import Optional, List, Dict, Any
from decimal import Decimal
from app.db.base import Database
from app.core.amounts import MAX_BALANCE_UNITS, from_units, to_units
import uuid

AMOUNT_FIELDS = ("balance", "frozen_balance", "total_deposit", "total_payout")


class WalletRepository:
    """Repository for merchant wallet ledger rows"""

    def __init__(self, db: Database):
        self.db = db

    def _to_record(self, row: Dict[str, Any]) -> Dict[str, Any]:
        record = self.db.row_to_dict(row)
        for field in AMOUNT_FIELDS:
            record[field] = from_units(record.get(field))
        return record

    def create(self, merchant_id: str) -> Dict[str, Any]:
        """Create an empty wallet for a merchant"""
        now = self.db.now()
        query = """
            INSERT INTO wallets (id, merchant_id, balance, frozen_balance, total_deposit,
                                 total_payout, created_at, updated_at)
            VALUES (?, ?, 0, 0, 0, 0, ?, ?)
        """
        self.db.execute_write(query, (str(uuid.uuid4()), merchant_id, now, now))
        return self.get_by_merchant(merchant_id)

    def get_by_merchant(self, merchant_id: str) -> Optional[Dict[str, Any]]:
        query = "SELECT * FROM wallets WHERE merchant_id = ?"
        row = self.db.fetch_one(query, (merchant_id,))
        return self._to_record(row) if row else None

    def get_by_merchants(self, merchant_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        """Map merchant id -> wallet for several merchants"""
        if not merchant_ids:
            return {}
        placeholders = ", ".join("?" for _ in merchant_ids)
        query = f"SELECT * FROM wallets WHERE merchant_id IN ({placeholders})"
        rows = self.db.fetch_all(query, tuple(merchant_ids))
        return {row["merchant_id"]: self._to_record(row) for row in rows}

    def credit(self, merchant_id: str, amount: Decimal) -> bool:
        """
        Atomically add amount to balance and total_deposit.

        A single UPDATE statement, so concurrent credits cannot lose each
        other's writes. Returns False when the merchant has no wallet or
        when either total would pass MAX_BALANCE_UNITS.
        """
        units = to_units(amount)
        headroom = MAX_BALANCE_UNITS - units
        query = """
            UPDATE wallets
            SET balance = balance + ?, total_deposit = total_deposit + ?, updated_at = ?
            WHERE merchant_id = ? AND balance <= ? AND total_deposit <= ?
        """
        params = (units, units, self.db.now(), merchant_id, headroom, headroom)
        return self.db.execute_write(query, params) == 1
