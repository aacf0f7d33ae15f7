from typing import Optional, List, Dict, Any
from app.db.base import Database
from app.models.roles import AccountRole, initial_status_for_role
import uuid


class AccountRepository:
    """Repository for merchant/admin profile database operations"""

    def __init__(self, db: Database):
        self.db = db

    def create(self, account_data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a new account; status defaults from the role"""
        account_id = str(uuid.uuid4())
        now = self.db.now()
        role = AccountRole(account_data.get('role', AccountRole.MERCHANT.value))

        query = """
            INSERT INTO profiles (
                id, email, password_hash, company_name, contact_person, phone,
                role, status, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """

        params = (
            account_id,
            account_data['email'].strip().lower(),
            account_data['password_hash'],
            account_data.get('company_name'),
            account_data.get('contact_person'),
            account_data.get('phone'),
            role.value,
            account_data.get('status', initial_status_for_role(role).value),
            now,
            now
        )

        self.db.execute_write(query, params)
        return self.get_by_id(account_id)

    def get_by_id(self, account_id: str) -> Optional[Dict[str, Any]]:
        """Get account by ID"""
        query = "SELECT * FROM profiles WHERE id = ?"
        row = self.db.fetch_one(query, (account_id,))
        return self.db.row_to_dict(row) if row else None

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Get account by email (case-insensitive)"""
        query = "SELECT * FROM profiles WHERE email = ? COLLATE NOCASE"
        row = self.db.fetch_one(query, (email.strip().lower(),))
        return self.db.row_to_dict(row) if row else None

    def get_by_ids(self, account_ids: List[str]) -> List[Dict[str, Any]]:
        """Get several accounts at once"""
        if not account_ids:
            return []
        placeholders = ", ".join("?" for _ in account_ids)
        query = f"SELECT * FROM profiles WHERE id IN ({placeholders})"
        rows = self.db.fetch_all(query, tuple(account_ids))
        return [self.db.row_to_dict(row) for row in rows]

    def query(self, role: Optional[str] = None, status: Optional[str] = None,
              limit: int = 100, offset: int = 0) -> List[Dict[str, Any]]:
        """List accounts, newest first, optionally filtered by role and status"""
        clauses = []
        params: List[Any] = []
        if role:
            clauses.append("role = ?")
            params.append(role)
        if status:
            clauses.append("status = ?")
            params.append(status)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        query = f"SELECT * FROM profiles {where} ORDER BY created_at DESC LIMIT ? OFFSET ?"
        rows = self.db.fetch_all(query, tuple(params) + (limit, offset))
        return [self.db.row_to_dict(row) for row in rows]

    def update_status_if(self, account_id: str, expected_status: str, new_status: str,
                         extra: Optional[Dict[str, Any]] = None) -> bool:
        """
        Conditionally update an account's status.

        The write only applies while the stored status still equals
        expected_status. Returns False when no row matched.
        """
        update_data = dict(extra or {})
        update_data['status'] = new_status
        update_data['updated_at'] = self.db.now()

        set_clause = ", ".join([f"{key} = ?" for key in update_data.keys()])
        query = f"UPDATE profiles SET {set_clause} WHERE id = ? AND status = ?"

        params = tuple(update_data.values()) + (account_id, expected_status)
        return self.db.execute_write(query, params) == 1

    def exists(self, email: str) -> bool:
        """Check if an account with email exists"""
        query = "SELECT COUNT(*) FROM profiles WHERE email = ? COLLATE NOCASE"
        count = self.db.fetch_value(query, (email.strip().lower(),))
        return bool(count)

    def count_by_status(self, status: str, role: str = AccountRole.MERCHANT.value) -> int:
        """Count accounts by status"""
        query = "SELECT COUNT(*) FROM profiles WHERE status = ? AND role = ?"
        return self.db.fetch_value(query, (status, role)) or 0

    def delete(self, account_id: str) -> bool:
        """Remove an account row; only used to undo a half-finished registration"""
        query = "DELETE FROM profiles WHERE id = ?"
        return self.db.execute_write(query, (account_id,)) == 1
