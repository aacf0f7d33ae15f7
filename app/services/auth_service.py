"""
Account registration and credential checks.
"""

import logging
from typing import Any, Dict, Optional

from app.core.exceptions import Conflict, GatewayError, InvalidInput, Unauthorized
from app.core.security import get_password_hash, verify_password
from app.db.repositories import AccountRepository, WalletRepository
from app.models.roles import AccountRole, AccountStatus

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class AuthService:

    def __init__(self, db):
        self.accounts = AccountRepository(db)
        self.wallets = WalletRepository(db)

    def register_merchant(self, email: str, password: str, company_name: Optional[str] = None,
                          contact_person: Optional[str] = None, phone: Optional[str] = None) -> Dict[str, Any]:
        """Create a pending merchant account together with its empty wallet"""
        if not company_name or not company_name.strip():
            raise InvalidInput("Company name is required")
        if not contact_person or not contact_person.strip():
            raise InvalidInput("Contact person is required")

        account = self._create_account(
            email=email,
            password=password,
            role=AccountRole.MERCHANT,
            company_name=company_name.strip(),
            contact_person=contact_person.strip(),
            phone=phone.strip() if phone else None,
        )
        try:
            self.wallets.create(account["id"])
        except GatewayError as e:
            # Merchant accounts always own a wallet
            logger.error(f"Wallet creation failed for {account['id']}, removing account: {e.message}")
            self.accounts.delete(account["id"])
            raise
        logger.info(f"Merchant {account['id']} registered, awaiting approval")
        return account

    def create_admin(self, email: str, password: str, contact_person: Optional[str] = None) -> Dict[str, Any]:
        """Provision an active admin account (no wallet)"""
        account = self._create_account(
            email=email,
            password=password,
            role=AccountRole.ADMIN,
            contact_person=contact_person,
        )
        logger.info(f"Admin {account['id']} provisioned")
        return account

    def _create_account(self, email: str, password: str, role: AccountRole, **profile) -> Dict[str, Any]:
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidInput(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        if self.accounts.exists(email):
            raise Conflict("Email already registered")

        try:
            return self.accounts.create({
                "email": email,
                "password_hash": get_password_hash(password),
                "role": role.value,
                **profile,
            })
        except Conflict:
            # Lost a race with a concurrent registration of the same email
            raise Conflict("Email already registered")

    def authenticate(self, email: str, password: str) -> Dict[str, Any]:
        """
        Check credentials.

        Pending merchants may sign in to see their approval state; suspended
        and banned accounts are refused.
        """
        account = self.accounts.get_by_email(email)
        if not account or not verify_password(password, account["password_hash"]):
            raise Unauthorized("Incorrect email or password")

        if account["status"] in (AccountStatus.SUSPENDED.value, AccountStatus.BANNED.value):
            raise Unauthorized(f"Account is {account['status']}")

        return account
