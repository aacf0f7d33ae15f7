"""
Merchant account moderation: approval, suspension, bans and wallet recharges.
"""

import logging
from typing import Any, Dict, List, Optional

from app.core.amounts import parse_amount
from app.core.exceptions import IllegalTransition, InvalidInput, NotFound
from app.core.status_policy import check_account_transition, require_moderator
from app.db.repositories import AccountRepository, WalletRepository
from app.models.roles import AccountRole, AccountStatus

logger = logging.getLogger(__name__)


class ModerationService:

    def __init__(self, db):
        self.db = db
        self.accounts = AccountRepository(db)
        self.wallets = WalletRepository(db)

    def set_account_status(self, actor: Optional[Dict[str, Any]], target_account_id: str,
                           target_status: Any) -> Dict[str, Any]:
        """
        Change a merchant account's status.

        Activation stamps approved_at/approved_by. Admin accounts are outside
        the approval lifecycle and cannot be moderated.
        """
        require_moderator(actor)

        try:
            target = AccountStatus(target_status)
        except ValueError:
            raise InvalidInput(f"Unknown account status '{target_status}'")

        account = self.accounts.get_by_id(target_account_id)
        if not account:
            raise NotFound("account", target_account_id)

        if account["role"] == AccountRole.ADMIN.value:
            raise IllegalTransition("admin account", account["status"], target.value)

        check_account_transition(account["status"], target)

        extra = {}
        if target == AccountStatus.ACTIVE:
            extra = {"approved_at": self.db.now(), "approved_by": actor.get("id")}

        if not self.accounts.update_status_if(target_account_id, account["status"], target.value, extra):
            current = self.accounts.get_by_id(target_account_id)
            if not current:
                raise NotFound("account", target_account_id)
            raise IllegalTransition("account", current["status"], target.value)

        logger.info(f"Account {target_account_id} {account['status']} -> {target.value} by {actor.get('id')}")
        return self.get_account(actor, target_account_id)

    def recharge(self, actor: Optional[Dict[str, Any]], target_account_id: str, amount: Any) -> Dict[str, Any]:
        """
        Credit a merchant wallet.

        The credit is one atomic increment in the store, so concurrent
        recharges to the same wallet all land.
        """
        require_moderator(actor)
        parsed_amount = parse_amount(amount)

        account = self.accounts.get_by_id(target_account_id)
        if not account:
            raise NotFound("account", target_account_id)

        if not self.wallets.credit(target_account_id, parsed_amount):
            if self.wallets.get_by_merchant(target_account_id) is None:
                raise NotFound("wallet", target_account_id)
            raise InvalidInput("Recharge would exceed the maximum wallet balance")

        wallet = self.wallets.get_by_merchant(target_account_id)
        logger.info(f"Recharged {parsed_amount} USDT to {target_account_id} by {actor.get('id')}")
        return wallet

    def get_account(self, actor: Optional[Dict[str, Any]], account_id: str) -> Dict[str, Any]:
        require_moderator(actor)

        account = self.accounts.get_by_id(account_id)
        if not account:
            raise NotFound("account", account_id)
        return with_wallet(account, self.wallets.get_by_merchant(account_id))

    def list_merchants(self, actor: Optional[Dict[str, Any]], status: Optional[str] = None,
                       limit: int = 100, offset: int = 0) -> List[Dict[str, Any]]:
        """Merchants with their wallet summary, newest first"""
        require_moderator(actor)

        if status is not None:
            try:
                status = AccountStatus(status).value
            except ValueError:
                raise InvalidInput(f"Unknown account status '{status}'")

        merchants = self.accounts.query(role=AccountRole.MERCHANT.value, status=status,
                                        limit=limit, offset=offset)
        wallets = self.wallets.get_by_merchants([m["id"] for m in merchants])
        return [with_wallet(m, wallets.get(m["id"])) for m in merchants]

    def merchant_counts(self, actor: Optional[Dict[str, Any]]) -> Dict[str, int]:
        require_moderator(actor)
        return {status.value: self.accounts.count_by_status(status.value) for status in AccountStatus}


def with_wallet(account: Dict[str, Any], wallet: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Attach the wallet and mirror its balance onto the account record"""
    result = {key: value for key, value in account.items() if key != "password_hash"}
    result["wallet"] = wallet
    result["balance"] = wallet["balance"] if wallet else None
    return result
