"""
Account resolution for the command line and the synchronizers.
"""

import logging
from typing import List, Optional

from .models import Account

logger = logging.getLogger(__name__)


class AccountResolver:
    """Resolves accounts from free-text filters and identifiers."""

    def __init__(self, account_repository):
        self.account_repository = account_repository

    def resolve_accounts(self, account_filter: Optional[str] = None) -> List[Account]:
        """
        Resolve the accounts an operation should run against.

        Without a filter every enabled account is returned. A filter is a
        comma separated list of account names, 12 digit account ids or
        UUIDs; disabled accounts are returned when named explicitly.
        """
        if account_filter is None or not account_filter.strip():
            accounts = self.account_repository.find_enabled_accounts()
        else:
            accounts = self.account_repository.find_accounts_with_filter(account_filter)

        logger.debug(f"Resolved {len(accounts)} accounts for filter {account_filter!r}")
        return accounts

    def resolve_account(self, identifier: str) -> Optional[Account]:
        account = self.account_repository.find_account_by_identifier(identifier)
        if account is None:
            logger.warning(f"No account matches identifier {identifier!r}")
        return account

    def get_enabled_accounts(self) -> List[Account]:
        return self.account_repository.find_enabled_accounts()
