"""
Base repository interfaces.

This module defines the abstract persistence contracts the synchronizers
depend on. Writes are staged with persist() and become visible to later
queries only after flush().
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..core.models import Account, ChangeLog, HostedZone, RecordSet


class UnitOfWork(ABC):
    """Stages entity writes and commits them in one flush."""

    @abstractmethod
    def persist(self, entity) -> None:
        """Stage a new or modified entity."""
        pass

    @abstractmethod
    def remove(self, entity) -> None:
        """Stage an entity for removal."""
        pass

    @abstractmethod
    def flush(self) -> int:
        """Commit staged writes and return how many entities were written."""
        pass

    @abstractmethod
    def refresh(self, entity) -> None:
        """Discard uncommitted modifications of an entity."""
        pass


class AccountRepository(ABC):
    """Queries over accounts."""

    @abstractmethod
    def find_accounts_with_filter(self, account_filter: Optional[str] = None) -> List[Account]:
        """Find accounts matching comma separated names, account ids or UUIDs."""
        pass

    @abstractmethod
    def find_account_by_identifier(self, identifier: str) -> Optional[Account]:
        """Find the first account whose name, account id or UUID matches."""
        pass

    @abstractmethod
    def find_enabled_accounts(self) -> List[Account]:
        """Find all enabled accounts ordered by name."""
        pass


class HostedZoneRepository(ABC):
    """Queries over hosted zones."""

    @abstractmethod
    def find_one_by_account_and_remote_id(self, account: Account, remote_id: str) -> Optional[HostedZone]:
        pass

    @abstractmethod
    def find_by_account(self, account: Account) -> List[HostedZone]:
        pass


class RecordSetRepository(ABC):
    """Queries over record sets."""

    @abstractmethod
    def find_one_by_zone_name_type_and_set_identifier(
        self, zone: HostedZone, name: str, type: str, set_identifier: Optional[str] = None
    ) -> Optional[RecordSet]:
        pass

    @abstractmethod
    def find_by_zone(self, zone: HostedZone) -> List[RecordSet]:
        pass


class ChangeLogRepository(ABC):
    """Queries over the change audit trail."""

    @abstractmethod
    def find_by_plan_id(self, plan_id: str) -> List[ChangeLog]:
        pass

    @abstractmethod
    def find_by_account(self, account: Account) -> List[ChangeLog]:
        pass
