"""
In-memory persistence for the local mirror.

InMemoryStore keeps committed entity snapshots separate from the live
objects handed out by the repositories, so staged modifications stay
invisible to the committed state until flush() and can be thrown away
with refresh().
"""

import copy
import logging
import threading
import uuid
from dataclasses import fields
from typing import Callable, Dict, List, Optional, Tuple

from ..core.models import Account, ChangeLog, HostedZone, RecordSet
from ..utils.validators import is_uuid
from .base import (
    AccountRepository,
    ChangeLogRepository,
    HostedZoneRepository,
    RecordSetRepository,
    UnitOfWork,
)

logger = logging.getLogger(__name__)

ENTITY_TYPES = (Account, HostedZone, RecordSet, ChangeLog)

EntityKey = Tuple[type, uuid.UUID]


def _key(entity) -> EntityKey:
    return type(entity), entity.id


class InMemoryStore(UnitOfWork):
    """Unit of work over committed in-memory rows."""

    def __init__(self):
        self._rows: Dict[type, Dict[uuid.UUID, object]] = {}
        self._managed: Dict[EntityKey, object] = {}
        self._staged: Dict[EntityKey, object] = {}
        self._removed: Dict[EntityKey, object] = {}
        self._mutex = threading.RLock()

    def persist(self, entity) -> None:
        with self._mutex:
            key = _key(entity)
            self._managed[key] = entity
            self._staged[key] = entity
            self._removed.pop(key, None)

    def remove(self, entity) -> None:
        with self._mutex:
            key = _key(entity)
            self._staged.pop(key, None)
            self._removed[key] = entity

    def flush(self) -> int:
        with self._mutex:
            written = 0
            for (entity_type, entity_id), entity in self._staged.items():
                self._rows.setdefault(entity_type, {})[entity_id] = self._snapshot(entity)
                written += 1
            for (entity_type, entity_id) in self._removed:
                if self._rows.get(entity_type, {}).pop(entity_id, None) is not None:
                    written += 1
                self._managed.pop((entity_type, entity_id), None)
            self._staged.clear()
            self._removed.clear()
            logger.debug(f"Flushed {written} entities")
            return written

    def refresh(self, entity) -> None:
        with self._mutex:
            key = _key(entity)
            self._staged.pop(key, None)
            self._removed.pop(key, None)
            row = self._rows.get(key[0], {}).get(key[1])
            if row is None:
                self._managed.pop(key, None)
                return
            self._restore(entity, row)
            self._managed[key] = entity

    def clear(self) -> None:
        """Detach every live object and drop staged writes."""
        with self._mutex:
            self._managed.clear()
            self._staged.clear()
            self._removed.clear()

    def count(self, entity_type: type) -> int:
        """Number of committed rows of a type."""
        with self._mutex:
            return len(self._rows.get(entity_type, {}))

    def find(self, entity_type: type, predicate: Optional[Callable] = None) -> List:
        """Query committed rows and return the live objects for the matches.

        The predicate is evaluated against committed state, so relations
        should be compared by id.
        """
        with self._mutex:
            results = []
            for entity_id, row in list(self._rows.get(entity_type, {}).items()):
                if predicate is None or predicate(row):
                    results.append(self._load(entity_type, entity_id))
            return results

    def find_one(self, entity_type: type, predicate: Callable):
        matches = self.find(entity_type, predicate)
        return matches[0] if matches else None

    def _load(self, entity_type: type, entity_id: uuid.UUID):
        key = (entity_type, entity_id)
        if key in self._managed:
            return self._managed[key]
        row = self._rows[entity_type][entity_id]
        entity = copy.copy(row)
        self._restore(entity, row)
        self._managed[key] = entity
        return entity

    def _snapshot(self, entity):
        row = copy.copy(entity)
        for f in fields(entity):
            value = getattr(entity, f.name)
            if isinstance(value, (dict, list)):
                row.__dict__[f.name] = copy.deepcopy(value)
        return row

    def _restore(self, entity, row) -> None:
        for f in fields(row):
            value = getattr(row, f.name)
            if isinstance(value, ENTITY_TYPES):
                value = self._resolve(value)
            elif isinstance(value, (dict, list)):
                value = copy.deepcopy(value)
            entity.__dict__[f.name] = value

    def _resolve(self, related):
        entity_type, entity_id = _key(related)
        if entity_id in self._rows.get(entity_type, {}):
            return self._load(entity_type, entity_id)
        return related


class _InMemoryRepository:
    entity_type: type = object

    def __init__(self, store: InMemoryStore):
        self.store = store

    def find_all(self) -> List:
        return self.store.find(self.entity_type)

    def save(self, entity, flush: bool = True) -> None:
        self.store.persist(entity)
        if flush:
            self.store.flush()

    def remove(self, entity, flush: bool = True) -> None:
        self.store.remove(entity)
        if flush:
            self.store.flush()


class InMemoryAccountRepository(_InMemoryRepository, AccountRepository):
    entity_type = Account

    def find_accounts_with_filter(self, account_filter: Optional[str] = None) -> List[Account]:
        if account_filter is None or not account_filter.strip():
            accounts = self.store.find(Account)
        else:
            tokens = [token.strip() for token in account_filter.split(",") if token.strip()]
            accounts = self.store.find(
                Account, lambda a: any(_matches_identifier(a, token) for token in tokens)
            )
        return sorted(accounts, key=lambda a: a.name)

    def find_account_by_identifier(self, identifier: str) -> Optional[Account]:
        return self.store.find_one(Account, lambda a: _matches_identifier(a, identifier))

    def find_enabled_accounts(self) -> List[Account]:
        return sorted(self.store.find(Account, lambda a: a.enabled), key=lambda a: a.name)


class InMemoryHostedZoneRepository(_InMemoryRepository, HostedZoneRepository):
    entity_type = HostedZone

    def find_one_by_account_and_remote_id(self, account: Account, remote_id: str) -> Optional[HostedZone]:
        return self.store.find_one(
            HostedZone, lambda z: z.account.id == account.id and z.remote_id == remote_id
        )

    def find_by_account(self, account: Account) -> List[HostedZone]:
        return self.store.find(HostedZone, lambda z: z.account.id == account.id)


class InMemoryRecordSetRepository(_InMemoryRepository, RecordSetRepository):
    entity_type = RecordSet

    def find_one_by_zone_name_type_and_set_identifier(
        self, zone: HostedZone, name: str, type: str, set_identifier: Optional[str] = None
    ) -> Optional[RecordSet]:
        return self.store.find_one(
            RecordSet,
            lambda r: r.zone.id == zone.id
            and r.name == name
            and r.type == type
            and r.set_identifier == set_identifier,
        )

    def find_by_zone(self, zone: HostedZone) -> List[RecordSet]:
        return self.store.find(RecordSet, lambda r: r.zone.id == zone.id)


class InMemoryChangeLogRepository(_InMemoryRepository, ChangeLogRepository):
    entity_type = ChangeLog

    def find_by_plan_id(self, plan_id: str) -> List[ChangeLog]:
        return self.store.find(ChangeLog, lambda c: c.plan_id == plan_id)

    def find_by_account(self, account: Account) -> List[ChangeLog]:
        return self.store.find(ChangeLog, lambda c: c.account.id == account.id)


def _matches_identifier(account: Account, identifier: str) -> bool:
    if account.name == identifier or account.account_id == identifier:
        return True
    return is_uuid(identifier) and str(account.id) == identifier.lower()
