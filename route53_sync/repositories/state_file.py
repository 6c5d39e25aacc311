"""
YAML state file for the in-memory store.

Hosted zones, record sets and change logs are written to a YAML document
between command line runs. Accounts are not stored; they come from
configuration and are referenced by id, so the account entities must be
in the store before load() is called.
"""

import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

import yaml

from ..core.models import Account, ChangeLog, HostedZone, RecordSet
from .memory import InMemoryStore

logger = logging.getLogger(__name__)

STATE_VERSION = 1

_TIMESTAMPS = {
    HostedZone: ("last_sync_at",),
    RecordSet: ("last_local_modified_at", "last_seen_remote_at"),
    ChangeLog: ("applied_at",),
}


class StateFile:
    """Loads and saves the local mirror to a YAML file."""

    def __init__(self, path: str):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self, store: InMemoryStore) -> int:
        """
        Load zones, records and change logs into the store.

        Entries referring to an account or zone that is not known are
        skipped with a warning.

        Returns:
            Number of entities loaded
        """
        if not self.path.exists():
            logger.info(f"State file {self.path} not found, starting with an empty mirror")
            return 0

        with open(self.path, "r") as f:
            state = yaml.safe_load(f) or {}

        accounts = {str(a.id): a for a in store.find(Account)}
        zones: Dict[str, HostedZone] = {}
        loaded = 0

        for row in state.get("zones", []):
            account = accounts.get(row.pop("account", None))
            if account is None:
                logger.warning(f"Skipping zone {row.get('name')}: account not configured")
                continue
            zone = HostedZone(account=account, **self._restore(HostedZone, row))
            zones[str(zone.id)] = zone
            store.persist(zone)
            loaded += 1

        for row in state.get("records", []):
            zone = zones.get(row.pop("zone", None))
            if zone is None:
                logger.warning(f"Skipping record {row.get('name')} {row.get('type')}: zone not loaded")
                continue
            store.persist(RecordSet(zone=zone, **self._restore(RecordSet, row)))
            loaded += 1

        for row in state.get("changes", []):
            account = accounts.get(row.pop("account", None))
            if account is None:
                logger.warning(f"Skipping change {row.get('record_key')}: account not configured")
                continue
            zone = zones.get(row.pop("zone", None))
            store.persist(ChangeLog(account=account, zone=zone, **self._restore(ChangeLog, row)))
            loaded += 1

        store.flush()
        logger.info(f"Loaded {loaded} entities from state file {self.path}")
        return loaded

    def save(self, store: InMemoryStore) -> None:
        """Write the committed zones, records and change logs of the store."""
        state = {
            "version": STATE_VERSION,
            "zones": [z.to_dict() for z in store.find(HostedZone)],
            "records": [r.to_dict() for r in store.find(RecordSet)],
            "changes": [c.to_dict() for c in store.find(ChangeLog)],
        }

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            yaml.safe_dump(state, f, default_flow_style=False, sort_keys=False)

        logger.info(
            f"Saved {len(state['zones'])} zones, {len(state['records'])} records and "
            f"{len(state['changes'])} changes to {self.path}"
        )

    def _restore(self, entity_type: type, row: Dict) -> Dict:
        row = dict(row)
        row["id"] = uuid.UUID(row["id"])
        for name in _TIMESTAMPS.get(entity_type, ()):
            row[name] = _parse_timestamp(row.get(name))
        return row


def _parse_timestamp(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)
