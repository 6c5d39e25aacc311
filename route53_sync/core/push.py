"""
Push Reconciler - Propagate local record set changes to the remote side

This module walks the local record sets of each hosted zone, skips
system-managed records and reports every record whose local fingerprint
diverges from the last confirmed remote fingerprint as an upsert. A
failing zone is recorded in the result and does not stop the others.
"""

import logging
import uuid
from typing import Dict, List, Optional

from .fingerprint import has_local_changes
from .locking import PUSH_LOCK_TTL, LockFactory, hold_lock, lock_key
from .models import Account, ChangeLog, HostedZone, RecordSet, utcnow

logger = logging.getLogger(__name__)


class PushReconciler:
    """Pushes pending local record set changes to the remote side."""

    def __init__(
        self,
        client_factory,
        store,
        zone_repository,
        record_repository,
        lock_factory: LockFactory,
        lock_ttl: float = PUSH_LOCK_TTL,
    ):
        self.client_factory = client_factory
        self.store = store
        self.zone_repository = zone_repository
        self.record_repository = record_repository
        self.lock_factory = lock_factory
        self.lock_ttl = lock_ttl

    def push_to_remote(
        self, account: Account, zone: Optional[HostedZone] = None, dry_run: bool = False
    ) -> Dict:
        """
        Push locally changed record sets of an account.

        Args:
            account: Account to push
            zone: Only push this hosted zone when given
            dry_run: Report pending changes without marking them applied

        Returns:
            Dictionary with the list of upsert changes and per-zone errors

        Raises:
            Route53ClientError: If the push lock is already held
        """
        key = lock_key("push", account, zone)
        with hold_lock(self.lock_factory, key, self.lock_ttl, "push"):
            return self._perform_push(account, zone, dry_run)

    def _perform_push(self, account: Account, zone: Optional[HostedZone], dry_run: bool) -> Dict:
        result = {"changes": [], "errors": []}

        try:
            self.client_factory.get_or_create_client(account)
        except Exception as e:
            # No client means no zone can be pushed.
            for current_zone in self._candidate_zones(account, zone):
                self._record_error(result, current_zone, e)
            return result

        plan_id = str(uuid.uuid4())
        for current_zone in self._candidate_zones(account, zone):
            staged: List = []
            try:
                self._push_zone_changes(account, current_zone, result, dry_run, plan_id, staged)
            except Exception as e:
                for entity in staged:
                    self.store.refresh(entity)
                self._record_error(result, current_zone, e)

        return result

    def _candidate_zones(self, account: Account, zone: Optional[HostedZone]) -> List[HostedZone]:
        if zone is not None:
            return [zone]
        return self.zone_repository.find_by_account(account)

    def _push_zone_changes(
        self,
        account: Account,
        zone: HostedZone,
        result: Dict,
        dry_run: bool,
        plan_id: str,
        staged: List,
    ) -> None:
        changes = []
        for record in self.record_repository.find_by_zone(zone):
            if record.managed_by_system:
                continue

            if not has_local_changes(record.local_fingerprint, record.remote_fingerprint):
                continue

            changes.append(
                {
                    "action": "upsert",
                    "zone": zone.name,
                    "record": f"{record.name} {record.type}",
                    "dry_run": dry_run,
                }
            )

            if not dry_run:
                # Staged before it is mutated
                staged.append(record)
                staged.append(self._mark_applied(account, zone, record, plan_id))

        if not dry_run:
            for entity in staged:
                self.store.persist(entity)
            self.store.flush()

        # Only zones that flushed report their changes
        result["changes"].extend(changes)

    def _mark_applied(
        self, account: Account, zone: HostedZone, record: RecordSet, plan_id: str
    ) -> ChangeLog:
        change = ChangeLog(
            account=account,
            zone=zone,
            record_key=record.record_key,
            action="UPSERT",
            before={"fingerprint": record.remote_fingerprint},
            after={"fingerprint": record.local_fingerprint},
            plan_id=plan_id,
        )

        record.remote_fingerprint = record.local_fingerprint
        record.last_seen_remote_at = utcnow()
        change.mark_applied()

        logger.info(f"Applied upsert for {record.record_key} in zone {zone.name}")
        return change

    def _record_error(self, result: Dict, zone: HostedZone, error: Exception) -> None:
        result["errors"].append({"zone": zone.name, "error": str(error)})
        logger.error(f"Failed to push zone changes for {zone.name}: {error}")
