"""
Synchronizer - Bidirectional synchronization between the local mirror and the remote side

This module sequences the pull and push reconcilers under one of the
supported conflict modes and one bidirectional lock that wraps both
sub-operations. The sub-operations keep taking their own pull and push
locks, which use different keys and therefore never collide with the
outer lock.
"""

import logging
from typing import Dict, Optional

from .exceptions import ConfigurationError
from .locking import BIDIRECTIONAL_LOCK_TTL, LockFactory, hold_lock, lock_key
from .models import Account, HostedZone
from .pull import PullReconciler
from .push import PushReconciler

logger = logging.getLogger(__name__)

SYNC_MODES = ("local_wins", "remote_wins", "merge")


class Synchronizer:
    """Entry point for pull, push and bidirectional synchronization."""

    def __init__(
        self,
        pull_reconciler: PullReconciler,
        push_reconciler: PushReconciler,
        lock_factory: LockFactory,
        lock_ttl: float = BIDIRECTIONAL_LOCK_TTL,
    ):
        self.pull_reconciler = pull_reconciler
        self.push_reconciler = push_reconciler
        self.lock_factory = lock_factory
        self.lock_ttl = lock_ttl

    def pull_from_remote(
        self, account: Account, zone: Optional[HostedZone] = None, dry_run: bool = False
    ) -> Dict:
        logger.info(
            f"Starting pull synchronization for account {account.name}"
            f" zone={zone.name if zone else None} dry_run={dry_run}"
        )

        result = self.pull_reconciler.pull_from_remote(account, zone, dry_run)

        logger.info(
            f"Pull synchronization completed for account {account.name}: "
            f"{result.get('zones', 0)} zones, {result.get('records', 0)} records synced"
            f" dry_run={dry_run}"
        )
        return result

    def push_to_remote(
        self, account: Account, zone: Optional[HostedZone] = None, dry_run: bool = False
    ) -> Dict:
        logger.info(
            f"Starting push synchronization for account {account.name}"
            f" zone={zone.name if zone else None} dry_run={dry_run}"
        )

        result = self.push_reconciler.push_to_remote(account, zone, dry_run)

        logger.info(
            f"Push synchronization completed for account {account.name}: "
            f"{len(result.get('changes', []))} changes applied dry_run={dry_run}"
        )
        return result

    def bidirectional_sync(
        self,
        account: Account,
        zone: Optional[HostedZone] = None,
        mode: str = "local_wins",
        dry_run: bool = False,
    ) -> Dict:
        """
        Synchronize both directions under one conflict mode.

        local_wins observes the remote side with a dry-run pull and then
        pushes; remote_wins observes local drift with a dry-run push and
        then pulls; merge runs both as dry runs and hands the outcome to
        conflict resolution.

        Args:
            account: Account to synchronize
            zone: Only synchronize this hosted zone when given
            mode: One of local_wins, remote_wins or merge
            dry_run: Dry-run flag for the authoritative direction

        Returns:
            Dictionary with pull and push results plus conflicts and
            resolved lists

        Raises:
            Route53ClientError: If the bidirectional lock or a
                sub-operation lock is already held
            ConfigurationError: If the mode is not supported
        """
        key = lock_key("bidirectional", account, zone)
        with hold_lock(self.lock_factory, key, self.lock_ttl, "bidirectional"):
            return self._perform_bidirectional_sync(account, zone, mode, dry_run)

    def _perform_bidirectional_sync(
        self, account: Account, zone: Optional[HostedZone], mode: str, dry_run: bool
    ) -> Dict:
        logger.info(
            f"Starting bidirectional synchronization for account {account.name}"
            f" zone={zone.name if zone else None} mode={mode} dry_run={dry_run}"
        )

        result = {"pull": {}, "push": {}, "conflicts": [], "resolved": []}

        if mode == "local_wins":
            result["pull"] = self.pull_from_remote(account, zone, True)
            result["push"] = self.push_to_remote(account, zone, dry_run)
        elif mode == "remote_wins":
            result["push"] = self.push_to_remote(account, zone, True)
            result["pull"] = self.pull_from_remote(account, zone, dry_run)
        elif mode == "merge":
            result["pull"] = self.pull_from_remote(account, zone, True)
            result["push"] = self.push_to_remote(account, zone, True)
            result = self._resolve_merge_conflicts(account, zone, result, dry_run)
        else:
            raise ConfigurationError.unsupported_synchronization_mode(mode)

        logger.info(
            f"Bidirectional synchronization completed for account {account.name}: "
            f"mode={mode} pull_changes={len(result['pull'].get('changes', []))} "
            f"push_changes={len(result['push'].get('changes', []))} "
            f"conflicts={len(result['conflicts'])} dry_run={dry_run}"
        )
        return result

    def _resolve_merge_conflicts(
        self, account: Account, zone: Optional[HostedZone], result: Dict, dry_run: bool
    ) -> Dict:
        # TODO: pick a merge policy (last-write-wins on last_local_modified_at
        # vs last_seen_remote_at, or field level) and fill conflicts/resolved.
        return result
