"""
Pull Reconciler - Mirror remote hosted zones and record sets locally

This module fetches hosted zones and their resource record sets from the
remote provider and upserts the local mirror entities. Remote failures
for one zone are logged and skipped so that the rest of the pull still
completes; all writes are committed in a single flush at the end.
"""

import logging
from typing import Dict, List, Optional

from ..utils.validators import normalize_zone_id
from .locking import PULL_LOCK_TTL, LockFactory, hold_lock, lock_key
from .models import SYSTEM_MANAGED_TYPES, Account, HostedZone, RecordSet, utcnow

logger = logging.getLogger(__name__)


class PullReconciler:
    """Pulls remote DNS state into the local mirror."""

    def __init__(
        self,
        client_factory,
        store,
        zone_repository,
        record_repository,
        lock_factory: LockFactory,
        lock_ttl: float = PULL_LOCK_TTL,
    ):
        self.client_factory = client_factory
        self.store = store
        self.zone_repository = zone_repository
        self.record_repository = record_repository
        self.lock_factory = lock_factory
        self.lock_ttl = lock_ttl

    def pull_from_remote(
        self, account: Account, zone: Optional[HostedZone] = None, dry_run: bool = False
    ) -> Dict:
        """
        Pull hosted zones and record sets of an account from the remote side.

        Args:
            account: Account to pull
            zone: Only pull this hosted zone when given
            dry_run: Report what would be mirrored without saving anything

        Returns:
            Dictionary with synced zone and record counts and the list of
            record changes

        Raises:
            Route53ClientError: If the pull lock is already held
        """
        key = lock_key("pull", account, zone)
        with hold_lock(self.lock_factory, key, self.lock_ttl, "pull"):
            return self._perform_pull(account, zone, dry_run)

    def _perform_pull(self, account: Account, zone: Optional[HostedZone], dry_run: bool) -> Dict:
        client = self.client_factory.get_or_create_client(account)
        result = {"zones": 0, "records": 0, "changes": []}
        touched: List = []

        if zone is not None:
            self._pull_zone(client, account, zone, result, touched)
        else:
            self._pull_all_zones(client, account, result, touched)

        if dry_run:
            for entity in touched:
                self.store.refresh(entity)
        else:
            for entity in touched:
                self.store.persist(entity)
            self.store.flush()

        return result

    def _pull_all_zones(self, client, account: Account, result: Dict, touched: List) -> None:
        try:
            remote_zones = client.list_hosted_zones()
        except Exception as e:
            logger.warning(f"Failed to list hosted zones for account {account.name}: {e}")
            return

        for remote_zone in remote_zones:
            try:
                local_zone = self._sync_hosted_zone(account, remote_zone, touched)
            except Exception as e:
                logger.warning(f"Failed to pull zone {remote_zone.get('Id')}: {e}")
                continue

            if local_zone is not None:
                result["zones"] += 1
                self._pull_zone_records(client, local_zone, result, touched)

    def _pull_zone(self, client, account: Account, zone: HostedZone, result: Dict, touched: List) -> None:
        try:
            remote_zone = None
            for candidate in client.list_hosted_zones():
                if normalize_zone_id(candidate.get("Id", "")) == zone.remote_id:
                    remote_zone = candidate
                    break

            if remote_zone is None:
                logger.warning(f"Hosted zone {zone.remote_id} not found on remote side")
                return

            local_zone = self._sync_hosted_zone(account, remote_zone, touched)
            if local_zone is not None:
                result["zones"] += 1
                self._pull_zone_records(client, local_zone, result, touched)
        except Exception as e:
            logger.warning(f"Failed to pull zone {zone.remote_id}: {e}")

    def _sync_hosted_zone(self, account: Account, remote_zone: Dict, touched: List) -> Optional[HostedZone]:
        remote_id = normalize_zone_id(remote_zone.get("Id", ""))
        name = remote_zone.get("Name") or ""
        if not remote_id or not name:
            logger.debug(f"Skipping malformed hosted zone {remote_zone!r}")
            return None

        local_zone = self.zone_repository.find_one_by_account_and_remote_id(account, remote_id)
        if local_zone is None:
            local_zone = HostedZone(account=account, remote_id=remote_id)
            logger.info(f"New hosted zone {name} ({remote_id})")

        config = remote_zone.get("Config") or {}
        local_zone.name = name
        local_zone.caller_ref = remote_zone.get("CallerReference")
        local_zone.comment = config.get("Comment")
        local_zone.is_private = bool(config.get("PrivateZone", False))
        local_zone.rrset_count = remote_zone.get("ResourceRecordSetCount")
        local_zone.last_sync_at = utcnow()

        touched.append(local_zone)
        return local_zone

    def _pull_zone_records(self, client, zone: HostedZone, result: Dict, touched: List) -> None:
        try:
            for remote_record in client.list_resource_record_sets(zone.remote_id):
                local_record = self._sync_record_set(zone, remote_record, touched)
                if local_record is not None:
                    result["records"] += 1
                    result["changes"].append(
                        {
                            "action": "sync",
                            "zone": zone.name,
                            "record": f"{local_record.name} {local_record.type}",
                        }
                    )
        except Exception as e:
            logger.warning(f"Failed to pull records for zone {zone.remote_id}: {e}")

    def _sync_record_set(self, zone: HostedZone, remote_record: Dict, touched: List) -> Optional[RecordSet]:
        name = remote_record.get("Name") or ""
        record_type = remote_record.get("Type") or ""
        set_identifier = remote_record.get("SetIdentifier")
        if not name or not record_type:
            logger.debug(f"Skipping malformed record set in zone {zone.remote_id}")
            return None

        local_record = self.record_repository.find_one_by_zone_name_type_and_set_identifier(
            zone, name, record_type, set_identifier
        )
        if local_record is None:
            local_record = RecordSet(
                zone=zone, name=name, type=record_type, set_identifier=set_identifier
            )

        local_record.ttl = remote_record.get("TTL")

        alias_target = remote_record.get("AliasTarget")
        if alias_target is not None:
            local_record.alias_target = {
                "DNSName": alias_target.get("DNSName"),
                "EvaluateTargetHealth": alias_target.get("EvaluateTargetHealth"),
                "HostedZoneId": alias_target.get("HostedZoneId"),
            }

        resource_records = remote_record.get("ResourceRecords") or []
        if resource_records:
            local_record.resource_records = {
                f"record_{index}": rr.get("Value") for index, rr in enumerate(resource_records)
            }

        local_record.health_check_id = remote_record.get("HealthCheckId")
        local_record.region = remote_record.get("Region")
        local_record.multi_value_answer = remote_record.get("MultiValueAnswer")

        geo_location = remote_record.get("GeoLocation")
        if geo_location is not None:
            local_record.geo_location = {
                "ContinentCode": geo_location.get("ContinentCode"),
                "CountryCode": geo_location.get("CountryCode"),
                "SubdivisionCode": geo_location.get("SubdivisionCode"),
            }

        local_record.last_seen_remote_at = utcnow()

        if record_type in SYSTEM_MANAGED_TYPES:
            local_record.managed_by_system = True

        touched.append(local_record)
        return local_record
