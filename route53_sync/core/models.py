"""
Data models for the local mirror of remote DNS state.

Accounts own hosted zones, hosted zones own record sets, and every
planned change against the remote side is recorded as a ChangeLog entry.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

SOURCES_OF_TRUTH = ("local", "remote")
CHANGE_ACTIONS = ("CREATE", "DELETE", "UPSERT")

STATUS_PENDING = "pending"
STATUS_APPLIED = "applied"
STATUS_FAILED = "failed"

# Apex infrastructure records owned by the provider, never authored locally.
SYSTEM_MANAGED_TYPES = ("SOA", "NS")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _Touchable:
    """Stamps updated_at whenever a field is assigned after construction."""

    def __post_init__(self):
        object.__setattr__(self, "_ready", True)

    def __setattr__(self, name, value):
        super().__setattr__(name, value)
        if name != "updated_at" and getattr(self, "_ready", False):
            super().__setattr__("updated_at", utcnow())


@dataclass(eq=False)
class Account(_Touchable):
    """A provider account and the credentials used to reach it.

    Attributes:
        name: Human readable account name
        credentials_type: One of the supported credential kinds
        credentials_params: Parameters for the credential kind
        account_id: 12 digit provider account number, if known
        partition: Provider partition (aws, aws-cn, aws-us-gov)
        default_region: Region used when building clients
        endpoint: Custom API endpoint URL
        tags: Free-form labels
        enabled: Disabled accounts are skipped by default resolution
    """

    name: str
    credentials_type: str = "instance_profile"
    credentials_params: Dict = field(default_factory=dict)
    account_id: Optional[str] = None
    partition: str = "aws"
    default_region: str = "us-east-1"
    endpoint: Optional[str] = None
    tags: Optional[Dict] = None
    enabled: bool = True
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __str__(self) -> str:
        return self.name

    def to_dict(self) -> Dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "account_id": self.account_id,
            "partition": self.partition,
            "default_region": self.default_region,
            "endpoint": self.endpoint,
            "credentials_type": self.credentials_type,
            "tags": self.tags,
            "enabled": self.enabled,
        }


@dataclass(eq=False)
class HostedZone(_Touchable):
    """Local mirror of a remote hosted zone."""

    account: Account
    remote_id: str
    name: str = ""
    caller_ref: Optional[str] = None
    comment: Optional[str] = None
    is_private: bool = False
    tags: Optional[Dict] = None
    vpc_associations: Optional[List] = None
    rrset_count: Optional[int] = None
    source_of_truth: str = "local"
    remote_fingerprint: Optional[str] = None
    last_sync_at: Optional[datetime] = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __str__(self) -> str:
        return f"{self.name} ({self.remote_id})"

    def to_dict(self) -> Dict:
        return {
            "id": str(self.id),
            "account": str(self.account.id),
            "remote_id": self.remote_id,
            "name": self.name,
            "caller_ref": self.caller_ref,
            "comment": self.comment,
            "is_private": self.is_private,
            "tags": self.tags,
            "vpc_associations": self.vpc_associations,
            "rrset_count": self.rrset_count,
            "source_of_truth": self.source_of_truth,
            "remote_fingerprint": self.remote_fingerprint,
            "last_sync_at": _isoformat(self.last_sync_at),
        }


@dataclass(eq=False)
class RecordSet(_Touchable):
    """Local mirror of one resource record set within a hosted zone.

    A record set is identified by (zone, name, type, set_identifier); the
    set identifier tells apart records sharing a name and type under
    weighted, latency, failover or geolocation routing.
    """

    zone: HostedZone
    name: str
    type: str
    ttl: Optional[int] = None
    alias_target: Optional[Dict] = None
    resource_records: Optional[Dict[str, str]] = None
    routing_policy: Optional[Dict] = None
    health_check_id: Optional[str] = None
    set_identifier: Optional[str] = None
    region: Optional[str] = None
    geo_location: Optional[Dict] = None
    multi_value_answer: Optional[bool] = None
    local_fingerprint: Optional[str] = None
    remote_fingerprint: Optional[str] = None
    last_local_modified_at: Optional[datetime] = None
    last_seen_remote_at: Optional[datetime] = None
    last_change_info_id: Optional[str] = None
    managed_by_system: bool = False
    protected: bool = False
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def record_key(self) -> str:
        key = f"{self.name} {self.type}"
        if self.set_identifier:
            key += f" {self.set_identifier}"
        return key

    def values(self) -> List[str]:
        """Resource record values in their original order."""
        if not self.resource_records:
            return []
        return list(self.resource_records.values())

    def mark_local_change(self) -> str:
        """Recompute the local fingerprint after a local edit."""
        from .fingerprint import compute_fingerprint

        self.local_fingerprint = compute_fingerprint(self)
        self.last_local_modified_at = utcnow()
        return self.local_fingerprint

    def __str__(self) -> str:
        return self.record_key

    def to_dict(self) -> Dict:
        return {
            "id": str(self.id),
            "zone": str(self.zone.id),
            "name": self.name,
            "type": self.type,
            "ttl": self.ttl,
            "alias_target": self.alias_target,
            "resource_records": self.resource_records,
            "routing_policy": self.routing_policy,
            "health_check_id": self.health_check_id,
            "set_identifier": self.set_identifier,
            "region": self.region,
            "geo_location": self.geo_location,
            "multi_value_answer": self.multi_value_answer,
            "local_fingerprint": self.local_fingerprint,
            "remote_fingerprint": self.remote_fingerprint,
            "last_local_modified_at": _isoformat(self.last_local_modified_at),
            "last_seen_remote_at": _isoformat(self.last_seen_remote_at),
            "last_change_info_id": self.last_change_info_id,
            "managed_by_system": self.managed_by_system,
            "protected": self.protected,
        }


@dataclass(eq=False)
class ChangeLog(_Touchable):
    """Audit entry for one planned change against the remote provider.

    Entries start as pending and move exactly once to applied or failed.
    """

    account: Account
    record_key: str
    action: str
    zone: Optional[HostedZone] = None
    before: Optional[Dict] = None
    after: Optional[Dict] = None
    plan_id: Optional[str] = None
    applied_at: Optional[datetime] = None
    remote_change_id: Optional[str] = None
    status: str = STATUS_PENDING
    error: Optional[str] = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        if self.action not in CHANGE_ACTIONS:
            raise ValueError(f"Unknown change action: {self.action}")
        super().__post_init__()

    @property
    def is_pending(self) -> bool:
        return self.status == STATUS_PENDING

    def mark_applied(self, remote_change_id: Optional[str] = None) -> None:
        self._ensure_pending()
        self.status = STATUS_APPLIED
        self.remote_change_id = remote_change_id
        self.applied_at = utcnow()

    def mark_failed(self, error: str) -> None:
        self._ensure_pending()
        self.status = STATUS_FAILED
        self.error = error

    def _ensure_pending(self) -> None:
        if not self.is_pending:
            raise ValueError(
                f"Change {self.id} for {self.record_key} is already {self.status}"
            )

    def __str__(self) -> str:
        return f"{self.action} {self.record_key} ({self.status})"

    def to_dict(self) -> Dict:
        return {
            "id": str(self.id),
            "account": str(self.account.id),
            "zone": str(self.zone.id) if self.zone else None,
            "record_key": self.record_key,
            "action": self.action,
            "before": self.before,
            "after": self.after,
            "plan_id": self.plan_id,
            "applied_at": _isoformat(self.applied_at),
            "remote_change_id": self.remote_change_id,
            "status": self.status,
            "error": self.error,
        }


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
