"""
Core synchronization logic.
"""

from .exceptions import ConfigurationError, Route53ClientError
from .fingerprint import compute_fingerprint, has_local_changes
from .locking import Lock, LockFactory, create_lock_factory
from .models import Account, ChangeLog, HostedZone, RecordSet

__all__ = [
    "ConfigurationError",
    "Route53ClientError",
    "compute_fingerprint",
    "has_local_changes",
    "Lock",
    "LockFactory",
    "create_lock_factory",
    "Account",
    "ChangeLog",
    "HostedZone",
    "RecordSet",
]
