"""
Persistence for the local mirror.
"""

from .memory import (
    InMemoryAccountRepository,
    InMemoryChangeLogRepository,
    InMemoryHostedZoneRepository,
    InMemoryRecordSetRepository,
    InMemoryStore,
)
from .state_file import StateFile

__all__ = [
    "InMemoryStore",
    "InMemoryAccountRepository",
    "InMemoryHostedZoneRepository",
    "InMemoryRecordSetRepository",
    "InMemoryChangeLogRepository",
    "StateFile",
]
