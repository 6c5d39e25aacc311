"""
Route53 Sync - Bidirectional synchronization of Route 53 hosted zones

Keeps a local mirror of hosted zones and record sets consistent with
AWS Route 53 through locked pull, push and bidirectional runs.
"""

__version__ = "1.0.0"
__author__ = "Route53 Sync Team"
__description__ = "Bidirectional Route 53 DNS synchronization"

from .core.sync_manager import SyncManager
from .core.synchronizer import Synchronizer
from .providers.client_factory import Route53ClientFactory

__all__ = [
    "SyncManager",
    "Synchronizer",
    "Route53ClientFactory",
]
