"""
Base remote provider interface.

This module defines the abstract client handle that all remote DNS
providers must implement. Listings are returned in the provider's API
shape so that the reconcilers read one format regardless of backend.
"""

from abc import ABC, abstractmethod
from typing import Dict, List


class ZoneProvider(ABC):
    """Abstract base class for remote DNS hosting providers."""

    @abstractmethod
    def list_hosted_zones(self) -> List[Dict]:
        """List every hosted zone visible to the account.

        Each zone carries Id, Name, CallerReference, Config
        (Comment, PrivateZone) and ResourceRecordSetCount.
        """
        pass

    @abstractmethod
    def list_resource_record_sets(self, zone_id: str) -> List[Dict]:
        """List every resource record set of a hosted zone.

        Each record carries Name, Type and, when set, TTL, AliasTarget,
        ResourceRecords, HealthCheckId, Region, GeoLocation,
        MultiValueAnswer and SetIdentifier.
        """
        pass
