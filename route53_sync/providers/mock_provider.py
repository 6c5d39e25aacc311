"""
Mock remote provider for testing and demonstration.

This module provides a provider that keeps hosted zones and record sets
in memory for safe testing and demonstration purposes.
"""

import logging
from typing import Dict, List, Optional

from ..utils.validators import normalize_zone_id, validate_record_type, validate_zone_name
from .base_provider import ZoneProvider

logger = logging.getLogger(__name__)


class MockRoute53Provider(ZoneProvider):
    """In-memory provider returning Route 53 shaped listings."""

    def __init__(self, config: Dict = None):
        """Initialize mock provider, optionally seeded from configuration.

        The configuration holds a "zones" list; every zone entry takes
        id, name, comment, private and a "records" list of record dicts.
        """
        self.zones: List[Dict] = []
        self.records: Dict[str, List[Dict]] = {}
        self.failing_zones = set()
        self.fail_listing: Optional[Exception] = None

        for zone in (config or {}).get("zones", []):
            self.add_zone(
                zone["id"],
                zone["name"],
                comment=zone.get("comment"),
                private=zone.get("private", False),
            )
            for record in zone.get("records", []):
                self.add_record(zone["id"], record)

        logger.info(f"Mock Route53 provider initialized with {len(self.zones)} zones")

    def add_zone(self, zone_id: str, name: str, comment: str = None, private: bool = False) -> Dict:
        """Create a hosted zone."""
        if not validate_zone_name(name):
            raise ValueError(f"Invalid hosted zone name: {name}")

        zone_id = normalize_zone_id(zone_id)
        zone = {
            "Id": f"/hostedzone/{zone_id}",
            "Name": name,
            "CallerReference": f"mock-{zone_id}",
            "Config": {"Comment": comment, "PrivateZone": private},
            "ResourceRecordSetCount": 0,
        }
        self.zones.append(zone)
        self.records[zone_id] = []
        return zone

    def add_record(self, zone_id: str, record: Dict) -> Dict:
        """Add a resource record set to a hosted zone."""
        zone_id = normalize_zone_id(zone_id)
        if zone_id not in self.records:
            raise ValueError(f"Hosted zone {zone_id} not found")
        if not validate_record_type(record.get("Type", "")):
            raise ValueError(f"Invalid record type: {record.get('Type')}")

        stored = dict(record)
        self.records[zone_id].append(stored)
        self._zone(zone_id)["ResourceRecordSetCount"] = len(self.records[zone_id])
        logger.info(f"Mock: Added record {stored.get('Name')} {stored.get('Type')} to {zone_id}")
        return stored

    def fail_zone(self, zone_id: str) -> None:
        """Make record listings of a zone raise."""
        self.failing_zones.add(normalize_zone_id(zone_id))

    def list_hosted_zones(self) -> List[Dict]:
        if self.fail_listing is not None:
            raise self.fail_listing
        logger.info(f"Mock: Listed {len(self.zones)} hosted zones")
        return [dict(zone) for zone in self.zones]

    def list_resource_record_sets(self, zone_id: str) -> List[Dict]:
        zone_id = normalize_zone_id(zone_id)
        if zone_id in self.failing_zones:
            raise RuntimeError(f"Mock: record listing failed for {zone_id}")
        if zone_id not in self.records:
            raise ValueError(f"Hosted zone {zone_id} not found")
        return [dict(record) for record in self.records[zone_id]]

    def _zone(self, zone_id: str) -> Dict:
        for zone in self.zones:
            if normalize_zone_id(zone["Id"]) == zone_id:
                return zone
        raise ValueError(f"Hosted zone {zone_id} not found")
