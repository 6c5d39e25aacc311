"""
AWS Route 53 provider implementation.

This module lists hosted zones and resource record sets through a boto3
Route 53 client, walking the service paginators so that large accounts
and zones are read completely.
"""

import logging
from typing import Dict, List

from botocore.exceptions import BotoCoreError, ClientError

from ..core.exceptions import Route53ClientError
from .base_provider import ZoneProvider

logger = logging.getLogger(__name__)


class Route53Provider(ZoneProvider):
    """Route 53 provider backed by a boto3 client."""

    def __init__(self, client, account_name: str = ""):
        """Wrap a boto3 "route53" client."""
        self.client = client
        self.account_name = account_name

    def list_hosted_zones(self) -> List[Dict]:
        zones = []
        try:
            paginator = self.client.get_paginator("list_hosted_zones")
            for page in paginator.paginate():
                zones.extend(page.get("HostedZones", []))
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to list hosted zones for {self.account_name or 'account'}: {e}")
            raise Route53ClientError.sync_operation_failed("list hosted zones", str(e)) from e

        logger.debug(f"Listed {len(zones)} hosted zones")
        return zones

    def list_resource_record_sets(self, zone_id: str) -> List[Dict]:
        records = []
        try:
            paginator = self.client.get_paginator("list_resource_record_sets")
            for page in paginator.paginate(HostedZoneId=zone_id):
                records.extend(page.get("ResourceRecordSets", []))
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to list record sets for zone {zone_id}: {e}")
            raise Route53ClientError.sync_operation_failed("list resource record sets", str(e)) from e

        logger.debug(f"Listed {len(records)} record sets in zone {zone_id}")
        return records
