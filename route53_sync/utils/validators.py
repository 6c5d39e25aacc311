"""
Validators - Input validation for accounts and hosted zones

This module provides validation and normalization helpers for account
identifiers, partitions, endpoints and DNS names coming from
configuration files or the command line.
"""

import logging
import re
from urllib.parse import urlparse

import dns.exception
import dns.name
import dns.rdatatype

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)
ACCOUNT_ID_PATTERN = re.compile(r"^\d{12}$")
HOSTED_ZONE_PREFIX = "/hostedzone/"
PARTITIONS = ("aws", "aws-cn", "aws-us-gov")


def is_uuid(value: str) -> bool:
    """Check whether a string has the canonical UUID shape."""
    return bool(value) and bool(UUID_PATTERN.match(value))


def validate_account_id(account_id: str) -> bool:
    """
    Validate a provider account number.

    Args:
        account_id: The account number to validate

    Returns:
        True if it is exactly 12 digits, False otherwise
    """
    if not account_id or not isinstance(account_id, str):
        return False

    if not ACCOUNT_ID_PATTERN.match(account_id):
        logger.warning(f"Account ID must be exactly 12 digits: {account_id}")
        return False

    return True


def validate_partition(partition: str) -> bool:
    """Validate a provider partition name."""
    if partition not in PARTITIONS:
        logger.warning(f"Unknown partition '{partition}', expected one of {', '.join(PARTITIONS)}")
        return False
    return True


def validate_endpoint(endpoint: str) -> bool:
    """Validate a custom API endpoint URL."""
    if not endpoint or not isinstance(endpoint, str):
        return False

    parsed = urlparse(endpoint)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        logger.warning(f"Invalid endpoint URL: {endpoint}")
        return False

    return len(endpoint) <= 500


def validate_zone_name(zone: str) -> bool:
    """
    Validate a hosted zone name.

    Args:
        zone: The zone name, with or without the trailing dot

    Returns:
        True if valid, False otherwise
    """
    if not zone or not isinstance(zone, str):
        return False

    try:
        name = dns.name.from_text(zone)
    except dns.exception.DNSException as e:
        logger.warning(f"Invalid zone name '{zone}': {e}")
        return False

    # The root zone is never hosted
    return len(name.labels) > 1


def validate_record_type(record_type: str) -> bool:
    """Validate a DNS record type mnemonic such as A, AAAA or CNAME."""
    if not record_type or not isinstance(record_type, str):
        return False

    try:
        dns.rdatatype.from_text(record_type)
        return True
    except dns.rdatatype.UnknownRdatatype:
        logger.warning(f"Unknown record type: {record_type}")
        return False


def normalize_zone_id(zone_id: str) -> str:
    """
    Strip the provider's /hostedzone/ prefix from a zone id.

    Args:
        zone_id: Zone id as returned by the provider API

    Returns:
        Bare zone id
    """
    if not zone_id:
        return ""

    zone_id = zone_id.strip()
    if zone_id.startswith(HOSTED_ZONE_PREFIX):
        zone_id = zone_id[len(HOSTED_ZONE_PREFIX):]
    return zone_id
