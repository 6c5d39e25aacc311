"""
Utility functions and helpers.

This package contains validation and normalization helpers for
account configuration and provider identifiers.
"""

from .validators import (
    is_uuid,
    normalize_zone_id,
    validate_account_id,
    validate_endpoint,
    validate_partition,
    validate_record_type,
    validate_zone_name,
)

__all__ = [
    "is_uuid",
    "normalize_zone_id",
    "validate_account_id",
    "validate_endpoint",
    "validate_partition",
    "validate_record_type",
    "validate_zone_name",
]
