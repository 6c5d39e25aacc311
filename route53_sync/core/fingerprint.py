"""
Fingerprint helpers for change detection.

A fingerprint is a content hash of a record set. The local fingerprint
describes the record as last known locally, the remote fingerprint the
record as last confirmed on the provider side. Differing fingerprints mean
a local change is waiting to be pushed.
"""

import hashlib
import json
from typing import Dict, Optional

import dns.name


def has_local_changes(local_fingerprint: Optional[str], remote_fingerprint: Optional[str]) -> bool:
    """Return True when the local fingerprint diverges from the remote one."""
    return local_fingerprint != remote_fingerprint


def canonical_name(name: str) -> str:
    """Return the lower-case absolute form of a DNS owner name."""
    return dns.name.from_text(name).to_text().lower()


def canonical_content(record) -> Dict:
    """Build the provenance-free content document of a record set."""
    return {
        "name": canonical_name(record.name),
        "type": record.type.upper(),
        "ttl": record.ttl,
        "alias_target": record.alias_target,
        "values": record.values(),
        "health_check_id": record.health_check_id,
        "set_identifier": record.set_identifier,
        "region": record.region,
        "geo_location": record.geo_location,
        "multi_value_answer": record.multi_value_answer,
    }


def compute_fingerprint(record) -> str:
    """Compute the SHA-256 fingerprint of a record set's content."""
    payload = json.dumps(canonical_content(record), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
