"""
Content and event hashing for intrace-verify.

Uses hashlib for SHA-256. Digests are plain lowercase hex, the form the
capture API and event log store them in.

CRITICAL: compute_event_hash MUST match the event log authority's hashing
exactly, field subset included.
"""

import hashlib
import hmac
from typing import Any, Mapping

from .canonical import canonicalize
from .models import EVENT_HASH_FIELDS, EventRecord


def sha256_hex(data: bytes) -> str:
    """SHA-256 of raw bytes as lowercase hex."""
    return hashlib.sha256(data).hexdigest()


def event_hash_payload(event: EventRecord | Mapping[str, Any]) -> dict[str, Any]:
    """
    Extract the hashed subset of an event into a fresh dict.

    Everything else (event_hash, signature, any extra field) is dropped.
    Absent fields come out as None and are hashed as null.
    """
    if isinstance(event, EventRecord):
        return {name: getattr(event, name) for name in EVENT_HASH_FIELDS}
    return {name: event.get(name) for name in EVENT_HASH_FIELDS}


def compute_event_hash(event: EventRecord | Mapping[str, Any]) -> str:
    """
    Compute the hash of an event record.

    event_hash = SHA-256(canonical JSON of the seven hashed fields), hex.

    Args:
        event: EventRecord or raw event mapping

    Returns:
        Lowercase hex digest
    """
    return sha256_hex(canonicalize(event_hash_payload(event)))


def safe_equal(left: Any, right: Any) -> bool:
    """
    Constant-time comparison of two hex digests, case-insensitive.
    """
    left = left if isinstance(left, str) else str(left or "")
    right = right if isinstance(right, str) else str(right or "")
    return hmac.compare_digest(left.lower().encode("utf-8"), right.lower().encode("utf-8"))


def is_sha256_hex(value: Any) -> bool:
    """True if value is a 64-character hex string."""
    if not isinstance(value, str) or len(value) != 64:
        return False
    try:
        bytes.fromhex(value)
    except ValueError:
        return False
    return True
