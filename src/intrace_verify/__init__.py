"""
intrace-verify: Client-side provenance verification for web captures.

Checks a captured screenshot against its recorded content hash, recomputes
the linked event-log entry's hash, and verifies the operator's Ed25519
signature over it.
"""

from .canonical import canonical_json, canonicalize
from .hashing import (
    compute_event_hash,
    event_hash_payload,
    sha256_hex,
)
from .signature import (
    decode_hex,
    load_operator_public_key,
    verify_ed25519,
)
from .models import (
    EVENT_HASH_FIELDS,
    CaptureMetadata,
    EventRecord,
    OperatorKey,
)
from .client import CaptureStore, HttpCaptureApi
from .registry import KeyRegistryClient
from .verify import (
    CHECK_CONTENT_HASH,
    CHECK_EVENT_HASH,
    CHECK_SIGNATURE,
    ProvenanceVerifier,
    verify_capture,
    verify_content_hash,
    verify_event_hash,
    verify_event_signature,
)
from .errors import (
    CheckResult,
    DecodeError,
    ErrorCode,
    KeyLookupError,
    NetworkError,
    NotFoundError,
    PendingCheck,
    ProvenanceError,
    VerificationVerdict,
)

__version__ = "0.1.0"
__all__ = [
    # Canonical JSON
    "canonical_json",
    "canonicalize",
    # Hashing
    "EVENT_HASH_FIELDS",
    "compute_event_hash",
    "event_hash_payload",
    "sha256_hex",
    # Signatures
    "decode_hex",
    "load_operator_public_key",
    "verify_ed25519",
    # Records
    "CaptureMetadata",
    "EventRecord",
    "OperatorKey",
    # Collaborators
    "CaptureStore",
    "HttpCaptureApi",
    "KeyRegistryClient",
    # Verification
    "CHECK_CONTENT_HASH",
    "CHECK_EVENT_HASH",
    "CHECK_SIGNATURE",
    "ProvenanceVerifier",
    "verify_capture",
    "verify_content_hash",
    "verify_event_hash",
    "verify_event_signature",
    # Errors and verdicts
    "CheckResult",
    "DecodeError",
    "ErrorCode",
    "KeyLookupError",
    "NetworkError",
    "NotFoundError",
    "PendingCheck",
    "ProvenanceError",
    "VerificationVerdict",
]
