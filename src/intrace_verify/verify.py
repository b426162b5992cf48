"""
Capture provenance verification.

Three independent checks against what the capture API and event log serve:

- content hash: SHA-256 of the screenshot bytes vs the capture metadata
- event hash: recomputed hash of the linked event vs its stored hash
- signature: Ed25519 signature over the event hash text, checked with the
  operator key the registry publishes

No check short-circuits another. Untrusted data never raises out of
verify_capture; every failure becomes a failed check or a hard-failure
verdict.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from .client import CaptureStore
from .errors import (
    CheckResult,
    DecodeError,
    ErrorCode,
    KeyLookupError,
    NetworkError,
    NotFoundError,
    PendingCheck,
    VerificationVerdict,
)
from .hashing import compute_event_hash, is_sha256_hex, safe_equal, sha256_hex
from .models import CaptureMetadata, EventRecord, OperatorKey
from .registry import KeyRegistryClient
from .signature import (
    decode_hex,
    event_signature_message,
    load_operator_public_key,
    verify_ed25519,
)

logger = logging.getLogger(__name__)

CHECK_CONTENT_HASH = "content hash"
CHECK_EVENT_HASH = "event hash"
CHECK_SIGNATURE = "signature"

SCREENSHOT = "screenshot"


def verify_content_hash(data: bytes, expected: str | None) -> CheckResult:
    """
    Verify that the SHA-256 of artifact bytes matches the recorded hash.

    A missing expected hash fails the check; it is not skipped.
    """
    if not expected:
        return CheckResult(
            name=CHECK_CONTENT_HASH,
            passed=False,
            reason="expected hash missing",
            code=ErrorCode.EXPECTED_HASH_MISSING,
        )
    if not is_sha256_hex(expected):
        return CheckResult(
            name=CHECK_CONTENT_HASH,
            passed=False,
            reason="malformed expected hash",
            code=ErrorCode.DECODE_ERROR,
            details={"expected": expected},
        )

    actual = sha256_hex(data)
    if not safe_equal(actual, expected):
        return CheckResult(
            name=CHECK_CONTENT_HASH,
            passed=False,
            reason="content hash mismatch",
            code=ErrorCode.CONTENT_HASH_MISMATCH,
            details={"expected": expected.lower(), "actual": actual},
        )
    return CheckResult(name=CHECK_CONTENT_HASH, passed=True, details={"hash": actual})


def verify_event_hash(event: EventRecord) -> CheckResult:
    """
    Verify that the event's stored hash matches its recomputed hash.
    """
    stored = event.event_hash
    if not isinstance(stored, str) or not stored:
        return CheckResult(
            name=CHECK_EVENT_HASH,
            passed=False,
            reason="event hash missing",
            code=ErrorCode.EVENT_HASH_MISSING,
            details={"event_id": event.event_id},
        )

    try:
        expected = compute_event_hash(event)
    except TypeError as exc:
        # e.g. NaN smuggled into the hashes map
        return CheckResult(
            name=CHECK_EVENT_HASH,
            passed=False,
            reason="event not canonicalizable",
            code=ErrorCode.DECODE_ERROR,
            details={"event_id": event.event_id, "error": str(exc)},
        )

    if not safe_equal(stored, expected):
        return CheckResult(
            name=CHECK_EVENT_HASH,
            passed=False,
            reason="event hash mismatch",
            code=ErrorCode.EVENT_HASH_MISMATCH,
            details={"event_id": event.event_id, "expected": expected, "actual": stored},
        )
    return CheckResult(name=CHECK_EVENT_HASH, passed=True, details={"event_id": event.event_id})


def verify_event_signature(event: EventRecord, operator_key: OperatorKey) -> CheckResult:
    """
    Verify the event signature over the stored event hash text.
    """
    details = {"event_id": event.event_id, "operator_key_id": operator_key.key_id}

    try:
        public_key = load_operator_public_key(operator_key.public_key)
    except DecodeError as exc:
        return CheckResult(
            name=CHECK_SIGNATURE,
            passed=False,
            reason="malformed public key",
            code=ErrorCode.DECODE_ERROR,
            details={**details, "error": str(exc)},
        )

    try:
        signature = decode_hex(event.signature, "signature")
    except DecodeError as exc:
        return CheckResult(
            name=CHECK_SIGNATURE,
            passed=False,
            reason="malformed signature",
            code=ErrorCode.DECODE_ERROR,
            details={**details, "error": str(exc)},
        )

    event_hash = event.event_hash if isinstance(event.event_hash, str) else ""
    if not verify_ed25519(public_key, signature, event_signature_message(event_hash)):
        return CheckResult(
            name=CHECK_SIGNATURE,
            passed=False,
            reason="signature mismatch",
            code=ErrorCode.SIGNATURE_INVALID,
            details=details,
        )
    return CheckResult(name=CHECK_SIGNATURE, passed=True, details=details)


class ProvenanceVerifier:
    """
    Runs the provenance checks for one capture at a time.

    Holds no per-run state; the registry client may cache key listings.
    """

    def __init__(self, store: CaptureStore, registry: KeyRegistryClient | None = None):
        self.store = store
        self.registry = registry or KeyRegistryClient(store)

    async def verify_capture(self, capture_id: str) -> VerificationVerdict:
        """
        Verify a capture against its metadata and linked event.

        Args:
            capture_id: Capture identifier issued by the capture API

        Returns:
            VerificationVerdict with ordered checks and any pending checks

        Raises:
            ValueError: If capture_id is empty or not a string
        """
        if not isinstance(capture_id, str) or not capture_id.strip():
            raise ValueError("capture_id must be a non-empty string")

        verdict = VerificationVerdict(capture_id=capture_id)

        metadata_result, manifest_result = await asyncio.gather(
            self._fetch(self.store.get_capture_metadata(capture_id), "metadata"),
            self._fetch(self.store.get_capture_manifest(capture_id), "manifest"),
        )
        if isinstance(metadata_result, Exception):
            verdict.error = (
                "capture not found"
                if isinstance(metadata_result, NotFoundError)
                else "metadata fetch failed"
            )
            verdict.error_code = ErrorCode.METADATA_UNAVAILABLE
            logger.warning("Cannot verify capture %s: %s", capture_id, verdict.error)
            return verdict
        metadata: CaptureMetadata = metadata_result
        verdict.metadata = metadata
        if isinstance(manifest_result, dict):
            verdict.manifest = manifest_result

        screenshot_result, event_result = await asyncio.gather(
            self._fetch(self.store.get_capture_bytes(capture_id, SCREENSHOT), SCREENSHOT),
            self._fetch_event(metadata.event_id),
        )

        verdict.checks.append(self._content_hash_check(screenshot_result, metadata))

        if isinstance(event_result, EventRecord):
            verdict.event = event_result
            verdict.checks.append(verify_event_hash(event_result))
            verdict.checks.append(await self._signature_check(event_result))
        elif isinstance(event_result, DecodeError):
            for name in (CHECK_EVENT_HASH, CHECK_SIGNATURE):
                verdict.checks.append(CheckResult(
                    name=name,
                    passed=False,
                    reason="malformed event",
                    code=ErrorCode.DECODE_ERROR,
                    details={"event_id": metadata.event_id, "error": str(event_result)},
                ))
        else:
            if event_result is None or isinstance(event_result, NotFoundError):
                reason = "event not yet recorded"
            else:
                reason = "event fetch failed"
            verdict.pending.append(PendingCheck(CHECK_EVENT_HASH, reason))
            verdict.pending.append(PendingCheck(CHECK_SIGNATURE, reason))

        for check in verdict.checks:
            if not check.passed:
                logger.info("Capture %s: %s check failed (%s)", capture_id, check.name, check.reason)
        logger.debug("Capture %s verified, all_passed=%s", capture_id, verdict.all_passed)
        return verdict

    async def _fetch(self, call, what: str) -> Any:
        """Await a collaborator call, returning the error instead of raising it."""
        try:
            return await call
        except (NotFoundError, NetworkError, DecodeError) as exc:
            if not isinstance(exc, NotFoundError):
                logger.warning("Fetching %s failed: %s", what, exc)
            return exc

    async def _fetch_event(self, event_id: str | None) -> Any:
        if not event_id:
            return None
        return await self._fetch(self.store.get_event(event_id), "event")

    def _content_hash_check(self, screenshot: Any, metadata: CaptureMetadata) -> CheckResult:
        expected = metadata.expected_hash(SCREENSHOT)
        if isinstance(screenshot, Exception):
            if not expected:
                return verify_content_hash(b"", expected)
            not_found = isinstance(screenshot, NotFoundError)
            return CheckResult(
                name=CHECK_CONTENT_HASH,
                passed=False,
                reason="screenshot not found" if not_found else "screenshot fetch failed",
                code=ErrorCode.ARTIFACT_UNAVAILABLE,
                details={"error": str(screenshot)},
            )
        return verify_content_hash(screenshot, expected)

    async def _signature_check(self, event: EventRecord) -> CheckResult:
        key_id = event.operator_key_id
        try:
            operator_key = await self.registry.resolve(key_id) if isinstance(key_id, str) else None
        except KeyLookupError as exc:
            return CheckResult(
                name=CHECK_SIGNATURE,
                passed=False,
                reason="key lookup failed",
                code=ErrorCode.KEY_LOOKUP_FAILED,
                details={"operator_key_id": key_id, "error": str(exc)},
            )
        if operator_key is None:
            return CheckResult(
                name=CHECK_SIGNATURE,
                passed=False,
                reason="unknown operator key",
                code=ErrorCode.UNKNOWN_OPERATOR_KEY,
                details={"operator_key_id": key_id},
            )
        return verify_event_signature(event, operator_key)


async def verify_capture(
    capture_id: str,
    store: CaptureStore,
    registry: KeyRegistryClient | None = None,
) -> VerificationVerdict:
    """Convenience wrapper: one verification run with a fresh verifier."""
    return await ProvenanceVerifier(store, registry).verify_capture(capture_id)
