"""
Error codes, exceptions and verdict types for intrace-verify.

Untrusted data never raises out of a verification run: integrity failures
are reported as CheckResult(passed=False) with an ErrorCode. The exceptions
below are raised by collaborators and caught by the verifier.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """
    Check failure codes.
    Stable values, safe to persist in audit trails.
    """
    CONTENT_HASH_MISMATCH = "CONTENT_HASH_MISMATCH"
    EXPECTED_HASH_MISSING = "EXPECTED_HASH_MISSING"
    ARTIFACT_UNAVAILABLE = "ARTIFACT_UNAVAILABLE"
    EVENT_HASH_MISMATCH = "EVENT_HASH_MISMATCH"
    EVENT_HASH_MISSING = "EVENT_HASH_MISSING"
    UNKNOWN_OPERATOR_KEY = "UNKNOWN_OPERATOR_KEY"
    KEY_LOOKUP_FAILED = "KEY_LOOKUP_FAILED"
    DECODE_ERROR = "DECODE_ERROR"
    SIGNATURE_INVALID = "SIGNATURE_INVALID"
    METADATA_UNAVAILABLE = "METADATA_UNAVAILABLE"


class ProvenanceError(Exception):
    """Base class for collaborator and decoding failures."""


class NotFoundError(ProvenanceError):
    """The capture, manifest, artifact or event does not exist."""


class NetworkError(ProvenanceError):
    """A collaborator call failed in transport or returned an error status."""


class KeyLookupError(NetworkError):
    """The operator key registry could not be listed."""


class DecodeError(ProvenanceError):
    """Malformed hex, key material, or record shape from a remote source."""


@dataclass
class CheckResult:
    """
    Outcome of a single named verification check.
    """
    name: str
    passed: bool
    reason: str | None = None
    code: ErrorCode | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "passed": self.passed,
            "reason": self.reason,
            "code": self.code.value if self.code else None,
            "details": self.details,
        }


@dataclass
class PendingCheck:
    """A check that could not run yet, e.g. the event is not logged."""
    name: str
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "reason": self.reason}


@dataclass
class VerificationVerdict:
    """
    Result of one verification run.

    ``error`` and ``error_code`` are set only when no check could run at all
    (the capture metadata was unavailable); that is a hard failure, distinct
    from checks that ran and failed. ``metadata``, ``manifest`` and ``event``
    hold whatever records were retrieved.
    """
    capture_id: str
    checks: list[CheckResult] = field(default_factory=list)
    pending: list[PendingCheck] = field(default_factory=list)
    error: str | None = None
    error_code: ErrorCode | None = None
    # Records the run was based on, for display; not part of the verdict itself
    metadata: Any = field(default=None, repr=False, compare=False)
    manifest: dict[str, Any] | None = field(default=None, repr=False, compare=False)
    event: Any = field(default=None, repr=False, compare=False)

    @property
    def all_passed(self) -> bool:
        if not self.checks:
            return False
        return all(check.passed for check in self.checks)

    def check(self, name: str) -> CheckResult | None:
        for result in self.checks:
            if result.name == name:
                return result
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "capture_id": self.capture_id,
            "all_passed": self.all_passed,
            "checks": [c.to_dict() for c in self.checks],
            "pending": [p.to_dict() for p in self.pending],
            "error": self.error,
            "error_code": self.error_code.value if self.error_code else None,
        }
