"""
Human-readable summaries of captures and verdicts.

Read-only helpers for host programs; nothing here affects a verdict.
"""

from typing import Any

from .errors import VerificationVerdict
from .models import CaptureMetadata, EventRecord

PENDING = "Pending"


def capture_summary(metadata: CaptureMetadata, event: EventRecord | None = None) -> dict[str, Any]:
    """
    Extract the capture and event details a viewer displays.

    Args:
        metadata: Capture metadata
        event: Linked event, or None if not yet logged

    Returns:
        Dict of display strings; event fields read "Pending" without an event
    """
    browser = f"{metadata.browser.name or 'Unknown'} {metadata.browser.version}".strip()
    summary = {
        "capture_id": metadata.capture_id,
        "url": metadata.url,
        "final_url": metadata.final_url or metadata.url,
        "captured_at": metadata.captured_at_utc or "",
        "browser": browser,
        "viewport": f"{metadata.viewport.width} x {metadata.viewport.height}",
        "screenshot_hash": metadata.expected_hash("screenshot") or "N/A",
        "dom_hash": metadata.expected_hash("dom") or "N/A",
        "manifest_hash": metadata.expected_hash("manifest") or "N/A",
    }

    if event is None:
        summary.update({
            "event_id": PENDING,
            "event_hash": PENDING,
            "prev_event_hash": PENDING,
            "operator_key_id": PENDING,
            "signature": PENDING,
        })
    else:
        summary.update({
            "event_id": str(event.event_id),
            "event_hash": str(event.event_hash),
            "prev_event_hash": str(event.prev_event_hash) if event.prev_event_hash else "Genesis (first event)",
            "operator_key_id": str(event.operator_key_id),
            "signature": str(event.signature),
        })
    return summary


def truncate_hash(value: object, length: int = 16) -> str:
    if not value:
        return "N/A"
    value = str(value)
    if len(value) <= length:
        return value
    return value[:length] + "..."


_HASH_FIELDS = ("screenshot_hash", "dom_hash", "manifest_hash", "event_hash", "prev_event_hash", "signature")

_LABELS = (
    ("capture_id", "Capture"),
    ("url", "URL"),
    ("final_url", "Final URL"),
    ("captured_at", "Captured at"),
    ("browser", "Browser"),
    ("viewport", "Viewport"),
    ("screenshot_hash", "Screenshot SHA-256"),
    ("dom_hash", "DOM SHA-256"),
    ("manifest_hash", "Manifest SHA-256"),
    ("event_id", "Event"),
    ("event_hash", "Event hash"),
    ("prev_event_hash", "Previous hash"),
    ("operator_key_id", "Operator key"),
    ("signature", "Signature"),
)


def format_capture_summary(metadata: CaptureMetadata, event: EventRecord | None = None) -> str:
    """
    Format capture_summary as aligned "label: value" lines, hashes truncated.
    """
    summary = capture_summary(metadata, event)
    for name in _HASH_FIELDS:
        value = summary[name]
        if value not in (PENDING, "N/A", "Genesis (first event)"):
            summary[name] = truncate_hash(value)

    width = max(len(label) for _, label in _LABELS)
    return "\n".join(f"{label + ':':<{width + 1}} {summary[name]}" for name, label in _LABELS)


def format_verdict(verdict: VerificationVerdict) -> str:
    """
    Format a verdict as a status line followed by one line per check.

    Example:
        All verification checks passed
          [PASS] content hash
          [PASS] event hash
          [PASS] signature
    """
    if verdict.error:
        lines = [f"Verification failed: {verdict.error}"]
    elif verdict.all_passed:
        lines = ["All verification checks passed"]
    else:
        lines = ["Some verification checks failed"]

    for check in verdict.checks:
        mark = "PASS" if check.passed else "FAIL"
        suffix = f" ({check.reason})" if check.reason else ""
        lines.append(f"  [{mark}] {check.name}{suffix}")
    for pending in verdict.pending:
        lines.append(f"  [PENDING] {pending.name} ({pending.reason})")

    return "\n".join(lines)
