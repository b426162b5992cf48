"""
Records consumed from the capture API and the event log.

Event fields are kept exactly as the authority sent them: the event hash is
computed over these raw values, so no field is re-typed on the way in.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .errors import DecodeError


# Fields covered by the event hash, in no particular order
EVENT_HASH_FIELDS = (
    "event_id",
    "prev_event_hash",
    "capture_id",
    "url",
    "captured_at_utc",
    "hashes",
    "operator_key_id",
)

_EVENT_FIELDS = EVENT_HASH_FIELDS + ("event_hash", "signature")


def _require_object(payload: Any, what: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise DecodeError(f"{what} must be a JSON object, got {type(payload).__name__}")
    return payload


def parse_utc(text: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp (``Z`` suffix allowed). None if unparseable."""
    if not isinstance(text, str) or not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class BrowserInfo:
    name: str = ""
    version: str = ""


@dataclass(frozen=True)
class Viewport:
    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class CaptureMetadata:
    """Metadata the capture API issues for one captured artifact set."""
    capture_id: str
    url: str
    final_url: str
    captured_at_utc: str | None
    browser: BrowserInfo
    viewport: Viewport
    hashes: dict[str, str] = field(default_factory=dict)
    event_id: str | None = None

    @property
    def captured_at(self) -> datetime | None:
        return parse_utc(self.captured_at_utc)

    def expected_hash(self, kind: str) -> str | None:
        """
        Expected hex SHA-256 for an artifact kind.

        The capture API spells the keys ``screenshot_sha256``; the bare
        ``screenshot`` spelling is accepted too.
        """
        value = self.hashes.get(kind)
        if value is None:
            value = self.hashes.get(f"{kind}_sha256")
        return value or None

    @classmethod
    def from_dict(cls, payload: Any, capture_id: str | None = None) -> "CaptureMetadata":
        data = _require_object(payload, "capture metadata")

        hashes = data.get("hashes") or {}
        if not isinstance(hashes, dict):
            raise DecodeError("capture metadata hashes must be an object")

        browser = data.get("browser") or {}
        viewport = data.get("viewport") or {}
        if not isinstance(browser, dict) or not isinstance(viewport, dict):
            raise DecodeError("capture metadata browser/viewport must be objects")

        try:
            width = int(viewport.get("width") or 0)
            height = int(viewport.get("height") or 0)
        except (TypeError, ValueError, OverflowError) as exc:
            raise DecodeError(f"invalid viewport dimensions ({exc})") from exc

        url = data.get("url") or ""
        return cls(
            capture_id=data.get("capture_id") or capture_id or "",
            url=url,
            final_url=data.get("final_url") or url,
            captured_at_utc=data.get("captured_at_utc"),
            browser=BrowserInfo(
                name=str(browser.get("name") or ""),
                version=str(browser.get("version") or ""),
            ),
            viewport=Viewport(width=width, height=height),
            hashes=dict(hashes),
            event_id=data.get("event_id") or None,
        )


@dataclass(frozen=True)
class EventRecord:
    """
    One signed entry of the append-only event log.

    ``prev_event_hash`` is None for the genesis event. Fields the log adds
    beyond the known set are kept in ``extra`` and never hashed.
    """
    event_id: Any
    prev_event_hash: Any
    capture_id: Any
    url: Any
    captured_at_utc: Any
    hashes: Any
    operator_key_id: Any
    event_hash: Any = None
    signature: Any = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_genesis(self) -> bool:
        return self.prev_event_hash is None

    @classmethod
    def from_dict(cls, payload: Any) -> "EventRecord":
        data = _require_object(payload, "event record")
        extra = {k: v for k, v in data.items() if k not in _EVENT_FIELDS}
        return cls(**{name: data.get(name) for name in _EVENT_FIELDS}, extra=extra)

    def to_dict(self) -> dict[str, Any]:
        result = dict(self.extra)
        result.update({name: getattr(self, name) for name in _EVENT_FIELDS})
        return result


@dataclass(frozen=True)
class OperatorKey:
    """A registry entry binding a key id to public key text."""
    key_id: str
    public_key: str

    @classmethod
    def from_dict(cls, payload: Any) -> "OperatorKey":
        data = _require_object(payload, "operator key")
        key_id = data.get("key_id")
        public_key = data.get("public_key")
        if not isinstance(key_id, str) or not isinstance(public_key, str):
            raise DecodeError("operator key entry needs string key_id and public_key")
        return cls(key_id=key_id, public_key=public_key)
