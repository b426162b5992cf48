"""
Collaborator contract and its HTTP binding.

The verifier only reads: capture metadata, manifest and artifact bytes from
the capture API, events and operator keys from the event log. Every failure
is mapped onto the intrace_verify.errors taxonomy so the verifier never sees
a raw httpx exception.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from .config import VerifierConfig, get_config
from .errors import DecodeError, NetworkError, NotFoundError
from .models import CaptureMetadata, EventRecord, OperatorKey

logger = logging.getLogger(__name__)


class CaptureStore(Protocol):
    """Read-only view of the capture API and the event log."""

    async def get_capture_metadata(self, capture_id: str) -> CaptureMetadata: ...

    async def get_capture_manifest(self, capture_id: str) -> dict[str, Any]: ...

    async def get_capture_bytes(self, capture_id: str, artifact_kind: str) -> bytes: ...

    async def get_event(self, event_id: str) -> EventRecord: ...

    async def list_operator_keys(self) -> list[OperatorKey]: ...


class HttpCaptureApi:
    """
    CaptureStore over the capture API and event log HTTP services.

    Owns its httpx.AsyncClient unless one is passed in. Use as an async
    context manager or call aclose().
    """

    def __init__(
        self,
        config: VerifierConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.config = config or get_config()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=self.config.http_timeout,
            follow_redirects=True,
        )

    async def __aenter__(self) -> HttpCaptureApi:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    # URLs a host program can link to directly

    def capture_url(self, capture_id: str, artifact: str | None = None) -> str:
        base = f"{self.config.api_base}/captures/{capture_id}"
        return f"{base}/{artifact}" if artifact else base

    def screenshot_url(self, capture_id: str) -> str:
        return self.capture_url(capture_id, "screenshot")

    def dom_url(self, capture_id: str) -> str:
        return self.capture_url(capture_id, "dom")

    def manifest_url(self, capture_id: str) -> str:
        return self.capture_url(capture_id, "manifest")

    def bundle_url(self, capture_id: str) -> str:
        return self.capture_url(capture_id, "bundle")

    # CaptureStore

    async def get_capture_metadata(self, capture_id: str) -> CaptureMetadata:
        payload = await self._get_json(self.capture_url(capture_id), "capture")
        return CaptureMetadata.from_dict(payload, capture_id=capture_id)

    async def get_capture_manifest(self, capture_id: str) -> dict[str, Any]:
        payload = await self._get_json(self.manifest_url(capture_id), "manifest")
        if not isinstance(payload, dict):
            raise DecodeError("manifest must be a JSON object")
        return payload

    async def get_capture_bytes(self, capture_id: str, artifact_kind: str) -> bytes:
        response = await self._get(self.capture_url(capture_id, artifact_kind), artifact_kind)
        return response.content

    async def get_event(self, event_id: str) -> EventRecord:
        payload = await self._get_json(f"{self.config.event_log_base}/events/{event_id}", "event")
        return EventRecord.from_dict(payload)

    async def get_recent_events(self, limit: int = 10) -> list[EventRecord]:
        payload = await self._get_json(
            f"{self.config.event_log_base}/events", "events", params={"limit": limit}
        )
        if isinstance(payload, dict):
            payload = payload.get("events")
        if not isinstance(payload, list):
            raise DecodeError("event listing must be a list of events")
        return [EventRecord.from_dict(item) for item in payload]

    async def list_operator_keys(self) -> list[OperatorKey]:
        payload = await self._get_json(f"{self.config.event_log_base}/keys", "operator keys")
        keys = payload.get("keys") if isinstance(payload, dict) else None
        if not isinstance(keys, list):
            raise DecodeError("key listing must contain a 'keys' array")
        return [OperatorKey.from_dict(item) for item in keys]

    # Transport

    async def _get(self, url: str, what: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self.client.get(url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("GET %s failed: %s", url, exc)
            raise NetworkError(f"Failed to fetch {what}: {exc}") from exc

        if response.status_code == 404:
            raise NotFoundError(f"{what} not found")
        if response.is_error:
            logger.warning("GET %s returned HTTP %s", url, response.status_code)
            raise NetworkError(f"Failed to fetch {what}: HTTP {response.status_code}")
        return response

    async def _get_json(self, url: str, what: str, **kwargs: Any) -> Any:
        response = await self._get(url, what, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(f"{what} response is not valid JSON") from exc
