"""Shared fixtures: an in-memory capture store and a signing operator."""

import hashlib
import sys
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

# Add parent src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from intrace_verify import CaptureMetadata, EventRecord, OperatorKey, compute_event_hash
from intrace_verify.errors import NetworkError, NotFoundError


SCREENSHOT_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 4


def public_key_hex(private_key: ed25519.Ed25519PrivateKey) -> str:
    return private_key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    ).hex()


def sign_event(event: dict, private_key: ed25519.Ed25519PrivateKey) -> dict:
    """Hash and sign an event the way the event log authority does."""
    signed = dict(event)
    signed["event_hash"] = compute_event_hash(event)
    signed["signature"] = private_key.sign(signed["event_hash"].encode("utf-8")).hex()
    return signed


class FakeCaptureStore:
    """In-memory CaptureStore. Set the *_error attributes to simulate outages."""

    def __init__(self):
        self.metadata: dict[str, CaptureMetadata] = {}
        self.manifests: dict[str, dict] = {}
        self.artifacts: dict[tuple[str, str], bytes] = {}
        self.events: dict[str, EventRecord] = {}
        self.keys: list[OperatorKey] = []
        self.metadata_error: Exception | None = None
        self.artifact_error: Exception | None = None
        self.event_error: Exception | None = None
        self.keys_error: Exception | None = None
        self.calls: list[tuple] = []

    async def get_capture_metadata(self, capture_id):
        self.calls.append(("metadata", capture_id))
        if self.metadata_error:
            raise self.metadata_error
        if capture_id not in self.metadata:
            raise NotFoundError("capture not found")
        return self.metadata[capture_id]

    async def get_capture_manifest(self, capture_id):
        self.calls.append(("manifest", capture_id))
        if capture_id not in self.manifests:
            raise NotFoundError("manifest not found")
        return self.manifests[capture_id]

    async def get_capture_bytes(self, capture_id, artifact_kind):
        self.calls.append(("bytes", capture_id, artifact_kind))
        if self.artifact_error:
            raise self.artifact_error
        if (capture_id, artifact_kind) not in self.artifacts:
            raise NotFoundError(f"{artifact_kind} not found")
        return self.artifacts[(capture_id, artifact_kind)]

    async def get_event(self, event_id):
        self.calls.append(("event", event_id))
        if self.event_error:
            raise self.event_error
        if event_id not in self.events:
            raise NotFoundError("event not found")
        return self.events[event_id]

    async def list_operator_keys(self):
        self.calls.append(("keys",))
        if self.keys_error:
            raise self.keys_error
        return list(self.keys)


@pytest.fixture
def operator_private_key():
    return ed25519.Ed25519PrivateKey.generate()


@pytest.fixture
def base_event():
    return {
        "event_id": "e1",
        "prev_event_hash": None,
        "capture_id": "c1",
        "url": "https://example.com/",
        "captured_at_utc": "2024-01-01T00:00:00Z",
        "hashes": {
            "screenshot_sha256": hashlib.sha256(SCREENSHOT_BYTES).hexdigest(),
            "dom_sha256": "ab" * 32,
        },
        "operator_key_id": "k1",
    }


@pytest.fixture
def signed_event(base_event, operator_private_key):
    return sign_event(base_event, operator_private_key)


@pytest.fixture
def store(signed_event, operator_private_key):
    """A capture c1 with a logged, signed event e1 and registry key k1."""
    fake = FakeCaptureStore()
    fake.metadata["c1"] = CaptureMetadata.from_dict({
        "capture_id": "c1",
        "url": "https://example.com/",
        "final_url": "https://example.com/home",
        "captured_at_utc": "2024-01-01T00:00:00Z",
        "browser": {"name": "Chromium", "version": "120.0"},
        "viewport": {"width": 1280, "height": 800},
        "hashes": dict(signed_event["hashes"]),
        "event_id": "e1",
    })
    fake.manifests["c1"] = {"files": ["screenshot.png", "dom.html"]}
    fake.artifacts[("c1", "screenshot")] = SCREENSHOT_BYTES
    fake.events["e1"] = EventRecord.from_dict(signed_event)
    fake.keys.append(OperatorKey("k1", public_key_hex(operator_private_key)))
    return fake


@pytest.fixture
def network_error():
    return NetworkError("connection refused")
