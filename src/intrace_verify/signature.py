"""
Ed25519 signature verification for event records.

The event log signs the event hash as hex TEXT (UTF-8 bytes of the 64
hex characters), not the raw 32-byte digest.
"""

import logging

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

from .errors import DecodeError

logger = logging.getLogger(__name__)

ED25519_PUBLIC_KEY_LENGTH = 32
ED25519_SIGNATURE_LENGTH = 64


def decode_hex(value: object, what: str = "value") -> bytes:
    """
    Decode a hex string from an untrusted source.

    Raises:
        DecodeError: If value is not a non-empty, even-length hex string
    """
    if not isinstance(value, str) or not value.strip():
        raise DecodeError(f"{what} is missing or not a string")
    try:
        return bytes.fromhex(value.strip())
    except ValueError as exc:
        raise DecodeError(f"{what} is not valid hex ({exc})") from exc


def load_operator_public_key(key_text: str) -> bytes:
    """
    Load an operator public key as raw 32-byte Ed25519 material.

    Registry keys are hex-encoded raw keys; PEM SubjectPublicKeyInfo text
    is accepted as well.

    Raises:
        DecodeError: If the key is malformed or not an Ed25519 key
    """
    text = (key_text or "").strip() if isinstance(key_text, str) else ""
    if not text:
        raise DecodeError("empty public key")

    if "BEGIN" in text:
        try:
            key_obj = serialization.load_pem_public_key(text.encode("utf-8"))
        except ValueError as exc:
            raise DecodeError(f"invalid PEM public key ({exc})") from exc
        if not isinstance(key_obj, ed25519.Ed25519PublicKey):
            raise DecodeError("expected Ed25519 public key")
        return key_obj.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    raw = decode_hex(text, "public key")
    if len(raw) != ED25519_PUBLIC_KEY_LENGTH:
        raise DecodeError(
            f"Ed25519 public key must be {ED25519_PUBLIC_KEY_LENGTH} bytes, got {len(raw)}"
        )
    return raw


def verify_ed25519(public_key: bytes, signature: bytes, message: bytes) -> bool:
    """
    Verify an Ed25519 signature. Never raises for malformed input.

    Args:
        public_key: Raw 32-byte public key
        signature: 64-byte signature
        message: Signed message bytes

    Returns:
        True only if the signature is valid for message under public_key
    """
    if len(public_key) != ED25519_PUBLIC_KEY_LENGTH or len(signature) != ED25519_SIGNATURE_LENGTH:
        return False
    try:
        key = ed25519.Ed25519PublicKey.from_public_bytes(bytes(public_key))
        key.verify(bytes(signature), bytes(message))
    except InvalidSignature:
        return False
    except ValueError as exc:
        # Raised for points that do not decode to a valid key
        logger.debug("Rejecting Ed25519 key material: %s", exc)
        return False
    return True


def event_signature_message(event_hash: str) -> bytes:
    """The exact bytes the event log signs for a given event hash."""
    return event_hash.encode("utf-8")
