"""HMAC-SHA256 signatures for webhook bodies."""

from __future__ import annotations

import hashlib
import hmac

SIGNATURE_HEADER = "X-WhatsApp-Signature"
EVENT_HEADER = "X-WhatsApp-Event"
SIGNATURE_PREFIX = "sha256="


class SignatureVerificationError(Exception):
    """Raised when a webhook signature is missing or does not match the body."""


def sign_payload(secret: str, body: bytes) -> str:
    """Signature header value for ``body``: ``sha256=<hex digest>``."""

    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def validate_signature(secret: str, body: bytes, signature: str | None) -> None:
    """Check a signature computed over the exact bytes that were received."""

    if not signature:
        raise SignatureVerificationError("signature missing")
    expected = sign_payload(secret, body)
    if not signature.startswith(SIGNATURE_PREFIX):
        signature = f"{SIGNATURE_PREFIX}{signature}"
    if not hmac.compare_digest(expected, signature):
        raise SignatureVerificationError("signature mismatch")
