"""HMAC signatures for payment webhooks.

The provider sends ``<header>: t=<unix seconds>,v1=<hex digest>`` where the
digest is HMAC-SHA256 over ``"<t>.<raw body>"`` with the shared webhook
secret. Several ``v1`` values may be present while a secret is being rotated.
"""

from __future__ import annotations

import hashlib
import hmac
import time
from typing import Optional

from .exceptions import InvalidSignature

SCHEME = "v1"


def compute_signature(secret: str, timestamp: int, payload: bytes) -> str:
    signed = f"{timestamp}.".encode() + payload
    return hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()


def build_signature_header(secret: str, payload: bytes, timestamp: Optional[int] = None) -> str:
    timestamp = int(time.time()) if timestamp is None else timestamp
    return f"t={timestamp},{SCHEME}={compute_signature(secret, timestamp, payload)}"


def _parse_header(header: str) -> tuple[int, list[str]]:
    timestamp: Optional[int] = None
    signatures: list[str] = []
    for part in header.split(","):
        key, sep, value = part.strip().partition("=")
        if not sep:
            continue
        if key == "t":
            try:
                timestamp = int(value)
            except ValueError as exc:
                raise InvalidSignature("Malformed signature timestamp") from exc
        elif key == SCHEME:
            signatures.append(value)
    if timestamp is None or not signatures:
        raise InvalidSignature("Malformed signature header")
    return timestamp, signatures


def verify_signature(
    secret: str,
    payload: bytes,
    header: Optional[str],
    *,
    tolerance: int = 300,
    now: Optional[float] = None,
) -> int:
    """Check ``header`` against ``payload``; return the signed timestamp."""
    if not header:
        raise InvalidSignature("Missing signature header")
    timestamp, signatures = _parse_header(header)
    now = time.time() if now is None else now
    if tolerance and abs(now - timestamp) > tolerance:
        raise InvalidSignature("Signature timestamp outside the tolerance window")
    expected = compute_signature(secret, timestamp, payload)
    if not any(hmac.compare_digest(expected, candidate) for candidate in signatures):
        raise InvalidSignature()
    return timestamp
