"""
HMAC-SHA256 payload signing.

signature = HMAC-SHA256(secret, f"{timestamp}.{bodySha256}")

The output is fully determined by (body, secret, timestamp). Only the
default timestamp reads the clock; callers that need reproducible
signatures must pass one explicitly.
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

HEADER_TIMESTAMP = "x-mova-ts"
HEADER_BODY_SHA256 = "x-mova-body-sha256"
HEADER_SIGNATURE = "x-mova-sig"


@dataclass(frozen=True)
class SignedPayload:
    timestamp: str
    body_sha256: str
    signature: str

    def as_dict(self) -> Dict[str, str]:
        """Wire shape used in evidence artifacts and webhook metadata."""
        return {
            "timestamp": self.timestamp,
            "bodySha256": self.body_sha256,
            "signature": self.signature,
        }

    def as_headers(self) -> Dict[str, str]:
        return {
            HEADER_TIMESTAMP: self.timestamp,
            HEADER_BODY_SHA256: self.body_sha256,
            HEADER_SIGNATURE: self.signature,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SignedPayload":
        return cls(
            timestamp=str(data["timestamp"]),
            body_sha256=str(data["bodySha256"]),
            signature=str(data["signature"]),
        )


def utc_timestamp(now: Optional[datetime] = None) -> str:
    current = now or datetime.now(timezone.utc)
    return current.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def body_sha256(body: str) -> str:
    return hashlib.sha256(body.encode("utf-8")).hexdigest()


def compute_signature(secret: str, timestamp: str, body_hash: str) -> str:
    message = f"{timestamp}.{body_hash}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def sign_payload(body: str, secret: str, timestamp: Optional[str] = None) -> SignedPayload:
    ts = timestamp if timestamp is not None else utc_timestamp()
    digest = body_sha256(body)
    return SignedPayload(timestamp=ts, body_sha256=digest, signature=compute_signature(secret, ts, digest))


def verify_signature(body: str, secret: str, signed: SignedPayload) -> bool:
    """Recompute the HMAC for ``body`` and compare in constant time."""
    digest = body_sha256(body)
    if not hmac.compare_digest(digest, signed.body_sha256):
        return False
    expected = compute_signature(secret, signed.timestamp, digest)
    return hmac.compare_digest(expected, signed.signature)


__all__ = [
    "HEADER_BODY_SHA256",
    "HEADER_SIGNATURE",
    "HEADER_TIMESTAMP",
    "SignedPayload",
    "body_sha256",
    "compute_signature",
    "sign_payload",
    "utc_timestamp",
    "verify_signature",
]
