"""HMAC verification for provider webhook deliveries.

The provider signs ``"{webhook-id}.{webhook-timestamp}.{body}"`` with
HMAC-SHA256 and sends ``webhook-signature`` as a space-separated list of
``keyid,base64signature`` entries. A delivery is authentic when *any* entry
matches: during key rotation the provider signs with old and new keys at
once, so checking a single candidate would reject valid callbacks.
"""

from __future__ import annotations

import base64
import hashlib
import hmac

SECRET_PREFIX = "whsec_"


def decode_secret(secret: str) -> bytes:
    """Decode a ``whsec_<base64>`` signing key into raw HMAC key bytes."""
    value = secret.strip()
    if value.startswith(SECRET_PREFIX):
        value = value[len(SECRET_PREFIX):]
    elif "_" in value:
        value = value.split("_", 1)[1]
    return base64.b64decode(value)


def compute_signature(secret: str, webhook_id: str, timestamp: str, body: bytes) -> str:
    """Base64-encoded HMAC-SHA256 of the signed content."""
    signed_content = f"{webhook_id}.{timestamp}.".encode() + body
    digest = hmac.new(decode_secret(secret), signed_content, hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def parse_signature_header(header: str) -> list[str]:
    """Extract the signature part of each ``keyid,signature`` entry."""
    candidates: list[str] = []
    for entry in header.split(" "):
        if "," not in entry:
            continue
        _, signature = entry.split(",", 1)
        if signature:
            candidates.append(signature)
    return candidates


def verify_signature(secret: str, webhook_id: str, timestamp: str, body: bytes, signature_header: str) -> bool:
    """True when any candidate signature in the header matches the recomputed one."""
    expected = compute_signature(secret, webhook_id, timestamp, body)
    return any(
        hmac.compare_digest(candidate.encode(), expected.encode())
        for candidate in parse_signature_header(signature_header)
    )
