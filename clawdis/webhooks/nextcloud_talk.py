from __future__ import annotations

import hashlib
import hmac
import secrets
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

SIGNATURE_HEADER = "x-nextcloud-talk-signature"
RANDOM_HEADER = "x-nextcloud-talk-random"
BACKEND_HEADER = "x-nextcloud-talk-backend"


@dataclass(frozen=True, slots=True)
class NextcloudTalkHeaders:
    signature: str
    random: str
    backend: str


@dataclass(frozen=True, slots=True)
class SignedPayload:
    random: str
    signature: str


def _as_bytes(value: str | bytes) -> bytes:
    return value if isinstance(value, bytes) else str(value).encode("utf-8")


def compute_signature(*, random: str, body: str | bytes, secret: str) -> str:
    """HMAC-SHA256 over ``random + body`` keyed with ``secret``, hex encoded."""
    message = _as_bytes(random) + _as_bytes(body)
    return hmac.new(_as_bytes(secret), message, hashlib.sha256).hexdigest()


def verify_signature(*, signature: str, random: str, body: str | bytes, secret: str) -> bool:
    """Check an inbound webhook signature in constant time. Never raises."""
    if not signature or not random or not secret:
        return False
    expected = compute_signature(random=random, body=body, secret=secret).encode("ascii")
    provided = _as_bytes(signature)
    if len(provided) != len(expected):
        return False
    return hmac.compare_digest(provided, expected)


def extract_headers(headers: Mapping[str, Any]) -> NextcloudTalkHeaders | None:
    """Pull the three bot headers out of a request header mapping.

    Lookup is case-insensitive and list values yield their first item.
    Returns ``None`` when any header is missing or blank.
    """
    lowered: dict[str, Any] = {}
    for key, value in headers.items():
        lowered.setdefault(str(key).lower(), value)

    def _get(name: str) -> str:
        value = lowered.get(name)
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        return str(value).strip() if value is not None else ""

    signature = _get(SIGNATURE_HEADER)
    random = _get(RANDOM_HEADER)
    backend = _get(BACKEND_HEADER)
    if not signature or not random or not backend:
        return None
    return NextcloudTalkHeaders(signature=signature, random=random, backend=backend)


def generate_signature(*, body: str | bytes, secret: str) -> SignedPayload:
    random = secrets.token_hex(32)
    return SignedPayload(random=random, signature=compute_signature(random=random, body=body, secret=secret))
