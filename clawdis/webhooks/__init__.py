from __future__ import annotations

from clawdis.webhooks.nextcloud_talk import (
    NextcloudTalkHeaders,
    SignedPayload,
    extract_headers,
    generate_signature,
    verify_signature,
)

__all__ = [
    "NextcloudTalkHeaders",
    "SignedPayload",
    "extract_headers",
    "generate_signature",
    "verify_signature",
]
