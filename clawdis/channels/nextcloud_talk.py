from __future__ import annotations

import json
import uuid
from typing import Any

import httpx
from loguru import logger

from clawdis.webhooks.nextcloud_talk import generate_signature

BOT_MESSAGE_PATH = "/ocs/v2.php/apps/spreed/api/v1/bot/{room_token}/message"


class NextcloudTalkError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NextcloudTalkClient:
    """Outbound half of the Nextcloud Talk bot protocol.

    Every request is signed with a fresh random nonce; the signature covers
    ``random + message`` (the message text, not the JSON body).
    """

    def __init__(
        self,
        base_url: str,
        secret: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not str(base_url or "").strip():
            raise ValueError("base_url is required")
        if not str(secret or "").strip():
            raise ValueError("secret is required")
        self.base_url = base_url.rstrip("/")
        self.secret = secret
        self.timeout = timeout
        self._transport = transport

    def _url(self, room_token: str) -> str:
        return self.base_url + BOT_MESSAGE_PATH.format(room_token=room_token)

    async def send_message(self, room_token: str, message: str, *, reply_to: int | None = None) -> dict[str, Any]:
        token = str(room_token or "").strip()
        if not token:
            raise ValueError("room_token is required")
        payload: dict[str, Any] = {"message": message, "referenceId": uuid.uuid4().hex}
        if reply_to is not None:
            payload["replyTo"] = reply_to
        signed = generate_signature(body=message, secret=self.secret)
        headers = {
            "OCS-APIRequest": "true",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-Nextcloud-Talk-Bot-Random": signed.random,
            "X-Nextcloud-Talk-Bot-Signature": signed.signature,
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(self._url(token), content=json.dumps(payload), headers=headers)
        if response.status_code >= 400:
            logger.error("nextcloud talk send failed room={} status={}", token, response.status_code)
            raise NextcloudTalkError(
                f"nextcloud talk send failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        logger.info("nextcloud talk message sent room={} chars={}", token, len(message))
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
