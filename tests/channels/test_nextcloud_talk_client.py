from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from clawdis.channels.nextcloud_talk import NextcloudTalkClient, NextcloudTalkError
from clawdis.webhooks.nextcloud_talk import verify_signature


def test_send_message_signs_message_text() -> None:
    captured: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(201, json={"ocs": {"meta": {"status": "ok"}}})

    client = NextcloudTalkClient(
        "https://cloud.example.com/",
        "s3cr3t",
        transport=httpx.MockTransport(_handler),
    )
    result = asyncio.run(client.send_message("room42", "hello there", reply_to=7))

    assert result == {"ocs": {"meta": {"status": "ok"}}}
    request = captured[0]
    assert str(request.url) == "https://cloud.example.com/ocs/v2.php/apps/spreed/api/v1/bot/room42/message"
    assert request.headers["OCS-APIRequest"] == "true"
    body = json.loads(request.content)
    assert body["message"] == "hello there"
    assert body["replyTo"] == 7
    assert body["referenceId"]
    assert verify_signature(
        signature=request.headers["X-Nextcloud-Talk-Bot-Signature"],
        random=request.headers["X-Nextcloud-Talk-Bot-Random"],
        body="hello there",
        secret="s3cr3t",
    )


def test_send_message_raises_on_http_error() -> None:
    client = NextcloudTalkClient(
        "https://cloud.example.com",
        "s3cr3t",
        transport=httpx.MockTransport(lambda request: httpx.Response(401)),
    )
    with pytest.raises(NextcloudTalkError) as exc_info:
        asyncio.run(client.send_message("room42", "hi"))
    assert exc_info.value.status_code == 401


def test_client_requires_base_url_and_secret() -> None:
    with pytest.raises(ValueError):
        NextcloudTalkClient("", "s")
    with pytest.raises(ValueError):
        NextcloudTalkClient("https://cloud.example.com", "")
