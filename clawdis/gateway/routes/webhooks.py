from __future__ import annotations

import inspect
import json
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger

from clawdis.config.paths import resolve_config_path
from clawdis.webhooks.nextcloud_talk import extract_headers, verify_signature

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])

_DEFAULT_MAX_PAYLOAD_KB = 256


def _error_response(
    *,
    channel: str,
    code: str,
    message: str,
    status_code: int,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    body: dict[str, Any] = {
        "ok": False,
        "channel": channel,
        "error": {
            "code": code,
            "message": message,
        },
    }
    if details:
        body["error"]["details"] = details
    return JSONResponse(body, status_code=status_code)


def _channel_cfg(request: Request, channel_name: str) -> dict[str, Any]:
    row = resolve_config_path(getattr(request.app.state, "config", None), f"channels.{channel_name}")
    return row if isinstance(row, dict) else {}


def _max_payload_bytes(cfg: dict[str, Any]) -> int:
    try:
        max_kb = int(cfg.get("maxPayloadKb", _DEFAULT_MAX_PAYLOAD_KB))
    except (TypeError, ValueError):
        max_kb = _DEFAULT_MAX_PAYLOAD_KB
    if max_kb <= 0:
        max_kb = _DEFAULT_MAX_PAYLOAD_KB
    return max_kb * 1024


@router.post("/nextcloud-talk")
async def handle_nextcloud_talk_webhook(request: Request) -> JSONResponse:
    channel = "nextcloud-talk"
    cfg = _channel_cfg(request, channel)
    secret = str(cfg.get("botSecret") or "").strip()
    if not secret:
        return _error_response(
            channel=channel,
            code="not_configured",
            message="Nextcloud Talk bot secret is not configured",
            status_code=503,
        )

    headers = extract_headers(request.headers)
    if headers is None:
        return _error_response(
            channel=channel,
            code="missing_headers",
            message="Signature, random and backend headers are required",
            status_code=401,
        )

    raw_body = await request.body()
    max_bytes = _max_payload_bytes(cfg)
    if len(raw_body) > max_bytes:
        return _error_response(
            channel=channel,
            code="payload_too_large",
            message=f"Payload exceeds {max_bytes // 1024}KB",
            status_code=413,
        )

    if not verify_signature(signature=headers.signature, random=headers.random, body=raw_body, secret=secret):
        logger.warning("nextcloud talk webhook rejected backend={} reason=invalid_signature", headers.backend)
        return _error_response(
            channel=channel,
            code="invalid_signature",
            message="Webhook signature is invalid",
            status_code=401,
        )

    try:
        payload = json.loads(raw_body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        payload = None
    if not isinstance(payload, dict):
        return _error_response(
            channel=channel,
            code="invalid_payload",
            message="Payload must be a JSON object",
            status_code=400,
        )

    handler = getattr(request.app.state, "nextcloud_talk_handler", None)
    if callable(handler):
        try:
            result = handler(payload, headers)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("nextcloud talk webhook handler failed backend={}", headers.backend)
            return _error_response(
                channel=channel,
                code="handler_failed",
                message="Webhook handler failed",
                status_code=500,
            )
    else:
        logger.info("nextcloud talk webhook received without handler type={}", payload.get("type"))
    return JSONResponse({"ok": True, "channel": channel})
