from __future__ import annotations

import re
import secrets
from typing import Any

from fastapi import APIRouter, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from clawdis.config.paths import resolve_config_path
from clawdis.skills.status import build_workspace_skill_status

router = APIRouter()

REDACTED = "***"
_SECRET_SEGMENT = re.compile(r"(secret|token|apikey|api_key|password|passwd)", re.IGNORECASE)


def _check_bearer(request: Request, auth: str | None) -> None:
    expected = str(resolve_config_path(request.app.state.config, "gateway.token") or "").strip()
    if not expected:
        return
    if not auth or not auth.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")
    got = auth.removeprefix("Bearer ").strip()
    if not secrets.compare_digest(got, expected):
        raise HTTPException(status_code=403, detail="Invalid token")


def _redact_config_checks(skill: dict[str, Any]) -> dict[str, Any]:
    for check in skill.get("configChecks", []):
        last_segment = str(check.get("path", "")).rsplit(".", 1)[-1]
        if check.get("value") is not None and _SECRET_SEGMENT.search(last_segment):
            check["value"] = REDACTED
    return skill


@router.get("/api/skills/status")
def api_skills_status(
    request: Request,
    workspace: str | None = Query(default=None),
    authorization: str | None = Header(default=None),
) -> JSONResponse:
    _check_bearer(request, authorization)
    config = request.app.state.config
    workspace_dir = workspace or str(config.get("workspace_path") or "")
    payload = build_workspace_skill_status(workspace_dir, config=config).to_dict()
    payload["skills"] = [_redact_config_checks(skill) for skill in payload["skills"]]
    return JSONResponse({"ok": True, **payload})
