from __future__ import annotations

import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any


def _can_write_under(path: Path) -> bool:
    check_dir = path / ".clawdis"
    check_file = check_dir / ".write_check"
    try:
        check_dir.mkdir(parents=True, exist_ok=True)
        check_file.write_text("ok", encoding="utf-8")
        check_file.unlink()
        return True
    except OSError:
        return False


def _resolve_home_dir() -> Path:
    """
    Resolve home directory consistently across OSes and test environments.

    Priority:
    1) CLAWDIS_HOME
    2) HOME
    3) platform default (Path.home()), then a temp dir, then cwd
    """
    for env_name in ("CLAWDIS_HOME", "HOME"):
        value = os.getenv(env_name, "").strip()
        if value:
            return Path(value).expanduser()
    home = Path.home()
    if _can_write_under(home):
        return home
    temp_home = Path(tempfile.gettempdir()) / "clawdis-home"
    if _can_write_under(temp_home):
        return temp_home
    return Path.cwd()


CONFIG_DIR = _resolve_home_dir() / ".clawdis"
CONFIG_PATH = CONFIG_DIR / "clawdis.json"

DEFAULT_CONFIG: dict[str, Any] = {
    "workspace_path": str(CONFIG_DIR / "workspace"),
    "gateway": {
        "host": "127.0.0.1",
        "port": 18789,
        "token": "",
    },
    "skills": {
        "load": {"extraDirs": []},
        "entries": {},
    },
    "channels": {
        "nextcloud-talk": {
            "enabled": False,
            "baseUrl": "",
            "botSecret": "",
        },
    },
}


def _deep_merge(base: dict[str, Any], extra: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for key, value in extra.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _deep_merge(out[key], value)
        else:
            out[key] = value
    return out


def _read_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    if path.suffix.lower() in {".yaml", ".yml"}:
        import yaml

        loaded = yaml.safe_load(text) or {}
        if not isinstance(loaded, dict):
            raise RuntimeError("invalid config format: expected mapping")
        return dict(loaded)
    loaded = json.loads(text)
    if not isinstance(loaded, dict):
        raise RuntimeError("invalid config format: expected object")
    return dict(loaded)


def _env_overrides() -> dict[str, Any]:
    out: dict[str, Any] = {}
    workspace = os.getenv("CLAWDIS_WORKSPACE", "").strip()
    if workspace:
        out["workspace_path"] = workspace
    host = os.getenv("CLAWDIS_GATEWAY_HOST", "").strip()
    if host:
        out.setdefault("gateway", {})["host"] = host
    port = os.getenv("CLAWDIS_GATEWAY_PORT", "").strip()
    if port:
        try:
            out.setdefault("gateway", {})["port"] = int(port)
        except ValueError:
            pass
    return out


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    target = Path(path) if path else CONFIG_PATH
    merged = _deep_merge(copy.deepcopy(DEFAULT_CONFIG), _read_file(target))
    return _deep_merge(merged, _env_overrides())


def save_config(config: dict[str, Any], path: str | Path | None = None) -> Path:
    target = Path(path) if path else CONFIG_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(config, ensure_ascii=False, indent=2), encoding="utf-8")
    return target
