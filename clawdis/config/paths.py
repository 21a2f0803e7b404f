from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


def resolve_config_path(config: Mapping[str, Any] | None, path: str) -> Any | None:
    """Walk a dotted path (``a.b.0.c``) through nested mappings and sequences.

    Returns ``None`` as soon as a segment cannot be followed.
    """
    current: Any = config
    for part in str(path or "").split("."):
        part = part.strip()
        if not part or current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part)
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else None
        else:
            return None
    return current


def is_truthy(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (Mapping, Sequence, set, frozenset)):
        return len(value) > 0
    return True


def is_config_path_truthy(config: Mapping[str, Any] | None, path: str) -> bool:
    return is_truthy(resolve_config_path(config, path))


def resolve_skill_config(config: Mapping[str, Any] | None, skill_key: str) -> dict[str, Any] | None:
    """Per-skill section stored under ``skills.entries.<skill_key>``."""
    if not isinstance(config, Mapping):
        return None
    skills = config.get("skills")
    if not isinstance(skills, Mapping):
        return None
    entries = skills.get("entries")
    if not isinstance(entries, Mapping):
        return None
    row = entries.get(skill_key)
    return dict(row) if isinstance(row, Mapping) else None
