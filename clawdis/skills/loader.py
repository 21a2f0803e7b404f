from __future__ import annotations

import json
import shutil
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from loguru import logger

from clawdis.config.paths import resolve_config_path
from clawdis.config.settings import CONFIG_DIR
from clawdis.skills.types import ClawdisMetadata, Skill, SkillEntry

BUNDLED_SKILLS_DIR = Path(__file__).resolve().parent / "bundled"


def has_binary(name: str) -> bool:
    binary = str(name or "").strip()
    if not binary:
        return False
    return shutil.which(binary) is not None


def _extract_frontmatter(text: str) -> tuple[dict[str, str], str]:
    """
    Parse markdown frontmatter without requiring PyYAML.
    Returns: (metadata, body_without_frontmatter)
    """
    data: dict[str, str] = {}
    body = text
    normalized = text.replace("\r\n", "\n")
    if not normalized.startswith("---\n"):
        return data, body
    marker = "\n---\n"
    end = normalized.find(marker, 4)
    if end == -1:
        return data, body
    front = normalized[4:end]
    body = normalized[end + len(marker) :]
    for line in front.splitlines():
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        data[key.strip()] = value.strip().strip("'").strip('"')
    return data, body


def _parse_clawdis_metadata(raw: str) -> ClawdisMetadata | None:
    if not raw:
        return None
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None
    nested = payload.get("clawdis")
    if not isinstance(nested, dict):
        return None
    return ClawdisMetadata.from_dict(nested)


def parse_skill_file(path: Path, *, source: str) -> SkillEntry | None:
    text = path.read_text(encoding="utf-8", errors="ignore")
    meta, _body = _extract_frontmatter(text)
    name = meta.get("name", "").strip() or path.parent.name
    if not name:
        return None
    skill = Skill(
        name=name,
        description=meta.get("description", "").strip(),
        source=source,
        file_path=str(path),
        base_dir=str(path.parent),
    )
    return SkillEntry(skill=skill, clawdis=_parse_clawdis_metadata(meta.get("metadata", "")))


def _load_dir(root: Path, source: str) -> list[SkillEntry]:
    if not root.is_dir():
        return []
    rows: list[SkillEntry] = []
    for path in sorted(root.glob("*/SKILL.md")):
        try:
            entry = parse_skill_file(path, source=source)
        except OSError as exc:
            logger.warning("skill file unreadable path={} error={}", path, exc)
            continue
        if entry is not None:
            rows.append(entry)
    return rows


def _extra_dirs(config: Mapping[str, Any] | None) -> list[Path]:
    raw = resolve_config_path(config, "skills.load.extraDirs")
    if not isinstance(raw, list):
        return []
    return [Path(str(item)).expanduser() for item in raw if str(item).strip()]


def load_workspace_skill_entries(
    workspace_dir: str | Path,
    *,
    config: Mapping[str, Any] | None = None,
    managed_skills_dir: str | Path | None = None,
    bundled_skills_dir: str | Path | None = None,
) -> list[SkillEntry]:
    """Discover SKILL.md entries; workspace beats managed beats bundled beats extra dirs."""
    managed = Path(managed_skills_dir) if managed_skills_dir is not None else CONFIG_DIR / "skills"
    bundled = Path(bundled_skills_dir) if bundled_skills_dir is not None else BUNDLED_SKILLS_DIR
    roots: list[tuple[Path, str]] = [(path, "extra") for path in _extra_dirs(config)]
    roots.extend(
        [
            (bundled, "bundled"),
            (managed, "managed"),
            (Path(workspace_dir) / "skills", "workspace"),
        ]
    )

    found: dict[str, SkillEntry] = {}
    for root, source in roots:
        for entry in _load_dir(root, source):
            if entry.skill.name in found:
                logger.debug("skill overridden name={} source={}", entry.skill.name, source)
            found[entry.skill.name] = entry
    rows = sorted(found.values(), key=lambda item: item.skill.name.lower())
    logger.debug("skills loaded workspace={} count={}", workspace_dir, len(rows))
    return rows
