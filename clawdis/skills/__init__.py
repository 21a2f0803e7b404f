from __future__ import annotations

from clawdis.skills.loader import has_binary, load_workspace_skill_entries
from clawdis.skills.status import (
    build_skill_status,
    build_workspace_skill_status,
    evaluate_missing_requirements,
    normalize_install_options,
)
from clawdis.skills.types import SkillEntry, SkillStatusEntry, SkillStatusReport

__all__ = [
    "SkillEntry",
    "SkillStatusEntry",
    "SkillStatusReport",
    "build_skill_status",
    "build_workspace_skill_status",
    "evaluate_missing_requirements",
    "has_binary",
    "load_workspace_skill_entries",
    "normalize_install_options",
]
