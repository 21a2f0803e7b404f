from __future__ import annotations

import copy
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from loguru import logger

from clawdis.config.paths import is_config_path_truthy, is_truthy, resolve_config_path, resolve_skill_config
from clawdis.config.settings import CONFIG_DIR
from clawdis.skills import loader
from clawdis.skills.types import (
    SkillEntry,
    SkillInstallOption,
    SkillRequirementSet,
    SkillRequires,
    SkillStatusConfigCheck,
    SkillStatusEntry,
    SkillStatusReport,
)
from clawdis.utils.logging import setup_logging

BinaryChecker = Callable[[str], bool]

setup_logging()


def resolve_skill_key(entry: SkillEntry) -> str:
    if entry.clawdis is not None and entry.clawdis.skill_key:
        return entry.clawdis.skill_key
    return entry.skill.name


def _requires(entry: SkillEntry) -> SkillRequires:
    if entry.clawdis is None or entry.clawdis.requires is None:
        return SkillRequires()
    return entry.clawdis.requires


def _binary_present(name: str, has_binary: BinaryChecker) -> bool:
    try:
        return bool(has_binary(name))
    except OSError as exc:
        logger.debug("binary check failed bin={} error={}", name, exc)
        return False


def _env_satisfied(
    name: str,
    *,
    env: Mapping[str, str],
    skill_config: Mapping[str, Any] | None,
    primary_env: str | None,
) -> bool:
    if env.get(name):
        return True
    if skill_config is None:
        return False
    overrides = skill_config.get("env")
    if isinstance(overrides, Mapping) and is_truthy(overrides.get(name)):
        return True
    # A stored apiKey only stands in for the skill's primary env variable.
    return is_truthy(skill_config.get("apiKey")) and primary_env == name


def evaluate_missing_requirements(
    entry: SkillEntry,
    config: Mapping[str, Any] | None = None,
    *,
    env: Mapping[str, str] | None = None,
    has_binary: BinaryChecker | None = None,
) -> SkillRequirementSet:
    """Return the declared requirements that are currently unmet, in declared order.

    Skills marked ``always`` report nothing missing.
    """
    meta = entry.clawdis
    if meta is not None and meta.always:
        return SkillRequirementSet()

    environ = os.environ if env is None else env
    checker = has_binary or loader.has_binary
    requires = _requires(entry)
    skill_config = resolve_skill_config(config, resolve_skill_key(entry))
    primary_env = meta.primary_env if meta is not None else None

    return SkillRequirementSet(
        bins=tuple(name for name in requires.bins if not _binary_present(name, checker)),
        env=tuple(
            name
            for name in requires.env
            if not _env_satisfied(name, env=environ, skill_config=skill_config, primary_env=primary_env)
        ),
        config=tuple(path for path in requires.config if not is_config_path_truthy(config, path)),
    )


def normalize_install_options(entry: SkillEntry) -> tuple[SkillInstallOption, ...]:
    install = entry.clawdis.install if entry.clawdis is not None else []
    if not install:
        return ()
    options: list[SkillInstallOption] = []
    for index, spec in enumerate(install):
        option_id = (spec.id or "").strip() or f"{spec.kind}-{index}"
        label = (spec.label or "").strip() or spec.default_label() or "Run installer"
        options.append(
            SkillInstallOption(
                id=option_id,
                kind=spec.kind,
                label=label,
                bins=tuple(spec.bins or ()),
            )
        )
    return tuple(options)


def build_skill_status(
    entry: SkillEntry,
    config: Mapping[str, Any] | None = None,
    *,
    env: Mapping[str, str] | None = None,
    has_binary: BinaryChecker | None = None,
) -> SkillStatusEntry:
    skill_key = resolve_skill_key(entry)
    skill_config = resolve_skill_config(config, skill_key)
    disabled = skill_config is not None and skill_config.get("enabled") is False
    meta = entry.clawdis
    always = meta is not None and meta.always is True
    requires = _requires(entry)

    missing = evaluate_missing_requirements(entry, config, env=env, has_binary=has_binary)
    config_checks = tuple(
        SkillStatusConfigCheck(
            path=path,
            value=copy.deepcopy(resolve_config_path(config, path)),
            satisfied=is_config_path_truthy(config, path),
        )
        for path in requires.config
    )
    eligible = not disabled and (always or missing.is_empty())
    logger.debug(
        "skill status name={} key={} eligible={} disabled={} missing={}",
        entry.skill.name,
        skill_key,
        eligible,
        disabled,
        missing.to_dict(),
    )

    return SkillStatusEntry(
        name=entry.skill.name,
        description=entry.skill.description,
        source=entry.skill.source,
        file_path=entry.skill.file_path,
        base_dir=entry.skill.base_dir,
        skill_key=skill_key,
        primary_env=meta.primary_env if meta is not None else None,
        emoji=meta.emoji if meta is not None else None,
        homepage=meta.homepage if meta is not None else None,
        always=always,
        disabled=disabled,
        eligible=eligible,
        requirements=SkillRequirementSet(
            bins=tuple(requires.bins),
            env=tuple(requires.env),
            config=tuple(requires.config),
        ),
        missing=missing,
        config_checks=config_checks,
        install=normalize_install_options(entry),
    )


def build_workspace_skill_status(
    workspace_dir: str | Path,
    *,
    config: Mapping[str, Any] | None = None,
    managed_skills_dir: str | Path | None = None,
    entries: list[SkillEntry] | None = None,
    env: Mapping[str, str] | None = None,
    has_binary: BinaryChecker | None = None,
) -> SkillStatusReport:
    managed = str(managed_skills_dir) if managed_skills_dir is not None else str(CONFIG_DIR / "skills")
    if entries is None:
        entries = loader.load_workspace_skill_entries(
            workspace_dir,
            config=config,
            managed_skills_dir=managed,
        )
    skills = tuple(build_skill_status(entry, config, env=env, has_binary=has_binary) for entry in entries)
    logger.info(
        "skill status built workspace={} total={} eligible={}",
        workspace_dir,
        len(skills),
        sum(1 for row in skills if row.eligible),
    )
    return SkillStatusReport(
        workspace_dir=str(workspace_dir),
        managed_skills_dir=managed,
        skills=skills,
    )
