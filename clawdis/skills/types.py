from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar


def _clean_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _clean_str_list(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


@dataclass(slots=True)
class Skill:
    name: str
    description: str = ""
    source: str = ""
    file_path: str = ""
    base_dir: str = ""


@dataclass(slots=True)
class SkillRequires:
    bins: list[str] = field(default_factory=list)
    env: list[str] = field(default_factory=list)
    config: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> SkillRequires:
        data = dict(raw or {})
        return cls(
            bins=_clean_str_list(data.get("bins")),
            env=_clean_str_list(data.get("env")),
            config=_clean_str_list(data.get("config")),
        )


# Install specs: one dataclass per kind, each carrying only its own field.


@dataclass(slots=True)
class InstallSpec:
    kind: ClassVar[str] = "other"

    id: str | None = None
    label: str | None = None
    bins: list[str] | None = None

    def default_label(self) -> str | None:
        return None


@dataclass(slots=True)
class BrewInstallSpec(InstallSpec):
    kind: ClassVar[str] = "brew"

    formula: str | None = None

    def default_label(self) -> str | None:
        return f"Install {self.formula} (brew)" if self.formula else None


@dataclass(slots=True)
class NodeInstallSpec(InstallSpec):
    kind: ClassVar[str] = "node"

    package: str | None = None

    def default_label(self) -> str | None:
        return f"Install {self.package} (node)" if self.package else None


@dataclass(slots=True)
class GoInstallSpec(InstallSpec):
    kind: ClassVar[str] = "go"

    module: str | None = None

    def default_label(self) -> str | None:
        return f"Install {self.module} (go)" if self.module else None


@dataclass(slots=True)
class PnpmInstallSpec(InstallSpec):
    kind: ClassVar[str] = "pnpm"

    repo_path: str | None = None

    def default_label(self) -> str | None:
        return f"Install {self.repo_path} (pnpm)" if self.repo_path else None


@dataclass(slots=True)
class GitInstallSpec(InstallSpec):
    kind: ClassVar[str] = "git"

    url: str | None = None

    def default_label(self) -> str | None:
        return f"Clone {self.url}" if self.url else None


@dataclass(slots=True)
class OtherInstallSpec(InstallSpec):
    kind: ClassVar[str] = "other"


INSTALL_KINDS: dict[str, type[InstallSpec]] = {
    "brew": BrewInstallSpec,
    "node": NodeInstallSpec,
    "go": GoInstallSpec,
    "pnpm": PnpmInstallSpec,
    "git": GitInstallSpec,
    "other": OtherInstallSpec,
}


def install_spec_from_dict(raw: dict[str, Any]) -> InstallSpec:
    """Build the install spec variant matching ``raw["kind"]``; unknown kinds become ``other``."""
    data = dict(raw or {})
    kind = str(data.get("kind") or "").strip().lower()
    bins = _clean_str_list(data.get("bins")) if "bins" in data else None
    common = {
        "id": _clean_str(data.get("id")),
        "label": _clean_str(data.get("label")),
        "bins": bins,
    }
    if kind == "brew":
        return BrewInstallSpec(formula=_clean_str(data.get("formula")), **common)
    if kind == "node":
        return NodeInstallSpec(package=_clean_str(data.get("package")), **common)
    if kind == "go":
        return GoInstallSpec(module=_clean_str(data.get("module")), **common)
    if kind == "pnpm":
        repo_path = data.get("repoPath", data.get("repo_path"))
        return PnpmInstallSpec(repo_path=_clean_str(repo_path), **common)
    if kind == "git":
        return GitInstallSpec(url=_clean_str(data.get("url")), **common)
    return OtherInstallSpec(**common)


@dataclass(slots=True)
class ClawdisMetadata:
    skill_key: str | None = None
    always: bool = False
    primary_env: str | None = None
    emoji: str | None = None
    homepage: str | None = None
    requires: SkillRequires | None = None
    install: list[InstallSpec] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> ClawdisMetadata:
        data = dict(raw or {})
        requires = data.get("requires")
        install_raw = data.get("install")
        install = []
        if isinstance(install_raw, list):
            install = [install_spec_from_dict(item) for item in install_raw if isinstance(item, dict)]
        return cls(
            skill_key=_clean_str(data.get("skillKey")),
            always=data.get("always") is True,
            primary_env=_clean_str(data.get("primaryEnv")),
            emoji=_clean_str(data.get("emoji")),
            homepage=_clean_str(data.get("homepage")),
            requires=SkillRequires.from_dict(requires) if isinstance(requires, dict) else None,
            install=install,
        )


@dataclass(slots=True)
class SkillEntry:
    skill: Skill
    clawdis: ClawdisMetadata | None = None


# Status report records


@dataclass(frozen=True, slots=True)
class SkillInstallOption:
    id: str
    kind: str
    label: str
    bins: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "kind": self.kind, "label": self.label, "bins": list(self.bins)}


@dataclass(frozen=True, slots=True)
class SkillStatusConfigCheck:
    path: str
    value: Any
    satisfied: bool

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "value": self.value, "satisfied": self.satisfied}


@dataclass(frozen=True, slots=True)
class SkillRequirementSet:
    bins: tuple[str, ...] = ()
    env: tuple[str, ...] = ()
    config: tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not (self.bins or self.env or self.config)

    def to_dict(self) -> dict[str, list[str]]:
        return {"bins": list(self.bins), "env": list(self.env), "config": list(self.config)}


@dataclass(frozen=True, slots=True)
class SkillStatusEntry:
    name: str
    description: str
    source: str
    file_path: str
    base_dir: str
    skill_key: str
    primary_env: str | None
    emoji: str | None
    homepage: str | None
    always: bool
    disabled: bool
    eligible: bool
    requirements: SkillRequirementSet
    missing: SkillRequirementSet
    config_checks: tuple[SkillStatusConfigCheck, ...]
    install: tuple[SkillInstallOption, ...]

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "source": self.source,
            "filePath": self.file_path,
            "baseDir": self.base_dir,
            "skillKey": self.skill_key,
        }
        if self.primary_env is not None:
            out["primaryEnv"] = self.primary_env
        if self.emoji is not None:
            out["emoji"] = self.emoji
        if self.homepage is not None:
            out["homepage"] = self.homepage
        out.update(
            {
                "always": self.always,
                "disabled": self.disabled,
                "eligible": self.eligible,
                "requirements": self.requirements.to_dict(),
                "missing": self.missing.to_dict(),
                "configChecks": [check.to_dict() for check in self.config_checks],
                "install": [option.to_dict() for option in self.install],
            }
        )
        return out


@dataclass(frozen=True, slots=True)
class SkillStatusReport:
    workspace_dir: str
    managed_skills_dir: str
    skills: tuple[SkillStatusEntry, ...]

    def get(self, name: str) -> SkillStatusEntry | None:
        wanted = name.strip().lower()
        for row in self.skills:
            if row.name.lower() == wanted or row.skill_key.lower() == wanted:
                return row
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "workspaceDir": self.workspace_dir,
            "managedSkillsDir": self.managed_skills_dir,
            "skills": [row.to_dict() for row in self.skills],
        }
