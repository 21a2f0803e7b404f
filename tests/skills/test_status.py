from __future__ import annotations

from pathlib import Path

from clawdis.skills.status import (
    build_skill_status,
    build_workspace_skill_status,
    evaluate_missing_requirements,
    resolve_skill_key,
)
from clawdis.skills.types import ClawdisMetadata, Skill, SkillEntry, SkillRequires


def _entry(
    name: str = "search",
    *,
    bins: list[str] | None = None,
    env: list[str] | None = None,
    config: list[str] | None = None,
    always: bool = False,
    primary_env: str | None = None,
    skill_key: str | None = None,
) -> SkillEntry:
    return SkillEntry(
        skill=Skill(
            name=name,
            description=f"{name} skill",
            source="workspace",
            file_path=f"/ws/skills/{name}/SKILL.md",
            base_dir=f"/ws/skills/{name}",
        ),
        clawdis=ClawdisMetadata(
            skill_key=skill_key,
            always=always,
            primary_env=primary_env,
            requires=SkillRequires(bins=bins or [], env=env or [], config=config or []),
        ),
    )


def _bins(*present: str):
    available = set(present)
    return lambda name: name in available


def _search_entry() -> SkillEntry:
    return _entry(bins=["rg"], env=["SEARCH_KEY"], config=["search.enabled"])


def test_search_skill_reports_missing_env_only() -> None:
    row = build_skill_status(
        _search_entry(),
        {"search": {"enabled": True}},
        env={},
        has_binary=_bins("rg"),
    )
    assert row.disabled is False
    assert row.missing.bins == ()
    assert row.missing.env == ("SEARCH_KEY",)
    assert row.missing.config == ()
    assert row.eligible is False
    assert row.config_checks[0].path == "search.enabled"
    assert row.config_checks[0].value is True
    assert row.config_checks[0].satisfied is True


def test_disabled_skill_is_never_eligible() -> None:
    config = {
        "search": {"enabled": True},
        "skills": {"entries": {"search": {"enabled": False}}},
    }
    row = build_skill_status(
        _search_entry(),
        config,
        env={"SEARCH_KEY": "k"},
        has_binary=_bins("rg"),
    )
    assert row.missing.to_dict() == {"bins": [], "env": [], "config": []}
    assert row.disabled is True
    assert row.eligible is False


def test_all_requirements_met_is_eligible() -> None:
    row = build_skill_status(
        _search_entry(),
        {"search": {"enabled": True}},
        env={"SEARCH_KEY": "k"},
        has_binary=_bins("rg"),
    )
    assert row.eligible is True


def test_always_skill_ignores_system_state() -> None:
    entry = _entry(bins=["nope"], env=["NOPE"], config=["nope.path"], always=True)
    row = build_skill_status(entry, None, env={}, has_binary=_bins())
    assert row.always is True
    assert row.missing.to_dict() == {"bins": [], "env": [], "config": []}
    assert row.eligible is True
    assert row.requirements.bins == ("nope",)
    assert row.config_checks[0].satisfied is False


def test_always_skill_still_respects_disabled() -> None:
    entry = _entry(name="pinned", always=True)
    config = {"skills": {"entries": {"pinned": {"enabled": False}}}}
    row = build_skill_status(entry, config, env={}, has_binary=_bins())
    assert row.disabled is True
    assert row.eligible is False


def test_env_satisfied_by_skill_config_env() -> None:
    entry = _entry(env=["FOO"])
    config = {"skills": {"entries": {"search": {"env": {"FOO": True}}}}}
    assert evaluate_missing_requirements(entry, config, env={}).env == ()


def test_env_satisfied_by_api_key_only_for_primary_env() -> None:
    entry = _entry(env=["FOO", "BAR"], primary_env="FOO")
    config = {"skills": {"entries": {"search": {"apiKey": "sk-123"}}}}
    missing = evaluate_missing_requirements(entry, config, env={})
    assert missing.env == ("BAR",)


def test_env_empty_process_value_does_not_count() -> None:
    entry = _entry(env=["FOO"])
    assert evaluate_missing_requirements(entry, None, env={"FOO": ""}).env == ("FOO",)


def test_missing_preserves_declared_order() -> None:
    entry = _entry(bins=["c", "a", "b", "a"])
    missing = evaluate_missing_requirements(entry, None, env={}, has_binary=_bins("a"))
    assert missing.bins == ("c", "b")
    assert set(missing.bins) <= set(entry.clawdis.requires.bins)


def test_binary_check_error_counts_as_missing() -> None:
    def _broken(name: str) -> bool:
        raise PermissionError(name)

    entry = _entry(bins=["rg"])
    assert evaluate_missing_requirements(entry, None, env={}, has_binary=_broken).bins == ("rg",)


def test_skill_key_override_drives_config_lookup() -> None:
    entry = _entry(name="search", skill_key="search-pro", env=["FOO"])
    config = {
        "skills": {
            "entries": {
                "search": {"enabled": False},
                "search-pro": {"env": {"FOO": "1"}},
            }
        }
    }
    row = build_skill_status(entry, config, env={})
    assert resolve_skill_key(entry) == "search-pro"
    assert row.skill_key == "search-pro"
    assert row.disabled is False
    assert row.eligible is True


def test_entry_without_metadata_is_eligible() -> None:
    entry = SkillEntry(skill=Skill(name="bare"))
    row = build_skill_status(entry)
    assert row.skill_key == "bare"
    assert row.eligible is True
    assert row.install == ()
    assert row.config_checks == ()
    assert "primaryEnv" not in row.to_dict()


def test_build_skill_status_is_idempotent() -> None:
    config = {"search": {"enabled": True}}
    first = build_skill_status(_search_entry(), config, env={}, has_binary=_bins("rg"))
    second = build_skill_status(_search_entry(), config, env={}, has_binary=_bins("rg"))
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_status_entry_wire_format() -> None:
    entry = _entry(env=["FOO"], primary_env="FOO")
    payload = build_skill_status(entry, None, env={"FOO": "x"}).to_dict()
    assert payload["filePath"] == "/ws/skills/search/SKILL.md"
    assert payload["baseDir"] == "/ws/skills/search"
    assert payload["skillKey"] == "search"
    assert payload["primaryEnv"] == "FOO"
    assert payload["requirements"] == {"bins": [], "env": ["FOO"], "config": []}
    assert payload["configChecks"] == []


def test_workspace_status_keeps_supplied_entries_in_order(tmp_path: Path) -> None:
    entries = [_entry(name="zeta"), _entry(name="alpha"), _entry(name="zeta", bins=["missing-bin"])]
    report = build_workspace_skill_status(
        tmp_path,
        entries=entries,
        managed_skills_dir=tmp_path / "managed",
        env={},
        has_binary=_bins(),
    )
    assert [row.name for row in report.skills] == ["zeta", "alpha", "zeta"]
    assert [row.eligible for row in report.skills] == [True, True, False]
    assert report.workspace_dir == str(tmp_path)
    assert report.managed_skills_dir == str(tmp_path / "managed")


def test_workspace_status_loads_entries_when_not_supplied(tmp_path: Path, monkeypatch) -> None:
    seen: dict[str, object] = {}

    def _fake_loader(workspace_dir, **kwargs):
        seen["workspace_dir"] = workspace_dir
        seen.update(kwargs)
        return [_entry(name="loaded")]

    monkeypatch.setattr("clawdis.skills.loader.load_workspace_skill_entries", _fake_loader)
    report = build_workspace_skill_status(tmp_path, managed_skills_dir=tmp_path / "m", env={})
    assert [row.name for row in report.skills] == ["loaded"]
    assert seen["workspace_dir"] == tmp_path
    assert seen["managed_skills_dir"] == str(tmp_path / "m")


def test_workspace_status_does_not_load_when_entries_given(tmp_path: Path, monkeypatch) -> None:
    def _fail(*args, **kwargs):
        raise AssertionError("loader must not be called")

    monkeypatch.setattr("clawdis.skills.loader.load_workspace_skill_entries", _fail)
    report = build_workspace_skill_status(tmp_path, entries=[], managed_skills_dir=tmp_path)
    assert report.skills == ()


def test_workspace_status_defaults_managed_dir(tmp_path: Path) -> None:
    from clawdis.config.settings import CONFIG_DIR

    report = build_workspace_skill_status(tmp_path, entries=[])
    assert report.managed_skills_dir == str(CONFIG_DIR / "skills")


def test_config_check_value_is_detached_from_host_config() -> None:
    config = {"a": {"b": {"x": 1}}}
    row = build_skill_status(_entry(config=["a.b"]), config, env={})
    config["a"]["b"]["x"] = 2
    assert row.config_checks[0].value == {"x": 1}
    assert row.to_dict()["configChecks"][0]["value"] == {"x": 1}


def test_workspace_status_keeps_empty_managed_dir_override(tmp_path: Path) -> None:
    report = build_workspace_skill_status(tmp_path, entries=[], managed_skills_dir="")
    assert report.managed_skills_dir == ""
