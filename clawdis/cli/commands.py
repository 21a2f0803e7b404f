from __future__ import annotations

import argparse
import json
from typing import Any

from rich.console import Console
from rich.table import Table

from clawdis.config.settings import load_config
from clawdis.skills.status import build_workspace_skill_status
from clawdis.skills.types import SkillStatusEntry, SkillStatusReport


def _print_json(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _report(args: argparse.Namespace) -> SkillStatusReport:
    cfg = load_config(args.config)
    workspace = args.workspace or str(cfg.get("workspace_path") or "")
    return build_workspace_skill_status(workspace, config=cfg)


def _missing_summary(row: SkillStatusEntry) -> str:
    parts: list[str] = []
    parts.extend(f"bin:{name}" for name in row.missing.bins)
    parts.extend(f"env:{name}" for name in row.missing.env)
    parts.extend(f"config:{path}" for path in row.missing.config)
    return ", ".join(parts)


def _status_label(row: SkillStatusEntry) -> str:
    if row.disabled:
        return "[yellow]disabled[/yellow]"
    if row.eligible:
        return "[green]ready[/green]"
    return "[red]missing[/red]"


def cmd_skills_list(args: argparse.Namespace) -> int:
    report = _report(args)
    rows = [row for row in report.skills if row.eligible or not args.eligible]
    if args.json:
        payload = report.to_dict()
        payload["skills"] = [row.to_dict() for row in rows]
        _print_json(payload)
        return 0

    table = Table(title=f"Skills ({sum(1 for row in rows if row.eligible)}/{len(rows)} ready)")
    table.add_column("Skill", style="cyan")
    table.add_column("Status")
    table.add_column("Source", style="dim")
    table.add_column("Missing", style="white")
    for row in rows:
        name = f"{row.emoji} {row.name}" if row.emoji else row.name
        table.add_row(name, _status_label(row), row.source, _missing_summary(row))
    Console().print(table)
    return 0


def cmd_skills_info(args: argparse.Namespace) -> int:
    row = _report(args).get(args.name)
    if row is None:
        _print_json({"error": f"skill_not_found:{args.name}"})
        return 1
    _print_json(row.to_dict())
    return 0


def cmd_skills_check(args: argparse.Namespace) -> int:
    report = _report(args)
    _print_json(
        {
            "workspaceDir": report.workspace_dir,
            "total": len(report.skills),
            "eligible": sum(1 for row in report.skills if row.eligible),
            "disabled": sum(1 for row in report.skills if row.disabled),
            "missingRequirements": sum(1 for row in report.skills if not row.disabled and not row.eligible),
        }
    )
    return 0


def cmd_gateway(args: argparse.Namespace) -> int:
    from clawdis.gateway.server import run_gateway

    run_gateway(host=args.host, port=args.port, config=load_config(args.config))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="clawdis", description="Clawdis skills and gateway CLI")
    parser.add_argument("--config", default=None, help="Path to config JSON/YAML")
    sub = parser.add_subparsers(dest="command", required=True)

    p_gateway = sub.add_parser("gateway", help="Start FastAPI gateway")
    p_gateway.add_argument("--host", default=None)
    p_gateway.add_argument("--port", type=int, default=None)
    p_gateway.set_defaults(handler=cmd_gateway)

    p_skills = sub.add_parser("skills", help="Inspect skill eligibility")
    skills_sub = p_skills.add_subparsers(dest="skills_command", required=True)

    p_skills_list = skills_sub.add_parser("list", help="List skills with their status")
    p_skills_list.add_argument("--workspace", default=None)
    p_skills_list.add_argument("--eligible", action="store_true", help="Only show ready skills")
    p_skills_list.add_argument("--json", action="store_true", help="Print the raw status report")
    p_skills_list.set_defaults(handler=cmd_skills_list)

    p_skills_info = skills_sub.add_parser("info", help="Show status of one skill")
    p_skills_info.add_argument("name")
    p_skills_info.add_argument("--workspace", default=None)
    p_skills_info.set_defaults(handler=cmd_skills_info)

    p_skills_check = skills_sub.add_parser("check", help="Summarize skill readiness")
    p_skills_check.add_argument("--workspace", default=None)
    p_skills_check.set_defaults(handler=cmd_skills_check)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, "handler", None)
    if not callable(handler):
        parser.print_help()
        return 1
    return int(handler(args) or 0)
