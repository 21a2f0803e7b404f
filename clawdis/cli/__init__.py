from __future__ import annotations

from clawdis.cli.commands import build_parser, main

__all__ = ["build_parser", "main"]
