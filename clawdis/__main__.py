from __future__ import annotations

from clawdis.cli.commands import main

raise SystemExit(main())
