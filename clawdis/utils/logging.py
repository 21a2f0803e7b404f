from __future__ import annotations

import os
import sys
from pathlib import Path

from loguru import logger

_LOGGING_CONFIGURED = False
_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level:<5} | {name}:{function}:{line} - {message}"


def setup_logging(level: str | None = None, *, log_file: str | Path | None = None, force: bool = False) -> None:
    """Configure loguru once for the whole process.

    Level comes from ``level`` or ``CLAWDIS_LOG_LEVEL`` (default INFO). When
    ``log_file`` or ``CLAWDIS_LOG_FILE`` is set, records are also appended to
    that file with daily rotation.
    """
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED and not force:
        return

    resolved_level = (level or os.getenv("CLAWDIS_LOG_LEVEL", "INFO")).upper()
    logger.remove()
    logger.add(
        sys.stderr,
        level=resolved_level,
        format=_FORMAT,
        enqueue=False,
        backtrace=False,
        diagnose=False,
    )
    target = log_file or os.getenv("CLAWDIS_LOG_FILE", "").strip()
    if target:
        logger.add(
            str(Path(target).expanduser()),
            level=resolved_level,
            format=_FORMAT,
            rotation="1 day",
            retention=7,
            backtrace=False,
            diagnose=False,
        )
    _LOGGING_CONFIGURED = True
