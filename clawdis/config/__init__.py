from __future__ import annotations

from clawdis.config.paths import is_config_path_truthy, resolve_config_path, resolve_skill_config
from clawdis.config.settings import CONFIG_DIR, CONFIG_PATH, DEFAULT_CONFIG, load_config, save_config

__all__ = [
    "CONFIG_DIR",
    "CONFIG_PATH",
    "DEFAULT_CONFIG",
    "is_config_path_truthy",
    "load_config",
    "resolve_config_path",
    "resolve_skill_config",
    "save_config",
]
