"""Configuration loading for voxsettings."""

import copy
import logging
import os
import sys
import tomllib
from pathlib import Path
from typing import Any

from voxsettings.config.types import DEFAULT_CONFIG, Config

logger = logging.getLogger(__name__)

APP_DIR_NAME = "voxsettings"


def _get_user_config_dir() -> Path:
    r"""Get the per-user configuration directory.

    Returns:
        %APPDATA%\voxsettings on Windows, $XDG_CONFIG_HOME/voxsettings
        (default ~/.config/voxsettings) elsewhere.
    """
    if sys.platform == "win32":
        base = os.environ.get("APPDATA") or str(Path.home() / "AppData" / "Roaming")
    else:
        base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / APP_DIR_NAME


def _get_user_config_path() -> Path:
    """Get path to the user's config.toml."""
    return _get_user_config_dir() / "config.toml"


def get_store_path(config: Config) -> Path:
    """Resolve the settings store file from the [store] section.

    Args:
        config: Loaded configuration.

    Returns:
        Configured path, or settings.toml in the user config directory.
    """
    path = config.get("store", {}).get("path", "")
    if path:
        return Path(path).expanduser()
    return _get_user_config_dir() / "settings.toml"


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration.

    Priority (highest to lowest):
    1. User overrides (config.toml in the user config directory)
    2. Hardcoded DEFAULT_CONFIG

    Args:
        config_path: Optional override path for testing. If None, uses the
            user config path and bootstraps it with defaults when missing.

    Returns:
        Configuration dictionary with defaults merged in.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path is not None:
        logger.debug("load_config: explicit path=%s, exists=%s", config_path, config_path.exists())
        if config_path.exists():
            with open(config_path, "rb") as f:
                user_config = tomllib.load(f)
            config = _deep_merge(config, user_config)
        return config

    user_path = _get_user_config_path()
    if user_path.exists():
        try:
            with open(user_path, "rb") as f:
                user_overrides = tomllib.load(f)
            config = _deep_merge(config, user_overrides)
            logger.info("load_config: loaded user overrides from %s", user_path)
        except Exception as e:
            logger.warning("load_config: failed to load user overrides (using defaults): %s", e)
    else:
        # Bootstrap: persist defaults if no user config exists yet
        try:
            from voxsettings.config.saver import save_config
            save_config(config, user_path)
            logger.info("load_config: bootstrapped config.toml at %s", user_path)
        except Exception as e:
            logger.warning("load_config: bootstrap save failed (non-fatal): %s", e)

    return config
