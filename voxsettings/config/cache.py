"""Configuration cache for voxsettings.

Configs are cached per source file; None stands for the per-user
config.toml. The lock keeps concurrent first loads from reading the same
file twice.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from voxsettings.config.types import Config

logger = logging.getLogger(__name__)

_cache: dict[Path | None, Config] = {}
_cache_lock = threading.Lock()


def _key(config_path: Path | None) -> Path | None:
    return config_path.expanduser().resolve() if config_path is not None else None


def get_config(config_path: Path | None = None) -> Config:
    """Return the config for a file, loading it on first use.

    Args:
        config_path: Explicit config file, or None for the user config.

    Returns:
        Configuration dictionary with defaults applied.
    """
    key = _key(config_path)
    with _cache_lock:
        config = _cache.get(key)
        if config is None:
            from voxsettings.config.loader import load_config

            logger.debug("config_cache: first load, path=%s", key or "user")
            config = _cache[key] = load_config(key)
        return config


def clear_config_cache() -> None:
    """Drop every cached config."""
    with _cache_lock:
        _cache.clear()
