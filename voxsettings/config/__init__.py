"""Configuration loading, saving, and caching for voxsettings."""

from voxsettings.config.types import (
    Config,
    DEFAULT_CONFIG,
    ListenerConfig,
    LoggingConfig,
    POLL_PERIOD_MS,
    SAVE_COOLDOWN_MS,
    SAVED_DISPLAY_MS,
    SETTLE_DELAY_MS,
    StoreConfig,
    TimingConfig,
    Timings,
    VoicesConfig,
)
from voxsettings.config.loader import (
    _deep_merge,
    _get_user_config_dir,
    _get_user_config_path,
    get_store_path,
    load_config,
)
from voxsettings.config.saver import save_config
from voxsettings.config.cache import clear_config_cache, get_config

__all__ = [
    # Types
    "Config",
    "DEFAULT_CONFIG",
    "ListenerConfig",
    "LoggingConfig",
    "StoreConfig",
    "TimingConfig",
    "Timings",
    "VoicesConfig",
    # Timing constants
    "POLL_PERIOD_MS",
    "SAVE_COOLDOWN_MS",
    "SAVED_DISPLAY_MS",
    "SETTLE_DELAY_MS",
    # Loading
    "load_config",
    "get_store_path",
    "_deep_merge",
    "_get_user_config_dir",
    "_get_user_config_path",
    # Saving
    "save_config",
    # Cache
    "get_config",
    "clear_config_cache",
]
