"""Configuration type definitions and defaults for voxsettings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict

# Period of the device directory refresh while device monitoring is on.
POLL_PERIOD_MS = 3000

# Wait between the listening service's stop returning and the next start.
# The backend must release its audio device handles within this window.
SETTLE_DELAY_MS = 1000

# Minimum interval during which the save action stays disabled after a click.
SAVE_COOLDOWN_MS = 1000

# How long the "saved" indicator stays on after a successful save.
SAVED_DISPLAY_MS = 5000


class TimingConfig(TypedDict):
    """Timer and delay settings, in milliseconds."""

    poll_period_ms: int
    settle_delay_ms: int
    save_cooldown_ms: int
    saved_display_ms: int


class StoreConfig(TypedDict, total=False):
    """Settings store configuration."""

    path: str  # Empty string uses the per-user default location
    missing_value_policy: str  # "falsy" or "presence"


class VoicesConfig(TypedDict):
    """Voice pack configuration."""

    directory: str  # Each subdirectory is one voice pack


class ListenerConfig(TypedDict):
    """Listening service configuration."""

    command: list[str]  # Wake-word listener command; empty disables it


class LoggingConfig(TypedDict):
    """Logging configuration."""

    level: str
    file: str  # Empty string disables the log file


class Config(TypedDict, total=False):
    """Full application configuration."""

    timing: TimingConfig
    store: StoreConfig
    voices: VoicesConfig
    listener: ListenerConfig
    logging: LoggingConfig


DEFAULT_CONFIG: Config = {
    "timing": {
        "poll_period_ms": POLL_PERIOD_MS,
        "settle_delay_ms": SETTLE_DELAY_MS,
        "save_cooldown_ms": SAVE_COOLDOWN_MS,
        "saved_display_ms": SAVED_DISPLAY_MS,
    },
    "store": {
        "path": "",
        "missing_value_policy": "falsy",
    },
    "voices": {
        "directory": "",
    },
    "listener": {
        "command": [],
    },
    "logging": {
        "level": "INFO",
        "file": "voxsettings.log",
    },
}


@dataclass(frozen=True)
class Timings:
    """Timer and delay settings converted to seconds."""

    poll_period: float = POLL_PERIOD_MS / 1000
    settle_delay: float = SETTLE_DELAY_MS / 1000
    save_cooldown: float = SAVE_COOLDOWN_MS / 1000
    saved_display: float = SAVED_DISPLAY_MS / 1000

    @classmethod
    def from_config(cls, config: Config) -> Timings:
        """Build timings from the [timing] config section."""
        timing = config.get("timing", {})
        return cls(
            poll_period=timing.get("poll_period_ms", POLL_PERIOD_MS) / 1000,
            settle_delay=timing.get("settle_delay_ms", SETTLE_DELAY_MS) / 1000,
            save_cooldown=timing.get("save_cooldown_ms", SAVE_COOLDOWN_MS) / 1000,
            saved_display=timing.get("saved_display_ms", SAVED_DISPLAY_MS) / 1000,
        )
