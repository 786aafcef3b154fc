"""Configuration saving for voxsettings."""

import json
import logging
from pathlib import Path

from voxsettings.config.types import (
    POLL_PERIOD_MS,
    SAVE_COOLDOWN_MS,
    SAVED_DISPLAY_MS,
    SETTLE_DELAY_MS,
    Config,
)
from voxsettings.config.loader import _get_user_config_path

logger = logging.getLogger(__name__)


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary to save.
        config_path: Path to config file. Defaults to the user config.toml.
    """
    if config_path is None:
        config_path = _get_user_config_path()

    # Create parent directory if needed
    config_path.parent.mkdir(parents=True, exist_ok=True)

    lines = ["# voxsettings configuration", ""]

    # Timing section
    timing = config.get("timing", {})
    lines.append("[timing]")
    lines.append("# Device list refresh period while device monitoring is on (milliseconds)")
    lines.append(f"poll_period_ms = {timing.get('poll_period_ms', POLL_PERIOD_MS)}")
    lines.append("")
    lines.append("# Wait between stopping and restarting the listener after a save (milliseconds)")
    lines.append("# Too short a wait can leave the microphone busy when the listener restarts")
    lines.append(f"settle_delay_ms = {timing.get('settle_delay_ms', SETTLE_DELAY_MS)}")
    lines.append("")
    lines.append("# Save button stays disabled this long after a click (milliseconds)")
    lines.append(f"save_cooldown_ms = {timing.get('save_cooldown_ms', SAVE_COOLDOWN_MS)}")
    lines.append("")
    lines.append("# How long the 'saved' indicator stays visible (milliseconds)")
    lines.append(f"saved_display_ms = {timing.get('saved_display_ms', SAVED_DISPLAY_MS)}")
    lines.append("")

    # Store section
    store = config.get("store", {})
    lines.append("[store]")
    lines.append("# Settings store file; empty uses settings.toml next to this file")
    lines.append(f"path = {_quote(store.get('path', ''))}")
    lines.append("")
    lines.append("# How stored values are told apart from missing ones:")
    lines.append('#   "falsy" - empty, zero and false values fall back to their defaults')
    lines.append('#   "presence" - only missing keys fall back to their defaults')
    lines.append(f"missing_value_policy = {_quote(store.get('missing_value_policy', 'falsy'))}")
    lines.append("")

    # Voices section
    voices = config.get("voices", {})
    lines.append("[voices]")
    lines.append("# Directory of voice packs (one subdirectory per voice)")
    lines.append(f"directory = {_quote(voices.get('directory', ''))}")
    lines.append("")

    # Listener section
    command = config.get("listener", {}).get("command", [])
    lines.append("[listener]")
    lines.append("# Command that runs the wake-word listener, e.g. [\"jarvis-listener\", \"--quiet\"]")
    lines.append(f"command = [{', '.join(_quote(part) for part in command)}]")
    lines.append("")

    # Logging section
    log = config.get("logging", {})
    lines.append("[logging]")
    lines.append("# Level: DEBUG, INFO, WARNING, ERROR")
    lines.append(f"level = {_quote(log.get('level', 'INFO'))}")
    lines.append("")
    lines.append("# Log file; empty disables file logging")
    lines.append(f"file = {_quote(log.get('file', ''))}")
    lines.append("")

    # Write to file
    with open(config_path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))
    logger.debug("save_config: wrote %s", config_path)
