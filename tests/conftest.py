"""Shared pytest fixtures for voxsettings tests.

This module provides reusable fixtures for:
- An in-memory assistant backend with failure injection
- A recording settings view
- Short timings so timer-driven behaviour runs fast
- Configuration loading
- Global state reset between tests
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from tests.helpers import FakeBackend, RecordingView
from voxsettings.config.types import Timings
from voxsettings.state import ObservableCell


# ============================================================================
# Backend / View Fixtures
# ============================================================================


@pytest.fixture
def backend() -> FakeBackend:
    """Create an empty in-memory backend.

    Returns:
        FakeBackend with one input, one output and one voice.
    """
    return FakeBackend()


@pytest.fixture
def view() -> RecordingView:
    """Create a view that records every call."""
    return RecordingView()


@pytest.fixture
def voice_cell() -> ObservableCell[str]:
    """Create a private assistant voice cell (keeps the global one clean)."""
    return ObservableCell("assistant_voice", "")


@pytest.fixture
def fast_timings() -> Timings:
    """Timings scaled down so timer tests finish quickly.

    Ratios match the defaults: settle delay and cooldown are a third of
    the poll period, the saved indicator lasts five cooldowns.
    """
    return Timings(
        poll_period=0.03,
        settle_delay=0.01,
        save_cooldown=0.01,
        saved_display=0.05,
    )


@pytest.fixture(autouse=True)
def reset_settings_manager():
    """Reset the global SettingsManager between tests."""
    import voxsettings.settings.manager as manager_module

    manager_module._settings_manager = None
    yield
    manager_module._settings_manager = None


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Create a test configuration dictionary.

    Returns:
        Configuration dict with sensible test defaults.
    """
    return {
        "timing": {
            "poll_period_ms": 30,
            "settle_delay_ms": 10,
            "save_cooldown_ms": 10,
            "saved_display_ms": 50,
        },
        "store": {
            "path": "",
            "missing_value_policy": "presence",
        },
        "voices": {
            "directory": "",
        },
        "listener": {
            "command": [],
        },
        "logging": {
            "level": "DEBUG",
            "file": "",
        },
    }


@pytest.fixture
def mock_config_file(tmp_path) -> Path:
    """Create a temporary config.toml file.

    Returns:
        Path to temporary config file.
    """
    config_file = tmp_path / "config.toml"
    content = """
[timing]
poll_period_ms = 500
settle_delay_ms = 250

[store]
path = "~/assistant/settings.toml"
missing_value_policy = "presence"

[listener]
command = ["jarvis-listener", "--quiet"]

[logging]
level = "DEBUG"
"""
    config_file.write_text(content)
    return config_file


@pytest.fixture
def clear_config():
    """Clear the config cache before and after the test."""
    from voxsettings.config import clear_config_cache

    clear_config_cache()
    yield
    clear_config_cache()
