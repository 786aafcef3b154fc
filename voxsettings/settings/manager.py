"""Settings manager for centralized settings change handling.

Provides a single point for:
- Declaring which components are affected when each setting changes
- Registering handlers for those components
- Dispatching handlers after a save with the previous and new values

When adding a new setting, add its key to SETTINGS_INVALIDATION with the
appropriate flags.
"""

from __future__ import annotations

import logging
from enum import Flag, auto
from typing import Any, Callable

logger = logging.getLogger(__name__)


class InvalidationFlags(Flag):
    """What needs to be refreshed when settings change."""

    NONE = 0
    LISTENER = auto()  # Wake-word engine, microphone, voice
    TTS = auto()  # Speech engine, voice, speed, volume, speaker
    AI = auto()  # Keys, model, sampling parameters
    DEVICES = auto()  # Device monitoring toggle


# Setting keys mapped to their invalidation requirements
SETTINGS_INVALIDATION: dict[str, InvalidationFlags] = {
    "assistant_voice": InvalidationFlags.LISTENER | InvalidationFlags.TTS,
    "selected_microphone": InvalidationFlags.LISTENER,
    "selected_speaker": InvalidationFlags.TTS,
    "selected_wake_word_engine": InvalidationFlags.LISTENER,
    "api_key_picovoice": InvalidationFlags.LISTENER,
    "api_key_openai": InvalidationFlags.AI | InvalidationFlags.TTS,
    "api_key_openrouter": InvalidationFlags.AI,
    "ai_model": InvalidationFlags.AI,
    "ai_temperature": InvalidationFlags.AI,
    "ai_max_tokens": InvalidationFlags.AI,
    "tts_engine": InvalidationFlags.TTS,
    "tts_voice": InvalidationFlags.TTS,
    "tts_speed": InvalidationFlags.TTS,
    "tts_volume": InvalidationFlags.TTS,
    # Read on each use, no invalidation needed
    "enable_conversation_mode": InvalidationFlags.NONE,
    "enable_document_search": InvalidationFlags.NONE,
    "auto_open_documents": InvalidationFlags.NONE,
    "device_monitoring": InvalidationFlags.DEVICES,
}


class SettingsManager:
    """Central settings change dispatch.

    Allows components to register handlers that are called when settings
    they depend on change. This decouples the settings page from the
    components that need to respond to saved settings.

    Example:
        >>> manager = get_settings_manager()
        >>> manager.register_handler(
        ...     InvalidationFlags.TTS,
        ...     lambda: print("speech settings changed")
        ... )
        >>> manager.apply_settings(old_values, new_values)
    """

    def __init__(self) -> None:
        """Initialize the settings manager."""
        self._handlers: dict[InvalidationFlags, list[Callable[[], None]]] = {}

    def register_handler(
        self,
        flags: InvalidationFlags,
        handler: Callable[[], None],
    ) -> None:
        """Register a handler for settings with given invalidation flags.

        Args:
            flags: Invalidation flags to respond to.
            handler: Callable to invoke when matching settings change.
        """
        for flag in InvalidationFlags:
            if flag in flags and flag != InvalidationFlags.NONE:
                self._handlers.setdefault(flag, []).append(handler)
                logger.debug(
                    "settings_manager: registered handler for %s",
                    flag.name,
                )

    def apply_settings(
        self,
        old_values: dict[str, Any],
        new_values: dict[str, Any],
    ) -> InvalidationFlags:
        """Compare settings and call handlers for changed keys.

        Each handler runs at most once per call even if it is registered
        for several of the changed flags.

        Args:
            old_values: Previously committed settings.
            new_values: Newly committed settings.

        Returns:
            The combined flags of every changed key.
        """
        changed_flags = InvalidationFlags.NONE

        for key, flags in SETTINGS_INVALIDATION.items():
            if old_values.get(key) != new_values.get(key):
                logger.debug("settings_manager: %s changed", key)
                changed_flags |= flags

        called: list[Callable[[], None]] = []
        for flag in InvalidationFlags:
            if flag in changed_flags and flag in self._handlers:
                for handler in self._handlers[flag]:
                    if handler in called:
                        continue
                    called.append(handler)
                    try:
                        handler()
                    except Exception as e:
                        logger.error(
                            "settings_manager: handler failed for %s: %s",
                            flag.name,
                            e,
                        )
        return changed_flags


# Global instance (lazy initialization)
_settings_manager: SettingsManager | None = None


def get_settings_manager() -> SettingsManager:
    """Get the global SettingsManager instance.

    Returns:
        The singleton SettingsManager instance.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager
