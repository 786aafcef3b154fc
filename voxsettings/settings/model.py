"""Settings model for voxsettings.

Provides the in-memory mirror of the persisted assistant settings,
immutable snapshots of it, and validation before save.
This module is GUI-agnostic and can be used with any frontend.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from voxsettings.errors import ReadFailure
from voxsettings.settings.fields import (
    DEFAULT_AI_MODEL,
    FIELDS_BY_KEY,
    MONITORING_KEY,
    SETTING_FIELDS,
    MissingValuePolicy,
    default_values,
)

if TYPE_CHECKING:
    from voxsettings.store import ConfigStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettingsSnapshot:
    """Immutable settings state - hashable, easy to diff.

    Field order matches SETTING_FIELDS, which is also the write order.

    Example:
        >>> snap = SettingsSnapshot()
        >>> new_snap = snap.with_changes(tts_speed=1.5)
        >>> snap.diff(new_snap)
        {'tts_speed'}
    """

    # Voice and devices
    assistant_voice: str = ""
    selected_microphone: str = ""
    selected_speaker: str = ""
    selected_wake_word_engine: str = "rustpotter"

    # API keys
    api_key_picovoice: str = ""
    api_key_openai: str = ""
    api_key_openrouter: str = ""

    # AI
    ai_model: str = DEFAULT_AI_MODEL
    ai_temperature: float = 0.7
    ai_max_tokens: int = 1000

    # Text to speech
    tts_engine: str = "system"
    tts_voice: str = "default"
    tts_speed: float = 1.0
    tts_volume: float = 0.8

    # Features
    enable_conversation_mode: bool = False
    enable_document_search: bool = True
    auto_open_documents: bool = True
    device_monitoring: bool = True

    @classmethod
    def from_dict(cls, values: dict[str, Any]) -> SettingsSnapshot:
        """Create a snapshot from a key/value mapping, ignoring unknown keys."""
        return cls(**{k: v for k, v in values.items() if k in FIELDS_BY_KEY})

    def to_dict(self) -> dict[str, Any]:
        """Return the snapshot as an ordered key/value mapping."""
        return {f.key: getattr(self, f.key) for f in SETTING_FIELDS}

    def with_changes(self, **kwargs: Any) -> SettingsSnapshot:
        """Create a new snapshot with specified fields changed."""
        return dataclasses.replace(self, **kwargs)

    def diff(self, other: SettingsSnapshot) -> set[str]:
        """Find keys whose values differ between this snapshot and another."""
        return {
            f.key
            for f in SETTING_FIELDS
            if getattr(self, f.key) != getattr(other, f.key)
        }


@dataclass
class ValidationResult:
    """Result of settings validation.

    Attributes:
        is_valid: True if all settings are valid.
        errors: Dict mapping field keys to error messages.
    """

    is_valid: bool = True
    errors: dict[str, str] = field(default_factory=dict)

    def add_error(self, key: str, message: str) -> None:
        """Add a validation error.

        Args:
            key: Key of the invalid field.
            message: Human-readable error message.
        """
        self.errors[key] = message
        self.is_valid = False


VALID_WAKE_WORD_ENGINES = {"rustpotter", "vosk", "picovoice"}
VALID_TTS_ENGINES = {"system", "openai", "silero", "elevenlabs"}


class SettingsValidator:
    """Validates settings before save - blocks save if ANY setting invalid.

    Validation runs before the first write so an invalid snapshot never
    produces a partially written store.
    """

    @classmethod
    def validate(cls, settings: SettingsSnapshot) -> ValidationResult:
        """Validate all settings.

        Args:
            settings: Settings snapshot to validate.

        Returns:
            ValidationResult with is_valid=False if any field is invalid.
        """
        result = ValidationResult()

        if settings.selected_wake_word_engine not in VALID_WAKE_WORD_ENGINES:
            result.add_error(
                "selected_wake_word_engine",
                f"Invalid wake word engine: {settings.selected_wake_word_engine}. "
                f"Valid: {', '.join(sorted(VALID_WAKE_WORD_ENGINES))}",
            )

        if settings.tts_engine not in VALID_TTS_ENGINES:
            result.add_error(
                "tts_engine",
                f"Invalid TTS engine: {settings.tts_engine}. "
                f"Valid: {', '.join(sorted(VALID_TTS_ENGINES))}",
            )

        if not settings.ai_model.strip():
            result.add_error("ai_model", "AI model cannot be empty")

        if not 0.0 <= settings.ai_temperature <= 2.0:
            result.add_error("ai_temperature", "Temperature must be between 0 and 2")

        if not 1 <= settings.ai_max_tokens <= 32000:
            result.add_error("ai_max_tokens", "Max tokens must be between 1 and 32000")

        if not 0.1 <= settings.tts_speed <= 4.0:
            result.add_error("tts_speed", "Speech speed must be between 0.1 and 4.0")

        if not 0.0 <= settings.tts_volume <= 1.0:
            result.add_error("tts_volume", "Volume must be between 0 and 1")

        return result


class SettingsModel:
    """In-memory mirror of the persisted settings.

    Loaded once from the config store, mutated by user input through
    update(), and committed in batch by the persistence coordinator.
    Every known key always has a value: defaults are filled in before
    any read happens.
    """

    def __init__(self, policy: MissingValuePolicy = MissingValuePolicy.FALSY) -> None:
        """Initialize the model with every field at its default.

        Args:
            policy: Missing-value convention used by load().
        """
        self._policy = policy
        self._values: dict[str, Any] = default_values()
        self._listeners: list[Callable[[str, Any], None]] = []

    @property
    def policy(self) -> MissingValuePolicy:
        return self._policy

    @property
    def monitoring_enabled(self) -> bool:
        return bool(self._values[MONITORING_KEY])

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    async def load(self, store: "ConfigStore") -> int:
        """Load every field from the store in SETTING_FIELDS order.

        Each field defaults independently. A read that raises aborts the
        remaining reads; fields loaded before it keep their loaded values,
        the rest keep their defaults.

        Args:
            store: Config store client.

        Returns:
            Number of fields read before the sequence completed or aborted.
        """
        loaded = 0
        for setting in SETTING_FIELDS:
            try:
                raw = await store.get_typed(setting)
            except ReadFailure as e:
                logger.warning(
                    "settings_model: load aborted at %s (%d/%d read): %s",
                    setting.key,
                    loaded,
                    len(SETTING_FIELDS),
                    e.detail,
                )
                break
            self._values[setting.key] = setting.resolve(raw, self._policy)
            loaded += 1

        logger.info("settings_model: loaded %d/%d fields", loaded, len(SETTING_FIELDS))
        return loaded

    def update(self, key: str, value: Any) -> bool:
        """Set one field from user input.

        Args:
            key: Field key.
            value: New value, coerced to the field's type.

        Returns:
            True if the stored value changed.

        Raises:
            KeyError: If key is not a known field.
            ValueError: If value cannot be coerced to the field's type.
        """
        setting = FIELDS_BY_KEY[key]
        coerced = setting.coerce(value)
        if self._values[key] == coerced:
            return False

        self._values[key] = coerced
        logger.debug(
            "settings_model: %s changed%s",
            key,
            "" if setting.secret else f" to {coerced!r}",
        )
        for listener in list(self._listeners):
            listener(key, coerced)
        return True

    def update_many(self, values: dict[str, Any]) -> set[str]:
        """Apply several updates, returning the keys that changed."""
        return {key for key, value in values.items() if self.update(key, value)}

    def add_listener(self, listener: Callable[[str, Any], None]) -> None:
        """Register a callback invoked as listener(key, value) on change."""
        self._listeners.append(listener)

    def snapshot(self) -> SettingsSnapshot:
        """Return an immutable copy of the current values."""
        return SettingsSnapshot.from_dict(self._values)
