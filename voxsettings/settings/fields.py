"""Catalogue of the persisted assistant settings.

The order of SETTING_FIELDS is the order in which fields are read at load
time and written during a save.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

DEFAULT_AI_MODEL = "anthropic/claude-3-haiku"

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


class MissingValuePolicy(Enum):
    """How a stored value is told apart from a missing one.

    FALSY: any falsy value ("", 0, False, None) falls back to the default.
        A deliberately stored 0 or False cannot be distinguished from a
        missing key under this policy.
    PRESENCE: only a missing key (None) falls back to the default.
    """

    FALSY = "falsy"
    PRESENCE = "presence"


@dataclass(frozen=True)
class SettingField:
    """A single persisted setting.

    Attributes:
        key: Store key.
        type: Python type of the value (str, float, int or bool).
        default: Value used when the store has nothing usable.
        secret: True for API keys (never logged, never exported).
    """

    key: str
    type: type
    default: Any
    secret: bool = False

    def coerce(self, raw: Any) -> Any:
        """Convert a raw store value to this field's type.

        Stores that keep everything as text are supported, so "0.5" becomes
        0.5 and "false" becomes False.

        Args:
            raw: Value returned by the store.

        Returns:
            Value of type self.type.

        Raises:
            ValueError: If the value cannot be represented as self.type.
        """
        if self.type is bool:
            return _to_bool(raw)
        if isinstance(raw, bool):
            if self.type is str:
                return "true" if raw else "false"
            raise ValueError(f"{self.key}: boolean is not a number")
        if self.type is str:
            return raw if isinstance(raw, str) else str(raw)
        if self.type is float:
            if isinstance(raw, str):
                return float(raw.strip())
            if isinstance(raw, (int, float)):
                return float(raw)
        if self.type is int:
            number = float(raw.strip()) if isinstance(raw, str) else raw
            if isinstance(number, int):
                return number
            if isinstance(number, float) and number.is_integer():
                return int(number)
        raise ValueError(f"{self.key}: cannot convert {type(raw).__name__} to {self.type.__name__}")

    def resolve(self, raw: Any, policy: MissingValuePolicy = MissingValuePolicy.FALSY) -> Any:
        """Turn a raw store value into the effective field value.

        Args:
            raw: Value returned by the store (None when the key is absent).
            policy: Missing-value convention to apply.

        Returns:
            The coerced value, or the default when the value is missing
            (or falsy under the FALSY policy) or cannot be coerced.
        """
        if raw is None:
            return self.default
        try:
            value = self.coerce(raw)
        except (TypeError, ValueError):
            return self.default
        if policy is MissingValuePolicy.FALSY and not value:
            return self.default
        return value


def _to_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise ValueError(f"cannot convert {raw!r} to bool")


SETTING_FIELDS: tuple[SettingField, ...] = (
    SettingField("assistant_voice", str, ""),
    SettingField("selected_microphone", str, ""),
    SettingField("selected_speaker", str, ""),
    SettingField("selected_wake_word_engine", str, "rustpotter"),
    SettingField("api_key_picovoice", str, "", secret=True),
    SettingField("api_key_openai", str, "", secret=True),
    SettingField("api_key_openrouter", str, "", secret=True),
    SettingField("ai_model", str, DEFAULT_AI_MODEL),
    SettingField("ai_temperature", float, 0.7),
    SettingField("ai_max_tokens", int, 1000),
    SettingField("tts_engine", str, "system"),
    SettingField("tts_voice", str, "default"),
    SettingField("tts_speed", float, 1.0),
    SettingField("tts_volume", float, 0.8),
    SettingField("enable_conversation_mode", bool, False),
    SettingField("enable_document_search", bool, True),
    SettingField("auto_open_documents", bool, True),
    SettingField("device_monitoring", bool, True),
)

FIELDS_BY_KEY: dict[str, SettingField] = {f.key: f for f in SETTING_FIELDS}
FIELD_KEYS: tuple[str, ...] = tuple(f.key for f in SETTING_FIELDS)
SECRET_KEYS: frozenset[str] = frozenset(f.key for f in SETTING_FIELDS if f.secret)

MONITORING_KEY = "device_monitoring"
ASSISTANT_VOICE_KEY = "assistant_voice"


def default_values() -> dict[str, Any]:
    """Return a fresh mapping of every field key to its default."""
    return {f.key: f.default for f in SETTING_FIELDS}
