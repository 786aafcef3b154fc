"""Tests for the settings model, snapshot and validator."""

from __future__ import annotations

import pytest

from voxsettings.settings.fields import FIELD_KEYS, MissingValuePolicy
from voxsettings.settings.model import (
    SettingsModel,
    SettingsSnapshot,
    SettingsValidator,
)
from voxsettings.store import ConfigStore


class TestSettingsSnapshot:
    """Tests for the immutable SettingsSnapshot."""

    def test_defaults_match_fields(self):
        """Test a default snapshot equals the field defaults."""
        snapshot = SettingsSnapshot()
        assert snapshot.ai_model == "anthropic/claude-3-haiku"
        assert snapshot.device_monitoring is True
        assert list(snapshot.to_dict()) == list(FIELD_KEYS)

    def test_from_dict_ignores_unknown_keys(self):
        """Test unknown keys are dropped."""
        snapshot = SettingsSnapshot.from_dict({"tts_speed": 1.5, "theme": "dark"})
        assert snapshot.tts_speed == 1.5

    def test_with_changes_and_diff(self):
        """Test with_changes creates a copy and diff reports changed keys."""
        original = SettingsSnapshot()
        changed = original.with_changes(tts_speed=1.5, tts_voice="nova")

        assert original.tts_speed == 1.0
        assert original.diff(changed) == {"tts_speed", "tts_voice"}

    def test_snapshot_is_frozen(self):
        """Test snapshots cannot be mutated."""
        snapshot = SettingsSnapshot()
        with pytest.raises(AttributeError):
            snapshot.tts_speed = 2.0


class TestSettingsValidator:
    """Tests for SettingsValidator."""

    def test_defaults_are_valid(self):
        """Test the default snapshot passes validation."""
        assert SettingsValidator.validate(SettingsSnapshot()).is_valid

    def test_unknown_engines_rejected(self):
        """Test unknown wake word and TTS engines are errors."""
        result = SettingsValidator.validate(
            SettingsSnapshot(selected_wake_word_engine="snowboy", tts_engine="espeak")
        )
        assert not result.is_valid
        assert set(result.errors) == {"selected_wake_word_engine", "tts_engine"}

    @pytest.mark.parametrize(
        "changes,key",
        [
            ({"ai_temperature": 2.5}, "ai_temperature"),
            ({"ai_max_tokens": 0}, "ai_max_tokens"),
            ({"tts_speed": 0.0}, "tts_speed"),
            ({"tts_volume": 1.2}, "tts_volume"),
            ({"ai_model": "   "}, "ai_model"),
        ],
    )
    def test_out_of_range_values(self, changes, key):
        """Test numeric ranges and empty model name."""
        result = SettingsValidator.validate(SettingsSnapshot().with_changes(**changes))
        assert not result.is_valid
        assert key in result.errors


class TestLoad:
    """Tests for SettingsModel.load."""

    @pytest.mark.asyncio
    async def test_empty_store_loads_defaults(self, backend):
        """Test every field defaults when nothing is stored."""
        model = SettingsModel()
        loaded = await model.load(ConfigStore(backend))

        assert loaded == 18
        assert model.snapshot() == SettingsSnapshot()

    @pytest.mark.asyncio
    async def test_reads_in_field_order(self, backend):
        """Test load reads every key once, in catalogue order."""
        await SettingsModel().load(ConfigStore(backend))
        assert [call[1] for call in backend.calls] == list(FIELD_KEYS)

    @pytest.mark.asyncio
    async def test_stored_values_loaded(self, backend):
        """Test stored values override defaults field by field."""
        backend.values.update({"tts_voice": "nova", "ai_max_tokens": "500"})
        model = SettingsModel()
        await model.load(ConfigStore(backend))

        assert model["tts_voice"] == "nova"
        assert model["ai_max_tokens"] == 500
        assert model["tts_engine"] == "system"

    @pytest.mark.asyncio
    async def test_unusable_value_defaults_and_is_logged(self, backend, caplog):
        """Test a value that cannot be coerced falls back to the default."""
        backend.values.update({"tts_speed": "fast", "ai_temperature": "0.2"})
        model = SettingsModel()
        await model.load(ConfigStore(backend))

        assert model["tts_speed"] == 1.0
        assert model["ai_temperature"] == 0.2
        assert "unusable value for tts_speed" in caplog.text

    @pytest.mark.asyncio
    async def test_falsy_temperature_reads_default(self, backend):
        """Test a stored 0 temperature reads back as 0.7 under FALSY."""
        backend.values["ai_temperature"] = 0
        model = SettingsModel(MissingValuePolicy.FALSY)
        await model.load(ConfigStore(backend))
        assert model["ai_temperature"] == 0.7

    @pytest.mark.asyncio
    async def test_presence_keeps_zero_temperature(self, backend):
        """Test a stored 0 temperature is kept under PRESENCE."""
        backend.values["ai_temperature"] = 0
        backend.values["device_monitoring"] = False
        model = SettingsModel(MissingValuePolicy.PRESENCE)
        await model.load(ConfigStore(backend))

        assert model["ai_temperature"] == 0.0
        assert model["device_monitoring"] is False
        assert model.monitoring_enabled is False

    @pytest.mark.asyncio
    async def test_read_failure_aborts_remaining_reads(self, backend):
        """Test a raising read stops the sequence and keeps earlier values."""
        backend.values.update({"assistant_voice": "jarvis", "tts_voice": "nova"})
        backend.fail_read_at = "api_key_picovoice"
        model = SettingsModel()

        loaded = await model.load(ConfigStore(backend))

        assert loaded == 4
        assert model["assistant_voice"] == "jarvis"
        # Never read: stays at its default
        assert model["tts_voice"] == "default"
        assert [c[1] for c in backend.calls][-1] == "api_key_picovoice"


class TestUpdate:
    """Tests for SettingsModel.update and listeners."""

    def test_update_coerces_and_reports_change(self):
        """Test user input is coerced and a change is reported."""
        model = SettingsModel()
        assert model.update("tts_speed", "1.25") is True
        assert model["tts_speed"] == 1.25

    def test_same_value_is_not_a_change(self):
        """Test updating to the current value is a no-op."""
        model = SettingsModel()
        assert model.update("tts_engine", "system") is False

    def test_unknown_key_raises(self):
        """Test unknown keys are rejected."""
        with pytest.raises(KeyError):
            SettingsModel().update("theme", "dark")

    def test_bad_value_raises(self):
        """Test uncoercible input is rejected and the value kept."""
        model = SettingsModel()
        with pytest.raises(ValueError):
            model.update("ai_max_tokens", "many")
        assert model["ai_max_tokens"] == 1000

    def test_listeners_called_on_change(self, mocker):
        """Test listeners receive the key and coerced value."""
        model = SettingsModel()
        listener = mocker.MagicMock()
        model.add_listener(listener)

        model.update("device_monitoring", "false")
        model.update("device_monitoring", False)

        listener.assert_called_once_with("device_monitoring", False)

    def test_update_many_returns_changed_keys(self):
        """Test update_many reports only keys that changed."""
        model = SettingsModel()
        changed = model.update_many({"tts_speed": 1.0, "tts_voice": "nova"})
        assert changed == {"tts_voice"}

    def test_secret_values_not_logged(self, caplog):
        """Test API key values never reach the log."""
        import logging

        caplog.set_level(logging.DEBUG, logger="voxsettings")
        SettingsModel().update("api_key_openai", "sk-secret-value")

        assert "sk-secret-value" not in caplog.text
        assert "api_key_openai changed" in caplog.text
