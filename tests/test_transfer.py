"""Tests for settings export and import."""

from __future__ import annotations

import json

import pytest

from voxsettings import __version__
from voxsettings.errors import SettingsImportError
from voxsettings.settings.model import SettingsSnapshot
from voxsettings.settings.transfer import export_settings, import_settings


class TestExportSettings:
    """Tests for export_settings."""

    def test_document_layout(self):
        """Test the exported document carries version, date and settings."""
        document = json.loads(export_settings(SettingsSnapshot()))

        assert document["version"] == __version__
        assert "T" in document["export_date"]
        assert document["settings"]["tts_engine"] == "system"

    def test_api_keys_excluded(self):
        """Test API keys never appear in an export."""
        snapshot = SettingsSnapshot(api_key_openai="sk-abc", api_key_openrouter="or-xyz")

        text = export_settings(snapshot)

        assert "sk-abc" not in text
        assert "or-xyz" not in text
        assert "api_key_picovoice" not in json.loads(text)["settings"]

    def test_export_is_pretty_printed(self):
        """Test the output is indented for humans."""
        assert "\n  " in export_settings(SettingsSnapshot())


class TestImportSettings:
    """Tests for import_settings."""

    def test_import_round_trip(self):
        """Test an export imports back to the same non-secret values."""
        snapshot = SettingsSnapshot(tts_speed=1.5, tts_voice="nova", device_monitoring=False)

        values = import_settings(export_settings(snapshot))

        assert values["tts_speed"] == 1.5
        assert values["tts_voice"] == "nova"
        assert values["device_monitoring"] is False
        assert "api_key_openai" not in values

    def test_unknown_and_secret_keys_skipped(self):
        """Test unknown keys and API keys in a document are ignored."""
        text = json.dumps({
            "settings": {
                "theme": "dark",
                "api_key_openai": "sk-injected",
                "ai_max_tokens": "500",
            }
        })

        assert import_settings(text) == {"ai_max_tokens": 500}

    def test_bad_values_skipped(self):
        """Test values of the wrong type are dropped, others kept."""
        text = json.dumps({"settings": {"tts_speed": "fast", "tts_volume": 0.5, "tts_voice": None}})
        assert import_settings(text) == {"tts_volume": 0.5}

    def test_invalid_json(self):
        """Test malformed JSON raises SettingsImportError."""
        with pytest.raises(SettingsImportError, match="Invalid settings format"):
            import_settings("{not json")

    @pytest.mark.parametrize("text", ['{"version": "0.1.0"}', "[]", '{"settings": [1, 2]}'])
    def test_missing_settings_object(self, text):
        """Test documents without a settings object are rejected."""
        with pytest.raises(SettingsImportError, match="missing 'settings' object"):
            import_settings(text)
