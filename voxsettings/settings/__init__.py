"""Settings page engine for voxsettings.

This package owns the user-editable assistant settings:
- fields: the ordered field table with defaults and coercion
- model: snapshot, validation and the editable model
- coordinator: the save flow (writes, apply, cooldown, saved indicator)
- manager: change dispatch to registered handlers
- transfer: JSON export/import
- view: the protocol any frontend implements
"""

from voxsettings.settings.coordinator import SaveOutcome, SettingsPersistenceCoordinator
from voxsettings.settings.fields import (
    FIELD_KEYS,
    SETTING_FIELDS,
    MissingValuePolicy,
    SettingField,
    default_values,
)
from voxsettings.settings.manager import (
    SETTINGS_INVALIDATION,
    InvalidationFlags,
    SettingsManager,
    get_settings_manager,
)
from voxsettings.settings.model import (
    SettingsModel,
    SettingsSnapshot,
    SettingsValidator,
    ValidationResult,
)
from voxsettings.settings.transfer import export_settings, import_settings
from voxsettings.settings.view import SettingsViewProtocol

__all__ = [
    # Fields
    "FIELD_KEYS",
    "SETTING_FIELDS",
    "MissingValuePolicy",
    "SettingField",
    "default_values",
    # Model
    "SettingsModel",
    "SettingsSnapshot",
    "SettingsValidator",
    "ValidationResult",
    # Save flow
    "SaveOutcome",
    "SettingsPersistenceCoordinator",
    # Change dispatch
    "InvalidationFlags",
    "SettingsManager",
    "SETTINGS_INVALIDATION",
    "get_settings_manager",
    # Transfer
    "export_settings",
    "import_settings",
    # View
    "SettingsViewProtocol",
]
