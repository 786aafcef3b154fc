"""Settings export and import.

Exported documents never contain API keys.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from voxsettings import __version__
from voxsettings.errors import SettingsImportError
from voxsettings.settings.fields import FIELDS_BY_KEY, SECRET_KEYS
from voxsettings.settings.model import SettingsSnapshot

logger = logging.getLogger(__name__)


def export_settings(snapshot: SettingsSnapshot) -> str:
    """Serialize settings to a pretty-printed JSON document.

    Args:
        snapshot: Settings to export.

    Returns:
        JSON text with version, export_date and settings keys.
    """
    settings = {k: v for k, v in snapshot.to_dict().items() if k not in SECRET_KEYS}
    document = {
        "version": __version__,
        "export_date": datetime.now(timezone.utc).isoformat(),
        "settings": settings,
    }
    return json.dumps(document, indent=2, ensure_ascii=False)


def import_settings(text: str) -> dict[str, Any]:
    """Parse an exported settings document.

    Unknown keys, API keys and values that cannot be converted to their
    field's type are skipped with a warning.

    Args:
        text: JSON produced by export_settings().

    Returns:
        Mapping of field key to coerced value.

    Raises:
        SettingsImportError: If the document is not valid JSON or has no
            "settings" object.
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise SettingsImportError(f"Invalid settings format: {e}") from e

    settings = document.get("settings") if isinstance(document, dict) else None
    if not isinstance(settings, dict):
        raise SettingsImportError("Invalid settings structure: missing 'settings' object")

    values: dict[str, Any] = {}
    for key, raw in settings.items():
        setting = FIELDS_BY_KEY.get(key)
        if setting is None or setting.secret:
            logger.warning("settings_transfer: skipping key %s", key)
            continue
        if raw is None:
            continue
        try:
            values[key] = setting.coerce(raw)
        except (TypeError, ValueError) as e:
            logger.warning("settings_transfer: skipping %s: %s", key, e)

    logger.info("settings_transfer: parsed %d settings", len(values))
    return values
