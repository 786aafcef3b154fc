"""Async client for the backend's persisted key/value store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from voxsettings.errors import ApplyFailure, ReadFailure, WriteFailure
from voxsettings.settings.fields import SettingField

if TYPE_CHECKING:
    from voxsettings.backend import AssistantBackend

logger = logging.getLogger(__name__)


class ConfigStore:
    """Typed get/set/apply over the backend store.

    get() returns None for a missing key and raises ReadFailure only when
    the backend itself fails. set() and apply() raise WriteFailure and
    ApplyFailure respectively; callers treat a WriteFailure as fatal to the
    batch it belongs to.
    """

    def __init__(self, backend: "AssistantBackend") -> None:
        self._backend = backend

    async def get(self, key: str) -> Any | None:
        """Read a raw value.

        Args:
            key: Store key.

        Returns:
            The stored value, or None when the key is absent.

        Raises:
            ReadFailure: If the backend read failed.
        """
        try:
            return await self._backend.read(key)
        except Exception as e:
            raise ReadFailure(key, str(e)) from e

    async def get_typed(self, field: SettingField) -> Any | None:
        """Read a value and coerce it to the field's type.

        Returns:
            The coerced value, or None when absent or not coercible.

        Raises:
            ReadFailure: If the backend read failed.
        """
        raw = await self.get(field.key)
        if raw is None:
            return None
        try:
            return field.coerce(raw)
        except (TypeError, ValueError) as e:
            logger.warning("config_store: unusable value for %s: %s", field.key, e)
            return None

    async def set(self, key: str, value: Any) -> None:
        """Commit a value.

        Raises:
            WriteFailure: If the backend rejected or failed the write.
        """
        try:
            accepted = await self._backend.write(key, value)
        except Exception as e:
            raise WriteFailure(key, str(e)) from e
        if accepted is False:
            raise WriteFailure(key, "write rejected by backend")

    async def apply(self) -> None:
        """Ask the backend to re-activate its configuration.

        Raises:
            ApplyFailure: If the backend failed to apply settings.
        """
        try:
            applied = await self._backend.apply()
        except Exception as e:
            raise ApplyFailure(f"Failed to apply settings: {e}") from e
        if applied is False:
            raise ApplyFailure("Failed to apply settings: rejected by backend")
        logger.info("config_store: settings applied")
