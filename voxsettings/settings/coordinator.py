"""Settings persistence coordinator for voxsettings.

Orchestrates the save flow: validate -> write -> publish -> apply ->
notify -> restart listener. Decoupled from any specific frontend.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING

from voxsettings import state
from voxsettings.config.types import Timings
from voxsettings.errors import ApplyFailure, WriteFailure
from voxsettings.settings.manager import SettingsManager, get_settings_manager
from voxsettings.settings.model import SettingsSnapshot, SettingsValidator

if TYPE_CHECKING:
    from voxsettings.listener import ListeningServiceController
    from voxsettings.settings.model import SettingsModel
    from voxsettings.settings.view import SettingsViewProtocol
    from voxsettings.state import ObservableCell
    from voxsettings.store import ConfigStore

logger = logging.getLogger(__name__)


class SaveOutcome(Enum):
    """Result of one save() call."""

    SAVED = "saved"
    REJECTED = "rejected"  # Cooldown running or previous save in flight
    INVALID = "invalid"
    WRITE_FAILED = "write_failed"
    APPLY_FAILED = "apply_failed"


class SettingsPersistenceCoordinator:
    """Commits the settings model to the store.

    The coordinator manages:
    - The save guard (cooldown timer plus an in-flight check)
    - Ordered batch writes that stop at the first failure
    - Publishing the assistant voice to the shared state cell
    - Applying settings and dispatching change handlers
    - The transient "saved" indicator
    - Restarting the listening service when monitoring is on

    Already-written fields are never rolled back and failed saves are never
    retried automatically.

    Example:
        >>> coordinator = SettingsPersistenceCoordinator(model, store, view, listener)
        >>> outcome = await coordinator.save()
    """

    def __init__(
        self,
        model: "SettingsModel",
        store: "ConfigStore",
        view: "SettingsViewProtocol",
        listener: "ListeningServiceController",
        timings: Timings | None = None,
        voice_cell: "ObservableCell[str] | None" = None,
        manager: SettingsManager | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            model: Settings model to commit.
            store: Config store client.
            view: Frontend receiving errors and indicator updates.
            listener: Listening service controller.
            timings: Cooldown and indicator durations.
            voice_cell: Shared assistant voice cell (defaults to the global one).
            manager: Change dispatcher (defaults to the global one).
        """
        self._model = model
        self._store = store
        self._view = view
        self._listener = listener
        self._timings = timings or Timings()
        self._voice_cell = voice_cell if voice_cell is not None else state.assistant_voice
        self._manager = manager or get_settings_manager()

        self._committed: SettingsSnapshot | None = None
        self._in_flight = False
        self._save_enabled = True
        self._saved = False
        self._cooldown_handle: asyncio.TimerHandle | None = None
        self._saved_handle: asyncio.TimerHandle | None = None

    @property
    def save_enabled(self) -> bool:
        return self._save_enabled

    @property
    def saved(self) -> bool:
        return self._saved

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def mark_committed(self, snapshot: SettingsSnapshot) -> None:
        """Record the snapshot known to be in the store (e.g. after load)."""
        self._committed = snapshot

    async def save(self) -> SaveOutcome:
        """Write every setting to the store.

        Returns:
            SaveOutcome describing how far the save got.
        """
        if not self._save_enabled or self._in_flight:
            logger.warning(
                "settings_coordinator: save rejected, cooldown=%s, in_flight=%s",
                not self._save_enabled,
                self._in_flight,
            )
            return SaveOutcome.REJECTED

        self._set_save_enabled(False)
        self._cooldown_handle = asyncio.get_running_loop().call_later(
            self._timings.save_cooldown,
            self._end_cooldown,
        )

        self._in_flight = True
        try:
            return await self._save()
        finally:
            self._in_flight = False

    async def _save(self) -> SaveOutcome:
        logger.info("settings_coordinator: save requested")
        snapshot = self._model.snapshot()

        result = SettingsValidator.validate(snapshot)
        if not result.is_valid:
            logger.warning(
                "settings_coordinator: validation failed, errors=%s",
                list(result.errors.keys()),
            )
            self._view.show_error("Invalid settings: " + "; ".join(result.errors.values()))
            return SaveOutcome.INVALID

        values = snapshot.to_dict()
        written = 0
        try:
            for key, value in values.items():
                await self._store.set(key, value)
                written += 1
        except WriteFailure as e:
            logger.error(
                "settings_coordinator: save aborted after %d/%d writes: %s",
                written,
                len(values),
                e,
            )
            self._view.show_error(str(e))
            return SaveOutcome.WRITE_FAILED

        self._voice_cell.set(snapshot.assistant_voice)

        try:
            await self._store.apply()
        except ApplyFailure as e:
            logger.error("settings_coordinator: %s", e)
            self._view.show_error(str(e))
            return SaveOutcome.APPLY_FAILED

        previous, self._committed = self._committed, snapshot
        if previous is not None:
            self._manager.apply_settings(previous.to_dict(), values)

        self._show_saved()

        if snapshot.device_monitoring:
            self._listener.schedule_restart()

        logger.info("settings_coordinator: save complete")
        return SaveOutcome.SAVED

    def _set_save_enabled(self, enabled: bool) -> None:
        self._save_enabled = enabled
        self._view.set_save_enabled(enabled)

    def _end_cooldown(self) -> None:
        self._cooldown_handle = None
        self._set_save_enabled(True)

    def _show_saved(self) -> None:
        if self._saved_handle is not None:
            self._saved_handle.cancel()
        self._saved = True
        self._view.set_saved(True)
        self._saved_handle = asyncio.get_running_loop().call_later(
            self._timings.saved_display,
            self._clear_saved,
        )

    def _clear_saved(self) -> None:
        self._saved_handle = None
        self._saved = False
        self._view.set_saved(False)

    def close(self) -> None:
        """Cancel the cooldown and indicator timers and clear both states."""
        if self._cooldown_handle is not None:
            self._cooldown_handle.cancel()
            self._cooldown_handle = None
        if self._saved_handle is not None:
            self._saved_handle.cancel()
            self._saved_handle = None
        self._save_enabled = True
        self._saved = False
