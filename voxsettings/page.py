"""Settings page composition root.

Wires the settings model, device directory, monitoring scheduler,
listening service controller and persistence coordinator to one backend
and one view, and owns their lifecycle:

    page = SettingsPage.from_config(backend, view, get_config())
    await page.mount()      # load, refresh devices, start polling
    page.update("tts_speed", 1.2)
    await page.save()
    await page.unmount()    # release every timer
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from voxsettings import state
from voxsettings.config.types import Config, Timings
from voxsettings.devices import DeviceDirectory
from voxsettings.errors import SettingsImportError
from voxsettings.listener import ListeningServiceController
from voxsettings.monitoring import MonitoringScheduler
from voxsettings.settings.coordinator import SaveOutcome, SettingsPersistenceCoordinator
from voxsettings.settings.fields import MONITORING_KEY, MissingValuePolicy
from voxsettings.settings.model import SettingsModel
from voxsettings.settings.transfer import export_settings, import_settings
from voxsettings.store import ConfigStore

if TYPE_CHECKING:
    from voxsettings.backend import AssistantBackend
    from voxsettings.settings.manager import SettingsManager
    from voxsettings.settings.view import SettingsViewProtocol
    from voxsettings.state import ObservableCell

logger = logging.getLogger(__name__)

DEFAULT_TTS_TEST_TEXT = "Hello! This is a voice test."


class SettingsPage:
    """One active settings page.

    User actions (save, TTS test, AI test, import) report failures to the
    view as one error each. Background work (device polling, listener
    restart) only logs.
    """

    def __init__(
        self,
        backend: "AssistantBackend",
        view: "SettingsViewProtocol",
        timings: Timings | None = None,
        policy: MissingValuePolicy = MissingValuePolicy.FALSY,
        voice_cell: "ObservableCell[str] | None" = None,
        manager: "SettingsManager | None" = None,
    ) -> None:
        """Build the page components.

        Args:
            backend: Assistant backend.
            view: Frontend for this page.
            timings: Poll period and delays.
            policy: Missing-value convention for loading.
            voice_cell: Shared assistant voice cell (defaults to the global one).
            manager: Settings change dispatcher (defaults to the global one).
        """
        timings = timings or Timings()
        self._backend = backend
        self._view = view
        self._voice_cell = voice_cell if voice_cell is not None else state.assistant_voice
        self._mounted = False

        self.store = ConfigStore(backend)
        self.model = SettingsModel(policy)
        self.directory = DeviceDirectory(backend)
        self.scheduler = MonitoringScheduler(self.directory, timings.poll_period)
        self.listener = ListeningServiceController(backend, timings.settle_delay)
        self.coordinator = SettingsPersistenceCoordinator(
            self.model,
            self.store,
            view,
            self.listener,
            timings=timings,
            voice_cell=self._voice_cell,
            manager=manager,
        )

        self.model.add_listener(self._on_setting_changed)
        self.directory.add_listener(view.set_devices)

    @classmethod
    def from_config(
        cls,
        backend: "AssistantBackend",
        view: "SettingsViewProtocol",
        config: Config,
    ) -> SettingsPage:
        """Build a page using the [timing] and [store] config sections."""
        policy_name = config.get("store", {}).get("missing_value_policy", "falsy")
        try:
            policy = MissingValuePolicy(policy_name)
        except ValueError:
            logger.warning("settings_page: unknown missing_value_policy %r, using falsy", policy_name)
            policy = MissingValuePolicy.FALSY
        return cls(backend, view, timings=Timings.from_config(config), policy=policy)

    @property
    def mounted(self) -> bool:
        return self._mounted

    async def mount(self) -> None:
        """Load settings, fill the view and start device monitoring."""
        logger.info("settings_page: mounting")
        await self.model.load(self.store)

        snapshot = self.model.snapshot()
        self.coordinator.mark_committed(snapshot)
        self._voice_cell.set(snapshot.assistant_voice)

        await self.directory.refresh()
        self._view.populate(snapshot)

        self._mounted = True
        self.scheduler.set_enabled(self.model.monitoring_enabled)

    async def unmount(self) -> None:
        """Release every timer and background task."""
        self._mounted = False
        self.scheduler.cancel()
        self.coordinator.close()
        self.listener.close()
        logger.info("settings_page: unmounted")

    async def __aenter__(self) -> SettingsPage:
        await self.mount()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.unmount()

    def update(self, key: str, value: Any) -> bool:
        """Apply one user edit to the model.

        Returns:
            True if the value changed.
        """
        return self.model.update(key, value)

    def _on_setting_changed(self, key: str, value: Any) -> None:
        if key == MONITORING_KEY and self._mounted:
            self.scheduler.set_enabled(bool(value))

    async def save(self) -> SaveOutcome:
        """Commit the model to the store."""
        return await self.coordinator.save()

    async def test_tts(self, text: str = DEFAULT_TTS_TEST_TEXT) -> bool:
        """Speak a test phrase with the current TTS settings.

        Returns:
            True if the backend spoke the phrase.
        """
        try:
            await self._backend.speak_test(
                text,
                self.model["tts_voice"],
                self.model["tts_speed"],
                self.model["tts_volume"],
            )
        except Exception as e:
            logger.warning("settings_page: TTS test failed: %s", e)
            self._view.show_error(f"TTS test failed: {e}")
            return False
        return True

    async def test_ai(self) -> str | None:
        """Send a test request with the current AI keys and model.

        Returns:
            The model's reply, or None if the request failed.
        """
        try:
            reply = await self._backend.test_ai_connection(
                self.model["api_key_openai"],
                self.model["api_key_openrouter"],
                self.model["ai_model"],
            )
        except Exception as e:
            logger.warning("settings_page: AI test failed: %s", e)
            self._view.show_error(f"AI test failed: {e}")
            return None
        self._view.show_message(f"AI connection OK: {reply}")
        return reply

    def export_settings(self) -> str:
        """Export the current (unsaved included) settings as JSON."""
        return export_settings(self.model.snapshot())

    def import_settings(self, text: str) -> set[str]:
        """Load exported settings into the model without saving them.

        Returns:
            Keys whose values changed.
        """
        try:
            values = import_settings(text)
        except SettingsImportError as e:
            logger.warning("settings_page: %s", e)
            self._view.show_error(str(e))
            return set()

        changed = self.model.update_many(values)
        self._view.populate(self.model.snapshot())
        return changed
