"""Command-line settings view.

Implements SettingsViewProtocol by printing to stdout. Errors, the saved
confirmation and informational messages are also raised as desktop
notifications.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

from voxsettings import notifications
from voxsettings.settings.fields import SECRET_KEYS

if TYPE_CHECKING:
    from voxsettings.devices import DeviceDirectory
    from voxsettings.settings.model import SettingsSnapshot


def mask_secret(value: str) -> str:
    """Hide all but the last four characters of an API key."""
    if not value:
        return ""
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]


class ConsoleView:
    """Settings view for the terminal."""

    def __init__(
        self,
        out: TextIO | None = None,
        notify: bool = True,
        quiet: bool = False,
    ) -> None:
        """Initialize the view.

        Args:
            out: Output stream (defaults to stdout).
            notify: Also show desktop notifications for errors, saves and messages.
            quiet: Do not print populate() and set_devices() output.
        """
        self._out = out or sys.stdout
        self._notify = notify
        self._quiet = quiet
        self.errors: list[str] = []

    def _print(self, text: str = "") -> None:
        print(text, file=self._out)

    def populate(self, settings: "SettingsSnapshot") -> None:
        if self._quiet:
            return
        self.print_settings(settings)

    def print_settings(self, settings: "SettingsSnapshot") -> None:
        """Print every setting, masking API keys."""
        self._print("Settings")
        self._print("-" * 40)
        for key, value in settings.to_dict().items():
            if key in SECRET_KEYS:
                value = mask_secret(value)
            self._print(f"  {key:<26} {value}")
        self._print()

    def set_devices(self, directory: "DeviceDirectory") -> None:
        if self._quiet:
            return
        self.print_devices(directory)

    def print_devices(self, directory: "DeviceDirectory") -> None:
        """Print the input devices, output devices and voices."""
        for title, entries in (
            ("Input devices", directory.inputs),
            ("Output devices", directory.outputs),
            ("Voices", directory.voices),
        ):
            self._print(title)
            self._print("-" * 40)
            if not entries:
                self._print("  (none)")
            for entry in entries:
                if entry.id == entry.label:
                    self._print(f"  {entry.label}")
                else:
                    self._print(f"  [{entry.id}] {entry.label}")
            self._print()

    def set_save_enabled(self, enabled: bool) -> None:
        pass

    def set_saved(self, saved: bool) -> None:
        if not saved:
            return
        self._print("Settings saved")
        if self._notify:
            notifications.show_saved()

    def show_error(self, message: str) -> None:
        self.errors.append(message)
        print(f"Error: {message}", file=sys.stderr)
        if self._notify:
            notifications.show_error(message)

    def show_message(self, message: str) -> None:
        self._print(message)
        if self._notify:
            notifications.show_message(message)
