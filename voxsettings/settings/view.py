"""Settings view protocol for voxsettings.

Defines the interface that any settings page frontend must provide.
The page and coordinator talk to the view only through this protocol,
so the same engine drives a GUI, a web page or the command line.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from voxsettings.devices import DeviceDirectory
    from voxsettings.settings.model import SettingsSnapshot


class SettingsViewProtocol(Protocol):
    """Interface that any settings frontend must implement.

    Example implementation:
        >>> class ConsoleView:
        ...     def populate(self, settings):
        ...         print(settings.to_dict())
        ...     def show_error(self, message):
        ...         print("error:", message)
        ...     ...
    """

    def populate(self, settings: "SettingsSnapshot") -> None:
        """Fill the view with loaded settings values.

        Called once the settings page has mounted or settings were imported.
        """
        ...

    def set_devices(self, directory: "DeviceDirectory") -> None:
        """Show the current input devices, output devices and voices.

        Called after every directory refresh that changed its contents.
        """
        ...

    def set_save_enabled(self, enabled: bool) -> None:
        """Enable or disable the save action.

        Disabled while the save cooldown runs.
        """
        ...

    def set_saved(self, saved: bool) -> None:
        """Show or hide the transient "saved" indicator."""
        ...

    def show_error(self, message: str) -> None:
        """Show one error notification for a failed user action."""
        ...

    def show_message(self, message: str) -> None:
        """Show an informational notification (e.g. an AI test reply)."""
        ...
