"""Error taxonomy for voxsettings.

Each class maps to one propagation policy:

- ReadFailure: a store read failed; the field falls back to its default.
- WriteFailure: a store write failed; the current save batch is aborted.
- ApplyFailure: the backend could not re-activate written settings.
- QueryFailure: a device/voice enumeration failed; the tick is skipped.
- ServiceRestartFailure: listening service stop/start failed; logged only.
- ExternalApiFailure: a TTS or AI test call failed; shown to the user.
- SettingsImportError: an import payload could not be parsed.
"""

from __future__ import annotations


class VoxSettingsError(Exception):
    """Base class for all voxsettings errors."""

    pass


class ReadFailure(VoxSettingsError):
    """Raised when the config store cannot read a key."""

    def __init__(self, key: str, detail: str) -> None:
        super().__init__(f"Failed to read '{key}': {detail}")
        self.key = key
        self.detail = detail


class WriteFailure(VoxSettingsError):
    """Raised when the config store rejects a write."""

    def __init__(self, key: str, detail: str) -> None:
        super().__init__(f"Failed to save '{key}': {detail}")
        self.key = key
        self.detail = detail


class ApplyFailure(VoxSettingsError):
    """Raised when the backend fails to apply just-written settings."""

    pass


class QueryFailure(VoxSettingsError):
    """Raised when a device or voice enumeration query fails."""

    pass


class ServiceRestartFailure(VoxSettingsError):
    """Failure to stop or start the listening service. Logged, never raised."""

    pass


class ExternalApiFailure(VoxSettingsError):
    """Raised when a TTS or AI test endpoint fails."""

    pass


class SettingsImportError(VoxSettingsError):
    """Raised when an exported settings document cannot be imported."""

    pass
