"""Audio device and voice directory.

Holds three independent ordered sequences (input devices, output devices,
voices). Each refresh replaces every sequence whose query succeeded with a
freshly built one; a failed query leaves its sequence untouched.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from voxsettings.errors import QueryFailure

if TYPE_CHECKING:
    from voxsettings.backend import AssistantBackend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceDescriptor:
    """One selectable entry: an opaque id and a display label."""

    id: str
    label: str


def normalize_devices(raw: Any) -> tuple[DeviceDescriptor, ...]:
    """Convert a backend enumeration result to descriptors.

    Accepts a mapping of id to name, a list of names (id and label are the
    same), or a list of {"id", "name"} records. Iteration order is kept.

    Raises:
        QueryFailure: If the result has none of the accepted shapes.
    """
    if raw is None:
        return ()
    if isinstance(raw, dict):
        return tuple(DeviceDescriptor(str(k), str(v)) for k, v in raw.items())
    if isinstance(raw, (list, tuple)):
        devices = []
        for item in raw:
            if isinstance(item, DeviceDescriptor):
                devices.append(item)
            elif isinstance(item, str):
                devices.append(DeviceDescriptor(item, item))
            elif isinstance(item, dict) and "id" in item:
                label = item.get("name", item.get("label", item["id"]))
                devices.append(DeviceDescriptor(str(item["id"]), str(label)))
            else:
                raise QueryFailure(f"unexpected device entry: {item!r}")
        return tuple(devices)
    raise QueryFailure(f"unexpected device list type: {type(raw).__name__}")


class DeviceDirectory:
    """Enumerates input devices, output devices and voices.

    Example:
        >>> directory = DeviceDirectory(backend)
        >>> await directory.refresh()
        >>> [d.label for d in directory.inputs]
        ['Built-in Microphone', 'USB Headset']
    """

    def __init__(self, backend: "AssistantBackend") -> None:
        self._backend = backend
        self._inputs: tuple[DeviceDescriptor, ...] = ()
        self._outputs: tuple[DeviceDescriptor, ...] = ()
        self._voices: tuple[DeviceDescriptor, ...] = ()
        self._listeners: list[Callable[[DeviceDirectory], None]] = []

    @property
    def inputs(self) -> tuple[DeviceDescriptor, ...]:
        return self._inputs

    @property
    def outputs(self) -> tuple[DeviceDescriptor, ...]:
        return self._outputs

    @property
    def voices(self) -> tuple[DeviceDescriptor, ...]:
        return self._voices

    def add_listener(self, listener: Callable[[DeviceDirectory], None]) -> None:
        """Register a callback invoked after a refresh that changed contents."""
        self._listeners.append(listener)

    async def refresh(self) -> bool:
        """Re-run the three enumeration queries.

        Never raises: a failed query is logged and its sequence keeps the
        previous contents, the other two are still replaced.

        Returns:
            True if any sequence changed.
        """
        try:
            results = await asyncio.gather(
                self._query("input devices", self._backend.list_input_devices),
                self._query("output devices", self._backend.list_output_devices),
                self._query("voices", self._backend.list_voices),
                return_exceptions=True,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("device_directory: refresh failed: %s", e)
            return False

        inputs, outputs, voices = results
        changed = False

        if isinstance(inputs, BaseException):
            logger.warning("device_directory: %s", inputs)
        else:
            changed |= inputs != self._inputs
            self._inputs = inputs

        if isinstance(outputs, BaseException):
            logger.warning("device_directory: %s", outputs)
        else:
            changed |= outputs != self._outputs
            self._outputs = outputs

        if isinstance(voices, BaseException):
            logger.warning("device_directory: %s", voices)
        else:
            changed |= voices != self._voices
            self._voices = voices

        if changed:
            logger.debug(
                "device_directory: updated, inputs=%d, outputs=%d, voices=%d",
                len(self._inputs),
                len(self._outputs),
                len(self._voices),
            )
            for listener in list(self._listeners):
                try:
                    listener(self)
                except Exception as e:
                    logger.error("device_directory: listener failed: %s", e)
        return changed

    @staticmethod
    async def _query(
        name: str,
        query: Callable[[], Awaitable[Any]],
    ) -> tuple[DeviceDescriptor, ...]:
        try:
            return normalize_devices(await query())
        except QueryFailure:
            raise
        except Exception as e:
            raise QueryFailure(f"failed to list {name}: {e}") from e
