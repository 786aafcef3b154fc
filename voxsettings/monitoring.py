"""Periodic device directory refresh driven by the monitoring flag.

The scheduler is a two-state machine:

    IDLE --set_enabled(True)--> POLLING
    POLLING --set_enabled(False)--> IDLE
    POLLING --cancel()--> IDLE

Exactly one polling task exists while POLLING and none while IDLE.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum, auto
from typing import TYPE_CHECKING

from voxsettings.config.types import POLL_PERIOD_MS

if TYPE_CHECKING:
    from voxsettings.devices import DeviceDirectory

logger = logging.getLogger(__name__)


class MonitoringState(Enum):
    """Scheduler states.

    States:
        IDLE: No polling task exists.
        POLLING: One polling task refreshes the directory every period.
    """

    IDLE = auto()
    POLLING = auto()


class MonitoringScheduler:
    """Starts and stops the periodic directory refresh.

    Both entry points, the initial sync at mount and every later flag
    change, go through set_enabled(), so they cannot create duplicate
    polling tasks.
    """

    def __init__(
        self,
        directory: "DeviceDirectory",
        period: float = POLL_PERIOD_MS / 1000,
    ) -> None:
        """Initialize the scheduler in the IDLE state.

        Args:
            directory: Directory to refresh on every tick.
            period: Seconds between ticks.
        """
        self._directory = directory
        self._period = period
        self._task: asyncio.Task | None = None
        self._ticks = 0

    @property
    def state(self) -> MonitoringState:
        return MonitoringState.POLLING if self._task is not None else MonitoringState.IDLE

    @property
    def ticks(self) -> int:
        """Number of refresh ticks run since creation."""
        return self._ticks

    def set_enabled(self, enabled: bool) -> None:
        """React to the monitoring flag.

        Must be called from within a running event loop.

        Args:
            enabled: Current value of the monitoring flag.
        """
        if enabled and self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._poll())
            logger.info("monitoring: polling started, period=%.1fs", self._period)
        elif not enabled and self._task is not None:
            self._stop()
            logger.info("monitoring: polling stopped")

    def cancel(self) -> None:
        """Cancel polling unconditionally. Safe to call more than once."""
        if self._task is not None:
            self._stop()
            logger.debug("monitoring: cancelled")

    def _stop(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self._period)
            self._ticks += 1
            await self._directory.refresh()
