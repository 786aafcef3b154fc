"""Restart control for the background wake-word listening service."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from voxsettings.config.types import SETTLE_DELAY_MS
from voxsettings.errors import ServiceRestartFailure

if TYPE_CHECKING:
    from voxsettings.backend import AssistantBackend

logger = logging.getLogger(__name__)


class ListeningServiceController:
    """Stops and restarts the listening loop so it picks up new settings.

    The start request is only issued once the settle delay has elapsed
    after stop returned; starting earlier can fail with the audio device
    still held by the old loop. Restarts run one at a time: a restart
    waits for the previous one, including its start request, before it
    issues stop. Failures are logged and never surfaced.
    """

    def __init__(
        self,
        backend: "AssistantBackend",
        settle_delay: float = SETTLE_DELAY_MS / 1000,
    ) -> None:
        """Initialize the controller.

        Args:
            backend: Backend exposing stop_listening/start_listening.
            settle_delay: Seconds to wait between stop and start.
        """
        self._backend = backend
        self._settle_delay = settle_delay
        self._tasks: set[asyncio.Task] = set()
        self._restart_lock = asyncio.Lock()
        self._start_task: asyncio.Task | None = None

    @property
    def pending(self) -> int:
        """Number of restart or start tasks still running."""
        return len(self._tasks)

    def schedule_restart(self) -> asyncio.Task:
        """Run restart_after_save() in the background.

        Returns:
            The restart task; close() cancels it if still running.
        """
        return self._track(self.restart_after_save())

    async def restart_after_save(self) -> None:
        """Stop the listening loop, wait the settle delay, then start it.

        Start is fired without waiting for the backend to acknowledge it.
        """
        async with self._restart_lock:
            # A start from the previous restart must not land after this stop
            if self._start_task is not None and not self._start_task.done():
                await asyncio.wait({self._start_task})

            try:
                await self._backend.stop_listening()
                logger.info("listener: stopped, settling for %.1fs", self._settle_delay)
            except Exception as e:
                logger.warning("listener: %s", ServiceRestartFailure(f"stop failed: {e}"))

            await asyncio.sleep(self._settle_delay)
            self._start_task = self._track(self._start())

    async def _start(self) -> None:
        try:
            await self._backend.start_listening()
            logger.info("listener: started")
        except Exception as e:
            logger.warning("listener: %s", ServiceRestartFailure(f"start failed: {e}"))

    def _track(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait until every restart and start task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        """Cancel any pending settle wait or start request."""
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        self._start_task = None
