"""Tests for the listening service controller."""

from __future__ import annotations

import asyncio

import pytest

from voxsettings.listener import ListeningServiceController

SETTLE = 0.05


class TestRestartAfterSave:
    """Tests for the stop, settle, start sequence."""

    @pytest.mark.asyncio
    async def test_stop_then_start_after_settle_delay(self, backend):
        """Test start is issued no earlier than the settle delay after stop."""
        controller = ListeningServiceController(backend, SETTLE)

        await controller.restart_after_save()
        await controller.wait_idle()

        assert backend.call_names() == ["stop_listening", "start_listening"]
        (_, stopped_at), (_, started_at) = backend.loop_times
        assert started_at - stopped_at >= SETTLE * 0.99

    @pytest.mark.asyncio
    async def test_sleeps_for_default_settle_delay(self, backend, mocker):
        """Test the default delay is one second, slept between stop and start."""
        order = []

        async def fake_sleep(delay):
            order.append(("sleep", delay))

        mocker.patch("voxsettings.listener.asyncio.sleep", side_effect=fake_sleep)
        controller = ListeningServiceController(backend)

        await controller.restart_after_save()
        assert order == [("sleep", 1.0)]
        assert backend.call_names() == ["stop_listening"]

        await controller.wait_idle()
        assert backend.call_names() == ["stop_listening", "start_listening"]

    @pytest.mark.asyncio
    async def test_stop_failure_still_restarts(self, backend, caplog):
        """Test a failed stop is logged and start still follows."""
        backend.fail_stop = True
        controller = ListeningServiceController(backend, SETTLE)

        await controller.restart_after_save()
        await controller.wait_idle()

        assert backend.call_names() == ["stop_listening", "start_listening"]
        assert "stop failed" in caplog.text

    @pytest.mark.asyncio
    async def test_start_failure_is_only_logged(self, backend, caplog):
        """Test a failed start never raises."""
        backend.fail_start = True
        controller = ListeningServiceController(backend, SETTLE)

        await controller.restart_after_save()
        await controller.wait_idle()

        assert "start failed: microphone busy" in caplog.text


class TestScheduling:
    """Tests for background scheduling and cancellation."""

    @pytest.mark.asyncio
    async def test_schedule_restart_runs_in_background(self, backend):
        """Test schedule_restart returns before stop is called."""
        controller = ListeningServiceController(backend, SETTLE)

        task = controller.schedule_restart()
        assert controller.pending == 1
        assert backend.calls == []

        await task
        await controller.wait_idle()
        assert backend.call_names() == ["stop_listening", "start_listening"]
        assert controller.pending == 0

    @pytest.mark.asyncio
    async def test_close_cancels_settle_wait(self, backend):
        """Test closing during the settle delay means start never runs."""
        controller = ListeningServiceController(backend, SETTLE)

        controller.schedule_restart()
        await asyncio.sleep(SETTLE / 5)
        controller.close()
        await asyncio.sleep(SETTLE * 2)

        assert backend.call_names() == ["stop_listening"]
        assert controller.pending == 0


def _stop_start_gaps(backend) -> list[float]:
    """Seconds between each start and the stop call just before it."""
    gaps = []
    last_stop = None
    for name, at in backend.loop_times:
        if name == "stop_listening":
            last_stop = at
        elif name == "start_listening":
            gaps.append(at - last_stop)
    return gaps


class TestOverlappingRestarts:
    """Tests for restarts requested while one is still running."""

    @pytest.mark.asyncio
    async def test_second_restart_waits_for_first(self, backend):
        """Test every start follows the latest stop by the full settle delay."""
        backend.stop_delay = 0.03
        controller = ListeningServiceController(backend, SETTLE)

        controller.schedule_restart()
        await asyncio.sleep(0.055)
        controller.schedule_restart()
        await controller.wait_idle()

        assert backend.call_names() == [
            "stop_listening",
            "start_listening",
            "stop_listening",
            "start_listening",
        ]
        for gap in _stop_start_gaps(backend):
            assert gap >= (backend.stop_delay + SETTLE) * 0.99

    @pytest.mark.asyncio
    async def test_close_cancels_queued_restart(self, backend):
        """Test a restart waiting behind another is cancelled by close()."""
        controller = ListeningServiceController(backend, SETTLE)

        controller.schedule_restart()
        controller.schedule_restart()
        await asyncio.sleep(SETTLE / 5)
        controller.close()
        await asyncio.sleep(SETTLE * 3)

        assert backend.call_names() == ["stop_listening"]
        assert controller.pending == 0
