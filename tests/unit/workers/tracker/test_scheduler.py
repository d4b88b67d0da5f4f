"""
Unit tests for the version check scheduler.

Why: Periodic checking must start exactly once per process, fire an
     immediate sweep, keep ticking while sweeps run long and stop cleanly.

What: Tests start/stop idempotence, the immediate sweep, recurring ticks,
      interval validation, detached error handling and the process-wide
      accessor.

How: Uses a mocked PollOrchestrator whose run_sweep is an AsyncMock and
     fractional-minute intervals to observe ticks quickly.
"""

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from release_tracker.workers.tracker.orchestrator import PollOrchestrator
from release_tracker.workers.tracker.scheduler import (
    VersionCheckScheduler,
    get_version_check_scheduler,
    reset_version_check_scheduler,
)


@pytest.fixture
def mock_orchestrator() -> MagicMock:
    orchestrator = MagicMock(spec=PollOrchestrator)
    orchestrator.run_sweep = AsyncMock(return_value=[])
    return orchestrator


@pytest.fixture
async def scheduler(mock_orchestrator: MagicMock):
    scheduler = VersionCheckScheduler(mock_orchestrator)
    yield scheduler
    scheduler.stop()
    await scheduler.wait_for_sweeps()


class TestStart:
    """Test VersionCheckScheduler.start."""

    async def test_start_runs_immediate_sweep(
        self, scheduler: VersionCheckScheduler, mock_orchestrator: MagicMock
    ) -> None:
        """Test starting fires one sweep right away."""
        assert scheduler.start(60) is True
        await asyncio.sleep(0)

        assert scheduler.is_active()
        assert scheduler.interval_minutes == 60
        mock_orchestrator.run_sweep.assert_awaited_once()

    async def test_second_start_is_a_noop(
        self, scheduler: VersionCheckScheduler, mock_orchestrator: MagicMock
    ) -> None:
        """
        Why: Start may be requested by several entry points in one process.
        What: start(60) twice keeps one timer and one immediate sweep.
        How: Compares the timer task and sweep count after both calls.
        """
        assert scheduler.start(60) is True
        timer = scheduler._timer_task

        assert scheduler.start(60) is False
        await asyncio.sleep(0)

        assert scheduler._timer_task is timer
        assert mock_orchestrator.run_sweep.await_count == 1

    @pytest.mark.parametrize("interval", [0, -5])
    async def test_rejects_non_positive_interval(
        self, scheduler: VersionCheckScheduler, interval: float
    ) -> None:
        """Test zero and negative intervals are refused."""
        with pytest.raises(ValueError):
            scheduler.start(interval)

        assert not scheduler.is_active()

    async def test_timer_ticks_repeatedly(
        self, scheduler: VersionCheckScheduler, mock_orchestrator: MagicMock
    ) -> None:
        """Test each interval spawns another sweep."""
        scheduler.start(0.0005)  # 30ms

        await asyncio.sleep(0.2)

        assert mock_orchestrator.run_sweep.await_count >= 3

    async def test_slow_sweep_does_not_delay_timer(
        self, scheduler: VersionCheckScheduler, mock_orchestrator: MagicMock
    ) -> None:
        """Test ticks keep spawning sweeps while an earlier one is still running."""
        release = asyncio.Event()

        async def slow_sweep():
            await release.wait()
            return []

        mock_orchestrator.run_sweep.side_effect = slow_sweep
        scheduler.start(0.0005)

        await asyncio.sleep(0.1)
        calls_while_blocked = mock_orchestrator.run_sweep.call_count
        release.set()

        assert calls_while_blocked >= 2


class TestStop:
    """Test VersionCheckScheduler.stop."""

    async def test_stop_cancels_timer(
        self, scheduler: VersionCheckScheduler, mock_orchestrator: MagicMock
    ) -> None:
        """Test no further ticks happen after stop."""
        scheduler.start(0.0005)
        await asyncio.sleep(0)

        assert scheduler.stop() is True
        count = mock_orchestrator.run_sweep.await_count
        await asyncio.sleep(0.1)

        assert not scheduler.is_active()
        assert mock_orchestrator.run_sweep.await_count == count

    async def test_stop_when_inactive(self, scheduler: VersionCheckScheduler) -> None:
        """Test stopping an idle scheduler reports False."""
        assert scheduler.stop() is False

    async def test_stop_after_timer_finished(
        self, scheduler: VersionCheckScheduler
    ) -> None:
        """Test a timer task that already ended is not reported as cancelled."""
        finished = asyncio.create_task(asyncio.sleep(0))
        await finished
        scheduler._timer_task = finished

        assert scheduler.stop() is False
        assert not scheduler.is_active()

    async def test_in_flight_sweep_completes_after_stop(
        self, scheduler: VersionCheckScheduler, mock_orchestrator: MagicMock
    ) -> None:
        """Test stop does not cancel a running sweep."""
        release = asyncio.Event()
        finished = asyncio.Event()

        async def slow_sweep():
            await release.wait()
            finished.set()
            return []

        mock_orchestrator.run_sweep.side_effect = slow_sweep
        scheduler.start(60)
        await asyncio.sleep(0)

        scheduler.stop()
        release.set()
        await scheduler.wait_for_sweeps()

        assert finished.is_set()

    async def test_restart_after_stop(
        self, scheduler: VersionCheckScheduler, mock_orchestrator: MagicMock
    ) -> None:
        """Test the scheduler can be started again after stopping."""
        scheduler.start(60)
        scheduler.stop()

        assert scheduler.start(30) is True
        assert scheduler.interval_minutes == 30


class TestDetachedErrors:
    """Test failures of spawned sweeps."""

    async def test_sweep_error_is_logged(
        self,
        scheduler: VersionCheckScheduler,
        mock_orchestrator: MagicMock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test an exception escaping a sweep is logged, not raised."""
        mock_orchestrator.run_sweep.side_effect = RuntimeError("boom")

        with caplog.at_level(logging.ERROR):
            scheduler.start(60)
            await scheduler.wait_for_sweeps()
            await asyncio.sleep(0)

        assert "Scheduled version check failed: boom" in caplog.text
        assert scheduler.is_active()


class TestProcessWideScheduler:
    """Test get_version_check_scheduler and reset_version_check_scheduler."""

    async def test_same_instance_returned(self, mock_orchestrator: MagicMock) -> None:
        """Test every call returns the first scheduler."""
        first = get_version_check_scheduler(mock_orchestrator)
        second = get_version_check_scheduler()
        third = get_version_check_scheduler(MagicMock(spec=PollOrchestrator))

        assert first is second is third
        assert first.orchestrator is mock_orchestrator

    async def test_first_call_requires_orchestrator(self) -> None:
        """Test the scheduler cannot be created without an orchestrator."""
        with pytest.raises(RuntimeError):
            get_version_check_scheduler()

    async def test_reset_stops_and_forgets(self, mock_orchestrator: MagicMock) -> None:
        """Test reset stops an active scheduler and drops the instance."""
        scheduler = get_version_check_scheduler(mock_orchestrator)
        scheduler.start(60)

        reset_version_check_scheduler()

        assert not scheduler.is_active()
        assert get_version_check_scheduler(mock_orchestrator) is not scheduler
        await scheduler.wait_for_sweeps()
