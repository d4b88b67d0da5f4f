"""Periodic trigger for version check sweeps.

The scheduler only decides *when* a sweep starts. Each tick spawns the sweep
as a detached task, so a slow sweep never delays the timer; overlapping
sweeps are refused by the orchestrator itself.
"""

import asyncio
import contextlib
import logging
from typing import Any

from .orchestrator import PollOrchestrator

logger = logging.getLogger(__name__)


class VersionCheckScheduler:
    """Runs a sweep immediately and then once per interval."""

    def __init__(self, orchestrator: PollOrchestrator):
        self.orchestrator = orchestrator
        self.interval_minutes: float | None = None
        self._timer_task: asyncio.Task[None] | None = None
        self._sweep_tasks: set[asyncio.Task[Any]] = set()

    def is_active(self) -> bool:
        """Whether the recurring timer is running."""
        return self._timer_task is not None and not self._timer_task.done()

    def start(self, interval_minutes: float = 60) -> bool:
        """Start periodic checking.

        Must be called from within a running event loop.

        Args:
            interval_minutes: Minutes between sweeps

        Returns:
            False when already active, True when the timer was started

        Raises:
            ValueError: If the interval is not positive
        """
        if interval_minutes <= 0:
            raise ValueError(f"Interval must be positive, got {interval_minutes}")

        if self.is_active():
            logger.info("Periodic version check already running")
            return False

        self.interval_minutes = interval_minutes
        logger.info(f"Starting periodic version check every {interval_minutes} minutes")

        self._spawn_sweep()
        self._timer_task = asyncio.create_task(
            self._timer_loop(interval_minutes * 60), name="version-check-timer"
        )
        return True

    def stop(self) -> bool:
        """Cancel the timer; sweeps already running are left to finish.

        Returns:
            True when a running timer was cancelled
        """
        task = self._timer_task
        if task is None or task.done():
            return False

        task.cancel()
        self._timer_task = None
        logger.info("Stopped periodic version check")
        return True

    async def wait_for_sweeps(self) -> None:
        """Wait until every sweep spawned so far has finished."""
        if self._sweep_tasks:
            await asyncio.gather(*self._sweep_tasks, return_exceptions=True)

    async def _timer_loop(self, interval_seconds: float) -> None:
        with contextlib.suppress(asyncio.CancelledError):
            while True:
                await asyncio.sleep(interval_seconds)
                self._spawn_sweep()

    def _spawn_sweep(self) -> None:
        task = asyncio.create_task(self.orchestrator.run_sweep(), name="version-check-sweep")
        self._sweep_tasks.add(task)
        task.add_done_callback(self._on_sweep_done)

    def _on_sweep_done(self, task: asyncio.Task[Any]) -> None:
        self._sweep_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Scheduled version check failed: {error}", exc_info=error)


_scheduler: VersionCheckScheduler | None = None


def get_version_check_scheduler(
    orchestrator: PollOrchestrator | None = None,
) -> VersionCheckScheduler:
    """Get the process-wide scheduler, creating it on first use.

    Raises:
        RuntimeError: If the first call does not provide an orchestrator
    """
    global _scheduler

    if _scheduler is None:
        if orchestrator is None:
            raise RuntimeError("Version check scheduler requires an orchestrator")
        _scheduler = VersionCheckScheduler(orchestrator)

    return _scheduler


def reset_version_check_scheduler() -> None:
    """Stop and forget the process-wide scheduler (tests)."""
    global _scheduler

    if _scheduler is not None and _scheduler.is_active():
        _scheduler.stop()
    _scheduler = None
