"""Poll Orchestrator - runs one version check sweep over every tracked project.

At most one sweep runs at a time per orchestrator. A failure while checking
one project is recorded in that project's result and never stops the sweep.
"""

import asyncio
import logging
import time
from datetime import UTC, datetime
from typing import Any

from .diff_engine import VersionDiffEngine
from .interfaces import ReleaseStore, TrackedProject, VersionCheckResult

logger = logging.getLogger(__name__)


class SweepStats:
    """Counters over the lifetime of an orchestrator."""

    def __init__(self) -> None:
        self.total_sweeps: int = 0
        self.successful_sweeps: int = 0
        self.failed_sweeps: int = 0
        self.skipped_sweeps: int = 0
        self.last_sweep_at: datetime | None = None
        self.last_sweep_duration_seconds: float | None = None
        self.last_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_sweeps": self.total_sweeps,
            "successful_sweeps": self.successful_sweeps,
            "failed_sweeps": self.failed_sweeps,
            "skipped_sweeps": self.skipped_sweeps,
            "last_sweep_at": (
                self.last_sweep_at.isoformat() if self.last_sweep_at else None
            ),
            "last_sweep_duration_seconds": self.last_sweep_duration_seconds,
            "last_error": self.last_error,
        }


class PollOrchestrator:
    """Enumerates tracked projects and checks each one for new versions."""

    def __init__(
        self,
        store: ReleaseStore,
        diff_engine: VersionDiffEngine,
        max_concurrent_projects: int = 1,
    ):
        """Initialize the orchestrator.

        Args:
            store: Source of the tracked project list
            diff_engine: Per-project version checker
            max_concurrent_projects: Projects checked in parallel, 1 for sequential
        """
        if max_concurrent_projects < 1:
            raise ValueError("max_concurrent_projects must be at least 1")

        self.store = store
        self.diff_engine = diff_engine
        self.max_concurrent_projects = max_concurrent_projects
        self.stats = SweepStats()
        self._in_progress = False

    @property
    def in_progress(self) -> bool:
        """Whether a sweep is currently running."""
        return self._in_progress

    async def run_sweep(self) -> list[VersionCheckResult]:
        """Check every tracked project once.

        Returns an empty list without doing any work when another sweep is
        still running, or when the project list cannot be loaded.

        Returns:
            One result per tracked project, in enumeration order
        """
        if self._in_progress:
            self.stats.skipped_sweeps += 1
            logger.info("Version check already in progress, skipping sweep")
            return []

        self._in_progress = True
        start_time = time.time()
        self.stats.total_sweeps += 1
        self.stats.last_sweep_at = datetime.now(UTC)

        try:
            projects = await self.store.list_tracked_projects()
            logger.info(f"Starting version check for {len(projects)} projects")

            results = await self._check_projects(projects)

            self.stats.successful_sweeps += 1
            self.stats.last_error = None
            updated = sum(1 for result in results if result.has_updates)
            failed = sum(1 for result in results if result.failed)
            logger.info(
                f"Version check completed: {len(results)} projects checked, "
                f"{updated} with updates, {failed} failed"
            )
            return results

        except Exception as e:
            self.stats.failed_sweeps += 1
            self.stats.last_error = str(e)
            logger.error(f"Version check sweep failed: {e}", exc_info=True)
            return []

        finally:
            self.stats.last_sweep_duration_seconds = time.time() - start_time
            self._in_progress = False

    async def _check_projects(
        self, projects: list[TrackedProject]
    ) -> list[VersionCheckResult]:
        if self.max_concurrent_projects == 1:
            return [await self._check_isolated(project) for project in projects]

        semaphore = asyncio.Semaphore(self.max_concurrent_projects)

        async def check_with_limit(project: TrackedProject) -> VersionCheckResult:
            async with semaphore:
                return await self._check_isolated(project)

        # gather keeps argument order
        return list(
            await asyncio.gather(*(check_with_limit(project) for project in projects))
        )

    async def _check_isolated(self, project: TrackedProject) -> VersionCheckResult:
        try:
            return await self.diff_engine.check_project(project)
        except Exception as e:
            logger.error(
                f"Error checking project {project.full_name}: {e}",
                extra={"project_id": str(project.id)},
            )
            return VersionCheckResult(project.id, project.name, [], str(e))

    def get_status(self) -> dict[str, Any]:
        """Current sweep flag and lifetime statistics."""
        return {"sweep_in_progress": self._in_progress, **self.stats.to_dict()}
