"""
Unit tests for the version check worker.

Why: The worker is the composition root and the only trigger surface; it
     must wire every component from configuration, report status and shut
     down the scheduler without cutting sweeps short.

What: Tests initialization, the interval override, check_now, summarize,
      get_status, run/shutdown and the command-line entry point.

How: Uses a temporary YAML configuration, the mock connection manager from
     conftest and a mocked PollOrchestrator for the scheduler.
"""

import asyncio
import json
import os
import signal
import uuid
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import yaml

from release_tracker.workers.tracker import (
    NewVersion,
    PollOrchestrator,
    VersionCheckResult,
    VersionCheckScheduler,
    get_version_check_scheduler,
)
from release_tracker.workers.version_check_worker import (
    ACTIVE_MESSAGE,
    INACTIVE_MESSAGE,
    VersionCheckWorker,
    main,
)

WORKER_MODULE = "release_tracker.workers.version_check_worker"


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Minimal worker configuration written to a temporary YAML file."""
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "system": {"environment": "production", "log_level": "DEBUG"},
                "github": {"token": "ghp_test_token", "timeout": 5},
                "polling": {"releases_per_check": 15, "max_concurrent_projects": 3},
            }
        )
    )
    return path


@pytest.fixture
def patched_database(mock_connection_manager: MagicMock):
    """Replace the process-wide connection manager and its disposal."""
    with (
        patch(
            f"{WORKER_MODULE}.get_connection_manager",
            return_value=mock_connection_manager,
        ),
        patch(f"{WORKER_MODULE}.close_database_connections", new_callable=AsyncMock) as close,
    ):
        yield close


@pytest.fixture
async def initialized_worker(config_file: Path, patched_database: AsyncMock):
    worker = VersionCheckWorker(config_path=str(config_file))
    await worker.initialize()
    yield worker
    await worker.cleanup()


@pytest.fixture
def mock_orchestrator() -> MagicMock:
    orchestrator = MagicMock(spec=PollOrchestrator)
    orchestrator.run_sweep = AsyncMock(return_value=[])
    orchestrator.in_progress = False
    orchestrator.get_status.return_value = {"total_sweeps": 0}
    return orchestrator


def make_result(tags: list[str], error: str | None = None) -> VersionCheckResult:
    versions = [
        NewVersion(
            tag_name=tag,
            name=tag,
            body=None,
            published_at=datetime(2024, 1, 1, tzinfo=UTC),
            is_prerelease=False,
            is_draft=False,
        )
        for tag in tags
    ]
    return VersionCheckResult(uuid.uuid4(), "widget", versions, error)


class TestInitialize:
    """Test VersionCheckWorker.initialize."""

    async def test_components_built_from_configuration(
        self, initialized_worker: VersionCheckWorker
    ) -> None:
        """
        Why: Every configured value must reach the component that uses it.
        What: Tests the polling and GitHub settings flow into the engine.
        How: Inspects the wired components after initialize().
        """
        worker = initialized_worker

        assert worker.config is not None
        assert worker.orchestrator is not None
        assert worker.orchestrator.max_concurrent_projects == 3
        assert worker.orchestrator.diff_engine.releases_per_check == 15
        assert worker.github_client is not None
        assert worker.github_client.config.timeout == 5
        assert worker.github_client.auth.is_authenticated
        assert worker.tracking_service is not None
        assert worker.started_at is not None

    async def test_scheduler_is_process_wide(
        self, initialized_worker: VersionCheckWorker
    ) -> None:
        """Test the worker uses the shared scheduler instance."""
        assert initialized_worker.scheduler is get_version_check_scheduler()
        assert initialized_worker.scheduler.orchestrator is initialized_worker.orchestrator

    async def test_interval_follows_environment(
        self, initialized_worker: VersionCheckWorker
    ) -> None:
        """Test production configuration checks every 60 minutes."""
        assert initialized_worker.interval_minutes == 60

    async def test_interval_override_wins(
        self, initialized_worker: VersionCheckWorker
    ) -> None:
        """Test the command-line interval takes precedence."""
        initialized_worker.interval_override = 5

        assert initialized_worker.interval_minutes == 5

    async def test_missing_config_file_fails_and_cleans_up(
        self, tmp_path: Path, patched_database: AsyncMock
    ) -> None:
        """Test a configuration error propagates from initialize."""
        worker = VersionCheckWorker(config_path=str(tmp_path / "missing.yaml"))

        with pytest.raises(Exception, match="Configuration file not found"):
            await worker.initialize()

        assert worker.orchestrator is None

    def test_interval_requires_configuration(self) -> None:
        """Test interval lookup before loading configuration fails."""
        with pytest.raises(RuntimeError):
            _ = VersionCheckWorker().interval_minutes


class TestCheckNow:
    """Test manual checks and their summary."""

    async def test_check_now_requires_initialize(self) -> None:
        """Test a manual check on an uninitialized worker raises."""
        with pytest.raises(RuntimeError, match="not initialized"):
            await VersionCheckWorker().check_now()

    async def test_check_now_runs_one_sweep(self, mock_orchestrator: MagicMock) -> None:
        """Test check_now delegates to the orchestrator."""
        results = [make_result(["v1.0"])]
        mock_orchestrator.run_sweep.return_value = results
        worker = VersionCheckWorker()
        worker.orchestrator = mock_orchestrator

        assert await worker.check_now() is results
        mock_orchestrator.run_sweep.assert_awaited_once()

    def test_summarize(self) -> None:
        """Test the summary counts projects and projects with updates."""
        results = [make_result(["v2", "v1"]), make_result([]), make_result([], "boom")]

        summary = VersionCheckWorker.summarize(results)

        assert summary["success"] is True
        assert summary["checked_projects"] == 3
        assert summary["projects_with_updates"] == 1
        assert [len(r["new_versions"]) for r in summary["results"]] == [2, 0, 0]
        assert summary["results"][2]["error"] == "boom"
        assert "error" not in summary["results"][0]
        json.dumps(summary)

    def test_summarize_nothing(self) -> None:
        """Test an empty sweep summary."""
        assert VersionCheckWorker.summarize([]) == {
            "success": True,
            "checked_projects": 0,
            "projects_with_updates": 0,
            "results": [],
        }


class TestGetStatus:
    """Test VersionCheckWorker.get_status."""

    def test_status_before_initialize(self) -> None:
        """Test an idle worker reports not running."""
        status = VersionCheckWorker().get_status()

        assert status == {
            "is_running": False,
            "message": INACTIVE_MESSAGE,
            "sweep_in_progress": False,
            "interval_minutes": None,
            "stats": {},
        }

    async def test_status_while_running(self, mock_orchestrator: MagicMock) -> None:
        """Test an active scheduler is reported with its interval."""
        worker = VersionCheckWorker()
        worker.orchestrator = mock_orchestrator
        worker.scheduler = VersionCheckScheduler(mock_orchestrator)
        worker.scheduler.start(30)

        status = worker.get_status()

        assert status["is_running"] is True
        assert status["message"] == ACTIVE_MESSAGE
        assert status["interval_minutes"] == 30
        assert status["stats"] == {"total_sweeps": 0}

        worker.scheduler.stop()
        await worker.scheduler.wait_for_sweeps()


class TestRun:
    """Test VersionCheckWorker.run and shutdown."""

    async def test_run_starts_and_stops_scheduler(
        self, initialized_worker: VersionCheckWorker
    ) -> None:
        """
        Why: The worker must check periodically until asked to stop.
        What: run() starts the scheduler, shutdown() stops it.
        How: Replaces the orchestrator's sweep and requests shutdown shortly after.
        """
        worker = initialized_worker
        assert worker.orchestrator is not None and worker.scheduler is not None
        worker.orchestrator.run_sweep = AsyncMock(return_value=[])  # type: ignore[method-assign]
        observed: list[bool] = []

        async def stop_soon() -> None:
            await asyncio.sleep(0.01)
            observed.append(worker.scheduler.is_active())
            await worker.shutdown()

        stopper = asyncio.create_task(stop_soon())
        await worker.run()
        await stopper

        assert observed == [True]
        assert not worker.scheduler.is_active()
        worker.orchestrator.run_sweep.assert_awaited_once()

    async def test_run_without_startup_check(
        self, initialized_worker: VersionCheckWorker
    ) -> None:
        """Test run_on_startup=False leaves the scheduler idle."""
        worker = initialized_worker
        assert worker.config is not None and worker.scheduler is not None
        worker.config.polling.run_on_startup = False
        await worker.shutdown()

        await worker.run()

        assert not worker.scheduler.is_active()

    @pytest.mark.parametrize("sig", [signal.SIGTERM, signal.SIGINT])
    async def test_signal_stops_worker_between_sweeps(
        self, initialized_worker: VersionCheckWorker, sig: signal.Signals
    ) -> None:
        """
        Why: A supervisor stopping the process must not wait out the
             hour-long gap between sweeps.
        What: Tests a real SIGTERM/SIGINT ends run() promptly while the
              timer sleeps.
        How: Starts run() with the production interval, sends the signal to
             this process and times how long run() takes to return.
        """
        worker = initialized_worker
        assert worker.orchestrator is not None and worker.scheduler is not None
        worker.orchestrator.run_sweep = AsyncMock(return_value=[])  # type: ignore[method-assign]
        loop = asyncio.get_running_loop()

        runner = asyncio.create_task(worker.run())
        await asyncio.sleep(0.05)
        assert worker.scheduler.is_active()
        assert worker.scheduler.interval_minutes == 60

        started = loop.time()
        os.kill(os.getpid(), sig)
        await asyncio.wait_for(runner, timeout=5)

        assert loop.time() - started < 1
        assert worker.shutdown_event.is_set()
        assert not worker.scheduler.is_active()

    async def test_signal_handlers_removed_after_run(
        self, initialized_worker: VersionCheckWorker
    ) -> None:
        """Test run() leaves no handler behind on the event loop."""
        worker = initialized_worker
        assert worker.config is not None
        worker.config.polling.run_on_startup = False
        await worker.shutdown()

        await worker.run()

        loop = asyncio.get_running_loop()
        assert loop.remove_signal_handler(signal.SIGINT) is False
        assert loop.remove_signal_handler(signal.SIGTERM) is False

    async def test_run_requires_initialize(self) -> None:
        """Test run on an uninitialized worker raises."""
        with pytest.raises(RuntimeError):
            await VersionCheckWorker().run()

    async def test_cleanup_closes_connections(
        self, initialized_worker: VersionCheckWorker, patched_database: AsyncMock
    ) -> None:
        """Test cleanup disposes the database engine once."""
        await initialized_worker.cleanup()
        await initialized_worker.cleanup()

        patched_database.assert_awaited_once()
        assert initialized_worker.github_client is None


class TestMain:
    """Test the command-line entry point."""

    async def test_check_now_prints_summary(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test --check-now prints the sweep summary as JSON."""
        results = [make_result(["v1.0"])]

        with (
            patch("sys.argv", ["release-tracker", "--check-now"]),
            patch.object(VersionCheckWorker, "initialize", new_callable=AsyncMock),
            patch.object(
                VersionCheckWorker, "check_now", new_callable=AsyncMock
            ) as check_now,
            patch.object(VersionCheckWorker, "cleanup", new_callable=AsyncMock) as cleanup,
        ):
            check_now.return_value = results
            await main()

        summary = json.loads(capsys.readouterr().out)
        assert summary["checked_projects"] == 1
        assert summary["projects_with_updates"] == 1
        cleanup.assert_awaited_once()

    async def test_interval_argument_overrides(self) -> None:
        """Test --interval-minutes reaches the worker."""
        workers: list[VersionCheckWorker] = []

        async def capture_run(self: VersionCheckWorker) -> None:
            workers.append(self)

        with (
            patch("sys.argv", ["release-tracker", "--interval-minutes", "2.5"]),
            patch.object(VersionCheckWorker, "initialize", new_callable=AsyncMock),
            patch.object(VersionCheckWorker, "run", capture_run),
            patch.object(VersionCheckWorker, "cleanup", new_callable=AsyncMock),
        ):
            await main()

        (worker,) = workers
        assert worker.interval_override == 2.5

    async def test_failure_exits_non_zero(self) -> None:
        """Test an initialization failure exits with status 1."""
        with (
            patch("sys.argv", ["release-tracker"]),
            patch.object(
                VersionCheckWorker,
                "initialize",
                new_callable=AsyncMock,
                side_effect=RuntimeError("no database"),
            ),
            patch.object(VersionCheckWorker, "cleanup", new_callable=AsyncMock) as cleanup,
            pytest.raises(SystemExit) as exc_info,
        ):
            await main()

        assert exc_info.value.code == 1
        cleanup.assert_awaited_once()
