"""Version Check Worker for scheduled release detection.

This module wires configuration, database, GitHub client and the polling
engine together, runs periodic version checks until shutdown and exposes
the manual "check now" and status operations.
"""

import asyncio
import json
import logging
import signal
import sys
from datetime import UTC, datetime
from typing import Any

from release_tracker.config import Config, ConfigurationLoader
from release_tracker.database import (
    DatabaseConnectionManager,
    close_database_connections,
    get_connection_manager,
)
from release_tracker.github import GitHubClient, GitHubClientConfig, create_auth_provider

from .tracker import (
    DatabaseReleaseStore,
    GitHubRepositoryProvider,
    PollOrchestrator,
    ProjectTrackingService,
    VersionCheckResult,
    VersionCheckScheduler,
    VersionDiffEngine,
    get_version_check_scheduler,
)

logger = logging.getLogger(__name__)

ACTIVE_MESSAGE = "Periodic version checking is active"
INACTIVE_MESSAGE = "Periodic version checking is not running"

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class VersionCheckWorker:
    """Composition root of the release polling engine.

    Manages the lifecycle of periodic version checking:
    - Configuration loading
    - Database and GitHub connections
    - Scheduler start and graceful shutdown
    - Manual checks and status reporting
    """

    def __init__(self, config_path: str | None = None):
        """Initialize version check worker.

        Args:
            config_path: Optional path to configuration file
        """
        self.config_path = config_path
        self.config: Config | None = None
        self.interval_override: float | None = None

        self.connection_manager: DatabaseConnectionManager | None = None
        self.github_client: GitHubClient | None = None
        self.orchestrator: PollOrchestrator | None = None
        self.scheduler: VersionCheckScheduler | None = None
        self.tracking_service: ProjectTrackingService | None = None

        self.shutdown_event = asyncio.Event()
        self.started_at: datetime | None = None

    @property
    def interval_minutes(self) -> float:
        """Sweep interval from the command line or the configuration."""
        if self.interval_override is not None:
            return self.interval_override
        if not self.config:
            raise RuntimeError("Configuration not loaded")
        return self.config.interval_minutes

    async def initialize(self) -> None:
        """Initialize worker components and connections."""
        logger.info("Initializing Version Check Worker...")

        try:
            self._load_configuration()
            self._initialize_components()
            self.started_at = datetime.now(UTC)
            logger.info("Version Check Worker initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize Version Check Worker: {e}")
            await self.cleanup()
            raise

    def _load_configuration(self) -> None:
        loader = ConfigurationLoader()
        if self.config_path:
            self.config = loader.load_from_file(self.config_path)
        else:
            self.config = loader.auto_load()

        logger.info(
            f"Configuration loaded: environment={self.config.system.environment}, "
            f"interval={self.interval_minutes} minutes"
        )

    def _initialize_components(self) -> None:
        if not self.config:
            raise RuntimeError("Configuration not loaded")

        self.connection_manager = get_connection_manager()

        github = self.config.github
        auth = create_auth_provider(github.token)
        if not auth.is_authenticated:
            logger.warning(
                "No GitHub token configured, using anonymous access (60 requests/hour)"
            )
        self.github_client = GitHubClient(
            auth=auth,
            config=GitHubClientConfig(
                base_url=github.base_url,
                timeout=github.timeout,
                max_retries=github.max_retries,
                user_agent=github.user_agent,
            ),
        )

        polling = self.config.polling
        provider = GitHubRepositoryProvider(self.github_client)
        store = DatabaseReleaseStore(self.connection_manager)
        diff_engine = VersionDiffEngine(
            provider, store, releases_per_check=polling.releases_per_check
        )
        self.orchestrator = PollOrchestrator(
            store, diff_engine, max_concurrent_projects=polling.max_concurrent_projects
        )
        self.tracking_service = ProjectTrackingService(
            provider,
            store,
            initial_releases=polling.initial_releases,
            refresh_releases=polling.refresh_releases,
        )
        self.scheduler = get_version_check_scheduler(self.orchestrator)

    async def check_now(self) -> list[VersionCheckResult]:
        """Run one sweep immediately, independent of the timer."""
        if not self.orchestrator:
            raise RuntimeError("Worker not initialized. Call initialize() first.")
        return await self.orchestrator.run_sweep()

    @staticmethod
    def summarize(results: list[VersionCheckResult]) -> dict[str, Any]:
        """Summary payload of a manual check."""
        return {
            "success": True,
            "checked_projects": len(results),
            "projects_with_updates": sum(1 for result in results if result.has_updates),
            "results": [result.to_dict() for result in results],
        }

    def get_status(self) -> dict[str, Any]:
        """Whether periodic checking is running, with sweep statistics."""
        is_running = bool(self.scheduler and self.scheduler.is_active())
        return {
            "is_running": is_running,
            "message": ACTIVE_MESSAGE if is_running else INACTIVE_MESSAGE,
            "sweep_in_progress": bool(
                self.orchestrator and self.orchestrator.in_progress
            ),
            "interval_minutes": (
                self.scheduler.interval_minutes if self.scheduler else None
            ),
            "stats": self.orchestrator.get_status() if self.orchestrator else {},
        }

    async def run(self) -> None:
        """Run periodic checks until shutdown is requested."""
        if not self.config or not self.scheduler:
            raise RuntimeError("Worker not initialized. Call initialize() first.")

        logger.info("Starting Version Check Worker...")
        self._setup_signal_handlers()

        if self.config.polling.run_on_startup:
            self.scheduler.start(self.interval_minutes)
        else:
            logger.info("Periodic version check disabled by configuration")

        try:
            await self.shutdown_event.wait()
        except asyncio.CancelledError:
            logger.info("Worker cancelled")
        finally:
            self._remove_signal_handlers()
            self.scheduler.stop()
            await self.scheduler.wait_for_sweeps()
            logger.info("Version Check Worker stopped")

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown.

        Handlers are registered on the event loop so a signal wakes it even
        while the only pending timer is hours away.
        """
        loop = asyncio.get_running_loop()
        for sig in SHUTDOWN_SIGNALS:
            loop.add_signal_handler(sig, self._on_signal, sig)

    def _remove_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in SHUTDOWN_SIGNALS:
            loop.remove_signal_handler(sig)

    def _on_signal(self, sig: signal.Signals) -> None:
        logger.info(f"Received signal {sig.name}, initiating shutdown...")
        self.shutdown_event.set()

    async def shutdown(self) -> None:
        """Initiate graceful shutdown."""
        logger.info("Shutting down Version Check Worker...")
        self.shutdown_event.set()

    async def cleanup(self) -> None:
        """Clean up resources."""
        if self.github_client:
            await self.github_client.close()
            self.github_client = None

        if self.connection_manager:
            await close_database_connections()
            self.connection_manager = None

        logger.info("Cleanup completed")


async def main() -> None:
    """Main entry point for the version check worker."""
    import argparse

    parser = argparse.ArgumentParser(description="Release Tracker Version Check Worker")
    parser.add_argument("--config", help="Configuration file path")
    parser.add_argument("--log-level", default=None, help="Log level")
    parser.add_argument(
        "--check-now",
        action="store_true",
        help="Run a single version check, print its summary and exit",
    )
    parser.add_argument(
        "--interval-minutes", type=float, help="Minutes between version checks"
    )

    args = parser.parse_args()

    worker = VersionCheckWorker(config_path=args.config)
    worker.interval_override = args.interval_minutes

    # Configure logging before initialization so startup messages show
    logging.basicConfig(
        level=getattr(logging, (args.log_level or "INFO").upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        await worker.initialize()
        if worker.config and not args.log_level:
            logging.getLogger().setLevel(worker.config.system.log_level.value)

        if args.check_now:
            results = await worker.check_now()
            print(json.dumps(worker.summarize(results), indent=2))
        else:
            await worker.run()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.error(f"Worker failed: {e}")
        sys.exit(1)
    finally:
        await worker.cleanup()


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
