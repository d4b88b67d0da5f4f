"""Version Diff Engine.

Compares the most recent releases of one project against the versions
already stored, persists the new ones, refreshes the cached repository
counters and fans out one notification per tracking user and new release.
"""

import logging
import time

from release_tracker.models import NotificationType

from .interfaces import (
    NewVersion,
    Release,
    ReleaseStore,
    RepositoryDataProvider,
    TrackedProject,
    VersionCheckResult,
)

logger = logging.getLogger(__name__)


def select_new_releases(releases: list[Release], stored_tags: set[str]) -> list[Release]:
    """Releases whose tag is not stored yet, in the given order.

    A tag repeated within ``releases`` is kept only at its first occurrence.
    """
    seen = set(stored_tags)
    new_releases = []
    for release in releases:
        if release.tag_name in seen:
            continue
        seen.add(release.tag_name)
        new_releases.append(release)
    return new_releases


def release_notification(tag_name: str, project_name: str) -> tuple[str, str]:
    """Title and message of a new release notification."""
    return (
        f"New release: {tag_name}",
        f"A new version {tag_name} has been released for {project_name}",
    )


class VersionDiffEngine:
    """Detects and records new releases for a single project."""

    def __init__(
        self,
        provider: RepositoryDataProvider,
        store: ReleaseStore,
        releases_per_check: int = 10,
    ):
        """Initialize the engine.

        Args:
            provider: Source of releases and repository metadata
            store: Persistence for versions, counters and notifications
            releases_per_check: Most recent releases compared per check
        """
        self.provider = provider
        self.store = store
        self.releases_per_check = releases_per_check

    async def check_project(self, project: TrackedProject) -> VersionCheckResult:
        """Check one project for releases that are not stored yet.

        Fetch and store failures propagate to the caller. A failed metadata
        refresh after versions were stored is reported in ``error`` instead,
        the stored versions are kept and users are still notified.

        Args:
            project: Snapshot of the project to check

        Returns:
            Result listing the versions stored by this check
        """
        start_time = time.time()

        releases = await self.provider.fetch_releases(
            project.full_name, page=1, per_page=self.releases_per_check
        )
        if not releases:
            logger.debug(f"No releases published for {project.full_name}")
            return VersionCheckResult(project.id, project.name)

        stored_tags = await self.store.list_stored_version_tags(project.id)
        new_releases = select_new_releases(releases, stored_tags)
        if not new_releases:
            logger.debug(f"{project.full_name} is up to date")
            return VersionCheckResult(project.id, project.name)

        new_versions = await self.store.insert_versions(project.id, new_releases)

        error = None
        try:
            metadata = await self.provider.fetch_metadata(project.full_name)
            await self.store.update_project_metadata(project.id, metadata)
        except Exception as e:
            error = f"Metadata refresh failed: {e}"
            logger.warning(f"{error} for {project.full_name}")

        await self._notify_trackers(project, new_versions)

        logger.info(
            f"Found {len(new_versions)} new versions for {project.full_name} "
            f"in {time.time() - start_time:.2f}s",
            extra={
                "project_id": str(project.id),
                "tags": [version.tag_name for version in new_versions],
            },
        )
        return VersionCheckResult(project.id, project.name, new_versions, error)

    async def _notify_trackers(
        self, project: TrackedProject, new_versions: list[NewVersion]
    ) -> None:
        for user_id in project.tracker_ids:
            for version in new_versions:
                title, message = release_notification(version.tag_name, project.name)
                await self.store.insert_notification(
                    user_id=user_id,
                    project_id=project.id,
                    notification_type=NotificationType.NEW_RELEASE,
                    title=title,
                    message=message,
                )
