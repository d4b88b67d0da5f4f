"""Project catalog operations: tracking, untracking and manual refresh."""

import logging
import uuid

from .diff_engine import select_new_releases
from .exceptions import ProjectNotFoundError, RepositoryProviderError
from .interfaces import (
    NewVersion,
    ReleaseStore,
    RepositoryDataProvider,
    TrackedProject,
)

logger = logging.getLogger(__name__)


class ProjectTrackingService:
    """Adds and removes tracked projects and refreshes them on demand.

    Releases stored here never notify anyone; notifications are reserved for
    releases discovered by the periodic version check.
    """

    def __init__(
        self,
        provider: RepositoryDataProvider,
        store: ReleaseStore,
        initial_releases: int = 20,
        refresh_releases: int = 50,
    ):
        self.provider = provider
        self.store = store
        self.initial_releases = initial_releases
        self.refresh_releases = refresh_releases

    async def track_project(self, user_id: uuid.UUID, full_name: str) -> TrackedProject:
        """Make a user track a repository, creating the project when new.

        Args:
            user_id: User starting to track
            full_name: Repository ``owner/name``

        Returns:
            Snapshot of the tracked project

        Raises:
            RepositoryProviderError: If the repository metadata cannot be fetched
        """
        existing = await self.store.get_project_by_full_name(full_name)
        if existing is not None:
            await self.store.add_tracker(existing.id, user_id)
            if user_id not in existing.tracker_ids:
                existing.tracker_ids.append(user_id)
            logger.info(f"User {user_id} now tracks existing project {full_name}")
            return existing

        metadata = await self.provider.fetch_metadata(full_name)
        project = await self.store.create_project(metadata, user_id)

        try:
            releases = await self.provider.fetch_releases(
                project.full_name, page=1, per_page=self.initial_releases
            )
            stored = await self.store.insert_versions(
                project.id, select_new_releases(releases, set())
            )
            logger.info(f"Stored {len(stored)} initial versions for {project.full_name}")
        except (RepositoryProviderError, ProjectNotFoundError) as e:
            logger.error(f"Error fetching initial releases for {project.full_name}: {e}")

        return project

    async def untrack_project(self, project_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Stop a user tracking a project, deleting it once nobody tracks it.

        Returns:
            True when the project was deleted
        """
        remaining = await self.store.remove_tracker(project_id, user_id)
        if remaining > 0:
            return False

        await self.store.delete_project(project_id)
        logger.info(f"Deleted project {project_id}, no trackers left")
        return True

    async def refresh_project(self, project_id: uuid.UUID) -> list[NewVersion]:
        """Re-fetch metadata and store releases missed so far.

        Returns:
            Versions stored by this refresh

        Raises:
            ProjectNotFoundError: If the project does not exist
            RepositoryProviderError: If the repository metadata cannot be fetched
        """
        project = await self.store.get_project(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)

        metadata = await self.provider.fetch_metadata(project.full_name)
        await self.store.refresh_project_details(project_id, metadata)

        try:
            releases = await self.provider.fetch_releases(
                project.full_name, page=1, per_page=self.refresh_releases
            )
        except RepositoryProviderError as e:
            logger.error(f"Error fetching releases for {project.full_name}: {e}")
            return []

        stored_tags = await self.store.list_stored_version_tags(project_id)
        return await self.store.insert_versions(
            project_id, select_new_releases(releases, stored_tags)
        )
