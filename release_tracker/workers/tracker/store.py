"""PostgreSQL-backed release store.

Each operation runs in its own session, so work committed by an earlier step
of a project check survives a failure in a later one.
"""

import logging
import uuid
from typing import Any

from release_tracker.database.connection import DatabaseConnectionManager
from release_tracker.models import NotificationType, Project
from release_tracker.repositories import (
    NotificationRepository,
    ProjectRepository,
    VersionRepository,
)

from .exceptions import ProjectNotFoundError
from .interfaces import (
    NewVersion,
    Release,
    ReleaseStore,
    RepositoryMetadata,
    TrackedProject,
)

logger = logging.getLogger(__name__)


def _metadata_fields(metadata: RepositoryMetadata) -> dict[str, Any]:
    return {
        "name": metadata.name,
        "full_name": metadata.full_name,
        "description": metadata.description,
        "language": metadata.language,
        "stars": metadata.stars,
        "forks": metadata.forks,
        "watchers": metadata.watchers,
        "avatar": metadata.avatar_url,
        "homepage": metadata.homepage,
        "topics": list(metadata.topics),
        "is_private": metadata.is_private,
        "is_archived": metadata.is_archived,
    }


def _snapshot(project: Project, latest_tag: str | None = None) -> TrackedProject:
    return TrackedProject(
        id=project.id,
        full_name=project.full_name,
        name=project.name,
        tracker_ids=project.tracker_ids,
        latest_tag=latest_tag,
    )


class DatabaseReleaseStore(ReleaseStore):
    """Release store on top of the SQLAlchemy repositories."""

    def __init__(self, connection_manager: DatabaseConnectionManager):
        self.connection_manager = connection_manager

    async def list_tracked_projects(self) -> list[TrackedProject]:
        async with self.connection_manager.get_session() as session:
            projects = await ProjectRepository(session).list_with_trackers()
            latest_tags = await VersionRepository(session).get_latest_tags(
                [project.id for project in projects]
            )
            return [
                _snapshot(project, latest_tags.get(project.id)) for project in projects
            ]

    async def list_stored_version_tags(self, project_id: uuid.UUID) -> set[str]:
        async with self.connection_manager.get_session() as session:
            return await VersionRepository(session).get_tag_names(project_id)

    async def insert_versions(
        self, project_id: uuid.UUID, releases: list[Release]
    ) -> list[NewVersion]:
        if not releases:
            return []

        new_versions = [NewVersion.from_release(release) for release in releases]
        async with self.connection_manager.get_session() as session:
            if not await ProjectRepository(session).exists(project_id):
                raise ProjectNotFoundError(project_id)

            await VersionRepository(session).create_versions(
                project_id,
                [
                    {
                        "tag_name": version.tag_name,
                        "name": version.name,
                        "body": version.body,
                        "published_at": version.published_at,
                        "is_prerelease": version.is_prerelease,
                        "is_draft": version.is_draft,
                    }
                    for version in new_versions
                ],
            )

        logger.debug(f"Stored {len(new_versions)} versions for project {project_id}")
        return new_versions

    async def update_project_metadata(
        self, project_id: uuid.UUID, metadata: RepositoryMetadata
    ) -> None:
        async with self.connection_manager.get_session() as session:
            project = await ProjectRepository(session).update_counts(
                project_id, metadata.stars, metadata.forks, metadata.watchers
            )
            if project is None:
                raise ProjectNotFoundError(project_id)

    async def insert_notification(
        self,
        user_id: uuid.UUID,
        project_id: uuid.UUID | None,
        notification_type: NotificationType,
        title: str,
        message: str,
    ) -> None:
        async with self.connection_manager.get_session() as session:
            await NotificationRepository(session).create_notification(
                user_id=user_id,
                project_id=project_id,
                notification_type=notification_type,
                title=title,
                message=message,
            )

    async def get_project(self, project_id: uuid.UUID) -> TrackedProject | None:
        async with self.connection_manager.get_session() as session:
            project = await ProjectRepository(session).get_with_trackers(project_id)
            return _snapshot(project) if project else None

    async def get_project_by_full_name(self, full_name: str) -> TrackedProject | None:
        async with self.connection_manager.get_session() as session:
            project = await ProjectRepository(session).get_by_full_name(full_name)
            return _snapshot(project) if project else None

    async def create_project(
        self, metadata: RepositoryMetadata, user_id: uuid.UUID
    ) -> TrackedProject:
        async with self.connection_manager.get_session() as session:
            repository = ProjectRepository(session)
            project = await repository.create(**_metadata_fields(metadata))
            await repository.add_tracker(project.id, user_id)

            logger.info(f"Created project {project.full_name} ({project.id})")
            return TrackedProject(
                id=project.id,
                full_name=project.full_name,
                name=project.name,
                tracker_ids=[user_id],
            )

    async def add_tracker(self, project_id: uuid.UUID, user_id: uuid.UUID) -> None:
        async with self.connection_manager.get_session() as session:
            await ProjectRepository(session).add_tracker(project_id, user_id)

    async def remove_tracker(self, project_id: uuid.UUID, user_id: uuid.UUID) -> int:
        async with self.connection_manager.get_session() as session:
            repository = ProjectRepository(session)
            await repository.remove_tracker(project_id, user_id)
            return await repository.count_trackers(project_id)

    async def delete_project(self, project_id: uuid.UUID) -> None:
        async with self.connection_manager.get_session() as session:
            repository = ProjectRepository(session)
            project = await repository.get_by_id(project_id)
            if project is not None:
                await repository.delete(project)
                logger.info(f"Deleted project {project.full_name} ({project_id})")

    async def refresh_project_details(
        self, project_id: uuid.UUID, metadata: RepositoryMetadata
    ) -> None:
        async with self.connection_manager.get_session() as session:
            repository = ProjectRepository(session)
            project = await repository.get_by_id(project_id)
            if project is None:
                raise ProjectNotFoundError(project_id)

            await repository.update(project, **_metadata_fields(metadata))
            project.apply_counts(metadata.stars, metadata.forks, metadata.watchers)
            await repository.flush()
