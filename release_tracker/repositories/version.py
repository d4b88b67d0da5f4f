"""Version repository: stored tags and release inserts."""

import uuid
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from release_tracker.models import Version

from .base import BaseRepository


class VersionRepository(BaseRepository[Version]):
    """Repository for stored releases."""

    def __init__(self, session: AsyncSession):
        """Initialize with session."""
        super().__init__(session, Version)

    async def get_tag_names(self, project_id: uuid.UUID) -> set[str]:
        """Get every tag already stored for a project."""
        query = select(Version.tag_name).where(Version.project_id == project_id)
        result = await self.session.execute(query)
        return set(result.scalars().all())

    async def create_versions(
        self, project_id: uuid.UUID, rows: list[dict[str, Any]]
    ) -> list[Version]:
        """Insert one version per row dict, in the given order."""
        versions = [Version(project_id=project_id, **row) for row in rows]
        self.session.add_all(versions)
        await self.flush()
        return versions

    async def get_latest_tags(
        self, project_ids: list[uuid.UUID]
    ) -> dict[uuid.UUID, str]:
        """Map each project id to the tag of its most recently published version.

        Projects without versions are absent from the result.
        """
        if not project_ids:
            return {}

        latest = (
            select(
                Version.project_id,
                func.max(Version.published_at).label("published_at"),
            )
            .where(Version.project_id.in_(project_ids))
            .group_by(Version.project_id)
            .subquery()
        )
        query = (
            select(Version.project_id, Version.tag_name)
            .join(
                latest,
                (Version.project_id == latest.c.project_id)
                & (Version.published_at == latest.c.published_at),
            )
            .order_by(Version.project_id, Version.tag_name)
        )
        result = await self.session.execute(query)
        return {project_id: tag_name for project_id, tag_name in result.all()}
