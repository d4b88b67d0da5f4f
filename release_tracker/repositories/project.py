"""Project repository: lookups, tracking membership and metadata updates."""

import uuid

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from release_tracker.models import Project, project_trackers

from .base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    """Repository for tracked projects."""

    def __init__(self, session: AsyncSession):
        """Initialize with session."""
        super().__init__(session, Project)

    async def get_by_full_name(self, full_name: str) -> Project | None:
        """Get project by ``owner/name`` with its trackers loaded."""
        query = (
            select(Project)
            .where(Project.full_name == full_name)
            .options(selectinload(Project.tracked_by))
        )
        return await self._execute_single_query(query)

    async def get_with_trackers(self, project_id: uuid.UUID) -> Project | None:
        """Get project by id with its trackers loaded."""
        query = (
            select(Project)
            .where(Project.id == project_id)
            .options(selectinload(Project.tracked_by))
        )
        return await self._execute_single_query(query)

    async def list_with_trackers(self) -> list[Project]:
        """List every project with trackers, in a stable order."""
        query = (
            select(Project)
            .order_by(Project.created_at, Project.id)
            .options(selectinload(Project.tracked_by))
        )
        return await self._execute_query(query)

    async def add_tracker(self, project_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """Mark a user as tracking a project; a no-op when already tracking."""
        statement = (
            insert(project_trackers)
            .values(user_id=user_id, project_id=project_id)
            .on_conflict_do_nothing()
        )
        await self.session.execute(statement)
        await self.flush()

    async def remove_tracker(self, project_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """Stop a user tracking a project."""
        statement = delete(project_trackers).where(
            project_trackers.c.project_id == project_id,
            project_trackers.c.user_id == user_id,
        )
        await self.session.execute(statement)
        await self.flush()

    async def count_trackers(self, project_id: uuid.UUID) -> int:
        """Count users tracking a project."""
        query = select(func.count()).where(project_trackers.c.project_id == project_id)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def update_counts(
        self, project_id: uuid.UUID, stars: int, forks: int, watchers: int
    ) -> Project | None:
        """Refresh popularity counters and last_checked.

        Returns None when the project no longer exists.
        """
        project = await self.get_by_id(project_id)
        if project is None:
            return None

        project.apply_counts(stars, forks, watchers)
        await self.flush()
        return project
