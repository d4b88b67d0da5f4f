"""Generic async repository with common CRUD operations."""

import uuid
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from release_tracker.models.base import BaseModel

ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """Async repository bound to one session and one model class."""

    def __init__(self, session: AsyncSession, model_class: type[ModelType]):
        """Initialize repository with database session and model class."""
        self.session = session
        self.model_class = model_class

    async def create(self, **kwargs: Any) -> ModelType:
        """Create a new entity."""
        entity = self.model_class(**kwargs)
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def get_by_id(self, entity_id: uuid.UUID) -> ModelType | None:
        """Get entity by ID."""
        return await self.session.get(self.model_class, entity_id)

    async def update(self, entity: ModelType, **kwargs: Any) -> ModelType:
        """Set the given attributes on an entity and flush."""
        for key, value in kwargs.items():
            if hasattr(entity, key):
                setattr(entity, key, value)

        await self.session.flush()
        return entity

    async def delete(self, entity: ModelType) -> None:
        """Delete an entity."""
        await self.session.delete(entity)
        await self.session.flush()

    async def exists(self, entity_id: uuid.UUID) -> bool:
        """Check if entity exists by ID."""
        query = select(self.model_class.id).where(self.model_class.id == entity_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none() is not None

    async def _execute_query(self, query: Select[tuple[ModelType]]) -> list[ModelType]:
        """Execute query and return results."""
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def _execute_single_query(
        self, query: Select[tuple[ModelType]]
    ) -> ModelType | None:
        """Execute query and return single result."""
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def flush(self) -> None:
        """Flush pending changes to database."""
        await self.session.flush()
