"""Database connection management.

Async SQLAlchemy engine and session handling. Every session obtained from
``get_session`` is its own unit of work: committed when the block exits
normally, rolled back when it raises.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import DatabaseConfig, get_database_config

logger = logging.getLogger(__name__)


class DatabaseConnectionManager:
    """Owns the async engine and hands out sessions."""

    def __init__(self, config: DatabaseConfig | None = None):
        self.config = config or get_database_config()
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        """Get or create async database engine."""
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get or create async session factory."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,  # Keep objects usable after commit
            )
        return self._session_factory

    def _create_engine(self) -> AsyncEngine:
        """Create async SQLAlchemy engine."""
        options = self.config.engine_options()
        engine = create_async_engine(self.config.get_sqlalchemy_url(), **options)

        self._register_connection_events(engine)

        logger.info(
            "Created database engine",
            extra={
                "pool_size": options.get("pool_size"),
                "max_overflow": options.get("max_overflow"),
            },
        )

        return engine

    def _register_connection_events(self, engine: AsyncEngine) -> None:
        """Register SQLAlchemy events for connection monitoring."""

        @event.listens_for(engine.sync_engine, "invalidate")
        def on_invalidate(
            dbapi_connection: Any, connection_record: Any, exception: Exception | None
        ) -> None:
            logger.warning(
                "Database connection invalidated",
                extra={"error": str(exception) if exception else None},
            )

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get database session with automatic commit and cleanup.

        Usage:
            async with connection_manager.get_session() as session:
                result = await session.execute(query)
        """
        session = self.session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def close(self) -> None:
        """Dispose the engine and its pooled connections."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine disposed")


_connection_manager: DatabaseConnectionManager | None = None


def get_connection_manager() -> DatabaseConnectionManager:
    """Get global database connection manager instance."""
    global _connection_manager

    if _connection_manager is None:
        _connection_manager = DatabaseConnectionManager()

    return _connection_manager


async def close_database_connections() -> None:
    """Close all database connections and clean up resources."""
    global _connection_manager

    if _connection_manager:
        await _connection_manager.close()
        _connection_manager = None


def reset_connection_manager() -> None:
    """Forget the global connection manager without disposing it (tests)."""
    global _connection_manager
    _connection_manager = None
