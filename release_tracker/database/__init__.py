"""Database infrastructure: configuration and async connection management."""

from .config import (
    DatabaseConfig,
    DatabasePoolConfig,
    get_database_config,
    reset_database_config,
)
from .connection import (
    DatabaseConnectionManager,
    close_database_connections,
    get_connection_manager,
    reset_connection_manager,
)

__all__ = [
    "DatabaseConfig",
    "DatabaseConnectionManager",
    "DatabasePoolConfig",
    "close_database_connections",
    "get_connection_manager",
    "get_database_config",
    "reset_connection_manager",
    "reset_database_config",
]
