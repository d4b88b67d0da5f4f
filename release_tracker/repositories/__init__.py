"""Repository implementations for the data access layer."""

from .base import BaseRepository
from .notification import NotificationRepository
from .project import ProjectRepository
from .version import VersionRepository

__all__ = [
    "BaseRepository",
    "NotificationRepository",
    "ProjectRepository",
    "VersionRepository",
]
