"""SQLAlchemy models for the release tracker."""

from .base import Base, BaseModel
from .enums import NotificationType
from .notification import Notification
from .project import Project
from .user import User, project_trackers
from .version import Version

__all__ = [
    # Base classes
    "Base",
    "BaseModel",
    # Enums
    "NotificationType",
    # Models
    "Notification",
    "Project",
    "User",
    "Version",
    "project_trackers",
]
