"""Enums for database models."""

import enum


class NotificationType(str, enum.Enum):
    """Kind of user-facing notification."""

    NEW_RELEASE = "new_release"
    UPDATE = "update"
    ERROR = "error"
