"""Notification repository."""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from release_tracker.models import Notification, NotificationType

from .base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """Repository for user notifications."""

    def __init__(self, session: AsyncSession):
        """Initialize with session."""
        super().__init__(session, Notification)

    async def create_notification(
        self,
        user_id: uuid.UUID,
        project_id: uuid.UUID | None,
        notification_type: NotificationType,
        title: str,
        message: str,
    ) -> Notification:
        """Create an unread notification for one user."""
        notification = Notification(
            user_id=user_id,
            project_id=project_id,
            type=notification_type,
            title=title,
            message=message,
            is_read=False,
        )
        self.session.add(notification)
        await self.flush()
        return notification
