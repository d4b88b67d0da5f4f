"""Project SQLAlchemy model, one row per tracked GitHub repository."""

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel
from .user import project_trackers

if TYPE_CHECKING:
    from .notification import Notification
    from .user import User
    from .version import Version


class Project(BaseModel):
    """Tracked repository with cached GitHub metadata."""

    __tablename__ = "projects"

    # Identification, full_name is the natural key against GitHub
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    full_name: Mapped[str] = mapped_column(
        String(300), unique=True, nullable=False, index=True
    )

    # Cached metadata
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    language: Mapped[str | None] = mapped_column(String(100), nullable=True)
    stars: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    forks: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    watchers: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    avatar: Mapped[str | None] = mapped_column(String(500), nullable=True)
    homepage: Mapped[str | None] = mapped_column(String(500), nullable=True)
    topics: Mapped[list[str]] = mapped_column(JSONB, default=list, nullable=False)
    is_private: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    last_checked: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=func.now(), nullable=False
    )

    # Relationships
    tracked_by: Mapped[list["User"]] = relationship(
        "User", secondary=project_trackers, back_populates="tracked_projects"
    )
    versions: Mapped[list["Version"]] = relationship(
        "Version",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    notifications: Mapped[list["Notification"]] = relationship(
        "Notification", back_populates="project", passive_deletes=True
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<Project(id={self.id}, full_name={self.full_name})>"

    @property
    def owner(self) -> str:
        """Owner part of full_name."""
        return self.full_name.split("/", 1)[0]

    @property
    def tracker_ids(self) -> list[uuid.UUID]:
        """Ids of users tracking this project (requires loaded trackers)."""
        return [user.id for user in self.tracked_by]

    def apply_counts(self, stars: int, forks: int, watchers: int) -> None:
        """Refresh popularity counters and stamp the check time."""
        self.stars = stars
        self.forks = forks
        self.watchers = watchers
        self.last_checked = datetime.now(UTC)
