"""Data transfer objects and collaborator interfaces of the version tracker.

The polling engine depends only on these contracts: a repository data
provider that reads releases and metadata from the hosting service, and a
release store that persists projects, versions and notifications.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from release_tracker.models.enums import NotificationType

# Core Data Transfer Objects


@dataclass
class ReleaseAsset:
    """Downloadable file attached to a release."""

    name: str
    download_count: int
    size: int


@dataclass
class Release:
    """Release as reported by the provider."""

    tag_name: str
    name: str | None
    body: str | None
    prerelease: bool
    draft: bool
    published_at: datetime | None
    created_at: datetime
    html_url: str | None = None
    assets: list[ReleaseAsset] = field(default_factory=list)

    @property
    def effective_published_at(self) -> datetime:
        """Publish time, or creation time for releases never published."""
        return self.published_at or self.created_at


@dataclass
class RepositoryMetadata:
    """Repository details cached on the project row."""

    github_id: int
    name: str
    full_name: str
    description: str | None
    language: str | None
    stars: int
    forks: int
    watchers: int
    owner_login: str
    avatar_url: str | None
    homepage: str | None
    topics: list[str]
    is_private: bool
    is_archived: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pushed_at: datetime | None = None


@dataclass
class TrackedProject:
    """Project snapshot taken when a sweep enumerates projects."""

    id: uuid.UUID
    full_name: str
    name: str
    tracker_ids: list[uuid.UUID] = field(default_factory=list)
    latest_tag: str | None = None


@dataclass
class NewVersion:
    """Version stored during a check."""

    tag_name: str
    name: str | None
    body: str | None
    published_at: datetime
    is_prerelease: bool
    is_draft: bool

    @classmethod
    def from_release(cls, release: Release) -> "NewVersion":
        return cls(
            tag_name=release.tag_name,
            name=release.name,
            body=release.body,
            published_at=release.effective_published_at,
            is_prerelease=release.prerelease,
            is_draft=release.draft,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "tag_name": self.tag_name,
            "name": self.name,
            "body": self.body,
            "published_at": self.published_at.isoformat(),
            "is_prerelease": self.is_prerelease,
            "is_draft": self.is_draft,
        }


@dataclass
class VersionCheckResult:
    """Outcome of checking one project during a sweep."""

    project_id: uuid.UUID
    project_name: str
    new_versions: list[NewVersion] = field(default_factory=list)
    error: str | None = None

    @property
    def has_updates(self) -> bool:
        return bool(self.new_versions)

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "project_id": str(self.project_id),
            "project_name": self.project_name,
            "new_versions": [version.to_dict() for version in self.new_versions],
        }
        if self.error is not None:
            result["error"] = self.error
        return result


# Abstract Base Classes


class RepositoryDataProvider(ABC):
    """Read-only access to repository metadata and releases.

    Implementations raise ``RepositoryProviderError`` subclasses so callers
    can distinguish not-found, rate-limited, auth and network failures.
    """

    @abstractmethod
    async def fetch_metadata(self, full_name: str) -> RepositoryMetadata:
        """Fetch repository details for ``owner/name``."""
        pass

    @abstractmethod
    async def fetch_releases(
        self, full_name: str, page: int = 1, per_page: int = 30
    ) -> list[Release]:
        """Fetch one page of releases, newest first."""
        pass

    @abstractmethod
    async def fetch_latest_release(self, full_name: str) -> Release | None:
        """Fetch the latest release, None when the repository has none."""
        pass


class ReleaseStore(ABC):
    """Persistence of projects, versions and notifications."""

    @abstractmethod
    async def list_tracked_projects(self) -> list[TrackedProject]:
        """List every tracked project with its trackers and latest stored tag."""
        pass

    @abstractmethod
    async def list_stored_version_tags(self, project_id: uuid.UUID) -> set[str]:
        """Tags of all versions stored for a project."""
        pass

    @abstractmethod
    async def insert_versions(
        self, project_id: uuid.UUID, releases: list[Release]
    ) -> list[NewVersion]:
        """Store one version per release.

        Raises:
            ProjectNotFoundError: If the project no longer exists
        """
        pass

    @abstractmethod
    async def update_project_metadata(
        self, project_id: uuid.UUID, metadata: RepositoryMetadata
    ) -> None:
        """Refresh star/fork/watcher counts and stamp last_checked.

        Raises:
            ProjectNotFoundError: If the project no longer exists
        """
        pass

    @abstractmethod
    async def insert_notification(
        self,
        user_id: uuid.UUID,
        project_id: uuid.UUID | None,
        notification_type: NotificationType,
        title: str,
        message: str,
    ) -> None:
        """Create one notification for one user."""
        pass

    # Catalog operations used when users add, remove or refresh projects

    @abstractmethod
    async def get_project(self, project_id: uuid.UUID) -> TrackedProject | None:
        """Get a project snapshot by id."""
        pass

    @abstractmethod
    async def get_project_by_full_name(self, full_name: str) -> TrackedProject | None:
        """Get a project snapshot by ``owner/name``."""
        pass

    @abstractmethod
    async def create_project(
        self, metadata: RepositoryMetadata, user_id: uuid.UUID
    ) -> TrackedProject:
        """Create a project from metadata with ``user_id`` as first tracker."""
        pass

    @abstractmethod
    async def add_tracker(self, project_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """Make a user track a project."""
        pass

    @abstractmethod
    async def remove_tracker(self, project_id: uuid.UUID, user_id: uuid.UUID) -> int:
        """Stop a user tracking a project; returns the remaining tracker count."""
        pass

    @abstractmethod
    async def delete_project(self, project_id: uuid.UUID) -> None:
        """Delete a project together with its versions."""
        pass

    @abstractmethod
    async def refresh_project_details(
        self, project_id: uuid.UUID, metadata: RepositoryMetadata
    ) -> None:
        """Overwrite every cached metadata field and stamp last_checked.

        Raises:
            ProjectNotFoundError: If the project no longer exists
        """
        pass
