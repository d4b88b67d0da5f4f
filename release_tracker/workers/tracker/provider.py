"""GitHub-backed repository data provider."""

import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

from release_tracker.github import (
    GitHubAuthenticationError,
    GitHubClient,
    GitHubConnectionError,
    GitHubError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubServerError,
)

from .exceptions import (
    InvalidRepositoryNameError,
    ProviderAuthError,
    ProviderNetworkError,
    ProviderRateLimitError,
    RepositoryNotFoundError,
    RepositoryProviderError,
)
from .interfaces import Release, ReleaseAsset, RepositoryDataProvider, RepositoryMetadata

logger = logging.getLogger(__name__)

T = TypeVar("T")


def split_full_name(full_name: str) -> tuple[str, str]:
    """Split ``owner/name`` into its two parts.

    Raises:
        InvalidRepositoryNameError: If the name is not exactly two non-empty parts
    """
    parts = full_name.split("/")
    if len(parts) != 2 or not all(part.strip() for part in parts):
        raise InvalidRepositoryNameError(
            f"Invalid repository full name format: {full_name!r}", full_name
        )
    return parts[0].strip(), parts[1].strip()


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a GitHub ISO-8601 timestamp into an aware UTC datetime."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def translate_github_error(error: GitHubError, full_name: str) -> RepositoryProviderError:
    """Map an HTTP-level GitHub error onto the provider taxonomy."""
    if isinstance(error, GitHubNotFoundError):
        return RepositoryNotFoundError(
            f"Repository {full_name} not found", full_name
        )
    if isinstance(error, GitHubRateLimitError):
        return ProviderRateLimitError(
            f"GitHub API rate limit exceeded: {error}",
            full_name,
            reset_time=error.reset_time,
        )
    if isinstance(error, GitHubAuthenticationError):
        return ProviderAuthError(f"GitHub authentication failed: {error}", full_name)
    if isinstance(error, GitHubConnectionError | GitHubServerError):
        return ProviderNetworkError(f"GitHub request failed: {error}", full_name)
    return RepositoryProviderError(f"GitHub API error: {error}", full_name)


class GitHubRepositoryProvider(RepositoryDataProvider):
    """Reads repository metadata and releases through the GitHub REST API."""

    def __init__(self, client: GitHubClient):
        self.client = client

    async def _call(
        self, full_name: str, request: Callable[[str, str], Awaitable[T]]
    ) -> T:
        owner, repo = split_full_name(full_name)
        try:
            return await request(owner, repo)
        except GitHubError as e:
            translated = translate_github_error(e, full_name)
            logger.debug(f"GitHub request for {full_name} failed: {translated}")
            raise translated from e

    async def fetch_metadata(self, full_name: str) -> RepositoryMetadata:
        data = await self._call(full_name, self.client.get_repo)
        return self._to_metadata(data)

    async def fetch_releases(
        self, full_name: str, page: int = 1, per_page: int = 30
    ) -> list[Release]:
        async def request(owner: str, repo: str) -> list[dict[str, Any]]:
            return await self.client.list_releases(
                owner, repo, page=page, per_page=per_page
            )

        data = await self._call(full_name, request)
        return [self._to_release(item) for item in data]

    async def fetch_latest_release(self, full_name: str) -> Release | None:
        try:
            data = await self._call(full_name, self.client.get_latest_release)
        except RepositoryNotFoundError:
            # GitHub answers 404 for repositories without releases
            return None
        return self._to_release(data)

    @staticmethod
    def _to_release(data: dict[str, Any]) -> Release:
        created_at = parse_timestamp(data.get("created_at"))
        published_at = parse_timestamp(data.get("published_at"))
        return Release(
            tag_name=data["tag_name"],
            name=data.get("name"),
            body=data.get("body"),
            prerelease=bool(data.get("prerelease", False)),
            draft=bool(data.get("draft", False)),
            published_at=published_at,
            # Drafts may lack both timestamps
            created_at=created_at or published_at or datetime.now(UTC),
            html_url=data.get("html_url"),
            assets=[
                ReleaseAsset(
                    name=asset.get("name", ""),
                    download_count=asset.get("download_count", 0),
                    size=asset.get("size", 0),
                )
                for asset in data.get("assets") or []
            ],
        )

    @staticmethod
    def _to_metadata(data: dict[str, Any]) -> RepositoryMetadata:
        owner = data.get("owner") or {}
        return RepositoryMetadata(
            github_id=data["id"],
            name=data["name"],
            full_name=data["full_name"],
            description=data.get("description"),
            language=data.get("language"),
            stars=data.get("stargazers_count", 0),
            forks=data.get("forks_count", 0),
            watchers=data.get("watchers_count", 0),
            owner_login=owner.get("login", ""),
            avatar_url=owner.get("avatar_url"),
            homepage=data.get("homepage") or None,
            topics=list(data.get("topics") or []),
            is_private=bool(data.get("private", False)),
            is_archived=bool(data.get("archived", False)),
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
            pushed_at=parse_timestamp(data.get("pushed_at")),
        )
