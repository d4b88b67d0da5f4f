"""Release polling engine.

Detects newly published releases of tracked repositories, stores them and
notifies the users tracking each repository.
"""

from .diff_engine import VersionDiffEngine, release_notification, select_new_releases
from .exceptions import (
    InvalidRepositoryNameError,
    ProjectNotFoundError,
    ProviderAuthError,
    ProviderErrorKind,
    ProviderNetworkError,
    ProviderRateLimitError,
    RepositoryNotFoundError,
    RepositoryProviderError,
)
from .interfaces import (
    NewVersion,
    Release,
    ReleaseAsset,
    ReleaseStore,
    RepositoryDataProvider,
    RepositoryMetadata,
    TrackedProject,
    VersionCheckResult,
)
from .orchestrator import PollOrchestrator, SweepStats
from .provider import GitHubRepositoryProvider
from .scheduler import (
    VersionCheckScheduler,
    get_version_check_scheduler,
    reset_version_check_scheduler,
)
from .store import DatabaseReleaseStore
from .tracking import ProjectTrackingService

__all__ = [
    # Data types
    "NewVersion",
    "Release",
    "ReleaseAsset",
    "RepositoryMetadata",
    "TrackedProject",
    "VersionCheckResult",
    # Interfaces
    "ReleaseStore",
    "RepositoryDataProvider",
    # Errors
    "InvalidRepositoryNameError",
    "ProjectNotFoundError",
    "ProviderAuthError",
    "ProviderErrorKind",
    "ProviderNetworkError",
    "ProviderRateLimitError",
    "RepositoryNotFoundError",
    "RepositoryProviderError",
    # Implementations
    "DatabaseReleaseStore",
    "GitHubRepositoryProvider",
    "PollOrchestrator",
    "ProjectTrackingService",
    "SweepStats",
    "VersionCheckScheduler",
    "VersionDiffEngine",
    "get_version_check_scheduler",
    "release_notification",
    "reset_version_check_scheduler",
    "select_new_releases",
]
