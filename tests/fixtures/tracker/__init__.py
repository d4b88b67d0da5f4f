"""
Test doubles and factories for the release polling engine.

Provides an in-memory release store, a scripted repository data provider
and factories for releases, metadata and tracked projects.
"""

from .factories import (
    ReleaseFactory,
    RepositoryMetadataFactory,
    TrackedProjectFactory,
    create_github_release_payload,
    create_github_repo_payload,
)
from .fakes import FakeRepositoryProvider, InMemoryReleaseStore, StoredNotification

__all__ = [
    # Fakes
    "FakeRepositoryProvider",
    "InMemoryReleaseStore",
    "StoredNotification",
    # Factories
    "ReleaseFactory",
    "RepositoryMetadataFactory",
    "TrackedProjectFactory",
    "create_github_release_payload",
    "create_github_repo_payload",
]
