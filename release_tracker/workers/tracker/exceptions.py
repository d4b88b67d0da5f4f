"""Error taxonomy of the version polling engine.

Provider errors carry a ``kind`` so callers can tell failures worth retrying
on the next sweep (rate limiting, network) from permanent ones (missing
repository, malformed name, rejected credentials).
"""

import enum
import uuid


class ProviderErrorKind(str, enum.Enum):
    """Classification of repository data provider failures."""

    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    AUTH_FAILED = "auth_failed"
    NETWORK = "network"
    INVALID_NAME = "invalid_name"
    UNKNOWN = "unknown"


_TRANSIENT_KINDS = frozenset({ProviderErrorKind.RATE_LIMITED, ProviderErrorKind.NETWORK})


class RepositoryProviderError(Exception):
    """Base class for failures of the repository data provider."""

    kind: ProviderErrorKind = ProviderErrorKind.UNKNOWN

    def __init__(self, message: str, full_name: str | None = None):
        super().__init__(message)
        self.full_name = full_name

    @property
    def is_transient(self) -> bool:
        """True when the next sweep may succeed without intervention."""
        return self.kind in _TRANSIENT_KINDS


class RepositoryNotFoundError(RepositoryProviderError):
    """The repository (or requested release) does not exist."""

    kind = ProviderErrorKind.NOT_FOUND


class ProviderRateLimitError(RepositoryProviderError):
    """The provider refused the request because of rate limiting."""

    kind = ProviderErrorKind.RATE_LIMITED

    def __init__(
        self, message: str, full_name: str | None = None, reset_time: int | None = None
    ):
        super().__init__(message, full_name)
        self.reset_time = reset_time


class ProviderAuthError(RepositoryProviderError):
    """Credentials were missing, invalid or lacked access."""

    kind = ProviderErrorKind.AUTH_FAILED


class ProviderNetworkError(RepositoryProviderError):
    """Connection failure, timeout or server-side error."""

    kind = ProviderErrorKind.NETWORK


class InvalidRepositoryNameError(RepositoryProviderError):
    """The stored full name is not an ``owner/name`` pair."""

    kind = ProviderErrorKind.INVALID_NAME


class ProjectNotFoundError(Exception):
    """The project row disappeared, typically untracked by its last user."""

    def __init__(self, project_id: uuid.UUID):
        super().__init__(f"Project {project_id} no longer exists")
        self.project_id = project_id
