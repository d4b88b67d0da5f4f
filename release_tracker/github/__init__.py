"""GitHub API client package."""

from .auth import (
    AnonymousAuth,
    AuthProvider,
    AuthToken,
    PersonalAccessTokenAuth,
    create_auth_provider,
)
from .client import GitHubClient, GitHubClientConfig
from .exceptions import (
    GitHubAuthenticationError,
    GitHubConnectionError,
    GitHubError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubServerError,
    GitHubTimeoutError,
    GitHubValidationError,
)
from .rate_limiting import CircuitBreaker, RateLimitInfo, RateLimitManager

__all__ = [
    "AnonymousAuth",
    "AuthProvider",
    "AuthToken",
    "CircuitBreaker",
    "GitHubAuthenticationError",
    "GitHubClient",
    "GitHubClientConfig",
    "GitHubConnectionError",
    "GitHubError",
    "GitHubNotFoundError",
    "GitHubRateLimitError",
    "GitHubServerError",
    "GitHubTimeoutError",
    "GitHubValidationError",
    "PersonalAccessTokenAuth",
    "RateLimitInfo",
    "RateLimitManager",
    "create_auth_provider",
]
