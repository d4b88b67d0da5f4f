"""GitHub authentication providers."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .exceptions import GitHubAuthenticationError

PLACEHOLDER_TOKEN_MARKER = "your_github_token_here"


@dataclass
class AuthToken:
    """Authentication token with metadata."""

    token: str
    token_type: str = "Bearer"
    expires_at: int | None = None

    @property
    def is_expired(self) -> bool:
        """Check if token is expired."""
        if self.expires_at is None:
            return False
        return time.time() >= self.expires_at

    def to_header(self) -> dict[str, str]:
        """Convert to authorization header, empty for anonymous access."""
        if not self.token:
            return {}
        return {"Authorization": f"{self.token_type} {self.token}"}


class AuthProvider(ABC):
    """Abstract base class for authentication providers."""

    @abstractmethod
    async def get_token(self) -> AuthToken:
        """Get authentication token."""
        pass

    @property
    def is_authenticated(self) -> bool:
        """Whether requests carry credentials."""
        return True


class PersonalAccessTokenAuth(AuthProvider):
    """Personal Access Token authentication provider."""

    def __init__(self, token: str):
        """Initialize PAT authentication.

        Args:
            token: GitHub Personal Access Token
        """
        if not token:
            raise GitHubAuthenticationError("Personal Access Token is required")
        self._token = AuthToken(token=token, token_type="token")  # nosec B106

    async def get_token(self) -> AuthToken:
        """Get authentication token."""
        return self._token


class AnonymousAuth(AuthProvider):
    """Unauthenticated access, limited by GitHub to 60 requests per hour."""

    _EMPTY = AuthToken(token="", token_type="")

    async def get_token(self) -> AuthToken:
        return self._EMPTY

    @property
    def is_authenticated(self) -> bool:
        return False


def create_auth_provider(token: str | None) -> AuthProvider:
    """Pick an auth provider for the configured token.

    Empty tokens and the placeholder from example configuration files
    fall back to anonymous access.
    """
    if not token or PLACEHOLDER_TOKEN_MARKER in token:
        return AnonymousAuth()
    return PersonalAccessTokenAuth(token)
