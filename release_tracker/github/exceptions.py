"""Exceptions raised by the GitHub REST client."""

from typing import Any


class GitHubError(Exception):
    """Base exception for GitHub API errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_data: dict[str, Any] | None = None,
    ):
        """Initialize GitHub error.

        Args:
            message: Error message
            status_code: HTTP status code, if a response was received
            response_data: Decoded error body returned by GitHub
        """
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data or {}

    @property
    def is_retryable(self) -> bool:
        """Whether repeating the same request may succeed."""
        return False


class GitHubAuthenticationError(GitHubError):
    """Raised on 401, and on 403 responses that are not rate limiting."""


class GitHubRateLimitError(GitHubError):
    """Raised when the primary or secondary rate limit is hit."""

    def __init__(
        self,
        message: str,
        reset_time: int | None = None,
        remaining: int = 0,
        limit: int = 0,
        status_code: int | None = None,
    ):
        """Initialize rate limit error.

        Args:
            message: Error message
            reset_time: Unix timestamp when the limit resets
            remaining: Remaining API calls in the window
            limit: Total calls allowed in the window
            status_code: HTTP status code (403 or 429), None if raised locally
        """
        super().__init__(message, status_code)
        self.reset_time = reset_time
        self.remaining = remaining
        self.limit = limit


class GitHubNotFoundError(GitHubError):
    """Raised when the repository or release does not exist."""


class GitHubValidationError(GitHubError):
    """Raised on 422 responses."""


class GitHubServerError(GitHubError):
    """Raised when GitHub answers with a 5xx status."""

    @property
    def is_retryable(self) -> bool:
        return True


class GitHubConnectionError(GitHubError):
    """Raised when the connection to GitHub fails."""

    @property
    def is_retryable(self) -> bool:
        return True


class GitHubTimeoutError(GitHubConnectionError):
    """Raised when a request times out."""
