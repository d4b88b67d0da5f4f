"""GitHub API client with authentication, rate limiting, and retries."""

import asyncio
import json
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urljoin

import aiohttp

from .auth import AuthProvider
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
from .rate_limiting import CircuitBreaker, RateLimitManager

logger = logging.getLogger(__name__)


@dataclass
class GitHubClientConfig:
    """Configuration for GitHub client."""

    base_url: str = "https://api.github.com"
    timeout: int = 10
    max_retries: int = 2
    retry_backoff_factor: float = 2.0
    rate_limit_buffer: int = 5
    user_agent: str = "Release-Tracker/1.0"
    max_concurrent_requests: int = 10


class GitHubClient:
    """Async client for the read-only GitHub REST endpoints used for tracking."""

    def __init__(
        self,
        auth: AuthProvider,
        config: GitHubClientConfig | None = None,
    ) -> None:
        """Initialize GitHub client.

        Args:
            auth: Authentication provider
            config: Client configuration
        """
        self.auth = auth
        self.config = config or GitHubClientConfig()
        self.rate_limiter = RateLimitManager(buffer=self.config.rate_limit_buffer)
        self.circuit_breaker = CircuitBreaker()

        # HTTP session is created on first use
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()
        self._request_semaphore = asyncio.Semaphore(self.config.max_concurrent_requests)

    async def __aenter__(self) -> "GitHubClient":
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> None:
        """Ensure HTTP session is initialized."""
        if self._session is None or self._session.closed:
            async with self._session_lock:
                if self._session is None or self._session.closed:
                    timeout = aiohttp.ClientTimeout(total=self.config.timeout)
                    connector = aiohttp.TCPConnector(limit=100, limit_per_host=30)

                    self._session = aiohttp.ClientSession(
                        timeout=timeout,
                        connector=connector,
                        headers={
                            "User-Agent": self.config.user_agent,
                            "Accept": "application/vnd.github+json",
                        },
                    )

    async def close(self) -> None:
        """Close HTTP session and cleanup resources."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    def _generate_correlation_id(self) -> str:
        """Generate correlation ID for request tracking."""
        return str(uuid.uuid4())[:8]

    async def _make_request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        correlation_id: str | None = None,
    ) -> Any:
        """Make HTTP request with retry logic and return the decoded JSON body.

        Only connection failures, timeouts and 5xx responses are retried.
        Client errors are raised on the first attempt.

        Raises:
            GitHubError: Various GitHub API errors
        """
        if not correlation_id:
            correlation_id = self._generate_correlation_id()

        if not self.circuit_breaker.can_attempt_request():
            wait_time = self.circuit_breaker.get_wait_time()
            raise GitHubConnectionError(
                f"Circuit breaker open. Wait {wait_time:.1f}s before retry."
            )

        await self.rate_limiter.check_rate_limit()

        request_headers = dict(headers or {})
        auth_token = await self.auth.get_token()
        request_headers.update(auth_token.to_header())

        await self._ensure_session()
        if not self._session:
            raise GitHubConnectionError("Failed to initialize HTTP session")

        last_exception: GitHubError | None = None
        for attempt in range(self.config.max_retries + 1):
            try:
                async with self._request_semaphore:
                    start_time = time.time()

                    logger.debug(
                        f"GitHub API request [{correlation_id}] {method} {url} "
                        f"(attempt {attempt + 1})"
                    )

                    async with self._session.request(
                        method, url, params=params, headers=request_headers
                    ) as response:
                        request_time = time.time() - start_time
                        self.rate_limiter.update_rate_limit(response.headers)

                        logger.debug(
                            f"GitHub API response [{correlation_id}] "
                            f"{response.status} in {request_time:.2f}s"
                        )

                        if response.status == 200:
                            self.circuit_breaker.record_success()
                            return await response.json()

                        await self._handle_error_response(response, correlation_id)

            except GitHubError as e:
                if not e.is_retryable:
                    raise
                last_exception = e
                self.circuit_breaker.record_failure()

            except TimeoutError:
                last_exception = GitHubTimeoutError(
                    f"Request timeout for {method} {url}"
                )
                self.circuit_breaker.record_failure()

            except aiohttp.ClientError as e:
                last_exception = GitHubConnectionError(
                    f"Connection error for {method} {url}: {e}"
                )
                self.circuit_breaker.record_failure()

            if attempt < self.config.max_retries:
                backoff_time = self.config.retry_backoff_factor**attempt
                logger.warning(
                    f"Request [{correlation_id}] failed (attempt {attempt + 1}), "
                    f"retrying in {backoff_time:.1f}s: {last_exception}"
                )
                await asyncio.sleep(backoff_time)

        if last_exception:
            raise last_exception
        raise GitHubError(f"Request failed after {self.config.max_retries} retries")

    async def _handle_error_response(
        self, response: aiohttp.ClientResponse, correlation_id: str
    ) -> None:
        """Raise the exception matching an error response.

        Raises:
            GitHubError: Appropriate error based on status code
        """
        try:
            error_data = await response.json()
        except (json.JSONDecodeError, aiohttp.ContentTypeError):
            error_data = {"message": await response.text()}
        if not isinstance(error_data, dict):
            error_data = {"message": str(error_data)}

        error_message = error_data.get("message") or f"HTTP {response.status}"

        logger.warning(
            f"GitHub API error [{correlation_id}] {response.status}: {error_message}"
        )

        status = response.status
        remaining = response.headers.get("X-RateLimit-Remaining")
        is_rate_limited = status == 429 or (
            status == 403
            and ("rate limit" in error_message.lower() or remaining == "0")
        )

        if status == 401:
            raise GitHubAuthenticationError(error_message, status, error_data)
        elif is_rate_limited:
            reset_time = response.headers.get("X-RateLimit-Reset")
            limit = response.headers.get("X-RateLimit-Limit", "0")
            raise GitHubRateLimitError(
                error_message,
                reset_time=int(reset_time) if reset_time else None,
                remaining=int(remaining or 0),
                limit=int(limit),
                status_code=status,
            )
        elif status == 403:
            raise GitHubAuthenticationError(error_message, status, error_data)
        elif status == 404:
            raise GitHubNotFoundError(error_message, status, error_data)
        elif status == 422:
            raise GitHubValidationError(error_message, status, error_data)
        elif 500 <= status < 600:
            raise GitHubServerError(error_message, status, error_data)
        else:
            raise GitHubError(error_message, status, error_data)

    async def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Make GET request to GitHub API.

        Args:
            path: API path (e.g., '/repos/owner/repo/releases')
            params: Query parameters
            headers: Additional headers

        Returns:
            Decoded JSON response, a dict or a list depending on the endpoint
        """
        url = urljoin(self.config.base_url.rstrip("/") + "/", path.lstrip("/"))
        return await self._make_request("GET", url, params, headers=headers)

    @staticmethod
    def _repo_path(owner: str, repo: str) -> str:
        return f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"

    async def get_repo(self, owner: str, repo: str) -> dict[str, Any]:
        """Get repository information."""
        data: dict[str, Any] = await self.get(self._repo_path(owner, repo))
        return data

    async def list_releases(
        self, owner: str, repo: str, page: int = 1, per_page: int = 30
    ) -> list[dict[str, Any]]:
        """List one page of releases, newest first.

        Args:
            owner: Repository owner
            repo: Repository name
            page: 1-based page number
            per_page: Items per page (GitHub caps this at 100)
        """
        data: list[dict[str, Any]] = await self.get(
            f"{self._repo_path(owner, repo)}/releases",
            params={"page": page, "per_page": min(per_page, 100)},
        )
        return data

    async def get_latest_release(self, owner: str, repo: str) -> dict[str, Any]:
        """Get the latest published full release.

        GitHub answers 404 when the repository has no releases.
        """
        data: dict[str, Any] = await self.get(
            f"{self._repo_path(owner, repo)}/releases/latest"
        )
        return data
