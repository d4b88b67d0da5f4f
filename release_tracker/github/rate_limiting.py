"""GitHub API rate limit tracking and circuit breaking."""

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime

from .exceptions import GitHubRateLimitError


@dataclass
class RateLimitInfo:
    """Rate limit window reported by GitHub response headers."""

    limit: int
    remaining: int
    reset: int
    used: int = 0
    resource: str = "core"

    @property
    def reset_datetime(self) -> datetime:
        """Get reset time as an aware datetime."""
        return datetime.fromtimestamp(self.reset, tz=UTC)

    @property
    def seconds_until_reset(self) -> float:
        """Get seconds until rate limit resets."""
        return max(0, self.reset - time.time())

    @property
    def is_exceeded(self) -> bool:
        """Check if rate limit is exceeded."""
        return self.remaining <= 0


@dataclass
class RateLimitManager:
    """Keeps the last seen rate limit window per GitHub resource."""

    buffer: int = 100
    max_retry_wait: int = 3600

    _rate_limits: dict[str, RateLimitInfo] = field(default_factory=dict)

    def get_rate_limit(self, resource: str = "core") -> RateLimitInfo | None:
        """Get current rate limit info for resource."""
        return self._rate_limits.get(resource)

    def update_rate_limit(self, headers: Mapping[str, str]) -> None:
        """Update rate limit info from response headers.

        Header names are matched case-insensitively, GitHub sends them
        lowercased over HTTP/2.
        """
        normalized = {key.lower(): value for key, value in headers.items()}
        if "x-ratelimit-limit" not in normalized:
            return

        try:
            rate_limit = RateLimitInfo(
                limit=int(normalized.get("x-ratelimit-limit", 5000)),
                remaining=int(normalized.get("x-ratelimit-remaining", 0)),
                reset=int(normalized.get("x-ratelimit-reset", 0)),
                used=int(normalized.get("x-ratelimit-used", 0)),
                resource=normalized.get("x-ratelimit-resource", "core"),
            )
        except (ValueError, TypeError):
            # Malformed headers leave the previous window in place
            return
        self._rate_limits[rate_limit.resource] = rate_limit

    async def check_rate_limit(self, resource: str = "core") -> None:
        """Refuse the request while the window is inside the reserve buffer.

        Raises:
            GitHubRateLimitError: If the remaining budget is at or below buffer
        """
        rate_limit = self.get_rate_limit(resource)
        if not rate_limit:
            return

        if rate_limit.remaining <= self.buffer and rate_limit.seconds_until_reset > 0:
            wait_time = min(rate_limit.seconds_until_reset, self.max_retry_wait)
            raise GitHubRateLimitError(
                f"Rate limit approaching for {resource}. "
                f"Remaining: {rate_limit.remaining}, "
                f"Reset in {wait_time:.0f} seconds",
                reset_time=rate_limit.reset,
                remaining=rate_limit.remaining,
                limit=rate_limit.limit,
            )


class CircuitBreaker:
    """Circuit breaker for repeated GitHub connectivity failures."""

    def __init__(self, failure_threshold: int = 5, recovery_timeout: int = 60):
        """Initialize circuit breaker.

        Args:
            failure_threshold: Number of failures before opening circuit
            recovery_timeout: Seconds to wait before attempting recovery
        """
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout

        self._failure_count = 0
        self._last_failure_time: float | None = None
        self._state = "closed"  # closed, open, half_open

    @property
    def state(self) -> str:
        return self._state

    @property
    def is_open(self) -> bool:
        """Check if circuit is open."""
        return self._state == "open"

    def record_success(self) -> None:
        """Record successful call."""
        self._failure_count = 0
        self._state = "closed"

    def record_failure(self) -> None:
        """Record failed call."""
        self._failure_count += 1
        self._last_failure_time = time.time()

        if self._failure_count >= self.failure_threshold:
            self._state = "open"

    def can_attempt_request(self) -> bool:
        """Check if request can be attempted."""
        if self._state in ("closed", "half_open"):
            return True

        if (
            self._last_failure_time
            and time.time() - self._last_failure_time >= self.recovery_timeout
        ):
            self._state = "half_open"
            return True

        return False

    def get_wait_time(self) -> float:
        """Get time to wait before next attempt."""
        if not self.is_open or not self._last_failure_time:
            return 0

        elapsed = time.time() - self._last_failure_time
        return max(0, self.recovery_timeout - elapsed)
