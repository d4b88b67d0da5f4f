"""Pydantic configuration models for the release tracker.

The root ``Config`` holds three sections:
- system: environment and log level
- github: API access
- polling: cadence and batch sizes of the version checks

String values may reference environment variables as ``${VAR_NAME}`` or
``${VAR_NAME:default}``.
"""

import os
import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")

PRODUCTION_INTERVAL_MINUTES = 60
DEFAULT_INTERVAL_MINUTES = 120


class LogLevel(str, Enum):
    """Supported logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BaseConfigModel(BaseModel):
    """Base configuration model with environment variable substitution."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def substitute_env_vars(cls, values: Any) -> Any:
        """Substitute ``${VAR}`` references in string values.

        Raises:
            ValueError: If a referenced variable without default is unset
        """
        if not isinstance(values, dict):
            return values

        def replacer(match: re.Match[str]) -> str:
            var_name, default_value = match.group(1), match.group(2)
            env_value = os.getenv(var_name)
            if env_value is not None:
                return env_value
            if default_value is not None:
                return default_value
            raise ValueError(f"Required environment variable '{var_name}' not found")

        def substitute_value(value: Any) -> Any:
            if isinstance(value, str):
                return _ENV_PATTERN.sub(replacer, value)
            elif isinstance(value, dict):
                return {k: substitute_value(v) for k, v in value.items()}
            elif isinstance(value, list):
                return [substitute_value(item) for item in value]
            return value

        return {key: substitute_value(value) for key, value in values.items()}


class SystemConfig(BaseConfigModel):
    """Process-wide settings."""

    environment: str = Field(
        default="development",
        description="Deployment environment (development, staging, production)",
    )
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


class GitHubSettings(BaseConfigModel):
    """GitHub API access settings."""

    token: str | None = Field(
        default=None,
        description="Personal access token; anonymous access when empty",
    )
    base_url: str = Field(default="https://api.github.com")
    timeout: int = Field(default=10, ge=1, le=300, description="Seconds per request")
    max_retries: int = Field(default=2, ge=0, le=10)
    user_agent: str = Field(default="Release-Tracker/1.0")


class PollingConfig(BaseConfigModel):
    """Version check cadence and batch sizes."""

    interval_minutes: float | None = Field(
        default=None,
        gt=0,
        description="Minutes between sweeps; derived from the environment when unset",
    )
    releases_per_check: int = Field(
        default=10, ge=1, le=100, description="Releases fetched per project per sweep"
    )
    initial_releases: int = Field(
        default=20, ge=1, le=100, description="Releases stored when a project is added"
    )
    refresh_releases: int = Field(
        default=50, ge=1, le=100, description="Releases scanned on manual refresh"
    )
    max_concurrent_projects: int = Field(
        default=1, ge=1, le=50, description="Projects checked in parallel per sweep"
    )
    run_on_startup: bool = Field(
        default=True, description="Start the periodic scheduler when the worker runs"
    )

    def effective_interval_minutes(self, environment: str) -> float:
        """Explicit interval, else 60 minutes in production and 120 elsewhere."""
        if self.interval_minutes is not None:
            return self.interval_minutes
        if environment.lower() == "production":
            return PRODUCTION_INTERVAL_MINUTES
        return DEFAULT_INTERVAL_MINUTES


class Config(BaseConfigModel):
    """Root configuration."""

    system: SystemConfig = Field(default_factory=SystemConfig)
    github: GitHubSettings = Field(default_factory=GitHubSettings)
    polling: PollingConfig = Field(default_factory=PollingConfig)

    @property
    def interval_minutes(self) -> float:
        """Sweep interval resolved against the configured environment."""
        return self.polling.effective_interval_minutes(self.system.environment)
