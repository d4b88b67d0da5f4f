"""Configuration loading and models."""

from .exceptions import (
    ConfigurationError,
    ConfigurationFileError,
    ConfigurationValidationError,
)
from .loader import ConfigurationLoader
from .models import (
    DEFAULT_INTERVAL_MINUTES,
    PRODUCTION_INTERVAL_MINUTES,
    Config,
    GitHubSettings,
    LogLevel,
    PollingConfig,
    SystemConfig,
)

__all__ = [
    "DEFAULT_INTERVAL_MINUTES",
    "PRODUCTION_INTERVAL_MINUTES",
    "Config",
    "ConfigurationError",
    "ConfigurationFileError",
    "ConfigurationLoader",
    "ConfigurationValidationError",
    "GitHubSettings",
    "LogLevel",
    "PollingConfig",
    "SystemConfig",
]
