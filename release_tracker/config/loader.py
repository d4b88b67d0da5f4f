"""Configuration loading from YAML files and the environment.

The loading hierarchy is:
1. Default values from the Pydantic models
2. Configuration file (YAML), with ``${VAR}`` substitution
3. ``GITHUB_TOKEN`` and ``ENVIRONMENT`` when the file leaves them unset
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .exceptions import ConfigurationFileError, ConfigurationValidationError
from .models import Config

CONFIG_PATH_ENV_VAR = "RELEASE_TRACKER_CONFIG_PATH"


class ConfigurationLoader:
    """Loads and validates the tracker configuration."""

    def __init__(self) -> None:
        self._config: Config | None = None
        self._config_file_path: Path | None = None

    @property
    def config(self) -> Config | None:
        return self._config

    @property
    def config_file_path(self) -> Path | None:
        return self._config_file_path

    def load_from_file(self, config_path: str | Path) -> Config:
        """Load configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            Loaded and validated configuration

        Raises:
            ConfigurationFileError: If file cannot be read or parsed
            ConfigurationValidationError: If configuration validation fails
        """
        config_path = Path(config_path)

        if not config_path.is_file():
            raise ConfigurationFileError(
                f"Configuration file not found: {config_path}",
                file_path=str(config_path),
            )

        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationFileError(
                f"Failed to parse YAML configuration: {e}", file_path=str(config_path)
            ) from e
        except OSError as e:
            raise ConfigurationFileError(
                f"Failed to read configuration file: {e}", file_path=str(config_path)
            ) from e

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigurationFileError(
                "Configuration root must be a mapping", file_path=str(config_path)
            )

        config = self.load_from_dict(config_data)
        self._config_file_path = config_path.resolve()
        return config

    def load_from_dict(self, config_data: dict[str, Any]) -> Config:
        """Load configuration from a dictionary.

        Raises:
            ConfigurationValidationError: If configuration validation fails
        """
        try:
            config = Config(**config_data)
        except (ValidationError, ValueError) as e:
            raise ConfigurationValidationError(
                f"Configuration validation failed: {e}"
            ) from e

        self._apply_environment(config)
        self._config = config
        return config

    def load_default(self) -> Config:
        """Load defaults completed from the environment."""
        return self.load_from_dict({})

    def _apply_environment(self, config: Config) -> None:
        """Fill unset values from well-known environment variables."""
        if not config.github.token:
            token = os.getenv("GITHUB_TOKEN") or os.getenv("GH_TOKEN")
            if token:
                config.github.token = token.strip()

        environment = os.getenv("ENVIRONMENT")
        if environment and "environment" not in config.system.model_fields_set:
            config.system.environment = environment

    def find_config_file(self, filename: str = "config.yaml") -> Path | None:
        """Find configuration file in standard locations.

        Search order:
        1. Current working directory
        2. RELEASE_TRACKER_CONFIG_PATH (file or directory)
        3. ~/.release_tracker/
        4. /etc/release_tracker/
        """
        search_paths = [Path.cwd() / filename]

        env_path_str = os.getenv(CONFIG_PATH_ENV_VAR)
        if env_path_str:
            env_path = Path(env_path_str)
            search_paths.append(env_path if env_path.is_file() else env_path / filename)

        search_paths.append(Path.home() / ".release_tracker" / filename)
        search_paths.append(Path("/etc/release_tracker") / filename)

        for path in search_paths:
            if path.is_file():
                return path

        return None

    def auto_load(self, config_filename: str = "config.yaml") -> Config:
        """Load the first configuration file found, or defaults when none exists."""
        config_path = self.find_config_file(config_filename)
        if config_path is None:
            return self.load_default()
        return self.load_from_file(config_path)
