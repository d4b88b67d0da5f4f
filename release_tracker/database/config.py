"""Database settings for the release tracker.

Read from ``DATABASE_*`` environment variables; nested pool settings use the
``__`` delimiter (``DATABASE_POOL__POOL_SIZE=12``).
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

DRIVER = "postgresql+asyncpg"


class DatabasePoolConfig(BaseModel):
    """Connection pool settings, named after the engine keyword arguments.

    One polling process runs at most a few concurrent project checks, so the
    pool stays small.
    """

    pool_size: int = Field(default=5, ge=1)
    max_overflow: int = Field(default=10, ge=0)
    pool_pre_ping: bool = True
    pool_recycle: int = Field(default=3600, description="Seconds")
    pool_timeout: int = Field(default=30, ge=1, description="Seconds")


class DatabaseConfig(BaseSettings):
    """PostgreSQL connection settings.

    ``DATABASE_URL`` wins over the individual components. Without it, the URL
    is assembled from host, port, database, username and password; with no
    password there is no URL at all and ``get_sqlalchemy_url`` raises.
    """

    database_url: str | None = None
    host: str = "localhost"
    port: int = 5432
    database: str = "release_tracker"
    username: str = "postgres"
    password: str | None = None

    pool: DatabasePoolConfig = Field(default_factory=DatabasePoolConfig)
    echo_sql: bool = False
    connect_timeout: int = Field(default=10, description="asyncpg connect timeout")
    command_timeout: int = Field(default=60, description="asyncpg statement timeout")

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def check_url(cls, v: Any) -> Any:
        if not v:
            return v
        try:
            url = make_url(v)
        except ArgumentError as e:
            raise ValueError(f"Invalid database URL: {e}") from e
        if not url.host:
            raise ValueError("Database URL must name a host")
        return v

    @model_validator(mode="after")
    def assemble_url(self) -> "DatabaseConfig":
        if not self.database_url and self.password:
            self.database_url = URL.create(
                DRIVER,
                username=self.username,
                password=self.password,
                host=self.host,
                port=self.port,
                database=self.database,
            ).render_as_string(hide_password=False)
        return self

    def get_sqlalchemy_url(self) -> str:
        if not self.database_url:
            raise ValueError(
                "No database URL available - set DATABASE_URL or DATABASE_PASSWORD"
            )
        return self.database_url

    def engine_options(self) -> dict[str, Any]:
        """Keyword arguments for ``create_async_engine``."""
        return {
            **self.pool.model_dump(),
            "connect_args": {
                "timeout": self.connect_timeout,
                "command_timeout": self.command_timeout,
            },
            "echo": self.echo_sql,
        }


_config_instance: DatabaseConfig | None = None


def get_database_config() -> DatabaseConfig:
    """Get the process-wide database settings, read once from the environment."""
    global _config_instance

    if _config_instance is None:
        _config_instance = DatabaseConfig()

    return _config_instance


def reset_database_config() -> None:
    """Forget the cached settings (tests)."""
    global _config_instance
    _config_instance = None
