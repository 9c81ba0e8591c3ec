"""Configuration settings for GitHub Monitor."""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from github_monitor.errors import ConfigurationError, ErrorStage


class RateLimitConfig(BaseModel):
    """Configuration for the GitHub rate limiter."""

    default_quota: int = Field(
        default=5000,
        ge=0,
        description="Assumed remaining quota before the first response is seen",
    )
    low_quota_warning: int = Field(
        default=100,
        ge=0,
        description="Log a warning when remaining quota drops below this value",
    )


class SyncConfig(BaseModel):
    """Configuration for repository synchronization and polling."""

    interval_seconds: float = Field(
        default=3600.0,
        gt=0,
        description="Seconds between incremental syncs of a monitored repository",
    )
    per_page: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Commits requested per page from the GitHub API",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Wall-clock timeout applied to every outbound HTTP call",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging behavior.

    Controls file logging, rotation, and output format.
    """

    log_file: str | None = Field(
        default=None,
        description="Optional path for file logging (enables rotation)",
    )
    rotation: str = Field(
        default="10 MB",
        description="When to rotate log file (e.g., '10 MB', '1 day')",
    )
    retention: str = Field(
        default="7 days",
        description="How long to keep rotated logs",
    )
    serialize: bool = Field(
        default=False,
        description="If True, output JSON format to file",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # Database
    # --------------------------------------------------------------------------
    database_url: str = Field(
        default="sqlite+aiosqlite:///./github_monitor.db",
        description="Async database connection string (SQLite or PostgreSQL)",
    )

    # --------------------------------------------------------------------------
    # GitHub API
    # --------------------------------------------------------------------------
    github_token: str = Field(
        default="",
        description="GitHub personal access token",
    )
    default_repository: str = Field(
        default="chromium/chromium",
        description="Repository synced at startup when none are stored yet",
    )

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    rate_limit: RateLimitConfig = Field(
        default_factory=RateLimitConfig,
        description="Rate limiter configuration",
    )
    sync: SyncConfig = Field(
        default_factory=SyncConfig,
        description="Sync and polling configuration",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration (file output, rotation)",
    )

    def require_github_token(self) -> str:
        """Return the GitHub token or fail if it is not configured.

        Raises:
            ConfigurationError: If GITHUB_TOKEN is empty
        """
        if not self.github_token:
            raise ConfigurationError(
                "GITHUB_TOKEN is required",
                "Set the GITHUB_TOKEN environment variable or add it to .env",
                stage=ErrorStage.CONFIGURATION,
            )
        return self.github_token


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
