"""Configuration management for Flow Tokens.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded at application
startup and is immutable during runtime.
"""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FLOWTOKENS_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "Flow Tokens"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./ft_data/flowtokens.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Token Settings
    token_bytes: int = Field(
        default=9,
        ge=3,
        description="Random bytes per token (9 bytes encode to 12 characters)",
    )
    token_max_attempts: int = Field(
        default=10,
        ge=1,
        description="Maximum generation attempts before giving up on a token",
    )
    token_widen_after: int = Field(
        default=5,
        ge=1,
        description="Consecutive collisions after which the token grows by 3 bytes",
    )
    tracked_post_types: Annotated[list[str], NoDecode] = Field(
        default=["job_sheet", "act"],
        description="Post types that receive an access token",
    )

    @field_validator("tracked_post_types", mode="before")
    @classmethod
    def parse_tracked_post_types(cls, v: str | list[str]) -> list[str]:
        """Parse tracked post types from comma-separated string or list."""
        if isinstance(v, str):
            return [post_type.strip() for post_type in v.split(",") if post_type.strip()]
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"

    @model_validator(mode="after")
    def validate_sqlite_workers(self) -> "Settings":
        """Validate that SQLite is not used with multiple workers."""
        if self.workers > 1 and self.database_url.startswith("sqlite"):
            raise ValueError(
                "SQLite does not support multiple worker processes. "
                f"Requested {self.workers} workers, but SQLite requires workers=1. "
                "Either use --workers 1 or switch to PostgreSQL."
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
