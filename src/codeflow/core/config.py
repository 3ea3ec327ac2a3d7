"""Configuration management for CodeFlow.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded at application
startup and is immutable during runtime.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CODEFLOW_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "CodeFlow"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./cf_data/codeflow.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # Document store behaviour
    store_composite_indexes: bool = Field(
        default=True,
        description="When disabled, filtered queries cannot be ordered by timestamp",
    )

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Snippet limits
    max_code_size: int = 100_000  # bytes
    max_title_length: int = 200
    max_tags_per_snippet: int = 10
    max_tag_length: int = 50
    max_snippets_per_user: int = 1000

    # Autosave
    autosave_enabled_by_default: bool = True
    autosave_debounce_seconds: float = 2.0
    autosave_status_reset_seconds: float = 2.0

    # Code execution limits
    max_executions_per_minute: int = 10
    max_executions_per_hour: int = 50

    default_language: str = "javascript"

    @field_validator("autosave_debounce_seconds", "autosave_status_reset_seconds")
    @classmethod
    def validate_positive_delay(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("autosave delays must be positive")
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


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    This function caches the settings instance to avoid reloading
    configuration on every call. Settings are loaded once at startup.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
