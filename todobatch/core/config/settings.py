# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

Settings are loaded from environment variables with sensible defaults.
The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from todobatch.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> settings.batch.worker_count
    3
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BatchSettings(BaseSettings):
    """Batch executor configuration.

    Attributes:
        worker_count: Maximum number of units of work running at once.
        strategy: Default concurrency strategy for batch requests.
        max_batch_size: Largest number of items accepted in one request.
        process_delay_ms: Artificial delay added before each item is
            processed. Zero disables it.
    """

    model_config = SettingsConfigDict(
        env_prefix="BATCH_",
        extra="ignore",
    )

    worker_count: int = Field(default=3, ge=1)
    strategy: Literal["worker_pool", "semaphore"] = "worker_pool"
    max_batch_size: int = Field(default=100, ge=1)
    process_delay_ms: int = Field(default=0, ge=0)


class StorageSettings(BaseSettings):
    """Todo storage configuration.

    Attributes:
        backend: Repository implementation used at startup.
        cache_max_size: Capacity of the cached repository before eviction.
    """

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        extra="ignore",
    )

    backend: Literal["memory", "cache"] = "memory"
    cache_max_size: int = Field(default=100, ge=1)


class NotifierSettings(BaseSettings):
    """Background notification worker configuration.

    Attributes:
        queue_size: Pending notifications held before new ones are refused.
        result_queue_size: Delivery results kept for inspection.
        send_delay_ms: Simulated delivery latency per notification.
    """

    model_config = SettingsConfigDict(
        env_prefix="NOTIFIER_",
        extra="ignore",
    )

    queue_size: int = Field(default=100, ge=1)
    result_queue_size: int = Field(default=100, ge=1)
    send_delay_ms: int = Field(default=500, ge=0)


class APISettings(BaseSettings):
    """API server configuration.

    Attributes:
        host: Host to bind to.
        port: Port to listen on.
        reload: Whether to enable auto-reload.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8080
    reload: bool = False


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        batch: Batch executor settings.
        storage: Todo storage settings.
        notifier: Notification worker settings.
        api: API server settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    batch: BatchSettings = Field(default_factory=BatchSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    notifier: NotifierSettings = Field(default_factory=NotifierSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with debug enabled.
        """
        if self.environment == "production" and self.debug:
            raise ValueError(
                "Debug mode must be disabled in production. "
                "Set DEBUG=false environment variable."
            )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
