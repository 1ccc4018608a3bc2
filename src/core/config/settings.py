#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

Type-safe, environment-based configuration for the caching layer.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with override mechanisms

Author: Platform Team
Date: 2026-03-02
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.config.constants import (
    DEFAULT_TTL,
    MEMORY_CACHE_CHECK_PERIOD,
    MEMORY_CACHE_MAX_KEYS,
    REDIS_KEY_PREFIX,
)


class RedisSettings(BaseSettings):
    """
    Redis configuration for the distributed cache backend.

    When neither REDIS_URL nor REDIS_HOST is set the cache runs on the
    in-process memory store.
    """

    REDIS_URL: str | None = Field(default=None, description="Redis connection URL (takes precedence)")
    REDIS_HOST: str | None = Field(default=None, description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_TLS: bool = Field(default=False, description="Use TLS for the Redis connection")
    REDIS_KEY_PREFIX: str = Field(default=REDIS_KEY_PREFIX, description="Namespace for cache keys")

    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum pooled connections")
    REDIS_SOCKET_TIMEOUT: float = Field(default=5, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: float = Field(default=5, description="Connection timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Health check interval in seconds")
    REDIS_CONNECT_RETRIES: int = Field(default=3, ge=1, description="Connection attempts before giving up")
    REDIS_RETRY_DELAY: float = Field(default=0.1, ge=0, description="Initial retry delay in seconds")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)

    @property
    def is_configured(self) -> bool:
        """True when a distributed store connection is configured."""
        return bool(self.REDIS_URL or self.REDIS_HOST)


class CacheSettings(BaseSettings):
    """
    Cache behaviour configuration.

    Per-domain TTLs live in constants.CACHE_TTL.
    """

    CACHE_DEFAULT_TTL: int = Field(default=DEFAULT_TTL, gt=0, description="Default TTL (seconds) when set() gets none")
    CACHE_MEMORY_MAX_KEYS: int = Field(default=MEMORY_CACHE_MAX_KEYS, gt=0, description="Memory store capacity")
    CACHE_MEMORY_CHECK_PERIOD: float = Field(
        default=MEMORY_CACHE_CHECK_PERIOD, ge=0, description="Expiry sweep interval (0 disables)"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    Architectural Decision: structlog for production-grade logging
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ApplicationSettings(BaseSettings):
    """General application settings."""

    ENVIRONMENT: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="HotSho Cache", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    Usage:
        from src.core.config.settings import get_settings

        settings = get_settings()
        if settings.redis.is_configured:
            ...
        ttl = settings.cache.CACHE_DEFAULT_TTL
    """

    # Redis settings
    REDIS_URL: str | None = Field(default=None, description="Redis connection URL (takes precedence)")
    REDIS_HOST: str | None = Field(default=None, description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_TLS: bool = Field(default=False, description="Use TLS for the Redis connection")
    REDIS_KEY_PREFIX: str = Field(default=REDIS_KEY_PREFIX, description="Namespace for cache keys")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum pooled connections")
    REDIS_SOCKET_TIMEOUT: float = Field(default=5, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: float = Field(default=5, description="Connection timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Health check interval in seconds")
    REDIS_CONNECT_RETRIES: int = Field(default=3, ge=1, description="Connection attempts before giving up")
    REDIS_RETRY_DELAY: float = Field(default=0.1, ge=0, description="Initial retry delay in seconds")

    # Cache settings
    CACHE_DEFAULT_TTL: int = Field(default=DEFAULT_TTL, gt=0, description="Default TTL (seconds) when set() gets none")
    CACHE_MEMORY_MAX_KEYS: int = Field(default=MEMORY_CACHE_MAX_KEYS, gt=0, description="Memory store capacity")
    CACHE_MEMORY_CHECK_PERIOD: float = Field(
        default=MEMORY_CACHE_CHECK_PERIOD, ge=0, description="Expiry sweep interval (0 disables)"
    )

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    # Application settings
    ENVIRONMENT: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="HotSho Cache", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    # Nested configuration objects
    @property
    def redis(self) -> RedisSettings:
        """Get Redis settings."""
        return RedisSettings(
            REDIS_URL=self.REDIS_URL,
            REDIS_HOST=self.REDIS_HOST,
            REDIS_PORT=self.REDIS_PORT,
            REDIS_DB=self.REDIS_DB,
            REDIS_PASSWORD=self.REDIS_PASSWORD,
            REDIS_TLS=self.REDIS_TLS,
            REDIS_KEY_PREFIX=self.REDIS_KEY_PREFIX,
            REDIS_MAX_CONNECTIONS=self.REDIS_MAX_CONNECTIONS,
            REDIS_SOCKET_TIMEOUT=self.REDIS_SOCKET_TIMEOUT,
            REDIS_SOCKET_CONNECT_TIMEOUT=self.REDIS_SOCKET_CONNECT_TIMEOUT,
            REDIS_HEALTH_CHECK_INTERVAL=self.REDIS_HEALTH_CHECK_INTERVAL,
            REDIS_CONNECT_RETRIES=self.REDIS_CONNECT_RETRIES,
            REDIS_RETRY_DELAY=self.REDIS_RETRY_DELAY,
        )

    @property
    def cache(self) -> CacheSettings:
        """Get cache settings."""
        return CacheSettings(
            CACHE_DEFAULT_TTL=self.CACHE_DEFAULT_TTL,
            CACHE_MEMORY_MAX_KEYS=self.CACHE_MEMORY_MAX_KEYS,
            CACHE_MEMORY_CHECK_PERIOD=self.CACHE_MEMORY_CHECK_PERIOD,
        )

    @property
    def logging(self) -> LoggingSettings:
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    @property
    def app(self) -> ApplicationSettings:
        """Get application settings."""
        return ApplicationSettings(
            ENVIRONMENT=self.ENVIRONMENT,
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Ignore extra environment variables
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
