"""
Gaming Platform Back-Office
Centralized Configuration Management

This module provides configuration management using Pydantic settings with
environment variable support, validation, and type safety.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """Remote back-office REST API Configuration"""

    model_config = SettingsConfigDict(env_prefix="BACKOFFICE_API_")

    base_url: str = Field(default="http://localhost:4002/cms", description="Versioned API base URL")
    timeout_seconds: float = Field(default=30.0, description="Request timeout in seconds")
    default_platform_id: Optional[str] = Field(
        default=None,
        description="Platform sent to operator/brand listings when the caller gives none",
    )
    reference_page_size: int = Field(default=100, description="Page size for platform/operator/brand lists")
    games_page_size: int = Field(default=500, description="Page size for the game catalog")
    sort_direction: int = Field(default=-1, description="Sort direction for reference lists")


class CacheSettings(BaseSettings):
    """Reference Data Cache Configuration"""

    model_config = SettingsConfigDict(env_prefix="BACKOFFICE_CACHE_")

    hierarchy_ttl_seconds: float = Field(default=30 * 60, description="TTL for platforms/operators/brands")
    games_ttl_seconds: float = Field(default=12 * 60 * 60, description="TTL for the game catalog")


class AuthSettings(BaseSettings):
    """Authentication readiness Configuration"""

    model_config = SettingsConfigDict(env_prefix="BACKOFFICE_AUTH_")

    settle_seconds: float = Field(default=0.1, description="Token must stay present this long before fetching")


class RetrySettings(BaseSettings):
    """Query-layer retry Configuration"""

    model_config = SettingsConfigDict(env_prefix="BACKOFFICE_RETRY_")

    retries: int = Field(default=2, description="Retries after the first attempt")
    base_delay_seconds: float = Field(default=1.0, description="First backoff delay")
    max_delay_seconds: float = Field(default=30.0, description="Backoff cap")


class AnalyticsSettings(BaseSettings):
    """Dashboard aggregation Configuration"""

    model_config = SettingsConfigDict(env_prefix="BACKOFFICE_ANALYTICS_")

    timezone: Optional[str] = Field(default=None, description="IANA zone for hourly buckets; host local time when unset")
    default_currency: str = Field(default="INR", description="Display currency requested from the analytics source")
    leaderboard_size: int = Field(default=20, description="Rows kept in games/players leaderboards")


class RedisSettings(BaseSettings):
    """Redis persisted-state store Configuration"""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    host: str = Field(default="localhost", description="Redis host")
    port: int = Field(default=6379, description="Redis port")
    password: Optional[SecretStr] = Field(default=None, description="Redis password")
    db: int = Field(default=0, description="Redis database number")
    max_connections: int = Field(default=10, description="Max connections")
    socket_timeout: int = Field(default=5, description="Socket timeout in seconds")
    decode_responses: bool = Field(default=True, description="Decode responses to strings")
    namespace: str = Field(default="persist", description="Key namespace for persisted state")
    url: Optional[str] = Field(default=None, alias="REDIS_URL", description="Redis URL (overrides host/port)")

    def get_url(self) -> str:
        """Redis connection URL - uses REDIS_URL if set, otherwise builds from host/port"""
        if self.url:
            return self.url
        if self.password:
            return f"redis://:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"
        return f"redis://{self.host}:{self.port}/{self.db}"


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="backoffice", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    api: ApiSettings = Field(default_factory=ApiSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
