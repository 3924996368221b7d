"""
Shared configuration management for the Employee Access Layer.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings.

    Every field can be overridden through an ``EMPLOYEES_``-prefixed
    environment variable, e.g. ``EMPLOYEES_CACHE_TTL_SECONDS=30``.
    """

    model_config = SettingsConfigDict(
        env_prefix="EMPLOYEES_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Upstream employee service
    employee_api_url: str = Field(default="http://localhost:8112/api/v1")
    request_timeout_seconds: float = Field(default=120.0, gt=0)

    # Retry policy (rate-limit responses only)
    retry_max_retries: int = Field(default=3, ge=0)
    retry_base_delay_seconds: float = Field(default=5.0, ge=0)
    retry_max_delay_seconds: float = Field(default=60.0, ge=0)
    retry_jitter: float = Field(default=0.5, ge=0, le=1)

    # Collection cache
    cache_ttl_seconds: float = Field(default=60.0, gt=0)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
