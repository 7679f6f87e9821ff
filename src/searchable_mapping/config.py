"""Centralized configuration for searchable-mapping using Pydantic Settings."""

from functools import lru_cache
import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed configuration loaded from ``SEARCHABLE_MAPPING_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SEARCHABLE_MAPPING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    # Mapping behavior
    seal_on_publish: bool = Field(
        default=False,
        description="Reject field registration once a mapping's schema has been published",
    )

    # Tracing
    tracing_enabled: bool = Field(default=True, description="Wrap indexing callbacks in OpenTelemetry spans")
    service_name: str = Field(default="searchable-mapping", description="service.name resource attribute")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        if not isinstance(logging.getLevelName(value.upper()), int):
            raise ValueError(f"Unknown log level: {value}")
        return value.lower()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
