"""Environment-based configuration using pydantic-settings.

Example:
    >>> from streamplex.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.mux.on_error
    'propagate'

    # Or with environment variables:
    # STREAMPLEX_MUX_ON_ERROR=skip
    # STREAMPLEX_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

OnError = Literal["propagate", "skip", "stop"]


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STREAMPLEX_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"
    colors: bool | None = Field(default=None, description="Force colored console output (None = auto)")

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class MultiplexSettings(BaseSettings):
    """Defaults for StreamMultiplexer instances."""

    model_config = SettingsConfigDict(
        env_prefix="STREAMPLEX_MUX_",
        extra="ignore",
    )

    on_error: OnError = Field(default="propagate", description="Policy when a member stream raises")
    close_members: bool = Field(default=True, description="aclose() members when the multiplexer closes")
    task_name: str = Field(default="streamplex-member", min_length=1, description="Prefix for member task names")


class StreamplexSettings(BaseSettings):
    """Root settings, loaded from STREAMPLEX_* variables and an optional .env file."""

    model_config = SettingsConfigDict(
        env_prefix="STREAMPLEX_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    debug: bool = Field(default=False, description="Enable debug mode")
    environment: Literal["development", "staging", "production"] = "development"

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    mux: MultiplexSettings = Field(default_factory=MultiplexSettings)

    @field_validator("environment", mode="before")
    @classmethod
    def _normalize_env(cls, v: str) -> str:
        return v.lower() if isinstance(v, str) else v

    @computed_field
    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @computed_field
    @property
    def log_level(self) -> str:
        """Effective log level; debug mode forces DEBUG."""
        return "DEBUG" if self.debug else self.logging.level


@lru_cache(maxsize=1)
def get_settings() -> StreamplexSettings:
    """Get the global settings instance (cached)."""
    return StreamplexSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
