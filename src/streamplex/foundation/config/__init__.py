"""Configuration management using pydantic-settings."""

from .settings import (
    LoggingSettings,
    MultiplexSettings,
    OnError,
    StreamplexSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "LoggingSettings",
    "MultiplexSettings",
    "OnError",
    "StreamplexSettings",
    "clear_settings_cache",
    "get_settings",
]
