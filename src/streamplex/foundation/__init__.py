"""Foundation: configuration and error types shared by the runtime."""

from .config import (
    LoggingSettings,
    MultiplexSettings,
    StreamplexSettings,
    clear_settings_cache,
    get_settings,
)
from .errors import (
    Err,
    ErrorCode,
    InvalidMemberError,
    MemberError,
    NotResolvedError,
    Ok,
    Result,
    StreamplexError,
)

__all__ = [
    # Config
    "LoggingSettings", "MultiplexSettings", "StreamplexSettings", "clear_settings_cache", "get_settings",
    # Errors
    "ErrorCode", "StreamplexError", "InvalidMemberError", "NotResolvedError", "MemberError",
    "Result", "Ok", "Err",
]
