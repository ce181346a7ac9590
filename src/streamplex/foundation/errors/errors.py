"""Error codes and exceptions for stream multiplexing.

Member streams never report failure through the merged sequence itself;
these types cover misuse of the multiplexer and describe members that
raised while being driven.
"""

from __future__ import annotations

import traceback
from enum import StrEnum
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class ErrorCode(StrEnum):
    """Machine-readable error classification."""
    INVALID_MEMBER = "INVALID_MEMBER"
    MEMBER_FAILED = "MEMBER_FAILED"
    NOT_RESOLVED = "NOT_RESOLVED"
    UNKNOWN = "UNKNOWN"


class StreamplexError(Exception):
    """Base exception for streamplex. Carries an ErrorCode."""

    code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, message: str, *, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class InvalidMemberError(StreamplexError, TypeError):
    """Raised when something that is not an async iterable is inserted."""

    code = ErrorCode.INVALID_MEMBER

    @classmethod
    def for_object(cls, obj: object) -> InvalidMemberError:
        return cls(f"expected an async iterable member, got {type(obj).__name__}")


class NotResolvedError(StreamplexError, RuntimeError):
    """Raised when a head-future's result is read before it resolved."""

    code = ErrorCode.NOT_RESOLVED


class MemberError(BaseModel):
    """Structured description of a member stream that raised.

    Attributes:
        member: repr of the failed member stream
        message: Human-readable error message
        code: Machine-readable error code
        exc_type: Name of the exception class
        details: Optional formatted traceback
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        validate_default=True,
        json_schema_extra={
            "title": "Member Error",
            "examples": [{
                "member": "<async_generator object ticks at 0x7f>",
                "message": "connection reset",
                "code": "MEMBER_FAILED",
                "exc_type": "ConnectionResetError",
            }],
        },
    )

    member: Annotated[str, Field(min_length=1, description="repr of the failed member")]
    message: str = Field(default="", description="Human-readable error message")
    code: ErrorCode = Field(default=ErrorCode.MEMBER_FAILED)
    exc_type: str = Field(default="Exception", description="Exception class name")
    details: str | None = Field(default=None, repr=False, description="Formatted traceback")

    @field_validator("message", mode="before")
    @classmethod
    def _ensure_message(cls, v: str | BaseException) -> str:
        """Accept exception objects and extract message."""
        return str(v) if isinstance(v, BaseException) else v

    @computed_field
    @property
    def summary(self) -> str:
        """One-line description for logs."""
        return f"{self.exc_type}: {self.message}" if self.message else self.exc_type

    @classmethod
    def from_exc(cls, member: object, exc: BaseException, *, include_trace: bool = False) -> Self:
        """Build from a member and the exception it raised."""
        details = "".join(traceback.format_exception(exc)) if include_trace else None
        return cls(member=repr(member), message=exc, exc_type=type(exc).__name__, details=details)
