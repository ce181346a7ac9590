"""Result type for encoding member failure inside the item type.

A member that may fail can be wrapped so that every item arrives as
``Ok(item)`` and a terminal exception arrives as ``Err(exc)``; the merged
sequence then never raises on that member's behalf.

Examples:
    >>> Ok(42).map(lambda x: x * 2).unwrap()
    84
    >>> Err(ValueError("bad")).unwrap_or(0)
    0
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")

_OK = True
_ERR = False


class Result(Generic[T, E]):
    """Discriminated union of success (Ok) and failure (Err)."""

    __slots__ = ("_value", "_is_ok")
    __match_args__ = ("_value",)

    def __init__(self, value: T | E, is_ok: bool) -> None:
        self._value = value
        self._is_ok = is_ok

    def is_ok(self) -> bool:
        return self._is_ok

    def is_err(self) -> bool:
        return not self._is_ok

    def unwrap(self) -> T:
        """Extract Ok value. Re-raises an exception Err, else RuntimeError."""
        if self._is_ok:
            return self._value  # type: ignore[return-value]
        if isinstance(self._value, BaseException):
            raise self._value
        raise RuntimeError(f"unwrap() on Err: {self._value}")

    def unwrap_err(self) -> E:
        if not self._is_ok:
            return self._value  # type: ignore[return-value]
        raise RuntimeError(f"unwrap_err() on Ok: {self._value}")

    def unwrap_or(self, default: T) -> T:
        return self._value if self._is_ok else default  # type: ignore[return-value]

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        """Apply f to the Ok value, pass Err through."""
        return Result(f(self._value), _OK) if self._is_ok else Result(self._value, _ERR)  # type: ignore[arg-type]

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Result) and self._is_ok == other._is_ok and self._value == other._value

    def __hash__(self) -> int:
        return hash((self._is_ok, self._value))

    def __repr__(self) -> str:
        return f"{'Ok' if self._is_ok else 'Err'}({self._value!r})"

    def __bool__(self) -> bool:
        return self._is_ok


def Ok(value: T) -> Result[T, E]:  # noqa: N802 - constructor-style factory
    """Construct a success Result."""
    return Result(value, _OK)


def Err(error: E) -> Result[T, E]:  # noqa: N802 - constructor-style factory
    """Construct a failure Result."""
    return Result(error, _ERR)
