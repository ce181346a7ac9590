"""Member streams used across the test suite."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Generic, TypeVar

T = TypeVar("T")

_END = object()


async def items(*values: T, delay: float = 0.0) -> AsyncIterator[T]:
    """Yield ``values`` in order, sleeping ``delay`` seconds before each."""
    for value in values:
        if delay:
            await asyncio.sleep(delay)
        yield value


async def failing(*values: T, exc: Exception | None = None) -> AsyncIterator[T]:
    """Yield ``values`` then raise ``exc`` (ValueError("boom") by default)."""
    for value in values:
        yield value
    raise exc or ValueError("boom")


class Feed(Generic[T]):
    """Async iterator driven by the test: items arrive only when sent."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue()

    def send(self, item: T) -> None:
        self._queue.put_nowait(item)

    def close(self) -> None:
        self._queue.put_nowait(_END)

    def __aiter__(self) -> Feed[T]:
        return self

    async def __anext__(self) -> T:
        item = await self._queue.get()
        if item is _END:
            raise StopAsyncIteration
        return item  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"Feed(queued={self._queue.qsize()})"
