"""Head-future units: one pending ``anext`` on a member stream.

A member stream is never iterated directly by the multiplexer. It is wrapped
in a HeadFuture, which resolves to a StreamHead holding the next item and
the stream itself, ready to be wrapped again.

Example:
    >>> head = await next_head(ticker())
    >>> head.item, head.ended
    (1, False)
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable, Generator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from streamplex.foundation.errors import NotResolvedError

if TYPE_CHECKING:
    from .taskset import UnorderedTaskSet

T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class StreamHead(Generic[T]):
    """Resolution of a head-future.

    Attributes:
        item: The member's next item (meaningless when ended)
        stream: The member, with ``item`` already consumed
        ended: True when the member signalled end-of-sequence
    """

    item: T | None
    stream: AsyncIterator[T]
    ended: bool = False


async def next_head(stream: AsyncIterator[T]) -> StreamHead[T]:
    """Await the next item of ``stream``. End-of-sequence becomes ``ended=True``."""
    try:
        item = await anext(stream)
    except StopAsyncIteration:
        return StreamHead(None, stream, ended=True)
    return StreamHead(item, stream)


class HeadFuture(Generic[T]):
    """One-shot computation of a member's next item.

    Created unstarted. The owning task set starts it (creates the task) on
    its next poll; awaiting the unit directly also starts it. A unit can be
    cancelled while registered, which drops the member from its set.
    """

    __slots__ = ("_stream", "_task", "_cancelled", "_owner", "_key")

    def __init__(self, stream: AsyncIterator[T]) -> None:
        self._stream = stream
        self._task: asyncio.Task[StreamHead[T]] | None = None
        self._cancelled = False
        self._owner: UnorderedTaskSet[T] | None = None
        self._key = -1

    @property
    def stream(self) -> AsyncIterator[T]:
        """The wrapped member stream."""
        return self._stream

    @property
    def started(self) -> bool:
        return self._task is not None

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    @property
    def cancelled(self) -> bool:
        """True once the unit was dropped, or its task was cancelled directly."""
        return self._cancelled or (self._task is not None and self._task.cancelled())

    @property
    def task(self) -> asyncio.Task[StreamHead[T]] | None:
        return self._task

    def _ensure_task(self, name: str | None = None) -> asyncio.Task[StreamHead[T]]:
        if self._task is None:
            self._task = asyncio.create_task(next_head(self._stream), name=name)
        return self._task

    def start(self, on_done: Callable[[asyncio.Task[StreamHead[T]]], object], *, name: str | None = None) -> None:
        """Create the task driving this unit and register a completion callback."""
        self._ensure_task(name).add_done_callback(on_done)

    def result(self) -> StreamHead[T]:
        """Resolved StreamHead. Re-raises whatever the member raised.

        Raises:
            NotResolvedError: If the unit has not finished yet
        """
        if self._task is None or not self._task.done():
            raise NotResolvedError("head-future has not resolved")
        return self._task.result()

    def cancel(self) -> bool:
        """Drop this member. Cancels the pending ``anext`` and removes the unit from its set.

        Returns:
            False if the unit was already cancelled
        """
        if self._cancelled:
            return False
        self._cancelled = True
        task = self._task
        if task is not None:
            if task.done():
                if not task.cancelled():
                    task.exception()  # marks a member failure as retrieved
            elif not task.get_loop().is_closed():
                task.cancel()
        if self._owner is not None:
            owner, self._owner = self._owner, None
            owner._discard(self._key)
        return True

    def __await__(self) -> Generator[object, None, StreamHead[T]]:
        return self._ensure_task().__await__()

    def __repr__(self) -> str:
        if self.cancelled:
            state = "cancelled"
        elif self._task is None:
            state = "idle"
        else:
            state = "done" if self._task.done() else "running"
        return f"HeadFuture(stream={self._stream!r}, state={state})"
