"""Stream adapters built on StreamMultiplexer.

- join_streams: flatten a stream of streams, unordered
- settle_stream: turn a member's failure into a final Err item
- merge_settled: merge members whose failures arrive as Err items
- collect: drain an async iterator into a list
"""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator
from typing import Any, TypeVar

from streamplex.foundation.errors import Err, Ok, Result

from .select import StreamMultiplexer

T = TypeVar("T")


async def _tagged(stream: AsyncIterable[Any], outer: bool) -> AsyncIterator[tuple[bool, Any]]:
    async for value in stream:
        yield outer, value


async def join_streams(streams: AsyncIterable[AsyncIterable[T]]) -> AsyncIterator[T]:
    """Flatten an async iterator of async iterators without ordering.

    Each inner stream joins the merge as soon as the outer stream yields it,
    so inner streams run concurrently with each other and with the outer one.

    Example:
        >>> async def connections():
        ...     while True:
        ...         yield await accept()  # each connection is a stream of messages
        >>> async for message in join_streams(connections()):
        ...     route(message)
    """
    mux: StreamMultiplexer[tuple[bool, Any]] = StreamMultiplexer([_tagged(streams, True)])
    async with mux:
        async for outer, value in mux:
            if outer:
                mux.push(_tagged(value, False))
            else:
                yield value


async def settle_stream(stream: AsyncIterable[T]) -> AsyncIterator[Result[T, Exception]]:
    """Yield ``Ok(item)`` for every item, then ``Err(exc)`` if the stream raises.

    Example:
        >>> async for result in settle_stream(flaky()):
        ...     if result.is_err():
        ...         log.warning("feed dropped", error=str(result.unwrap_err()))
    """
    try:
        async for item in stream:
            yield Ok(item)
    except Exception as exc:
        yield Err(exc)


def merge_settled(*streams: AsyncIterable[T], **options: object) -> StreamMultiplexer[Result[T, Exception]]:
    """Merge streams whose failures are delivered as Err items instead of raised."""
    return StreamMultiplexer((settle_stream(s) for s in streams), **options)  # type: ignore[arg-type]


async def collect(stream: AsyncIterable[T], *, limit: int | None = None) -> list[T]:
    """Drain ``stream`` into a list, stopping after ``limit`` items if given."""
    items: list[T] = []
    if limit is not None and limit <= 0:
        return items
    async for item in stream:
        items.append(item)
        if limit is not None and len(items) >= limit:
            break
    return items
