"""StreamMultiplexer: merge a growable set of async iterators into one.

Items are yielded as soon as any member produces them. There is no ordering
across members; within one member, items keep that member's order because
at most one ``anext`` per member is in flight.

Example:
    >>> mux = merge([quotes(), trades()])
    >>> async for event in mux:
    ...     handle(event)
    ...     if wants_news(event):
    ...         mux.push(news())  # joins the running merge
"""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator
from typing import TYPE_CHECKING, Generic, TypeVar, get_args

from streamplex.foundation.config import OnError, get_settings
from streamplex.foundation.errors import InvalidMemberError, MemberError
from streamplex.runtime.observability import get_logger

from .head import HeadFuture
from .taskset import UnorderedTaskSet

if TYPE_CHECKING:
    from types import TracebackType

T = TypeVar("T")

_POLICIES = frozenset(get_args(OnError))


class StreamMultiplexer(Generic[T]):
    """Unordered merge of a dynamic set of member streams.

    Members are async iterables; each is registered exactly once, wrapped in
    a HeadFuture. A member leaves the set the moment it ends. The merged
    stream ends once no member is left, and keeps raising StopAsyncIteration
    on later polls unless new members are pushed.

    Args:
        streams: Initial members, inserted in iteration order
        on_error: What to do when a member raises ("propagate", "skip", "stop")
        close_members: aclose() members that are still registered on close
        task_name: Prefix for the names of member tasks

    Example:
        >>> async with StreamMultiplexer([feed_a, feed_b]) as mux:
        ...     async for item in mux:
        ...         print(item)
    """

    __slots__ = ("_inner", "_on_error", "_close_members", "_log")

    def __init__(
        self,
        streams: Iterable[AsyncIterable[T]] | None = None,
        *,
        on_error: OnError | None = None,
        close_members: bool | None = None,
        task_name: str | None = None,
    ) -> None:
        defaults = get_settings().mux
        self._inner: UnorderedTaskSet[T] = UnorderedTaskSet(task_name=task_name or defaults.task_name)
        self._on_error: OnError = on_error or defaults.on_error
        if self._on_error not in _POLICIES:
            raise ValueError(f"Unknown on_error policy: {self._on_error!r}. Use one of {sorted(_POLICIES)}")
        self._close_members = defaults.close_members if close_members is None else close_members
        self._log = get_logger("streamplex.mux")
        if streams is not None:
            self.extend(streams)

    @classmethod
    def from_iterable(cls, streams: Iterable[AsyncIterable[T]], **options: object) -> StreamMultiplexer[T]:
        """Build a multiplexer holding every stream of ``streams``."""
        return cls(streams, **options)  # type: ignore[arg-type]

    # ─── Membership ──────────────────────────────────────────────────────

    def __len__(self) -> int:
        """Number of members still registered."""
        return len(self._inner)

    def is_empty(self) -> bool:
        return self._inner.is_empty()

    @property
    def is_terminated(self) -> bool:
        """True once the merged stream has reported its end and nothing was pushed since."""
        return self._inner.is_terminated

    @property
    def on_error(self) -> OnError:
        return self._on_error

    def push(self, stream: AsyncIterable[T]) -> None:
        """Register a member. It is not polled until the multiplexer is.

        Raises:
            InvalidMemberError: If ``stream`` is not an async iterable
        """
        if not isinstance(stream, AsyncIterable):
            raise InvalidMemberError.for_object(stream)
        self._inner.push(HeadFuture(aiter(stream)))
        self._log.debug("member inserted", members=len(self._inner))

    def extend(self, streams: Iterable[AsyncIterable[T]]) -> None:
        """Push every stream of ``streams``. Never suspends."""
        for stream in streams:
            self.push(stream)

    def iter(self) -> Iterator[AsyncIterator[T]]:
        """Read-only view of the pending member streams."""
        return (unit.stream for unit in self._inner)

    def __iter__(self) -> Iterator[AsyncIterator[T]]:
        return self.iter()

    def iter_mut(self) -> Iterator[HeadFuture[T]]:
        """Handles on the pending members. ``handle.cancel()`` drops that member."""
        return iter(self._inner)

    def into_iter(self) -> Iterator[HeadFuture[T]]:
        """Hand over the pending head-futures and leave the multiplexer empty.

        The units keep any task already running; await a unit to get its
        StreamHead.
        """
        units = self._inner.drain()
        self._log.debug("members released", count=len(units))
        return iter(units)

    # ─── Async iteration ─────────────────────────────────────────────────

    def __aiter__(self) -> StreamMultiplexer[T]:
        return self

    async def __anext__(self) -> T:
        was_terminated = self._inner.is_terminated
        while True:
            unit = await self._inner.next_completed()
            if unit is None:
                if not was_terminated:
                    self._log.debug("multiplexer terminated")
                raise StopAsyncIteration
            if unit.cancelled:
                # Task cancelled directly rather than through handle.cancel()
                self._log.debug("member cancelled", members=len(self._inner))
                continue
            try:
                head = unit.result()
            except Exception as exc:
                await self._member_failed(unit, exc)
                continue
            if head.ended:
                # The member left the set when its unit resolved; poll again
                # instead of surfacing an empty result.
                self._log.debug("member ended", members=len(self._inner))
                continue
            self._inner.push(HeadFuture(head.stream))
            return head.item  # type: ignore[return-value]

    async def _member_failed(self, unit: HeadFuture[T], exc: Exception) -> None:
        """Apply the on_error policy. Re-raises ``exc`` under "propagate"."""
        error = MemberError.from_exc(unit.stream, exc)
        match self._on_error:
            case "propagate":
                self._log.warning("member failed", error=error.summary, policy="propagate", members=len(self._inner))
                raise exc
            case "skip":
                self._log.warning("member failed", error=error.summary, policy="skip", members=len(self._inner))
            case "stop":
                self._log.error("member failed", error=error.summary, policy="stop", members=len(self._inner))
                await self.aclose()

    # ─── Shutdown ────────────────────────────────────────────────────────

    async def aclose(self) -> None:
        """Cancel every pending member and leave the multiplexer empty.

        Members that expose ``aclose()`` are closed too unless the
        multiplexer was created with ``close_members=False``.
        """
        units = await self._inner.aclose()
        if self._close_members:
            for unit in units:
                if (close := getattr(unit.stream, "aclose", None)) is None:
                    continue
                try:
                    await close()
                except Exception:
                    self._log.exception("member close failed", member=repr(unit.stream))
        self._log.debug("multiplexer closed", cancelled=len(units))

    async def __aenter__(self) -> StreamMultiplexer[T]:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def __del__(self) -> None:
        """Cancel pending member tasks of a multiplexer dropped without aclose()."""
        self._inner.cancel()

    def __repr__(self) -> str:
        return f"StreamMultiplexer(members={len(self._inner)}, terminated={self._inner.is_terminated})"


def merge(streams: Iterable[AsyncIterable[T]], **options: object) -> StreamMultiplexer[T]:
    """Merge ``streams`` into one unordered stream.

    Streams are inserted in iteration order; that order has no effect on the
    order items come out. The result accepts further members via push().
    """
    mux: StreamMultiplexer[T] = StreamMultiplexer(**options)  # type: ignore[arg-type]
    mux.extend(streams)
    return mux


def merge_streams(*streams: AsyncIterable[T], **options: object) -> StreamMultiplexer[T]:
    """Variadic form of merge().

    Example:
        >>> async for x in merge_streams(stream_a(), stream_b()):
        ...     print(x)  # Interleaved based on timing
    """
    return merge(streams, **options)


def extend(mux: StreamMultiplexer[T], streams: Iterable[AsyncIterable[T]]) -> StreamMultiplexer[T]:
    """Push ``streams`` into an existing multiplexer and return it."""
    mux.extend(streams)
    return mux
