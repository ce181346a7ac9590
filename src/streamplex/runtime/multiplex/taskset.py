"""Unordered set of pending head-futures.

Thin bookkeeping over asyncio tasks: the event loop does the waking, this
class only keeps track of which units are registered and which have
finished.

Structure:
    - slab: ``dict[int, HeadFuture]`` keyed by a monotonically increasing id,
      so a unit's key never changes while it is registered
    - unstarted: ids pushed since the last poll, started lazily
    - ready: ids whose task finished, filled by task done-callbacks
    - waiter: a future the poller suspends on until a callback or a
      mutation wakes it

Example:
    >>> tasks = UnorderedTaskSet()
    >>> tasks.push(HeadFuture(source()))
    >>> unit = await tasks.next_completed()
    >>> unit.result().item
"""

from __future__ import annotations

import asyncio
import itertools
from collections import deque
from collections.abc import Iterator
from functools import partial
from typing import Generic, TypeVar

from .head import HeadFuture, StreamHead

T = TypeVar("T")


class UnorderedTaskSet(Generic[T]):
    """Growable, unordered collection of head-futures.

    ``push`` never starts a unit; the next ``next_completed`` call does. The
    set reports terminated once a poll has found it empty, and a later push
    clears that flag.
    """

    __slots__ = ("_slab", "_unstarted", "_ready", "_ids", "_waiter", "_terminated", "_task_name")

    def __init__(self, *, task_name: str = "streamplex-member") -> None:
        self._slab: dict[int, HeadFuture[T]] = {}
        self._unstarted: deque[int] = deque()
        self._ready: deque[int] = deque()
        self._ids = itertools.count()
        self._waiter: asyncio.Future[None] | None = None
        self._terminated = False
        self._task_name = task_name

    def __len__(self) -> int:
        return len(self._slab)

    def is_empty(self) -> bool:
        return not self._slab

    @property
    def is_terminated(self) -> bool:
        return self._terminated

    def __iter__(self) -> Iterator[HeadFuture[T]]:
        # Snapshot: units may be cancelled while the caller iterates
        return iter(list(self._slab.values()))

    def iter(self) -> Iterator[HeadFuture[T]]:
        return self.__iter__()

    def push(self, unit: HeadFuture[T]) -> None:
        """Register a unit without starting it."""
        key = next(self._ids)
        unit._owner, unit._key = self, key
        self._slab[key] = unit
        self._unstarted.append(key)
        self._terminated = False
        self._wake()

    def remove(self, unit: HeadFuture[T]) -> bool:
        """Cancel and discard a registered unit. False if it is not in this set."""
        if unit._owner is not self:
            return False
        return unit.cancel()

    def drain(self) -> list[HeadFuture[T]]:
        """Remove and return every pending unit, leaving their tasks untouched."""
        units = list(self._slab.values())
        for unit in units:
            unit._owner = None
        self._slab.clear()
        self._unstarted.clear()
        self._ready.clear()
        self._wake()
        return units

    def cancel(self) -> list[HeadFuture[T]]:
        """Drain the set and cancel every unit without waiting for its task."""
        units = self.drain()
        for unit in units:
            unit.cancel()
        return units

    async def aclose(self) -> list[HeadFuture[T]]:
        """Cancel every unit and wait for the started tasks to finish."""
        units = self.cancel()
        tasks = [u.task for u in units if u.task is not None]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        return units

    async def next_completed(self) -> HeadFuture[T] | None:
        """Next finished unit, removed from the set; None when the set is empty.

        Suspends while units are registered but none has finished.
        """
        while True:
            if not self._slab:
                self._terminated = True
                return None
            self._start_pending()
            while self._ready:
                if (unit := self._slab.pop(self._ready.popleft(), None)) is not None:
                    unit._owner = None
                    return unit
            self._waiter = asyncio.get_running_loop().create_future()
            try:
                await self._waiter
            finally:
                self._waiter = None

    def _start_pending(self) -> None:
        while self._unstarted:
            key = self._unstarted.popleft()
            if (unit := self._slab.get(key)) is not None:
                unit.start(partial(self._on_done, key), name=f"{self._task_name}-{key}")

    def _on_done(self, key: int, _task: asyncio.Task[StreamHead[T]]) -> None:
        if key in self._slab:
            self._ready.append(key)
            self._wake()

    def _discard(self, key: int) -> None:
        self._slab.pop(key, None)
        self._wake()

    def _wake(self) -> None:
        waiter = self._waiter
        if waiter is not None and not waiter.done() and not waiter.get_loop().is_closed():
            waiter.set_result(None)

    def __repr__(self) -> str:
        return f"UnorderedTaskSet(len={len(self._slab)}, ready={len(self._ready)}, terminated={self._terminated})"
