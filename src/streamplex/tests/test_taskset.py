"""Tests for head-futures and UnorderedTaskSet.

The task set is the bookkeeping behind StreamMultiplexer: lazy start,
tri-state poll, removal and wake-ups.
"""

from __future__ import annotations

import asyncio
import gc

import pytest

from streamplex import HeadFuture, NotResolvedError, StreamHead, UnorderedTaskSet, next_head
from streamplex.tests.support import Feed, failing, items


class TestNextHead:
    """next_head() resolves one item plus the remaining stream."""

    @pytest.mark.asyncio
    async def test_item_and_remaining_stream(self) -> None:
        gen = items(1, 2)
        head = await next_head(gen)
        assert head == StreamHead(1, gen)

        second = await next_head(head.stream)
        assert (second.item, second.ended) == (2, False)

        last = await next_head(second.stream)
        assert last.ended
        assert last.item is None
        assert last.stream is gen

    @pytest.mark.asyncio
    async def test_member_exception_propagates(self) -> None:
        with pytest.raises(ValueError, match="boom"):
            await next_head(failing())


class TestHeadFuture:
    """HeadFuture lifecycle."""

    def test_result_before_resolution(self) -> None:
        unit = HeadFuture(items(1))
        assert not unit.started
        with pytest.raises(NotResolvedError):
            unit.result()
        assert "state=idle" in repr(unit)

    @pytest.mark.asyncio
    async def test_await_starts_unit(self) -> None:
        unit = HeadFuture(items(5))
        head = await unit
        assert head.item == 5
        assert unit.started and unit.done
        assert unit.result() is head

    @pytest.mark.asyncio
    async def test_cancel_running_unit(self) -> None:
        unit: HeadFuture[int] = HeadFuture(Feed())
        waiter = asyncio.ensure_future(unit)
        await asyncio.sleep(0)

        assert unit.cancel()
        assert not unit.cancel()
        assert unit.cancelled
        with pytest.raises(asyncio.CancelledError):
            await waiter
        assert "state=cancelled" in repr(unit)

    @pytest.mark.asyncio
    async def test_cancel_finished_unit_retrieves_failure(self) -> None:
        loop = asyncio.get_running_loop()
        reported: list[dict[str, object]] = []
        loop.set_exception_handler(lambda _loop, context: reported.append(context))
        try:
            unit: HeadFuture[int] = HeadFuture(failing())
            unit.start(lambda _task: None)
            await asyncio.sleep(0.01)
            assert unit.done

            assert unit.cancel()
            del unit
            gc.collect()
            assert reported == []
        finally:
            loop.set_exception_handler(None)


class TestUnorderedTaskSet:
    """Collaborator contract: insert, poll, length, termination, iteration."""

    @pytest.mark.asyncio
    async def test_push_does_not_start(self) -> None:
        tasks: UnorderedTaskSet[int] = UnorderedTaskSet()
        unit = HeadFuture(items(1))
        tasks.push(unit)
        assert len(tasks) == 1
        assert not unit.started

        done = await tasks.next_completed()
        assert done is unit
        assert unit.started
        assert len(tasks) == 0
        assert done.result().item == 1

    @pytest.mark.asyncio
    async def test_empty_poll_terminates_and_push_revives(self) -> None:
        tasks: UnorderedTaskSet[int] = UnorderedTaskSet()
        assert tasks.is_empty()
        assert not tasks.is_terminated

        assert await tasks.next_completed() is None
        assert tasks.is_terminated
        assert await tasks.next_completed() is None

        tasks.push(HeadFuture(items(1)))
        assert not tasks.is_terminated

    @pytest.mark.asyncio
    async def test_ended_member_resolves_like_any_unit(self) -> None:
        """The set does not interpret heads; an ended member still comes back once."""
        tasks: UnorderedTaskSet[int] = UnorderedTaskSet()
        tasks.push(HeadFuture(items()))

        unit = await tasks.next_completed()
        assert unit is not None and unit.result().ended
        assert not tasks.is_terminated
        assert await tasks.next_completed() is None
        assert tasks.is_terminated

    @pytest.mark.asyncio
    async def test_task_names_use_prefix(self) -> None:
        tasks: UnorderedTaskSet[int] = UnorderedTaskSet(task_name="feeds")
        unit = HeadFuture(items(1))
        tasks.push(unit)
        await tasks.next_completed()
        assert unit.task is not None
        assert unit.task.get_name().startswith("feeds-")

    @pytest.mark.asyncio
    async def test_remove_wakes_waiting_poller(self) -> None:
        tasks: UnorderedTaskSet[int] = UnorderedTaskSet()
        unit: HeadFuture[int] = HeadFuture(Feed())
        tasks.push(unit)
        poller = asyncio.create_task(tasks.next_completed())
        await asyncio.sleep(0.01)
        assert not poller.done()

        assert tasks.remove(unit)
        assert await asyncio.wait_for(poller, timeout=1) is None
        assert not tasks.remove(unit)

    def test_remove_foreign_unit(self) -> None:
        tasks: UnorderedTaskSet[int] = UnorderedTaskSet()
        other: UnorderedTaskSet[int] = UnorderedTaskSet()
        unit = HeadFuture(items(1))
        other.push(unit)

        assert not tasks.remove(unit)
        assert len(other) == 1

    def test_iteration_is_a_snapshot(self) -> None:
        tasks: UnorderedTaskSet[int] = UnorderedTaskSet()
        for i in range(3):
            tasks.push(HeadFuture(items(i)))

        for unit in tasks:
            unit.cancel()
        assert len(tasks) == 0

    def test_drain_detaches_units(self) -> None:
        tasks: UnorderedTaskSet[int] = UnorderedTaskSet()
        units = [HeadFuture(items(i)) for i in range(2)]
        for unit in units:
            tasks.push(unit)

        assert tasks.drain() == units
        assert tasks.is_empty()
        # Detached units no longer reach back into the set
        assert units[0].cancel()
        assert len(tasks) == 0

    @pytest.mark.asyncio
    async def test_aclose_cancels_started_tasks(self) -> None:
        tasks: UnorderedTaskSet[int] = UnorderedTaskSet()
        unit: HeadFuture[int] = HeadFuture(Feed())
        tasks.push(unit)
        with pytest.raises(TimeoutError):
            await asyncio.wait_for(tasks.next_completed(), timeout=0.02)

        assert await tasks.aclose() == [unit]
        assert unit.task is not None and unit.task.cancelled()
        assert tasks.is_empty()

    @pytest.mark.asyncio
    async def test_cancel_does_not_wait(self) -> None:
        tasks: UnorderedTaskSet[int] = UnorderedTaskSet()
        running: HeadFuture[int] = HeadFuture(Feed())
        tasks.push(running)
        with pytest.raises(TimeoutError):
            await asyncio.wait_for(tasks.next_completed(), timeout=0.02)
        idle = HeadFuture(items(1))
        tasks.push(idle)

        assert tasks.cancel() == [running, idle]
        assert tasks.is_empty()
        assert running.cancelled and idle.cancelled
        assert not idle.started

        assert running.task is not None
        await asyncio.wait([running.task], timeout=1)
        assert running.task.cancelled()

    @pytest.mark.asyncio
    async def test_ready_units_come_back_one_per_poll(self) -> None:
        tasks: UnorderedTaskSet[str] = UnorderedTaskSet()
        for name in ("a", "b", "c"):
            tasks.push(HeadFuture(items(name)))

        seen = []
        while (unit := await tasks.next_completed()) is not None:
            seen.append(unit.result().item)
        assert sorted(seen) == ["a", "b", "c"]
