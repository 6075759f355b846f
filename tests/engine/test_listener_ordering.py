# tests/engine/test_listener_ordering.py
"""Ordering guarantees for asynchronous listeners and concurrent events.

Events submitted without awaiting earlier ones must still run strictly one
pass at a time: a pass's callbacks finish before the next pass computes.
"""

import asyncio
from typing import Any

import pytest

from tests.fixtures.operators import EMA, Explode, Identity


class TestListenerOrdering:
    @pytest.mark.asyncio
    async def test_slow_listener_does_not_reorder_events(self) -> None:
        from opgraph.engine import Graph

        log: list[str] = []
        delays = {1: 0.03, 2: 0.0, 3: 0.01}

        async def slow(name: str, value: Any) -> None:
            log.append(f"start {value}")
            await asyncio.sleep(delays[value])
            log.append(f"end {value}")

        graph = Graph("tick")
        graph.add("x", Identity()).depends("tick")
        graph.on("x", slow)

        await asyncio.gather(graph.on_data(1), graph.on_data(2), graph.on_data(3))

        assert log == ["start 1", "end 1", "start 2", "end 2", "start 3", "end 3"]

    @pytest.mark.asyncio
    async def test_listeners_follow_execution_order(self) -> None:
        from opgraph.engine import Graph

        seen: list[str] = []

        async def record(name: str, value: Any) -> None:
            await asyncio.sleep(0)
            seen.append(name)

        graph = Graph("tick")
        graph.add("c", Identity()).depends("b")
        graph.add("a", Identity()).depends("tick")
        graph.add("b", Identity()).depends("a")
        for name in ("c", "a", "b"):
            graph.on(name, record)

        await graph.on_data(1)

        assert seen == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_sync_and_async_listeners_mix(self) -> None:
        from opgraph.engine import Graph

        seen: list[tuple[str, Any]] = []

        async def async_listener(name: str, value: Any) -> None:
            await asyncio.sleep(0.001)
            seen.append(("async", value))

        graph = Graph("tick")
        graph.add("x", Identity()).depends("tick")
        graph.on("x", async_listener)
        graph.on("x", lambda name, value: seen.append(("sync", value)))

        await asyncio.gather(graph.on_data("a"), graph.on_data("b"))

        assert seen == [("async", "a"), ("sync", "a"), ("async", "b"), ("sync", "b")]

    @pytest.mark.asyncio
    async def test_output_sink_runs_after_listeners(self) -> None:
        from opgraph.engine import Graph

        seen: list[str] = []

        async def sink(snapshot: dict[str, Any]) -> None:
            await asyncio.sleep(0)
            seen.append(f"output {snapshot['tick']}")

        graph = Graph("tick")
        graph.add("x", Identity()).depends("tick")
        graph.on("x", lambda name, value: seen.append(f"listener {value}"))
        graph.output(sink)

        await asyncio.gather(graph.on_data(1), graph.on_data(2))

        assert seen == ["listener 1", "output 1", "listener 2", "output 2"]

    @pytest.mark.asyncio
    async def test_concurrent_events_feed_stateful_operator_in_order(self) -> None:
        from opgraph.engine import Graph

        values: list[float] = []

        async def collect(name: str, value: float) -> None:
            await asyncio.sleep(0.005 if len(values) == 0 else 0)
            values.append(value)

        graph = Graph("tick")
        graph.add("fast", EMA(period=2)).depends("tick")
        graph.on("fast", collect)

        snapshots = await asyncio.gather(*(graph.on_data(v) for v in (100, 200, 300)))

        assert values == pytest.approx([100, 166.6667, 255.5556], rel=1e-4)
        assert [s["tick"] for s in snapshots] == [100, 200, 300]

    @pytest.mark.asyncio
    async def test_output_sink_receives_independent_copies(self) -> None:
        from opgraph.engine import Graph

        received: list[dict[str, Any]] = []

        def sink(snapshot: dict[str, Any]) -> None:
            snapshot["tampered"] = True
            received.append(snapshot)

        graph = Graph("tick")
        graph.add("x", Identity()).depends("tick")
        graph.output(sink)

        returned = await graph.on_data(1)

        assert received == [{"tick": 1, "x": 1, "tampered": True}]
        assert "tampered" not in returned
        assert "tampered" not in graph.snapshot()


class TestFailureIsolation:
    @pytest.mark.asyncio
    async def test_listener_failure_reaches_only_its_caller(self) -> None:
        from opgraph.engine import Graph

        seen: list[int] = []

        def picky(name: str, value: int) -> None:
            if value == 2:
                raise ValueError("listener rejected 2")
            seen.append(value)

        graph = Graph("tick")
        graph.add("x", Identity()).depends("tick")
        graph.on("x", picky)

        results = await asyncio.gather(graph.on_data(1), graph.on_data(2), graph.on_data(3), return_exceptions=True)

        assert results[0] == {"tick": 1, "x": 1}
        assert isinstance(results[1], ValueError)
        assert results[2] == {"tick": 3, "x": 3}
        assert seen == [1, 3]

    @pytest.mark.asyncio
    async def test_operator_fault_reaches_only_its_caller(self) -> None:
        from opgraph.contracts import NodeExecutionError
        from opgraph.engine import Graph

        seen: list[int] = []
        graph = Graph("tick")
        graph.add("boom", Explode(on=2)).depends("tick")
        graph.on("boom", lambda name, value: seen.append(value))

        results = await asyncio.gather(graph.on_data(1), graph.on_data(2), graph.on_data(3), return_exceptions=True)

        assert isinstance(results[1], NodeExecutionError)
        assert results[2] == {"tick": 3, "boom": 3}
        assert seen == [1, 3]

    @pytest.mark.asyncio
    async def test_cancelled_listener_does_not_stall_the_queue(self) -> None:
        """A listener cancelled from elsewhere cancels its own event only."""
        from opgraph.engine import Graph

        async def sleeper() -> None:
            await asyncio.sleep(10)

        seen: list[int] = []

        async def awaits_cancelled_task(name: str, value: int) -> None:
            if value == 1:
                task = asyncio.create_task(sleeper())
                await asyncio.sleep(0)
                task.cancel()
                await task
            seen.append(value)

        graph = Graph("tick")
        graph.add("x", Identity()).depends("tick")
        graph.on("x", awaits_cancelled_task)

        results = await asyncio.wait_for(
            asyncio.gather(graph.on_data(1), graph.on_data(2), return_exceptions=True),
            timeout=5,
        )

        assert isinstance(results[0], asyncio.CancelledError)
        assert results[1] == {"tick": 2, "x": 2}
        assert seen == [2]
        assert await asyncio.wait_for(graph.on_data(3), timeout=5) == {"tick": 3, "x": 3}

    @pytest.mark.asyncio
    async def test_sink_raising_cancelled_error_resolves_caller(self) -> None:
        from opgraph.engine import Graph

        def sink(snapshot: dict[str, Any]) -> None:
            if snapshot["tick"] == 1:
                raise asyncio.CancelledError

        graph = Graph("tick")
        graph.add("x", Identity()).depends("tick")
        graph.output(sink)

        with pytest.raises(asyncio.CancelledError):
            await asyncio.wait_for(graph.on_data(1), timeout=5)
        assert await asyncio.wait_for(graph.on_data(2), timeout=5) == {"tick": 2, "x": 2}
