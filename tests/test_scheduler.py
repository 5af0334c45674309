"""
Scheduler Tests - Virtual clock and asyncio timers.
"""

import asyncio

import pytest

from visual_novel.runtime.scheduler import AsyncioScheduler, ManualScheduler


class TestManualScheduler:
    """Tests for the virtual-clock scheduler."""

    def test_starts_at_zero(self):
        assert ManualScheduler().now_ms() == 0.0
        assert ManualScheduler(start_ms=250).now_ms() == 250

    def test_call_later_waits(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.call_later(500, lambda: fired.append("reveal"))

        scheduler.advance(499)
        assert fired == []

        scheduler.advance(1)
        assert fired == ["reveal"]
        assert scheduler.now_ms() == 500

    def test_call_soon_needs_a_turn(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.call_soon(lambda: fired.append(1))

        assert fired == []
        assert scheduler.run_pending() == 1
        assert fired == [1]

    def test_same_time_in_order(self):
        scheduler = ManualScheduler()
        fired = []
        for name in "abc":
            scheduler.call_later(100, lambda name=name: fired.append(name))

        scheduler.advance(100)
        assert fired == ["a", "b", "c"]

    def test_due_order(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.call_later(300, lambda: fired.append(300))
        scheduler.call_later(100, lambda: fired.append(100))
        scheduler.call_later(200, lambda: fired.append(200))

        scheduler.advance(1000)
        assert fired == [100, 200, 300]

    def test_clock_at_due_time_inside_callback(self):
        scheduler = ManualScheduler()
        seen = []
        scheduler.call_later(150, lambda: seen.append(scheduler.now_ms()))

        scheduler.advance(1000)
        assert seen == [150]
        assert scheduler.now_ms() == 1000

    def test_nested_within_window(self):
        scheduler = ManualScheduler()
        fired = []

        def first():
            fired.append("first")
            scheduler.call_later(100, lambda: fired.append("second"))

        scheduler.call_later(100, first)
        scheduler.advance(200)

        assert fired == ["first", "second"]

    def test_cancel(self):
        scheduler = ManualScheduler()
        fired = []
        handle = scheduler.call_later(100, lambda: fired.append(1))

        handle.cancel()
        scheduler.advance(200)

        assert fired == []
        assert handle.cancelled
        assert scheduler.pending == 0

    def test_negative_advance(self):
        with pytest.raises(ValueError, match="ms must be >= 0"):
            ManualScheduler().advance(-1)

    def test_negative_delay_runs_now(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.call_later(-50, lambda: fired.append(1))

        scheduler.run_pending()
        assert fired == [1]

    def test_run_until_idle(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.call_later(100, lambda: scheduler.call_later(1500, lambda: fired.append("late")))

        ran = scheduler.run_until_idle()

        assert ran == 2
        assert fired == ["late"]
        assert scheduler.now_ms() == 1600
        assert scheduler.next_due_ms() is None

    def test_run_until_idle_limit(self):
        scheduler = ManualScheduler()

        def again():
            scheduler.call_later(10, again)

        scheduler.call_soon(again)
        with pytest.raises(RuntimeError, match="did not go idle"):
            scheduler.run_until_idle(max_calls=50)


class TestAsyncioScheduler:
    """Tests for the asyncio-backed scheduler."""

    def test_call_later(self):
        async def run():
            scheduler = AsyncioScheduler()
            done = asyncio.Event()
            start = scheduler.now_ms()
            scheduler.call_later(20, done.set)
            await asyncio.wait_for(done.wait(), timeout=2)
            return scheduler.now_ms() - start

        elapsed = asyncio.run(run())
        assert elapsed >= 15

    def test_cancel(self):
        async def run():
            scheduler = AsyncioScheduler()
            fired = []
            handle = scheduler.call_later(10, lambda: fired.append(1))
            handle.cancel()
            await asyncio.sleep(0.05)
            return fired, handle.cancelled

        fired, cancelled = asyncio.run(run())
        assert fired == []
        assert cancelled

    def test_call_soon(self):
        async def run():
            scheduler = AsyncioScheduler(asyncio.get_running_loop())
            fired = []
            scheduler.call_soon(lambda: fired.append(1))
            await asyncio.sleep(0)
            return fired

        assert asyncio.run(run()) == [1]
