"""
Scheduler - Cooperative single-threaded callback scheduling.

All engine work runs on one thread of control. Anything that has to
wait (image preload, effect completion, settle and reveal timers) is
expressed as a callback handed to a Scheduler; nothing blocks.

Two implementations:
    ManualScheduler   - Virtual clock, advanced explicitly. Deterministic.
    AsyncioScheduler  - Wall-clock timers on an asyncio event loop.

Example:
    scheduler = ManualScheduler()
    scheduler.call_later(500, lambda: print("revealed"))
    scheduler.advance(499)   # nothing
    scheduler.advance(1)     # prints "revealed"
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, Protocol

Callback = Callable[[], None]


class TimerHandle(Protocol):
    """Handle of a scheduled callback."""

    def cancel(self) -> None: ...

    @property
    def cancelled(self) -> bool: ...


class Scheduler(Protocol):
    """What the sequencer needs from an event loop."""

    def now_ms(self) -> float: ...

    def call_soon(self, callback: Callback) -> TimerHandle: ...

    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle: ...


@dataclass(order=True)
class ScheduledCall:
    """A pending callback on the virtual clock."""
    due_ms: float
    sequence: int
    callback: Callback = field(compare=False)
    _cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler:
    """Scheduler with a virtual clock.

    Callbacks run only when the clock is advanced. Callbacks due at the
    same time run in the order they were scheduled. A callback may
    schedule more callbacks; those due within the advanced window run
    in the same call.
    """

    def __init__(self, start_ms: float = 0.0):
        self._now = start_ms
        self._queue: list[ScheduledCall] = []
        self._counter = itertools.count()

    def now_ms(self) -> float:
        return self._now

    def call_soon(self, callback: Callback) -> ScheduledCall:
        return self.call_later(0, callback)

    def call_later(self, delay_ms: float, callback: Callback) -> ScheduledCall:
        call = ScheduledCall(
            due_ms=self._now + max(0.0, delay_ms),
            sequence=next(self._counter),
            callback=callback,
        )
        heapq.heappush(self._queue, call)
        return call

    @property
    def pending(self) -> int:
        """Number of callbacks still waiting (cancelled ones excluded)."""
        return sum(1 for c in self._queue if not c.cancelled)

    def next_due_ms(self) -> float | None:
        for call in sorted(self._queue):
            if not call.cancelled:
                return call.due_ms
        return None

    def run_pending(self) -> int:
        """Run everything due at the current time.

        Returns:
            Number of callbacks run.
        """
        return self._run_until(self._now)

    def advance(self, ms: float) -> int:
        """Move the clock forward, running callbacks as they fall due.

        Returns:
            Number of callbacks run.
        """
        if ms < 0:
            raise ValueError(f"ms must be >= 0, got {ms}")
        return self._run_until(self._now + ms)

    def run_until_idle(self, max_calls: int = 10_000) -> int:
        """Fast-forward until no callbacks remain.

        Args:
            max_calls: Safety limit against self-rescheduling loops.

        Returns:
            Number of callbacks run.
        """
        ran = 0
        while self._queue:
            due = self.next_due_ms()
            if due is None:
                self._queue.clear()
                break
            ran += self._run_until(max(due, self._now))
            if ran >= max_calls:
                raise RuntimeError(f"Scheduler did not go idle after {ran} callbacks")
        return ran

    def _run_until(self, target_ms: float) -> int:
        ran = 0
        while self._queue and self._queue[0].due_ms <= target_ms:
            call = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            self._now = max(self._now, call.due_ms)
            call.callback()
            ran += 1
        self._now = max(self._now, target_ms)
        return ran


class _AsyncioTimer:
    """Adapts asyncio handles to the TimerHandle protocol."""

    def __init__(self, handle: asyncio.Handle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop.

    Example:
        async def main():
            scheduler = AsyncioScheduler()
            scheduler.call_later(1000, on_timer)
            await asyncio.sleep(2)
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now_ms(self) -> float:
        return self.loop.time() * 1000

    def call_soon(self, callback: Callback) -> _AsyncioTimer:
        return _AsyncioTimer(self.loop.call_soon(callback))

    def call_later(self, delay_ms: float, callback: Callback) -> _AsyncioTimer:
        delay = max(0.0, delay_ms) / 1000
        return _AsyncioTimer(self.loop.call_later(delay, callback))


__all__ = [
    "Callback",
    "TimerHandle",
    "Scheduler",
    "ScheduledCall",
    "ManualScheduler",
    "AsyncioScheduler",
]
