"""Timers for the auto-eat loop.

Sessions never sleep; they ask a Scheduler to call them back later and
keep the returned handle so a reset or dispose can cancel it.
AsyncioScheduler runs on the event loop, ManualScheduler on a virtual
clock that tests advance by hand.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from collections.abc import Callable
from typing import Protocol

from yumyum.engine.config import IDLE_POLL_MS, IDLE_THRESHOLD_MS, MIN_TICK_MS, TICK_JITTER


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def now(self) -> float:
        """Current time in milliseconds."""
        ...

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle: ...


def next_tick_delay(
    last_interaction_ms: float | None,
    now_ms: float,
    interval: float,
    jitter_u: float,
) -> float:
    """Delay before the next auto-eat tick.

    Within IDLE_THRESHOLD_MS of a manual interaction the loop just polls
    every IDLE_POLL_MS. Otherwise interval ±10% (jitter_u in [0, 1)),
    never below MIN_TICK_MS.
    """
    if last_interaction_ms is not None and now_ms - last_interaction_ms < IDLE_THRESHOLD_MS:
        return float(IDLE_POLL_MS)
    jitter = jitter_u * TICK_JITTER * interval - (TICK_JITTER / 2) * interval
    return max(float(MIN_TICK_MS), interval + jitter)


def is_idle_paused(last_interaction_ms: float | None, now_ms: float) -> bool:
    return last_interaction_ms is not None and now_ms - last_interaction_ms < IDLE_THRESHOLD_MS


class AsyncioScheduler:
    """Scheduler backed by loop.call_later; must be used from the loop thread.

    Without an explicit loop, every call goes to the loop running at that
    moment.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop if self._loop is not None else asyncio.get_running_loop()

    def now(self) -> float:
        return self.loop.time() * 1000.0

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay_ms) / 1000.0, callback)


class _ManualHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock; callbacks fire only inside advance()."""

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now = start_ms
        self._seq = itertools.count()
        self._queue: list[tuple[float, int, _ManualHandle, Callable[[], None]]] = []

    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle()
        heapq.heappush(self._queue, (self._now + max(0.0, delay_ms), next(self._seq), handle, callback))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled)

    def advance(self, ms: float) -> None:
        """Move the clock forward, firing due callbacks in time order.

        Callbacks scheduled while advancing fire too if they fall due
        before the target time.
        """
        target = self._now + ms
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = due
            callback()
        self._now = target
