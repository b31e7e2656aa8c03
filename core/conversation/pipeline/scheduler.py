"""
Timer sources for the conversation pipeline.

All delays in the player go through a ``Scheduler`` so the same controller can
run on an asyncio event loop or on a virtual clock that is advanced
explicitly.
"""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple


class ScheduledCall:
    """Handle for a callback scheduled on a VirtualClockScheduler"""

    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class Scheduler(ABC):
    """Abstract source of delayed callbacks"""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]):
        """
        Run callback after delay seconds.

        Returns:
            A handle with a ``cancel()`` method
        """
        pass

    @abstractmethod
    def now(self) -> float:
        pass


class AsyncioScheduler(Scheduler):
    """Schedules callbacks on an asyncio event loop"""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(delay, 0), callback)

    def now(self) -> float:
        return self.loop.time()


class VirtualClockScheduler(Scheduler):
    """
    Deterministic scheduler driven by an explicit virtual clock.

    Callbacks run only from ``advance`` or ``run_until_idle``, in due-time
    order and FIFO for equal due times.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[Tuple[float, int, ScheduledCall]] = []
        self._sequence = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        call = ScheduledCall(self._now + max(delay, 0), callback)
        heapq.heappush(self._queue, (call.when, next(self._sequence), call))
        return call

    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        """Number of scheduled, not cancelled callbacks"""
        return sum(1 for _, _, call in self._queue if not call.cancelled)

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, running every callback that falls due.

        Callbacks scheduled while advancing run too if they fall due before
        the target time.

        Returns:
            Number of callbacks run
        """
        target = self._now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, call = heapq.heappop(self._queue)
            self._now = when
            if call.cancelled:
                continue
            call.callback()
            ran += 1
        self._now = target
        return ran

    def run_until_idle(self, max_callbacks: int = 10000) -> int:
        """Run everything scheduled, jumping the clock as needed"""
        ran = 0
        while self._queue:
            if ran >= max_callbacks:
                raise RuntimeError(f"Scheduler still busy after {max_callbacks} callbacks")
            when, _, call = heapq.heappop(self._queue)
            self._now = max(self._now, when)
            if call.cancelled:
                continue
            call.callback()
            ran += 1
        return ran
