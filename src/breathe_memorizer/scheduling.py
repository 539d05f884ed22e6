"""Cancellable one-shot callbacks for single-threaded hosts.

Every timer in a memorization session (peek expiry, the live elapsed tick and
the notes autosave) is a ``ScheduledTask`` obtained from a ``Scheduler``.
``ManualScheduler`` runs due callbacks only when the host pumps it, which
keeps tests deterministic and suits a terminal loop; ``AsyncioScheduler``
hands the callbacks to a running asyncio event loop.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, List

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Callback = Callable[[], None]


class ScheduledTask(ABC):
    """Handle for a callback armed on a scheduler."""

    @property
    @abstractmethod
    def when(self) -> float:
        """Scheduler time at which the callback fires."""
        raise NotImplementedError

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call more than once."""
        raise NotImplementedError


class Scheduler(ABC):
    """Source of time and of cancellable delayed callbacks."""

    @abstractmethod
    def now(self) -> float:
        """Current time in seconds on this scheduler's clock."""
        raise NotImplementedError

    @abstractmethod
    def call_later(self, delay: float, callback: Callback) -> ScheduledTask:
        """Arm ``callback`` to run once after ``delay`` seconds."""
        raise NotImplementedError


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start

    def __call__(self) -> float:
        return self._now

    def advance(self, seconds: float) -> float:
        if seconds < 0:
            raise ValueError("Cannot move a clock backwards.")
        self._now += seconds
        return self._now


class _ManualTask(ScheduledTask):
    def __init__(self, when: float, seq: int, callback: Callback) -> None:
        self._when = when
        self._seq = seq
        self._callback: Callback | None = callback
        self._cancelled = False

    def __lt__(self, other: "_ManualTask") -> bool:
        return (self._when, self._seq) < (other._when, other._seq)

    @property
    def when(self) -> float:
        return self._when

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        self._callback = None

    def _run(self) -> None:
        callback = self._callback
        self._callback = None
        if callback is not None and not self._cancelled:
            callback()


class ManualScheduler(Scheduler):
    """Scheduler whose callbacks run only from ``run_pending``."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock: Clock = clock or time.monotonic
        self._queue: List[_ManualTask] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._clock()

    def call_later(self, delay: float, callback: Callback) -> ScheduledTask:
        task = _ManualTask(self.now() + max(0.0, delay), next(self._counter), callback)
        heapq.heappush(self._queue, task)
        return task

    @property
    def pending(self) -> int:
        """Number of armed tasks that have not been cancelled."""
        return sum(1 for task in self._queue if not task.cancelled)

    def next_deadline(self) -> float | None:
        self._discard_cancelled()
        return self._queue[0].when if self._queue else None

    def run_pending(self) -> int:
        """Run every task that is due; return how many callbacks ran.

        Tasks armed by a callback run in the same pass when they are already
        due, so a zero-delay chain drains before this returns.
        """
        ran = 0
        while True:
            self._discard_cancelled()
            if not self._queue or self._queue[0].when > self.now():
                return ran
            task = heapq.heappop(self._queue)
            task._run()
            ran += 1

    def _discard_cancelled(self) -> None:
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)


class _AsyncioTask(ScheduledTask):
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    @property
    def when(self) -> float:
        return self._handle.when()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()

    def cancel(self) -> None:
        self._handle.cancel()


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop's ``call_later``."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()

    def now(self) -> float:
        return self._loop.time()

    def call_later(self, delay: float, callback: Callback) -> ScheduledTask:
        return _AsyncioTask(self._loop.call_later(max(0.0, delay), callback))


class Debouncer:
    """Coalesce bursts of values into one call after a quiet window.

    Each ``submit`` cancels the pending call and re-arms it, so only the last
    value submitted within ``quiet_seconds`` reaches ``action``.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        quiet_seconds: float,
        action: Callable[[Any], None],
    ) -> None:
        self._scheduler = scheduler
        self._quiet_seconds = quiet_seconds
        self._action = action
        self._task: ScheduledTask | None = None
        self._value: Any = None

    @property
    def is_pending(self) -> bool:
        return self._task is not None

    def submit(self, value: Any) -> None:
        self.cancel()
        self._value = value
        self._task = self._scheduler.call_later(self._quiet_seconds, self._fire)

    def flush(self) -> bool:
        """Run the pending call now; return False when nothing was pending."""
        if self._task is None:
            return False
        self._task.cancel()
        self._fire()
        return True

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _fire(self) -> None:
        value = self._value
        self._task = None
        self._value = None
        logger.debug("Debounced action firing after %.3fs quiet", self._quiet_seconds)
        self._action(value)
