from __future__ import annotations

import logging
import math
from typing import Callable, Dict

from .models import PaceBand, PaceFeedback, PaceResult
from .numeric import round_half_up
from .scheduling import ScheduledTask, Scheduler

logger = logging.getLogger(__name__)

# Conversational pace targets for spoken delivery, in words per minute.
SLOW_BELOW_WPM = 135
FAST_ABOVE_WPM = 185
MIN_MEASURABLE_SECONDS = 1.0
DEFAULT_TICK_SECONDS = 0.1

FEEDBACK: Dict[PaceBand, PaceFeedback] = {
    PaceBand.TOO_SLOW: PaceFeedback(
        band=PaceBand.TOO_SLOW,
        label="TOO SLOW",
        description="If you talk too slow, they think you're an idiot.",
    ),
    PaceBand.SWEET_SPOT: PaceFeedback(
        band=PaceBand.SWEET_SPOT,
        label="SWEET SPOT",
        description="High authority. Results-oriented tone.",
    ),
    PaceBand.TOO_FAST: PaceFeedback(
        band=PaceBand.TOO_FAST,
        label="TOO FAST",
        description="Trust goes down when you speak too fast.",
    ),
}


def words_per_minute(total_words: int, elapsed_seconds: float) -> int:
    """Return the rounded speaking pace, or 0 for runs shorter than a second."""
    if elapsed_seconds < MIN_MEASURABLE_SECONDS:
        return 0
    return round_half_up(total_words / (elapsed_seconds / 60))


def classify(wpm: int) -> PaceBand:
    if wpm < SLOW_BELOW_WPM:
        return PaceBand.TOO_SLOW
    if wpm > FAST_ABOVE_WPM:
        return PaceBand.TOO_FAST
    return PaceBand.SWEET_SPOT


def feedback(band: PaceBand) -> PaceFeedback:
    return FEEDBACK[band]


def format_elapsed(seconds: float) -> str:
    """Format seconds as ``M:SS``; minutes are not capped."""
    seconds = max(0.0, seconds)
    minutes = math.floor(seconds / 60)
    secs = math.floor(seconds % 60)
    return f"{minutes}:{secs:02d}"


class PaceTimer:
    """Stopwatch for one timed run through a script.

    ``start`` always begins again from zero; there is no pause/resume. While
    running, a recurring tick calls ``on_tick`` with the live elapsed value so
    a display can refresh. The elapsed value frozen by ``stop`` is measured at
    stop time, never taken from the last tick.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        tick_interval: float = DEFAULT_TICK_SECONDS,
        on_tick: Callable[[float], None] | None = None,
    ) -> None:
        if tick_interval <= 0:
            raise ValueError("Tick interval must be positive.")
        self._scheduler = scheduler
        self._tick_interval = tick_interval
        self._on_tick = on_tick
        self._running = False
        self._started_at: float | None = None
        self._elapsed = 0.0
        self._tick_task: ScheduledTask | None = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def started_at(self) -> float | None:
        return self._started_at

    def start(self) -> bool:
        if self._running:
            logger.debug("Timer start ignored: already running")
            return False
        self._started_at = self._scheduler.now()
        self._elapsed = 0.0
        self._running = True
        self._arm_tick()
        return True

    def stop(self) -> bool:
        if not self._running or self._started_at is None:
            logger.debug("Timer stop ignored: not running")
            return False
        self._elapsed = max(0.0, self._scheduler.now() - self._started_at)
        self._running = False
        self._cancel_tick()
        return True

    def cancel(self) -> None:
        """Stop ticking without recording a result."""
        self._cancel_tick()
        if self._running and self._started_at is not None:
            self._elapsed = max(0.0, self._scheduler.now() - self._started_at)
        self._running = False

    def current_elapsed(self) -> float:
        if self._running and self._started_at is not None:
            return max(0.0, self._scheduler.now() - self._started_at)
        return self._elapsed

    def words_per_minute(self, total_words: int) -> int:
        return words_per_minute(total_words, self.current_elapsed())

    def result(self, total_words: int) -> PaceResult:
        elapsed = self.current_elapsed()
        wpm = words_per_minute(total_words, elapsed)
        return PaceResult(
            total_words=total_words,
            elapsed_seconds=elapsed,
            wpm=wpm,
            band=classify(wpm),
        )

    def _arm_tick(self) -> None:
        self._tick_task = self._scheduler.call_later(self._tick_interval, self._tick)

    def _tick(self) -> None:
        self._tick_task = None
        if not self._running:
            return
        if self._on_tick is not None:
            self._on_tick(self.current_elapsed())
        # on_tick may have stopped or restarted the timer.
        if self._running and self._tick_task is None:
            self._arm_tick()

    def _cancel_tick(self) -> None:
        if self._tick_task is not None:
            self._tick_task.cancel()
            self._tick_task = None
