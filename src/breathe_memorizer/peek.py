from __future__ import annotations

import logging
from typing import Callable

from .models import WordState
from .scheduling import ScheduledTask, Scheduler

logger = logging.getLogger(__name__)

DEFAULT_PEEK_SECONDS = 0.6


class PeekController:
    """Reveals one hidden word for a short, fixed time.

    Only one peek is live at a time. A new request cancels the pending expiry
    and starts a fresh countdown from the new call, possibly for another word.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        is_hidden: Callable[[int], bool],
        duration: float = DEFAULT_PEEK_SECONDS,
        on_change: Callable[[int | None], None] | None = None,
    ) -> None:
        if duration <= 0:
            raise ValueError("Peek duration must be positive.")
        self._scheduler = scheduler
        self._is_hidden = is_hidden
        self._duration = duration
        self._on_change = on_change
        self._peeked_rank: int | None = None
        self._expires_at: float | None = None
        self._task: ScheduledTask | None = None
        # Bumped on every request so a callback from a replaced peek is inert
        # even if its task was already popped for execution.
        self._generation = 0

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def peeked_rank(self) -> int | None:
        return self._peeked_rank

    @property
    def expires_at(self) -> float | None:
        return self._expires_at

    def request_peek(self, rank: int) -> bool:
        """Start a peek on ``rank``; return False when the request is ignored."""
        if not self._is_hidden(rank):
            logger.debug("Peek on word %s ignored: word is not hidden", rank)
            return False
        self._cancel_task()
        self._generation += 1
        generation = self._generation
        self._peeked_rank = rank
        self._expires_at = self._scheduler.now() + self._duration
        self._task = self._scheduler.call_later(
            self._duration, lambda: self._expire(generation)
        )
        self._notify()
        return True

    def is_peeking(self, rank: int) -> bool:
        if self._peeked_rank is None or self._peeked_rank != rank:
            return False
        if self._expires_at is None:
            return False
        return self._scheduler.now() < self._expires_at

    def word_state(self, rank: int) -> WordState:
        if not self._is_hidden(rank):
            return WordState.VISIBLE
        if self.is_peeking(rank):
            return WordState.PEEKING
        return WordState.HIDDEN

    def cancel(self) -> None:
        """Drop any pending expiry and clear the peek."""
        self._cancel_task()
        self._generation += 1
        had_peek = self._peeked_rank is not None
        self._peeked_rank = None
        self._expires_at = None
        if had_peek:
            self._notify()

    def _expire(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._task = None
        self._peeked_rank = None
        self._expires_at = None
        self._notify()

    def _cancel_task(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self._peeked_rank)
