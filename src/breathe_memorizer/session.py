"""Per-script memorization session.

A ``MemorizationSession`` owns the blackout progress, the peek state and the
pace timer for one pass through a script. Hosts drive it through a handful of
transitions and re-render whenever a subscribed callback reports a change.
"""

from __future__ import annotations

import logging
import uuid
from enum import Enum
from typing import Callable, List, Tuple

from .config import BreatheConfig
from .models import PaceBand, PaceFeedback, PaceResult, Script, Token, WordState
from .pace import PaceTimer, classify, feedback, format_elapsed
from .peek import PeekController
from .progress import ProgressTracker
from .scheduling import Debouncer, ManualScheduler, Scheduler
from .tokenization import TokenizedScript

logger = logging.getLogger(__name__)


class SessionEvent(str, Enum):
    PROGRESS = "progress"
    PEEK = "peek"
    TIMER_STARTED = "timer_started"
    TIMER_TICK = "timer_tick"
    TIMER_STOPPED = "timer_stopped"
    NOTES_SAVED = "notes_saved"
    ENDED = "ended"


Listener = Callable[[SessionEvent, "MemorizationSession"], None]
SaveNotes = Callable[[str, str], None]


class MemorizationSession:
    """Progressive-blackout drill over one script."""

    def __init__(
        self,
        script: Script,
        config: BreatheConfig | None = None,
        scheduler: Scheduler | None = None,
        on_save: SaveNotes | None = None,
    ) -> None:
        self._config = config or BreatheConfig()
        self._scheduler = scheduler or ManualScheduler()
        self._script = script
        self._tokenized = TokenizedScript.from_text(script.content)
        self._progress = ProgressTracker(self._tokenized.total_words)
        self._peek = PeekController(
            self._scheduler,
            self._progress.is_hidden,
            duration=self._config.peek_seconds,
            on_change=self._on_peek_change,
        )
        self._timer = PaceTimer(
            self._scheduler,
            tick_interval=self._config.tick_seconds,
            on_tick=self._on_tick,
        )
        self._notes = script.bullets
        self._on_save = on_save
        self._notes_saver = Debouncer(
            self._scheduler, self._config.notes_debounce_seconds, self._save_notes
        )
        self._listeners: List[Listener] = []
        self._last_result: PaceResult | None = None
        self._ended = False
        logger.info(
            "Session started for script=%s words=%s",
            script.id,
            self._tokenized.total_words,
        )

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def script(self) -> Script:
        return self._script

    @property
    def title(self) -> str:
        return self._script.title

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def tokens(self) -> Tuple[Token, ...]:
        return self._tokenized.tokens

    @property
    def tokenized(self) -> TokenizedScript:
        return self._tokenized

    @property
    def total_words(self) -> int:
        return self._tokenized.total_words

    @property
    def blacked_out_count(self) -> int:
        return self._progress.blacked_out_count

    @property
    def progress_fraction(self) -> float:
        return self._progress.progress_fraction()

    @property
    def progress_percent(self) -> int:
        return self._progress.progress_percent()

    @property
    def is_mastered(self) -> bool:
        return self._progress.is_mastered

    @property
    def is_timing(self) -> bool:
        return self._timer.running

    @property
    def elapsed_seconds(self) -> float:
        return self._timer.current_elapsed()

    @property
    def formatted_elapsed(self) -> str:
        return format_elapsed(self._timer.current_elapsed())

    @property
    def wpm(self) -> int:
        return self._timer.words_per_minute(self.total_words)

    @property
    def classification(self) -> PaceBand:
        return classify(self.wpm)

    @property
    def feedback(self) -> PaceFeedback:
        return feedback(self.classification)

    @property
    def last_result(self) -> PaceResult | None:
        """Pace measured by the most recent stop, if any."""
        return self._last_result

    @property
    def notes(self) -> str:
        return self._notes

    @property
    def ended(self) -> bool:
        return self._ended

    def is_hidden(self, rank: int) -> bool:
        return self._progress.is_hidden(rank)

    def is_peeking(self, rank: int) -> bool:
        return self._peek.is_peeking(rank)

    def word_state(self, rank: int) -> WordState:
        return self._peek.word_state(rank)

    def word_rank(self, token_index: int) -> int | None:
        return self._tokenized.word_rank(token_index)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def advance(self) -> bool:
        return self._transition("advance", self._progress.advance)

    def retreat(self) -> bool:
        return self._transition("retreat", self._progress.retreat)

    def reset(self) -> bool:
        return self._transition("reset", self._progress.reset)

    def peek(self, rank: int) -> bool:
        if self._is_closed("peek"):
            return False
        if not self._progress.in_range(rank):
            logger.debug("Peek on out-of-range word %s ignored", rank)
            return False
        return self._peek.request_peek(rank)

    def toggle_timer(self) -> PaceResult | None:
        """Start the timer when stopped; stop it and return the pace when running."""
        if self._is_closed("toggle_timer"):
            return None
        if self._timer.running:
            self._timer.stop()
            result = self._timer.result(self.total_words)
            self._last_result = result
            logger.info(
                "Timed run for script=%s: %s words in %s -> %s wpm (%s)",
                self._script.id,
                result.total_words,
                format_elapsed(result.elapsed_seconds),
                result.wpm,
                result.band.value,
            )
            self._emit(SessionEvent.TIMER_STOPPED)
            return result
        self._timer.start()
        self._emit(SessionEvent.TIMER_STARTED)
        return None

    def update_notes(self, notes: str) -> None:
        """Record edited notes; the save callback runs once edits go quiet."""
        if self._is_closed("update_notes"):
            return
        self._notes = notes
        if self._on_save is not None:
            self._notes_saver.submit(notes)

    def end_session(self) -> None:
        """Cancel every timer the session armed. Idempotent.

        A pending notes save is flushed after the peek and timer are
        cancelled; if the host's save callback raises, the error propagates
        but the session is still closed.
        """
        if self._ended:
            return
        self._peek.cancel()
        self._timer.cancel()
        self._ended = True
        try:
            self._notes_saver.flush()
        except Exception:
            logger.error("Final notes save failed for script=%s", self._script.id)
            raise
        finally:
            self._notes_saver.cancel()
            logger.info("Session ended for script=%s", self._script.id)
            self._emit(SessionEvent.ENDED)
            self._listeners.clear()

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for change events; return an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: SessionEvent) -> None:
        for listener in list(self._listeners):
            listener(event, self)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _transition(self, name: str, step: Callable[[], bool]) -> bool:
        if self._is_closed(name):
            return False
        changed = step()
        if changed:
            self._emit(SessionEvent.PROGRESS)
        return changed

    def _is_closed(self, operation: str) -> bool:
        if self._ended:
            logger.warning("%s ignored: session has ended", operation)
        return self._ended

    def _on_peek_change(self, _rank: int | None) -> None:
        if not self._ended:
            self._emit(SessionEvent.PEEK)

    def _on_tick(self, _elapsed: float) -> None:
        self._emit(SessionEvent.TIMER_TICK)

    def _save_notes(self, notes: str) -> None:
        if self._on_save is None:
            return
        self._on_save(self._script.id, notes)
        self._emit(SessionEvent.NOTES_SAVED)


def begin_session(
    source: Script | str,
    *,
    title: str = "Untitled Script",
    config: BreatheConfig | None = None,
    scheduler: Scheduler | None = None,
    on_save: SaveNotes | None = None,
) -> MemorizationSession:
    """Open a session over a stored script or over raw script text."""
    if isinstance(source, Script):
        script = source
    else:
        script = Script(id=uuid.uuid4().hex[:9], title=title, content=source)
    return MemorizationSession(script, config=config, scheduler=scheduler, on_save=on_save)
