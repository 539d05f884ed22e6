import pytest

from breathe_memorizer.models import WordState
from breathe_memorizer.peek import PeekController
from breathe_memorizer.progress import ProgressTracker
from breathe_memorizer.scheduling import ManualClock
from tests.utils import RecordingScheduler, advance, make_scheduler


def _controller(hidden_words: int = 3, total_words: int = 5):
    clock, scheduler = make_scheduler()
    tracker = ProgressTracker(total_words)
    for _ in range(hidden_words):
        tracker.advance()
    changes: list[int | None] = []
    controller = PeekController(
        scheduler, tracker.is_hidden, duration=0.6, on_change=changes.append
    )
    return clock, scheduler, tracker, controller, changes


def test_peek_is_live_until_duration_elapses():
    clock, scheduler, _, controller, changes = _controller()

    assert controller.request_peek(1) is True
    assert controller.is_peeking(1)

    advance(clock, scheduler, 0.599)
    assert controller.is_peeking(1)

    advance(clock, scheduler, 0.01)
    assert not controller.is_peeking(1)
    assert controller.peeked_rank is None
    assert changes == [1, None]


def test_expiry_is_reported_by_time_even_before_callbacks_run():
    clock, _, _, controller, _ = _controller()
    controller.request_peek(0)

    clock.advance(0.6)

    assert not controller.is_peeking(0)


def test_new_peek_replaces_previous_one():
    clock, scheduler, _, controller, _ = _controller()
    controller.request_peek(0)
    advance(clock, scheduler, 0.3)

    controller.request_peek(2)

    assert not controller.is_peeking(0)
    assert controller.is_peeking(2)
    assert scheduler.pending == 1


def test_repeat_peek_restarts_countdown():
    clock, scheduler, _, controller, _ = _controller()
    controller.request_peek(1)
    advance(clock, scheduler, 0.5)
    controller.request_peek(1)

    advance(clock, scheduler, 0.5)
    assert controller.is_peeking(1)

    advance(clock, scheduler, 0.2)
    assert not controller.is_peeking(1)


def test_replaced_peek_callback_cannot_clear_newer_peek():
    """A stale expiry callback that still runs leaves the newer peek alone."""
    clock = ManualClock(100.0)
    scheduler = RecordingScheduler(clock)
    tracker = ProgressTracker(3)
    for _ in range(3):
        tracker.advance()
    changes: list[int | None] = []
    controller = PeekController(
        scheduler, tracker.is_hidden, duration=0.6, on_change=changes.append
    )
    controller.request_peek(0)
    stale_expiry = scheduler.callbacks[0]
    clock.advance(0.2)
    controller.request_peek(1)

    stale_expiry()

    assert controller.peeked_rank == 1
    assert controller.is_peeking(1)
    assert changes == [0, 1]
    advance(clock, scheduler, 0.6)
    assert not controller.is_peeking(1)
    assert changes == [0, 1, None]


def test_peek_on_visible_word_is_ignored():
    _, scheduler, _, controller, changes = _controller(hidden_words=2)

    assert controller.request_peek(2) is False
    assert controller.request_peek(4) is False
    assert controller.peeked_rank is None
    assert scheduler.pending == 0
    assert changes == []


def test_word_state_combines_hidden_and_peek():
    _, _, _, controller, _ = _controller(hidden_words=2)
    controller.request_peek(1)

    assert controller.word_state(0) is WordState.HIDDEN
    assert controller.word_state(1) is WordState.PEEKING
    assert controller.word_state(2) is WordState.VISIBLE


def test_peek_on_word_revealed_later_renders_visible():
    _, _, tracker, controller, _ = _controller(hidden_words=2)
    controller.request_peek(1)

    tracker.retreat()

    assert controller.word_state(1) is WordState.VISIBLE


def test_cancel_clears_pending_expiry():
    _, scheduler, _, controller, changes = _controller()
    controller.request_peek(0)

    controller.cancel()

    assert scheduler.pending == 0
    assert controller.peeked_rank is None
    assert changes == [0, None]


def test_duration_must_be_positive():
    _, scheduler = make_scheduler()
    with pytest.raises(ValueError):
        PeekController(scheduler, lambda rank: True, duration=0)
