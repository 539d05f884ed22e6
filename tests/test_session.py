import pytest

from breathe_memorizer.config import BreatheConfig
from breathe_memorizer.models import PaceBand, Script, WordState
from breathe_memorizer.session import SessionEvent, begin_session
from tests.utils import advance, make_scheduler


def _session(content: str = "Hello   world\nfoo", **kwargs):
    clock, scheduler = make_scheduler()
    session = begin_session(content, scheduler=scheduler, **kwargs)
    return clock, scheduler, session


def test_scenario_blackout_all_words():
    _, _, session = _session()

    assert session.total_words == 3
    for _ in range(3):
        assert session.advance() is True

    assert session.progress_fraction == 1.0
    assert session.progress_percent == 100
    assert session.is_mastered
    assert session.advance() is False
    assert session.blacked_out_count == 3


def test_empty_script_is_safe():
    _, _, session = _session("   \n ")

    assert session.total_words == 0
    assert session.progress_fraction == 0.0
    assert session.advance() is False
    assert session.peek(0) is False
    assert session.wpm == 0


def test_word_state_and_peek_through_session():
    clock, scheduler, session = _session()
    session.advance()
    session.advance()

    assert session.peek(1) is True
    assert session.word_state(0) is WordState.HIDDEN
    assert session.word_state(1) is WordState.PEEKING
    assert session.word_state(2) is WordState.VISIBLE
    assert session.is_peeking(1)

    advance(clock, scheduler, 0.6)
    assert session.word_state(1) is WordState.HIDDEN


def test_out_of_range_peek_is_ignored():
    _, scheduler, session = _session()
    for _ in range(3):
        session.advance()

    assert session.peek(3) is False
    assert session.peek(-1) is False
    assert session.is_hidden(3) is False
    assert scheduler.pending == 0


def test_toggle_timer_reports_pace():
    clock, scheduler, session = _session("word " * 300)

    assert session.toggle_timer() is None
    assert session.is_timing
    advance(clock, scheduler, 120.0)
    result = session.toggle_timer()

    assert result is not None
    assert result.wpm == 150
    assert result.band is PaceBand.SWEET_SPOT
    assert session.wpm == 150
    assert session.classification is PaceBand.SWEET_SPOT
    assert session.feedback.label == "SWEET SPOT"
    assert session.formatted_elapsed == "2:00"
    assert session.last_result == result
    assert not session.is_timing


def test_restarting_timer_does_not_accumulate():
    clock, scheduler, session = _session()
    session.toggle_timer()
    advance(clock, scheduler, 2.0)
    first = session.toggle_timer()
    assert first.elapsed_seconds == pytest.approx(2.0)

    session.toggle_timer()
    assert session.elapsed_seconds == 0.0
    assert session.formatted_elapsed == "0:00"


def test_listeners_receive_events():
    clock, scheduler, session = _session()
    events: list[SessionEvent] = []
    unsubscribe = session.subscribe(lambda event, _: events.append(event))

    session.advance()
    session.retreat()
    session.retreat()
    session.advance()
    session.peek(0)
    advance(clock, scheduler, 0.6)
    session.toggle_timer()
    advance(clock, scheduler, 0.1)
    session.toggle_timer()
    unsubscribe()
    session.advance()

    assert events == [
        SessionEvent.PROGRESS,
        SessionEvent.PROGRESS,
        SessionEvent.PROGRESS,
        SessionEvent.PEEK,
        SessionEvent.PEEK,
        SessionEvent.TIMER_STARTED,
        SessionEvent.TIMER_TICK,
        SessionEvent.TIMER_STOPPED,
    ]


def test_end_session_cancels_everything():
    saved: list[tuple[str, str]] = []
    clock, scheduler, session = _session(
        on_save=lambda script_id, notes: saved.append((script_id, notes))
    )
    session.advance()
    session.peek(0)
    session.toggle_timer()
    session.update_notes("- open strong")
    assert scheduler.pending == 3

    session.end_session()

    assert scheduler.pending == 0
    assert saved == [(session.script.id, "- open strong")]
    assert not session.is_timing
    assert not session.is_peeking(0)
    advance(clock, scheduler, 5.0)
    assert session.ended


def test_end_session_cancels_timers_when_save_fails():
    """A failing final save still closes the session and disarms its timers."""

    def failing_save(script_id: str, notes: str) -> None:
        raise OSError("disk full")

    clock, scheduler, session = _session("a b c", on_save=failing_save)
    events: list[SessionEvent] = []
    session.subscribe(lambda event, _: events.append(event))
    session.advance()
    session.peek(0)
    session.toggle_timer()
    session.update_notes("x")

    with pytest.raises(OSError):
        session.end_session()

    assert scheduler.pending == 0
    assert session.ended
    assert not session.is_timing
    assert not session.is_peeking(0)
    assert events[-1] is SessionEvent.ENDED
    session.end_session()
    advance(clock, scheduler, 5.0)
    assert session.advance() is False


def test_operations_after_end_are_ignored():
    _, scheduler, session = _session()
    events: list[SessionEvent] = []
    session.subscribe(lambda event, _: events.append(event))
    session.end_session()
    session.end_session()

    assert session.advance() is False
    assert session.toggle_timer() is None
    session.update_notes("ignored")
    assert session.blacked_out_count == 0
    assert scheduler.pending == 0
    assert events == [SessionEvent.ENDED]


def test_notes_save_is_debounced():
    saved: list[tuple[str, str]] = []
    script = Script(id="abc123", title="Why us?", content="Because results.", bullets="- one")
    clock, scheduler = make_scheduler()
    session = begin_session(
        script,
        scheduler=scheduler,
        config=BreatheConfig(notes_debounce_ms=1000),
        on_save=lambda script_id, notes: saved.append((script_id, notes)),
    )

    assert session.notes == "- one"
    session.update_notes("- one\n- two")
    advance(clock, scheduler, 0.5)
    session.update_notes("- one\n- two\n- three")
    advance(clock, scheduler, 0.99)
    assert saved == []

    advance(clock, scheduler, 0.02)
    assert saved == [("abc123", "- one\n- two\n- three")]
    assert session.title == "Why us?"


def test_config_controls_peek_duration():
    clock, scheduler, session = _session(config=BreatheConfig(peek_duration_ms=250))
    session.advance()
    session.peek(0)

    advance(clock, scheduler, 0.25)

    assert not session.is_peeking(0)


def test_begin_session_from_text_assigns_id_and_title():
    _, _, session = _session("Short answer", title="Tell me about yourself")

    assert session.title == "Tell me about yourself"
    assert len(session.script.id) == 9
    assert session.word_rank(2) == 1
