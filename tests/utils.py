from __future__ import annotations

from pathlib import Path

from breathe_memorizer.scheduling import (
    Callback,
    ManualClock,
    ManualScheduler,
    ScheduledTask,
)


def make_scheduler(start: float = 100.0) -> tuple[ManualClock, ManualScheduler]:
    """Create a manual clock and a scheduler that reads time from it."""
    clock = ManualClock(start)
    return clock, ManualScheduler(clock)


class RecordingScheduler(ManualScheduler):
    """ManualScheduler that keeps every callback handed to ``call_later``."""

    def __init__(self, clock: ManualClock) -> None:
        super().__init__(clock)
        self.callbacks: list[Callback] = []

    def call_later(self, delay: float, callback: Callback) -> ScheduledTask:
        self.callbacks.append(callback)
        return super().call_later(delay, callback)


def advance(clock: ManualClock, scheduler: ManualScheduler, seconds: float) -> int:
    """Move the clock forward and run whatever became due."""
    clock.advance(seconds)
    return scheduler.run_pending()


def write_script(path: Path, text: str) -> Path:
    """Write script text to ``path`` as UTF-8 and return the path."""
    path.write_text(text, encoding="utf-8")
    return path
