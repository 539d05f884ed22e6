from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum


class TokenKind(str, Enum):
    """Kind of a tokenized segment."""

    WORD = "word"
    SEPARATOR = "separator"


@dataclass(frozen=True, slots=True)
class Token:
    """One segment of script text: a word or a whitespace run."""

    index: int
    kind: TokenKind
    text: str

    @property
    def is_word(self) -> bool:
        return self.kind is TokenKind.WORD


@dataclass(slots=True)
class Script:
    """A script record as supplied by the external script store."""

    id: str
    title: str
    content: str
    bullets: str = ""
    created_at: float = field(default_factory=lambda: time.time() * 1000)


class WordState(str, Enum):
    """Render state of a single word."""

    VISIBLE = "visible"
    HIDDEN = "hidden"
    PEEKING = "peeking"


class PaceBand(str, Enum):
    """Qualitative speaking-pace band."""

    TOO_SLOW = "too_slow"
    SWEET_SPOT = "sweet_spot"
    TOO_FAST = "too_fast"


@dataclass(frozen=True, slots=True)
class PaceFeedback:
    """Coaching copy shown for a pace band."""

    band: PaceBand
    label: str
    description: str


@dataclass(frozen=True, slots=True)
class PaceResult:
    """Outcome of one timed run through a script."""

    total_words: int
    elapsed_seconds: float
    wpm: int
    band: PaceBand
