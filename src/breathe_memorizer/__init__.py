"""
breathe_memorizer package exports convenience helpers for library consumers.
"""

from __future__ import annotations

from .config import BreatheConfig, config_from_dict, config_from_yaml, load_config
from .models import PaceBand, PaceResult, Script, Token, TokenKind, WordState
from .pace import PaceTimer, classify, format_elapsed, words_per_minute
from .peek import PeekController
from .progress import ProgressTracker
from .scheduling import AsyncioScheduler, ManualClock, ManualScheduler, Scheduler
from .session import MemorizationSession, SessionEvent, begin_session
from .tokenization import TokenizedScript, tokenize

__all__ = [
    "BreatheConfig",
    "config_from_dict",
    "config_from_yaml",
    "load_config",
    "PaceBand",
    "PaceResult",
    "Script",
    "Token",
    "TokenKind",
    "WordState",
    "PaceTimer",
    "classify",
    "format_elapsed",
    "words_per_minute",
    "PeekController",
    "ProgressTracker",
    "AsyncioScheduler",
    "ManualClock",
    "ManualScheduler",
    "Scheduler",
    "MemorizationSession",
    "SessionEvent",
    "begin_session",
    "TokenizedScript",
    "tokenize",
]

__version__ = "0.1.0"
