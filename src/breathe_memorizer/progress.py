from __future__ import annotations

import logging

from .numeric import round_half_up

logger = logging.getLogger(__name__)


class ProgressTracker:
    """Counts how many leading words of a script are blacked out.

    The count only moves one step at a time or back to zero, and every
    transition clamps to ``[0, total_words]`` instead of failing. Transitions
    return True when the count actually changed.
    """

    def __init__(self, total_words: int) -> None:
        if total_words < 0:
            raise ValueError("total_words must be non-negative.")
        self._total_words = total_words
        self._blacked_out_count = 0

    @property
    def total_words(self) -> int:
        return self._total_words

    @property
    def blacked_out_count(self) -> int:
        return self._blacked_out_count

    @property
    def is_mastered(self) -> bool:
        return self._total_words > 0 and self._blacked_out_count == self._total_words

    def advance(self) -> bool:
        if self._blacked_out_count >= self._total_words:
            logger.debug("advance ignored: all %s words hidden", self._total_words)
            return False
        self._blacked_out_count += 1
        return True

    def retreat(self) -> bool:
        if self._blacked_out_count <= 0:
            logger.debug("retreat ignored: nothing hidden")
            return False
        self._blacked_out_count -= 1
        return True

    def reset(self) -> bool:
        changed = self._blacked_out_count != 0
        self._blacked_out_count = 0
        return changed

    def in_range(self, rank: int) -> bool:
        return 0 <= rank < self._total_words

    def is_hidden(self, rank: int) -> bool:
        """Return True when the word at ``rank`` is blacked out.

        Ranks outside ``[0, total_words)`` are reported as not hidden.
        """
        if not self.in_range(rank):
            return False
        return rank < self._blacked_out_count

    def progress_fraction(self) -> float:
        if self._total_words == 0:
            return 0.0
        return self._blacked_out_count / self._total_words

    def progress_percent(self) -> int:
        return int(round_half_up(self.progress_fraction() * 100))
