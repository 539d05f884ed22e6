from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up, like ``Math.round``."""
    return math.floor(value + 0.5)
