from __future__ import annotations

import math
from typing import Optional

from reportcard.domain.types import Grade

# (letter, min, max), inclusive, evaluated top-down
O_LEVEL_GRADE_BANDS: list[tuple[Grade, float, float]] = [
    (Grade.A, 80, 100),
    (Grade.B, 70, 79.99),
    (Grade.C, 60, 69.99),
    (Grade.D, 50, 59.99),
    (Grade.E, 40, 49.99),
    (Grade.F, 0, 39.99),
]

# (letter, lower bound); anything below the last bound is an E
A_LEVEL_GRADE_BANDS: list[tuple[Grade, float]] = [
    (Grade.A, 80),
    (Grade.B, 70),
    (Grade.C, 60),
    (Grade.D, 50),
]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (``69.5 -> 70``)."""
    return int(math.floor(value + 0.5))


def grade_o_level(score: Optional[float]) -> Grade:
    if score is None:
        return Grade.NOT_EXAMINED
    for letter, low, high in O_LEVEL_GRADE_BANDS:
        if low <= score <= high:
            return letter
    return Grade.F


def grade_a_level(score: Optional[float]) -> Grade:
    if score is None:
        return Grade.NOT_EXAMINED
    for letter, low in A_LEVEL_GRADE_BANDS:
        if score >= low:
            return letter
    return Grade.E


def clamp_0_100(value: float) -> float:
    return max(0.0, min(100.0, value))
