"""Weighted-sum helpers shared by the composite scores.

Every composite score here is a weighted average over whichever terms are
available on a given day.  Absent terms contribute neither to the sum nor to
the denominator, so a score built from two of four inputs is still on the
same 0–100 scale.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass
class WeightedAccumulator:
    """Running ``(weighted_sum, total_weight)`` pair.

    Usage::

        acc = WeightedAccumulator()
        acc.add(hrv_score, 0.35)
        acc.add(sleep_score, 0.30)
        acc.result(default=50)   # weighted_sum / total_weight
    """

    weighted_sum: float = 0.0
    total_weight: float = 0.0

    def add(self, score: float, weight: float) -> None:
        self.weighted_sum += score * weight
        self.total_weight += weight

    @property
    def empty(self) -> bool:
        return self.total_weight <= 0

    def result(self, default: float) -> float:
        """Weighted mean of the added terms, or ``default`` if none were added."""
        if self.empty:
            return default
        return self.weighted_sum / self.total_weight


def clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero.

    Python's ``round`` uses banker's rounding, which would turn a 72.5
    readiness into 72.
    """
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def clamp_score(value: float, low: int = 0, high: int = 100) -> int:
    """Round then clamp to an integer score band."""
    return int(clamp(round_half_up(value), low, high))
