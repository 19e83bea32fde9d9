"""HRV trend and age-based maximum heart rate estimation."""

from __future__ import annotations

import math
import statistics
from typing import Sequence

from src.biometrics.weighting import clamp

# Tanaka, Monahan & Seals (2001): HRmax = 208 − 0.7 × age
_TANAKA_INTERCEPT = 208.0
_TANAKA_SLOPE = 0.7


def hrv_trend(recent_7d: Sequence[float], baseline_30d: float) -> float:
    """Relative deviation of the recent HRV mean from baseline, clamped to [-1, 1].

    Returns 0 when there are no recent readings or the baseline is not positive.
    """
    if not recent_7d or baseline_30d <= 0:
        return 0.0
    deviation = (statistics.fmean(recent_7d) - baseline_30d) / baseline_30d
    return clamp(deviation, -1.0, 1.0)


def estimate_max_hr(age: int) -> float:
    return _TANAKA_INTERCEPT - _TANAKA_SLOPE * age


def estimate_age(observed_max_hr: float) -> int:
    """Inverse of :func:`estimate_max_hr`, floored to whole years."""
    return math.floor((_TANAKA_INTERCEPT - observed_max_hr) / _TANAKA_SLOPE)
