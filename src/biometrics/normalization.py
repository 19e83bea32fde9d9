"""Missing-value normalization and plausible-range outlier detection.

Wearables report "no measurement" in several ways: a field left out, a
literal zero, NaN, or an infinity from a bad division upstream.  All four
collapse to ``None`` here before any arithmetic happens.  A day with exactly
0 steps or 0 ms HRV is treated as a sensor gap, never as a true zero.
"""

from __future__ import annotations

import math

from src.biometrics.base import FieldStatus, RawDailyEntry
from src.biometrics.config_loader import ScoringConfig


def normalize_missing(value: float | None) -> float | None:
    """Map {None, 0, NaN, ±inf} to None; return every other value unchanged."""
    if value is None:
        return None
    if value == 0 or math.isnan(value) or math.isinf(value):
        return None
    return value


def normalize_count(value: float | None) -> int | None:
    """Integer counterpart of :func:`normalize_missing`."""
    value = normalize_missing(value)
    return None if value is None else int(value)


def is_outlier(metric: str, value: float, config: ScoringConfig) -> bool:
    """True if ``value`` falls outside the metric's plausible range.

    Metrics without a configured range are never outliers.
    """
    bounds = config.plausible_range(metric)
    if bounds is None:
        return False
    return not bounds.contains(value)


def classify_value(metric: str, raw: float | None, config: ScoringConfig) -> tuple[FieldStatus, float | None]:
    """Normalize a raw reading and classify it.

    Returns:
        ``(status, normalized_value)``.  The value is None only when the
        status is MISSING; outliers keep their value so callers can report it.
    """
    value = normalize_missing(raw)
    if value is None:
        return FieldStatus.MISSING, None
    if is_outlier(metric, value, config):
        return FieldStatus.OUTLIER, value
    return FieldStatus.PRESENT, value


def valid_value(entry: RawDailyEntry, metric: str, config: ScoringConfig) -> float | None:
    """Return the entry's value for ``metric`` only if it is present and in range."""
    status, value = classify_value(metric, entry.value(metric), config)
    return value if status is FieldStatus.PRESENT else None


def has_any(entry: RawDailyEntry, metrics: tuple[str, ...]) -> bool:
    """True if at least one of ``metrics`` is non-missing (outliers count)."""
    return any(normalize_missing(entry.value(m)) is not None for m in metrics)
