"""Input value objects and the metric catalogue for the scoring core.

Raw daily entries arrive from the (external) sensor-ingestion layer, one per
calendar day.  Every field except ``date`` is optional and may carry a
sensor-gap sentinel (0, NaN, ±inf) instead of a measurement; see
``src.biometrics.normalization`` for how those are collapsed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import NamedTuple


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class DataSource(str, Enum):
    """Device family a score was derived from."""

    APPLE_WATCH = "Apple Watch"
    GARMIN = "Garmin"
    OURA = "Oura"
    WHOOP = "WHOOP"
    FITBIT = "Fitbit"
    SAMSUNG = "Samsung"
    OTHER = "Other"
    AUTO_DETECT = "Auto"


class FieldStatus(str, Enum):
    """Per-day state of a single metric after normalization.

    The three states are mutually exclusive:
        PRESENT:  a measurement inside its plausible range
        MISSING:  absent, 0, NaN or infinite
        OUTLIER:  a measurement outside its plausible range
    """

    PRESENT = "present"
    MISSING = "missing"
    OUTLIER = "outlier"


# ---------------------------------------------------------------------------
# Metric catalogue
# ---------------------------------------------------------------------------


class MetricSpec(NamedTuple):
    """Maps a RawDailyEntry attribute to its wire name and unit."""

    attr: str
    name: str
    unit: str


# Order here is the order fields appear in daily records and units tables.
METRICS: tuple[MetricSpec, ...] = (
    MetricSpec("sleep_hours", "sleepHours", "hours"),
    MetricSpec("deep_sleep_hours", "deepSleepHours", "hours"),
    MetricSpec("rem_sleep_hours", "remSleepHours", "hours"),
    MetricSpec("hrv_ms", "hrvMs", "ms"),
    MetricSpec("resting_hr", "restingHR", "bpm"),
    MetricSpec("vo2max", "vo2max", "ml/kg/min"),
    MetricSpec("steps", "steps", "count"),
    MetricSpec("active_calories", "activeCalories", "kcal"),
    MetricSpec("training_load", "trainingLoad", "score"),
    MetricSpec("readiness_score", "readinessScore", "0-100"),
    MetricSpec("weight_kg", "weightKg", "kg"),
    MetricSpec("body_fat_percent", "bodyFatPercent", "%"),
)

METRICS_BY_NAME: dict[str, MetricSpec] = {m.name: m for m in METRICS}

UNITS: dict[str, str] = {m.name: m.unit for m in METRICS}


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawDailyEntry:
    """One calendar day of raw, possibly-missing physiological inputs.

    Attributes:
        date:              Calendar date the values belong to.
        sleep_hours:       Total sleep for the night ending on ``date``.
        deep_sleep_hours:  Deep / slow-wave sleep duration.
        rem_sleep_hours:   REM sleep duration.
        hrv_ms:            Heart-rate variability (ms).
        resting_hr:        Resting heart rate (bpm).
        vo2max:            VO2max estimate (ml/kg/min).
        steps:             Step count.
        active_calories:   Active energy burned (kcal).
        training_load:     Device training-load figure.
        readiness_score:   Device-reported readiness (0–100).
        weight_kg:         Body weight.
        body_fat_percent:  Body fat percentage.
        workout_count:     Number of recorded workouts.
    """

    date: date
    sleep_hours: float | None = None
    deep_sleep_hours: float | None = None
    rem_sleep_hours: float | None = None
    hrv_ms: float | None = None
    resting_hr: float | None = None
    vo2max: float | None = None
    steps: float | None = None
    active_calories: float | None = None
    training_load: float | None = None
    readiness_score: float | None = None
    weight_kg: float | None = None
    body_fat_percent: float | None = None
    workout_count: int | None = None

    def value(self, metric: str) -> float | None:
        """Return the raw (un-normalized) value for a wire metric name."""
        return getattr(self, METRICS_BY_NAME[metric].attr)


class HeartRateSample(NamedTuple):
    """A single heart-rate reading (bpm) and when it was taken."""

    value: float
    timestamp: datetime
