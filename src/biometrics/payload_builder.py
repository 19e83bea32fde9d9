"""Build the quality-annotated health payload from a raw daily history.

For a batch of ``RawDailyEntry`` records the builder produces:

    - the last 14 days with every metric marked present / missing / outlier
    - 13 trailing weekly aggregates (week 1 ends on the latest date)
    - per-metric coverage counts and quality status over the whole history
    - anomaly flags and a single 0–100 reliability score

The input is sorted once by date; weekly windows are sliced out of the sorted
list by bisection.  Dates must be unique (deduplication belongs upstream).
"""

from __future__ import annotations

import bisect
import logging
from datetime import date, timedelta
from typing import Iterable, Sequence

from src.biometrics.base import METRICS, UNITS, RawDailyEntry
from src.biometrics.config_loader import ScoringConfig, get_scoring_config
from src.biometrics.normalization import classify_value, has_any, normalize_count, valid_value
from src.biometrics.quality import (
    calculate_coverage,
    calculate_reliability_score,
    determine_quality_status,
    generate_flags,
)
from src.models.payload import DailyQualityRecord, DateRange, HealthPayload, WeeklyAggregate

logger = logging.getLogger("healthreporter.biometrics.payload")

# A day with any of these counts toward a week's validDaysCount
VALID_DAY_METRICS: tuple[str, ...] = ("sleepHours", "hrvMs", "steps", "activeCalories")

# Weekly average field → source metric
_WEEKLY_AVERAGES: dict[str, str] = {
    "avg_sleep_hours": "sleepHours",
    "avg_deep_sleep_hours": "deepSleepHours",
    "avg_rem_sleep_hours": "remSleepHours",
    "avg_hrv_ms": "hrvMs",
    "avg_resting_hr": "restingHR",
    "avg_steps": "steps",
    "avg_training_load": "trainingLoad",
    "avg_readiness_score": "readinessScore",
    "avg_vo2max": "vo2max",
}


def _mean(values: list[float]) -> float | None:
    return sum(values) / len(values) if values else None


class HealthPayloadBuilder:
    """Turn a raw daily history into a ``HealthPayload``.

    Usage::

        builder = HealthPayloadBuilder()
        payload = builder.build(entries)
        payload.to_json()
    """

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self._config = config or get_scoring_config()

    # ------------------------------------------------------------------
    # Daily window
    # ------------------------------------------------------------------

    def daily_record(self, entry: RawDailyEntry) -> DailyQualityRecord:
        """Normalize one day and record each metric's status."""
        values: dict[str, float | None] = {}
        statuses = {}
        for metric in METRICS:
            status, value = classify_value(metric.name, entry.value(metric.name), self._config)
            statuses[metric.name] = status
            values[metric.attr] = value

        if values["steps"] is not None:
            values["steps"] = int(values["steps"])

        return DailyQualityRecord(day=entry.date, statuses=statuses, **values)

    def build_daily_window(self, entries: Sequence[RawDailyEntry]) -> list[DailyQualityRecord]:
        window = self._config.quality.daily_window_days
        return [self.daily_record(e) for e in entries[-window:]]

    # ------------------------------------------------------------------
    # Weekly aggregation
    # ------------------------------------------------------------------

    def weekly_aggregate(
        self, week_number: int, start: date, end: date, entries: Sequence[RawDailyEntry]
    ) -> WeeklyAggregate:
        """Aggregate one window using only present, in-range values."""
        if not entries:
            return WeeklyAggregate(week_number=week_number, start_date=start, end_date=end)

        def valid(metric: str) -> list[float]:
            values = (valid_value(e, metric, self._config) for e in entries)
            return [v for v in values if v is not None]

        averages = {field: _mean(valid(metric)) for field, metric in _WEEKLY_AVERAGES.items()}
        calories = valid("activeCalories")
        workouts = sum(normalize_count(e.workout_count) or 0 for e in entries)

        return WeeklyAggregate(
            week_number=week_number,
            start_date=start,
            end_date=end,
            total_active_calories=sum(calories) if calories else None,
            workout_count=workouts or None,
            valid_days_count=sum(1 for e in entries if has_any(e, VALID_DAY_METRICS)),
            **averages,
        )

    def build_weekly_summary(self, entries: Sequence[RawDailyEntry]) -> list[WeeklyAggregate]:
        """Trailing weekly windows, week 1 ending on the latest entry's date."""
        if not entries:
            return []

        cfg = self._config.quality
        dates = [e.date for e in entries]
        last = dates[-1]

        weeks = []
        for index in range(cfg.weekly_window_count):
            end = last - timedelta(days=index * cfg.week_length_days)
            start = end - timedelta(days=cfg.week_length_days - 1)
            lo = bisect.bisect_left(dates, start)
            hi = bisect.bisect_right(dates, end)
            weeks.append(self.weekly_aggregate(index + 1, start, end, entries[lo:hi]))
        return weeks

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def build(self, raw_days: Iterable[RawDailyEntry]) -> HealthPayload:
        """Build the payload.

        Args:
            raw_days: Daily entries in any order, one per date.

        Returns:
            A frozen, JSON-serializable HealthPayload.
        """
        entries = sorted(raw_days, key=lambda e: e.date)
        total_days = len(entries)

        coverage = calculate_coverage(entries, self._config)
        flags = generate_flags(entries, coverage, self._config)
        reliability = calculate_reliability_score(coverage, total_days, self._config)

        payload = HealthPayload(
            date_range=DateRange(
                start=entries[0].date if entries else None,
                end=entries[-1].date if entries else None,
            ),
            units=dict(UNITS),
            weekly_summary=self.build_weekly_summary(entries),
            daily_last14=self.build_daily_window(entries),
            coverage_valid_days=coverage,
            data_quality_status=determine_quality_status(coverage, self._config),
            data_quality_flags=flags,
            data_reliability_score=reliability,
            total_days=total_days,
        )

        logger.info(
            "Built health payload: %d days (%s → %s), reliability %d, %d flag(s)",
            total_days,
            payload.date_range.start,
            payload.date_range.end,
            reliability,
            len(flags),
        )
        return payload


def build_health_payload(
    raw_days: Iterable[RawDailyEntry], config: ScoringConfig | None = None
) -> HealthPayload:
    """Functional shortcut for ``HealthPayloadBuilder(config).build(raw_days)``."""
    return HealthPayloadBuilder(config).build(raw_days)
