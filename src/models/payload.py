"""Pydantic models for the quality-annotated health payload.

This is the document handed to downstream analysis (including the
generative-text step).  Field aliases are the wire keys; dates serialize as
``yyyy-MM-dd``.
"""

from __future__ import annotations

import json
from datetime import date
from enum import Enum

from pydantic import Field, computed_field

from src.biometrics.base import METRICS, FieldStatus
from src.models.base import ReporterBase


class QualityStatus(str, Enum):
    """Confidence band for a metric, from how many valid days it has."""

    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    LIMITED_DATA = "LIMITED_DATA"
    GOOD_DATA = "GOOD_DATA"
    HIGH_CONFIDENCE_DATA = "HIGH_CONFIDENCE_DATA"


class DateRange(ReporterBase):
    start: date | None = None
    end: date | None = None


# ---------- Daily (last 14 days) ----------

class DailyQualityRecord(ReporterBase):
    """One day after normalization, with every metric's status recorded.

    Outlier values are kept so the consumer can see what the sensor said;
    they are excluded from every average and coverage count.
    """

    day: date = Field(alias="date")
    sleep_hours: float | None = Field(default=None, alias="sleepHours")
    deep_sleep_hours: float | None = Field(default=None, alias="deepSleepHours")
    rem_sleep_hours: float | None = Field(default=None, alias="remSleepHours")
    hrv_ms: float | None = Field(default=None, alias="hrvMs")
    resting_hr: float | None = Field(default=None, alias="restingHR")
    vo2max: float | None = Field(default=None, alias="vo2max")
    steps: int | None = Field(default=None, alias="steps")
    active_calories: float | None = Field(default=None, alias="activeCalories")
    training_load: float | None = Field(default=None, alias="trainingLoad")
    readiness_score: float | None = Field(default=None, alias="readinessScore")
    weight_kg: float | None = Field(default=None, alias="weightKg")
    body_fat_percent: float | None = Field(default=None, alias="bodyFatPercent")
    statuses: dict[str, FieldStatus] = Field(default_factory=dict, exclude=True)

    def status(self, metric: str) -> FieldStatus:
        return self.statuses.get(metric, FieldStatus.MISSING)

    def _with_status(self, wanted: FieldStatus) -> list[str]:
        return [m.name for m in METRICS if self.status(m.name) is wanted]

    @computed_field(alias="missingFields")
    @property
    def missing_fields(self) -> list[str]:
        return self._with_status(FieldStatus.MISSING)

    @computed_field(alias="outlierFields")
    @property
    def outlier_fields(self) -> list[str]:
        return self._with_status(FieldStatus.OUTLIER)


# ---------- Weekly (13 trailing weeks) ----------

class WeeklyAggregate(ReporterBase):
    """Averages over one trailing 7-day window; week 1 is the most recent."""

    week_number: int = Field(alias="weekNumber", ge=1)
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    avg_sleep_hours: float | None = Field(default=None, alias="avgSleepHours")
    avg_deep_sleep_hours: float | None = Field(default=None, alias="avgDeepSleepHours")
    avg_rem_sleep_hours: float | None = Field(default=None, alias="avgRemSleepHours")
    avg_hrv_ms: float | None = Field(default=None, alias="avgHrvMs")
    avg_resting_hr: float | None = Field(default=None, alias="avgRestingHR")
    avg_steps: float | None = Field(default=None, alias="avgSteps")
    total_active_calories: float | None = Field(default=None, alias="totalActiveCalories")
    avg_training_load: float | None = Field(default=None, alias="avgTrainingLoad")
    avg_readiness_score: float | None = Field(default=None, alias="avgReadinessScore")
    avg_vo2max: float | None = Field(default=None, alias="avgVO2max")
    workout_count: int | None = Field(default=None, alias="workoutCount")
    valid_days_count: int = Field(default=0, alias="validDaysCount", ge=0)


# ---------- Full payload ----------

class HealthPayload(ReporterBase):
    """Quality-annotated summary of a full daily history."""

    date_range: DateRange = Field(alias="dateRange")
    units: dict[str, str]
    weekly_summary: list[WeeklyAggregate] = Field(alias="weeklySummary")
    daily_last14: list[DailyQualityRecord] = Field(alias="dailyLast14")
    coverage_valid_days: dict[str, int] = Field(alias="coverageValidDays")
    data_quality_status: dict[str, QualityStatus] = Field(alias="dataQualityStatus")
    data_quality_flags: list[str] = Field(alias="dataQualityFlags")
    data_reliability_score: int = Field(alias="dataReliabilityScore", ge=0, le=100)
    total_days: int = Field(alias="totalDays", ge=0)

    def to_json(self) -> str:
        """Pretty-printed JSON with sorted keys (stable across calls)."""
        return json.dumps(self.to_dict(), indent=2, sort_keys=True)
