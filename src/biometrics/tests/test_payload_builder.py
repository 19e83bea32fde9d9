"""Tests for the quality-annotated health payload."""

from __future__ import annotations

import dataclasses
import json
import random
from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from src.biometrics.base import UNITS, FieldStatus
from src.biometrics.config_loader import ScoringConfig
from src.biometrics.payload_builder import HealthPayloadBuilder, build_health_payload
from src.biometrics.tests.conftest import TEST_DATE, history, make_day, typical_day
from src.models.payload import QualityStatus


@pytest.fixture
def builder(scoring_config: ScoringConfig) -> HealthPayloadBuilder:
    return HealthPayloadBuilder(scoring_config)


# ---------------------------------------------------------------------------
# Overall structure
# ---------------------------------------------------------------------------


class TestPayloadStructure:
    def test_ninety_day_history(self, builder, ninety_day_history) -> None:
        payload = builder.build(ninety_day_history)
        assert payload.total_days == 90
        assert payload.date_range.start == TEST_DATE - timedelta(days=89)
        assert payload.date_range.end == TEST_DATE
        assert len(payload.weekly_summary) == 13
        assert len(payload.daily_last14) == 14
        assert payload.daily_last14[-1].day == TEST_DATE
        assert payload.data_reliability_score == 100
        assert payload.data_quality_flags == []
        assert set(payload.data_quality_status.values()) == {QualityStatus.HIGH_CONFIDENCE_DATA}

    def test_short_history_keeps_every_day(self, builder) -> None:
        payload = builder.build(history(6))
        assert len(payload.daily_last14) == 6
        assert len(payload.weekly_summary) == 13

    def test_input_order_does_not_matter(self, builder, ninety_day_history) -> None:
        shuffled = list(ninety_day_history)
        random.Random(7).shuffle(shuffled)
        assert builder.build(shuffled).to_json() == builder.build(ninety_day_history).to_json()

    def test_units_cover_every_metric(self, builder) -> None:
        payload = builder.build(history(3))
        assert payload.units == UNITS
        assert payload.units["restingHR"] == "bpm"

    def test_functional_wrapper(self, scoring_config: ScoringConfig) -> None:
        payload = build_health_payload(history(10), config=scoring_config)
        assert payload.total_days == 10


class TestEmptyHistory:
    def test_empty_input(self, builder) -> None:
        payload = builder.build([])
        assert payload.total_days == 0
        assert payload.date_range.start is None
        assert payload.date_range.end is None
        assert payload.weekly_summary == []
        assert payload.daily_last14 == []
        assert set(payload.coverage_valid_days.values()) == {0}
        assert set(payload.data_quality_status.values()) == {QualityStatus.INSUFFICIENT_DATA}
        assert payload.data_reliability_score == 0

    def test_empty_input_serializes(self, builder) -> None:
        doc = json.loads(builder.build([]).to_json())
        assert doc["dateRange"] == {"start": None, "end": None}
        assert doc["weeklySummary"] == []


# ---------------------------------------------------------------------------
# Daily window
# ---------------------------------------------------------------------------


class TestDailyRecords:
    def test_missing_vs_outlier(self, builder) -> None:
        entries = history(5)
        entries[-1] = dataclasses.replace(entries[-1], steps=0, hrv_ms=400.0)
        record = builder.build(entries).daily_last14[-1]

        assert record.steps is None
        assert record.status("steps") is FieldStatus.MISSING
        assert "steps" in record.missing_fields

        assert record.hrv_ms == 400.0
        assert record.status("hrvMs") is FieldStatus.OUTLIER
        assert record.outlier_fields == ["hrvMs"]
        assert "hrvMs" not in record.missing_fields

    def test_field_lists_follow_metric_order(self, builder) -> None:
        record = builder.daily_record(make_day(TEST_DATE, steps=9000))
        assert record.missing_fields[:3] == ["sleepHours", "deepSleepHours", "remSleepHours"]
        assert "steps" not in record.missing_fields
        assert len(record.missing_fields) == 11

    def test_steps_serialize_as_int(self, builder) -> None:
        record = builder.daily_record(typical_day(TEST_DATE, steps=9000.0))
        assert record.to_dict()["steps"] == 9000
        assert isinstance(record.to_dict()["steps"], int)

    def test_wire_keys(self, builder) -> None:
        doc = builder.daily_record(typical_day(TEST_DATE)).to_dict()
        assert doc["date"] == "2026-02-23"
        assert "restingHR" in doc
        assert doc["missingFields"] == []
        assert doc["outlierFields"] == []
        assert "statuses" not in doc

    @pytest.mark.parametrize("sentinel", [0, float("nan"), float("inf")])
    def test_sentinels_become_null(self, builder, sentinel: float) -> None:
        record = builder.daily_record(typical_day(TEST_DATE, sleep_hours=sentinel))
        assert record.sleep_hours is None
        assert record.to_dict()["sleepHours"] is None


# ---------------------------------------------------------------------------
# Weekly aggregation
# ---------------------------------------------------------------------------


class TestWeeklySummary:
    def test_week_one_ends_on_latest_date(self, builder, ninety_day_history) -> None:
        weeks = builder.build(ninety_day_history).weekly_summary
        assert weeks[0].week_number == 1
        assert weeks[0].end_date == TEST_DATE
        assert weeks[0].start_date == TEST_DATE - timedelta(days=6)
        assert weeks[12].end_date == TEST_DATE - timedelta(days=84)

    def test_totals_and_averages(self, builder) -> None:
        week = builder.build(history(7)).weekly_summary[0]
        assert week.avg_sleep_hours == pytest.approx(7.5)
        assert week.avg_hrv_ms == pytest.approx(55.0)
        assert week.avg_steps == pytest.approx(9000)
        assert week.avg_vo2max == pytest.approx(48.0)
        assert week.total_active_calories == pytest.approx(7 * 550.0)
        assert week.workout_count == 7
        assert week.valid_days_count == 7

    def test_missing_and_outliers_excluded_from_averages(self, builder) -> None:
        entries = history(7, steps=10000)
        entries[0] = dataclasses.replace(entries[0], steps=0)
        entries[1] = dataclasses.replace(entries[1], steps=95000)
        entries[2] = dataclasses.replace(entries[2], steps=4000)
        week = builder.build(entries).weekly_summary[0]
        assert week.avg_steps == pytest.approx((4000 + 4 * 10000) / 5)

    def test_outlier_day_still_counts_as_valid_day(self, builder) -> None:
        entries = [make_day(TEST_DATE, steps=95000), make_day(TEST_DATE - timedelta(days=1))]
        week = builder.build(entries).weekly_summary[0]
        assert week.valid_days_count == 1
        assert week.avg_steps is None

    def test_empty_window(self, builder) -> None:
        entries = history(3) + history(3, end=TEST_DATE - timedelta(days=30))
        week = builder.build(entries).weekly_summary[2]
        doc = week.to_dict()
        assert week.valid_days_count == 0
        assert all(doc[key] is None for key in doc if key.startswith("avg"))
        assert doc["totalActiveCalories"] is None
        assert doc["workoutCount"] is None

    def test_zero_sleep_excluded_from_weekly_average(self, builder) -> None:
        entries = history(7, sleep_hours=8.0)
        entries[3] = dataclasses.replace(entries[3], sleep_hours=0)
        week = builder.build(entries).weekly_summary[0]
        assert week.avg_sleep_hours == pytest.approx(8.0)
        assert week.valid_days_count == 7

    def test_weeks_beyond_history_are_empty(self, builder) -> None:
        weeks = builder.build(history(10)).weekly_summary
        assert weeks[0].valid_days_count == 7
        assert weeks[1].valid_days_count == 3
        assert all(w.valid_days_count == 0 for w in weeks[2:])

    @pytest.mark.parametrize("sentinel", [0, float("nan"), float("inf"), None])
    def test_no_workouts_is_null(self, builder, sentinel) -> None:
        week = builder.build(history(7, workout_count=sentinel)).weekly_summary[0]
        assert week.workout_count is None
        assert week.to_dict()["workoutCount"] is None

    def test_unusable_workout_counts_skipped(self, builder) -> None:
        entries = history(7, workout_count=2)
        entries[0] = dataclasses.replace(entries[0], workout_count=float("nan"))
        entries[1] = dataclasses.replace(entries[1], workout_count=float("inf"))
        week = builder.build(entries).weekly_summary[0]
        assert week.workout_count == 10

    def test_wire_keys(self, builder) -> None:
        doc = builder.build(history(7)).weekly_summary[0].to_dict()
        for key in ("weekNumber", "startDate", "endDate", "avgVO2max", "avgRestingHR",
                    "totalActiveCalories", "workoutCount", "validDaysCount"):
            assert key in doc


# ---------------------------------------------------------------------------
# Determinism
# ---------------------------------------------------------------------------


class TestSerialization:
    def test_to_json_is_stable(self, builder, ninety_day_history) -> None:
        payload = builder.build(ninety_day_history)
        assert payload.to_json() == payload.to_json()
        assert builder.build(ninety_day_history).to_json() == payload.to_json()

    def test_top_level_keys(self, builder) -> None:
        doc = json.loads(builder.build(history(20)).to_json())
        assert set(doc) == {
            "dateRange",
            "units",
            "weeklySummary",
            "dailyLast14",
            "coverageValidDays",
            "dataQualityStatus",
            "dataQualityFlags",
            "dataReliabilityScore",
            "totalDays",
        }
        assert doc["dataQualityStatus"]["hrvMs"] == "GOOD_DATA"

    def test_payload_is_frozen(self, builder) -> None:
        payload = builder.build(history(3))
        with pytest.raises(ValidationError):
            payload.total_days = 5

    def test_builder_does_not_mutate_input(self, builder) -> None:
        entries = history(5)
        entries.reverse()
        snapshot = list(entries)
        builder.build(entries)
        assert entries == snapshot
        assert entries[0].date == date(2026, 2, 23)
