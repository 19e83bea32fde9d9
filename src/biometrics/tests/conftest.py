"""Shared fixtures for the scoring and data-quality tests."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from src.biometrics.base import HeartRateSample, RawDailyEntry
from src.biometrics.config_loader import ScoringConfig, load_scoring_config

TEST_DATE = date(2026, 2, 23)
WORKOUT_START = datetime(2026, 2, 23, 7, 0, 0)


def make_day(day: date, **values) -> RawDailyEntry:
    return RawDailyEntry(date=day, **values)


def typical_day(day: date, **overrides) -> RawDailyEntry:
    """A fully-populated, in-range day; override individual fields as needed."""
    values = dict(
        sleep_hours=7.5,
        deep_sleep_hours=1.6,
        rem_sleep_hours=1.8,
        hrv_ms=55.0,
        resting_hr=56.0,
        vo2max=48.0,
        steps=9000,
        active_calories=550.0,
        training_load=120.0,
        readiness_score=78.0,
        weight_kg=72.0,
        body_fat_percent=18.0,
        workout_count=1,
    )
    values.update(overrides)
    return RawDailyEntry(date=day, **values)


def history(days: int, end: date = TEST_DATE, **overrides) -> list[RawDailyEntry]:
    """``days`` consecutive typical days ending on ``end``, oldest first."""
    return [typical_day(end - timedelta(days=offset), **overrides) for offset in range(days - 1, -1, -1)]


def hr_series(values: list[float], step_seconds: int = 60, start: datetime = WORKOUT_START) -> list[HeartRateSample]:
    return [
        HeartRateSample(value=v, timestamp=start + timedelta(seconds=i * step_seconds))
        for i, v in enumerate(values)
    ]


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def scoring_config() -> ScoringConfig:
    """Load the bundled scoring config for tests."""
    return load_scoring_config()


# ---------------------------------------------------------------------------
# History fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def ninety_day_history() -> list[RawDailyEntry]:
    return history(90)


@pytest.fixture
def sparse_history() -> list[RawDailyEntry]:
    """Ten days where only sleep and steps are recorded."""
    return [
        RawDailyEntry(date=TEST_DATE - timedelta(days=offset), sleep_hours=7.0, steps=8000)
        for offset in range(9, -1, -1)
    ]
