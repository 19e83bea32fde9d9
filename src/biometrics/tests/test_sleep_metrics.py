"""Tests for sleep efficiency, sleep score and stage breakdown."""

from __future__ import annotations

import pytest

from src.biometrics.config_loader import ScoringConfig
from src.biometrics.sleep_metrics import (
    SleepEfficiency,
    SleepStages,
    _deep_score,
    _duration_score,
    _efficiency_score,
    _rem_score,
    calculate_sleep_efficiency,
    calculate_sleep_score,
)
from src.biometrics.weighting import round_half_up

HOUR = 3600.0


class TestSleepEfficiency:
    def test_zero_time_in_bed(self) -> None:
        result = calculate_sleep_efficiency(total_sleep_time=0, time_in_bed=0)
        assert result.percentage == 0
        assert result.awake_time == 0

    def test_negative_time_in_bed(self) -> None:
        result = calculate_sleep_efficiency(total_sleep_time=7 * HOUR, time_in_bed=-1)
        assert result.percentage == 0
        assert result.awake_time == 0

    def test_typical_night(self) -> None:
        result = calculate_sleep_efficiency(total_sleep_time=7 * HOUR, time_in_bed=8 * HOUR)
        assert result.percentage == pytest.approx(87.5)
        assert result.awake_time == pytest.approx(HOUR)
        assert result.description == "Very Good"

    def test_sleep_longer_than_bed_clamped(self) -> None:
        result = calculate_sleep_efficiency(total_sleep_time=9 * HOUR, time_in_bed=8 * HOUR)
        assert result.percentage == 100.0
        assert result.awake_time == 0.0

    @pytest.mark.parametrize(
        ("pct", "label"),
        [(95, "Excellent"), (90, "Excellent"), (86, "Very Good"), (82, "Good"), (75, "Moderate"), (50, "Low")],
    )
    def test_description(self, pct: float, label: str) -> None:
        assert SleepEfficiency(pct, 0, 0, 0).description == label


class TestSleepScoreComponents:
    @pytest.mark.parametrize(
        ("hours", "expected"),
        [(8, 100), (6.5, 80), (5.5, 60), (9.5, 90), (10, 90), (4, 40), (1, 20), (11, 110)],
    )
    def test_duration(self, hours: float, expected: float) -> None:
        assert _duration_score(hours) == pytest.approx(expected)

    @pytest.mark.parametrize(
        ("deep", "expected"),
        [(1.5, 100), (2.5, 100), (1.2, 75), (2.8, 90), (0.5, 30), (0.9, 36), (3.5, 140)],
    )
    def test_deep(self, deep: float, expected: float) -> None:
        assert _deep_score(deep) == pytest.approx(expected)

    @pytest.mark.parametrize(
        ("rem", "expected"),
        [(2.0, 100), (1.2, 70), (2.7, 90), (0.5, 30), (0.9, 31.5)],
    )
    def test_rem(self, rem: float, expected: float) -> None:
        assert _rem_score(rem) == pytest.approx(expected)

    @pytest.mark.parametrize(
        ("eff", "expected"),
        [(95, 100), (87, 90), (82, 75), (70, 70), (20, 30)],
    )
    def test_efficiency(self, eff: float, expected: float) -> None:
        assert _efficiency_score(eff) == pytest.approx(expected)


class TestSleepScore:
    def test_all_components(self, scoring_config: ScoringConfig) -> None:
        score = calculate_sleep_score(7.5, deep_hours=1.8, rem_hours=2.0, efficiency=92, config=scoring_config)
        assert score == 100

    def test_duration_only(self, scoring_config: ScoringConfig) -> None:
        assert calculate_sleep_score(6.5, config=scoring_config) == 80

    def test_mixed(self, scoring_config: ScoringConfig) -> None:
        # 80*.40 + 75*.25 + 70*.20 + 75*.15 = 76.0
        score = calculate_sleep_score(6.5, deep_hours=1.2, rem_hours=1.2, efficiency=82, config=scoring_config)
        assert score == 76

    def test_partial_inputs_renormalize(self, scoring_config: ScoringConfig) -> None:
        score = calculate_sleep_score(6.5, rem_hours=2.7, config=scoring_config)
        expected = (80 * 0.40 + 90 * 0.20) / (0.40 + 0.20)
        assert score == round_half_up(expected)

    @pytest.mark.parametrize(
        "kwargs",
        [
            dict(total_hours=14, deep_hours=4, rem_hours=4),
            dict(total_hours=0),
            dict(total_hours=-2, deep_hours=-1, rem_hours=-1, efficiency=-10),
            dict(total_hours=30, efficiency=300),
        ],
    )
    def test_clamped(self, kwargs: dict, scoring_config: ScoringConfig) -> None:
        assert 0 <= calculate_sleep_score(config=scoring_config, **kwargs) <= 100


class TestSleepStages:
    def test_percentages(self) -> None:
        stages = SleepStages(
            deep_sleep=1.5 * HOUR,
            rem_sleep=1.75 * HOUR,
            light_sleep=3.75 * HOUR,
            awake_time=0.5 * HOUR,
            total_sleep=7 * HOUR,
            time_in_bed=7.5 * HOUR,
        )
        assert stages.deep_percent == pytest.approx(1.5 / 7 * 100)
        assert stages.rem_percent == pytest.approx(25.0)
        assert stages.is_healthy

    def test_zero_total_sleep(self) -> None:
        stages = SleepStages(0, 0, 0, 0, 0, 0)
        assert stages.deep_percent == 0
        assert stages.rem_percent == 0
        assert not stages.is_healthy

    def test_low_rem_unhealthy(self) -> None:
        stages = SleepStages(1.5 * HOUR, 0.5 * HOUR, 5 * HOUR, 0, 7 * HOUR, 7 * HOUR)
        assert not stages.is_healthy
