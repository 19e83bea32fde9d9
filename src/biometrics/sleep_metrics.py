"""Sleep efficiency, Oura-style sleep score and stage breakdown."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from src.biometrics.config_loader import ScoringConfig, get_scoring_config
from src.biometrics.weighting import WeightedAccumulator, clamp, clamp_score

logger = logging.getLogger("healthreporter.biometrics.sleep")


@dataclass
class SleepEfficiency:
    """Time asleep as a share of time in bed.

    Attributes:
        percentage:       0–100.
        total_sleep_time: Seconds asleep.
        time_in_bed:      Seconds in bed.
        awake_time:       Seconds in bed but awake (never negative).
    """

    percentage: float
    total_sleep_time: float
    time_in_bed: float
    awake_time: float

    @property
    def description(self) -> str:
        if self.percentage >= 90:
            return "Excellent"
        if self.percentage >= 85:
            return "Very Good"
        if self.percentage >= 80:
            return "Good"
        if self.percentage >= 70:
            return "Moderate"
        return "Low"


@dataclass
class SleepStages:
    """Durations (seconds) of one night's sleep stages."""

    deep_sleep: float
    rem_sleep: float
    light_sleep: float
    awake_time: float
    total_sleep: float
    time_in_bed: float

    def _pct(self, stage: float) -> float:
        return stage / self.total_sleep * 100 if self.total_sleep > 0 else 0.0

    @property
    def deep_percent(self) -> float:
        return self._pct(self.deep_sleep)

    @property
    def rem_percent(self) -> float:
        return self._pct(self.rem_sleep)

    @property
    def light_percent(self) -> float:
        return self._pct(self.light_sleep)

    @property
    def is_healthy(self) -> bool:
        # Deep 13–23%, REM 20–25%; only the lower bounds are enforced
        return self.deep_percent >= 13 and self.rem_percent >= 20


def calculate_sleep_efficiency(total_sleep_time: float, time_in_bed: float) -> SleepEfficiency:
    """Return sleep efficiency; zero time in bed gives 0% and 0 awake time."""
    if time_in_bed <= 0:
        return SleepEfficiency(
            percentage=0.0,
            total_sleep_time=total_sleep_time,
            time_in_bed=time_in_bed,
            awake_time=0.0,
        )

    return SleepEfficiency(
        percentage=clamp(total_sleep_time / time_in_bed * 100, 0.0, 100.0),
        total_sleep_time=total_sleep_time,
        time_in_bed=time_in_bed,
        awake_time=max(0.0, time_in_bed - total_sleep_time),
    )


# ---------------------------------------------------------------------------
# Sleep score component scorers (each returns 0–100)
# ---------------------------------------------------------------------------


def _duration_score(hours: float) -> float:
    if 7 <= hours <= 9:
        return 100.0
    if 6 <= hours < 7:
        return 80.0
    if 5 <= hours < 6:
        return 60.0
    if 9 < hours <= 10:
        return 90.0
    return max(20.0, hours * 10)


def _deep_score(deep: float) -> float:
    # Target 1.5–2.5h
    if 1.5 <= deep <= 2.5:
        return 100.0
    if 1 <= deep < 1.5:
        return 75.0
    if 2.5 < deep < 3:
        return 90.0
    return max(30.0, deep * 40)


def _rem_score(rem: float) -> float:
    # Target 1.5–2.5h
    if 1.5 <= rem <= 2.5:
        return 100.0
    if 1 <= rem < 1.5:
        return 70.0
    if 2.5 < rem < 3:
        return 90.0
    return max(30.0, rem * 35)


def _efficiency_score(efficiency: float) -> float:
    if 90 <= efficiency <= 100:
        return 100.0
    if 85 <= efficiency < 90:
        return 90.0
    if 80 <= efficiency < 85:
        return 75.0
    return max(30.0, efficiency)


def calculate_sleep_score(
    total_hours: float,
    deep_hours: float | None = None,
    rem_hours: float | None = None,
    efficiency: float | None = None,
    *,
    config: ScoringConfig | None = None,
) -> int:
    """Oura-style 0–100 sleep score.

    Duration (40%) is always scored; deep (25%), REM (20%) and efficiency
    (15%) join the weighted average only when supplied.
    """
    cfg = (config or get_scoring_config()).sleep_score
    weights = cfg.weights

    acc = WeightedAccumulator()
    acc.add(_duration_score(total_hours), weights.duration)
    if deep_hours is not None:
        acc.add(_deep_score(deep_hours), weights.deep)
    if rem_hours is not None:
        acc.add(_rem_score(rem_hours), weights.rem)
    if efficiency is not None:
        acc.add(_efficiency_score(efficiency), weights.efficiency)

    score = clamp_score(acc.result(default=cfg.neutral_score))
    logger.debug("Sleep score %d for %.2fh (weight %.2f)", score, total_hours, acc.total_weight)
    return score
