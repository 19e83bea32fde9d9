"""Calculated readiness score.

Computes a 0–100 readiness score for devices that don't sync one of their
own, by comparing today's HRV and resting HR to a 7-day baseline and folding
in last night's sleep and yesterday's training strain.

Score formula (weights from scoring_config.yaml):
    - HRV vs 7-day baseline         (weight: 0.35)
    - Resting HR vs 7-day baseline  (weight: 0.25)
    - Sleep duration + efficiency   (weight: 0.30)
    - Recovery from prior strain    (weight: 0.10)

Components with no input are left out and the remaining weights are
renormalized.  With no usable input at all the score is the neutral 50.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from src.biometrics.base import DataSource
from src.biometrics.config_loader import ReadinessConfig, ScoringConfig, get_scoring_config
from src.biometrics.weighting import WeightedAccumulator, clamp, clamp_score

logger = logging.getLogger("healthreporter.biometrics.readiness")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ReadinessComponents:
    """Per-component sub-scores (0–100); None where the input was unavailable.

    Attributes:
        hrv_score:           HRV vs baseline.
        rhr_score:           Resting HR vs baseline.
        sleep_score:         Sleep duration with efficiency bonus.
        recovery_score:      Recovery from yesterday's strain.
        recovery_trend:      HRV trend (-1..+1), informational only.
        previous_day_strain: Yesterday's strain (0–10) as supplied.
    """

    hrv_score: float | None = None
    rhr_score: float | None = None
    sleep_score: float | None = None
    recovery_score: float | None = None
    recovery_trend: float | None = None
    previous_day_strain: float | None = None


@dataclass
class ReadinessScore:
    """A calculated readiness score.

    Attributes:
        score:         Final 0–100 score.
        components:    Sub-score breakdown.
        data_source:   Device family the inputs came from.
        calculated_at: UTC timestamp.
        is_calculated: True when computed here rather than read from a device.
    """

    score: int
    components: ReadinessComponents = field(default_factory=ReadinessComponents)
    data_source: DataSource = DataSource.AUTO_DETECT
    calculated_at: datetime = field(default_factory=_utc_now)
    is_calculated: bool = True

    @property
    def description(self) -> str:
        if self.score >= 85:
            return "Excellent"
        if self.score >= 70:
            return "Good"
        if self.score >= 50:
            return "Moderate"
        if self.score >= 30:
            return "Low"
        return "Very Low"

    @property
    def color_hex(self) -> str:
        if self.score >= 85:
            return "#34C759"
        if self.score >= 70:
            return "#30D158"
        if self.score >= 50:
            return "#FFD60A"
        if self.score >= 30:
            return "#FF9F0A"
        return "#FF453A"


# ---------------------------------------------------------------------------
# Component scorers
# ---------------------------------------------------------------------------


def _score_hrv(hrv: float | None, baseline: float | None) -> float | None:
    """Higher HRV relative to baseline = better.  At or above baseline scores 100."""
    if hrv is None or baseline is None or baseline <= 0:
        return None
    return clamp(hrv / baseline * 100, 0, 100)


def _score_rhr(rhr: float | None, baseline: float | None) -> float | None:
    """Resting HR at baseline scores 85; each 1% below baseline adds 0.5."""
    if rhr is None or baseline is None or baseline <= 0:
        return None
    deviation = (baseline - rhr) / baseline
    return clamp(85 + deviation * 50, 0, 100)


def _score_sleep(
    hours: float | None,
    efficiency: float | None,
    cfg: ReadinessConfig,
) -> float | None:
    """Piecewise duration score, plus a bonus for efficient sleep.

    [7, 9] → 100, [6, 7) → 80, (9, 10] → 90, [5, 6) → 60,
    otherwise max(20, 40 + 5·hours).
    """
    if hours is None:
        return None

    if 7 <= hours <= 9:
        score = 100.0
    elif 6 <= hours < 7:
        score = 80.0
    elif 9 < hours <= 10:
        score = 90.0
    elif 5 <= hours < 6:
        score = 60.0
    else:
        score = max(20.0, 40 + hours * 5)

    if efficiency is not None and efficiency > cfg.sleep_efficiency_bonus_threshold:
        score = min(100.0, score + cfg.sleep_efficiency_bonus)
    return score


def _score_recovery(previous_day_strain: float | None) -> float | None:
    """Strain above 5 costs 5 points per unit, floored at 50."""
    if previous_day_strain is None:
        return None
    penalty = max(0.0, (previous_day_strain - 5) * 5)
    return max(50.0, 100 - penalty)


# ---------------------------------------------------------------------------
# Main calculator
# ---------------------------------------------------------------------------


class ReadinessCalculator:
    """Compute the readiness score from today's metrics and 7-day baselines.

    Usage::

        calc = ReadinessCalculator()
        result = calc.compute(hrv=58, hrv_baseline_7d=52, sleep_hours=7.4)
        print(result.score, result.description)
    """

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self._config = config or get_scoring_config()

    @property
    def _rs_config(self) -> ReadinessConfig:
        return self._config.readiness

    def compute(
        self,
        hrv: float | None = None,
        hrv_baseline_7d: float | None = None,
        rhr: float | None = None,
        rhr_baseline_7d: float | None = None,
        sleep_hours: float | None = None,
        sleep_efficiency: float | None = None,
        previous_day_strain: float | None = None,
        recovery_trend: float | None = None,
        data_source: DataSource = DataSource.AUTO_DETECT,
    ) -> ReadinessScore:
        """Compute the readiness score.

        Every input is optional; a missing input drops its component.

        Args:
            hrv:                 Today's HRV (ms).
            hrv_baseline_7d:     Mean HRV over the previous 7 days.
            rhr:                 Today's resting HR (bpm).
            rhr_baseline_7d:     Mean resting HR over the previous 7 days.
            sleep_hours:         Last night's total sleep.
            sleep_efficiency:    Last night's sleep efficiency (%).
            previous_day_strain: Yesterday's training strain (0–10).
            recovery_trend:      HRV trend from ``hrv_trend()``; reported, not weighted.
            data_source:         Device family for display.

        Returns:
            ReadinessScore with a 0–100 score and component breakdown.
        """
        cfg = self._rs_config
        weights = cfg.weights

        components = ReadinessComponents(
            hrv_score=_score_hrv(hrv, hrv_baseline_7d),
            rhr_score=_score_rhr(rhr, rhr_baseline_7d),
            sleep_score=_score_sleep(sleep_hours, sleep_efficiency, cfg),
            recovery_score=_score_recovery(previous_day_strain),
            recovery_trend=recovery_trend,
            previous_day_strain=previous_day_strain,
        )

        acc = WeightedAccumulator()
        for score, weight in (
            (components.hrv_score, weights.hrv),
            (components.rhr_score, weights.resting_hr),
            (components.sleep_score, weights.sleep),
            (components.recovery_score, weights.recovery),
        ):
            if score is not None:
                acc.add(score, weight)

        final_score = clamp_score(acc.result(default=cfg.neutral_score))

        logger.debug(
            "Readiness %d from %.2f weight: HRV=%s RHR=%s Sleep=%s Recovery=%s",
            final_score,
            acc.total_weight,
            components.hrv_score,
            components.rhr_score,
            components.sleep_score,
            components.recovery_score,
        )

        return ReadinessScore(
            score=final_score,
            components=components,
            data_source=data_source,
            is_calculated=True,
        )


def calculate_readiness(
    hrv: float | None = None,
    hrv_baseline_7d: float | None = None,
    rhr: float | None = None,
    rhr_baseline_7d: float | None = None,
    sleep_hours: float | None = None,
    sleep_efficiency: float | None = None,
    previous_day_strain: float | None = None,
    *,
    config: ScoringConfig | None = None,
    **kwargs,
) -> ReadinessScore:
    """Functional shortcut for ``ReadinessCalculator(config).compute(...)``."""
    return ReadinessCalculator(config).compute(
        hrv=hrv,
        hrv_baseline_7d=hrv_baseline_7d,
        rhr=rhr,
        rhr_baseline_7d=rhr_baseline_7d,
        sleep_hours=sleep_hours,
        sleep_efficiency=sleep_efficiency,
        previous_day_strain=previous_day_strain,
        **kwargs,
    )
