"""Training strain from heart-rate samples (zone-weighted TRIMP).

Each sample is attributed the time until the next sample, capped so that a
watch left on the charger for two hours can't count as two hours in zone 1.
The last sample gets a fixed duration.  Time in each heart-rate-reserve zone
is then weighted by the zone multiplier and summed, in hours.
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable

from src.biometrics.base import HeartRateSample
from src.biometrics.config_loader import ScoringConfig, StrainConfig, get_scoring_config
from src.biometrics.weighting import clamp

logger = logging.getLogger("healthreporter.biometrics.strain")

ZONES = (1, 2, 3, 4, 5)


class TrainingEffect(str, Enum):
    RECOVERY = "Recovery"
    MAINTAINING = "Maintaining"
    IMPROVING = "Improving"
    HIGHLY_IMPROVING = "Highly Improving"
    OVERREACHING = "Overreaching"

    @classmethod
    def from_score(cls, normalized_score: float) -> "TrainingEffect":
        if normalized_score >= 8:
            return cls.OVERREACHING
        if normalized_score >= 6:
            return cls.HIGHLY_IMPROVING
        if normalized_score >= 4:
            return cls.IMPROVING
        if normalized_score >= 2:
            return cls.MAINTAINING
        return cls.RECOVERY

    @property
    def color_hex(self) -> str:
        return _EFFECT_COLORS[self]


_EFFECT_COLORS = {
    TrainingEffect.RECOVERY: "#34C759",
    TrainingEffect.MAINTAINING: "#30D158",
    TrainingEffect.IMPROVING: "#FFD60A",
    TrainingEffect.HIGHLY_IMPROVING: "#FF9F0A",
    TrainingEffect.OVERREACHING: "#FF453A",
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TrainingStrain:
    """Calculated training strain for one set of heart-rate samples.

    Attributes:
        score:           Raw TRIMP (zone-weighted hours).
        heart_rate_zones: Zone (1–5) → seconds attributed.
        peak_hr:         Highest sample value.
        avg_hr:          Arithmetic mean of sample values (not time-weighted).
        duration:        Total attributed seconds.
        training_effect: Bucket of ``normalized_score``.
        calculated_at:   UTC timestamp.
    """

    score: float
    heart_rate_zones: dict[int, float] = field(default_factory=dict)
    peak_hr: float | None = None
    avg_hr: float | None = None
    duration: float = 0.0
    training_effect: TrainingEffect = TrainingEffect.RECOVERY
    calculated_at: datetime = field(default_factory=_utc_now)
    max_score: float = 10.0

    @property
    def normalized_score(self) -> float:
        return clamp(self.score, 0.0, self.max_score)

    @property
    def description(self) -> str:
        s = self.normalized_score
        if s >= 8:
            return "Very High Load"
        if s >= 6:
            return "High Load"
        if s >= 4:
            return "Moderate Load"
        if s >= 2:
            return "Light Load"
        return "Recovery"


def heart_rate_zone(hr: float, max_hr: float, resting_hr: float, cfg: StrainConfig) -> int:
    """Zone 1–5 by percent of heart-rate reserve.

    With the default boundaries: <50 → 1, [50, 60) → 2, [60, 70) → 3,
    [70, 80) → 4, ≥80 → 5.  Caller guarantees ``max_hr > resting_hr``.
    """
    pct = (hr - resting_hr) / (max_hr - resting_hr) * 100
    return bisect.bisect_right(cfg.zone_thresholds_pct, pct) + 1


def _sample_durations(samples: list[HeartRateSample], cfg: StrainConfig) -> list[float]:
    durations = []
    for current, following in zip(samples, samples[1:]):
        gap = (following.timestamp - current.timestamp).total_seconds()
        durations.append(min(gap, cfg.max_gap_seconds))
    durations.append(min(cfg.last_sample_seconds, cfg.max_gap_seconds))
    return durations


def calculate_strain(
    heart_rate_samples: Iterable[HeartRateSample | tuple[float, datetime]],
    max_hr: float,
    resting_hr: float | None = None,
    *,
    config: ScoringConfig | None = None,
) -> TrainingStrain:
    """Compute training strain from a stream of heart-rate samples.

    Args:
        heart_rate_samples: ``(value, timestamp)`` pairs in any order.
        max_hr:             Maximum heart rate (see ``estimate_max_hr``).
        resting_hr:         Resting heart rate; defaults to the configured 60.
        config:             Scoring config override.

    Returns:
        TrainingStrain.  Empty input or ``max_hr <= resting_hr`` yields a
        zero-strain RECOVERY result.
    """
    cfg = (config or get_scoring_config()).strain
    if resting_hr is None:
        resting_hr = cfg.default_resting_hr

    samples = sorted(
        (HeartRateSample(*s) for s in heart_rate_samples),
        key=lambda s: s.timestamp,
    )

    if not samples or max_hr <= resting_hr:
        return TrainingStrain(score=0.0, max_score=cfg.max_normalized_score)

    zones: dict[int, float] = {z: 0.0 for z in ZONES}
    for sample, seconds in zip(samples, _sample_durations(samples, cfg)):
        zones[heart_rate_zone(sample.value, max_hr, resting_hr, cfg)] += seconds

    trimp = sum(zones[z] / 3600 * cfg.zone_multipliers[z] for z in ZONES)

    values = [s.value for s in samples]
    peak = max(values)
    strain = TrainingStrain(
        score=trimp,
        heart_rate_zones=zones,
        peak_hr=peak if peak > 0 else None,
        avg_hr=sum(values) / len(values),
        duration=sum(zones.values()),
        max_score=cfg.max_normalized_score,
    )
    strain.training_effect = TrainingEffect.from_score(strain.normalized_score)

    logger.debug(
        "Strain %.2f (TRIMP %.3f) over %d samples, %.0fs: zones=%s",
        strain.normalized_score,
        trimp,
        len(samples),
        strain.duration,
        zones,
    )
    return strain
