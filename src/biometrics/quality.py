"""Coverage, quality status, anomaly flags and reliability for a daily history.

Flags are plain strings, since they are informational context for the
consumer rather than errors:

    DATA_GAP_WARNING: More than 5 consecutive days without data
    INSUFFICIENT_DATA: hrvMs (3/42 days)
    POTENTIAL_SENSOR_ERROR: HRV change of 60% on 2026-02-14
"""

from __future__ import annotations

import logging
from typing import Sequence

from src.biometrics.base import RawDailyEntry
from src.biometrics.config_loader import QualityConfig, ScoringConfig
from src.biometrics.normalization import has_any, normalize_missing, valid_value
from src.biometrics.weighting import WeightedAccumulator, clamp_score
from src.models.payload import QualityStatus

logger = logging.getLogger("healthreporter.biometrics.quality")

# Metrics counted in coverageValidDays / dataQualityStatus, in output order
COVERAGE_METRICS: tuple[str, ...] = (
    "sleepHours",
    "hrvMs",
    "restingHR",
    "vo2max",
    "steps",
    "activeCalories",
    "trainingLoad",
    "readinessScore",
    "weightKg",
    "bodyFatPercent",
)

# A day without any of these counts toward a data gap
GAP_METRICS: tuple[str, ...] = ("sleepHours", "hrvMs", "steps")

_SENSOR_LABELS = {"hrvMs": "HRV", "restingHR": "RHR"}


def calculate_coverage(entries: Sequence[RawDailyEntry], config: ScoringConfig) -> dict[str, int]:
    """Count, per coverage metric, the days with a present, in-range value."""
    return {
        metric: sum(1 for e in entries if valid_value(e, metric, config) is not None)
        for metric in COVERAGE_METRICS
    }


def quality_status(valid_days: int, cfg: QualityConfig) -> QualityStatus:
    """<5 → INSUFFICIENT, [5, 14) → LIMITED, [14, 30) → GOOD, ≥30 → HIGH_CONFIDENCE."""
    if valid_days < cfg.limited_threshold:
        return QualityStatus.INSUFFICIENT_DATA
    if valid_days < cfg.good_threshold:
        return QualityStatus.LIMITED_DATA
    if valid_days < cfg.high_confidence_threshold:
        return QualityStatus.GOOD_DATA
    return QualityStatus.HIGH_CONFIDENCE_DATA


def determine_quality_status(coverage: dict[str, int], config: ScoringConfig) -> dict[str, QualityStatus]:
    return {metric: quality_status(count, config.quality) for metric, count in coverage.items()}


def _gap_flags(entries: Sequence[RawDailyEntry], cfg: QualityConfig) -> list[str]:
    flags = []
    run = 0
    for entry in entries:
        if has_any(entry, GAP_METRICS):
            run = 0
            continue
        run += 1
        if run == cfg.gap_warning_days:
            flags.append(
                f"DATA_GAP_WARNING: More than {cfg.gap_warning_days} consecutive days without data"
            )
    return flags


def _sensor_error_flags(entries: Sequence[RawDailyEntry], cfg: QualityConfig) -> list[str]:
    """Flag day-over-day jumps larger than the configured fraction of the prior value."""
    flags = []
    for prev, curr in zip(entries, entries[1:]):
        for metric, threshold in cfg.sensor_error_change.items():
            before = normalize_missing(prev.value(metric))
            after = normalize_missing(curr.value(metric))
            if before is None or after is None or before <= 0:
                continue
            change = abs(after - before) / before
            if change > threshold:
                label = _SENSOR_LABELS.get(metric, metric)
                flags.append(
                    f"POTENTIAL_SENSOR_ERROR: {label} change of {int(change * 100)}% "
                    f"on {curr.date.isoformat()}"
                )
    return flags


def generate_flags(
    entries: Sequence[RawDailyEntry],
    coverage: dict[str, int],
    config: ScoringConfig,
) -> list[str]:
    """Build the anomaly flag list.

    Args:
        entries:  History sorted by date ascending.
        coverage: Output of :func:`calculate_coverage`.
        config:   Scoring config.

    Returns:
        Gap warnings, then insufficient-data flags in coverage-metric order,
        then sensor-error suspicions in date order.
    """
    cfg = config.quality
    flags = _gap_flags(entries, cfg)
    flags.extend(
        f"INSUFFICIENT_DATA: {metric} ({count}/{len(entries)} days)"
        for metric, count in coverage.items()
        if count < cfg.limited_threshold
    )
    flags.extend(_sensor_error_flags(entries, cfg))
    return flags


def calculate_reliability_score(coverage: dict[str, int], total_days: int, config: ScoringConfig) -> int:
    """Weighted blend of per-metric coverage ratios, scaled to 0–100.

    Returns 0 for an empty history.
    """
    if total_days <= 0:
        return 0

    acc = WeightedAccumulator()
    for metric, weight in config.quality.reliability_weights.items():
        acc.add(coverage.get(metric, 0) / total_days, weight)

    score = clamp_score(acc.result(default=0.0) * 100)
    logger.debug("Reliability %d over %d days", score, total_days)
    return score
