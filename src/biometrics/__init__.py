"""Health Reporter scoring and data-quality core.

Pure, synchronous calculations over a finite batch of daily wearable data.
Nothing here performs I/O beyond reading the scoring config.

Core modules:
    base:            RawDailyEntry, HeartRateSample and the metric catalogue
    config_loader:   Load/validate/hot-reload scoring_config.yaml
    normalization:   Missing-value normalization and outlier detection
    weighting:       Weighted-mean accumulator and half-up rounding
    readiness_score: Calculated readiness score
    training_strain: Heart-rate-zone TRIMP strain
    sleep_metrics:   Sleep efficiency, sleep score, stage breakdown
    trends:          HRV trend and max-HR estimation
    quality:         Coverage, quality status, flags, reliability
    payload_builder: Quality-annotated payload for downstream analysis
"""

from src.biometrics.base import (
    DataSource,
    FieldStatus,
    HeartRateSample,
    RawDailyEntry,
)
from src.biometrics.config_loader import ScoringConfig, get_scoring_config

__all__ = [
    "RawDailyEntry",
    "HeartRateSample",
    "FieldStatus",
    "DataSource",
    "ScoringConfig",
    "get_scoring_config",
]
