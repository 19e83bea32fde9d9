"""Load, validate, and hot-reload the scoring configuration.

The config lives in ``scoring_config.yaml`` alongside this module.  At startup
it is loaded once and cached.  Call ``reload_scoring_config()`` to re-read from
disk after an edit; no restart required.

Usage::

    from src.biometrics.config_loader import get_scoring_config

    config = get_scoring_config()
    config.readiness.weights.hrv              # 0.35
    config.plausible_range("hrvMs")           # PlausibleRange(low=15.0, high=150.0)
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from src.biometrics.base import METRICS_BY_NAME
from src.config import get_settings

logger = logging.getLogger("healthreporter.biometrics.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "scoring_config.yaml"


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass
class PlausibleRange:
    """Closed interval of physiologically plausible values for one metric."""

    low: float
    high: float

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high


@dataclass
class ReadinessWeights:
    hrv: float
    resting_hr: float
    sleep: float
    recovery: float

    @property
    def total(self) -> float:
        return self.hrv + self.resting_hr + self.sleep + self.recovery


@dataclass
class ReadinessConfig:
    """Readiness score computation settings."""

    weights: ReadinessWeights
    neutral_score: int = 50
    sleep_efficiency_bonus_threshold: float = 85.0
    sleep_efficiency_bonus: float = 5.0


@dataclass
class SleepScoreWeights:
    duration: float
    deep: float
    rem: float
    efficiency: float

    @property
    def total(self) -> float:
        return self.duration + self.deep + self.rem + self.efficiency


@dataclass
class SleepScoreConfig:
    weights: SleepScoreWeights
    neutral_score: int = 50


@dataclass
class StrainConfig:
    """TRIMP heuristics.

    ``max_gap_seconds`` and ``last_sample_seconds`` depend on the device's
    sampling rate and are the knobs most worth tuning per source.
    """

    max_gap_seconds: float = 300.0
    last_sample_seconds: float = 60.0
    default_resting_hr: float = 60.0
    zone_thresholds_pct: list[float] = field(default_factory=lambda: [50.0, 60.0, 70.0, 80.0])
    zone_multipliers: dict[int, float] = field(
        default_factory=lambda: {1: 1.0, 2: 2.0, 3: 4.0, 4: 7.0, 5: 10.0}
    )
    max_normalized_score: float = 10.0


@dataclass
class QualityConfig:
    """Data-quality payload settings."""

    daily_window_days: int
    weekly_window_count: int
    week_length_days: int
    gap_warning_days: int
    limited_threshold: int
    good_threshold: int
    high_confidence_threshold: int
    sensor_error_change: dict[str, float]
    reliability_weights: dict[str, float]


@dataclass
class ScoringConfig:
    """Complete, validated scoring configuration.

    This is the single in-memory representation of scoring_config.yaml.
    All calculators and the payload builder read from this object.

    Attributes:
        version:          Config schema version string.
        readiness:        Readiness score weights and constants.
        sleep_score:      Sleep score weights.
        strain:           TRIMP zone and duration heuristics.
        plausible_ranges: Metric wire name → plausible range.
        quality:          Payload window sizes, thresholds and weights.
    """

    version: str
    readiness: ReadinessConfig
    sleep_score: SleepScoreConfig
    strain: StrainConfig
    plausible_ranges: dict[str, PlausibleRange]
    quality: QualityConfig
    _raw: dict = field(default_factory=dict, repr=False)

    def plausible_range(self, metric: str) -> PlausibleRange | None:
        """Return the plausible range for a metric, or None if unbounded."""
        return self.plausible_ranges.get(metric)


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when scoring_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Scoring config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _float_map(raw: Any, section: str, errors: list[str]) -> dict[str, float]:
    """Coerce a mapping of name → number, recording any bad entries."""
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        errors.append(f"'{section}' must be a mapping")
        return {}
    result: dict[str, float] = {}
    for key, val in raw.items():
        try:
            result[key] = float(val)
        except (TypeError, ValueError):
            errors.append(f"{section}.{key} must be a number, got {val!r}")
            continue
        if result[key] < 0:
            errors.append(f"{section}.{key} = {result[key]} must not be negative")
    return result


def _require_weights(
    weights: dict[str, float], names: tuple[str, ...], section: str, errors: list[str]
) -> None:
    for name in names:
        if name not in weights:
            errors.append(f"Missing required key '{name}' in section '{section}'")
            weights[name] = 0.0


def _warn_weight_sum(section: str, total: float) -> None:
    if not (0.95 <= total <= 1.05):
        logger.warning(
            "%s weights sum to %.3f (expected ~1.0). "
            "Scores are normalized by available weight at runtime.",
            section,
            total,
        )


def _validate_and_build(raw: dict) -> ScoringConfig:
    """Validate the raw YAML dict and construct a ScoringConfig.

    Performs structural validation and applies defaults for optional fields.

    Raises:
        ConfigValidationError: If required fields are missing or invalid.
    """
    errors: list[str] = []

    version = str(raw.get("version", "1.0"))

    # ── Readiness ──
    rs_raw = raw.get("readiness") or {}
    rs_weights = _float_map(rs_raw.get("weights"), "readiness.weights", errors)
    _require_weights(rs_weights, ("hrv", "resting_hr", "sleep", "recovery"), "readiness.weights", errors)
    readiness = ReadinessConfig(
        weights=ReadinessWeights(
            hrv=rs_weights["hrv"],
            resting_hr=rs_weights["resting_hr"],
            sleep=rs_weights["sleep"],
            recovery=rs_weights["recovery"],
        ),
        neutral_score=int(rs_raw.get("neutral_score", 50)),
        sleep_efficiency_bonus_threshold=float(rs_raw.get("sleep_efficiency_bonus_threshold", 85)),
        sleep_efficiency_bonus=float(rs_raw.get("sleep_efficiency_bonus", 5)),
    )
    _warn_weight_sum("Readiness", readiness.weights.total)

    # ── Sleep score ──
    ss_raw = raw.get("sleep_score") or {}
    ss_weights = _float_map(ss_raw.get("weights"), "sleep_score.weights", errors)
    _require_weights(ss_weights, ("duration", "deep", "rem", "efficiency"), "sleep_score.weights", errors)
    sleep_score = SleepScoreConfig(
        weights=SleepScoreWeights(
            duration=ss_weights["duration"],
            deep=ss_weights["deep"],
            rem=ss_weights["rem"],
            efficiency=ss_weights["efficiency"],
        ),
        neutral_score=int(ss_raw.get("neutral_score", 50)),
    )
    _warn_weight_sum("Sleep score", sleep_score.weights.total)

    # ── Training strain ──
    ts_raw = raw.get("training_strain") or {}
    strain = StrainConfig()
    if "max_gap_seconds" in ts_raw:
        strain.max_gap_seconds = float(ts_raw["max_gap_seconds"])
    if "last_sample_seconds" in ts_raw:
        strain.last_sample_seconds = float(ts_raw["last_sample_seconds"])
    if "default_resting_hr" in ts_raw:
        strain.default_resting_hr = float(ts_raw["default_resting_hr"])
    if "max_normalized_score" in ts_raw:
        strain.max_normalized_score = float(ts_raw["max_normalized_score"])
    if strain.max_gap_seconds <= 0 or strain.last_sample_seconds < 0:
        errors.append("training_strain durations must be positive")

    thresholds = ts_raw.get("zone_thresholds_pct")
    if thresholds is not None:
        try:
            strain.zone_thresholds_pct = [float(t) for t in thresholds]
        except (TypeError, ValueError):
            errors.append(f"training_strain.zone_thresholds_pct must be numbers, got {thresholds!r}")
        else:
            if len(strain.zone_thresholds_pct) != 4:
                errors.append("training_strain.zone_thresholds_pct must list exactly 4 boundaries")
            elif strain.zone_thresholds_pct != sorted(strain.zone_thresholds_pct):
                errors.append("training_strain.zone_thresholds_pct must be ascending")

    multipliers = ts_raw.get("zone_multipliers")
    if multipliers is not None:
        parsed = _float_map(
            {str(k): v for k, v in multipliers.items()} if isinstance(multipliers, dict) else multipliers,
            "training_strain.zone_multipliers",
            errors,
        )
        try:
            strain.zone_multipliers = {int(k): v for k, v in parsed.items()}
        except ValueError:
            errors.append("training_strain.zone_multipliers keys must be zone numbers 1-5")
        else:
            if set(strain.zone_multipliers) != {1, 2, 3, 4, 5}:
                errors.append("training_strain.zone_multipliers must define zones 1-5")

    # ── Plausible ranges ──
    plausible_ranges: dict[str, PlausibleRange] = {}
    for metric, bounds in (raw.get("plausible_ranges") or {}).items():
        if metric not in METRICS_BY_NAME:
            errors.append(f"plausible_ranges.{metric} is not a known metric")
            continue
        try:
            low, high = (float(b) for b in bounds)
        except (TypeError, ValueError):
            errors.append(f"plausible_ranges.{metric} must be a [low, high] pair, got {bounds!r}")
            continue
        if low > high:
            errors.append(f"plausible_ranges.{metric} has low {low} > high {high}")
            continue
        plausible_ranges[metric] = PlausibleRange(low=low, high=high)

    # ── Data quality ──
    dq_raw = raw.get("data_quality") or {}
    st_raw = dq_raw.get("status_thresholds") or {}
    quality = QualityConfig(
        daily_window_days=int(dq_raw.get("daily_window_days", 14)),
        weekly_window_count=int(dq_raw.get("weekly_window_count", 13)),
        week_length_days=int(dq_raw.get("week_length_days", 7)),
        gap_warning_days=int(dq_raw.get("gap_warning_days", 5)),
        limited_threshold=int(st_raw.get("limited", 5)),
        good_threshold=int(st_raw.get("good", 14)),
        high_confidence_threshold=int(st_raw.get("high_confidence", 30)),
        sensor_error_change=_float_map(
            dq_raw.get("sensor_error_change", {"hrvMs": 0.40, "restingHR": 0.30}),
            "data_quality.sensor_error_change",
            errors,
        ),
        reliability_weights=_float_map(
            dq_raw.get("reliability_weights"), "data_quality.reliability_weights", errors
        ),
    )
    if not (quality.limited_threshold <= quality.good_threshold <= quality.high_confidence_threshold):
        errors.append("data_quality.status_thresholds must be ascending (limited ≤ good ≤ high_confidence)")
    if not quality.reliability_weights:
        errors.append("'data_quality.reliability_weights' section is missing or empty")
    for metric in list(quality.reliability_weights) + list(quality.sensor_error_change):
        if metric not in METRICS_BY_NAME:
            errors.append(f"data_quality references unknown metric '{metric}'")

    if errors:
        raise ConfigValidationError(
            f"scoring_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return ScoringConfig(
        version=version,
        readiness=readiness,
        sleep_score=sleep_score,
        strain=strain,
        plausible_ranges=plausible_ranges,
        quality=quality,
        _raw=raw,
    )


def _resolve_path(path: Path | None) -> Path:
    if path is not None:
        return path
    override = get_settings().scoring_config_path
    return Path(override).expanduser() if override else _CONFIG_PATH


def load_scoring_config(path: Path | None = None) -> ScoringConfig:
    """Load and validate the scoring config from disk.

    Args:
        path: Override path to YAML.  Falls back to ``SCORING_CONFIG_PATH``
              from the environment, then the bundled scoring_config.yaml.

    Returns:
        Validated ScoringConfig instance.
    """
    target = _resolve_path(path)
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded scoring config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: ScoringConfig | None = None
_config_lock = threading.Lock()


def get_scoring_config() -> ScoringConfig:
    """Return the global ScoringConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_scoring_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_scoring_config()
    return _config


def reload_scoring_config(path: Path | None = None) -> ScoringConfig:
    """Reload the scoring config from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_scoring_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info(
        "Reloaded scoring config: %s → %s",
        old_version,
        new_config.version,
    )
    return new_config
