# -*- coding: utf-8 -*-
"""
Data Profiler Configuration

Centralized configuration for the data profiling engine covering:
- Type inference sampling and agreement threshold
- Column statistics limits (top-N values, pattern sampling, IQR fence)
- Severity bands for missing values, duplicate rows and outliers
- Format / type-mismatch detection thresholds
- Pattern mining and missingness correlation limits
- Worker pool, cache sizing and logging

All settings can be overridden via environment variables with the
``DL_DP_`` prefix (e.g. ``DL_DP_MISSING_HIGH_THRESHOLD``).

Example:
    >>> from datalens.data_profiler.config import get_config
    >>> cfg = get_config()
    >>> print(cfg.missing_high_threshold, cfg.correlation_threshold)
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, fields
from typing import Any, Optional

from datalens.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Environment variable prefix
# ---------------------------------------------------------------------------

_ENV_PREFIX = "DL_DP_"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# DataProfilerConfig
# ---------------------------------------------------------------------------


@dataclass
class DataProfilerConfig:
    """Complete configuration for the data profiling engine.

    Percentages are expressed on a 0-100 scale, rates and shares on a
    0.0-1.0 scale.

    Attributes:
        type_inference_sample_size: Non-missing values sampled per column
            when inferring its type.
        type_agreement_threshold: Share of sampled values that must agree
            with a candidate type before it wins over ``string``.
        top_n_values: Number of most frequent values kept for string columns.
        pattern_sample_size: Values per column tested against format patterns.
        pattern_min_match_rate: Minimum match rate for a format pattern to
            be reported on a column.
        iqr_multiplier: IQR fence multiplier for outlier detection.
        missing_high_threshold: Missing percentage above which the
            missing_values issue is ``high``.
        missing_medium_threshold: Missing percentage above which the
            missing_values issue is ``medium``.
        duplicate_high_pct: Duplicate-row percentage above which the
            duplicates issue is ``high``.
        duplicate_medium_pct: Duplicate-row percentage above which the
            duplicates issue is ``medium``.
        outlier_high_density: Outlier percentage of non-missing values above
            which the outliers issue is ``high``.
        outlier_medium_density: Outlier percentage above which the outliers
            issue is ``medium``.
        high_cardinality_threshold: Unique percentage above which a string
            column is flagged as a likely identifier.
        mixed_type_min_share: Share of numeric-looking values that makes a
            string column a data_type_mismatch candidate.
        format_dominance_threshold: Share of values following one format
            above which deviating values count as inconsistent formatting.
        top_n_patterns: Number of missing-data patterns retained.
        top_n_correlations: Number of missingness correlations retained.
        correlation_threshold: Minimum absolute phi coefficient retained.
        heatmap_sample_rows: Maximum rows in a missingness matrix sample.
        max_workers: Threads used for column statistics (1 = sequential).
        cache_max_entries: Maximum profiles held by a ProfileCache.
        log_level: Logging level for the profiler.
    """

    # -- Type inference ------------------------------------------------------
    type_inference_sample_size: int = 1000
    type_agreement_threshold: float = 0.90

    # -- Column statistics ---------------------------------------------------
    top_n_values: int = 10
    pattern_sample_size: int = 1000
    pattern_min_match_rate: float = 0.10
    iqr_multiplier: float = 1.5

    # -- Severity bands ------------------------------------------------------
    missing_high_threshold: float = 30.0
    missing_medium_threshold: float = 10.0
    duplicate_high_pct: float = 10.0
    duplicate_medium_pct: float = 1.0
    outlier_high_density: float = 10.0
    outlier_medium_density: float = 5.0

    # -- Format / type detection ---------------------------------------------
    high_cardinality_threshold: float = 95.0
    mixed_type_min_share: float = 0.50
    format_dominance_threshold: float = 0.80

    # -- Missingness analysis ------------------------------------------------
    top_n_patterns: int = 10
    top_n_correlations: int = 10
    correlation_threshold: float = 0.1
    heatmap_sample_rows: int = 100

    # -- Processing ----------------------------------------------------------
    max_workers: int = 1
    cache_max_entries: int = 32

    # -- Logging -------------------------------------------------------------
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """Check that thresholds are mutually consistent.

        Raises:
            ConfigurationError: If any threshold is out of range or two
                severity bands are inverted.
        """
        problems = []
        if not 0.0 < self.type_agreement_threshold <= 1.0:
            problems.append("type_agreement_threshold must be in (0, 1]")
        if self.missing_medium_threshold > self.missing_high_threshold:
            problems.append(
                "missing_medium_threshold must not exceed missing_high_threshold"
            )
        if self.duplicate_medium_pct > self.duplicate_high_pct:
            problems.append("duplicate_medium_pct must not exceed duplicate_high_pct")
        if self.outlier_medium_density > self.outlier_high_density:
            problems.append(
                "outlier_medium_density must not exceed outlier_high_density"
            )
        if not 0.0 <= self.correlation_threshold < 1.0:
            problems.append("correlation_threshold must be in [0, 1)")
        if self.iqr_multiplier < 0:
            problems.append("iqr_multiplier must be non-negative")
        if self.log_level.upper() not in _LOG_LEVELS:
            problems.append(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        for name in (
            "type_inference_sample_size", "top_n_values", "pattern_sample_size",
            "top_n_patterns", "top_n_correlations", "heatmap_sample_rows",
            "max_workers", "cache_max_entries",
        ):
            if getattr(self, name) < 1:
                problems.append(f"{name} must be at least 1")

        if problems:
            raise ConfigurationError(
                message="Invalid data profiler configuration: " + "; ".join(problems),
                context={"problems": problems},
            )

    # ------------------------------------------------------------------
    # Factory helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> DataProfilerConfig:
        """Build a DataProfilerConfig from environment variables.

        Every field can be overridden via ``DL_DP_<FIELD_UPPER>``.
        Integer values are parsed via ``int()`` and float values via
        ``float()``; unparseable values log a warning and keep the default.

        Returns:
            Populated DataProfilerConfig instance.
        """
        prefix = _ENV_PREFIX

        def _env(name: str, default: Any = None) -> Optional[str]:
            return os.environ.get(f"{prefix}{name}", default)

        def _int(name: str, default: int) -> int:
            val = _env(name)
            if val is None:
                return default
            try:
                return int(val)
            except ValueError:
                logger.warning(
                    "Invalid integer for %s%s=%s, using default %d",
                    prefix, name, val, default,
                )
                return default

        def _float(name: str, default: float) -> float:
            val = _env(name)
            if val is None:
                return default
            try:
                return float(val)
            except ValueError:
                logger.warning(
                    "Invalid float for %s%s=%s, using default %f",
                    prefix, name, val, default,
                )
                return default

        def _str(name: str, default: str) -> str:
            val = _env(name)
            if val is None:
                return default
            return val

        parsers = {int: _int, float: _float, str: _str}
        kwargs = {}
        for f in fields(cls):
            default = f.default
            parser = parsers[type(default)]
            kwargs[f.name] = parser(f.name.upper(), default)

        config = cls(**kwargs)

        logger.info(
            "DataProfilerConfig loaded: agreement=%.2f, top_n=%d, iqr=%.1f, "
            "missing=[M>%.1f H>%.1f], duplicates=[M>%.1f H>%.1f], "
            "outliers=[M>%.1f H>%.1f], patterns=%d, correlations=%d (|r|>%.2f), "
            "workers=%d, cache=%d",
            config.type_agreement_threshold,
            config.top_n_values,
            config.iqr_multiplier,
            config.missing_medium_threshold,
            config.missing_high_threshold,
            config.duplicate_medium_pct,
            config.duplicate_high_pct,
            config.outlier_medium_density,
            config.outlier_high_density,
            config.top_n_patterns,
            config.top_n_correlations,
            config.correlation_threshold,
            config.max_workers,
            config.cache_max_entries,
        )
        return config


# ---------------------------------------------------------------------------
# Thread-safe singleton accessor
# ---------------------------------------------------------------------------

_config_instance: Optional[DataProfilerConfig] = None
_config_lock = threading.Lock()


def get_config() -> DataProfilerConfig:
    """Return the singleton DataProfilerConfig, creating from env if needed.

    Uses double-checked locking for thread safety with minimal
    contention on the hot path.

    Returns:
        DataProfilerConfig singleton instance.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = DataProfilerConfig.from_env()
    return _config_instance


def set_config(config: DataProfilerConfig) -> None:
    """Replace the singleton DataProfilerConfig (useful for testing).

    Args:
        config: New configuration to install.
    """
    global _config_instance
    with _config_lock:
        _config_instance = config
    logger.info("DataProfilerConfig replaced programmatically")


def reset_config() -> None:
    """Reset the singleton (primarily for test teardown)."""
    global _config_instance
    with _config_lock:
        _config_instance = None


__all__ = [
    "DataProfilerConfig",
    "get_config",
    "set_config",
    "reset_config",
]
