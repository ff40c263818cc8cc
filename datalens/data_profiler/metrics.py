# -*- coding: utf-8 -*-
"""
Prometheus Metrics - DataLens Data Profiler

10 Prometheus metrics for monitoring the profiling engine.

Metrics:
    1.  dl_dp_profiles_generated_total (Counter, labels: outcome)
    2.  dl_dp_columns_profiled_total (Counter, labels: column_type)
    3.  dl_dp_quality_issues_total (Counter, labels: issue_type, severity)
    4.  dl_dp_missing_patterns_total (Counter)
    5.  dl_dp_missingness_correlations_total (Counter)
    6.  dl_dp_stage_duration_seconds (Histogram, labels: stage)
    7.  dl_dp_contract_errors_total (Counter, labels: reason)
    8.  dl_dp_cache_lookups_total (Counter, labels: result)
    9.  dl_dp_active_profiles (Gauge)
    10. dl_dp_profile_rows (Histogram)
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Gauge, Histogram

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

# 1. Profiling runs by outcome (success, empty, cancelled, error)
dp_profiles_generated_total = Counter(
    "dl_dp_profiles_generated_total",
    "Total profiling runs",
    labelnames=["outcome"],
)

# 2. Columns profiled by resolved column type
dp_columns_profiled_total = Counter(
    "dl_dp_columns_profiled_total",
    "Total columns profiled",
    labelnames=["column_type"],
)

# 3. Quality issues by type and severity
dp_quality_issues_total = Counter(
    "dl_dp_quality_issues_total",
    "Total data quality issues detected",
    labelnames=["issue_type", "severity"],
)

# 4. Missing-data patterns retained
dp_missing_patterns_total = Counter(
    "dl_dp_missing_patterns_total",
    "Total missing-data patterns retained in profiles",
)

# 5. Missingness correlations retained
dp_missingness_correlations_total = Counter(
    "dl_dp_missingness_correlations_total",
    "Total missingness correlations retained in profiles",
)

# 6. Stage duration histogram
dp_stage_duration_seconds = Histogram(
    "dl_dp_stage_duration_seconds",
    "Data profiler stage duration in seconds",
    labelnames=["stage"],
    buckets=(
        0.001, 0.005, 0.01, 0.05, 0.1, 0.25,
        0.5, 1.0, 2.5, 5.0, 10.0, 30.0,
    ),
)

# 7. Caller contract violations
dp_contract_errors_total = Counter(
    "dl_dp_contract_errors_total",
    "Total profiling requests rejected for contract violations",
    labelnames=["reason"],
)

# 8. Profile cache lookups by result (hit, miss)
dp_cache_lookups_total = Counter(
    "dl_dp_cache_lookups_total",
    "Total profile cache lookups",
    labelnames=["result"],
)

# 9. Profiling runs in flight
dp_active_profiles = Gauge(
    "dl_dp_active_profiles",
    "Number of currently running profiling operations",
)

# 10. Dataset size distribution
dp_profile_rows = Histogram(
    "dl_dp_profile_rows",
    "Number of rows per profiled dataset",
    buckets=(
        0, 10, 100, 1_000, 10_000, 100_000, 1_000_000,
    ),
)


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def record_profile(outcome: str, total_rows: int = 0) -> None:
    """Record a profiling run.

    Args:
        outcome: One of ``success``, ``empty``, ``cancelled``, ``error``.
        total_rows: Rows in the profiled dataset.
    """
    dp_profiles_generated_total.labels(outcome=outcome).inc()
    if outcome in ("success", "empty"):
        dp_profile_rows.observe(total_rows)


def record_column_profile(column_type: str) -> None:
    """Record one column profiled.

    Args:
        column_type: Resolved column type value.
    """
    dp_columns_profiled_total.labels(column_type=column_type).inc()


def record_quality_issue(issue_type: str, severity: str) -> None:
    """Record a detected quality issue.

    Args:
        issue_type: Issue type value.
        severity: Issue severity value.
    """
    dp_quality_issues_total.labels(
        issue_type=issue_type,
        severity=severity,
    ).inc()


def record_patterns(count: int) -> None:
    """Record retained missing-data patterns."""
    if count > 0:
        dp_missing_patterns_total.inc(count)


def record_correlations(count: int) -> None:
    """Record retained missingness correlations."""
    if count > 0:
        dp_missingness_correlations_total.inc(count)


def record_stage_duration(stage: str, duration: float) -> None:
    """Record the duration of one pipeline stage.

    Args:
        stage: Stage name (type_inference, column_statistics, ...).
        duration: Duration in seconds.
    """
    dp_stage_duration_seconds.labels(stage=stage).observe(duration)


def record_contract_error(reason: str) -> None:
    """Record a rejected profiling request.

    Args:
        reason: Short violation tag (duplicate_columns, missing_key, not_mapping).
    """
    dp_contract_errors_total.labels(reason=reason).inc()


def record_cache_lookup(hit: bool) -> None:
    """Record a cache lookup result."""
    dp_cache_lookups_total.labels(result="hit" if hit else "miss").inc()


def update_active_profiles(delta: int) -> None:
    """Adjust the in-flight profiling gauge.

    Args:
        delta: +1 on start, -1 on completion.
    """
    if delta > 0:
        dp_active_profiles.inc(delta)
    elif delta < 0:
        dp_active_profiles.dec(abs(delta))


__all__ = [
    # Metric objects
    "dp_profiles_generated_total",
    "dp_columns_profiled_total",
    "dp_quality_issues_total",
    "dp_missing_patterns_total",
    "dp_missingness_correlations_total",
    "dp_stage_duration_seconds",
    "dp_contract_errors_total",
    "dp_cache_lookups_total",
    "dp_active_profiles",
    "dp_profile_rows",
    # Helper functions
    "record_profile",
    "record_column_profile",
    "record_quality_issue",
    "record_patterns",
    "record_correlations",
    "record_stage_duration",
    "record_contract_error",
    "record_cache_lookup",
    "update_active_profiles",
]
