# -*- coding: utf-8 -*-
"""
Data Profiler Service - DataLens

Provides the ``DataProfilerService`` facade, which wires configuration,
the profiling pipeline, the profile cache and the missing data report
behind a single entry point, and ``get_data_profiler_service()`` for a
process-wide instance.

Usage:
    >>> from datalens.data_profiler.service import DataProfilerService
    >>> service = DataProfilerService()
    >>> profile = service.profile(rows, ["age", "city"])
    >>> report_json = service.export_missing_data_report(rows, ["age", "city"])
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Mapping, Optional, Sequence

from datalens.data_profiler.config import DataProfilerConfig, get_config
from datalens.data_profiler.models import (
    DataProfile,
    MissingDataReport,
    MissingnessMatrixSample,
)
from datalens.data_profiler.profile_aggregator import ColumnTypes, DataProfiler
from datalens.data_profiler.profile_cache import ProfileCache
from datalens.data_profiler.report import (
    build_missing_data_report,
    sample_missingness_matrix,
)

logger = logging.getLogger(__name__)


class DataProfilerService:
    """Unified facade over the DataLens profiling engine.

    Profiles are cached by content hash, so asking again for an unchanged
    dataset returns an equal copy of the earlier DataProfile without
    re-profiling. Any change to rows, columns, column types or settings
    misses the cache and re-profiles from scratch.

    Attributes:
        config: DataProfilerConfig in use.
        profiler: DataProfiler running the pipeline.
        cache: ProfileCache holding recent profiles.

    Example:
        >>> service = DataProfilerService()
        >>> profile = service.profile([{"x": 1}, {"x": None}], ["x"])
        >>> profile.columns["x"].missing
        1
    """

    def __init__(
        self,
        config: Optional[DataProfilerConfig] = None,
        cache: Optional[ProfileCache] = None,
    ) -> None:
        """Initialize the service facade.

        Args:
            config: Optional configuration. Uses global config if None.
            cache: Optional cache to share between services.
        """
        self.config = config or get_config()
        self.profiler = DataProfiler(self.config)
        self.cache = cache if cache is not None else ProfileCache(config=self.config)
        self._lock = threading.Lock()
        self._profiles_requested = 0
        self._reports_built = 0
        logger.info("DataProfilerService facade created")

    # ------------------------------------------------------------------
    # Profiling
    # ------------------------------------------------------------------

    def profile(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Sequence[str],
        column_types: Optional[ColumnTypes] = None,
        cancel_event: Optional[threading.Event] = None,
        use_cache: bool = True,
    ) -> DataProfile:
        """Profile a dataset, reusing a cached profile when possible.

        Args:
            rows: Dataset rows.
            columns: Ordered, unique column names.
            column_types: Optional column type overrides.
            cancel_event: Optional event checked between pipeline stages.
            use_cache: Set False to bypass the cache entirely.

        Returns:
            DataProfile for the dataset.

        Raises:
            ProfilingContractError: If the input breaks the contract.
            ProfilingCancelledError: If ``cancel_event`` is set mid-run.
        """
        with self._lock:
            self._profiles_requested += 1

        if not use_cache:
            return self.profiler.profile(rows, columns, column_types, cancel_event)

        def _compute(r: Any, c: Any, t: Any) -> DataProfile:
            return self.profiler.profile(r, c, t, cancel_event)

        return self.cache.get_or_compute(
            rows, columns, column_types, _compute, config=self.config,
        )

    def invalidate_cache(self) -> None:
        """Drop all cached profiles."""
        self.cache.invalidate()

    # ------------------------------------------------------------------
    # Missing data report
    # ------------------------------------------------------------------

    def missing_data_report(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Sequence[str],
        column_types: Optional[ColumnTypes] = None,
    ) -> MissingDataReport:
        """Build the missing data report for a dataset.

        Args:
            rows: Dataset rows.
            columns: Ordered, unique column names.
            column_types: Optional column type overrides.

        Returns:
            MissingDataReport derived from the (possibly cached) profile.
        """
        profile = self.profile(rows, columns, column_types)
        report = build_missing_data_report(profile, rows, columns)
        with self._lock:
            self._reports_built += 1
        return report

    def export_missing_data_report(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Sequence[str],
        column_types: Optional[ColumnTypes] = None,
    ) -> str:
        """Return the missing data report as indented JSON."""
        return self.missing_data_report(rows, columns, column_types).to_json()

    def missingness_matrix(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Sequence[str],
        max_rows: Optional[int] = None,
    ) -> MissingnessMatrixSample:
        """Sample the missingness matrix for a heatmap.

        Args:
            rows: Dataset rows.
            columns: Ordered column names.
            max_rows: Sample bound; defaults to ``heatmap_sample_rows``.

        Returns:
            Fixed-stride MissingnessMatrixSample.
        """
        limit = max_rows if max_rows is not None else self.config.heatmap_sample_rows
        return sample_missingness_matrix(rows, columns, limit)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_statistics(self) -> Dict[str, Any]:
        """Get request counters and cache statistics."""
        with self._lock:
            stats: Dict[str, Any] = {
                "profiles_requested": self._profiles_requested,
                "reports_built": self._reports_built,
            }
        stats["cache"] = self.cache.get_statistics()
        return stats

    def health_check(self) -> Dict[str, Any]:
        """Perform a health check on the service.

        Returns:
            Health status dict.
        """
        return {
            "status": "healthy",
            "service": "data-profiler",
            "cached_profiles": len(self.cache),
            "max_workers": self.config.max_workers,
        }


# ---------------------------------------------------------------------------
# Process-wide instance
# ---------------------------------------------------------------------------

_service_instance: Optional[DataProfilerService] = None
_service_lock = threading.Lock()


def get_data_profiler_service() -> DataProfilerService:
    """Return the process-wide DataProfilerService, creating it on first use."""
    global _service_instance
    if _service_instance is None:
        with _service_lock:
            if _service_instance is None:
                _service_instance = DataProfilerService()
    return _service_instance


def reset_data_profiler_service() -> None:
    """Discard the process-wide service (primarily for test teardown)."""
    global _service_instance
    with _service_lock:
        _service_instance = None


__all__ = [
    "DataProfilerService",
    "get_data_profiler_service",
    "reset_data_profiler_service",
]
