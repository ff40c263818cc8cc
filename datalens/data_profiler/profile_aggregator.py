# -*- coding: utf-8 -*-
"""
Profile Aggregator and Orchestrator - DataLens Data Profiler

ProfileAggregator merges the outputs of the pipeline stages and the
dataset-level overview counts into one frozen DataProfile.

DataProfiler runs the whole pipeline for one dataset snapshot:

    1. Validate the input contract (unique columns, mapping rows, every
       declared column present as a key in every row).
    2. Resolve column types (caller-supplied, coerced from legacy names,
       or inferred).
    3. Compute column statistics, optionally on a thread pool.
    4. Count duplicate rows.
    5. Detect quality issues.
    6. Mine missing-data patterns.
    7. Correlate missingness.
    8. Aggregate.

A ``threading.Event`` passed as ``cancel_event`` is checked between stages;
a set event raises ProfilingCancelledError and no partial profile escapes.
Given the same dataset and configuration the output is identical apart
from ``generated_at``, whether or not a thread pool is used.

Example:
    >>> from datalens.data_profiler.profile_aggregator import DataProfiler
    >>> rows = [{"A": 1, "B": None}, {"A": None, "B": 2},
    ...         {"A": 3, "B": None}, {"A": 4, "B": 4}]
    >>> profile = DataProfiler().profile(rows, ["A", "B"])
    >>> profile.overview.completeness
    25.0
"""

from __future__ import annotations

import json
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    Union,
)

from datalens.data_profiler.column_statistics import (
    ColumnStatisticsCalculator,
    value_key,
)
from datalens.data_profiler.config import DataProfilerConfig, get_config
from datalens.data_profiler.metrics import (
    record_column_profile,
    record_contract_error,
    record_correlations,
    record_patterns,
    record_profile,
    record_quality_issue,
    record_stage_duration,
    update_active_profiles,
)
from datalens.data_profiler.missingness_correlator import MissingnessCorrelator
from datalens.data_profiler.models import (
    ColumnProfile,
    ColumnType,
    DataProfile,
    DataQualityIssue,
    MissingDataPattern,
    MissingnessCorrelation,
    ProfileOverview,
)
from datalens.data_profiler.pattern_miner import PatternMiner
from datalens.data_profiler.quality_issue_detector import QualityIssueDetector
from datalens.data_profiler.type_inferencer import TypeInferencer
from datalens.exceptions import (
    ProfilingCancelledError,
    ProfilingContractError,
    format_exception_chain,
)

logger = logging.getLogger(__name__)

ColumnTypes = Mapping[str, Union[ColumnType, str]]


# ---------------------------------------------------------------------------
# Overview helpers
# ---------------------------------------------------------------------------


def estimate_memory(rows: Sequence[Mapping[str, Any]]) -> int:
    """Estimate memory usage of a dataset in bytes.

    Uses a heuristic: serialise up to 100 rows to JSON, average their byte
    length and add overhead per row for Python object bookkeeping.

    Args:
        rows: Dataset rows.

    Returns:
        Estimated memory usage in bytes.
    """
    if not rows:
        return 0

    sample_size = min(100, len(rows))
    total_sample_bytes = 0
    for row in rows[:sample_size]:
        total_sample_bytes += len(
            json.dumps(dict(row), default=str).encode("utf-8")
        )

    avg_row_bytes = total_sample_bytes / sample_size
    # Python dict overhead estimate: ~240 bytes per dict + 60 bytes per key
    overhead = 240 + (60 * len(rows[0]))
    return int((avg_row_bytes + overhead) * len(rows))


def format_memory(num_bytes: int) -> str:
    """Display string for a byte count, rounded to whole kilobytes."""
    return f"{int(num_bytes / 1024 + 0.5)} KB"


def count_duplicate_rows(
    rows: Sequence[Mapping[str, Any]],
    columns: Sequence[str],
) -> int:
    """Count rows equal to an earlier row over all ``columns``.

    Equality is type-aware per cell, the same as distinct-value counting.
    """
    seen = set()
    duplicates = 0
    for row in rows:
        key = tuple(value_key(row[c]) for c in columns)
        if key in seen:
            duplicates += 1
        else:
            seen.add(key)
    return duplicates


# ---------------------------------------------------------------------------
# ProfileAggregator
# ---------------------------------------------------------------------------


class ProfileAggregator:
    """Merges stage outputs into a DataProfile.

    Only dataset-level bookkeeping happens here (duplicate rows, memory
    estimate, totals); column statistics, issues, patterns and correlations
    are taken as given.
    """

    def __init__(self, config: Optional[DataProfilerConfig] = None) -> None:
        self._config = config or get_config()

    def aggregate(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Sequence[str],
        column_profiles: Mapping[str, ColumnProfile],
        issues: Sequence[DataQualityIssue],
        all_patterns: Sequence[MissingDataPattern],
        correlations: Sequence[MissingnessCorrelation],
        duplicate_rows: Optional[int] = None,
        generated_at: Optional[datetime] = None,
    ) -> DataProfile:
        """Build the DataProfile.

        Args:
            rows: Dataset rows.
            columns: Ordered column names.
            column_profiles: Column name to ColumnProfile.
            issues: Detected issues, already ordered.
            all_patterns: Every missingness signature (not only the top N);
                used to derive the number of complete rows.
            correlations: Retained missingness correlations.
            duplicate_rows: Duplicate-row count if already known; counted
                here otherwise.
            generated_at: Timestamp override; defaults to now (UTC).

        Returns:
            Frozen DataProfile.
        """
        total_rows = len(rows)
        total_columns = len(columns)
        incomplete = sum(p.count for p in all_patterns)
        complete_rows = total_rows - incomplete
        memory_bytes = estimate_memory(rows)
        if duplicate_rows is None:
            duplicate_rows = count_duplicate_rows(rows, columns)

        overview = ProfileOverview(
            total_rows=total_rows,
            total_columns=total_columns,
            memory_usage=format_memory(memory_bytes),
            memory_usage_bytes=memory_bytes,
            duplicate_rows=duplicate_rows,
            completeness=(complete_rows / total_rows * 100.0) if total_rows else 0.0,
            complete_rows=complete_rows,
            total_cells=total_rows * total_columns,
            total_missing=sum(p.missing for p in column_profiles.values()),
        )

        kwargs: Dict[str, Any] = {
            "overview": overview,
            "columns": dict(column_profiles),
            "data_quality": list(issues),
            "correlations": MissingnessCorrelator.correlation_matrix(correlations),
            "missing_patterns": list(all_patterns[: self._config.top_n_patterns]),
        }
        if generated_at is not None:
            kwargs["generated_at"] = generated_at
        return DataProfile(**kwargs)

    def empty(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Sequence[str],
    ) -> DataProfile:
        """Zeroed profile for a dataset with no rows or no columns.

        Totals are reported as given; every collection is empty.
        """
        return DataProfile(
            overview=ProfileOverview(
                total_rows=len(rows),
                total_columns=len(columns),
            ),
        )


# ---------------------------------------------------------------------------
# DataProfiler
# ---------------------------------------------------------------------------


class DataProfiler:
    """Runs the profiling pipeline for one dataset snapshot.

    The profiler holds no per-dataset state, so one instance can profile
    different datasets from several threads.

    Attributes:
        _config: Profiler configuration.
        _inferencer: TypeInferencer stage.
        _calculator: ColumnStatisticsCalculator stage.
        _detector: QualityIssueDetector stage.
        _miner: PatternMiner stage.
        _correlator: MissingnessCorrelator stage.
        _aggregator: ProfileAggregator stage.
    """

    def __init__(self, config: Optional[DataProfilerConfig] = None) -> None:
        self._config = config or get_config()
        self._config.validate()
        self._inferencer = TypeInferencer(self._config)
        self._calculator = ColumnStatisticsCalculator(self._config)
        self._detector = QualityIssueDetector(self._config)
        self._miner = PatternMiner(self._config)
        self._correlator = MissingnessCorrelator(self._config)
        self._aggregator = ProfileAggregator(self._config)
        logger.info(
            "DataProfiler initialized: max_workers=%d, top_n_patterns=%d, "
            "top_n_correlations=%d",
            self._config.max_workers,
            self._config.top_n_patterns,
            self._config.top_n_correlations,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def profile(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Sequence[str],
        column_types: Optional[ColumnTypes] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> DataProfile:
        """Profile a dataset.

        Args:
            rows: Dataset rows; every row must hold a key for every column.
            columns: Ordered, unique column names.
            column_types: Optional, possibly partial, column type overrides.
                Legacy names such as ``"integer"`` are coerced.
            cancel_event: Optional event checked between stages.

        Returns:
            Frozen DataProfile.

        Raises:
            ProfilingContractError: On duplicate columns, non-mapping rows
                or rows lacking a declared column key.
            ProfilingCancelledError: If ``cancel_event`` is set before a
                stage starts.
        """
        start = time.perf_counter()
        rows = list(rows)
        columns = list(columns)
        update_active_profiles(1)
        try:
            self._validate_contract(rows, columns)

            if not rows or not columns:
                logger.info(
                    "Empty dataset (%d rows, %d columns); returning zeroed profile",
                    len(rows), len(columns),
                )
                record_profile("empty", len(rows))
                return self._aggregator.empty(rows, columns)

            profile = self._run_pipeline(rows, columns, column_types, cancel_event)
        except ProfilingCancelledError as exc:
            logger.info("Profiling cancelled before stage %s",
                        exc.context.get("stage"))
            record_profile("cancelled")
            raise
        except ProfilingContractError:
            record_profile("error")
            raise
        except Exception as exc:
            logger.error("Profiling failed:\n%s", format_exception_chain(exc))
            record_profile("error")
            raise
        finally:
            update_active_profiles(-1)

        elapsed = time.perf_counter() - start
        record_profile("success", len(rows))
        logger.info(
            "Profiled %d rows x %d columns in %.3fs: %d issues, %d patterns, "
            "%d correlated columns",
            len(rows), len(columns), elapsed,
            len(profile.data_quality),
            len(profile.missing_patterns),
            len(profile.correlations),
        )
        return profile

    def resolve_types(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Sequence[str],
        column_types: Optional[ColumnTypes] = None,
    ) -> Dict[str, ColumnType]:
        """Resolve a ColumnType for every column.

        Caller-supplied types win (after coercion); the rest are inferred.
        Entries for undeclared columns are ignored.

        Args:
            rows: Dataset rows.
            columns: Ordered column names.
            column_types: Optional overrides.

        Returns:
            Column name to ColumnType, in column order.
        """
        supplied = dict(column_types or {})
        declared = set(columns)
        extra = [name for name in supplied if name not in declared]
        if extra:
            logger.debug("Ignoring column_types for undeclared columns: %s", extra)

        resolved: Dict[str, ColumnType] = {}
        for column in columns:
            if column in supplied:
                resolved[column] = ColumnType.coerce(supplied[column])
            else:
                resolved[column] = self._inferencer.infer(
                    column, [row[column] for row in rows],
                )
        return resolved

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _run_pipeline(
        self,
        rows: List[Mapping[str, Any]],
        columns: List[str],
        column_types: Optional[ColumnTypes],
        cancel_event: Optional[threading.Event],
    ) -> DataProfile:
        types = self._stage(
            "type_inference", cancel_event,
            self.resolve_types, rows, columns, column_types,
        )
        profiles = self._stage(
            "column_statistics", cancel_event,
            self._column_statistics, rows, columns, types,
        )
        duplicate_rows = self._stage(
            "duplicate_rows", cancel_event,
            count_duplicate_rows, rows, columns,
        )
        issues = self._stage(
            "quality_issues", cancel_event,
            self._detector.detect, list(profiles.values()),
            duplicate_rows, len(rows),
        )
        all_patterns = self._stage(
            "pattern_mining", cancel_event,
            self._miner.mine_all, rows, columns,
        )
        correlations = self._stage(
            "missingness_correlation", cancel_event,
            self._correlator.correlate, rows, columns,
        )
        profile = self._stage(
            "aggregation", cancel_event,
            self._aggregator.aggregate,
            rows, columns, profiles, issues, all_patterns, correlations,
            duplicate_rows,
        )

        for column_profile in profiles.values():
            record_column_profile(column_profile.type.value)
        for issue in issues:
            record_quality_issue(issue.type.value, issue.severity.value)
        record_patterns(len(profile.missing_patterns))
        record_correlations(len(correlations))
        return profile

    def _stage(
        self,
        name: str,
        cancel_event: Optional[threading.Event],
        fn: Callable[..., Any],
        *args: Any,
    ) -> Any:
        """Run one stage after checking for cancellation, recording its duration."""
        if cancel_event is not None and cancel_event.is_set():
            raise ProfilingCancelledError(
                message=f"Profiling cancelled before stage '{name}'",
                stage=name,
            )
        stage_start = time.perf_counter()
        result = fn(*args)
        duration = time.perf_counter() - stage_start
        record_stage_duration(name, duration)
        logger.debug("Stage %s completed in %.4fs", name, duration)
        return result

    def _column_statistics(
        self,
        rows: List[Mapping[str, Any]],
        columns: List[str],
        types: Dict[str, ColumnType],
    ) -> Dict[str, ColumnProfile]:
        """Compute every column profile, in column order.

        Uses a thread pool when ``max_workers > 1``; ``Executor.map`` keeps
        results aligned with ``columns``.
        """
        def _one(column: str) -> ColumnProfile:
            return self._calculator.calculate(
                column, types[column], [row[column] for row in rows],
            )

        workers = min(self._config.max_workers, len(columns))
        if workers > 1:
            with ThreadPoolExecutor(
                max_workers=workers,
                thread_name_prefix="datalens-colstats",
            ) as pool:
                results = list(pool.map(_one, columns))
        else:
            results = [_one(column) for column in columns]
        return dict(zip(columns, results))

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    def _validate_contract(
        self,
        rows: List[Any],
        columns: List[str],
    ) -> None:
        """Reject inputs that break the ingestion contract.

        Raises:
            ProfilingContractError: On the first violation found.
        """
        seen = set()
        duplicated: List[str] = []
        for column in columns:
            if column in seen and column not in duplicated:
                duplicated.append(column)
            seen.add(column)
        if duplicated:
            record_contract_error("duplicate_columns")
            raise ProfilingContractError(
                message=f"Duplicate column names: {', '.join(map(str, duplicated))}",
                duplicate_columns=duplicated,
            )

        for idx, row in enumerate(rows):
            if not isinstance(row, Mapping):
                record_contract_error("not_mapping")
                raise ProfilingContractError(
                    message=(
                        f"Row {idx} is a {type(row).__name__}, "
                        f"expected a mapping"
                    ),
                    row_index=idx,
                )
            absent = [c for c in columns if c not in row]
            if absent:
                record_contract_error("missing_key")
                raise ProfilingContractError(
                    message=(
                        f"Row {idx} has no key for declared column(s): "
                        f"{', '.join(map(str, absent))}"
                    ),
                    row_index=idx,
                    missing_columns=absent,
                )


__all__ = [
    "DataProfiler",
    "ProfileAggregator",
    "count_duplicate_rows",
    "estimate_memory",
    "format_memory",
]
