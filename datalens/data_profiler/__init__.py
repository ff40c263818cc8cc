# -*- coding: utf-8 -*-
"""
DataLens Data Profiler
======================

Data-profiling and missing-data analysis engine for tabular datasets held
in memory as a list of row mappings. It supports:

- Column type inference (boolean, number, date, string) from sampled values
- Column statistics: counts, missingness, cardinality, mode, descriptive
  statistics, quartiles, skewness, kurtosis, IQR outliers, string lengths,
  top values and format signatures
- Rule-based data quality issues with configurable severity bands
- Missing-data pattern mining (rows grouped by their set of missing columns)
- Phi-coefficient correlation between columns' missingness
- Immutable DataProfile snapshots with lossless JSON round trip
- Content-hash profile cache and exportable missing data report
- 10 Prometheus metrics for observability
- Thread-safe configuration with DL_DP_ env prefix

Key Components:
    - config: DataProfilerConfig with DL_DP_ env prefix
    - missingness: the shared missingness predicate
    - type_inferencer: TypeInferencer
    - column_statistics: ColumnStatisticsCalculator
    - quality_issue_detector: QualityIssueDetector
    - pattern_miner: PatternMiner
    - missingness_correlator: MissingnessCorrelator
    - profile_aggregator: ProfileAggregator and the DataProfiler pipeline
    - profile_cache: ProfileCache
    - report: missing data report and heatmap sampling
    - metrics: Prometheus metrics
    - service: DataProfilerService facade

Example:
    >>> from datalens.data_profiler import DataProfiler
    >>> rows = [{"A": 1, "B": None}, {"A": None, "B": 2},
    ...         {"A": 3, "B": None}, {"A": 4, "B": 4}]
    >>> profile = DataProfiler().profile(rows, ["A", "B"])
    >>> profile.columns["B"].missing_percentage
    50.0
"""

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
from datalens.data_profiler.config import (
    DataProfilerConfig,
    get_config,
    reset_config,
    set_config,
)

# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------
from datalens.data_profiler.models import (
    ColumnMissingness,
    ColumnProfile,
    ColumnType,
    DataProfile,
    DataQualityIssue,
    IssueSeverity,
    IssueType,
    MissingDataPattern,
    MissingDataReport,
    MissingDataSummary,
    MissingnessCorrelation,
    MissingnessMatrixSample,
    ProfileOverview,
    RowMissingBucket,
    TopValue,
)

# ---------------------------------------------------------------------------
# Pipeline components
# ---------------------------------------------------------------------------
from datalens.data_profiler.missingness import is_missing
from datalens.data_profiler.type_inferencer import TypeInferencer
from datalens.data_profiler.column_statistics import ColumnStatisticsCalculator
from datalens.data_profiler.quality_issue_detector import QualityIssueDetector
from datalens.data_profiler.pattern_miner import PatternMiner
from datalens.data_profiler.missingness_correlator import MissingnessCorrelator
from datalens.data_profiler.profile_aggregator import DataProfiler, ProfileAggregator
from datalens.data_profiler.profile_cache import ProfileCache, compute_cache_key
from datalens.data_profiler.report import (
    build_missing_data_report,
    sample_missingness_matrix,
)

# ---------------------------------------------------------------------------
# Service facade
# ---------------------------------------------------------------------------
from datalens.data_profiler.service import (
    DataProfilerService,
    get_data_profiler_service,
    reset_data_profiler_service,
)

__all__ = [
    # Configuration
    "DataProfilerConfig",
    "get_config",
    "set_config",
    "reset_config",
    # Enumerations
    "ColumnType",
    "IssueType",
    "IssueSeverity",
    # Models
    "TopValue",
    "ColumnProfile",
    "DataQualityIssue",
    "MissingDataPattern",
    "MissingnessCorrelation",
    "ProfileOverview",
    "DataProfile",
    "ColumnMissingness",
    "MissingDataSummary",
    "RowMissingBucket",
    "MissingDataReport",
    "MissingnessMatrixSample",
    # Pipeline
    "is_missing",
    "TypeInferencer",
    "ColumnStatisticsCalculator",
    "QualityIssueDetector",
    "PatternMiner",
    "MissingnessCorrelator",
    "ProfileAggregator",
    "DataProfiler",
    "ProfileCache",
    "compute_cache_key",
    "build_missing_data_report",
    "sample_missingness_matrix",
    # Service
    "DataProfilerService",
    "get_data_profiler_service",
    "reset_data_profiler_service",
]
