# -*- coding: utf-8 -*-
"""
Missing Data Report - DataLens Data Profiler

Builds the exportable missing data report from a DataProfile and its
dataset: dataset-wide totals, per-column missingness, the retained
missing-data patterns and correlations, and a histogram of how many cells
each row is missing.

Also provides the fixed-stride missingness matrix sampler used by heatmap
consumers. Sampling is for display only and plays no part in any profile
statistic.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Sequence

from datalens.data_profiler.missingness import is_missing
from datalens.data_profiler.models import (
    ColumnMissingness,
    DataProfile,
    MissingDataReport,
    MissingDataSummary,
    MissingnessCorrelation,
    MissingnessMatrixSample,
    RowMissingBucket,
)

logger = logging.getLogger(__name__)

DEFAULT_HEATMAP_ROWS = 100


def correlation_pairs(
    profile: DataProfile,
    columns: Sequence[str],
) -> List[MissingnessCorrelation]:
    """Flatten a profile's symmetric correlation matrix back into pairs.

    Pairs come out in column order and are then ordered by ``|phi|``
    descending, which reproduces the correlator's ranking.

    Args:
        profile: Profile whose ``correlations`` matrix to read.
        columns: Ordered column names.

    Returns:
        One MissingnessCorrelation per stored pair.
    """
    pairs: List[MissingnessCorrelation] = []
    for i, col1 in enumerate(columns):
        row = profile.correlations.get(col1)
        if not row:
            continue
        for col2 in columns[i + 1:]:
            if col2 in row:
                pairs.append(MissingnessCorrelation(
                    column1=col1, column2=col2, correlation=row[col2],
                ))
    pairs.sort(key=lambda c: -abs(c.correlation))
    return pairs


def row_missing_histogram(
    rows: Sequence[Mapping[str, Any]],
    columns: Sequence[str],
) -> List[RowMissingBucket]:
    """Count rows by their number of missing cells.

    Args:
        rows: Dataset rows.
        columns: Ordered column names.

    Returns:
        One bucket per missing-cell count that occurs, ascending.
    """
    total = len(rows)
    if total == 0:
        return []
    counts: Dict[int, int] = {}
    for row in rows:
        n_missing = sum(1 for c in columns if is_missing(row[c]))
        counts[n_missing] = counts.get(n_missing, 0) + 1
    return [
        RowMissingBucket(
            missing_count=k,
            rows=counts[k],
            percentage=counts[k] / total * 100.0,
        )
        for k in sorted(counts)
    ]


def build_missing_data_report(
    profile: DataProfile,
    rows: Sequence[Mapping[str, Any]],
    columns: Sequence[str],
) -> MissingDataReport:
    """Assemble the missing data report for a profiled dataset.

    Args:
        profile: Profile of ``rows``/``columns``.
        rows: The profiled dataset rows.
        columns: Ordered column names.

    Returns:
        Frozen MissingDataReport stamped with the profile's timestamp.
    """
    columns = list(columns)
    overview = profile.overview
    total_cells = overview.total_cells
    # A zeroed profile (no rows or no columns) has no incomplete rows.
    incomplete = overview.total_rows - overview.complete_rows if profile.columns else 0
    summary = MissingDataSummary(
        total_rows=overview.total_rows,
        total_columns=overview.total_columns,
        total_cells=total_cells,
        total_missing=overview.total_missing,
        missing_percentage=(
            overview.total_missing / total_cells * 100.0 if total_cells else 0.0
        ),
        complete_rows=overview.complete_rows,
        incomplete_rows=incomplete,
    )

    column_analysis = [
        ColumnMissingness(
            column=name,
            missing=profile.columns[name].missing,
            percentage=profile.columns[name].missing_percentage,
            type=profile.columns[name].type,
        )
        for name in columns
        if name in profile.columns
    ]

    report = MissingDataReport(
        summary=summary,
        column_analysis=column_analysis,
        patterns=list(profile.missing_patterns),
        correlations=correlation_pairs(profile, columns),
        row_missing_histogram=row_missing_histogram(rows, columns) if columns else [],
        generated_at=profile.generated_at,
    )
    logger.debug(
        "Built missing data report: %d columns, %d patterns, %d correlations",
        len(report.column_analysis), len(report.patterns), len(report.correlations),
    )
    return report


def sample_missingness_matrix(
    rows: Sequence[Mapping[str, Any]],
    columns: Sequence[str],
    max_rows: int = DEFAULT_HEATMAP_ROWS,
) -> MissingnessMatrixSample:
    """Sample the 0/1 missingness matrix at a fixed stride.

    The stride is ``len(rows) // min(max_rows, len(rows))``; every row whose
    index is a multiple of the stride is taken, up to ``max_rows`` rows.

    Args:
        rows: Dataset rows.
        columns: Ordered column names.
        max_rows: Maximum rows in the sample.

    Returns:
        MissingnessMatrixSample with source row indices.
    """
    columns = list(columns)
    total = len(rows)
    if total == 0 or max_rows < 1:
        return MissingnessMatrixSample(columns=columns)

    sample_size = min(max_rows, total)
    step = total // sample_size
    indices = list(range(0, total, step))[:sample_size]
    matrix = [
        [1 if is_missing(rows[i][c]) else 0 for c in columns]
        for i in indices
    ]
    return MissingnessMatrixSample(
        columns=columns,
        row_indices=indices,
        matrix=matrix,
    )


__all__ = [
    "DEFAULT_HEATMAP_ROWS",
    "build_missing_data_report",
    "correlation_pairs",
    "row_missing_histogram",
    "sample_missingness_matrix",
]
