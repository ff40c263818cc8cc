# -*- coding: utf-8 -*-
"""
Missingness Correlator - DataLens Data Profiler

Measures how strongly the missingness of one column goes with the
missingness of another. Each column becomes a 0/1 indicator (1 = missing)
and every pair ``i < j`` gets the phi coefficient::

    phi = (n*s12 - s1*s2) / sqrt((n*s1 - s1^2) * (n*s2 - s2^2))

where ``s1``/``s2`` count missing cells per column and ``s12`` counts rows
missing both. Pairs where either column is never or always missing have a
zero denominator and are omitted rather than stored as 0.

Cost is O(columns^2 x rows). A dataset with 500 columns already means
about 125,000 pair scans over every row; callers profiling wide datasets
should restrict ``columns`` or cache the result.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

from datalens.data_profiler.config import DataProfilerConfig, get_config
from datalens.data_profiler.missingness import indicator_vectors
from datalens.data_profiler.models import MissingnessCorrelation

logger = logging.getLogger(__name__)


def phi_coefficient(n: int, s1: int, s2: int, s12: int) -> Optional[float]:
    """Phi coefficient of two binary indicators, or None when undefined.

    Args:
        n: Number of observations.
        s1: Ones in the first indicator.
        s2: Ones in the second indicator.
        s12: Observations where both are one.

    Returns:
        Phi clamped into [-1, 1], or None for a zero-variance indicator.
    """
    var1 = n * s1 - s1 * s1
    var2 = n * s2 - s2 * s2
    if var1 <= 0 or var2 <= 0:
        return None
    phi = (n * s12 - s1 * s2) / math.sqrt(var1 * var2)
    return max(-1.0, min(1.0, phi))


class MissingnessCorrelator:
    """Pairwise correlation between columns' missingness.

    Attributes:
        _config: Profiler configuration supplying the threshold and top-N.
    """

    def __init__(self, config: Optional[DataProfilerConfig] = None) -> None:
        self._config = config or get_config()

    def correlate(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Sequence[str],
    ) -> List[MissingnessCorrelation]:
        """Compute the strongest missingness correlations.

        Runs in O(columns^2 x rows).

        Args:
            rows: Dataset rows.
            columns: Ordered column names.

        Returns:
            Up to ``top_n_correlations`` pairs with
            ``|phi| > correlation_threshold``, strongest first; ties keep
            pair order.
        """
        n = len(rows)
        if n == 0 or len(columns) < 2:
            return []

        indicators = indicator_vectors(rows, columns)
        sums = {c: sum(vec) for c, vec in indicators.items()}
        threshold = self._config.correlation_threshold

        found: List[MissingnessCorrelation] = []
        skipped = 0
        for i, col1 in enumerate(columns):
            s1 = sums[col1]
            if s1 == 0 or s1 == n:
                skipped += len(columns) - i - 1
                continue
            vec1 = indicators[col1]
            for col2 in columns[i + 1:]:
                s2 = sums[col2]
                if s2 == 0 or s2 == n:
                    skipped += 1
                    continue
                s12 = sum(a & b for a, b in zip(vec1, indicators[col2]))
                phi = phi_coefficient(n, s1, s2, s12)
                if phi is None:
                    skipped += 1
                    continue
                if abs(phi) > threshold:
                    found.append(MissingnessCorrelation(
                        column1=col1, column2=col2, correlation=phi,
                    ))

        found.sort(key=lambda c: -abs(c.correlation))
        logger.debug(
            "Missingness correlation: %d pairs above %.2f, %d degenerate pairs skipped",
            len(found), threshold, skipped,
        )
        return found[: self._config.top_n_correlations]

    @staticmethod
    def correlation_matrix(
        correlations: Sequence[MissingnessCorrelation],
    ) -> Dict[str, Dict[str, float]]:
        """Build the symmetric column -> column -> phi mapping.

        Args:
            correlations: Retained correlation pairs.

        Returns:
            Nested mapping holding each pair in both directions.
        """
        matrix: Dict[str, Dict[str, float]] = {}
        for c in correlations:
            matrix.setdefault(c.column1, {})[c.column2] = c.correlation
            matrix.setdefault(c.column2, {})[c.column1] = c.correlation
        return matrix


__all__ = [
    "MissingnessCorrelator",
    "phi_coefficient",
]
