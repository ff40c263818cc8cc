# -*- coding: utf-8 -*-
"""
Pattern Miner - DataLens Data Profiler

Groups rows by which of their columns are missing. The signature of a row
is the sorted names of its missing columns joined by ``","``; complete rows
have no signature and are left out. Rows are grouped by the column names
themselves, so names containing the delimiter never merge two different
signatures. Signatures are ranked by row count
(descending, first seen wins ties) and each percentage is taken against
the total number of rows, so the percentages of all signatures add up to
the share of incomplete rows.

Example:
    >>> miner = PatternMiner()
    >>> rows = [{"a": 1, "b": None}, {"a": None, "b": None}, {"a": 2, "b": 3}]
    >>> [p.pattern for p in miner.mine(rows, ["a", "b"])]
    ['b', 'a,b']
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from datalens.data_profiler.config import DataProfilerConfig, get_config
from datalens.data_profiler.missingness import missing_columns
from datalens.data_profiler.models import MissingDataPattern

logger = logging.getLogger(__name__)

SIGNATURE_DELIMITER = ","


def _describe(columns: List[str]) -> str:
    plural = "s" if len(columns) > 1 else ""
    return f"Missing in {len(columns)} column{plural}: {', '.join(columns)}"


class PatternMiner:
    """Missing-data pattern mining.

    Attributes:
        _config: Profiler configuration supplying ``top_n_patterns``.
    """

    def __init__(self, config: Optional[DataProfilerConfig] = None) -> None:
        self._config = config or get_config()

    def mine_all(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Sequence[str],
    ) -> List[MissingDataPattern]:
        """Return every missingness signature present in the dataset.

        Args:
            rows: Dataset rows.
            columns: Ordered column names.

        Returns:
            All patterns, count descending with first-seen tie-break.
        """
        total = len(rows)
        if total == 0:
            return []

        groups: Dict[Tuple[str, ...], int] = {}
        for row in rows:
            missing = tuple(sorted(missing_columns(row, columns)))
            if not missing:
                continue
            groups[missing] = groups.get(missing, 0) + 1

        ranked = sorted(groups.items(), key=lambda item: -item[1])
        patterns = [
            MissingDataPattern(
                pattern=SIGNATURE_DELIMITER.join(cols),
                count=count,
                percentage=count / total * 100.0,
                columns=list(cols),
                description=_describe(list(cols)),
            )
            for cols, count in ranked
        ]
        logger.debug("Mined %d distinct missingness signatures over %d rows",
                     len(patterns), total)
        return patterns

    def mine(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Sequence[str],
    ) -> List[MissingDataPattern]:
        """Return the ``top_n_patterns`` most frequent signatures."""
        return self.mine_all(rows, columns)[: self._config.top_n_patterns]


__all__ = [
    "PatternMiner",
    "SIGNATURE_DELIMITER",
]
