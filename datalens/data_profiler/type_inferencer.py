# -*- coding: utf-8 -*-
"""
Type Inferencer - DataLens Data Profiler

Assigns one of the four column types (boolean, number, date, string) to a
column from a sample of its non-missing values.

Candidates are tested in priority order boolean -> number -> date. The first
candidate matched by at least ``type_agreement_threshold`` of the sample
wins; when none reaches the threshold the column is ``string``. Empty and
all-missing columns are ``string``. Inference never raises.

Example:
    >>> from datalens.data_profiler.type_inferencer import TypeInferencer
    >>> TypeInferencer().infer("age", [31, "", 40, None, 27])
    <ColumnType.NUMBER: 'number'>
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from datalens.data_profiler.config import DataProfilerConfig, get_config
from datalens.data_profiler.missingness import is_missing
from datalens.data_profiler.models import ColumnType
from datalens.data_profiler.value_formats import (
    is_boolean_like,
    is_date_like,
    parse_number,
)

logger = logging.getLogger(__name__)


def _is_number_like(value: Any) -> bool:
    return parse_number(value) is not None


# Candidate order decides which type wins when several agree.
_CANDIDATES: Tuple[Tuple[ColumnType, Callable[[Any], bool]], ...] = (
    (ColumnType.BOOLEAN, is_boolean_like),
    (ColumnType.NUMBER, _is_number_like),
    (ColumnType.DATE, is_date_like),
)

_CONFORMS: Dict[ColumnType, Callable[[Any], bool]] = {
    ColumnType.BOOLEAN: is_boolean_like,
    ColumnType.NUMBER: _is_number_like,
    ColumnType.DATE: is_date_like,
}


def conforms(value: Any, column_type: ColumnType) -> bool:
    """Check whether a non-missing value fits ``column_type``.

    Every value conforms to ``string``.

    Args:
        value: Raw, non-missing cell value.
        column_type: Column type to test against.

    Returns:
        True if the value reads as the given type.
    """
    check = _CONFORMS.get(column_type)
    if check is None:
        return True
    return check(value)


class TypeInferencer:
    """Sample-based column type inference.

    Attributes:
        _config: Profiler configuration supplying the sample size and the
            agreement threshold.
    """

    def __init__(self, config: Optional[DataProfilerConfig] = None) -> None:
        self._config = config or get_config()

    def infer(self, column: str, values: Sequence[Any]) -> ColumnType:
        """Infer the type of one column.

        Args:
            column: Column name (used for logging only).
            values: The column's raw values in row order.

        Returns:
            The inferred ColumnType.
        """
        limit = self._config.type_inference_sample_size
        sample: List[Any] = []
        for v in values:
            if is_missing(v):
                continue
            sample.append(v)
            if len(sample) >= limit:
                break

        if not sample:
            logger.debug("Column %s has no non-missing values; typed as string", column)
            return ColumnType.STRING

        n = len(sample)
        threshold = self._config.type_agreement_threshold
        for candidate, check in _CANDIDATES:
            agreeing = sum(1 for v in sample if check(v))
            if agreeing / n >= threshold:
                logger.debug(
                    "Column %s inferred as %s (%d/%d sampled values agree)",
                    column, candidate.value, agreeing, n,
                )
                return candidate

        logger.debug("Column %s inferred as string (no candidate reached %.2f)",
                     column, threshold)
        return ColumnType.STRING

    def infer_all(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Sequence[str],
    ) -> Dict[str, ColumnType]:
        """Infer a type for every column of a dataset.

        Args:
            rows: Dataset rows.
            columns: Ordered column names.

        Returns:
            Mapping of column name to ColumnType, in column order.
        """
        return {
            column: self.infer(column, [row[column] for row in rows])
            for column in columns
        }


__all__ = [
    "TypeInferencer",
    "conforms",
]
