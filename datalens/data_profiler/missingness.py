# -*- coding: utf-8 -*-
"""
Missingness predicate shared by every profiling component.

A value is missing when it is ``None`` or the empty string ``""``. The
comparison is literal: whitespace-only strings such as ``" "`` are present
values, and so are ``0``, ``False`` and ``float("nan")``.

Treating ``""`` as missing conflates "no value" with "empty but present".
Datasets with legitimately empty free-text fields will report those cells
as missing.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence


def is_missing(value: Any) -> bool:
    """Return True when ``value`` is ``None`` or exactly ``""``."""
    if value is None:
        return True
    return isinstance(value, str) and value == ""


def missing_columns(row: Mapping[str, Any], columns: Sequence[str]) -> List[str]:
    """Return the columns of ``row`` holding a missing value, in column order.

    Args:
        row: One dataset row.
        columns: Ordered column names to check.

    Returns:
        Names of the missing columns.
    """
    return [c for c in columns if is_missing(row[c])]


def indicator_vectors(
    rows: Sequence[Mapping[str, Any]],
    columns: Sequence[str],
) -> Dict[str, List[int]]:
    """Build one binary missingness indicator per column (1 = missing).

    Args:
        rows: Dataset rows.
        columns: Ordered column names.

    Returns:
        Mapping of column name to a 0/1 list aligned with ``rows``.
    """
    return {
        c: [1 if is_missing(row[c]) else 0 for row in rows]
        for c in columns
    }


__all__ = [
    "is_missing",
    "missing_columns",
    "indicator_vectors",
]
