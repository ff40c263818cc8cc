# -*- coding: utf-8 -*-
"""
Column Statistics Calculator - DataLens Data Profiler

Computes a ColumnProfile for one column given its type and values:

- Missing / present counts through the shared missingness predicate
- Distinct-value counting with type-aware exact equality (``1`` and
  ``1.0`` are equal; ``True`` and ``1`` are not; ``"1"`` and ``1`` are not)
- Mode (first seen on ties)
- Numeric columns: mean, median, population std, min, max, quartiles by
  linear interpolation, skewness, excess kurtosis and IQR-fence outliers
  with their row indices
- String columns: length statistics and top-N values (first seen on ties)
- Format signatures (email, url, uuid, date formats, ...) over a sample

Values that do not fit the column type are left out of the numeric
aggregates, counted in ``non_conforming`` and described in ``anomalies``.
A column's computation never aborts on bad values.

Numeric helpers are pure Python (``statistics`` and ``math``).

Example:
    >>> from datalens.data_profiler.column_statistics import (
    ...     ColumnStatisticsCalculator,
    ... )
    >>> from datalens.data_profiler.models import ColumnType
    >>> calc = ColumnStatisticsCalculator()
    >>> profile = calc.calculate("x", ColumnType.NUMBER, [1, 2, 3, 4, 100])
    >>> profile.q1, profile.q3, profile.outliers
    (2.0, 4.0, [100.0])
"""

from __future__ import annotations

import logging
import math
import statistics
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence, Tuple

from datalens.data_profiler.config import DataProfilerConfig, get_config
from datalens.data_profiler.missingness import is_missing
from datalens.data_profiler.models import ColumnProfile, ColumnType, TopValue
from datalens.data_profiler.type_inferencer import conforms
from datalens.data_profiler.value_formats import (
    DATE_FORMATS,
    FORMAT_PATTERNS,
    date_format_of,
    json_safe,
    parse_number,
)

logger = logging.getLogger(__name__)

# Number of offending values quoted in an anomaly message
_ANOMALY_EXAMPLES = 3


# ---------------------------------------------------------------------------
# Statistical Helpers (pure Python, no numpy/scipy)
# ---------------------------------------------------------------------------


def _percentile(sorted_values: List[float], p: float) -> float:
    """Compute the p-th percentile using linear interpolation.

    Args:
        sorted_values: Pre-sorted list of numeric values.
        p: Percentile in [0, 100].

    Returns:
        Interpolated percentile value, or 0.0 for empty input.
    """
    if not sorted_values:
        return 0.0
    n = len(sorted_values)
    if n == 1:
        return sorted_values[0]
    k = (p / 100.0) * (n - 1)
    f = math.floor(k)
    c = math.ceil(k)
    if f == c:
        return sorted_values[int(k)]
    d0 = sorted_values[int(f)] * (c - k)
    d1 = sorted_values[int(c)] * (k - f)
    return d0 + d1


def _standardized_moment(
    values: List[float], mean: float, std: float, order: int,
) -> float:
    """Population standardised moment ``mean(((x - mean) / std) ** order)``.

    Each deviation is divided by ``std`` before the power is taken, so no
    term grows with the magnitude of the values.
    """
    return math.fsum(((x - mean) / std) ** order for x in values) / len(values)


def _skewness(values: List[float], mean: float, std: float) -> float:
    """Standardised third moment (equal to ``m3 / m2^1.5``).

    Args:
        values: Numeric values.
        mean: Their mean.
        std: Their population standard deviation.

    Returns:
        Skewness, or 0.0 for a constant column.
    """
    if std == 0.0:
        return 0.0
    return _standardized_moment(values, mean, std, 3)


def _kurtosis(values: List[float], mean: float, std: float) -> float:
    """Excess kurtosis, the standardised fourth moment minus 3.

    Args:
        values: Numeric values.
        mean: Their mean.
        std: Their population standard deviation.

    Returns:
        Excess kurtosis, or 0.0 for a constant column.
    """
    if std == 0.0:
        return 0.0
    return _standardized_moment(values, mean, std, 4) - 3.0


def _guarded(fn: Callable[..., float], *args: Any) -> Optional[float]:
    """Call a numeric helper, mapping arithmetic failure or a non-finite
    result to None."""
    try:
        result = fn(*args)
    except (OverflowError, ZeroDivisionError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def value_key(value: Any) -> Hashable:
    """Type-aware equality key for distinct-value counting.

    Integers and floats share a key space so ``1 == 1.0``; booleans and
    strings get their own, so ``True``, ``1`` and ``"1"`` stay distinct.
    Unhashable values are keyed by ``repr``.

    Args:
        value: A non-missing cell value.

    Returns:
        Hashable key.
    """
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return ("num", "nan")
        return ("num", value)
    if isinstance(value, str):
        return ("str", value)
    try:
        hash(value)
    except TypeError:
        return (type(value).__name__, repr(value))
    return (type(value).__name__, value)


def _frequencies(values: Sequence[Any]) -> Dict[Hashable, List[Any]]:
    """Count values by ``value_key``, keeping first-seen order.

    Returns:
        Mapping of key to ``[first_seen_value, count]``.
    """
    counts: Dict[Hashable, List[Any]] = {}
    for v in values:
        key = value_key(v)
        entry = counts.get(key)
        if entry is None:
            counts[key] = [v, 1]
        else:
            entry[1] += 1
    return counts


def _format_examples(values: List[Any]) -> str:
    return ", ".join(repr(v) for v in values[:_ANOMALY_EXAMPLES])


# ---------------------------------------------------------------------------
# ColumnStatisticsCalculator
# ---------------------------------------------------------------------------


class ColumnStatisticsCalculator:
    """Per-column statistics engine.

    Stateless apart from its configuration, so one instance can serve
    several threads at once.

    Attributes:
        _config: Profiler configuration (top-N, pattern sampling, IQR fence).

    Example:
        >>> calc = ColumnStatisticsCalculator()
        >>> p = calc.calculate("city", ColumnType.STRING, ["a", "b", "a", None])
        >>> p.missing, p.unique, p.mode
        (1, 2, 'a')
    """

    def __init__(self, config: Optional[DataProfilerConfig] = None) -> None:
        self._config = config or get_config()

    def calculate(
        self,
        column: str,
        column_type: ColumnType,
        values: Sequence[Any],
    ) -> ColumnProfile:
        """Build the ColumnProfile of one column.

        Args:
            column: Column name.
            column_type: Resolved column type.
            values: The column's raw values in row order.

        Returns:
            Frozen ColumnProfile.
        """
        total = len(values)
        present: List[Tuple[int, Any]] = []
        empty_strings = 0
        for idx, v in enumerate(values):
            if is_missing(v):
                if v is not None:
                    empty_strings += 1
                continue
            present.append((idx, v))

        count = len(present)
        missing = total - count
        raw = [v for _, v in present]

        freqs = _frequencies(raw)
        unique = len(freqs)

        fields: Dict[str, Any] = {
            "name": column,
            "type": column_type,
            "count": count,
            "missing": missing,
            "missing_percentage": (missing / total * 100.0) if total else 0.0,
            "unique": unique,
            "unique_percentage": (unique / count * 100.0) if count else 0.0,
            "duplicates": count - unique,
            "mode": self._mode(freqs),
        }

        anomalies: List[str] = []
        if empty_strings:
            anomalies.append(
                f"{empty_strings} empty string value(s) counted as missing"
            )

        non_conforming = [v for v in raw if not conforms(v, column_type)]
        if non_conforming:
            anomalies.append(
                f"{len(non_conforming)} value(s) do not parse as "
                f"{column_type.value}: {_format_examples(non_conforming)}"
            )
        fields["non_conforming"] = len(non_conforming)

        numeric_count = sum(1 for v in raw if parse_number(v) is not None)
        fields["numeric_share"] = (numeric_count / count) if count else 0.0

        if column_type == ColumnType.NUMBER:
            fields.update(self._numeric_stats(present, anomalies))
        elif column_type == ColumnType.STRING:
            fields.update(self._string_stats(raw, freqs))

        patterns, rates = self._detect_patterns(raw)
        fields["patterns"] = patterns
        fields["pattern_match_rates"] = rates
        fields["anomalies"] = anomalies

        logger.debug(
            "Column %s (%s): count=%d missing=%d unique=%d non_conforming=%d "
            "patterns=%s",
            column, column_type.value, count, missing, unique,
            len(non_conforming), patterns,
        )
        return ColumnProfile(**fields)

    # ------------------------------------------------------------------
    # Mode
    # ------------------------------------------------------------------

    @staticmethod
    def _mode(freqs: Dict[Hashable, List[Any]]) -> Any:
        best_value: Any = None
        best_count = 0
        for value, n in freqs.values():
            if n > best_count:
                best_value, best_count = value, n
        if best_count == 0:
            return None
        return json_safe(best_value)

    # ------------------------------------------------------------------
    # Numeric statistics
    # ------------------------------------------------------------------

    def _numeric_stats(
        self,
        present: List[Tuple[int, Any]],
        anomalies: List[str],
    ) -> Dict[str, Any]:
        """Descriptive statistics over the values that parse as finite numbers.

        A statistic whose computation leaves the floating point range is
        reported as None and noted in ``anomalies``; the other statistics of
        the column are still returned.

        Args:
            present: ``(row_index, value)`` pairs of non-missing values.
            anomalies: Anomaly lines of the column, appended to in place.

        Returns:
            Dict of ColumnProfile numeric fields; empty when nothing parses.
        """
        numbers: List[Tuple[int, float]] = []
        for idx, v in present:
            parsed = parse_number(v)
            if parsed is not None:
                numbers.append((idx, parsed))
        if not numbers:
            return {}

        nums = [x for _, x in numbers]
        ordered = sorted(nums)
        mean_val = statistics.mean(nums)
        q1 = _percentile(ordered, 25)
        q3 = _percentile(ordered, 75)
        iqr = q3 - q1
        k = self._config.iqr_multiplier
        lower = q1 - k * iqr
        upper = q3 + k * iqr

        outliers: List[float] = []
        outlier_indices: List[int] = []
        for idx, x in numbers:
            if x < lower or x > upper:
                outliers.append(x)
                outlier_indices.append(idx)

        stats: Dict[str, Any] = {
            "mean": mean_val,
            "median": _guarded(statistics.median, ordered),
            "std": _guarded(statistics.pstdev, nums, mean_val),
            "min": ordered[0],
            "max": ordered[-1],
            "q1": q1,
            "q3": q3,
            "skewness": None,
            "kurtosis": None,
            "outliers": outliers,
            "outlier_indices": outlier_indices,
        }
        std_val = stats["std"]
        if std_val is not None:
            stats["skewness"] = _guarded(_skewness, nums, mean_val, std_val)
            stats["kurtosis"] = _guarded(_kurtosis, nums, mean_val, std_val)

        out_of_range = [
            name for name in ("median", "std", "skewness", "kurtosis")
            if stats[name] is None
        ]
        if out_of_range:
            anomalies.append(
                f"{', '.join(out_of_range)} not computed: result outside the "
                f"floating point range"
            )
        return stats

    # ------------------------------------------------------------------
    # String statistics
    # ------------------------------------------------------------------

    def _string_stats(
        self,
        raw: List[Any],
        freqs: Dict[Hashable, List[Any]],
    ) -> Dict[str, Any]:
        if not raw:
            return {}
        lengths = [len(str(v)) for v in raw]
        count = len(raw)

        ranked = sorted(freqs.values(), key=lambda entry: -entry[1])
        top_values = [
            TopValue(
                value=json_safe(value),
                count=n,
                percentage=n / count * 100.0,
            )
            for value, n in ranked[: self._config.top_n_values]
        ]

        return {
            "avg_length": sum(lengths) / count,
            "min_length": min(lengths),
            "max_length": max(lengths),
            "top_values": top_values,
        }

    # ------------------------------------------------------------------
    # Pattern detection
    # ------------------------------------------------------------------

    def _detect_patterns(self, raw: List[Any]) -> Tuple[List[str], Dict[str, float]]:
        """Find format signatures shared by a significant share of values.

        Tests up to ``pattern_sample_size`` non-missing values. Only string
        values are matched; other values count toward the denominator.
        A date-like value is assigned exactly one date format and is not
        tested against the other formats, so ambiguous US/EU dates do not
        register as two formats and ISO dates do not pass for phone numbers.

        Args:
            raw: Non-missing values in row order.

        Returns:
            ``(patterns, match_rates)`` for the patterns whose match rate is
            at least ``pattern_min_match_rate``, in registry order.
        """
        sample = raw[: self._config.pattern_sample_size]
        if not sample:
            return [], {}

        matches: Dict[str, int] = {}
        for v in sample:
            if not isinstance(v, str):
                continue
            date_name = date_format_of(v)
            if date_name is not None:
                matches[date_name] = matches.get(date_name, 0) + 1
                continue
            for name, regex in FORMAT_PATTERNS.items():
                if name == "phone" and len(v) < 7:
                    continue
                if regex.match(v):
                    matches[name] = matches.get(name, 0) + 1

        n = len(sample)
        min_rate = self._config.pattern_min_match_rate
        patterns: List[str] = []
        rates: Dict[str, float] = {}
        for name in list(FORMAT_PATTERNS) + list(DATE_FORMATS):
            hits = matches.get(name, 0)
            if not hits:
                continue
            rate = hits / n
            if rate >= min_rate:
                patterns.append(name)
                rates[name] = round(rate, 4)
        return patterns, rates


__all__ = [
    "ColumnStatisticsCalculator",
    "value_key",
]
