"""Tests for ColumnStatisticsCalculator."""

import math

import pytest

from datalens.data_profiler.column_statistics import (
    ColumnStatisticsCalculator,
    value_key,
)
from datalens.data_profiler.config import DataProfilerConfig
from datalens.data_profiler.models import ColumnType


@pytest.fixture
def calc(config):
    return ColumnStatisticsCalculator(config)


class TestCounts:
    """Missingness, uniqueness and mode."""

    def test_missing_and_count(self, calc):
        """count + missing equals the number of values."""
        p = calc.calculate("a", ColumnType.NUMBER, [1, None, 3, 4])
        assert p.count == 3
        assert p.missing == 1
        assert p.missing_percentage == 25.0
        assert p.count + p.missing == 4

    def test_whitespace_is_present(self, calc):
        """Only None and exactly "" are missing."""
        p = calc.calculate("s", ColumnType.STRING, [" ", "", None, "x"])
        assert p.missing == 2
        assert p.count == 2

    def test_empty_string_flagged_in_anomalies(self, calc):
        """Empty strings counted as missing are called out."""
        p = calc.calculate("s", ColumnType.STRING, ["a", "", "b"])
        assert any("empty string" in a for a in p.anomalies)

    def test_type_aware_uniqueness(self, calc):
        """1 and 1.0 are equal; True and "1" are distinct from 1."""
        p = calc.calculate("v", ColumnType.STRING, [1, 1.0, True, "1"])
        assert p.unique == 3
        assert p.duplicates == 1
        assert p.unique_percentage == 75.0
        assert p.mode == 1

    def test_mode_ties_first_seen(self, calc):
        """Equal counts resolve to the value seen first."""
        p = calc.calculate("s", ColumnType.STRING, ["b", "a", "a", "b"])
        assert p.mode == "b"

    def test_all_missing_column(self, calc):
        """An all-missing column has zero counts and no mode."""
        p = calc.calculate("s", ColumnType.STRING, [None, "", None])
        assert p.count == 0
        assert p.missing_percentage == 100.0
        assert p.unique_percentage == 0.0
        assert p.mode is None
        assert p.top_values == []

    def test_no_values(self, calc):
        """An empty column yields zero percentages rather than dividing by zero."""
        p = calc.calculate("s", ColumnType.STRING, [])
        assert p.missing_percentage == 0.0
        assert p.unique_percentage == 0.0


class TestNumericStatistics:
    """Descriptive statistics for number columns."""

    def test_iqr_outlier_example(self, calc):
        """[1, 2, 3, 4, 100]: q1=2, q3=4, median=3, 100 is an outlier."""
        p = calc.calculate("x", ColumnType.NUMBER, [1, 2, 3, 4, 100])
        assert p.q1 == 2.0
        assert p.q3 == 4.0
        assert p.median == 3.0
        assert p.outliers == [100.0]
        assert p.outlier_indices == [4]
        assert p.min == 1.0
        assert p.max == 100.0
        assert p.mean == 22.0

    def test_population_std(self, calc):
        """std is the population standard deviation."""
        p = calc.calculate("x", ColumnType.NUMBER, [1, 2, 3, 4, 100])
        assert p.std == pytest.approx(math.sqrt(1522.0))

    def test_linear_interpolation_quartiles(self, calc):
        """Quartiles interpolate between neighbouring values."""
        p = calc.calculate("x", ColumnType.NUMBER, [1, 3, 4])
        assert p.q1 == pytest.approx(2.0)
        assert p.q3 == pytest.approx(3.5)

    def test_moments(self, calc):
        """Symmetric data has zero skew; [1, 2, 3] has excess kurtosis -1.5."""
        p = calc.calculate("x", ColumnType.NUMBER, [1, 2, 3])
        assert p.skewness == pytest.approx(0.0)
        assert p.kurtosis == pytest.approx(-1.5)

    def test_right_skew(self, calc):
        """A long right tail gives positive skewness."""
        p = calc.calculate("x", ColumnType.NUMBER, [1, 2, 3, 4, 100])
        assert p.skewness > 0

    def test_constant_column(self, calc):
        """A constant column has zero spread and no outliers."""
        p = calc.calculate("x", ColumnType.NUMBER, [5, 5, 5])
        assert p.std == 0.0
        assert p.skewness == 0.0
        assert p.kurtosis == 0.0
        assert p.outliers == []

    def test_moments_of_large_magnitudes(self, calc):
        """Moments stay finite when the raw powers would overflow."""
        p = calc.calculate("x", ColumnType.NUMBER, [1e120, -1e120, 0])
        assert p.std == pytest.approx(math.sqrt(2.0 / 3.0) * 1e120)
        assert p.skewness == pytest.approx(0.0, abs=1e-9)
        assert p.kurtosis == pytest.approx(-1.5)
        assert not any("not computed" in a for a in p.anomalies)

    def test_moments_of_tiny_spread(self, calc):
        """A spread whose square underflows still yields moments."""
        p = calc.calculate("x", ColumnType.NUMBER, [0.0, 1e-160])
        assert p.std > 0
        assert p.skewness == pytest.approx(0.0, abs=1e-6)
        assert p.kurtosis == pytest.approx(-2.0, abs=0.05)

    def test_moments_beyond_float_range(self, calc):
        """Deviations past the float range leave moments unset and noted."""
        p = calc.calculate("x", ColumnType.NUMBER, [1.7e308, 1.7e308, -1.7e308])
        assert p.skewness is None
        assert p.kurtosis is None
        assert p.min == -1.7e308
        assert p.max == 1.7e308
        assert any("not computed" in a for a in p.anomalies)

    def test_bad_tokens_skipped(self, calc):
        """Unparseable and non-finite values are excluded and reported."""
        p = calc.calculate("x", ColumnType.NUMBER, [1, "abc", 3, float("nan"), "5"])
        assert p.mean == 3.0
        assert p.non_conforming == 2
        assert any("do not parse as number" in a for a in p.anomalies)
        assert p.count == 5

    def test_only_bad_tokens(self, calc):
        """A number column with nothing parseable still produces a profile."""
        p = calc.calculate("x", ColumnType.NUMBER, ["a", "b"])
        assert p.mean is None
        assert p.non_conforming == 2

    def test_iqr_multiplier_configurable(self):
        """A wider fence flags fewer outliers."""
        calc = ColumnStatisticsCalculator(DataProfilerConfig(iqr_multiplier=100.0))
        p = calc.calculate("x", ColumnType.NUMBER, [1, 2, 3, 4, 100])
        assert p.outliers == []

    def test_string_columns_skip_numeric_fields(self, calc):
        """Numeric fields stay empty for non-number columns."""
        p = calc.calculate("s", ColumnType.STRING, ["1", "2"])
        assert p.mean is None
        assert p.outliers == []
        assert p.numeric_share == 1.0


class TestStringStatistics:
    """Length statistics and top values."""

    def test_lengths(self, calc):
        p = calc.calculate("s", ColumnType.STRING, ["a", "bbb", "cc", None])
        assert p.min_length == 1
        assert p.max_length == 3
        assert p.avg_length == 2.0

    def test_top_values_ranked(self):
        """Top values are ranked by count, ties first seen, capped at N."""
        calc = ColumnStatisticsCalculator(DataProfilerConfig(top_n_values=2))
        p = calc.calculate("s", ColumnType.STRING, ["x", "y", "y", "z", "x"])
        assert [(t.value, t.count) for t in p.top_values] == [("x", 2), ("y", 2)]
        assert p.top_values[0].percentage == 40.0


class TestPatterns:
    """Format signature detection."""

    def test_email_pattern(self, calc):
        p = calc.calculate(
            "e", ColumnType.STRING, ["a@x.com", "b@y.org", "not-an-email"],
        )
        assert p.patterns == ["email"]
        assert p.pattern_match_rates["email"] == pytest.approx(0.6667)

    def test_mixed_date_formats(self, calc):
        p = calc.calculate(
            "d", ColumnType.DATE,
            ["2024-01-15", "2024-02-20", "03/15/2024", "04/20/2024"],
        )
        assert p.patterns == ["date_iso", "date_us"]
        assert p.pattern_match_rates == {"date_iso": 0.5, "date_us": 0.5}

    def test_ambiguous_dates_count_once(self, calc):
        """Values valid as US and EU dates count only as US."""
        p = calc.calculate("d", ColumnType.DATE, ["01/02/2024", "03/04/2024"])
        assert p.patterns == ["date_us"]

    def test_min_match_rate(self):
        """Patterns below the minimum match rate are not reported."""
        calc = ColumnStatisticsCalculator(DataProfilerConfig(pattern_min_match_rate=0.5))
        values = ["a@x.com"] + [f"word{i}" for i in range(9)]
        assert calc.calculate("e", ColumnType.STRING, values).patterns == []


class TestValueKey:
    """Tests for value_key."""

    def test_keys(self):
        assert value_key(1) == value_key(1.0)
        assert value_key(True) != value_key(1)
        assert value_key("1") != value_key(1)
        assert value_key(float("nan")) == value_key(float("nan"))

    def test_unhashable(self):
        assert value_key([1, 2]) == value_key([1, 2])
