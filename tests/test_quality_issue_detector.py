"""Tests for QualityIssueDetector."""

import pytest

from datalens.data_profiler.models import (
    ColumnProfile,
    ColumnType,
    IssueSeverity,
    IssueType,
)
from datalens.data_profiler.quality_issue_detector import QualityIssueDetector


@pytest.fixture
def detector(config):
    return QualityIssueDetector(config)


def _profile(name="col", type_=ColumnType.NUMBER, count=100, missing=0, **kwargs):
    total = count + missing
    fields = {
        "name": name,
        "type": type_,
        "count": count,
        "missing": missing,
        "missing_percentage": missing / total * 100.0 if total else 0.0,
        "unique": count,
        "unique_percentage": 100.0 if count else 0.0,
    }
    if type_ == ColumnType.STRING:
        # Keep string fixtures clear of the high-cardinality rule unless asked.
        fields["unique"] = 2
        fields["unique_percentage"] = 2 / count * 100.0 if count else 0.0
    fields.update(kwargs)
    return ColumnProfile(**fields)


def _of_type(issues, issue_type):
    return [i for i in issues if i.type == issue_type]


class TestMissingValues:
    """Missing-value severity bands."""

    @pytest.mark.parametrize("missing,expected", [
        (35, IssueSeverity.HIGH),
        (30, IssueSeverity.MEDIUM),
        (20, IssueSeverity.MEDIUM),
        (10, IssueSeverity.LOW),
        (5, IssueSeverity.LOW),
    ])
    def test_bands(self, detector, missing, expected):
        """Severity follows the configured thresholds (upper bounds inclusive)."""
        issues = detector.detect([_profile(count=100 - missing, missing=missing)], 0, 100)
        found = _of_type(issues, IssueType.MISSING_VALUES)
        assert len(found) == 1
        assert found[0].severity is expected
        assert found[0].count == missing
        assert found[0].suggestion

    def test_complete_column_has_no_issue(self, detector):
        assert detector.detect([_profile()], 0, 100) == []


class TestDuplicates:
    """Dataset-level duplicate rows."""

    @pytest.mark.parametrize("dups,total,expected", [
        (1, 200, IssueSeverity.LOW),
        (5, 100, IssueSeverity.MEDIUM),
        (20, 100, IssueSeverity.HIGH),
    ])
    def test_bands(self, detector, dups, total, expected):
        issues = detector.detect([], dups, total)
        assert len(issues) == 1
        assert issues[0].type is IssueType.DUPLICATES
        assert issues[0].column is None
        assert issues[0].severity is expected

    def test_duplicates_after_column_issues(self, detector):
        """With equal severity the duplicates issue comes after column issues."""
        issues = detector.detect([_profile(count=95, missing=5)], 1, 200)
        assert [i.type for i in issues] == [IssueType.MISSING_VALUES, IssueType.DUPLICATES]


class TestOutliers:
    """Outlier density bands."""

    @pytest.mark.parametrize("n,expected", [
        (11, IssueSeverity.HIGH),
        (6, IssueSeverity.MEDIUM),
        (1, IssueSeverity.LOW),
    ])
    def test_bands(self, detector, n, expected):
        profile = _profile(outliers=[1000.0] * n, outlier_indices=list(range(n)))
        found = _of_type(detector.detect([profile], 0, 100), IssueType.OUTLIERS)
        assert found[0].severity is expected
        assert found[0].count == n


class TestTypeMismatch:
    """data_type_mismatch rules."""

    def test_non_conforming_values(self, detector):
        profile = _profile(non_conforming=2)
        found = _of_type(detector.detect([profile], 0, 100), IssueType.DATA_TYPE_MISMATCH)
        assert found[0].severity is IssueSeverity.MEDIUM
        assert found[0].count == 2

    def test_mostly_numeric_string_column(self, detector):
        profile = _profile(type_=ColumnType.STRING, count=10, numeric_share=0.6)
        found = _of_type(detector.detect([profile], 0, 10), IssueType.DATA_TYPE_MISMATCH)
        assert len(found) == 1
        assert found[0].count == 6

    def test_mostly_text_string_column(self, detector):
        profile = _profile(type_=ColumnType.STRING, count=10, numeric_share=0.2)
        assert _of_type(detector.detect([profile], 0, 10), IssueType.DATA_TYPE_MISMATCH) == []


class TestInconsistentFormat:
    """inconsistent_format rules."""

    def test_competing_date_formats(self, detector):
        profile = _profile(
            type_=ColumnType.DATE, count=4,
            patterns=["date_iso", "date_us"],
            pattern_match_rates={"date_iso": 0.5, "date_us": 0.5},
        )
        found = _of_type(detector.detect([profile], 0, 4), IssueType.INCONSISTENT_FORMAT)
        assert len(found) == 1
        assert found[0].count == 2
        assert "date_iso, date_us" in found[0].description

    def test_dominant_format_not_followed(self, detector):
        profile = _profile(
            type_=ColumnType.STRING, count=10,
            patterns=["email"], pattern_match_rates={"email": 0.9},
        )
        found = _of_type(detector.detect([profile], 0, 10), IssueType.INCONSISTENT_FORMAT)
        assert found[0].count == 1

    def test_uniform_format_is_clean(self, detector):
        profile = _profile(
            type_=ColumnType.STRING, count=10,
            patterns=["email"], pattern_match_rates={"email": 1.0},
        )
        assert _of_type(detector.detect([profile], 0, 10), IssueType.INCONSISTENT_FORMAT) == []


class TestUnusualPatterns:
    """unusual_patterns rules."""

    def test_high_cardinality_string(self, detector):
        profile = _profile(
            type_=ColumnType.STRING, count=100, unique=100, unique_percentage=100.0,
        )
        found = _of_type(detector.detect([profile], 0, 100), IssueType.UNUSUAL_PATTERNS)
        assert len(found) == 1
        assert found[0].severity is IssueSeverity.LOW
        assert "cardinality" in found[0].description

    def test_constant_column(self, detector):
        profile = _profile(count=5, unique=1, unique_percentage=20.0)
        found = _of_type(detector.detect([profile], 0, 5), IssueType.UNUSUAL_PATTERNS)
        assert len(found) == 1
        assert "constant" in found[0].description


class TestOrdering:
    """Issue ordering."""

    def test_most_severe_first_stable(self, detector):
        """High issues come first; equal severities keep column order."""
        profiles = [
            _profile(name="a", count=95, missing=5),
            _profile(name="b", count=60, missing=40),
            _profile(name="c", count=90, missing=10),
            _profile(name="d", count=50, missing=50),
        ]
        issues = detector.detect(profiles, 0, 100)
        assert [(i.column, i.severity) for i in issues] == [
            ("b", IssueSeverity.HIGH),
            ("d", IssueSeverity.HIGH),
            ("a", IssueSeverity.LOW),
            ("c", IssueSeverity.LOW),
        ]

    def test_mapping_input(self, detector):
        """A name-to-profile mapping is accepted."""
        profile = _profile(name="a", count=50, missing=50)
        assert len(detector.detect({"a": profile}, 0, 100)) == 1

    def test_clean_dataset(self, detector):
        assert detector.detect([], 0, 0) == []
