# -*- coding: utf-8 -*-
"""
Quality Issue Detector - DataLens Data Profiler

Turns column profiles and the dataset-level duplicate-row count into a
prioritised list of DataQualityIssue records. Every threshold comes from
DataProfilerConfig.

Rules (per column, in column order):
    - missing_values: high above ``missing_high_threshold``, medium above
      ``missing_medium_threshold``, low for any other non-zero share.
    - outliers: severity scaled by outlier density among non-missing values.
    - data_type_mismatch: typed columns holding values that do not parse as
      the column type, and string columns whose values are mostly numeric.
    - inconsistent_format: string or date columns mixing date formats, and
      string columns where a dominant format is not followed everywhere.
    - unusual_patterns: high-cardinality string columns (likely identifiers)
      and constant columns.

The dataset-level duplicates issue is appended last. The list is then
stable-sorted so high severity comes first. An empty list means a clean
dataset; detection never raises.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence, Union

from datalens.data_profiler.config import DataProfilerConfig, get_config
from datalens.data_profiler.models import (
    ColumnProfile,
    ColumnType,
    DataQualityIssue,
    IssueSeverity,
    IssueType,
)
from datalens.data_profiler.value_formats import DATE_FORMATS

logger = logging.getLogger(__name__)

_SUGGESTIONS = {
    IssueType.MISSING_VALUES: (
        "Consider data imputation or removing this column if too many "
        "values are missing."
    ),
    IssueType.DUPLICATES: (
        "Review duplicate rows and remove them if they are not legitimate "
        "repeated observations."
    ),
    IssueType.OUTLIERS: (
        "Verify the flagged values at their source; cap, transform or "
        "exclude them if they are entry errors."
    ),
    IssueType.DATA_TYPE_MISMATCH: (
        "Clean or convert the offending values so the column holds a "
        "single data type."
    ),
    IssueType.INCONSISTENT_FORMAT: (
        "Normalise the column to one format before analysis."
    ),
}


class QualityIssueDetector:
    """Rule-based data quality issue detection.

    Attributes:
        _config: Profiler configuration supplying severity bands.

    Example:
        >>> detector = QualityIssueDetector()
        >>> issues = detector.detect(profiles, duplicate_rows=0, total_rows=100)
    """

    def __init__(self, config: Optional[DataProfilerConfig] = None) -> None:
        self._config = config or get_config()

    def detect(
        self,
        profiles: Union[Sequence[ColumnProfile], Mapping[str, ColumnProfile]],
        duplicate_rows: int,
        total_rows: int,
    ) -> List[DataQualityIssue]:
        """Detect quality issues across all columns.

        Args:
            profiles: Column profiles in column order (a mapping is read in
                its iteration order).
            duplicate_rows: Rows equal to an earlier row.
            total_rows: Rows in the dataset.

        Returns:
            Issues, most severe first; ties keep column order.
        """
        if isinstance(profiles, Mapping):
            profiles = list(profiles.values())

        issues: List[DataQualityIssue] = []
        for profile in profiles:
            issues.extend(self._column_issues(profile))

        if duplicate_rows > 0 and total_rows > 0:
            issues.append(self._duplicates_issue(duplicate_rows, total_rows))

        issues.sort(key=lambda issue: -issue.severity.rank)
        logger.debug("Detected %d quality issues", len(issues))
        return issues

    # ------------------------------------------------------------------
    # Column rules
    # ------------------------------------------------------------------

    def _column_issues(self, profile: ColumnProfile) -> List[DataQualityIssue]:
        issues: List[DataQualityIssue] = []
        for rule in (
            self._missing_issue,
            self._outlier_issue,
            self._mismatch_issue,
            self._format_issue,
        ):
            issue = rule(profile)
            if issue is not None:
                issues.append(issue)
        issues.extend(self._unusual_issues(profile))
        return issues

    def _missing_issue(self, profile: ColumnProfile) -> Optional[DataQualityIssue]:
        pct = profile.missing_percentage
        if pct <= 0.0:
            return None
        if pct > self._config.missing_high_threshold:
            severity = IssueSeverity.HIGH
        elif pct > self._config.missing_medium_threshold:
            severity = IssueSeverity.MEDIUM
        else:
            severity = IssueSeverity.LOW
        return DataQualityIssue(
            type=IssueType.MISSING_VALUES,
            severity=severity,
            column=profile.name,
            description=(
                f"Column \"{profile.name}\" has {profile.missing} missing "
                f"values ({pct:.1f}%)"
            ),
            count=profile.missing,
            suggestion=_SUGGESTIONS[IssueType.MISSING_VALUES],
        )

    def _outlier_issue(self, profile: ColumnProfile) -> Optional[DataQualityIssue]:
        n = len(profile.outliers)
        if n == 0 or profile.count == 0:
            return None
        density = n / profile.count * 100.0
        if density > self._config.outlier_high_density:
            severity = IssueSeverity.HIGH
        elif density > self._config.outlier_medium_density:
            severity = IssueSeverity.MEDIUM
        else:
            severity = IssueSeverity.LOW
        return DataQualityIssue(
            type=IssueType.OUTLIERS,
            severity=severity,
            column=profile.name,
            description=(
                f"Column \"{profile.name}\" has {n} outlier(s) outside the "
                f"IQR fences ({density:.1f}% of values)"
            ),
            count=n,
            suggestion=_SUGGESTIONS[IssueType.OUTLIERS],
        )

    def _mismatch_issue(self, profile: ColumnProfile) -> Optional[DataQualityIssue]:
        if profile.type != ColumnType.STRING:
            if profile.non_conforming == 0:
                return None
            return DataQualityIssue(
                type=IssueType.DATA_TYPE_MISMATCH,
                severity=IssueSeverity.MEDIUM,
                column=profile.name,
                description=(
                    f"Column \"{profile.name}\" is typed {profile.type.value} "
                    f"but {profile.non_conforming} value(s) do not parse as "
                    f"{profile.type.value}"
                ),
                count=profile.non_conforming,
                suggestion=_SUGGESTIONS[IssueType.DATA_TYPE_MISMATCH],
            )

        if profile.count == 0:
            return None
        if profile.numeric_share < self._config.mixed_type_min_share:
            return None
        numeric = round(profile.numeric_share * profile.count)
        return DataQualityIssue(
            type=IssueType.DATA_TYPE_MISMATCH,
            severity=IssueSeverity.MEDIUM,
            column=profile.name,
            description=(
                f"Column \"{profile.name}\" is typed string but "
                f"{profile.numeric_share:.0%} of its values are numeric"
            ),
            count=numeric,
            suggestion=(
                "Convert the column to a numeric type and clean the "
                "non-numeric entries, or confirm it is a code rather than "
                "a quantity."
            ),
        )

    def _format_issue(self, profile: ColumnProfile) -> Optional[DataQualityIssue]:
        if profile.type not in (ColumnType.STRING, ColumnType.DATE):
            return None
        if profile.count == 0:
            return None

        date_formats = [p for p in profile.patterns if p in DATE_FORMATS]
        if len(date_formats) >= 2:
            top_rate = max(profile.pattern_match_rates[p] for p in date_formats)
            deviating = round((1.0 - top_rate) * profile.count)
            return DataQualityIssue(
                type=IssueType.INCONSISTENT_FORMAT,
                severity=IssueSeverity.MEDIUM,
                column=profile.name,
                description=(
                    f"Column \"{profile.name}\" mixes {len(date_formats)} date "
                    f"formats: {', '.join(date_formats)}"
                ),
                count=deviating,
                suggestion=_SUGGESTIONS[IssueType.INCONSISTENT_FORMAT],
            )

        dominance = self._config.format_dominance_threshold
        for name in profile.patterns:
            rate = profile.pattern_match_rates.get(name, 0.0)
            if dominance <= rate < 1.0:
                deviating = max(1, round((1.0 - rate) * profile.count))
                return DataQualityIssue(
                    type=IssueType.INCONSISTENT_FORMAT,
                    severity=IssueSeverity.MEDIUM,
                    column=profile.name,
                    description=(
                        f"Column \"{profile.name}\" mostly follows the {name} "
                        f"format ({rate:.0%}) but some values deviate"
                    ),
                    count=deviating,
                    suggestion=_SUGGESTIONS[IssueType.INCONSISTENT_FORMAT],
                )
        return None

    def _unusual_issues(self, profile: ColumnProfile) -> List[DataQualityIssue]:
        issues: List[DataQualityIssue] = []
        if profile.count <= 1:
            return issues

        if (
            profile.type == ColumnType.STRING
            and profile.unique_percentage > self._config.high_cardinality_threshold
        ):
            issues.append(DataQualityIssue(
                type=IssueType.UNUSUAL_PATTERNS,
                severity=IssueSeverity.LOW,
                column=profile.name,
                description=f"Column \"{profile.name}\" has very high cardinality",
                count=profile.unique,
                suggestion=(
                    "This column may be an identifier. Consider if it's "
                    "needed for analysis."
                ),
            ))

        if profile.unique == 1:
            issues.append(DataQualityIssue(
                type=IssueType.UNUSUAL_PATTERNS,
                severity=IssueSeverity.LOW,
                column=profile.name,
                description=(
                    f"Column \"{profile.name}\" holds a single constant value"
                ),
                count=profile.count,
                suggestion=(
                    "A constant column carries no information; consider "
                    "dropping it."
                ),
            ))
        return issues

    # ------------------------------------------------------------------
    # Dataset rules
    # ------------------------------------------------------------------

    def _duplicates_issue(self, duplicate_rows: int, total_rows: int) -> DataQualityIssue:
        pct = duplicate_rows / total_rows * 100.0
        if pct > self._config.duplicate_high_pct:
            severity = IssueSeverity.HIGH
        elif pct > self._config.duplicate_medium_pct:
            severity = IssueSeverity.MEDIUM
        else:
            severity = IssueSeverity.LOW
        return DataQualityIssue(
            type=IssueType.DUPLICATES,
            severity=severity,
            column=None,
            description=(
                f"Dataset has {duplicate_rows} duplicate row(s) "
                f"({pct:.1f}% of rows)"
            ),
            count=duplicate_rows,
            suggestion=_SUGGESTIONS[IssueType.DUPLICATES],
        )


__all__ = [
    "QualityIssueDetector",
]
