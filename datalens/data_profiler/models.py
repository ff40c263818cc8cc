# -*- coding: utf-8 -*-
"""
Data Profiler Data Models

Pydantic v2 data models for the DataLens profiling engine. Every model is
frozen once built and serialises with camelCase field aliases
(``missingPercentage``, ``generatedAt``, ...); constructors accept either
the snake_case attribute names or the camelCase aliases, so a profile
exported with ``to_json()`` can be loaded back with ``from_json()``
without field loss.

Enumerations (3):
    - ColumnType, IssueType, IssueSeverity

Profile models (7):
    - TopValue, ColumnProfile, DataQualityIssue, MissingDataPattern,
      MissingnessCorrelation, ProfileOverview, DataProfile

Report models (5):
    - ColumnMissingness, MissingDataSummary, RowMissingBucket,
      MissingDataReport, MissingnessMatrixSample
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _utcnow() -> datetime:
    """Return current UTC datetime with microseconds zeroed."""
    return datetime.now(timezone.utc).replace(microsecond=0)


# Legacy and loosely spelled type names accepted by ColumnType.coerce.
_LEGACY_TYPE_NAMES: Dict[str, str] = {
    "integer": "number",
    "int": "number",
    "float": "number",
    "double": "number",
    "decimal": "number",
    "numeric": "number",
    "datetime": "date",
    "timestamp": "date",
    "bool": "boolean",
    "text": "string",
    "str": "string",
    "categorical": "string",
}


# =============================================================================
# Enumerations
# =============================================================================


class ColumnType(str, Enum):
    """Semantic type assigned to a column."""

    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"

    @classmethod
    def coerce(cls, value: Union[ColumnType, str]) -> ColumnType:
        """Map a caller-supplied type name onto one of the four column types.

        Accepts the canonical names in any case plus the legacy spellings
        in ``_LEGACY_TYPE_NAMES``. Anything else falls back to ``STRING``
        with a warning.

        Args:
            value: A ColumnType or a type name string.

        Returns:
            The resolved ColumnType.
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        key = _LEGACY_TYPE_NAMES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            logger.warning(
                "Unrecognised column type %r, treating as string", value,
            )
            return cls.STRING


class IssueType(str, Enum):
    """Category of a detected data quality issue."""

    MISSING_VALUES = "missing_values"
    DUPLICATES = "duplicates"
    OUTLIERS = "outliers"
    INCONSISTENT_FORMAT = "inconsistent_format"
    DATA_TYPE_MISMATCH = "data_type_mismatch"
    UNUSUAL_PATTERNS = "unusual_patterns"


class IssueSeverity(str, Enum):
    """Severity of a data quality issue.

    ``rank`` orders severities so that sorting by ``-rank`` puts the most
    severe issues first.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self.value]


_SEVERITY_RANK: Dict[str, int] = {
    "low": 1,
    "medium": 2,
    "high": 3,
}


# =============================================================================
# Base model
# =============================================================================


class _ProfileModel(BaseModel):
    """Frozen base model with camelCase aliases."""

    model_config = {
        "extra": "forbid",
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to a JSON-compatible dict keyed by camelCase aliases."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Profile models
# =============================================================================


class TopValue(_ProfileModel):
    """One of the most frequent values of a string column.

    Attributes:
        value: The value as it appeared in the dataset.
        count: Number of occurrences.
        percentage: Share of the column's non-missing values (0-100).
    """

    value: Any = Field(..., description="Value as it appeared in the dataset")
    count: int = Field(..., ge=1, description="Number of occurrences")
    percentage: float = Field(
        ..., ge=0.0, le=100.0,
        description="Share of the column's non-missing values",
    )


class ColumnProfile(_ProfileModel):
    """Statistical profile of a single column.

    Numeric fields are populated only for ``number`` columns and string
    fields only for ``string`` columns; the rest stay ``None`` or empty.

    Attributes:
        name: Column name.
        type: Resolved column type.
        count: Non-missing values.
        missing: Missing values.
        missing_percentage: missing / total rows x 100.
        unique: Distinct non-missing values.
        unique_percentage: unique / count x 100 (0 for an all-missing column).
        duplicates: count - unique.
        mode: Most frequent non-missing value, first seen on ties.
        mean: Arithmetic mean of the conforming numbers.
        median: Median of the conforming numbers.
        std: Population standard deviation.
        min: Smallest conforming number.
        max: Largest conforming number.
        q1: First quartile by linear interpolation.
        q3: Third quartile by linear interpolation.
        skewness: Standardised third moment.
        kurtosis: Excess kurtosis (standardised fourth moment minus 3).
        outliers: Values outside the IQR fences, in row order.
        outlier_indices: Row indices of ``outliers``.
        avg_length: Mean length of the string representations.
        min_length: Shortest string representation.
        max_length: Longest string representation.
        top_values: Most frequent values with counts and percentages.
        patterns: Format signatures matched by the column's values.
        pattern_match_rates: Match rate per entry of ``patterns``.
        anomalies: Free-text flags about values that did not parse.
        non_conforming: Non-missing values that do not fit the column type.
        numeric_share: Share of non-missing values that parse as numbers.
    """

    name: str = Field(..., description="Column name")
    type: ColumnType = Field(..., description="Resolved column type")
    count: int = Field(default=0, ge=0, description="Non-missing values")
    missing: int = Field(default=0, ge=0, description="Missing values")
    missing_percentage: float = Field(
        default=0.0, ge=0.0, le=100.0,
        description="Missing values as a percentage of total rows",
    )
    unique: int = Field(default=0, ge=0, description="Distinct non-missing values")
    unique_percentage: float = Field(
        default=0.0, ge=0.0, le=100.0,
        description="Distinct values as a percentage of non-missing values",
    )
    duplicates: int = Field(
        default=0, ge=0,
        description="Non-missing values repeating an earlier value",
    )
    mode: Any = Field(None, description="Most frequent non-missing value")

    # -- numeric ----------------------------------------------------------
    mean: Optional[float] = Field(None, description="Arithmetic mean")
    median: Optional[float] = Field(None, description="Median")
    std: Optional[float] = Field(
        None, ge=0.0, description="Population standard deviation",
    )
    min: Optional[float] = Field(None, description="Minimum")
    max: Optional[float] = Field(None, description="Maximum")
    q1: Optional[float] = Field(None, description="First quartile")
    q3: Optional[float] = Field(None, description="Third quartile")
    skewness: Optional[float] = Field(None, description="Skewness")
    kurtosis: Optional[float] = Field(None, description="Excess kurtosis")
    outliers: List[float] = Field(
        default_factory=list, description="Values outside the IQR fences",
    )
    outlier_indices: List[int] = Field(
        default_factory=list, description="Row indices of the outliers",
    )

    # -- string -----------------------------------------------------------
    avg_length: Optional[float] = Field(
        None, ge=0.0, description="Mean string length",
    )
    min_length: Optional[int] = Field(
        None, ge=0, description="Shortest string length",
    )
    max_length: Optional[int] = Field(
        None, ge=0, description="Longest string length",
    )
    top_values: List[TopValue] = Field(
        default_factory=list, description="Most frequent values",
    )

    # -- cross-type -------------------------------------------------------
    patterns: List[str] = Field(
        default_factory=list, description="Detected format signatures",
    )
    pattern_match_rates: Dict[str, float] = Field(
        default_factory=dict, description="Match rate per detected pattern",
    )
    anomalies: List[str] = Field(
        default_factory=list, description="Free-text anomaly flags",
    )
    non_conforming: int = Field(
        default=0, ge=0,
        description="Non-missing values that do not fit the column type",
    )
    numeric_share: float = Field(
        default=0.0, ge=0.0, le=1.0,
        description="Share of non-missing values parseable as numbers",
    )


class DataQualityIssue(_ProfileModel):
    """A single data quality finding with a remediation hint.

    Attributes:
        type: Issue category.
        severity: Issue severity.
        column: Affected column, or None for dataset-level issues.
        description: Human-readable description.
        count: Number of affected values or rows.
        suggestion: Actionable remediation text.
    """

    type: IssueType = Field(..., description="Issue category")
    severity: IssueSeverity = Field(..., description="Issue severity")
    column: Optional[str] = Field(None, description="Affected column")
    description: str = Field(..., description="Human-readable description")
    count: int = Field(default=0, ge=0, description="Affected values or rows")
    suggestion: str = Field(..., description="Actionable remediation text")

    @field_validator("description", "suggestion")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Validate text fields are non-empty."""
        if not v or not v.strip():
            raise ValueError("description and suggestion must be non-empty")
        return v


class MissingDataPattern(_ProfileModel):
    """Rows sharing the same set of missing columns.

    Attributes:
        pattern: Sorted missing column names joined by ``","``.
        count: Rows sharing the signature.
        percentage: count / total rows x 100.
        columns: The missing columns, sorted.
        description: Human-readable summary.
    """

    pattern: str = Field(..., description="Missingness signature")
    count: int = Field(..., ge=1, description="Rows sharing the signature")
    percentage: float = Field(
        ..., ge=0.0, le=100.0, description="Share of total rows",
    )
    columns: List[str] = Field(..., description="Missing columns, sorted")
    description: str = Field(..., description="Human-readable summary")


class MissingnessCorrelation(_ProfileModel):
    """Phi coefficient between two columns' missingness indicators."""

    column1: str = Field(..., description="First column, earlier in column order")
    column2: str = Field(..., description="Second column")
    correlation: float = Field(
        ..., ge=-1.0, le=1.0, description="Phi coefficient",
    )


class ProfileOverview(_ProfileModel):
    """Dataset-level summary of a profile.

    Attributes:
        total_rows: Rows in the dataset.
        total_columns: Declared columns.
        memory_usage: Display string for the estimated size, e.g. ``"12 KB"``.
        memory_usage_bytes: Estimated in-memory size in bytes.
        duplicate_rows: Rows equal to an earlier row over all columns.
        completeness: complete rows / total rows x 100.
        complete_rows: Rows with no missing value.
        total_cells: total rows x total columns.
        total_missing: Missing cells across the dataset.
    """

    total_rows: int = Field(default=0, ge=0, description="Rows in the dataset")
    total_columns: int = Field(default=0, ge=0, description="Declared columns")
    memory_usage: str = Field(default="0 KB", description="Estimated size for display")
    memory_usage_bytes: int = Field(
        default=0, ge=0, description="Estimated size in bytes",
    )
    duplicate_rows: int = Field(
        default=0, ge=0, description="Rows equal to an earlier row",
    )
    completeness: float = Field(
        default=0.0, ge=0.0, le=100.0,
        description="Complete rows as a percentage of total rows",
    )
    complete_rows: int = Field(default=0, ge=0, description="Rows with no missing value")
    total_cells: int = Field(default=0, ge=0, description="Rows x columns")
    total_missing: int = Field(default=0, ge=0, description="Missing cells")


class DataProfile(_ProfileModel):
    """Immutable profiling snapshot of one dataset.

    Attributes:
        overview: Dataset-level summary.
        columns: Column name to ColumnProfile.
        data_quality: Detected issues, most severe first.
        correlations: Symmetric column to column to phi coefficient mapping.
        missing_patterns: Most frequent missingness signatures.
        generated_at: UTC timestamp of the profiling run.
    """

    overview: ProfileOverview = Field(..., description="Dataset-level summary")
    columns: Dict[str, ColumnProfile] = Field(
        default_factory=dict, description="Per-column profiles",
    )
    data_quality: List[DataQualityIssue] = Field(
        default_factory=list, description="Issues, most severe first",
    )
    correlations: Dict[str, Dict[str, float]] = Field(
        default_factory=dict, description="Missingness correlation matrix",
    )
    missing_patterns: List[MissingDataPattern] = Field(
        default_factory=list, description="Top missing-data patterns",
    )
    generated_at: datetime = Field(
        default_factory=_utcnow, description="UTC generation timestamp",
    )

    def to_json(self, indent: Optional[int] = None) -> str:
        """Serialise the profile to JSON with camelCase keys."""
        return self.model_dump_json(by_alias=True, indent=indent)

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> DataProfile:
        """Load a profile previously produced by ``to_json``."""
        return cls.model_validate_json(data)


# =============================================================================
# Missing data report models
# =============================================================================


class ColumnMissingness(_ProfileModel):
    """Missing-value count for one column."""

    column: str = Field(..., description="Column name")
    missing: int = Field(..., ge=0, description="Missing values")
    percentage: float = Field(
        ..., ge=0.0, le=100.0, description="Share of total rows",
    )
    type: ColumnType = Field(..., description="Resolved column type")


class MissingDataSummary(_ProfileModel):
    """Dataset-wide missingness totals."""

    total_rows: int = Field(default=0, ge=0)
    total_columns: int = Field(default=0, ge=0)
    total_cells: int = Field(default=0, ge=0)
    total_missing: int = Field(default=0, ge=0)
    missing_percentage: float = Field(default=0.0, ge=0.0, le=100.0)
    complete_rows: int = Field(default=0, ge=0)
    incomplete_rows: int = Field(default=0, ge=0)


class RowMissingBucket(_ProfileModel):
    """Number of rows having exactly ``missing_count`` missing cells."""

    missing_count: int = Field(..., ge=0)
    rows: int = Field(..., ge=1)
    percentage: float = Field(..., ge=0.0, le=100.0)


class MissingDataReport(_ProfileModel):
    """Exportable missing data report derived from a DataProfile."""

    summary: MissingDataSummary
    column_analysis: List[ColumnMissingness] = Field(default_factory=list)
    patterns: List[MissingDataPattern] = Field(default_factory=list)
    correlations: List[MissingnessCorrelation] = Field(default_factory=list)
    row_missing_histogram: List[RowMissingBucket] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=_utcnow)

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Serialise the report to JSON with camelCase keys."""
        return self.model_dump_json(by_alias=True, indent=indent)

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> MissingDataReport:
        """Load a report previously produced by ``to_json``."""
        return cls.model_validate_json(data)


class MissingnessMatrixSample(_ProfileModel):
    """Fixed-stride sample of the 0/1 missingness matrix for heatmaps.

    Attributes:
        columns: Column order of each matrix row.
        row_indices: Source row index of each matrix row.
        matrix: One 0/1 list per sampled row (1 = missing).
    """

    columns: List[str] = Field(default_factory=list)
    row_indices: List[int] = Field(default_factory=list)
    matrix: List[List[int]] = Field(default_factory=list)


__all__ = [
    # Enumerations
    "ColumnType",
    "IssueType",
    "IssueSeverity",
    # Profile models
    "TopValue",
    "ColumnProfile",
    "DataQualityIssue",
    "MissingDataPattern",
    "MissingnessCorrelation",
    "ProfileOverview",
    "DataProfile",
    # Report models
    "ColumnMissingness",
    "MissingDataSummary",
    "RowMissingBucket",
    "MissingDataReport",
    "MissingnessMatrixSample",
]
