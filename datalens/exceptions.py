"""DataLens Custom Exception Hierarchy.

Exception Hierarchy:
    DataLensException (base)
    ├── ConfigurationError
    └── DataException
        ├── ProfilingContractError
        └── ProfilingCancelledError

Malformed *values* never raise: a token that cannot be coerced to its
column type is recorded as an anomaly, and a zero-variance missingness
indicator is left out of the correlation list. Exceptions are reserved
for callers that break the input contract (duplicate column names, rows
that lack a declared column) and for cooperative cancellation.

All exceptions include rich context:
- error_code: Unique error identifier
- context: Dictionary with error-specific details
- timestamp: When the error occurred

Example:
    >>> from datalens.exceptions import ProfilingContractError
    >>> raise ProfilingContractError(
    ...     message="Duplicate column names",
    ...     duplicate_columns=["age"],
    ... )
"""

import json
import re
from datetime import datetime
from typing import Any, Dict, List, Optional


# ==============================================================================
# Base Exception
# ==============================================================================

class DataLensException(Exception):
    """Base exception for all DataLens errors.

    Attributes:
        message: Human-readable error message
        error_code: Unique error identifier (e.g., "DL_DATA_PROFILING_CONTRACT_ERROR")
        context: Dictionary with error-specific details
        timestamp: When the error occurred
    """

    ERROR_PREFIX = "DL"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Initialize DataLens exception with rich context.

        Args:
            message: Human-readable error message
            error_code: Unique error identifier (auto-generated if not provided)
            context: Dictionary with error-specific details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self._generate_error_code()
        self.context = context or {}
        self.timestamp = datetime.now()

    def _generate_error_code(self) -> str:
        """Generate error code based on exception class.

        Returns:
            Error code like "DL_DATA_PROFILING_CONTRACT_ERROR"
        """
        error_type = re.sub(r"(?<!^)(?=[A-Z])", "_", self.__class__.__name__).upper()
        return f"{self.ERROR_PREFIX}_{error_type}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def to_json(self) -> str:
        """Convert exception to JSON string."""
        return json.dumps(self.to_dict(), indent=2, default=str)

    def __str__(self) -> str:
        return f"[{self.error_code}] - {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}')"
        )


class ConfigurationError(DataLensException):
    """Profiler configuration is invalid.

    Example:
        >>> raise ConfigurationError(
        ...     message="missing_medium_threshold must not exceed missing_high_threshold",
        ...     context={"missing_medium_threshold": 40.0, "missing_high_threshold": 30.0},
        ... )
    """
    ERROR_PREFIX = "DL_CONFIG"


# ==============================================================================
# Data Exceptions
# ==============================================================================

class DataException(DataLensException):
    """Base exception for dataset-related errors."""
    ERROR_PREFIX = "DL_DATA"


class ProfilingContractError(DataException):
    """The caller handed the profiler a dataset that breaks the input contract.

    Raised for duplicate column names, rows that are not mappings, and rows
    missing a declared column key entirely (as opposed to holding ``None``
    or ``""``). These point at a broken ingestion step upstream and are
    reported rather than patched.

    Example:
        >>> raise ProfilingContractError(
        ...     message="Row 3 has no key for declared column 'age'",
        ...     row_index=3,
        ...     missing_columns=["age"],
        ... )
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        row_index: Optional[int] = None,
        missing_columns: Optional[List[str]] = None,
        duplicate_columns: Optional[List[str]] = None,
    ):
        """Initialize contract error.

        Args:
            message: Error message
            context: Error context
            row_index: Index of the offending row, when the violation is row-level
            missing_columns: Declared columns absent from the offending row
            duplicate_columns: Column names declared more than once
        """
        context = context or {}
        if row_index is not None:
            context["row_index"] = row_index
        if missing_columns:
            context["missing_columns"] = missing_columns
        if duplicate_columns:
            context["duplicate_columns"] = duplicate_columns
        super().__init__(message, context=context)


class ProfilingCancelledError(DataException):
    """A profiling run was cancelled between pipeline stages.

    No partial profile is produced; callers re-run from scratch.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        stage: Optional[str] = None,
    ):
        """Initialize cancellation error.

        Args:
            message: Error message
            context: Error context
            stage: Name of the stage that would have run next
        """
        context = context or {}
        if stage:
            context["stage"] = stage
        super().__init__(message, context=context)


# ==============================================================================
# Exception Utilities
# ==============================================================================

def format_exception_chain(exc: Exception) -> str:
    """Format exception chain for logging/display.

    Args:
        exc: Exception to format

    Returns:
        Formatted string with full exception chain
    """
    lines = []
    current: Optional[BaseException] = exc

    while current is not None:
        if isinstance(current, DataLensException):
            lines.append(str(current))
            lines.append(f"  Context: {current.context}")
        else:
            lines.append(f"{type(current).__name__}: {current}")
        current = getattr(current, "__cause__", None)

    return "\n".join(lines)


__all__ = [
    "DataLensException",
    "ConfigurationError",
    "DataException",
    "ProfilingContractError",
    "ProfilingCancelledError",
    "format_exception_chain",
]
