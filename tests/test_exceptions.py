"""Tests for the DataLens exception hierarchy.

Covers:
- Base exception functionality
- Configuration and data exception subclasses
- Rich error context
- Exception serialization
- Exception chain formatting
"""

import json
from datetime import datetime

import pytest

from datalens.exceptions import (
    ConfigurationError,
    DataException,
    DataLensException,
    ProfilingCancelledError,
    ProfilingContractError,
    format_exception_chain,
)


class TestDataLensException:
    """Tests for base DataLensException."""

    def test_create_basic_exception(self):
        """Can create basic exception with message."""
        exc = DataLensException("Something went wrong")

        assert exc.message == "Something went wrong"
        assert exc.error_code == "DL_DATA_LENS_EXCEPTION"
        assert exc.context == {}
        assert isinstance(exc.timestamp, datetime)

    def test_explicit_error_code_and_context(self):
        """Explicit error code and context are kept as given."""
        exc = DataLensException(
            message="Test error",
            error_code="DL_TEST_001",
            context={"key": "value", "count": 42},
        )
        assert exc.error_code == "DL_TEST_001"
        assert exc.context == {"key": "value", "count": 42}

    def test_str_representation(self):
        """String form carries the error code and message."""
        exc = DataLensException("Boom", error_code="DL_X")
        assert str(exc) == "[DL_X] - Boom"

    def test_to_dict_and_json(self):
        """Exceptions serialise to dict and JSON."""
        exc = DataLensException("Boom", context={"rows": 3})
        data = exc.to_dict()
        assert data["error_type"] == "DataLensException"
        assert data["context"] == {"rows": 3}

        parsed = json.loads(exc.to_json())
        assert parsed["message"] == "Boom"
        assert parsed["error_code"] == exc.error_code


class TestSubclasses:
    """Tests for the configuration and data exception subclasses."""

    def test_configuration_error_code(self):
        """ConfigurationError uses the DL_CONFIG prefix."""
        exc = ConfigurationError("bad threshold")
        assert exc.error_code == "DL_CONFIG_CONFIGURATION_ERROR"
        assert isinstance(exc, DataLensException)

    def test_contract_error_context(self):
        """ProfilingContractError folds its keyword details into context."""
        exc = ProfilingContractError(
            message="Row 3 has no key for declared column 'age'",
            row_index=3,
            missing_columns=["age"],
        )
        assert isinstance(exc, DataException)
        assert exc.error_code == "DL_DATA_PROFILING_CONTRACT_ERROR"
        assert exc.context == {"row_index": 3, "missing_columns": ["age"]}

    def test_contract_error_duplicate_columns(self):
        """Duplicate column names are recorded in context."""
        exc = ProfilingContractError("dup", duplicate_columns=["a"])
        assert exc.context["duplicate_columns"] == ["a"]
        assert "row_index" not in exc.context

    def test_cancelled_error_stage(self):
        """ProfilingCancelledError records the stage that did not run."""
        exc = ProfilingCancelledError("cancelled", stage="pattern_mining")
        assert exc.error_code == "DL_DATA_PROFILING_CANCELLED_ERROR"
        assert exc.context == {"stage": "pattern_mining"}

    def test_catchable_as_base(self):
        """Every profiler error can be caught as DataLensException."""
        with pytest.raises(DataLensException):
            raise ProfilingCancelledError("stop")


class TestFormatExceptionChain:
    """Tests for format_exception_chain."""

    def test_single_exception(self):
        """A lone DataLens exception is formatted with its context."""
        exc = ConfigurationError("bad", context={"field": "x"})
        text = format_exception_chain(exc)
        assert "[DL_CONFIG_CONFIGURATION_ERROR] - bad" in text
        assert "Context: {'field': 'x'}" in text

    def test_chain_with_cause(self):
        """Causes are followed down the chain."""
        try:
            try:
                raise ValueError("inner")
            except ValueError as inner:
                raise ProfilingContractError("outer") from inner
        except ProfilingContractError as exc:
            text = format_exception_chain(exc)

        lines = text.splitlines()
        assert lines[0].endswith("outer")
        assert lines[-1] == "ValueError: inner"
