# -*- coding: utf-8 -*-
"""Pytest configuration and shared fixtures."""

import os
from typing import Any, Dict, List

import pytest

from datalens.data_profiler.config import DataProfilerConfig, reset_config
from datalens.data_profiler.profile_aggregator import DataProfiler
from datalens.data_profiler.service import reset_data_profiler_service


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Run every test against default settings and fresh singletons."""
    for key in list(os.environ):
        if key.startswith("DL_DP_"):
            monkeypatch.delenv(key, raising=False)
    reset_config()
    reset_data_profiler_service()
    yield
    reset_config()
    reset_data_profiler_service()


@pytest.fixture
def config() -> DataProfilerConfig:
    """Default profiler configuration."""
    return DataProfilerConfig()


@pytest.fixture
def profiler(config) -> DataProfiler:
    """Sequential profiler with default configuration."""
    return DataProfiler(config)


@pytest.fixture
def ab_rows() -> List[Dict[str, Any]]:
    """Four rows over columns A and B; only the last row is complete."""
    return [
        {"A": 1, "B": None},
        {"A": None, "B": 2},
        {"A": 3, "B": None},
        {"A": 4, "B": 4},
    ]


@pytest.fixture
def customer_rows() -> List[Dict[str, Any]]:
    """A small mixed-type customer dataset with gaps, a duplicate and an outlier."""
    rows = []
    for i in range(40):
        rows.append({
            "id": f"C{i:04d}",
            "age": 20 + (i % 30) if i % 7 else None,
            "income": 40000 + 1000 * (i % 10) if i % 5 else "",
            "email": f"user{i}@example.com" if i % 4 else None,
            "active": "true" if i % 2 else "false",
            "signup": f"2024-01-{(i % 28) + 1:02d}",
            "region": ["north", "south", "east", "west"][i % 4],
        })
    rows[10]["income"] = 900000
    rows.append(dict(rows[3]))
    return rows


@pytest.fixture
def customer_columns() -> List[str]:
    return ["id", "age", "income", "email", "active", "signup", "region"]
