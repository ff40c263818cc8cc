"""Tests for the Prometheus metric helpers."""

from prometheus_client import REGISTRY

from datalens.data_profiler.metrics import (
    record_cache_lookup,
    record_contract_error,
    update_active_profiles,
)


def _sample(name, labels=None):
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestMetrics:
    """Helper functions update the default registry."""

    def test_cache_lookup(self):
        before = _sample("dl_dp_cache_lookups_total", {"result": "hit"})
        record_cache_lookup(True)
        assert _sample("dl_dp_cache_lookups_total", {"result": "hit"}) == before + 1

    def test_contract_error(self):
        before = _sample("dl_dp_contract_errors_total", {"reason": "missing_key"})
        record_contract_error("missing_key")
        assert _sample("dl_dp_contract_errors_total", {"reason": "missing_key"}) == before + 1

    def test_active_profiles_balanced(self):
        before = _sample("dl_dp_active_profiles")
        update_active_profiles(1)
        assert _sample("dl_dp_active_profiles") == before + 1
        update_active_profiles(-1)
        assert _sample("dl_dp_active_profiles") == before

    def test_profiling_records_columns(self, profiler, ab_rows):
        before = _sample("dl_dp_columns_profiled_total", {"column_type": "number"})
        profiler.profile(ab_rows, ["A", "B"])
        assert _sample("dl_dp_columns_profiled_total", {"column_type": "number"}) == before + 2
