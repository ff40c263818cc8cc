"""Tests for ProfileCache and compute_cache_key."""

import threading

import pytest

from datalens.data_profiler.config import DataProfilerConfig
from datalens.data_profiler.models import ColumnType, DataProfile, ProfileOverview
from datalens.data_profiler.profile_cache import ProfileCache, compute_cache_key


def _profile(rows=1):
    return DataProfile(overview=ProfileOverview(total_rows=rows))


class TestComputeCacheKey:
    """Content hashing of profiling requests."""

    def test_deterministic(self, ab_rows):
        assert compute_cache_key(ab_rows, ["A", "B"]) == compute_cache_key(
            [dict(r) for r in ab_rows], ["A", "B"],
        )

    def test_sha256_hex(self, ab_rows):
        key = compute_cache_key(ab_rows, ["A", "B"])
        assert len(key) == 64
        int(key, 16)

    def test_value_types_distinguished(self):
        keys = {
            compute_cache_key([{"a": v}], ["a"])
            for v in (1, 1.0, "1", True)
        }
        assert len(keys) == 4

    def test_any_change_changes_key(self, ab_rows):
        base = compute_cache_key(ab_rows, ["A", "B"])
        changed_value = [dict(r) for r in ab_rows]
        changed_value[0]["A"] = 2
        assert compute_cache_key(changed_value, ["A", "B"]) != base
        assert compute_cache_key(ab_rows, ["B", "A"]) != base
        assert compute_cache_key(ab_rows, ["A", "B"], {"A": "string"}) != base
        assert compute_cache_key(list(reversed(ab_rows)), ["A", "B"]) != base

    def test_enum_and_name_types_equivalent(self, ab_rows):
        assert compute_cache_key(ab_rows, ["A"], {"A": ColumnType.DATE}) == \
            compute_cache_key(ab_rows, ["A"], {"A": "date"})

    def test_config_changes_key(self, ab_rows):
        """Profiles computed with different settings never share a key."""
        base = compute_cache_key(ab_rows, ["A", "B"], None, DataProfilerConfig())
        assert compute_cache_key(
            ab_rows, ["A", "B"], None, DataProfilerConfig(top_n_patterns=1),
        ) != base
        assert compute_cache_key(
            ab_rows, ["A", "B"], None, DataProfilerConfig(iqr_multiplier=3.0),
        ) != base
        assert compute_cache_key(
            ab_rows, ["A", "B"], None, DataProfilerConfig(),
        ) == base


class TestProfileCache:
    """LRU behaviour and counters."""

    def test_get_put(self):
        cache = ProfileCache(max_entries=2)
        profile = _profile()
        assert cache.get("k") is None
        cache.put("k", profile)
        assert cache.get("k") == profile
        assert cache.get_statistics() == {
            "entries": 1, "max_entries": 2, "hits": 1, "misses": 1,
        }

    def test_lru_eviction(self):
        cache = ProfileCache(max_entries=2)
        cache.put("a", _profile(1))
        cache.put("b", _profile(2))
        cache.get("a")
        cache.put("c", _profile(3))
        assert cache.get("b") is None
        assert cache.get("a") is not None
        assert len(cache) == 2

    def test_default_size_from_config(self):
        cache = ProfileCache(config=DataProfilerConfig(cache_max_entries=5))
        assert cache.get_statistics()["max_entries"] == 5

    def test_get_or_compute(self, ab_rows):
        cache = ProfileCache(max_entries=4)
        calls = []

        def compute(rows, columns, column_types):
            calls.append((len(rows), tuple(columns), column_types))
            return _profile(len(rows))

        first = cache.get_or_compute(ab_rows, ["A", "B"], None, compute)
        second = cache.get_or_compute(ab_rows, ["A", "B"], None, compute)
        assert first == second
        assert first is not second
        assert calls == [(4, ("A", "B"), None)]

        cache.get_or_compute(ab_rows, ["A", "B"], {"A": "string"}, compute)
        assert len(calls) == 2

    def test_invalidate(self):
        cache = ProfileCache(max_entries=2)
        cache.put("a", _profile())
        cache.invalidate()
        assert len(cache) == 0
        assert cache.get("a") is None

    def test_concurrent_access(self):
        cache = ProfileCache(max_entries=8)
        errors = []

        def worker(n):
            try:
                for i in range(50):
                    key = f"{n}-{i % 10}"
                    cache.put(key, _profile(i))
                    cache.get(key)
            except Exception as exc:  # pragma: no cover - surfaced below
                errors.append(exc)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert errors == []
        assert len(cache) <= 8


@pytest.mark.parametrize("max_entries", [1, 3])
def test_never_exceeds_bound(max_entries):
    cache = ProfileCache(max_entries=max_entries)
    for i in range(10):
        cache.put(str(i), _profile(i))
    assert len(cache) == max_entries


class TestCachedProfileIsolation:
    """Changes made to a returned profile never reach the cache."""

    def test_mutating_hit_leaves_cache_intact(self, profiler, ab_rows):
        cache = ProfileCache(max_entries=4)
        first = cache.get_or_compute(ab_rows, ["A", "B"], None, profiler.profile)
        expected = first.model_dump()

        first.columns.pop("A")
        first.data_quality.clear()
        first.correlations.clear()

        second = cache.get_or_compute(ab_rows, ["A", "B"], None, profiler.profile)
        assert second.model_dump() == expected
        assert set(second.columns) == {"A", "B"}

        second.missing_patterns.clear()
        assert cache.get_or_compute(
            ab_rows, ["A", "B"], None, profiler.profile,
        ).model_dump() == expected

    def test_mutating_stored_original_leaves_cache_intact(self):
        cache = ProfileCache(max_entries=2)
        profile = DataProfile(
            overview=ProfileOverview(total_rows=1), correlations={"a": {"b": 0.5}},
        )
        cache.put("k", profile)
        profile.correlations.clear()
        assert cache.get("k").correlations == {"a": {"b": 0.5}}
