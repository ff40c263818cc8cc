# -*- coding: utf-8 -*-
"""
Profile Cache - DataLens Data Profiler

Caller-managed cache of DataProfile snapshots keyed by a SHA-256 content
hash of ``(rows, columns, column_types, config)``. Any change to the
dataset, the column list, the declared types or the profiler settings
produces a different key; there is no incremental update, entries are
only ever replaced or dropped wholesale.

Callers always receive a deep copy of the stored profile, so changes made
to a returned profile never reach the cache.

The cache is bounded (least recently used entries are evicted first) and
thread-safe.

Example:
    >>> cache = ProfileCache(max_entries=8)
    >>> profile = cache.get_or_compute(
    ...     rows, columns, None, profiler.profile, config=config,
    ... )
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from collections import OrderedDict
from dataclasses import asdict
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from datalens.data_profiler.config import DataProfilerConfig, get_config
from datalens.data_profiler.metrics import record_cache_lookup
from datalens.data_profiler.models import ColumnType, DataProfile

logger = logging.getLogger(__name__)


def _type_name(value: Any) -> str:
    if isinstance(value, ColumnType):
        return value.value
    return str(value)


def compute_cache_key(
    rows: Sequence[Mapping[str, Any]],
    columns: Sequence[str],
    column_types: Optional[Mapping[str, Any]] = None,
    config: Optional[DataProfilerConfig] = None,
) -> str:
    """Compute the SHA-256 content hash of a profiling request.

    Rows are serialised with their values tagged by Python type so that
    ``1``, ``1.0``, ``"1"`` and ``True`` hash differently, matching the
    type-aware equality used by the profiler.

    Args:
        rows: Dataset rows.
        columns: Ordered column names.
        column_types: Optional type overrides.
        config: Settings the profile is computed with. Profiles built with
            different settings never share a key.

    Returns:
        Hex-encoded SHA-256 digest.
    """
    hasher = hashlib.sha256()
    header = {
        "columns": list(columns),
        "column_types": {
            str(k): _type_name(v) for k, v in sorted((column_types or {}).items())
        },
        "config": asdict(config) if config is not None else None,
    }
    hasher.update(json.dumps(header, sort_keys=True, default=str).encode("utf-8"))
    for row in rows:
        tagged = {
            str(k): [type(v).__name__, v] for k, v in row.items()
        }
        hasher.update(b"\n")
        hasher.update(
            json.dumps(tagged, sort_keys=True, default=str).encode("utf-8")
        )
    return hasher.hexdigest()


class ProfileCache:
    """Bounded LRU cache of DataProfile objects.

    Attributes:
        _max_entries: Maximum number of cached profiles.
        _entries: Key to profile, least recently used first.
        _lock: Guards ``_entries`` and the hit/miss counters.
    """

    def __init__(
        self,
        max_entries: Optional[int] = None,
        config: Optional[DataProfilerConfig] = None,
    ) -> None:
        cfg = config or get_config()
        self._max_entries = max_entries if max_entries is not None else cfg.cache_max_entries
        self._entries: OrderedDict[str, DataProfile] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[DataProfile]:
        """Return a copy of the cached profile for ``key``, or None."""
        with self._lock:
            profile = self._entries.get(key)
            if profile is None:
                self._misses += 1
            else:
                self._entries.move_to_end(key)
                self._hits += 1
        record_cache_lookup(profile is not None)
        if profile is None:
            return None
        return profile.model_copy(deep=True)

    def put(self, key: str, profile: DataProfile) -> None:
        """Store a copy of ``profile`` under ``key``, evicting the oldest
        entry if full."""
        stored = profile.model_copy(deep=True)
        with self._lock:
            self._entries[key] = stored
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted cached profile %s", evicted[:12])

    def get_or_compute(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Sequence[str],
        column_types: Optional[Mapping[str, Any]],
        compute: Callable[..., DataProfile],
        config: Optional[DataProfilerConfig] = None,
    ) -> DataProfile:
        """Return the cached profile for this request, computing it on a miss.

        Two threads missing on the same key concurrently may both compute;
        the later result replaces the earlier one.

        Args:
            rows: Dataset rows.
            columns: Ordered column names.
            column_types: Optional type overrides.
            compute: Called as ``compute(rows, columns, column_types)`` on a miss.
            config: Settings ``compute`` profiles with; part of the key.

        Returns:
            A copy of the cached or freshly computed profile.
        """
        key = compute_cache_key(rows, columns, column_types, config)
        cached = self.get(key)
        if cached is not None:
            logger.debug("Profile cache hit %s", key[:12])
            return cached
        profile = compute(rows, columns, column_types)
        self.put(key, profile)
        return profile

    def invalidate(self) -> None:
        """Drop every cached profile."""
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
        logger.info("Profile cache invalidated (%d entries dropped)", dropped)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_statistics(self) -> Dict[str, int]:
        """Return cache size and hit/miss counters."""
        with self._lock:
            return {
                "entries": len(self._entries),
                "max_entries": self._max_entries,
                "hits": self._hits,
                "misses": self._misses,
            }


__all__ = [
    "ProfileCache",
    "compute_cache_key",
]
