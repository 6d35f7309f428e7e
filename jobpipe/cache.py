"""In-process TTL cache with hit/miss stats and a background sweep.

Storage is a ``cachetools.TLRUCache`` whose per-item expiry comes from the TTL
given to ``set``. Reads purge expired items first, so an expired key is
reported absent even before the sweeper thread gets to it. Values are
deep-copied in and out; callers never share a cached object.
"""
from __future__ import annotations

import copy
import math
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

from cachetools import TLRUCache

from jobpipe.log import get_logger

log = get_logger(__name__)

JOB_SEARCH_PREFIX = "job_search"
CV_ANALYSIS_PREFIX = "cv_analysis"
USER_PROFILE_PREFIX = "user_profile"

DEFAULT_MAX_ENTRIES = 10_000


@dataclass(frozen=True)
class _CacheEntry:
    value: Any
    ttl: float


@dataclass(frozen=True)
class CacheStats:
    key_count: int
    hits: int
    misses: int


def _time_to_use(_key: str, entry: _CacheEntry, now: float) -> float:
    # TLRUCache drops an item once now >= expiry; the next float up keeps it
    # live at exactly insertion time + ttl.
    return math.nextafter(now + entry.ttl, math.inf)


class TTLCache:
    def __init__(
        self,
        default_ttl: float = 600,
        check_period: float = 120,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        self.default_ttl = default_ttl
        self.check_period = check_period
        self._store: TLRUCache = TLRUCache(maxsize=max_entries, ttu=_time_to_use, timer=clock)
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._sweeper: threading.Thread | None = None
        if check_period > 0:
            self._sweeper = threading.Thread(
                target=self._sweep_loop, name="jobpipe-cache-sweep", daemon=True
            )
            self._sweeper.start()

    def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        try:
            stored = copy.deepcopy(value)
        except Exception as exc:
            log.warning("Cache write skipped for %s: %s", key, exc)
            return False
        entry = _CacheEntry(stored, self.default_ttl if ttl is None else ttl)
        with self._lock:
            self._store[key] = entry
        return True

    def get(self, key: str) -> Any | None:
        with self._lock:
            self._store.expire()
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None
            self._hits += 1
        return copy.deepcopy(entry.value)

    def delete(self, key: str) -> int:
        with self._lock:
            return 1 if self._store.pop(key, None) is not None else 0

    def has(self, key: str) -> bool:
        with self._lock:
            self._store.expire()
            return key in self._store

    def flush(self) -> None:
        with self._lock:
            self._store.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            self._store.expire()
            return CacheStats(key_count=len(self._store), hits=self._hits, misses=self._misses)

    def reset_stats(self) -> None:
        with self._lock:
            self._hits = 0
            self._misses = 0

    def sweep(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        with self._lock:
            removed = len(self._store.expire())
        if removed:
            log.debug("Cache sweep removed %d expired key(s)", removed)
        return removed

    def _sweep_loop(self) -> None:
        while not self._stop.wait(self.check_period):
            self.sweep()

    def close(self) -> None:
        self._stop.set()
        if self._sweeper is not None:
            self._sweeper.join(timeout=1)
            self._sweeper = None
        self.flush()


class CacheService:
    """Key-building helpers over one TTLCache, each with its own TTL."""

    def __init__(
        self,
        cache: TTLCache,
        job_search_ttl: float = 300,
        cv_analysis_ttl: float = 3600,
        user_profile_ttl: float = 86400,
    ) -> None:
        self.cache = cache
        self.job_search_ttl = job_search_ttl
        self.cv_analysis_ttl = cv_analysis_ttl
        self.user_profile_ttl = user_profile_ttl

    @staticmethod
    def job_search_key(query: str, location: str) -> str:
        return f"{JOB_SEARCH_PREFIX}:{query}:{location}"

    def cache_job_search(self, query: str, location: str, results: list) -> bool:
        return self.cache.set(self.job_search_key(query, location), results, self.job_search_ttl)

    def get_cached_job_search(self, query: str, location: str) -> list | None:
        return self.cache.get(self.job_search_key(query, location))

    def cache_cv_analysis(self, cv_hash: str, analysis: Any) -> bool:
        return self.cache.set(f"{CV_ANALYSIS_PREFIX}:{cv_hash}", analysis, self.cv_analysis_ttl)

    def get_cached_cv_analysis(self, cv_hash: str) -> Any | None:
        return self.cache.get(f"{CV_ANALYSIS_PREFIX}:{cv_hash}")

    def cache_user_profile(self, user_id: str, profile: Any) -> bool:
        return self.cache.set(f"{USER_PROFILE_PREFIX}:{user_id}", profile, self.user_profile_ttl)

    def get_cached_user_profile(self, user_id: str) -> Any | None:
        return self.cache.get(f"{USER_PROFILE_PREFIX}:{user_id}")

    def stats(self) -> CacheStats:
        return self.cache.stats()
