"""
Caching system for resolved feature graphs.

Graphs are memoized per (version, runtime) key. At most one build runs per key:
concurrent callers for the same key share a future, while builds for different
keys proceed independently.
"""

import threading
from collections import OrderedDict
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any

from featuredocs.core.interfaces import IFeatureCache
from featuredocs.models.feature import CacheKey
from featuredocs.services.graph.feature_graph import FeatureListGraph
from featuredocs.utils.logging import setup_logging

logger = setup_logging(__name__)


class FeatureCache(IFeatureCache):
    """LRU cache of feature graphs with single-flight construction."""

    def __init__(self, build: Callable[[CacheKey], FeatureListGraph], max_size: int = 16):
        """
        Initialize the feature cache.

        Args:
            build: Function producing the graph for a key; may raise.
            max_size: Maximum number of graphs retained.
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._build = build
        self.max_size = max_size
        self._cache: OrderedDict[CacheKey, FeatureListGraph] = OrderedDict()
        self._inflight: dict[CacheKey, Future] = {}
        self._stats = {
            'hits': 0,
            'misses': 0,
            'builds': 0,
            'failures': 0,
            'evictions': 0,
            'invalidations': 0,
        }
        # Guards the dictionaries only; builds run outside it.
        self._lock = threading.Lock()

        logger.info(f"Feature cache initialized: max_size={max_size}")

    def get_or_build(self, key: CacheKey, timeout: float | None = None) -> FeatureListGraph:
        """
        Return the graph for a key, building it if needed.

        If another caller is already building the key, wait for that build.
        A timeout only abandons this caller's wait; the build carries on.

        Raises:
            Whatever the build raised, for the builder and every waiter.
            TimeoutError: If waiting exceeds ``timeout``.
        """
        with self._lock:
            graph = self._cache.get(key)
            if graph is not None:
                self._cache.move_to_end(key)
                self._stats['hits'] += 1
                logger.debug(f"Feature cache hit for {key}")
                return graph

            self._stats['misses'] += 1
            future = self._inflight.get(key)
            owner = future is None
            if owner:
                future = Future()
                future.set_running_or_notify_cancel()
                self._inflight[key] = future
                self._stats['builds'] += 1

        if not owner:
            logger.debug(f"Waiting for in-flight build of {key}")
            return future.result(timeout)

        logger.debug(f"Feature cache miss for {key}, building")
        try:
            graph = self._build(key)
        except BaseException as e:
            with self._lock:
                if self._inflight.get(key) is future:
                    del self._inflight[key]
                self._stats['failures'] += 1
            logger.warning(f"Feature graph build for {key} failed: {e}")
            future.set_exception(e)
            raise

        with self._lock:
            # An invalidate during the build detaches it; its result is not stored.
            if self._inflight.get(key) is future:
                del self._inflight[key]
                self._store(key, graph)
        future.set_result(graph)
        return graph

    def _store(self, key: CacheKey, graph: FeatureListGraph) -> None:
        while len(self._cache) >= self.max_size:
            evicted, _ = self._cache.popitem(last=False)
            self._stats['evictions'] += 1
            logger.debug(f"Evicted feature graph for {evicted}")
        self._cache[key] = graph

    def peek(self, key: CacheKey) -> FeatureListGraph | None:
        """Return the cached graph for a key without building or touching LRU order."""
        with self._lock:
            return self._cache.get(key)

    def invalidate(self, key: CacheKey) -> bool:
        """
        Drop a key so the next access rebuilds it.

        Holders of the old graph and callers already waiting on an in-flight
        build are unaffected.

        Returns:
            True if a cached or in-flight entry was dropped.
        """
        with self._lock:
            dropped = self._cache.pop(key, None) is not None
            dropped = self._inflight.pop(key, None) is not None or dropped
            if dropped:
                self._stats['invalidations'] += 1
        if dropped:
            logger.info(f"Invalidated feature graph for {key}")
        return dropped

    def clear(self) -> None:
        """
        Clear all entries from the cache.
        """
        with self._lock:
            self._cache.clear()
            self._inflight.clear()
            for name in self._stats:
                self._stats[name] = 0
            logger.info("Feature cache cleared.")

    def get_stats(self) -> dict[str, Any]:
        """
        Get current cache statistics.
        """
        with self._lock:
            lookups = self._stats['hits'] + self._stats['misses']
            return {
                'size': len(self._cache),
                'max_size': self.max_size,
                'in_flight': len(self._inflight),
                **self._stats,
                'hit_rate': self._stats['hits'] / lookups if lookups else 0.0,
            }
