"""
Unit tests for FeatureCache single-flight construction.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from resources.tests.helpers.catalogs import feature

from featuredocs.models.feature import CacheKey
from featuredocs.services.cache import FeatureCache
from featuredocs.services.graph.builder import FeatureGraphBuilder
from featuredocs.utils.errors import DuplicateFeatureName

KEY = CacheKey("21.0.0.3", "ol")
OTHER_KEY = CacheKey("23.0.0.3", "ol")


class CountingBuilder:
    """Build function that counts calls and can be held open."""

    def __init__(self, gate: threading.Event | None = None):
        self.calls: list[CacheKey] = []
        self.gate = gate
        self.started = threading.Event()
        self._lock = threading.Lock()

    def __call__(self, key: CacheKey):
        with self._lock:
            self.calls.append(key)
        self.started.set()
        if self.gate is not None:
            assert self.gate.wait(5)
        return FeatureGraphBuilder().build([feature("ssl-1.0")], key)


def test_hit_returns_same_instance():
    build = CountingBuilder()
    cache = FeatureCache(build)

    first = cache.get_or_build(KEY)
    second = cache.get_or_build(KEY)

    assert first is second
    assert build.calls == [KEY]
    stats = cache.get_stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["builds"] == 1


def test_concurrent_callers_share_one_build():
    gate = threading.Event()
    build = CountingBuilder(gate)
    cache = FeatureCache(build)
    callers = 8

    with ThreadPoolExecutor(max_workers=callers) as pool:
        futures = [pool.submit(cache.get_or_build, KEY) for _ in range(callers)]
        assert build.started.wait(5)
        gate.set()
        graphs = [f.result(timeout=5) for f in futures]

    assert len(build.calls) == 1
    assert all(graph is graphs[0] for graph in graphs)


def test_failure_reaches_waiters_and_is_retried():
    gate = threading.Event()
    attempts = []

    def flaky_build(key):
        attempts.append(key)
        if len(attempts) == 1:
            assert gate.wait(5)
            raise DuplicateFeatureName("ssl-1.0")
        return FeatureGraphBuilder().build([feature("ssl-1.0")], key)

    cache = FeatureCache(flaky_build)
    with ThreadPoolExecutor(max_workers=2) as pool:
        owner = pool.submit(cache.get_or_build, KEY)
        while not attempts:
            threading.Event().wait(0.01)
        waiter = pool.submit(cache.get_or_build, KEY)
        while cache.get_stats()["misses"] < 2:
            threading.Event().wait(0.01)
        gate.set()
        with pytest.raises(DuplicateFeatureName):
            owner.result(timeout=5)
        with pytest.raises(DuplicateFeatureName):
            waiter.result(timeout=5)

    assert cache.peek(KEY) is None
    assert "ssl-1.0" in cache.get_or_build(KEY)
    assert len(attempts) == 2
    assert cache.get_stats()["failures"] == 1


def test_unrelated_keys_do_not_block():
    gate = threading.Event()
    blocked = threading.Event()

    def build(key):
        if key == KEY:
            blocked.set()
            assert gate.wait(5)
        return FeatureGraphBuilder().build([feature("ssl-1.0")], key)

    cache = FeatureCache(build)
    with ThreadPoolExecutor(max_workers=1) as pool:
        slow = pool.submit(cache.get_or_build, KEY)
        assert blocked.wait(5)
        assert cache.get_or_build(OTHER_KEY).key == OTHER_KEY
        gate.set()
        assert slow.result(timeout=5).key == KEY


def test_waiter_timeout_does_not_cancel_build():
    gate = threading.Event()
    build = CountingBuilder(gate)
    cache = FeatureCache(build)

    with ThreadPoolExecutor(max_workers=1) as pool:
        owner = pool.submit(cache.get_or_build, KEY)
        assert build.started.wait(5)
        with pytest.raises(TimeoutError):
            cache.get_or_build(KEY, timeout=0.05)
        gate.set()
        graph = owner.result(timeout=5)

    assert cache.get_or_build(KEY) is graph
    assert len(build.calls) == 1


def test_invalidate_forces_rebuild_and_keeps_old_graph_usable():
    build = CountingBuilder()
    cache = FeatureCache(build)

    old = cache.get_or_build(KEY)
    other = cache.get_or_build(OTHER_KEY)
    assert cache.invalidate(KEY) is True
    new = cache.get_or_build(KEY)

    assert new is not old
    assert "ssl-1.0" in old
    assert cache.get_or_build(OTHER_KEY) is other
    assert cache.invalidate(CacheKey("0", "none")) is False
    assert cache.get_stats()["invalidations"] == 1


def test_invalidate_during_build_does_not_store_result():
    gate = threading.Event()
    build = CountingBuilder(gate)
    cache = FeatureCache(build)

    with ThreadPoolExecutor(max_workers=1) as pool:
        owner = pool.submit(cache.get_or_build, KEY)
        assert build.started.wait(5)
        assert cache.invalidate(KEY) is True
        gate.set()
        stale = owner.result(timeout=5)

    assert cache.peek(KEY) is None
    assert cache.get_or_build(KEY) is not stale


def test_least_recently_used_graph_is_evicted():
    cache = FeatureCache(CountingBuilder(), max_size=2)
    keys = [CacheKey(str(v), "ol") for v in (1, 2, 3)]

    cache.get_or_build(keys[0])
    cache.get_or_build(keys[1])
    cache.get_or_build(keys[0])
    cache.get_or_build(keys[2])

    assert cache.peek(keys[0]) is not None
    assert cache.peek(keys[1]) is None
    assert cache.get_stats()["evictions"] == 1
    assert cache.get_stats()["size"] == 2


def test_clear_resets_entries_and_stats():
    cache = FeatureCache(CountingBuilder())
    cache.get_or_build(KEY)
    cache.clear()

    stats = cache.get_stats()
    assert stats["size"] == 0
    assert stats["misses"] == 0
    assert stats["hit_rate"] == 0.0


def test_max_size_must_be_positive():
    with pytest.raises(ValueError):
        FeatureCache(CountingBuilder(), max_size=0)
