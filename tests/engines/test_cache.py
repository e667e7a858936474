"""
Tests for the derivation and report caches.

Covers:
- get_or_compute memoization and counters
- Bounded size with oldest-first eviction
- Full and per-namespace invalidation
- Factory failures
- Concurrent readers and writers
"""

import threading

import pytest

from wage_engines.cache import (
    BREAK_TIME_NAMESPACE,
    DEFAULT_REPORT_MAX_ENTRIES,
    WEEKLY_ALLOWANCE_NAMESPACE,
    DerivationCache,
    ReportCache,
)


class TestGetOrCompute:

    def test_factory_called_once(self):
        cache = DerivationCache()
        calls = []

        def factory():
            calls.append(1)
            return "value"

        assert cache.get_or_compute(BREAK_TIME_NAMESPACE, ("k",), factory) == "value"
        assert cache.get_or_compute(BREAK_TIME_NAMESPACE, ("k",), factory) == "value"
        assert len(calls) == 1

    def test_namespaces_are_separate(self):
        cache = DerivationCache()
        cache.put(BREAK_TIME_NAMESPACE, "k", 1)
        cache.put(WEEKLY_ALLOWANCE_NAMESPACE, "k", 2)
        assert cache.get(BREAK_TIME_NAMESPACE, "k") == 1
        assert cache.get(WEEKLY_ALLOWANCE_NAMESPACE, "k") == 2

    def test_missing_key_returns_default(self):
        cache = DerivationCache()
        assert cache.get(BREAK_TIME_NAMESPACE, "nope") is None
        assert cache.get(BREAK_TIME_NAMESPACE, "nope", default=0) == 0

    def test_info_counts_hits_and_misses(self):
        cache = DerivationCache(max_entries=10)
        cache.get_or_compute(BREAK_TIME_NAMESPACE, 1, lambda: "a")
        cache.get_or_compute(BREAK_TIME_NAMESPACE, 1, lambda: "a")
        cache.get_or_compute(BREAK_TIME_NAMESPACE, 1, lambda: "a")
        info = cache.info()
        assert info.size == 1
        assert info.max_size == 10
        assert info.hits == 2
        assert info.misses == 1
        assert info.hit_rate == pytest.approx(2 / 3)

    def test_empty_hit_rate(self):
        assert DerivationCache().info().hit_rate == 0.0

    def test_factory_error_propagates_and_stores_nothing(self):
        cache = DerivationCache()

        def boom():
            raise RuntimeError("factory failed")

        with pytest.raises(RuntimeError):
            cache.get_or_compute(BREAK_TIME_NAMESPACE, "k", boom)
        assert len(cache) == 0


class TestBounds:

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            DerivationCache(max_entries=0)

    def test_oldest_entry_evicted(self):
        cache = DerivationCache(max_entries=2)
        cache.put(BREAK_TIME_NAMESPACE, "a", 1)
        cache.put(BREAK_TIME_NAMESPACE, "b", 2)
        cache.put(BREAK_TIME_NAMESPACE, "c", 3)
        assert len(cache) == 2
        assert cache.get(BREAK_TIME_NAMESPACE, "a") is None
        assert cache.get(BREAK_TIME_NAMESPACE, "c") == 3

    def test_overwrite_does_not_evict(self):
        cache = DerivationCache(max_entries=2)
        cache.put(BREAK_TIME_NAMESPACE, "a", 1)
        cache.put(BREAK_TIME_NAMESPACE, "b", 2)
        cache.put(BREAK_TIME_NAMESPACE, "a", 10)
        assert cache.get(BREAK_TIME_NAMESPACE, "a") == 10
        assert cache.get(BREAK_TIME_NAMESPACE, "b") == 2


class TestInvalidation:

    def test_invalidate_drops_everything(self):
        cache = DerivationCache()
        cache.put(BREAK_TIME_NAMESPACE, "a", 1)
        cache.put(WEEKLY_ALLOWANCE_NAMESPACE, "b", 2)
        cache.invalidate()
        assert len(cache) == 0

    def test_invalidate_namespace(self):
        cache = DerivationCache()
        cache.put(BREAK_TIME_NAMESPACE, "a", 1)
        cache.put(WEEKLY_ALLOWANCE_NAMESPACE, "b", 2)
        cache.invalidate_namespace(BREAK_TIME_NAMESPACE)
        assert cache.get(BREAK_TIME_NAMESPACE, "a") is None
        assert cache.get(WEEKLY_ALLOWANCE_NAMESPACE, "b") == 2

    def test_recomputed_after_invalidate(self):
        cache = DerivationCache()
        cache.get_or_compute(BREAK_TIME_NAMESPACE, "k", lambda: "old")
        cache.invalidate()
        assert cache.get_or_compute(BREAK_TIME_NAMESPACE, "k", lambda: "new") == "new"


class TestReportCache:

    def test_default_size(self):
        assert ReportCache().info().max_size == DEFAULT_REPORT_MAX_ENTRIES

    def test_keyed_by_month_and_filter(self):
        cache = ReportCache()
        cache.put_report("2024-03", "all", "march-all")
        cache.put_report("2024-03", "cafe", "march-cafe")
        assert cache.get_report("2024-03", "all") == "march-all"
        assert cache.get_report("2024-03", "cafe") == "march-cafe"
        assert cache.get_report("2024-04", "all") is None


class TestConcurrency:

    def test_parallel_readers_and_invalidation(self):
        cache = DerivationCache(max_entries=50)
        errors: list[Exception] = []
        barrier = threading.Barrier(5)

        def worker(offset: int) -> None:
            try:
                barrier.wait()
                for i in range(500):
                    key = (offset + i) % 80
                    value = cache.get_or_compute(BREAK_TIME_NAMESPACE, key, lambda k=key: k * 2)
                    assert value == key * 2
            except Exception as e:
                errors.append(e)

        def invalidator() -> None:
            barrier.wait()
            for _ in range(50):
                cache.invalidate()

        threads = [threading.Thread(target=worker, args=(n * 7,)) for n in range(4)]
        threads.append(threading.Thread(target=invalidator))
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(cache) <= 50
