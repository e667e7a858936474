"""
wage_engines.cache -- Derivation cache for break-time and allowance results.

Responsibility:
    Memoize pure engine results keyed by normalized input tuples.  The
    cache is an explicit object owned by the caller (normally
    ``WageService``) and passed to engines; there is no module-level
    cache state.

Architecture position:
    Engines -- support object for the pure calculation layer.  Holds
    derived values only; never reads a clock, database, or config.

Invariants enforced:
    - Keys are ``(namespace, normalized_inputs)``.  Inputs are frozen,
      hashable DTOs, so two calls with equal inputs share one entry.
    - Keys describe current input values, not a version stamp.  The owner
      must call ``invalidate()`` after any job policy or hourly rate edit.
    - Reads never take a lock: each write builds a new dict and swaps the
      reference (copy-on-write), so a reader always sees a complete map.
    - At capacity the oldest inserted entry is evicted.

Failure modes:
    - ``ValueError`` if constructed with ``max_entries < 1``.
    - Exceptions raised by a factory propagate and nothing is stored.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any, TypeVar

from wage_kernel.logging_config import get_logger

logger = get_logger("engines.cache")

T = TypeVar("T")

BREAK_TIME_NAMESPACE = "break_time"
WEEKLY_ALLOWANCE_NAMESPACE = "weekly_allowance"
REPORT_NAMESPACE = "report"

DEFAULT_MAX_ENTRIES = 1000
DEFAULT_REPORT_MAX_ENTRIES = 20

_MISSING = object()


@dataclass(frozen=True)
class CacheInfo:
    """Point-in-time cache statistics (hit/miss counters are best-effort)."""

    size: int
    max_size: int
    hits: int
    misses: int

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


class DerivationCache:
    """
    Bounded memo table shared by the calculation engines.

    Usage:
        cache = DerivationCache()
        result = calculate_break_time(Decimal("5"), job, cache=cache)
        ...
        cache.invalidate()  # after a job or rate edit
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES):
        if max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self._max_entries = max_entries
        self._entries: dict[tuple[str, Hashable], Any] = {}
        self._write_lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, namespace: str, key: Hashable, default: Any = None) -> Any:
        value = self._entries.get((namespace, key), _MISSING)
        if value is _MISSING:
            return default
        return value

    def get_or_compute(
        self,
        namespace: str,
        key: Hashable,
        factory: Callable[[], T],
    ) -> T:
        """Return the cached value for ``key`` or compute, store and return it."""
        value = self._entries.get((namespace, key), _MISSING)
        if value is not _MISSING:
            self._hits += 1
            return value
        self._misses += 1
        value = factory()
        self.put(namespace, key, value)
        return value

    def put(self, namespace: str, key: Hashable, value: Any) -> None:
        with self._write_lock:
            updated = dict(self._entries)
            updated[(namespace, key)] = value
            while len(updated) > self._max_entries:
                del updated[next(iter(updated))]
            self._entries = updated

    def invalidate(self) -> None:
        """Drop every entry.  Call after any job policy or hourly rate change."""
        with self._write_lock:
            dropped = len(self._entries)
            self._entries = {}
        logger.debug("derivation_cache_invalidated", extra={"dropped": dropped})

    def invalidate_namespace(self, namespace: str) -> None:
        with self._write_lock:
            self._entries = {
                k: v for k, v in self._entries.items() if k[0] != namespace
            }

    def info(self) -> CacheInfo:
        return CacheInfo(
            size=len(self._entries),
            max_size=self._max_entries,
            hits=self._hits,
            misses=self._misses,
        )

    def __len__(self) -> int:
        return len(self._entries)


class ReportCache(DerivationCache):
    """Small cache of finished monthly reports keyed by (month, filter id)."""

    def __init__(self, max_entries: int = DEFAULT_REPORT_MAX_ENTRIES):
        super().__init__(max_entries=max_entries)

    def get_report(self, month: str, filter_id: str) -> Any:
        return self.get(REPORT_NAMESPACE, (month, filter_id))

    def put_report(self, month: str, filter_id: str, report: Any) -> None:
        self.put(REPORT_NAMESPACE, (month, filter_id), report)
