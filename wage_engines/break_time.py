"""
Break-Time Engine (``wage_engines.break_time``).

Responsibility
--------------
Pure functions that map a work duration and a job's policy onto the
statutory break the worker is owed:

* ``calculate_break_time`` -- break minutes/hours and the paid flag
* ``warmup_break_time_cache`` -- pre-compute common durations

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.
Imports only ``wage_kernel.domain`` and sibling engine modules.

Invariants enforced
-------------------
* The policy table is scanned in order and the FIRST row with
  ``min_hours <= duration < max_hours`` wins.  Ordering is part of the
  observed behaviour: overlapping tables resolve to the earlier row.
  Tables hold a handful of rows, so this stays a linear scan.
* A duration no row covers earns zero minutes; this is not an error.
* ``is_paid`` is the job-level flag, never derived from the matched row.
* Same inputs = same outputs, so results may be memoized.

Failure modes
-------------
* Never raises for malformed tables: a row with ``max_hours <= min_hours``
  simply cannot match.
* ``ValueError`` only if the duration is not a number.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from wage_kernel.domain.dtos import Job
from wage_kernel.domain.values import (
    MINUTES_PER_HOUR,
    ZERO,
    to_decimal,
)
from wage_kernel.logging_config import get_logger
from wage_engines.cache import BREAK_TIME_NAMESPACE, DerivationCache
from wage_engines.tracer import traced_engine

logger = get_logger("engines.break_time")

# Durations pre-computed by warmup_break_time_cache.
COMMON_WORK_HOURS: tuple[Decimal, ...] = tuple(
    Decimal(h) for h in (4, 6, 8, 10, 12)
)


@dataclass(frozen=True)
class BreakTimeResult:
    """Break owed for one work duration."""

    break_minutes: int
    break_hours: Decimal
    is_paid: bool

    @classmethod
    def none(cls, is_paid: bool = False) -> BreakTimeResult:
        return cls(break_minutes=0, break_hours=ZERO, is_paid=is_paid)


def _scan_policy(duration: Decimal, job: Job) -> BreakTimeResult:
    if not job.break_time_enabled:
        return BreakTimeResult.none()

    for row in job.applicable_break_policies:
        if row.matches(duration):
            return BreakTimeResult(
                break_minutes=row.break_minutes,
                break_hours=Decimal(row.break_minutes) / MINUTES_PER_HOUR,
                is_paid=job.break_time_paid,
            )

    return BreakTimeResult.none(is_paid=job.break_time_paid)


@traced_engine("break_time", "1.0", fingerprint_fields=("work_duration_hours", "job"))
def calculate_break_time(
    work_duration_hours: Decimal | int | float | str,
    job: Job,
    cache: DerivationCache | None = None,
) -> BreakTimeResult:
    """Break owed for ``work_duration_hours`` under ``job``'s policy.

    Args:
        work_duration_hours: Total session length in hours, breaks included.
        job: Job whose table, enabled flag and paid flag apply.
        cache: Optional derivation cache; the key is the duration plus
            ``job.break_policy_key``.

    Returns:
        BreakTimeResult.  Disabled break time yields zero, unpaid.
    """
    duration = to_decimal(work_duration_hours)
    if cache is None:
        return _scan_policy(duration, job)
    return cache.get_or_compute(
        BREAK_TIME_NAMESPACE,
        (duration, job.break_policy_key),
        lambda: _scan_policy(duration, job),
    )


def warmup_break_time_cache(cache: DerivationCache, jobs: Iterable[Job]) -> int:
    """Pre-compute common durations for jobs with their own enabled table.

    Returns:
        Number of (job, duration) pairs computed.
    """
    warmed = 0
    for job in jobs:
        if not job.break_time_enabled or not job.break_time_policies:
            continue
        for hours in COMMON_WORK_HOURS:
            calculate_break_time(hours, job, cache=cache)
            warmed += 1
    logger.debug("break_time_cache_warmed", extra={"pairs": warmed})
    return warmed
