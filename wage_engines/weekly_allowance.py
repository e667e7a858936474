"""
Weekly Allowance Engine (``wage_engines.weekly_allowance``).

Responsibility
--------------
Decide whether a job earned its weekly attendance allowance for one ISO
week and how much it is:

* ``get_weekly_records`` -- sessions of the ISO week around a date
* ``calculate_weekly_allowance`` -- eligibility and amount for one job
* ``get_current_week_progress`` -- the same plus progress toward the
  threshold, for the week containing a reference date
* ``describe_week`` -- month / week-of-month label data for a week

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.
The reference date is always an explicit argument.

Invariants enforced
-------------------
* Only the job's own ``hourly`` sessions count.  Daily-wage sessions
  never feed the allowance.
* One unexcused absence voids the week regardless of hours, even when
  the absence record has no start/end time.
* Hours are net of break time; wage excludes the meal allowance.
* ``work_days`` counts distinct calendar dates, not sessions.
* ``average_hourly_rate`` is re-derived as ``round(wage / hours)`` from
  the week's stored wages, not read from the rate history.  With mixed
  paid/unpaid breaks in one week it can differ from the nominal rate;
  this matches the recorded behaviour and is kept on purpose.
* ``allowance = round(hours / work_days * average_hourly_rate)``.

Failure modes
-------------
* Never raises for business conditions: every outcome is a
  ``WeeklyAllowanceResult`` with an ``AllowanceReason``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from wage_kernel.domain.dtos import Job, WageType, WorkSession
from wage_kernel.domain.periods import as_date, iso_week_end, iso_week_start
from wage_kernel.domain.values import (
    MINUTES_PER_HOUR,
    ZERO,
    minutes_to_hours,
    round_currency,
)
from wage_kernel.logging_config import get_logger
from wage_engines.cache import WEEKLY_ALLOWANCE_NAMESPACE, DerivationCache
from wage_engines.session_wage import calculate_work_and_break_time
from wage_engines.tracer import traced_engine

logger = get_logger("engines.weekly_allowance")


class AllowanceReason(str, Enum):
    """Why a week is (not) eligible."""

    DISABLED = "allowance_disabled"
    UNEXCUSED_ABSENCE = "unexcused_absence"
    INSUFFICIENT_HOURS = "insufficient_hours"
    NO_WORK_DAYS = "no_work_days"
    ELIGIBLE = "eligible"


@dataclass(frozen=True)
class WeeklyAllowanceResult:
    """
    Allowance outcome for one (job, ISO week).

    Ineligible results still carry the accumulated minutes and work days
    so the week can be displayed.
    """

    eligible: bool
    reason: AllowanceReason
    total_work_minutes: int = 0
    work_days: int = 0
    average_hourly_rate: Decimal = ZERO
    allowance_amount: Decimal = ZERO
    avg_daily_hours: Decimal = ZERO
    has_unexcused_absence: bool = False

    @property
    def total_work_hours(self) -> Decimal:
        return minutes_to_hours(self.total_work_minutes)


@dataclass(frozen=True)
class WeekProgress:
    """Allowance state of the week containing a reference date."""

    allowance: WeeklyAllowanceResult
    week_start: date
    week_end: date
    days_in_week: int
    days_passed: int
    progress_percent: int
    hours_needed: Decimal
    is_current_week: bool = True


@dataclass(frozen=True)
class WeekLabel:
    """Structured label for a week: which month and which week of it."""

    month: int
    week_of_month: int
    start: date
    end: date


def get_weekly_records(
    records: Iterable[WorkSession],
    reference_date: date | datetime | str,
) -> list[WorkSession]:
    """Sessions whose date falls in the Monday-Sunday week of ``reference_date``.

    Comparison is by calendar date, both ends inclusive.
    """
    ref = as_date(reference_date)
    start, end = iso_week_start(ref), iso_week_end(ref)
    return [r for r in records if start <= r.work_date <= end]


def _relevant_sessions(
    weekly_records: Iterable[WorkSession], job: Job
) -> tuple[WorkSession, ...]:
    return tuple(
        r for r in weekly_records
        if r.job_id == job.job_id and r.wage_type is WageType.HOURLY
    )


def _evaluate(
    sessions: Sequence[WorkSession],
    job: Job,
    cache: DerivationCache | None,
) -> WeeklyAllowanceResult:
    total_minutes = 0
    total_wage = ZERO
    has_unexcused_absence = False
    worked_dates: set[date] = set()

    for session in sessions:
        if session.is_unexcused_absence:
            has_unexcused_absence = True

        if not session.has_times:
            continue
        work_and_break = calculate_work_and_break_time(
            session.start_time, session.end_time, job, cache=cache
        )
        if not work_and_break.is_valid:
            continue

        total_minutes += work_and_break.work_minutes
        total_wage += session.stored_wage - session.meal_allowance
        worked_dates.add(session.work_date)

    work_days = len(worked_dates)
    stats = {"total_work_minutes": total_minutes, "work_days": work_days}

    if has_unexcused_absence:
        return WeeklyAllowanceResult(
            eligible=False,
            reason=AllowanceReason.UNEXCUSED_ABSENCE,
            has_unexcused_absence=True,
            **stats,
        )

    if Decimal(total_minutes) < job.weekly_allowance_min_hours * MINUTES_PER_HOUR:
        return WeeklyAllowanceResult(
            eligible=False, reason=AllowanceReason.INSUFFICIENT_HOURS, **stats
        )

    if work_days == 0:
        return WeeklyAllowanceResult(
            eligible=False, reason=AllowanceReason.NO_WORK_DAYS, **stats
        )

    if total_wage > ZERO and total_minutes > 0:
        average_hourly_rate = round_currency(
            total_wage * MINUTES_PER_HOUR / Decimal(total_minutes)
        )
    else:
        average_hourly_rate = ZERO

    day_minutes = MINUTES_PER_HOUR * work_days
    avg_daily_hours = Decimal(total_minutes) / day_minutes
    allowance_amount = round_currency(
        Decimal(total_minutes) * average_hourly_rate / day_minutes
    )

    return WeeklyAllowanceResult(
        eligible=True,
        reason=AllowanceReason.ELIGIBLE,
        average_hourly_rate=average_hourly_rate,
        allowance_amount=allowance_amount,
        avg_daily_hours=avg_daily_hours,
        **stats,
    )


@traced_engine("weekly_allowance", "1.0", fingerprint_fields=("weekly_records", "job"))
def calculate_weekly_allowance(
    weekly_records: Iterable[WorkSession],
    job: Job,
    cache: DerivationCache | None = None,
) -> WeeklyAllowanceResult:
    """Weekly allowance for ``job`` over one ISO week of sessions.

    Args:
        weekly_records: Sessions of a single ISO week (see
            ``get_weekly_records``); other jobs' sessions are ignored.
        job: The job being evaluated.
        cache: Optional derivation cache; the key is the job plus its
            relevant sessions.

    Returns:
        WeeklyAllowanceResult.
    """
    if not job.weekly_allowance_enabled:
        return WeeklyAllowanceResult(eligible=False, reason=AllowanceReason.DISABLED)

    sessions = _relevant_sessions(weekly_records, job)
    if cache is None:
        return _evaluate(sessions, job, None)
    return cache.get_or_compute(
        WEEKLY_ALLOWANCE_NAMESPACE,
        (job, sessions),
        lambda: _evaluate(sessions, job, cache),
    )


def get_current_week_progress(
    records: Iterable[WorkSession],
    job: Job,
    reference_date: date | datetime | str,
    cache: DerivationCache | None = None,
) -> WeekProgress:
    """Allowance state and threshold progress for the week of ``reference_date``."""
    ref = as_date(reference_date)
    result = calculate_weekly_allowance(get_weekly_records(records, ref), job, cache=cache)

    start, end = iso_week_start(ref), iso_week_end(ref)
    min_hours = job.weekly_allowance_min_hours
    progress = min(Decimal(100), result.total_work_hours / min_hours * Decimal(100))

    return WeekProgress(
        allowance=result,
        week_start=start,
        week_end=end,
        days_in_week=(end - start).days + 1,
        days_passed=(ref - start).days + 1,
        progress_percent=int(progress.quantize(Decimal("1"), rounding=ROUND_HALF_UP)),
        hours_needed=max(ZERO, min_hours - result.total_work_hours),
    )


def describe_week(week_start: date | datetime | str) -> WeekLabel:
    """Month and week-of-month (``ceil(day / 7)``) of a week's first day."""
    start = as_date(week_start)
    return WeekLabel(
        month=start.month,
        week_of_month=(start.day + 6) // 7,
        start=start,
        end=iso_week_end(start),
    )
