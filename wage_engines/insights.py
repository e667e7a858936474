"""
Income Insights (``wage_engines.insights``).

Responsibility
--------------
Small summaries shown next to the calendar: the month's stored income
and hours, recent average daily income, an estimate of remaining
working days, and the next payday across jobs.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.
Every function takes an explicit reference date.

Invariants enforced
-------------------
* Income figures read the stored ``daily_wage`` of each session; they
  do not re-price sessions (``wage_engines.monthly`` does that).
* Hours here are raw session length, break time included.
* Windows are inclusive calendar-date ranges ending on the reference date.

Failure modes
-------------
* ``ValueError`` for non-positive window lengths.
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from wage_kernel.domain.dtos import Job, WorkSession
from wage_kernel.domain.periods import as_date, is_same_month, month_end
from wage_kernel.domain.values import ZERO, minutes_to_hours, round_currency
from wage_engines.session_wage import session_minutes


@dataclass(frozen=True)
class MonthlySummary:
    total_income: Decimal
    total_minutes: int
    average_hourly: Decimal

    @property
    def total_hours(self) -> Decimal:
        return minutes_to_hours(self.total_minutes)


@dataclass(frozen=True)
class NextPayday:
    job: Job
    date: date


def filter_records_by_month(
    records: Iterable[WorkSession] | None,
    reference_date: date | datetime | str,
) -> list[WorkSession]:
    ref = as_date(reference_date)
    return [r for r in records or () if is_same_month(r.work_date, ref)]


def compute_monthly_summary(
    records: Iterable[WorkSession] | None,
    reference_date: date | datetime | str,
) -> MonthlySummary:
    """Stored income, raw hours and their rounded ratio for one month."""
    total_income = ZERO
    total_minutes = 0
    for record in filter_records_by_month(records, reference_date):
        total_income += record.stored_wage
        total_minutes += session_minutes(record.start_time, record.end_time) or 0

    if total_minutes > 0:
        average = round_currency(total_income * Decimal(60) / Decimal(total_minutes))
    else:
        average = ZERO
    return MonthlySummary(
        total_income=total_income,
        total_minutes=total_minutes,
        average_hourly=average,
    )


def _within(records: Iterable[WorkSession] | None, start: date, end: date) -> list[WorkSession]:
    return [r for r in records or () if start <= r.work_date <= end]


def compute_recent_average_daily_income(
    records: Iterable[WorkSession] | None,
    reference_date: date | datetime | str,
    lookback_days: int = 14,
) -> Decimal:
    """Average stored income per worked date over the last ``lookback_days``."""
    if lookback_days < 1:
        raise ValueError(f"lookback_days must be positive, got {lookback_days}")
    end = as_date(reference_date)
    start = end - timedelta(days=lookback_days - 1)

    by_date: dict[date, Decimal] = defaultdict(Decimal)
    for record in _within(records, start, end):
        by_date[record.work_date] += record.stored_wage

    if not by_date:
        return ZERO
    return sum(by_date.values(), ZERO) / Decimal(len(by_date))


def estimate_remaining_working_days(
    records: Iterable[WorkSession] | None,
    reference_date: date | datetime | str,
    window_days: int = 30,
) -> int:
    """Remaining days of the month scaled by the recent share of days worked."""
    if window_days < 1:
        raise ValueError(f"window_days must be positive, got {window_days}")
    ref = as_date(reference_date)
    start = ref - timedelta(days=window_days - 1)

    worked_days = len({r.work_date for r in _within(records, start, ref)})
    rate = min(Decimal(1), Decimal(worked_days) / Decimal(window_days))
    remaining = (month_end(ref) - ref).days
    return int((rate * remaining).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _payday_in(year: int, month: int, payday: int) -> date:
    # Paydays past the month's last day fall on the last day.
    return date(year, month, min(payday, calendar.monthrange(year, month)[1]))


def find_next_payday(
    jobs: Iterable[Job] | None,
    reference_date: date | datetime | str,
) -> NextPayday | None:
    """Earliest upcoming payday (today included) across jobs that set one."""
    ref = as_date(reference_date)
    best: NextPayday | None = None
    for job in jobs or ():
        if not job.payday:
            continue
        candidate = _payday_in(ref.year, ref.month, job.payday)
        if candidate < ref:
            year, month = (ref.year + 1, 1) if ref.month == 12 else (ref.year, ref.month + 1)
            candidate = _payday_in(year, month, job.payday)
        if best is None or candidate < best.date:
            best = NextPayday(job=job, date=candidate)
    return best
