"""
Monthly Aggregation Engine (``wage_engines.monthly``).

Responsibility
--------------
Compose session wages and weekly allowances over a calendar month:

* ``calculate_monthly_weekly_allowance`` -- allowance totals for every
  ISO week touching the month, per job and per week
* ``summarize_month`` -- the reporting structure: per-session line items
  with recomputed wages, month totals, and the allowance summary

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.
Consumes the break-time, session-wage, weekly-allowance and rate engines.

Invariants enforced
-------------------
* Week attribution: every ISO week whose Monday-Sunday span shares a
  date with the month is evaluated over its FULL week of sessions, and
  its whole allowance counts toward the month being aggregated.  A week
  spanning two months therefore appears in both months' summaries.  This
  is the recorded boundary policy, not an accident; a fixed rule (e.g.
  the month holding the week's Thursday) is an open product question.
* Wage attribution: line items and wage totals use only sessions whose
  date is in the month.  Wage and allowance sums are independent and
  are both added into ``total_income``.
* ``job_allowances`` keeps jobs in first-seen order.
* Re-running with the same inputs gives the same summary.

Failure modes
-------------
* Never raises for business conditions.  A session whose job is not in
  ``jobs`` is priced with default policies; a missing rate prices an
  hourly session at zero and flags the line item.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal

from wage_kernel.domain.dtos import HourlyRateRecord, Job, WageType, WorkSession
from wage_kernel.domain.periods import (
    as_date,
    is_same_month,
    iso_weeks_overlapping_month,
    month_key,
)
from wage_kernel.domain.values import ZERO, minutes_to_hours
from wage_kernel.logging_config import get_logger
from wage_engines.cache import DerivationCache
from wage_engines.rates import resolve_hourly_rate
from wage_engines.session_wage import (
    break_time_wage_difference,
    calculate_work_and_break_time,
    compute_wage,
)
from wage_engines.tracer import traced_engine
from wage_engines.weekly_allowance import (
    WeeklyAllowanceResult,
    calculate_weekly_allowance,
    get_weekly_records,
)

logger = get_logger("engines.monthly")


@dataclass(frozen=True)
class JobAllowanceSubtotal:
    """A job's allowance within one month."""

    job_id: str
    job_name: str
    job_color: str | None
    total_amount: Decimal
    week_count: int


@dataclass(frozen=True)
class WeekAllowance:
    """All enabled jobs' allowance results for one ISO week."""

    week_start: date
    week_end: date
    results: tuple[tuple[str, WeeklyAllowanceResult], ...]
    total_amount: Decimal

    def result_for(self, job_id: str) -> WeeklyAllowanceResult | None:
        for candidate, result in self.results:
            if candidate == job_id:
                return result
        return None


@dataclass(frozen=True)
class MonthlyAllowanceSummary:
    """Weekly allowance totals for a month."""

    month: str
    total_allowance: Decimal
    eligible_weeks: int
    total_weeks: int
    job_allowances: dict[str, JobAllowanceSubtotal] = field(default_factory=dict)
    weeks: tuple[WeekAllowance, ...] = ()


@dataclass(frozen=True)
class SessionLineItem:
    """One session of the month with its recomputed wage."""

    session: WorkSession
    hourly_rate: Decimal | None
    total_minutes: int
    work_minutes: int
    payable_minutes: int
    break_minutes: int
    break_is_paid: bool
    wage: Decimal
    unpaid_break_wage: Decimal
    is_valid: bool
    rate_missing: bool

    @property
    def total_hours(self) -> Decimal:
        return minutes_to_hours(self.total_minutes)

    @property
    def work_hours(self) -> Decimal:
        return minutes_to_hours(self.work_minutes)

    @property
    def payable_hours(self) -> Decimal:
        return minutes_to_hours(self.payable_minutes)


@dataclass(frozen=True)
class MonthlyReport:
    """Everything a monthly report view needs."""

    month: str
    line_items: tuple[SessionLineItem, ...]
    total_wage: Decimal
    total_minutes: int
    total_work_minutes: int
    total_break_minutes: int
    total_unpaid_break_wage: Decimal
    total_meal_allowance: Decimal
    allowance: MonthlyAllowanceSummary

    @property
    def total_hours(self) -> Decimal:
        return minutes_to_hours(self.total_minutes)

    @property
    def total_work_hours(self) -> Decimal:
        return minutes_to_hours(self.total_work_minutes)

    @property
    def total_income(self) -> Decimal:
        return self.total_wage + self.allowance.total_allowance

    @property
    def rate_missing_count(self) -> int:
        return sum(1 for item in self.line_items if item.rate_missing)


@traced_engine("monthly_allowance", "1.0", fingerprint_fields=("month_reference",))
def calculate_monthly_weekly_allowance(
    records: Sequence[WorkSession],
    jobs: Iterable[Job],
    month_reference: date | datetime | str,
    cache: DerivationCache | None = None,
) -> MonthlyAllowanceSummary:
    """Weekly allowance totals over every ISO week touching a month.

    Args:
        records: Sessions covering at least the full weeks around the
            month (the first and last week reach into adjacent months).
        jobs: Jobs to evaluate; jobs with the allowance disabled are skipped.
        month_reference: Any date inside the month.
        cache: Optional derivation cache.

    Returns:
        MonthlyAllowanceSummary.  ``eligible_weeks`` counts (week, job)
        pairs with a positive eligible amount.
    """
    ref = as_date(month_reference)
    enabled_jobs = [job for job in jobs if job.weekly_allowance_enabled]
    mondays = iso_weeks_overlapping_month(ref)

    total_allowance = ZERO
    eligible_weeks = 0
    subtotals: dict[str, tuple[Job, Decimal, int]] = {}
    weeks: list[WeekAllowance] = []

    for monday in mondays:
        weekly_records = get_weekly_records(records, monday)
        week_results: list[tuple[str, WeeklyAllowanceResult]] = []
        week_total = ZERO

        for job in enabled_jobs:
            result = calculate_weekly_allowance(weekly_records, job, cache=cache)
            week_results.append((job.job_id, result))
            if not result.eligible or result.allowance_amount <= ZERO:
                continue

            total_allowance += result.allowance_amount
            week_total += result.allowance_amount
            eligible_weeks += 1
            _, amount, count = subtotals.get(job.job_id, (job, ZERO, 0))
            subtotals[job.job_id] = (job, amount + result.allowance_amount, count + 1)

        weeks.append(
            WeekAllowance(
                week_start=monday,
                week_end=monday + timedelta(days=6),
                results=tuple(week_results),
                total_amount=week_total,
            )
        )

    job_allowances = {
        job_id: JobAllowanceSubtotal(
            job_id=job_id,
            job_name=job.name,
            job_color=job.color,
            total_amount=amount,
            week_count=count,
        )
        for job_id, (job, amount, count) in subtotals.items()
    }

    return MonthlyAllowanceSummary(
        month=month_key(ref),
        total_allowance=total_allowance,
        eligible_weeks=eligible_weeks,
        total_weeks=len(mondays),
        job_allowances=job_allowances,
        weeks=tuple(weeks),
    )


def _line_item(
    session: WorkSession,
    job: Job,
    rates: Sequence[HourlyRateRecord],
    cache: DerivationCache | None,
) -> SessionLineItem:
    is_hourly = session.wage_type is WageType.HOURLY
    rate = resolve_hourly_rate(rates, session.job_id, session.work_date) if is_hourly else None
    work_and_break = calculate_work_and_break_time(
        session.start_time, session.end_time, job, cache=cache
    )
    difference = break_time_wage_difference(
        session.start_time, session.end_time, job, rate if is_hourly else None, cache=cache
    )
    return SessionLineItem(
        session=session,
        hourly_rate=rate,
        total_minutes=work_and_break.total_minutes,
        work_minutes=work_and_break.work_minutes,
        payable_minutes=work_and_break.payable_minutes,
        break_minutes=work_and_break.break_time.break_minutes,
        break_is_paid=work_and_break.break_time.is_paid,
        wage=compute_wage(session, rate, job, cache=cache),
        unpaid_break_wage=difference.wage_difference,
        is_valid=work_and_break.is_valid,
        rate_missing=is_hourly and (rate is None or rate <= ZERO),
    )


@traced_engine("monthly_report", "1.0", fingerprint_fields=("month_reference",))
def summarize_month(
    records: Sequence[WorkSession],
    jobs: Sequence[Job],
    hourly_rates: Sequence[HourlyRateRecord],
    month_reference: date | datetime | str,
    cache: DerivationCache | None = None,
) -> MonthlyReport:
    """Monthly report: line items and wage totals plus the allowance summary.

    Line items are ordered by date; sessions on the same date keep their
    input order.
    """
    ref = as_date(month_reference)
    jobs_by_id = {job.job_id: job for job in jobs}

    in_month = sorted(
        (r for r in records if is_same_month(r.work_date, ref)),
        key=lambda r: r.work_date,
    )
    items = tuple(
        _line_item(s, jobs_by_id.get(s.job_id) or Job(job_id=s.job_id), hourly_rates, cache)
        for s in in_month
    )

    allowance = calculate_monthly_weekly_allowance(records, jobs, ref, cache=cache)

    report = MonthlyReport(
        month=month_key(ref),
        line_items=items,
        total_wage=sum((i.wage for i in items), ZERO),
        total_minutes=sum(i.total_minutes for i in items),
        total_work_minutes=sum(i.work_minutes for i in items),
        total_break_minutes=sum(i.break_minutes for i in items),
        total_unpaid_break_wage=sum((i.unpaid_break_wage for i in items), ZERO),
        total_meal_allowance=sum((i.session.meal_allowance for i in items), ZERO),
        allowance=allowance,
    )
    if report.rate_missing_count:
        logger.warning(
            "monthly_report_missing_rates",
            extra={"month": report.month, "sessions": report.rate_missing_count},
        )
    return report
