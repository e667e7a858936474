"""
Session Wage Engine (``wage_engines.session_wage``).

Responsibility
--------------
Turn one work session into hours and a payable amount:

* ``session_minutes`` -- raw length of a start/end pair, midnight aware
* ``calculate_work_and_break_time`` -- total, break and net work time
* ``compute_wage`` -- the session's wage for an hourly rate
* ``with_computed_wage`` -- copy of a session with ``daily_wage`` stored
* ``break_time_wage_difference`` -- what the session's break is worth

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.
Rate lookup has already happened: callers pass the resolved rate.

Invariants enforced
-------------------
* An end at or before the start is rolled forward one day BEFORE any
  duration math (22:00-02:00 is four hours).
* Durations are whole minutes; hours are ``minutes / 60`` and are not
  rounded until the final wage.
* Paid break: payable hours are the total hours.  Unpaid break: payable
  hours are total minus break.
* Hourly wage = ``round(payable_hours * rate) + meal_allowance``: one
  rounding, after multiplying by the rate.
* Daily wage type: ``fixed_daily_wage + meal_allowance``; break time is
  still reported but never changes the amount.

Failure modes
-------------
* Malformed "HH:mm" never raises: the result has zero time and
  ``is_valid=False``, and the caller must check it before saving.
* A zero or unknown hourly rate yields a zero wage.  Blocking the save is
  the caller's job (see ``WageService.prepare_session_for_save``).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import time
from decimal import Decimal

from wage_kernel.domain.dtos import Job, WageType, WorkSession
from wage_kernel.domain.values import (
    MINUTES_PER_DAY,
    ZERO,
    minutes_to_hours,
    parse_hhmm,
    round_currency,
    to_decimal,
)
from wage_kernel.logging_config import get_logger
from wage_engines.break_time import BreakTimeResult, calculate_break_time
from wage_engines.cache import DerivationCache
from wage_engines.tracer import traced_engine

logger = get_logger("engines.session_wage")


@dataclass(frozen=True)
class WorkAndBreakTime:
    """Time breakdown of one session."""

    total_minutes: int
    work_minutes: int
    break_time: BreakTimeResult
    is_valid: bool = True

    @classmethod
    def invalid(cls) -> WorkAndBreakTime:
        return cls(
            total_minutes=0,
            work_minutes=0,
            break_time=BreakTimeResult.none(),
            is_valid=False,
        )

    @property
    def total_hours(self) -> Decimal:
        return minutes_to_hours(self.total_minutes)

    @property
    def work_hours(self) -> Decimal:
        return minutes_to_hours(self.work_minutes)

    @property
    def payable_minutes(self) -> int:
        if self.break_time.is_paid:
            return self.total_minutes
        return self.work_minutes

    @property
    def payable_hours(self) -> Decimal:
        return minutes_to_hours(self.payable_minutes)


@dataclass(frozen=True)
class BreakWageDifference:
    """
    Value of a session's break at a given hourly rate.

    ``wage_difference`` is what an unpaid break removes from the wage;
    a paid break shows up in ``break_time_paid`` and costs nothing.
    """

    break_time_paid: Decimal = ZERO
    break_time_unpaid: Decimal = ZERO
    wage_difference: Decimal = ZERO


def session_minutes(
    start_time: str | time | None,
    end_time: str | time | None,
) -> int | None:
    """Length of a start/end pair in minutes, or ``None`` if either is malformed."""
    start = parse_hhmm(start_time)
    end = parse_hhmm(end_time)
    if start is None or end is None:
        return None
    if end <= start:
        end += MINUTES_PER_DAY
    return end - start


@traced_engine("session_wage", "1.0", fingerprint_fields=("start_time", "end_time", "job"))
def calculate_work_and_break_time(
    start_time: str | time | None,
    end_time: str | time | None,
    job: Job,
    cache: DerivationCache | None = None,
) -> WorkAndBreakTime:
    """Total, break and net work time of a session.

    Net work time is floored at zero for tables whose break exceeds the
    duration it applies to.
    """
    minutes = session_minutes(start_time, end_time)
    if minutes is None:
        return WorkAndBreakTime.invalid()

    break_time = calculate_break_time(minutes_to_hours(minutes), job, cache=cache)
    return WorkAndBreakTime(
        total_minutes=minutes,
        work_minutes=max(0, minutes - break_time.break_minutes),
        break_time=break_time,
    )


@traced_engine("session_wage", "1.0", fingerprint_fields=("session", "hourly_rate"))
def compute_wage(
    session: WorkSession,
    hourly_rate: Decimal | int | None,
    job: Job,
    cache: DerivationCache | None = None,
) -> Decimal:
    """Wage of one session.

    Args:
        session: The work session.
        hourly_rate: Rate active on ``session.work_date`` (ignored for the
            daily wage type).
        job: The session's job, for its break policy.
        cache: Optional derivation cache.

    Returns:
        Whole-unit wage including the meal allowance, or zero when an
        hourly session has no usable rate.
    """
    if session.wage_type is WageType.DAILY:
        fixed = session.fixed_daily_wage if session.fixed_daily_wage is not None else ZERO
        return fixed + session.meal_allowance

    rate = to_decimal(hourly_rate) if hourly_rate is not None else ZERO
    if rate <= ZERO:
        return ZERO

    work_and_break = calculate_work_and_break_time(
        session.start_time, session.end_time, job, cache=cache
    )
    # Minutes first, then one division: keeps the product exact for whole rates.
    amount = Decimal(work_and_break.payable_minutes) * rate / Decimal(60)
    return round_currency(amount) + session.meal_allowance


def with_computed_wage(
    session: WorkSession,
    hourly_rate: Decimal | int | None,
    job: Job,
    cache: DerivationCache | None = None,
) -> WorkSession:
    """Copy of ``session`` with ``daily_wage`` set to its computed wage."""
    return replace(session, daily_wage=compute_wage(session, hourly_rate, job, cache=cache))


def break_time_wage_difference(
    start_time: str | time | None,
    end_time: str | time | None,
    job: Job | None,
    hourly_rate: Decimal | int | None,
    cache: DerivationCache | None = None,
) -> BreakWageDifference:
    """Wage value of the break in a session.

    The break wage is ``round(break_hours * hourly_rate)``.  Missing times,
    job or rate, or a session with no break, yield all zeros.
    """
    if not start_time or not end_time or job is None or not hourly_rate:
        return BreakWageDifference()

    break_time = calculate_work_and_break_time(
        start_time, end_time, job, cache=cache
    ).break_time
    if break_time.break_minutes == 0:
        return BreakWageDifference()

    break_wage = round_currency(break_time.break_hours * to_decimal(hourly_rate))
    if break_time.is_paid:
        return BreakWageDifference(break_time_paid=break_wage)
    return BreakWageDifference(break_time_unpaid=break_wage, wage_difference=break_wage)
