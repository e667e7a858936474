"""
Tests for the session wage engine.

Covers:
- Session length, including overnight roll-forward
- Work and break time breakdown, paid vs unpaid
- Hourly and daily wage formulas, rounding, meal allowance
- Missing or malformed inputs
- Break wage difference
"""

from datetime import date, time
from decimal import Decimal

import pytest

from wage_engines.session_wage import (
    BreakWageDifference,
    WorkAndBreakTime,
    break_time_wage_difference,
    calculate_work_and_break_time,
    compute_wage,
    session_minutes,
    with_computed_wage,
)
from wage_kernel.domain.dtos import BreakPolicyRow, Job, WageType, WorkSession


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _session(
    start: str | None = "09:00",
    end: str | None = "14:00",
    job_id: str = "cafe",
    wage_type: WageType = WageType.HOURLY,
    fixed_daily_wage: Decimal | None = None,
    meal_allowance: Decimal = Decimal("0"),
) -> WorkSession:
    return WorkSession(
        job_id=job_id,
        work_date=date(2024, 3, 4),
        start_time=start,
        end_time=end,
        wage_type=wage_type,
        fixed_daily_wage=fixed_daily_wage,
        meal_allowance=meal_allowance,
    )


def _paid(job: Job) -> Job:
    return Job(
        job_id=job.job_id,
        break_time_policies=job.break_time_policies,
        break_time_paid=True,
    )


# ===========================================================================
# Session length
# ===========================================================================


class TestSessionMinutes:

    def test_same_day(self):
        assert session_minutes("09:00", "14:00") == 300

    def test_overnight_rolls_forward(self):
        assert session_minutes("22:00", "02:00") == 240

    def test_equal_start_and_end_is_a_full_day(self):
        assert session_minutes("09:00", "09:00") == 1440

    def test_single_digit_hour_and_seconds(self):
        assert session_minutes("9:00", "14:30:59") == 330

    def test_time_objects(self):
        assert session_minutes(time(8, 15), time(12, 45)) == 270

    @pytest.mark.parametrize(
        "start,end",
        [("25:00", "10:00"), ("09:60", "10:00"), ("nine", "10:00"), (None, "10:00"), ("09:00", "")],
    )
    def test_malformed_is_none(self, start, end):
        assert session_minutes(start, end) is None


# ===========================================================================
# Work and break time
# ===========================================================================


class TestWorkAndBreakTime:

    def test_five_hour_session(self, four_hour_job):
        result = calculate_work_and_break_time("09:00", "14:00", four_hour_job)
        assert result.total_minutes == 300
        assert result.work_minutes == 270
        assert result.break_time.break_minutes == 30
        assert result.work_hours == Decimal("4.5")
        assert result.payable_hours == Decimal("4.5")
        assert result.is_valid

    def test_exactly_four_hours_earns_break(self, four_hour_job):
        result = calculate_work_and_break_time("09:00", "13:00", four_hour_job)
        assert result.break_time.break_minutes == 30
        assert result.work_minutes == 210

    def test_overnight_session(self, four_hour_job):
        result = calculate_work_and_break_time("22:00", "02:00", four_hour_job)
        assert result.total_hours == Decimal("4")
        assert result.break_time.break_minutes == 30

    def test_paid_break_pays_total_time(self, four_hour_job):
        result = calculate_work_and_break_time("09:00", "14:00", _paid(four_hour_job))
        assert result.work_minutes == 270
        assert result.payable_minutes == 300

    def test_invalid_time_is_flagged_not_raised(self, four_hour_job):
        result = calculate_work_and_break_time("25:00", "14:00", four_hour_job)
        assert result == WorkAndBreakTime.invalid()
        assert result.is_valid is False
        assert result.total_minutes == 0

    def test_work_time_floored_at_zero(self):
        job = Job(job_id="j", break_time_policies=(BreakPolicyRow.of(0, 1, 90),))
        result = calculate_work_and_break_time("09:00", "09:30", job)
        assert result.break_time.break_minutes == 90
        assert result.work_minutes == 0

    def test_cached_equals_uncached(self, four_hour_job, cache):
        assert calculate_work_and_break_time(
            "09:00", "14:00", four_hour_job, cache=cache
        ) == calculate_work_and_break_time("09:00", "14:00", four_hour_job)


# ===========================================================================
# Wage
# ===========================================================================


class TestHourlyWage:

    def test_unpaid_break_deducted(self, four_hour_job):
        assert compute_wage(_session(), Decimal("10000"), four_hour_job) == Decimal("45000")

    def test_paid_break_not_deducted(self, four_hour_job):
        assert compute_wage(_session(), Decimal("10000"), _paid(four_hour_job)) == Decimal("50000")

    def test_meal_allowance_added(self, four_hour_job):
        session = _session(meal_allowance=Decimal("5000"))
        assert compute_wage(session, 10000, four_hour_job) == Decimal("50000")

    def test_rounded_once_to_whole_units(self, four_hour_job):
        # 250 minutes, 30 minute break: 220/60 * 9860 = 36153.33
        session = _session(start="09:00", end="13:10")
        assert compute_wage(session, Decimal("9860"), four_hour_job) == Decimal("36153")

    def test_half_rounds_up(self, four_hour_job):
        # 30 minutes at 10001 = 5000.5
        session = _session(start="09:00", end="09:30")
        assert compute_wage(session, Decimal("10001"), four_hour_job) == Decimal("5001")

    @pytest.mark.parametrize("rate", [None, 0, Decimal("-100")])
    def test_no_usable_rate_is_zero(self, four_hour_job, rate):
        session = _session(meal_allowance=Decimal("5000"))
        assert compute_wage(session, rate, four_hour_job) == Decimal("0")

    def test_invalid_times_pay_only_meal_allowance(self, four_hour_job):
        session = _session(start="bad", meal_allowance=Decimal("3000"))
        assert compute_wage(session, 10000, four_hour_job) == Decimal("3000")


class TestDailyWage:

    def test_fixed_plus_meal(self, four_hour_job):
        session = _session(
            wage_type=WageType.DAILY,
            fixed_daily_wage=Decimal("80000"),
            meal_allowance=Decimal("10000"),
        )
        assert compute_wage(session, Decimal("10000"), four_hour_job) == Decimal("90000")

    def test_rate_and_break_ignored(self, four_hour_job):
        session = _session(wage_type="daily", fixed_daily_wage=70000)
        assert compute_wage(session, None, four_hour_job) == Decimal("70000")

    def test_missing_fixed_wage_is_meal_only(self, four_hour_job):
        session = _session(wage_type=WageType.DAILY, meal_allowance=Decimal("8000"))
        assert compute_wage(session, None, four_hour_job) == Decimal("8000")


class TestWithComputedWage:

    def test_returns_copy_with_daily_wage(self, four_hour_job):
        session = _session()
        saved = with_computed_wage(session, Decimal("10000"), four_hour_job)
        assert saved.daily_wage == Decimal("45000")
        assert session.daily_wage is None
        assert saved.start_time == session.start_time


# ===========================================================================
# Break wage difference
# ===========================================================================


class TestBreakWageDifference:

    def test_unpaid_break(self, four_hour_job):
        result = break_time_wage_difference("09:00", "14:00", four_hour_job, Decimal("10000"))
        assert result == BreakWageDifference(
            break_time_paid=Decimal("0"),
            break_time_unpaid=Decimal("5000"),
            wage_difference=Decimal("5000"),
        )

    def test_paid_break_costs_nothing(self, four_hour_job):
        result = break_time_wage_difference(
            "09:00", "14:00", _paid(four_hour_job), Decimal("10000")
        )
        assert result.break_time_paid == Decimal("5000")
        assert result.wage_difference == Decimal("0")

    def test_no_break_is_zero(self, four_hour_job):
        assert break_time_wage_difference(
            "09:00", "12:00", four_hour_job, 10000
        ) == BreakWageDifference()

    @pytest.mark.parametrize("start,end,rate", [(None, "14:00", 10000), ("09:00", "14:00", None)])
    def test_missing_inputs_are_zero(self, four_hour_job, start, end, rate):
        assert break_time_wage_difference(start, end, four_hour_job, rate) == BreakWageDifference()

    def test_missing_job_is_zero(self):
        assert break_time_wage_difference("09:00", "14:00", None, 10000) == BreakWageDifference()
