"""
Tests for income insights.

Covers:
- Monthly stored income and raw hours
- Recent average daily income
- Remaining working day estimate
- Next payday across jobs, including short months and year rollover
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from wage_engines.insights import (
    compute_monthly_summary,
    compute_recent_average_daily_income,
    estimate_remaining_working_days,
    filter_records_by_month,
    find_next_payday,
)
from wage_kernel.domain.dtos import Job, WorkSession


def _record(day: date, wage: str | None = "50000", start="09:00", end="14:00") -> WorkSession:
    return WorkSession(
        job_id="cafe",
        work_date=day,
        start_time=start,
        end_time=end,
        daily_wage=Decimal(wage) if wage is not None else None,
    )


# ===========================================================================
# Monthly summary
# ===========================================================================


class TestMonthlySummary:

    def test_filter_by_month(self):
        records = [_record(date(2024, 2, 29)), _record(date(2024, 3, 1))]
        assert [r.work_date for r in filter_records_by_month(records, "2024-03-20")] == [
            date(2024, 3, 1)
        ]

    def test_income_hours_and_average(self):
        records = [
            _record(date(2024, 3, 4)),
            _record(date(2024, 3, 5)),
            _record(date(2024, 2, 28), wage="99999"),
        ]
        summary = compute_monthly_summary(records, date(2024, 3, 1))
        assert summary.total_income == Decimal("100000")
        assert summary.total_minutes == 600
        assert summary.total_hours == Decimal("10")
        assert summary.average_hourly == Decimal("10000")

    def test_empty_month(self):
        summary = compute_monthly_summary(None, date(2024, 3, 1))
        assert summary.total_income == Decimal("0")
        assert summary.average_hourly == Decimal("0")

    def test_unsaved_and_timeless_records(self):
        records = [_record(date(2024, 3, 4), wage=None, start=None, end=None)]
        summary = compute_monthly_summary(records, date(2024, 3, 1))
        assert summary.total_minutes == 0
        assert summary.total_income == Decimal("0")


# ===========================================================================
# Recent averages and estimates
# ===========================================================================


class TestRecentAverageDailyIncome:

    def test_average_per_worked_date(self):
        records = [
            _record(date(2024, 3, 1), wage="50000"),
            _record(date(2024, 3, 1), wage="10000"),
            _record(date(2024, 3, 14), wage="40000"),
            _record(date(2024, 2, 29), wage="90000"),
        ]
        assert compute_recent_average_daily_income(records, date(2024, 3, 14)) == Decimal("50000")

    def test_no_records(self):
        assert compute_recent_average_daily_income([], date(2024, 3, 14)) == Decimal("0")

    def test_rejects_non_positive_window(self):
        with pytest.raises(ValueError):
            compute_recent_average_daily_income([], date(2024, 3, 14), lookback_days=0)


class TestRemainingWorkingDays:

    def test_scaled_by_recent_share(self):
        ref = date(2024, 3, 16)
        records = [_record(ref - timedelta(days=i)) for i in range(15)]
        # 15 of 30 days worked, 15 days left in March: 7.5 rounds up
        assert estimate_remaining_working_days(records, ref) == 8

    def test_last_day_of_month(self):
        records = [_record(date(2024, 3, 31))]
        assert estimate_remaining_working_days(records, date(2024, 3, 31)) == 0

    def test_rejects_non_positive_window(self):
        with pytest.raises(ValueError):
            estimate_remaining_working_days([], date(2024, 3, 1), window_days=0)


# ===========================================================================
# Next payday
# ===========================================================================


class TestNextPayday:

    JOBS = [
        Job(job_id="cafe", payday=25),
        Job(job_id="store", payday=10),
        Job(job_id="gig"),
    ]

    def test_earliest_upcoming(self):
        result = find_next_payday(self.JOBS, date(2024, 3, 15))
        assert result.job.job_id == "cafe"
        assert result.date == date(2024, 3, 25)

    def test_today_included(self):
        assert find_next_payday(self.JOBS, date(2024, 3, 10)).date == date(2024, 3, 10)

    def test_rolls_into_next_month(self):
        result = find_next_payday(self.JOBS, date(2024, 3, 26))
        assert result.job.job_id == "store"
        assert result.date == date(2024, 4, 10)

    def test_year_rollover(self):
        jobs = [Job(job_id="cafe", payday=25)]
        assert find_next_payday(jobs, date(2024, 12, 26)).date == date(2025, 1, 25)

    def test_clamped_to_short_month(self):
        jobs = [Job(job_id="cafe", payday=31)]
        assert find_next_payday(jobs, date(2024, 2, 10)).date == date(2024, 2, 29)

    def test_no_paydays(self):
        assert find_next_payday([Job(job_id="gig")], date(2024, 3, 1)) is None
        assert find_next_payday(None, date(2024, 3, 1)) is None
