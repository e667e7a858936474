"""
Tests for monthly aggregation.

March 2024 starts on a Friday, so its ISO weeks begin on
Feb 26, Mar 4, Mar 11, Mar 18 and Mar 25.  The Feb 26 week is shared
with February.

Covers:
- Weeks overlapping the month and boundary-week attribution
- Per-job subtotals and eligible week counting
- Line items, rate changes, missing rates, daily-wage sessions
- Determinism and cache transparency
"""

from datetime import date
from decimal import Decimal

from wage_engines.monthly import (
    calculate_monthly_weekly_allowance,
    summarize_month,
)
from wage_kernel.domain.dtos import HourlyRateRecord, Job, WageType, WorkSession

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _worked(
    day: date,
    job_id: str = "store",
    start: str = "09:00",
    end: str = "14:00",
    wage: Decimal | None = Decimal("50000"),
    **kwargs,
) -> WorkSession:
    return WorkSession(
        job_id=job_id,
        work_date=day,
        start_time=start,
        end_time=end,
        daily_wage=wage,
        **kwargs,
    )


def _eligible_week(monday: date, job_id: str = "store") -> list[WorkSession]:
    return [_worked(date.fromordinal(monday.toordinal() + i), job_id=job_id) for i in range(3)]


def _rates(*job_ids: str) -> list[HourlyRateRecord]:
    return [HourlyRateRecord(j, Decimal("10000"), date(2024, 1, 1)) for j in job_ids]


# ===========================================================================
# Monthly weekly allowance
# ===========================================================================


class TestMonthlyWeeklyAllowance:

    def test_weeks_touching_the_month(self, allowance_job):
        summary = calculate_monthly_weekly_allowance([], [allowance_job], date(2024, 3, 15))
        assert summary.month == "2024-03"
        assert summary.total_weeks == 5
        assert [w.week_start for w in summary.weeks] == [
            date(2024, 2, 26),
            date(2024, 3, 4),
            date(2024, 3, 11),
            date(2024, 3, 18),
            date(2024, 3, 25),
        ]
        assert summary.total_allowance == Decimal("0")
        assert summary.eligible_weeks == 0
        assert summary.job_allowances == {}

    def test_two_eligible_weeks(self, allowance_job):
        records = _eligible_week(date(2024, 3, 4)) + _eligible_week(date(2024, 3, 18))
        summary = calculate_monthly_weekly_allowance(records, [allowance_job], date(2024, 3, 1))
        assert summary.total_allowance == Decimal("100000")
        assert summary.eligible_weeks == 2
        subtotal = summary.job_allowances["store"]
        assert subtotal.total_amount == Decimal("100000")
        assert subtotal.week_count == 2
        assert subtotal.job_color == "#ff8800"

    def test_boundary_week_counts_in_both_months(self, allowance_job):
        # Mon-Wed Feb 26-28 belong to February, but the week reaches March.
        records = _eligible_week(date(2024, 2, 26))
        february = calculate_monthly_weekly_allowance(records, [allowance_job], date(2024, 2, 1))
        march = calculate_monthly_weekly_allowance(records, [allowance_job], date(2024, 3, 1))
        assert february.total_allowance == Decimal("50000")
        assert march.total_allowance == Decimal("50000")
        assert march.weeks[0].result_for("store").eligible is True

    def test_boundary_week_evaluated_over_full_week(self, allowance_job):
        # Two days in February, one in March: only the full week reaches 15h.
        records = [
            _worked(date(2024, 2, 28)),
            _worked(date(2024, 2, 29)),
            _worked(date(2024, 3, 1)),
        ]
        march = calculate_monthly_weekly_allowance(records, [allowance_job], date(2024, 3, 1))
        assert march.total_allowance == Decimal("50000")

    def test_disabled_jobs_skipped(self, allowance_job):
        disabled = Job(job_id="cafe", weekly_allowance_enabled=False)
        records = _eligible_week(date(2024, 3, 4), job_id="cafe")
        summary = calculate_monthly_weekly_allowance(
            records, [allowance_job, disabled], date(2024, 3, 1)
        )
        assert summary.total_allowance == Decimal("0")
        assert summary.weeks[1].result_for("cafe") is None

    def test_eligible_weeks_count_job_week_pairs(self, allowance_job):
        other = Job(job_id="cafe", break_time_enabled=False, weekly_allowance_enabled=True)
        records = _eligible_week(date(2024, 3, 4)) + _eligible_week(date(2024, 3, 4), "cafe")
        summary = calculate_monthly_weekly_allowance(
            records, [allowance_job, other], date(2024, 3, 1)
        )
        assert summary.eligible_weeks == 2
        assert summary.weeks[1].total_amount == Decimal("100000")
        assert list(summary.job_allowances) == ["store", "cafe"]

    def test_zero_amount_week_not_counted(self, allowance_job):
        records = [_worked(d.work_date, wage=None) for d in _eligible_week(date(2024, 3, 4))]
        summary = calculate_monthly_weekly_allowance(records, [allowance_job], date(2024, 3, 1))
        assert summary.eligible_weeks == 0
        assert summary.weeks[1].result_for("store").eligible is True

    def test_same_inputs_same_summary(self, allowance_job):
        records = _eligible_week(date(2024, 3, 4))
        assert calculate_monthly_weekly_allowance(
            records, [allowance_job], date(2024, 3, 1)
        ) == calculate_monthly_weekly_allowance(records, [allowance_job], date(2024, 3, 31))


# ===========================================================================
# Monthly report
# ===========================================================================


class TestSummarizeMonth:

    def test_wages_and_allowance(self, allowance_job):
        records = _eligible_week(date(2024, 3, 4))
        report = summarize_month(records, [allowance_job], _rates("store"), date(2024, 3, 1))
        assert len(report.line_items) == 3
        assert all(item.wage == Decimal("50000") for item in report.line_items)
        assert report.total_wage == Decimal("150000")
        assert report.total_minutes == 900
        assert report.total_hours == Decimal("15")
        assert report.allowance.total_allowance == Decimal("50000")
        assert report.total_income == Decimal("200000")

    def test_wages_only_from_sessions_in_month(self, allowance_job):
        records = _eligible_week(date(2024, 2, 26))
        report = summarize_month(records, [allowance_job], _rates("store"), date(2024, 3, 1))
        assert report.line_items == ()
        assert report.total_wage == Decimal("0")
        assert report.allowance.total_allowance == Decimal("50000")

    def test_line_items_sorted_by_date(self, allowance_job):
        records = [_worked(date(2024, 3, 12)), _worked(date(2024, 3, 5))]
        report = summarize_month(records, [allowance_job], _rates("store"), date(2024, 3, 1))
        assert [i.session.work_date for i in report.line_items] == [
            date(2024, 3, 5),
            date(2024, 3, 12),
        ]

    def test_break_time_in_line_items(self, four_hour_job):
        records = [_worked(date(2024, 3, 5), job_id="cafe")]
        report = summarize_month(records, [four_hour_job], _rates("cafe"), date(2024, 3, 1))
        item = report.line_items[0]
        assert item.break_minutes == 30
        assert item.work_hours == Decimal("4.5")
        assert item.wage == Decimal("45000")
        assert item.unpaid_break_wage == Decimal("5000")
        assert report.total_break_minutes == 30
        assert report.total_unpaid_break_wage == Decimal("5000")

    def test_rate_change_mid_month(self, allowance_job):
        rates = [
            HourlyRateRecord("store", Decimal("10000"), date(2024, 1, 1), date(2024, 3, 9)),
            HourlyRateRecord("store", Decimal("12000"), date(2024, 3, 10)),
        ]
        records = [_worked(date(2024, 3, 9)), _worked(date(2024, 3, 10))]
        report = summarize_month(records, [allowance_job], rates, date(2024, 3, 1))
        assert [i.wage for i in report.line_items] == [Decimal("50000"), Decimal("60000")]
        assert [i.hourly_rate for i in report.line_items] == [Decimal("10000"), Decimal("12000")]

    def test_missing_rate_flagged(self, allowance_job):
        records = [_worked(date(2024, 3, 5))]
        report = summarize_month(records, [allowance_job], [], date(2024, 3, 1))
        item = report.line_items[0]
        assert item.rate_missing is True
        assert item.wage == Decimal("0")
        assert report.rate_missing_count == 1

    def test_daily_wage_session(self, allowance_job):
        records = [
            _worked(
                date(2024, 3, 5),
                wage_type=WageType.DAILY,
                fixed_daily_wage=Decimal("80000"),
                meal_allowance=Decimal("10000"),
            )
        ]
        report = summarize_month(records, [allowance_job], [], date(2024, 3, 1))
        item = report.line_items[0]
        assert item.wage == Decimal("90000")
        assert item.hourly_rate is None
        assert item.rate_missing is False
        assert report.total_meal_allowance == Decimal("10000")

    def test_unknown_job_priced_with_defaults(self):
        records = [_worked(date(2024, 3, 5), job_id="ghost")]
        report = summarize_month(records, [], _rates("ghost"), date(2024, 3, 1))
        # Default table: 30 minutes off a five hour session
        assert report.line_items[0].wage == Decimal("45000")

    def test_invalid_session_in_report(self, allowance_job):
        records = [_worked(date(2024, 3, 5), start="24:00")]
        report = summarize_month(records, [allowance_job], _rates("store"), date(2024, 3, 1))
        assert report.line_items[0].is_valid is False
        assert report.total_minutes == 0

    def test_idempotent_and_cache_transparent(self, allowance_job, cache):
        records = _eligible_week(date(2024, 3, 4)) + _eligible_week(date(2024, 3, 25))
        plain = summarize_month(records, [allowance_job], _rates("store"), date(2024, 3, 1))
        cached = summarize_month(
            records, [allowance_job], _rates("store"), date(2024, 3, 1), cache=cache
        )
        again = summarize_month(
            records, [allowance_job], _rates("store"), date(2024, 3, 1), cache=cache
        )
        assert plain == cached == again
