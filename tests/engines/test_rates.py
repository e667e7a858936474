"""Tests for hourly rate resolution."""

from datetime import date
from decimal import Decimal

from wage_engines.rates import find_rate_record, rate_timeline, resolve_hourly_rate
from wage_kernel.domain.dtos import HourlyRateRecord

RATES = [
    HourlyRateRecord("cafe", Decimal("9860"), date(2024, 1, 1), date(2024, 6, 30)),
    HourlyRateRecord("cafe", Decimal("10500"), date(2024, 7, 1)),
    HourlyRateRecord("store", Decimal("12000"), "2024-03-01"),
]


class TestResolveHourlyRate:

    def test_rate_within_closed_record(self):
        assert resolve_hourly_rate(RATES, "cafe", date(2024, 3, 15)) == Decimal("9860")

    def test_end_date_inclusive(self):
        assert resolve_hourly_rate(RATES, "cafe", date(2024, 6, 30)) == Decimal("9860")

    def test_open_ended_record(self):
        assert resolve_hourly_rate(RATES, "cafe", date(2030, 1, 1)) == Decimal("10500")

    def test_before_first_record(self):
        assert resolve_hourly_rate(RATES, "cafe", date(2023, 12, 31)) is None

    def test_other_jobs_ignored(self):
        assert resolve_hourly_rate(RATES, "store", date(2024, 2, 1)) is None
        assert resolve_hourly_rate(RATES, "unknown", date(2024, 5, 1)) is None

    def test_overlap_resolves_to_latest_effective(self):
        rates = [
            HourlyRateRecord("cafe", Decimal("9000"), date(2024, 1, 1)),
            HourlyRateRecord("cafe", Decimal("9500"), date(2024, 2, 1)),
        ]
        assert resolve_hourly_rate(rates, "cafe", date(2024, 2, 15)) == Decimal("9500")
        assert resolve_hourly_rate(rates, "cafe", date(2024, 1, 15)) == Decimal("9000")

    def test_find_returns_record(self):
        record = find_rate_record(RATES, "store", date(2024, 3, 1))
        assert record is RATES[2]


class TestRateTimeline:

    def test_sorted_by_effective_date(self):
        timeline = rate_timeline(list(reversed(RATES)), "cafe")
        assert [r.effective_date for r in timeline] == [date(2024, 1, 1), date(2024, 7, 1)]

    def test_unknown_job_is_empty(self):
        assert rate_timeline(RATES, "nobody") == ()
