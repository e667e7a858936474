"""
Pytest fixtures for the wage engine test suite.

Provides:
- Jobs with the common policy shapes used across engine tests
- A fresh DerivationCache per test
- A deterministic clock for service tests

All engine tests are pure: no database, no network, no wall clock.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from wage_engines.cache import DerivationCache
from wage_kernel.domain.clock import DeterministicClock
from wage_kernel.domain.dtos import BreakPolicyRow, HourlyRateRecord, Job


@pytest.fixture
def cache() -> DerivationCache:
    return DerivationCache()


@pytest.fixture
def four_hour_job() -> Job:
    """30 minutes of unpaid break for 4 to 8 hours of work."""
    return Job(
        job_id="cafe",
        name="Cafe",
        break_time_policies=(BreakPolicyRow.of(4, 8, 30),),
        break_time_paid=False,
    )


@pytest.fixture
def allowance_job() -> Job:
    """Weekly allowance enabled, break time disabled so hours are raw."""
    return Job(
        job_id="store",
        name="Store",
        break_time_enabled=False,
        weekly_allowance_enabled=True,
        color="#ff8800",
    )


@pytest.fixture
def flat_rate() -> list[HourlyRateRecord]:
    return [
        HourlyRateRecord("cafe", Decimal("10000"), date(2024, 1, 1)),
        HourlyRateRecord("store", Decimal("10000"), date(2024, 1, 1)),
    ]


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    # Wednesday of ISO week 2024-03-04 .. 2024-03-10
    return DeterministicClock(datetime(2024, 3, 6, 12, 0, tzinfo=timezone.utc))
