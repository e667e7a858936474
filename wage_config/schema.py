"""
Wage configuration schema.

Defines the human-authored, reviewable configuration artifacts.  YAML
files are parsed into these types by the loader and checked by the
validator before anything reaches the engines.

  EngineSettings = engine-wide defaults (break table, allowance threshold,
                   cache sizes, local time zone)
  JobCatalog     = a user's jobs and hourly rate history
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from wage_kernel.domain.dtos import (
    DEFAULT_BREAK_POLICIES,
    DEFAULT_WEEKLY_ALLOWANCE_MIN_HOURS,
    BreakPolicyRow,
    HourlyRateRecord,
    Job,
)


@dataclass(frozen=True)
class EngineSettings:
    """Engine-wide defaults."""

    default_break_policies: tuple[BreakPolicyRow, ...] = DEFAULT_BREAK_POLICIES
    default_weekly_allowance_min_hours: Decimal = DEFAULT_WEEKLY_ALLOWANCE_MIN_HOURS
    cache_max_entries: int = 1000
    report_cache_max_entries: int = 20
    timezone: str = "Asia/Seoul"
    checksum: str = ""


@dataclass(frozen=True)
class JobCatalog:
    """Jobs and their hourly rate history, as loaded from one file."""

    jobs: tuple[Job, ...]
    hourly_rates: tuple[HourlyRateRecord, ...] = ()
    checksum: str = ""

    def job(self, job_id: str) -> Job | None:
        for job in self.jobs:
            if job.job_id == job_id:
                return job
        return None
