"""
Module: wage_engines
Responsibility:
    Package entrypoint that re-exports all public symbols from the pure
    calculation engine sub-modules.  This is the canonical import surface
    for higher layers (wage_services and host applications).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import wage_kernel (domain, logging) and sibling engine modules.
    MUST NOT import wage_config or wage_services.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Reference dates are passed in by the caller.
    - Decimal-only arithmetic: hours and money are ``Decimal``; currency
      is rounded to whole units once, at the end of each formula.
    - Determinism: identical inputs always produce identical outputs, which
      is what makes the ``DerivationCache`` safe.

Failure modes:
    - Business conditions (malformed times, missing rates, unmatched policy
      rows, unexcused absences) never raise; they produce zero or
      ineligible results.
    - ValueError only for programming errors (non-numeric durations,
      non-positive window lengths).

Usage:
    from wage_engines import (
        DerivationCache,
        calculate_break_time,
        calculate_work_and_break_time,
        compute_wage,
        calculate_weekly_allowance,
        calculate_monthly_weekly_allowance,
        summarize_month,
    )
"""

from wage_kernel.logging_config import get_logger

logger = get_logger("engines")

from wage_engines.break_time import (
    COMMON_WORK_HOURS,
    BreakTimeResult,
    calculate_break_time,
    warmup_break_time_cache,
)
from wage_engines.cache import (
    BREAK_TIME_NAMESPACE,
    REPORT_NAMESPACE,
    WEEKLY_ALLOWANCE_NAMESPACE,
    CacheInfo,
    DerivationCache,
    ReportCache,
)
from wage_engines.insights import (
    MonthlySummary,
    NextPayday,
    compute_monthly_summary,
    compute_recent_average_daily_income,
    estimate_remaining_working_days,
    filter_records_by_month,
    find_next_payday,
)
from wage_engines.monthly import (
    JobAllowanceSubtotal,
    MonthlyAllowanceSummary,
    MonthlyReport,
    SessionLineItem,
    WeekAllowance,
    calculate_monthly_weekly_allowance,
    summarize_month,
)
from wage_engines.rates import find_rate_record, rate_timeline, resolve_hourly_rate
from wage_engines.session_wage import (
    BreakWageDifference,
    WorkAndBreakTime,
    break_time_wage_difference,
    calculate_work_and_break_time,
    compute_wage,
    session_minutes,
    with_computed_wage,
)
from wage_engines.tracer import traced_engine
from wage_engines.weekly_allowance import (
    AllowanceReason,
    WeekLabel,
    WeeklyAllowanceResult,
    WeekProgress,
    calculate_weekly_allowance,
    describe_week,
    get_current_week_progress,
    get_weekly_records,
)

__all__ = [
    # Break time
    "COMMON_WORK_HOURS",
    "BreakTimeResult",
    "calculate_break_time",
    "warmup_break_time_cache",
    # Cache
    "BREAK_TIME_NAMESPACE",
    "REPORT_NAMESPACE",
    "WEEKLY_ALLOWANCE_NAMESPACE",
    "CacheInfo",
    "DerivationCache",
    "ReportCache",
    # Insights
    "MonthlySummary",
    "NextPayday",
    "compute_monthly_summary",
    "compute_recent_average_daily_income",
    "estimate_remaining_working_days",
    "filter_records_by_month",
    "find_next_payday",
    # Monthly
    "JobAllowanceSubtotal",
    "MonthlyAllowanceSummary",
    "MonthlyReport",
    "SessionLineItem",
    "WeekAllowance",
    "calculate_monthly_weekly_allowance",
    "summarize_month",
    # Rates
    "find_rate_record",
    "rate_timeline",
    "resolve_hourly_rate",
    # Session wage
    "BreakWageDifference",
    "WorkAndBreakTime",
    "break_time_wage_difference",
    "calculate_work_and_break_time",
    "compute_wage",
    "session_minutes",
    "with_computed_wage",
    # Tracer
    "traced_engine",
    # Weekly allowance
    "AllowanceReason",
    "WeekLabel",
    "WeeklyAllowanceResult",
    "WeekProgress",
    "calculate_weekly_allowance",
    "describe_week",
    "get_current_week_progress",
    "get_weekly_records",
]
