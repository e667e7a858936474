"""
Pure domain layer.

This module contains pure data transfer objects and helpers with NO
dependencies on:
- Persistence
- Time/clock (except the injectable Clock itself)
- I/O

All domain objects are immutable and deterministic.
"""

from wage_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from wage_kernel.domain.dtos import (
    DEFAULT_BREAK_POLICIES,
    DEFAULT_WEEKLY_ALLOWANCE_MIN_HOURS,
    BreakPolicyRow,
    HourlyRateRecord,
    Job,
    WageType,
    WorkSession,
    coerce_policy_table,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "DEFAULT_BREAK_POLICIES",
    "DEFAULT_WEEKLY_ALLOWANCE_MIN_HOURS",
    "BreakPolicyRow",
    "HourlyRateRecord",
    "Job",
    "WageType",
    "WorkSession",
    "coerce_policy_table",
]
