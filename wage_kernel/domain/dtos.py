"""
Data Transfer Objects for the wage engine.

These are immutable value objects that flow between the host application
and the calculation engines.  They carry no behaviour beyond input
coercion and a few derived properties.

All DTOs are frozen dataclasses, so they are hashable and can be used
directly inside derivation cache keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Mapping

from wage_kernel.domain.periods import as_date
from wage_kernel.domain.values import ZERO, to_decimal

DEFAULT_WEEKLY_ALLOWANCE_MIN_HOURS = Decimal("15.0")


class WageType(str, Enum):
    """How a work session is paid."""

    HOURLY = "hourly"
    DAILY = "daily"


def _bound(value: Any) -> Decimal:
    # Rows are cache keys; a signalling NaN cannot be hashed.
    number = to_decimal(value)
    return Decimal("NaN") if number.is_snan() else number


@dataclass(frozen=True)
class BreakPolicyRow:
    """
    One row of a break-time policy table.

    A work duration ``d`` matches the row when
    ``min_hours <= d < max_hours``.  Rows are not range-checked here:
    a row with ``max_hours <= min_hours`` or a NaN bound simply never
    matches.  ``break_minutes`` must be a whole number of minutes.  Use
    ``wage_config.validator.validate_break_policies`` before storing a
    table.
    """

    min_hours: Decimal
    max_hours: Decimal
    break_minutes: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "min_hours", _bound(self.min_hours))
        object.__setattr__(self, "max_hours", _bound(self.max_hours))
        minutes = to_decimal(self.break_minutes)
        if not minutes.is_finite() or minutes != minutes.to_integral_value():
            raise ValueError(
                f"break_minutes must be a whole number, got {self.break_minutes!r}"
            )
        object.__setattr__(self, "break_minutes", int(minutes))

    @classmethod
    def of(
        cls,
        min_hours: Decimal | int | float | str,
        max_hours: Decimal | int | float | str,
        break_minutes: int | float | str,
    ) -> BreakPolicyRow:
        """Factory method coercing raw numbers."""
        return cls(min_hours=min_hours, max_hours=max_hours, break_minutes=break_minutes)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> BreakPolicyRow:
        """Build a row from ``min_hours``/``minHours`` style keys."""
        return cls.of(
            _pick(data, "min_hours", "minHours"),
            _pick(data, "max_hours", "maxHours"),
            _pick(data, "break_minutes", "breakMinutes"),
        )

    def matches(self, duration_hours: Decimal) -> bool:
        if self.min_hours.is_nan() or self.max_hours.is_nan():
            return False
        return self.min_hours <= duration_hours < self.max_hours


# Statutory default: 30 minutes from 4 hours, 60 minutes from 8 hours.
DEFAULT_BREAK_POLICIES: tuple[BreakPolicyRow, ...] = (
    BreakPolicyRow.of(4, 8, 30),
    BreakPolicyRow.of(8, 12, 60),
)


def coerce_policy_table(
    rows: Iterable[BreakPolicyRow | Mapping[str, Any]] | None,
) -> tuple[BreakPolicyRow, ...] | None:
    """Normalize a raw policy table into a tuple of rows (``None`` stays ``None``)."""
    if rows is None:
        return None
    return tuple(
        row if isinstance(row, BreakPolicyRow) else BreakPolicyRow.from_mapping(row)
        for row in rows
    )


@dataclass(frozen=True)
class Job:
    """
    A job the user works, with its break-time and weekly-allowance policy.

    A job without its own table (``break_time_policies is None``) uses
    ``DEFAULT_BREAK_POLICIES``.  An empty tuple is a real table with no
    rows, so no duration ever earns a break.

    Jobs are replaced, never mutated.  Any replacement must be followed by
    a cache invalidation (``WageService.on_policies_changed``).
    """

    job_id: str
    name: str = ""
    hourly_rate_eligible: bool = True
    break_time_policies: tuple[BreakPolicyRow, ...] | None = None
    break_time_paid: bool = False
    break_time_enabled: bool = True
    weekly_allowance_enabled: bool = False
    weekly_allowance_min_hours: Decimal = DEFAULT_WEEKLY_ALLOWANCE_MIN_HOURS
    payday: int | None = None
    color: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "break_time_policies", coerce_policy_table(self.break_time_policies)
        )
        # A missing or zero threshold falls back to the statutory 15 hours.
        min_hours = self.weekly_allowance_min_hours
        if min_hours is None or to_decimal(min_hours) == ZERO:
            min_hours = DEFAULT_WEEKLY_ALLOWANCE_MIN_HOURS
        object.__setattr__(self, "weekly_allowance_min_hours", to_decimal(min_hours))

    @property
    def applicable_break_policies(self) -> tuple[BreakPolicyRow, ...]:
        if self.break_time_policies is None:
            return DEFAULT_BREAK_POLICIES
        return self.break_time_policies

    @property
    def break_policy_key(self) -> tuple:
        """Every job field that can change a break-time result."""
        return (
            self.break_time_enabled,
            self.break_time_paid,
            self.applicable_break_policies,
        )


@dataclass(frozen=True)
class HourlyRateRecord:
    """
    One entry of a job's hourly rate history.

    Active for a date when ``effective_date <= date`` and the record is
    open-ended or ``end_date >= date``.
    """

    job_id: str
    hourly_rate: Decimal
    effective_date: date
    end_date: date | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "hourly_rate", to_decimal(self.hourly_rate))
        object.__setattr__(self, "effective_date", as_date(self.effective_date))
        if self.end_date is not None:
            object.__setattr__(self, "end_date", as_date(self.end_date))

    def is_effective(self, on: date) -> bool:
        if self.effective_date > on:
            return False
        return self.end_date is None or self.end_date >= on


@dataclass(frozen=True)
class WorkSession:
    """
    One contiguous work interval recorded on a calendar date.

    ``start_time``/``end_time`` are "HH:mm" strings (or ``datetime.time``)
    and may be missing, e.g. for a record that only marks an unexcused
    absence.  An end at or before the start means the shift crossed
    midnight.

    ``daily_wage`` is the wage the host stored when the session was saved
    (see ``wage_engines.session_wage.with_computed_wage``); the weekly
    allowance derives its average rate from it.
    """

    job_id: str
    work_date: date
    start_time: str | time | None = None
    end_time: str | time | None = None
    wage_type: WageType = WageType.HOURLY
    fixed_daily_wage: Decimal | None = None
    meal_allowance: Decimal = ZERO
    is_unexcused_absence: bool = False
    daily_wage: Decimal | None = None
    record_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "work_date", as_date(self.work_date))
        object.__setattr__(self, "wage_type", WageType(self.wage_type))
        object.__setattr__(
            self,
            "meal_allowance",
            to_decimal(self.meal_allowance) if self.meal_allowance is not None else ZERO,
        )
        if self.fixed_daily_wage is not None:
            object.__setattr__(self, "fixed_daily_wage", to_decimal(self.fixed_daily_wage))
        if self.daily_wage is not None:
            object.__setattr__(self, "daily_wage", to_decimal(self.daily_wage))

    @property
    def has_times(self) -> bool:
        return bool(self.start_time) and bool(self.end_time)

    @property
    def stored_wage(self) -> Decimal:
        return self.daily_wage if self.daily_wage is not None else ZERO


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    raise KeyError(keys[0])
