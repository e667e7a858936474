"""
Periods -- ISO week and calendar month arithmetic.

Responsibility:
    Calendar-date helpers shared by the weekly allowance and monthly
    aggregation engines.  All comparisons are by calendar date, never by
    datetime, so a session's time of day cannot move it across a week or
    month boundary.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O, zero clock reads.

Invariants enforced:
    - ISO weeks run Monday through Sunday inclusive.
    - A week overlaps a month when its Monday-Sunday span shares at least
      one calendar date with the month.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta


def as_date(value: date | datetime | str) -> date:
    """
    Normalize a reference date.

    Raises:
        ValueError: If a string is not an ISO date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    raise ValueError(f"Cannot interpret {value!r} as a date")


def iso_week_start(day: date) -> date:
    """Monday of the ISO week containing ``day``."""
    return day - timedelta(days=day.weekday())


def iso_week_end(day: date) -> date:
    """Sunday of the ISO week containing ``day``."""
    return iso_week_start(day) + timedelta(days=6)


def month_start(day: date) -> date:
    return day.replace(day=1)


def month_end(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def is_same_month(day: date, reference: date) -> bool:
    return day.year == reference.year and day.month == reference.month


def iso_weeks_overlapping_month(reference: date) -> list[date]:
    """
    Mondays of every ISO week that shares a date with the month of
    ``reference``, in chronological order.
    """
    first = month_start(reference)
    last = month_end(reference)
    weeks: list[date] = []
    monday = iso_week_start(first)
    while monday <= last:
        weeks.append(monday)
        monday += timedelta(days=7)
    return weeks


def month_key(reference: date) -> str:
    """``YYYY-MM`` key for a month."""
    return f"{reference.year:04d}-{reference.month:02d}"
