"""
Values -- Decimal helpers and time-of-day parsing.

Responsibility:
    Provides the numeric conventions every engine shares: coercion of raw
    numbers into ``Decimal``, whole-unit currency rounding, two-place hour
    rounding for display, and tolerant "HH:mm" parsing.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Hours and money are ``Decimal``; floats are converted through ``str``
      so ``0.1`` stays ``Decimal("0.1")``.
    - Currency rounding is ROUND_HALF_UP to whole units, applied once by
      the caller after all multiplication.

Failure modes:
    - ``to_decimal`` raises ``ValueError`` for values that are not numbers.
    - ``parse_hhmm`` never raises; malformed input yields ``None``.
"""

from __future__ import annotations

import re
from datetime import time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
MINUTES_PER_HOUR = Decimal("60")
MINUTES_PER_DAY = 24 * 60

_CURRENCY_UNIT = Decimal("1")
_HOURS_PLACES = Decimal("0.01")

_HHMM = re.compile(r"^\s*(\d{1,2}):(\d{1,2})(?::(\d{1,2}))?\s*$")


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a raw number into ``Decimal``.

    Raises:
        ValueError: If ``value`` is a bool, None, or not numeric.
    """
    if isinstance(value, Decimal):
        return value
    if value is None or isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Not a number: {value!r}") from e


def round_currency(amount: Decimal) -> Decimal:
    """Round a currency amount to whole units (half up)."""
    return amount.quantize(_CURRENCY_UNIT, rounding=ROUND_HALF_UP)


def round_hours(hours: Decimal) -> Decimal:
    """Round an hour quantity to two places for display."""
    return hours.quantize(_HOURS_PLACES, rounding=ROUND_HALF_UP)


def minutes_to_hours(minutes: int) -> Decimal:
    """Convert whole minutes to (unrounded) decimal hours."""
    return Decimal(minutes) / MINUTES_PER_HOUR


def parse_hhmm(value: str | time | None) -> int | None:
    """
    Parse a time of day into minutes after midnight.

    Accepts ``"H:mm"``, ``"HH:mm"`` and ``"HH:mm:ss"`` (seconds ignored),
    or a ``datetime.time``.  Returns ``None`` for anything else, including
    out-of-range hours or minutes.
    """
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    if not isinstance(value, str):
        return None
    match = _HHMM.match(value)
    if match is None:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes
