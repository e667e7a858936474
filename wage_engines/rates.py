"""
Hourly Rate Resolution (``wage_engines.rates``).

Responsibility
--------------
Pick the hourly rate in force for a job on a date from the job's rate
history.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.
The rate history is passed in; fetching it is the host's job.

Invariants enforced
-------------------
* A record is active on ``d`` when ``effective_date <= d`` and it is
  open-ended or ``end_date >= d``.
* Among active records the latest ``effective_date`` wins, so a history
  that (against validation) overlaps still resolves deterministically.

Failure modes
-------------
* No active record: ``None``.  Callers treat that as a missing rate.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from wage_kernel.domain.dtos import HourlyRateRecord


def find_rate_record(
    rates: Iterable[HourlyRateRecord],
    job_id: str,
    on_date: date,
) -> HourlyRateRecord | None:
    """The active rate record for ``job_id`` on ``on_date``, if any."""
    best: HourlyRateRecord | None = None
    for record in rates:
        if record.job_id != job_id or not record.is_effective(on_date):
            continue
        if best is None or record.effective_date > best.effective_date:
            best = record
    return best


def resolve_hourly_rate(
    rates: Iterable[HourlyRateRecord],
    job_id: str,
    on_date: date,
) -> Decimal | None:
    """The hourly rate for ``job_id`` on ``on_date``, or ``None``."""
    record = find_rate_record(rates, job_id, on_date)
    return record.hourly_rate if record is not None else None


def rate_timeline(
    rates: Iterable[HourlyRateRecord],
    job_id: str,
) -> tuple[HourlyRateRecord, ...]:
    """One job's rate records ordered by effective date."""
    return tuple(
        sorted(
            (r for r in rates if r.job_id == job_id),
            key=lambda r: r.effective_date,
        )
    )
