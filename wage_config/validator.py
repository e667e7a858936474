"""
Configuration Validator (``wage_config.validator``).

Responsibility
--------------
Checks raw break-policy tables, job definitions, and hourly rate
histories before they are stored or handed to the engines.  The engines
themselves never reject a table; this module is where bad input is
caught.

Architecture position
---------------------
**Config layer** -- edit-time and load-time validation.  Called by the
``wage_config`` entrypoints and by ``WageService`` when rates change.
Depends on kernel DTOs and exceptions only.

Invariants enforced
-------------------
* Break policy tables are non-empty; every row has numeric bounds with
  ``min_hours >= 0``, ``max_hours > min_hours`` and
  ``break_minutes`` a whole number ``>= 0``.  Overlapping rows are a
  warning: the first matching row wins at calculation time.
* Hourly rates are positive, ``end_date >= effective_date``, and closed
  records of one job never overlap.  An open-ended record followed by a
  later one is superseded (warning), since rate lookup picks the latest
  effective date.
* Weekly allowance thresholds are positive numbers; paydays lie in 1..31.

Failure modes
-------------
* Errors (``ValidationResult.errors``)  -> input MUST NOT be stored.
* Warnings (``ValidationResult.warnings``)  -> input is usable but
  should be reviewed.
* ``require_valid_break_policies`` raises ``InvalidBreakPolicyError``;
  ``require_non_overlapping_rates`` raises ``OverlappingRateTimelineError``.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from wage_kernel.domain.dtos import BreakPolicyRow, HourlyRateRecord
from wage_kernel.domain.values import ZERO, to_decimal
from wage_kernel.exceptions import InvalidBreakPolicyError, OverlappingRateTimelineError

_ROW_FIELDS = (
    ("min_hours", "minHours"),
    ("max_hours", "maxHours"),
    ("break_minutes", "breakMinutes"),
)


@dataclass
class ValidationResult:
    """
    Result of configuration validation.

    Contract
    --------
    * ``is_valid`` returns ``True`` only when ``errors`` is empty.
    * Warnings do not block storage but should be reviewed.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def merge(self, other: ValidationResult, prefix: str = "") -> None:
        self.errors.extend(f"{prefix}{e}" for e in other.errors)
        self.warnings.extend(f"{prefix}{w}" for w in other.warnings)


def _number(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return None
    try:
        number = to_decimal(value)
    except ValueError:
        return None
    return number if number.is_finite() else None


def _raw_row(row: BreakPolicyRow | Mapping[str, Any]) -> tuple[Any, Any, Any]:
    if isinstance(row, BreakPolicyRow):
        return row.min_hours, row.max_hours, row.break_minutes
    values = []
    for snake, camel in _ROW_FIELDS:
        values.append(row.get(snake, row.get(camel)))
    return values[0], values[1], values[2]


def validate_break_policies(
    policies: Iterable[BreakPolicyRow | Mapping[str, Any]] | None,
) -> ValidationResult:
    """
    Validate a break policy table.

    Preconditions:
        - ``policies`` holds ``BreakPolicyRow`` instances or mappings with
          ``min_hours``/``max_hours``/``break_minutes`` (or camelCase) keys.
    Postconditions:
        - Returns a ``ValidationResult``; errors are prefixed with the
          1-based row number.
    """
    result = ValidationResult()
    rows = list(policies) if policies is not None else []
    if not rows:
        result.add_error("Break policy table must have at least one row")
        return result

    parsed: list[tuple[int, Decimal, Decimal]] = []
    for index, row in enumerate(rows, start=1):
        if not isinstance(row, (BreakPolicyRow, Mapping)):
            result.add_error(f"Row {index}: expected a mapping, got {type(row).__name__}")
            continue
        raw_min, raw_max, raw_minutes = _raw_row(row)
        min_hours, max_hours, minutes = _number(raw_min), _number(raw_max), _number(raw_minutes)
        if min_hours is None or max_hours is None or minutes is None:
            result.add_error(f"Row {index}: min_hours, max_hours and break_minutes must be numbers")
            continue
        if min_hours < ZERO:
            result.add_error(f"Row {index}: min_hours must be >= 0, got {min_hours}")
        if max_hours <= min_hours:
            result.add_error(
                f"Row {index}: max_hours ({max_hours}) must be greater than min_hours ({min_hours})"
            )
        if minutes < ZERO:
            result.add_error(f"Row {index}: break_minutes must be >= 0, got {minutes}")
        if minutes != minutes.to_integral_value():
            result.add_error(
                f"Row {index}: break_minutes must be a whole number, got {minutes}"
            )
        parsed.append((index, min_hours, max_hours))

    _check_row_overlap(parsed, result)
    return result


def _check_row_overlap(
    parsed: list[tuple[int, Decimal, Decimal]], result: ValidationResult
) -> None:
    for i, (index_a, min_a, max_a) in enumerate(parsed):
        for index_b, min_b, max_b in parsed[i + 1:]:
            if min_a < max_b and min_b < max_a:
                result.add_warning(
                    f"Rows {index_a} and {index_b} overlap; row {index_a} wins "
                    "for durations in both ranges"
                )


def require_valid_break_policies(
    policies: Iterable[BreakPolicyRow | Mapping[str, Any]] | None,
    job_id: str | None = None,
) -> tuple[BreakPolicyRow, ...]:
    """
    Validate a table and return it as a tuple of rows.

    Raises:
        InvalidBreakPolicyError: if the table has any errors.
    """
    rows = list(policies) if policies is not None else []
    result = validate_break_policies(rows)
    if not result.is_valid:
        raise InvalidBreakPolicyError(result.errors, job_id=job_id)
    return tuple(
        row if isinstance(row, BreakPolicyRow) else BreakPolicyRow.from_mapping(row)
        for row in rows
    )


def validate_job(data: Mapping[str, Any]) -> ValidationResult:
    """Validate one raw job definition (as read from YAML)."""
    result = ValidationResult()
    job_id = data.get("job_id")
    if not job_id:
        result.add_error("job_id is required")
    label = f"Job {job_id!r}: " if job_id else "Job: "

    policies = data.get("break_time_policies")
    if policies is not None:
        if isinstance(policies, (str, bytes)) or not isinstance(policies, Iterable):
            result.add_error(f"{label}break_time_policies must be a list")
        else:
            result.merge(validate_break_policies(policies), prefix=label)

    threshold = data.get("weekly_allowance_min_hours")
    if threshold is not None:
        number = _number(threshold)
        if number is None or number < ZERO:
            result.add_error(
                f"{label}weekly_allowance_min_hours must be a non-negative number, got {threshold!r}"
            )

    payday = data.get("payday")
    if payday is not None:
        if isinstance(payday, bool) or not isinstance(payday, int) or not 1 <= payday <= 31:
            result.add_error(f"{label}payday must be an integer in 1..31, got {payday!r}")

    return result


def validate_settings(data: Mapping[str, Any]) -> ValidationResult:
    """Validate a raw engine settings document."""
    result = ValidationResult()

    policies = data.get("default_break_policies")
    if policies is not None:
        result.merge(validate_break_policies(policies), prefix="default_break_policies: ")

    threshold = data.get("default_weekly_allowance_min_hours")
    if threshold is not None:
        number = _number(threshold)
        if number is None or number <= ZERO:
            result.add_error(
                f"default_weekly_allowance_min_hours must be a positive number, got {threshold!r}"
            )

    for key in ("cache_max_entries", "report_cache_max_entries"):
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            result.add_error(f"{key} must be a positive integer, got {value!r}")

    timezone = data.get("timezone")
    if timezone is not None:
        try:
            ZoneInfo(str(timezone))
        except (ZoneInfoNotFoundError, ValueError):
            result.add_error(f"Unknown timezone {timezone!r}")

    return result


def validate_rate_timeline(rates: Iterable[HourlyRateRecord]) -> ValidationResult:
    """
    Validate hourly rate histories.

    Postconditions:
        - Errors name the job and the offending effective dates.
    """
    result = ValidationResult()
    by_job: dict[str, list[HourlyRateRecord]] = defaultdict(list)
    for record in rates:
        label = f"Rate {record.job_id}@{record.effective_date.isoformat()}"
        if record.hourly_rate <= ZERO:
            result.add_error(f"{label}: hourly_rate must be positive, got {record.hourly_rate}")
        if record.end_date is not None and record.end_date < record.effective_date:
            result.add_error(
                f"{label}: end_date {record.end_date.isoformat()} is before effective_date"
            )
        by_job[record.job_id].append(record)

    for job_id, records in by_job.items():
        for first, second in _consecutive(records):
            if first.effective_date == second.effective_date:
                result.add_error(
                    f"Job {job_id!r}: two rates start on {first.effective_date.isoformat()}"
                )
            elif first.end_date is None:
                result.add_warning(
                    f"Job {job_id!r}: open-ended rate from {first.effective_date.isoformat()} "
                    f"is superseded on {second.effective_date.isoformat()}"
                )
            elif first.end_date >= second.effective_date:
                result.add_error(
                    f"Job {job_id!r}: rate from {first.effective_date.isoformat()} overlaps "
                    f"rate from {second.effective_date.isoformat()}"
                )
    return result


def _consecutive(
    records: list[HourlyRateRecord],
) -> Iterable[tuple[HourlyRateRecord, HourlyRateRecord]]:
    ordered = sorted(records, key=lambda r: r.effective_date)
    return zip(ordered, ordered[1:])


def require_non_overlapping_rates(rates: Iterable[HourlyRateRecord]) -> None:
    """
    Raise on the first pair of overlapping rate records of any job.

    Raises:
        OverlappingRateTimelineError: for a closed record that runs into
            the next one, or two records sharing an effective date.
    """
    by_job: dict[str, list[HourlyRateRecord]] = defaultdict(list)
    for record in rates:
        by_job[record.job_id].append(record)
    for job_id, records in by_job.items():
        for first, second in _consecutive(records):
            if first.effective_date == second.effective_date or (
                first.end_date is not None and first.end_date >= second.effective_date
            ):
                raise OverlappingRateTimelineError(
                    job_id, first.effective_date, second.effective_date
                )
