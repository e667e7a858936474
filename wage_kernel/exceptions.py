"""
Typed Exception Hierarchy for the Wage Kernel.

===============================================================================
WHERE EXCEPTIONS ARE RAISED
===============================================================================

The calculation engines never raise for business conditions. Malformed
times, missing hourly rates and unmatched policy rows all degrade to a
well-defined zero or ineligible result. Exceptions exist for the host
boundary only:

  - wage_config validators reject a break policy table before it is stored
  - wage_config loaders reject a configuration or job catalog file
  - WageService.prepare_session_for_save blocks a session the engine
    could not price

Every class carries a machine-readable ``code`` class attribute and keeps
its context as attributes, so callers catch by type and read structured
data instead of parsing messages.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    WageKernelError (base)
    |
    +-- PolicyError
    |   +-- InvalidBreakPolicyError
    |
    +-- RateError
    |   +-- MissingHourlyRateError
    |   +-- OverlappingRateTimelineError
    |
    +-- SessionError
    |   +-- InvalidTimeInputError
    |   +-- UnknownJobError
    |
    +-- ConfigError
        +-- ConfigValidationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                       | When Raised
-----------|----------------------------|--------------------------------------
Policy     | INVALID_BREAK_POLICY       | Break policy table fails validation
-----------|----------------------------|--------------------------------------
Rate       | MISSING_HOURLY_RATE        | No active hourly rate for the date
           | OVERLAPPING_RATE_TIMELINE  | Two rate records cover the same date
-----------|----------------------------|--------------------------------------
Session    | INVALID_TIME_INPUT         | Start/end is not a valid "HH:mm"
           | UNKNOWN_JOB                | Session references an unknown job
-----------|----------------------------|--------------------------------------
Config     | CONFIG_VALIDATION_FAILED   | Settings or job catalog rejected

Example:

    try:
        session = service.prepare_session_for_save(session)
    except MissingHourlyRateError as e:
        show_error(e.code, job=e.job_id, date=e.work_date)
"""

from __future__ import annotations

from datetime import date


class WageKernelError(Exception):
    """
    Base exception for all wage kernel errors.

    All subclasses must have a ``code`` class attribute for
    machine-readable error identification.
    """

    code: str = "WAGE_KERNEL_ERROR"


# Policy-related exceptions


class PolicyError(WageKernelError):
    """Base exception for break-time and allowance policy errors."""

    code: str = "POLICY_ERROR"


class InvalidBreakPolicyError(PolicyError):
    """A break policy table failed structural validation."""

    code: str = "INVALID_BREAK_POLICY"

    def __init__(self, errors: list[str], job_id: str | None = None):
        self.errors = list(errors)
        self.job_id = job_id
        target = f" for job {job_id}" if job_id else ""
        super().__init__(
            f"Invalid break policy table{target}: " + "; ".join(self.errors)
        )


# Rate-related exceptions


class RateError(WageKernelError):
    """Base exception for hourly rate errors."""

    code: str = "RATE_ERROR"


class MissingHourlyRateError(RateError):
    """No usable hourly rate is active for the job on the given date."""

    code: str = "MISSING_HOURLY_RATE"

    def __init__(self, job_id: str, work_date: date):
        self.job_id = job_id
        self.work_date = work_date
        super().__init__(
            f"No hourly rate for job {job_id} on {work_date.isoformat()}"
        )


class OverlappingRateTimelineError(RateError):
    """Two hourly rate records of one job cover the same date."""

    code: str = "OVERLAPPING_RATE_TIMELINE"

    def __init__(self, job_id: str, first: date, second: date):
        self.job_id = job_id
        self.first_effective_date = first
        self.second_effective_date = second
        super().__init__(
            f"Hourly rate records for job {job_id} effective "
            f"{first.isoformat()} and {second.isoformat()} overlap"
        )


# Session-related exceptions


class SessionError(WageKernelError):
    """Base exception for work session errors."""

    code: str = "SESSION_ERROR"


class InvalidTimeInputError(SessionError):
    """A session's start or end time is not a valid "HH:mm" string."""

    code: str = "INVALID_TIME_INPUT"

    def __init__(self, start_time: str | None, end_time: str | None):
        self.start_time = start_time
        self.end_time = end_time
        super().__init__(
            f"Invalid session times: start={start_time!r}, end={end_time!r}"
        )


class UnknownJobError(SessionError):
    """A session references a job the service does not know."""

    code: str = "UNKNOWN_JOB"

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Unknown job: {job_id}")


# Configuration exceptions


class ConfigError(WageKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIG_ERROR"


class ConfigValidationError(ConfigError):
    """Settings or job catalog failed validation."""

    code: str = "CONFIG_VALIDATION_FAILED"

    def __init__(self, source: str, errors: list[str]):
        self.source = source
        self.errors = list(errors)
        super().__init__(
            f"Configuration validation failed for {source}:\n"
            + "\n".join(f"  - {e}" for e in self.errors)
        )
