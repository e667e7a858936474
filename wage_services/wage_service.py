"""
wage_services.wage_service -- Stateful facade over the wage engines.

Responsibility:
    Hold a user's jobs, hourly rate history, engine settings, and the two
    caches, and expose the operations a host application calls: price a
    session, validate it before saving, evaluate weekly allowances, and
    build (memoized) monthly reports.  Owns cache invalidation.

Architecture position:
    Services -- stateful orchestration over engines + kernel + config.
    The only layer that reads a clock; engines receive explicit dates.

Invariants enforced:
    - Every job or rate edit goes through ``update_jobs`` /
      ``update_hourly_rates``, which validate and then call
      ``on_policies_changed()``, so no cached result outlives the inputs
      it was computed from.
    - A session is only returned from ``prepare_session_for_save`` with a
      ``daily_wage`` computed from valid times and a positive rate (hourly
      sessions) or from its fixed wage (daily sessions).
    - Monthly reports are memoized per ``(month, filter_id)`` and dropped
      whenever policies or records change.

Failure modes:
    - UnknownJobError: a session or query names a job the service lacks.
    - InvalidTimeInputError: a session to be saved has malformed times.
    - MissingHourlyRateError: an hourly session to be saved has no
      positive rate on its date.
    - InvalidBreakPolicyError / OverlappingRateTimelineError: rejected
      job or rate edits; the previous state is kept.

Audit relevance:
    Blocked saves and cache invalidations are logged with the job id and
    date, so a wage that was never stored can be explained.

Usage:
    from wage_config import get_active_settings, load_job_catalog
    from wage_services import WageService

    settings = get_active_settings()
    catalog = load_job_catalog("jobs.yaml", settings)
    service = WageService(catalog.jobs, catalog.hourly_rates, settings)

    session = service.prepare_session_for_save(session)
    report = service.monthly_report(records, date(2024, 3, 1))
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

from wage_config.schema import EngineSettings
from wage_config.validator import (
    require_non_overlapping_rates,
    require_valid_break_policies,
)
from wage_engines.break_time import warmup_break_time_cache
from wage_engines.cache import DerivationCache, ReportCache
from wage_engines.monthly import MonthlyReport, summarize_month
from wage_engines.rates import resolve_hourly_rate
from wage_engines.session_wage import (
    BreakWageDifference,
    WorkAndBreakTime,
    break_time_wage_difference,
    calculate_work_and_break_time,
    compute_wage,
    with_computed_wage,
)
from wage_engines.weekly_allowance import (
    WeeklyAllowanceResult,
    WeekProgress,
    calculate_weekly_allowance,
    get_current_week_progress,
    get_weekly_records,
)
from wage_kernel.domain.clock import Clock, SystemClock
from wage_kernel.domain.dtos import HourlyRateRecord, Job, WageType, WorkSession
from wage_kernel.domain.periods import as_date, month_key
from wage_kernel.domain.values import ZERO
from wage_kernel.exceptions import (
    InvalidTimeInputError,
    MissingHourlyRateError,
    UnknownJobError,
)
from wage_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.wage")

ALL_JOBS = "all"


def _validated_jobs(jobs: Iterable[Job]) -> dict[str, Job]:
    """Index jobs by id, rejecting any job whose own break table is invalid."""
    jobs = tuple(jobs)
    for job in jobs:
        if job.break_time_policies is not None:
            require_valid_break_policies(job.break_time_policies, job_id=job.job_id)
    return {job.job_id: job for job in jobs}


class WageService:
    """
    Wage calculations for one user's jobs and rates.

    Contract:
        Receives jobs, rates, settings and a clock via constructor
        injection.  Holds no persistence; the host stores sessions and
        passes them back in.  Jobs and rates are validated on the way in,
        exactly as ``update_jobs``/``update_hourly_rates`` validate them.
    Guarantees:
        - Results equal what the engines return for the same inputs; the
          caches only change how often they are computed.
    Non-goals:
        - Does not store sessions or rates.
        - Does not decide attribution of boundary weeks; see
          ``wage_engines.monthly``.
    """

    def __init__(
        self,
        jobs: Iterable[Job],
        hourly_rates: Iterable[HourlyRateRecord] = (),
        settings: EngineSettings | None = None,
        clock: Clock | None = None,
    ):
        self._settings = settings or EngineSettings()
        self._clock = clock or SystemClock(ZoneInfo(self._settings.timezone))
        self._cache = DerivationCache(self._settings.cache_max_entries)
        self._report_cache = ReportCache(self._settings.report_cache_max_entries)
        self._jobs: dict[str, Job] = _validated_jobs(jobs)
        self._rates: tuple[HourlyRateRecord, ...] = tuple(hourly_rates)
        require_non_overlapping_rates(self._rates)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def cache(self) -> DerivationCache:
        return self._cache

    @property
    def report_cache(self) -> ReportCache:
        return self._report_cache

    @property
    def jobs(self) -> tuple[Job, ...]:
        return tuple(self._jobs.values())

    def job(self, job_id: str) -> Job:
        """
        Raises:
            UnknownJobError: if ``job_id`` is not one of the service's jobs.
        """
        try:
            return self._jobs[job_id]
        except KeyError:
            raise UnknownJobError(job_id) from None

    def hourly_rate_for(self, job_id: str, on_date: date | datetime | str) -> Decimal | None:
        return resolve_hourly_rate(self._rates, job_id, as_date(on_date))

    # ------------------------------------------------------------------
    # Single session
    # ------------------------------------------------------------------

    def work_and_break_time(self, session: WorkSession) -> WorkAndBreakTime:
        return calculate_work_and_break_time(
            session.start_time, session.end_time, self.job(session.job_id), cache=self._cache
        )

    def _rate_for_session(self, session: WorkSession) -> Decimal | None:
        if session.wage_type is not WageType.HOURLY:
            return None
        return self.hourly_rate_for(session.job_id, session.work_date)

    def session_wage(self, session: WorkSession) -> Decimal:
        """Wage of ``session`` at the rate active on its date (zero if none)."""
        job = self.job(session.job_id)
        return compute_wage(session, self._rate_for_session(session), job, cache=self._cache)

    def break_wage_difference(self, session: WorkSession) -> BreakWageDifference:
        job = self.job(session.job_id)
        return break_time_wage_difference(
            session.start_time,
            session.end_time,
            job,
            self._rate_for_session(session),
            cache=self._cache,
        )

    def prepare_session_for_save(self, session: WorkSession) -> WorkSession:
        """Validate a session and return it with ``daily_wage`` filled in.

        A record that only marks an unexcused absence (no times) is saved
        with a zero wage.

        Raises:
            UnknownJobError: The session's job is unknown.
            InvalidTimeInputError: The start or end time is malformed.
            MissingHourlyRateError: An hourly session has no positive rate.
        """
        job = self.job(session.job_id)

        if session.wage_type is WageType.DAILY:
            return with_computed_wage(session, None, job, cache=self._cache)

        if session.is_unexcused_absence and not session.has_times:
            return replace(session, daily_wage=ZERO)

        if not self.work_and_break_time(session).is_valid:
            logger.warning(
                "session_save_blocked",
                extra={
                    "reason": "invalid_time",
                    "job_id": session.job_id,
                    "work_date": session.work_date,
                },
            )
            raise InvalidTimeInputError(session.start_time, session.end_time)

        rate = self.hourly_rate_for(session.job_id, session.work_date)
        if rate is None or rate <= ZERO:
            logger.warning(
                "session_save_blocked",
                extra={
                    "reason": "missing_rate",
                    "job_id": session.job_id,
                    "work_date": session.work_date,
                },
            )
            raise MissingHourlyRateError(session.job_id, session.work_date)

        return with_computed_wage(session, rate, job, cache=self._cache)

    # ------------------------------------------------------------------
    # Weekly allowance
    # ------------------------------------------------------------------

    def weekly_allowance(
        self,
        records: Sequence[WorkSession],
        job_id: str,
        reference_date: date | datetime | str,
    ) -> WeeklyAllowanceResult:
        """Allowance of ``job_id`` for the ISO week containing ``reference_date``."""
        job = self.job(job_id)
        with LogContext.bind(job_id=job_id):
            return calculate_weekly_allowance(
                get_weekly_records(records, reference_date), job, cache=self._cache
            )

    def current_week_progress(
        self,
        records: Sequence[WorkSession],
        job_id: str,
        reference_date: date | datetime | str | None = None,
    ) -> WeekProgress:
        """Progress toward this week's threshold; the week defaults to today."""
        job = self.job(job_id)
        ref = as_date(reference_date) if reference_date is not None else self._clock.today()
        return get_current_week_progress(records, job, ref, cache=self._cache)

    # ------------------------------------------------------------------
    # Monthly report
    # ------------------------------------------------------------------

    def monthly_report(
        self,
        records: Sequence[WorkSession],
        month_reference: date | datetime | str,
        filter_id: str = ALL_JOBS,
    ) -> MonthlyReport:
        """Monthly report for all jobs or for the single job ``filter_id``.

        ``records`` must cover the full ISO weeks around the month.
        Reports are memoized per ``(month, filter_id)``; call
        ``on_records_changed()`` after sessions are added or edited.
        """
        month = month_key(as_date(month_reference))
        cached = self._report_cache.get_report(month, filter_id)
        if cached is not None:
            logger.debug("monthly_report_cache_hit", extra={"month": month, "filter_id": filter_id})
            return cached

        if filter_id == ALL_JOBS:
            jobs: Sequence[Job] = self.jobs
            selected = records
        else:
            jobs = (self.job(filter_id),)
            selected = [r for r in records if r.job_id == filter_id]

        with LogContext.bind(month=month):
            report = summarize_month(selected, jobs, self._rates, month_reference, cache=self._cache)
        self._report_cache.put_report(month, filter_id, report)
        return report

    # ------------------------------------------------------------------
    # Edits and invalidation
    # ------------------------------------------------------------------

    def update_jobs(self, jobs: Iterable[Job]) -> None:
        """Replace the job set.

        Raises:
            InvalidBreakPolicyError: A job's own break table is invalid.
                The previous jobs are kept.
        """
        self._jobs = _validated_jobs(jobs)
        self.on_policies_changed()

    def update_hourly_rates(self, rates: Iterable[HourlyRateRecord]) -> None:
        """Replace the rate history.

        Raises:
            OverlappingRateTimelineError: Two records of one job overlap.
                The previous rates are kept.
        """
        rates = tuple(rates)
        require_non_overlapping_rates(rates)
        self._rates = rates
        self.on_policies_changed()

    def on_policies_changed(self) -> None:
        """Drop every cached derivation and report."""
        self._cache.invalidate()
        self._report_cache.invalidate()
        logger.info(
            "wage_caches_invalidated",
            extra={"jobs": len(self._jobs), "rates": len(self._rates)},
        )

    def on_records_changed(self) -> None:
        """Drop memoized reports after sessions are added, edited or removed."""
        self._report_cache.invalidate()

    def warmup(self) -> int:
        """Pre-compute break time for common durations of every job."""
        return warmup_break_time_cache(self._cache, self._jobs.values())
