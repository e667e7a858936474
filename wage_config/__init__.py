"""
wage_config -- public entrypoints for wage engine configuration.

Responsibility:
    Provides the ways to obtain configuration at runtime:
    ``get_active_settings()`` for engine-wide defaults and
    ``load_job_catalog()`` for a user's jobs and rate history.  Both read
    YAML, validate it, and return frozen objects.  The engines never read
    configuration themselves; ``WageService`` passes it in.

Architecture position:
    Configuration -- YAML-driven, validated on load.
    This package sits above ``wage_kernel`` and beside ``wage_engines``;
    only ``wage_services`` and host code import it.  The kernel and the
    engines MUST NEVER import from ``wage_config``.

Invariants enforced:
    - Validation before use: a settings file or catalog with any
      validation error is never returned.
    - Deterministic loading: the same YAML always produces the same
      objects and the same checksum.

Failure modes:
    - ``FileNotFoundError`` -- the requested file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``ConfigValidationError`` -- schema or structural validation failed;
      ``errors`` lists every problem found.

Audit relevance:
    Every successful call emits a ``WAGE_CONFIG_TRACE`` log entry with
    the source path, checksum, and object counts, so a computed wage can
    be tied back to the configuration that produced it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from wage_config.loader import (
    compute_checksum,
    load_yaml_file,
    parse_hourly_rate,
    parse_job,
    parse_settings,
)
from wage_config.schema import EngineSettings, JobCatalog
from wage_config.validator import (
    ValidationResult,
    validate_job,
    validate_rate_timeline,
    validate_settings,
)
from wage_kernel.exceptions import ConfigValidationError

_logger = logging.getLogger("wage_kernel.config")

# Packaged defaults
DEFAULT_SETTINGS_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_settings(config_path: Path | str | None = None) -> EngineSettings:
    """Load and validate engine settings.

    Preconditions:
        - ``config_path`` (when given) points to a YAML mapping whose keys
          are a subset of the ``EngineSettings`` fields.

    Postconditions:
        - Returns a frozen ``EngineSettings`` whose checksum matches the
          source document.
        - A ``WAGE_CONFIG_TRACE`` log entry has been emitted.

    Args:
        config_path: Settings file to load.  Defaults to the packaged
            ``wage_config/defaults.yaml``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If any setting is invalid.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_SETTINGS_PATH
    data = load_yaml_file(path)

    validation = validate_settings(data)
    _raise_if_invalid(path, validation)

    settings = parse_settings(data)
    _logger.info(
        "WAGE_CONFIG_TRACE",
        extra={
            "trace_type": "WAGE_CONFIG_TRACE",
            "source": str(path),
            "checksum": settings.checksum,
            "break_policy_rows": len(settings.default_break_policies),
            "cache_max_entries": settings.cache_max_entries,
        },
    )
    return settings


def load_job_catalog(
    path: Path | str,
    settings: EngineSettings | None = None,
) -> JobCatalog:
    """Load and validate a job catalog (``jobs`` and ``hourly_rates``).

    Jobs without their own break table or allowance threshold take the
    values from ``settings`` (the packaged defaults when omitted).

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If a job or rate record is invalid, job ids
            repeat, or a job's rate history overlaps.
    """
    path = Path(path)
    settings = settings or get_active_settings()
    data = load_yaml_file(path)
    validation = ValidationResult()

    raw_jobs = data.get("jobs") or []
    seen: set[str] = set()
    for raw in raw_jobs:
        validation.merge(validate_job(raw))
        job_id = str(raw.get("job_id"))
        if job_id in seen:
            validation.add_error(f"Duplicate job_id {job_id!r}")
        seen.add(job_id)
    _raise_if_invalid(path, validation)

    jobs = tuple(parse_job(raw, settings) for raw in raw_jobs)

    rates = []
    for index, raw in enumerate(data.get("hourly_rates") or [], start=1):
        try:
            rates.append(parse_hourly_rate(raw))
        except KeyError as e:
            validation.add_error(f"Hourly rate {index}: missing key {e.args[0]!r}")
        except ValueError as e:
            validation.add_error(f"Hourly rate {index}: {e}")
    validation.merge(validate_rate_timeline(rates))
    for record in rates:
        if record.job_id not in seen:
            validation.add_warning(f"Hourly rate for unknown job {record.job_id!r}")
    _raise_if_invalid(path, validation)

    for warning in validation.warnings:
        _logger.warning("job_catalog_warning", extra={"source": str(path), "detail": warning})

    catalog = JobCatalog(
        jobs=jobs,
        hourly_rates=tuple(rates),
        checksum=compute_checksum(data),
    )
    _logger.info(
        "WAGE_CONFIG_TRACE",
        extra={
            "trace_type": "WAGE_CONFIG_TRACE",
            "source": str(path),
            "checksum": catalog.checksum,
            "job_count": len(catalog.jobs),
            "rate_count": len(catalog.hourly_rates),
        },
    )
    return catalog


def _raise_if_invalid(path: Path, validation: ValidationResult) -> None:
    if not validation.is_valid:
        raise ConfigValidationError(str(path), validation.errors)


__all__ = [
    "DEFAULT_SETTINGS_PATH",
    "EngineSettings",
    "JobCatalog",
    "get_active_settings",
    "load_job_catalog",
]
