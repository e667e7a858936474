"""
Configuration Loader (``wage_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into typed ``wage_config.schema`` and
``wage_kernel.domain.dtos`` instances.  Host code calls the public
entrypoints in ``wage_config`` instead of these parsers.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Depends on the kernel's
DTOs; never on engines or services.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; required keys have no silent defaults.
* Every parsed object is a frozen dataclass.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the raw
  document for change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid date format  -> ``ValueError`` from ``date.fromisoformat``.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from wage_config.schema import EngineSettings
from wage_kernel.domain.dtos import (
    BreakPolicyRow,
    HourlyRateRecord,
    Job,
    coerce_policy_table,
)
from wage_kernel.domain.values import to_decimal


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Preconditions:
        - ``path`` must point to an existing, readable YAML file.
    Postconditions:
        - Returns a ``dict`` (possibly empty if the YAML is empty).
    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_date(value: Any) -> date:
    """
    Parse a date from YAML (string or date object).

    Raises:
        ValueError: if ``value`` is not a valid date representation.
    """
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_break_policy(data: dict[str, Any]) -> BreakPolicyRow:
    """Parse one break policy row (``min_hours`` or ``minHours`` style keys)."""
    return BreakPolicyRow.from_mapping(data)


def parse_settings(data: dict[str, Any]) -> EngineSettings:
    """
    Parse ``EngineSettings`` from a dict.  Every key is optional.

    Raises:
        ValueError: if a numeric field is not a number.
    """
    defaults = EngineSettings()
    policies = data.get("default_break_policies")
    return EngineSettings(
        default_break_policies=(
            tuple(parse_break_policy(p) for p in policies)
            if policies is not None
            else defaults.default_break_policies
        ),
        default_weekly_allowance_min_hours=to_decimal(
            data.get(
                "default_weekly_allowance_min_hours",
                defaults.default_weekly_allowance_min_hours,
            )
        ),
        cache_max_entries=int(data.get("cache_max_entries", defaults.cache_max_entries)),
        report_cache_max_entries=int(
            data.get("report_cache_max_entries", defaults.report_cache_max_entries)
        ),
        timezone=str(data.get("timezone", defaults.timezone)),
        checksum=compute_checksum(data),
    )


def parse_job(data: dict[str, Any], settings: EngineSettings | None = None) -> Job:
    """
    Parse a ``Job`` from a dict.

    A job without ``break_time_policies`` gets the settings' default
    table; a job whose ``weekly_allowance_min_hours`` is missing, null or
    0 gets the settings' default threshold.

    Raises:
        KeyError: if ``job_id`` is missing.
    """
    settings = settings or EngineSettings()
    policies = data.get("break_time_policies")
    return Job(
        job_id=str(data["job_id"]),
        name=data.get("name", ""),
        hourly_rate_eligible=bool(data.get("hourly_rate_eligible", True)),
        break_time_policies=(
            coerce_policy_table(policies)
            if policies is not None
            else settings.default_break_policies
        ),
        break_time_paid=bool(data.get("break_time_paid", False)),
        break_time_enabled=bool(data.get("break_time_enabled", True)),
        weekly_allowance_enabled=bool(data.get("weekly_allowance_enabled", False)),
        weekly_allowance_min_hours=(
            data.get("weekly_allowance_min_hours")
            or settings.default_weekly_allowance_min_hours
        ),
        payday=int(data["payday"]) if data.get("payday") is not None else None,
        color=data.get("color"),
    )


def parse_hourly_rate(data: dict[str, Any]) -> HourlyRateRecord:
    """
    Parse an ``HourlyRateRecord`` from a dict.

    Raises:
        KeyError: if ``job_id``, ``hourly_rate`` or ``effective_date`` is missing.
        ValueError: if a date cannot be parsed.
    """
    return HourlyRateRecord(
        job_id=str(data["job_id"]),
        hourly_rate=to_decimal(data["hourly_rate"]),
        effective_date=parse_date(data["effective_date"]),
        end_date=parse_date(data["end_date"]) if data.get("end_date") else None,
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
