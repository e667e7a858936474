"""
wage_services -- Package init and public API.

Responsibility:
    Stateful orchestration over the pure wage engines.  This is the only
    layer that holds caches across calls, reads wall-clock time, or
    combines configuration with engine results.

Architecture position:
    Services -- stateful orchestration over engines + kernel + config.

    Dependency direction (enforced by tests/architecture/test_engine_purity.py):
        wage_services/ -> wage_engines/  (allowed)
        wage_services/ -> wage_config/   (allowed)
        wage_engines/  -> wage_services/ (FORBIDDEN)
        wage_kernel/   -> wage_services/ (FORBIDDEN)
"""

from wage_kernel.logging_config import get_logger

logger = get_logger("services")

from wage_services.wage_service import ALL_JOBS, WageService

__all__ = [
    "ALL_JOBS",
    "WageService",
]
