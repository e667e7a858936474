"""
Wage Kernel

Shared foundation for the wage computation engine:
- Immutable domain DTOs (jobs, break policies, hourly rates, work sessions)
- Decimal value helpers with explicit rounding
- Injectable clock
- Typed exception hierarchy
- Structured JSON logging
"""

__version__ = "0.1.0"
