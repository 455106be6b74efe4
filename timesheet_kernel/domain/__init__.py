"""
Pure domain layer.

Frozen DTOs and the injectable clock.  No dependencies on the ORM,
the database, or I/O.
"""

from timesheet_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from timesheet_kernel.domain.dtos import ReportingPeriod, TimeEntry

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "ReportingPeriod",
    "TimeEntry",
]
