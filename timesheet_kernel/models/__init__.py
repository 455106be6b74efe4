"""ORM models for the time-tracking source tables."""

from timesheet_kernel.models.time_entry import TimeEntryRecord
from timesheet_kernel.models.time_period import TimePeriod

__all__ = [
    "TimeEntryRecord",
    "TimePeriod",
]
