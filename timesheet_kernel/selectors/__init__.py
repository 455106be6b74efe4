"""Selectors for the timesheet kernel (read side)."""

from timesheet_kernel.selectors.time_entry_selector import TimeEntrySelector

__all__ = [
    "TimeEntrySelector",
]
