"""Services for the timesheet kernel."""

from timesheet_kernel.services.period_service import PeriodService

__all__ = [
    "PeriodService",
]
