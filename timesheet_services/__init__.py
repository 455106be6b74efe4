"""
timesheet_services -- orchestration and rendering for the timesheet audit.

Usage:
    from timesheet_services import TimesheetAuditService, render_report

    with session_scope() as session:
        report = TimesheetAuditService(session, config).run()
    print(render_report(report, "text"))
"""

from timesheet_services.reporting import FORMATS, render_report
from timesheet_services.timesheet_audit_service import (
    TimesheetAuditReport,
    TimesheetAuditService,
)

__all__ = [
    "FORMATS",
    "TimesheetAuditReport",
    "TimesheetAuditService",
    "render_report",
]
