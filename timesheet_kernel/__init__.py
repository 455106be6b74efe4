"""
Timesheet Kernel

Database access and domain primitives for the timesheet audit:
- Engine / session management
- Read-only selectors over the time-tracking tables
- Reporting period resolution
- Typed exceptions and structured logging
"""

__version__ = "0.1.0"
