"""
Typed Exception Hierarchy for the Timesheet Audit.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from TimesheetAuditError:

    TimesheetAuditError (base)
    |
    +-- PeriodError
    |   +-- PeriodNotFoundError
    |   +-- PeriodOverlapError
    |
    +-- ConfigurationError
    |   +-- InvalidConfigurationError
    |
    +-- ScanError
        +-- PersonScanError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Period          | PERIOD_NOT_FOUND            | No reporting period covers the date
                | PERIOD_OVERLAP              | New period conflicts with an existing one
----------------|-----------------------------|-----------------------------------------
Configuration   | INVALID_CONFIGURATION       | Bad value in YAML, env or CLI flags
----------------|-----------------------------|-----------------------------------------
Scan            | PERSON_SCAN_FAILED          | One person's scan raised; others continue

===============================================================================
HANDLING PATTERNS
===============================================================================

1. ABORT THE RUN (period resolution):

    try:
        period = period_service.resolve_period(today, weeks_ago)
    except PeriodNotFoundError as e:
        log.error("period_not_found", extra={"as_of": e.as_of})
        return 1

2. ISOLATE ONE PERSON (scan):

    PersonScanError is never raised out of the audit service.  It is
    recorded in TimesheetAuditReport.failed_persons so the remaining
    persons are still reported.

Every class carries a ``code`` class attribute (machine-readable) and keeps
its context as attributes so the structured log formatter can flatten them.
"""


class TimesheetAuditError(Exception):
    """Base exception for all timesheet audit errors."""

    code: str = "TIMESHEET_AUDIT_ERROR"


# Period-related exceptions


class PeriodError(TimesheetAuditError):
    """Base exception for reporting period errors."""

    code: str = "PERIOD_ERROR"


class PeriodNotFoundError(PeriodError):
    """No reporting period covers the requested date."""

    code: str = "PERIOD_NOT_FOUND"

    def __init__(self, as_of: str):
        self.as_of = as_of
        super().__init__(f"No reporting period covers the requested date: {as_of}")


class PeriodOverlapError(PeriodError):
    """New period date range overlaps with an existing period."""

    code: str = "PERIOD_OVERLAP"

    def __init__(
        self,
        new_period_code: str,
        existing_period_code: str,
        overlap_start: str,
        overlap_end: str,
    ):
        self.new_period_code = new_period_code
        self.existing_period_code = existing_period_code
        self.overlap_start = overlap_start
        self.overlap_end = overlap_end
        super().__init__(
            f"Period {new_period_code} overlaps with {existing_period_code} "
            f"({overlap_start} to {overlap_end})"
        )


# Configuration exceptions


class ConfigurationError(TimesheetAuditError):
    """Base exception for configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class InvalidConfigurationError(ConfigurationError):
    """A configuration value is missing or malformed."""

    code: str = "INVALID_CONFIGURATION"

    def __init__(self, key: str, value: object, reason: str):
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid configuration {key}={value!r}: {reason}")


# Scan exceptions


class ScanError(TimesheetAuditError):
    """Base exception for scanner errors."""

    code: str = "SCAN_ERROR"


class PersonScanError(ScanError):
    """Scanning a single person's entries failed."""

    code: str = "PERSON_SCAN_FAILED"

    def __init__(self, person_id: str, entry_count: int, cause: str):
        self.person_id = person_id
        self.entry_count = entry_count
        self.cause = cause
        super().__init__(
            f"Scan failed for person {person_id} "
            f"({entry_count} entries): {cause}"
        )
