"""
Module: timesheet_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import timesheet_kernel.domain and timesheet_kernel.logging_config.
    MUST NOT import timesheet_services or timesheet_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
    - Decimal-only arithmetic for hours.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from timesheet_engines import scan_person_entries, ScanRules, ErrorKind
"""

from timesheet_engines.scanner_types import (
    AnnotatedEntry,
    ErrorKind,
    ScannedEntry,
    ScanRules,
    ScanState,
)
from timesheet_engines.timesheet_scanner import (
    DEFAULT_DISPLAY_FORMAT,
    compute_elapsed_hours,
    scan_entries,
    scan_person_entries,
    scan_step,
    sort_entries,
)
from timesheet_engines.tracer import traced_engine

__all__ = [
    "AnnotatedEntry",
    "DEFAULT_DISPLAY_FORMAT",
    "ErrorKind",
    "ScanRules",
    "ScanState",
    "ScannedEntry",
    "compute_elapsed_hours",
    "scan_entries",
    "scan_person_entries",
    "scan_step",
    "sort_entries",
    "traced_engine",
]
