"""
Timesheet Scanner Types (``timesheet_engines.scanner_types``).

Responsibility
--------------
Frozen value objects for the timesheet error scanner: the error taxonomy,
the rule labels, the per-entry computed view, the running scan state, and
the annotated output record.

Architecture position
---------------------
**Engines layer** -- pure data definitions with ZERO I/O.  Consumed by
``timesheet_engines.timesheet_scanner`` and the reporting layer.

Invariants enforced
-------------------
* All types are ``frozen=True`` (immutable after construction).
* All hour fields use ``Decimal`` -- NEVER ``float``.
* ``ScanState`` is created fresh for each person; nothing survives between
  scans.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from timesheet_kernel.domain.dtos import TimeEntry


# Sentinel for the high-water mark before any entry has been seen.
NEVER = datetime(1900, 1, 1, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ErrorKind(str, Enum):
    """Error taxonomy attached to annotated entries."""
    NONE = "None"
    DEDUCTED = "Deducted"
    POSSIBLE_OVERLAP = "Possible Overlap"
    BLANK = "Blank"
    NO_CHARGE = "No Charge"
    ONSITE = "Onsite"


# ---------------------------------------------------------------------------
# Rule configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScanRules:
    """Labels the scanner compares against, and the skipped-entry policy.

    ``skipped_entries_advance_previous`` keeps the source behaviour of
    carrying a skipped (clock in/out or zero-hour) entry forward as the
    previous entry.  Turning it off makes the comparison rules look past
    skipped rows to the last evaluated entry.
    """
    clock_in_out_work_type: str = "Clock In/Out"
    travel_to_work_type: str = "Travel To"
    travel_from_work_type: str = "Travel From"
    onsite_work_type: str = "Onsite"
    no_charge_code: str = "NC"
    skipped_entries_advance_previous: bool = True


# ---------------------------------------------------------------------------
# Scan values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScannedEntry:
    """An input entry with its local times and computed hours."""
    entry: TimeEntry
    local_start: datetime
    local_end: datetime
    computed_hours: Decimal
    deduction: Decimal


@dataclass(frozen=True)
class ScanState:
    """Running state threaded through one person's scan."""
    previous: ScannedEntry | None = None
    high_water_end: datetime = NEVER
    in_overlap: bool = False


@dataclass(frozen=True)
class AnnotatedEntry:
    """A flagged entry, one record per matched rule."""
    entry: TimeEntry
    local_start: datetime
    local_end: datetime
    start_display: str
    end_display: str
    computed_hours: Decimal
    deduction: Decimal
    previous_deduction: Decimal | None
    error_kind: ErrorKind

    @property
    def person_id(self) -> str:
        return self.entry.person_id

    @property
    def record_number(self) -> int:
        return self.entry.record_number

    @property
    def actual_hours(self) -> Decimal | None:
        return self.entry.actual_hours

    @property
    def work_type(self) -> str | None:
        return self.entry.work_type

    @property
    def billable_code(self) -> str | None:
        return self.entry.billable_code

    @property
    def notes(self) -> str | None:
        return self.entry.notes
