"""
Domain DTOs -- frozen value objects crossing the kernel boundary.

Responsibility:
    Selectors and services return these instead of ORM instances, so the
    scanner engine and the reporting layer never touch a Session.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.

Invariants enforced:
    - All DTOs are ``frozen=True``.
    - Hour fields use ``Decimal`` -- NEVER ``float``.
    - ``TimeEntry.start_utc`` / ``end_utc`` are timezone-aware.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal


@dataclass(frozen=True)
class TimeEntry:
    """A single time entry as recorded in the source system.

    ``record_number`` is the source record id; it breaks ties between
    entries of one person that start at the same instant.
    """

    record_number: int
    person_id: str
    start_utc: datetime
    end_utc: datetime
    actual_hours: Decimal | None = None
    work_type: str | None = None
    billable_code: str | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        if self.start_utc.tzinfo is None or self.end_utc.tzinfo is None:
            raise ValueError(
                f"TimeEntry {self.record_number} timestamps must be "
                f"timezone-aware"
            )


@dataclass(frozen=True)
class ReportingPeriod:
    """
    Boundaries of a reporting period (inclusive on both ends).

    Contract:
        ``period`` is the period number from the calendar table, shifted
        back by the requested number of weeks when the period was resolved
        relative to the current one.
    """

    start: date
    end: date
    period: int
    period_code: str

    def contains(self, check_date: date) -> bool:
        return self.start <= check_date <= self.end
