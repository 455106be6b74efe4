"""
Module: timesheet_kernel.models.time_entry
Responsibility: ORM mapping of the time-tracking system's entry table.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - record_number is unique; it is the source system's record id and the
      tie-breaker when two entries of one person start at the same instant.
    - start_utc / end_utc are stored in UTC.

Audit relevance:
    The audit only ever reads this table.  Nothing in the package inserts,
    updates or deletes entries outside of test fixtures.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from timesheet_kernel.db.base import Base


class TimeEntryRecord(Base):
    """A time entry as stored by the time-tracking system."""

    __tablename__ = "time_entries"

    __table_args__ = (
        UniqueConstraint("record_number", name="uq_time_entry_record_number"),
        Index("idx_time_entry_person_start", "person_id", "start_utc"),
        Index("idx_time_entry_start", "start_utc"),
    )

    record_number: Mapped[int] = mapped_column(nullable=False)

    person_id: Mapped[str] = mapped_column(String(50), nullable=False)

    start_utc: Mapped[datetime] = mapped_column(nullable=False)

    end_utc: Mapped[datetime] = mapped_column(nullable=False)

    # Hours as recorded by the employee
    actual_hours: Mapped[Decimal | None] = mapped_column(nullable=True)

    work_type: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Charge classification, e.g. "NC" for no-charge
    billable_code: Mapped[str | None] = mapped_column(String(10), nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<TimeEntryRecord {self.record_number} {self.person_id} "
            f"{self.start_utc}..{self.end_utc}>"
        )
