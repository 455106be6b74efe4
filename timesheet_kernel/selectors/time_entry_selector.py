"""
Module: timesheet_kernel.selectors.time_entry_selector
Responsibility: Read-only queries over the time_entries table for a reporting
    period.  This is the audit's Time Entry Source.
Architecture position: Kernel > Selectors.  Imports models and domain DTOs.

Invariants enforced:
    - Entries are filtered on start_utc within [start, end], the end date
      inclusive (start_utc < end + 1 day).
    - Ordering is (person_id, start_utc, record_number); the record number
      makes ties deterministic.
    - Returned timestamps are timezone-aware UTC, even on backends that hand
      back naive datetimes (SQLite).
"""

from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import select

from timesheet_kernel.domain.dtos import TimeEntry
from timesheet_kernel.logging_config import get_logger
from timesheet_kernel.models.time_entry import TimeEntryRecord
from timesheet_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.time_entry")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _day_start_utc(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


class TimeEntrySelector(BaseSelector[TimeEntryRecord]):
    """
    Selector for time entries.

    Contract:
        Returns ``TimeEntry`` DTOs; never exposes ORM rows to callers.
    """

    def _to_dto(self, record: TimeEntryRecord) -> TimeEntry:
        return TimeEntry(
            record_number=record.record_number,
            person_id=record.person_id,
            start_utc=_as_utc(record.start_utc),
            end_utc=_as_utc(record.end_utc),
            actual_hours=record.actual_hours,
            work_type=record.work_type,
            billable_code=record.billable_code,
            notes=record.notes,
        )

    def fetch_entries(
        self,
        start: date,
        end: date,
        person_id: str | None = None,
    ) -> tuple[TimeEntry, ...]:
        """
        Fetch all entries whose start falls within the date range.

        Args:
            start: First day of the range (inclusive).
            end: Last day of the range (inclusive).
            person_id: If given, only this person's entries are returned.

        Returns:
            Entries ordered by person, start time, then record number.
        """
        lower = _day_start_utc(start)
        upper = _day_start_utc(end + timedelta(days=1))

        stmt = select(TimeEntryRecord).where(
            TimeEntryRecord.start_utc >= lower,
            TimeEntryRecord.start_utc < upper,
        )
        if person_id is not None:
            stmt = stmt.where(TimeEntryRecord.person_id == person_id)
        stmt = stmt.order_by(
            TimeEntryRecord.person_id,
            TimeEntryRecord.start_utc,
            TimeEntryRecord.record_number,
        )

        entries = tuple(
            self._to_dto(record) for record in self.session.scalars(stmt)
        )

        logger.info(
            "entries_fetched",
            extra={
                "start": str(start),
                "end": str(end),
                "person_filter": person_id,
                "entry_count": len(entries),
            },
        )
        return entries
