"""
PeriodService -- reporting period calendar and period resolution.

Responsibility:
    Resolves the reporting period an audit runs against: finds the calendar
    row containing "today" and steps back a number of weeks.  Also seeds the
    calendar (local databases, tests) with overlap validation.

Architecture position:
    Kernel > Services -- imperative shell.
    Called by TimesheetAuditService before any entries are fetched.

Invariants enforced:
    - Returns frozen ``ReportingPeriod`` DTOs, never ORM entities.
    - Flush-only: never commits or rolls back the session.
    - Period ranges in the calendar do not overlap (checked on create).

Failure modes:
    - PeriodNotFoundError: No period covers the requested date.  The audit
      run must abort rather than scan an undefined range.
    - PeriodOverlapError: New period date range overlaps an existing one.
    - ValueError: negative weeks_ago or inverted date range.
"""

from datetime import date, timedelta, tzinfo

from sqlalchemy import select
from sqlalchemy.orm import Session

from timesheet_kernel.domain.clock import Clock, SystemClock
from timesheet_kernel.domain.dtos import ReportingPeriod
from timesheet_kernel.exceptions import PeriodNotFoundError, PeriodOverlapError
from timesheet_kernel.logging_config import get_logger
from timesheet_kernel.models.time_period import TimePeriod
from timesheet_kernel.services.base import BaseService

logger = get_logger("services.period")

DAYS_PER_PERIOD = 7


class PeriodService(BaseService[TimePeriod]):
    """
    Service for the reporting period calendar.

    Contract:
        Accepts dates and week offsets and returns frozen ``ReportingPeriod``
        DTOs.  ``resolve_period`` raises a typed exception when the
        calendar has no row for the requested date.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
        - Does NOT validate that stepped-back periods exist in the calendar;
          the shifted range is computed arithmetically.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def _to_dto(self, period: TimePeriod) -> ReportingPeriod:
        return ReportingPeriod(
            start=period.start_date,
            end=period.end_date,
            period=period.period_number,
            period_code=period.period_code,
        )

    def create_period(
        self,
        period_code: str,
        period_number: int,
        start_date: date,
        end_date: date,
    ) -> ReportingPeriod:
        """
        Add a period to the calendar.

        Raises:
            ValueError: If start_date > end_date.
            PeriodOverlapError: If date range overlaps with an existing period.
        """
        if start_date > end_date:
            raise ValueError(
                f"start_date ({start_date}) cannot be after end_date ({end_date})"
            )

        self._validate_no_overlap(period_code, start_date, end_date)

        period = TimePeriod(
            period_code=period_code,
            period_number=period_number,
            start_date=start_date,
            end_date=end_date,
        )
        self.session.add(period)
        self.session.flush()

        logger.info(
            "period_created",
            extra={
                "period_code": period_code,
                "start_date": str(start_date),
                "end_date": str(end_date),
            },
        )
        return self._to_dto(period)

    def _validate_no_overlap(
        self,
        new_period_code: str,
        start_date: date,
        end_date: date,
    ) -> None:
        """
        Two ranges overlap if: start1 <= end2 AND start2 <= end1

        Raises:
            PeriodOverlapError: If overlap is detected.
        """
        existing = self.session.scalars(
            select(TimePeriod).where(
                TimePeriod.start_date <= end_date,
                TimePeriod.end_date >= start_date,
            )
        ).first()

        if existing is not None:
            raise PeriodOverlapError(
                new_period_code=new_period_code,
                existing_period_code=existing.period_code,
                overlap_start=str(max(start_date, existing.start_date)),
                overlap_end=str(min(end_date, existing.end_date)),
            )

    def get_period_for_date(self, check_date: date) -> ReportingPeriod | None:
        """
        Get the period that contains a specific date.

        Returns:
            ReportingPeriod DTO if found, None otherwise.
        """
        period = self.session.scalars(
            select(TimePeriod)
            .where(
                TimePeriod.start_date <= check_date,
                TimePeriod.end_date >= check_date,
            )
            .order_by(TimePeriod.start_date)
        ).first()
        return self._to_dto(period) if period else None

    def resolve_period(self, now: date, weeks_ago: int) -> ReportingPeriod:
        """
        Resolve the reporting period ``weeks_ago`` periods before the one
        containing ``now``.

        With ``weeks_ago == 0`` the current period is returned unchanged.
        Otherwise both boundaries move back ``7 * weeks_ago`` days and the
        period number is decremented by ``weeks_ago``.

        Raises:
            ValueError: If weeks_ago is negative.
            PeriodNotFoundError: If no period contains ``now``.
        """
        if weeks_ago < 0:
            raise ValueError(f"weeks_ago must be non-negative, got {weeks_ago}")

        current = self.get_period_for_date(now)
        if current is None:
            logger.warning("period_not_found", extra={"as_of": str(now)})
            raise PeriodNotFoundError(str(now))

        if weeks_ago == 0:
            resolved = current
        else:
            shift = timedelta(days=DAYS_PER_PERIOD * weeks_ago)
            resolved = ReportingPeriod(
                start=current.start - shift,
                end=current.end - shift,
                period=current.period - weeks_ago,
                period_code=f"{current.period_code}-{weeks_ago}w",
            )

        logger.info(
            "period_resolved",
            extra={
                "as_of": str(now),
                "weeks_ago": weeks_ago,
                "period_code": resolved.period_code,
                "start": str(resolved.start),
                "end": str(resolved.end),
            },
        )
        return resolved

    def resolve_for_clock(self, weeks_ago: int, local_tz: tzinfo) -> ReportingPeriod:
        """Resolve relative to the injected clock's current local date."""
        today = self._clock.now().astimezone(local_tz).date()
        return self.resolve_period(today, weeks_ago)
