"""
Module: timesheet_kernel.models.time_period
Responsibility: ORM mapping of the reporting period calendar -- one row per
    payroll week.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - period_code is unique (uq_time_period_code).
    - start_date <= end_date and ranges do not overlap (enforced by
      PeriodService at creation time, not by the table).

Failure modes:
    - PeriodNotFoundError when no row covers the requested date (raised by
      PeriodService.resolve_period).
"""

from datetime import date

from sqlalchemy import Date, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from timesheet_kernel.db.base import Base


class TimePeriod(Base):
    """
    A reporting period (payroll week) from the calendar table.

    Non-goals:
        - This model does NOT enforce non-overlapping date ranges; that is
          checked by PeriodService.create_period.
    """

    __tablename__ = "time_periods"

    __table_args__ = (
        UniqueConstraint("period_code", name="uq_time_period_code"),
        Index("idx_time_period_dates", "start_date", "end_date"),
    )

    # Period identifier (e.g., "2026-W42")
    period_code: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    # Sequential period number within the calendar
    period_number: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    # Period boundaries (inclusive)
    start_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    end_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<TimePeriod {self.period_code}: {self.start_date}..{self.end_date}>"
