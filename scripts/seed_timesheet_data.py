#!/usr/bin/env python3
"""
Seed a local database with a weekly period calendar and sample time entries.

Creates the time_periods and time_entries tables, adds one period per week
of the given year (Sunday to Saturday), and writes a small set of entries in
the period containing --as-of that exercises every audit rule.

Usage:
    python3 scripts/seed_timesheet_data.py --db-url sqlite:///timesheet_audit.db
    python3 scripts/seed_timesheet_data.py --year 2026 --as-of 2026-10-14
"""

import argparse
import sys
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

DEFAULT_DB_URL = "sqlite:///timesheet_audit.db"

# (person, day offset from period start, start hh:mm, end hh:mm, hours, work type, billable, notes)
SAMPLE_ENTRIES = (
    ("jdoe", 1, "08:00", "08:00", "0", "Clock In/Out", "B", "clock in"),
    ("jdoe", 1, "09:00", "10:00", "1.00", "Remote", "B", "status call"),
    ("jdoe", 1, "09:30", "10:30", "1.00", "Remote", "B", "ticket 4411"),
    ("jdoe", 1, "11:00", "12:00", "1.00", "Remote", "B", ""),
    ("jdoe", 2, "07:00", "09:00", "2.00", "Travel To", "NC", "drive to client"),
    ("jdoe", 2, "09:00", "12:00", "3.00", "Training", "B", "new hire training"),
    ("jdoe", 2, "15:00", "17:00", "2.00", "Travel From", "B", "drive back"),
    ("asmith", 3, "08:00", "12:00", "3.00", "Onsite", "B", "server install"),
    ("asmith", 3, "11:00", "12:00", "1.00", "Onsite", "B", "cabling"),
)


def weekly_periods(year: int) -> list[tuple[str, int, date, date]]:
    """(code, number, start, end) for every Sunday-to-Saturday week touching ``year``."""
    first = date(year, 1, 1)
    start = first - timedelta(days=(first.weekday() + 1) % 7)
    periods = []
    number = 1
    while start.year <= year:
        end = start + timedelta(days=6)
        periods.append((f"{year}-W{number:02d}", number, start, end))
        start = end + timedelta(days=1)
        number += 1
    return periods


def _at(day: date, hhmm: str) -> datetime:
    return datetime.combine(day, time.fromisoformat(hhmm), tzinfo=timezone.utc)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Seed a period calendar and sample time entries.",
    )
    parser.add_argument(
        "--db-url", type=str, default=DEFAULT_DB_URL,
        help=f"Database URL (default: {DEFAULT_DB_URL})",
    )
    parser.add_argument(
        "--year", type=int, default=date.today().year,
        help="Calendar year to generate weekly periods for",
    )
    parser.add_argument(
        "--as-of", type=date.fromisoformat, default=None,
        help="Date whose period receives the sample entries (default: today)",
    )
    args = parser.parse_args(argv)

    from timesheet_kernel.db.engine import (
        create_tables,
        init_engine_from_url,
        reset_engine,
        session_scope,
    )
    from timesheet_kernel.models.time_entry import TimeEntryRecord
    from timesheet_kernel.services.period_service import PeriodService

    as_of = args.as_of or date.today()

    try:
        init_engine_from_url(args.db_url)
        create_tables()
        with session_scope() as session:
            periods = PeriodService(session)
            for code, number, start, end in weekly_periods(args.year):
                if periods.get_period_for_date(start) is None:
                    periods.create_period(code, number, start, end)

            current = periods.get_period_for_date(as_of)
            if current is None:
                print(f"  ERROR: no period covers {as_of}", file=sys.stderr)
                return 1

            for record_number, row in enumerate(SAMPLE_ENTRIES, start=1):
                person, offset, start_hhmm, end_hhmm, hours, work_type, billable, notes = row
                day = current.start + timedelta(days=offset)
                session.add(
                    TimeEntryRecord(
                        record_number=record_number,
                        person_id=person,
                        start_utc=_at(day, start_hhmm),
                        end_utc=_at(day, end_hhmm),
                        actual_hours=Decimal(hours),
                        work_type=work_type,
                        billable_code=billable,
                        notes=notes,
                    )
                )
    except Exception as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1
    finally:
        reset_engine()

    print(f"  Seeded period {current.period_code} with {len(SAMPLE_ENTRIES)} entries.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
