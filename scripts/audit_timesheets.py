#!/usr/bin/env python3
"""
Flag suspected data-entry errors in a reporting period's time entries.

Usage:
    python3 scripts/audit_timesheets.py
    python3 scripts/audit_timesheets.py --weeks-ago 1 --format csv --output last_week.csv
    python3 scripts/audit_timesheets.py --config config/timesheet_audit.yaml --person jdoe

Examples:
    # Current period, console table
    python3 scripts/audit_timesheets.py --db-url postgresql://audit@db/timesheets

    # Two periods back, a different dataset on the same server
    python3 scripts/audit_timesheets.py --database timesheets_archive --weeks-ago 2

    # Re-run the audit as it would have looked on a past date
    python3 scripts/audit_timesheets.py --as-of 2026-03-06 --format json

Exit status:
    0  report written, every person scanned
    1  configuration, period or database error, or a report written with
       persons whose scan failed
    2  invalid arguments
"""

import argparse
import logging
import sys
from datetime import date, datetime, time
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {number}")
    return number


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    from timesheet_services.reporting import FORMATS

    parser = argparse.ArgumentParser(
        description="Flag suspected timesheet data-entry errors for a reporting period.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  python3 scripts/audit_timesheets.py --weeks-ago 1\n"
            "  python3 scripts/audit_timesheets.py --person jdoe --format csv\n"
        ),
    )
    parser.add_argument(
        "--config", type=Path,
        help="YAML configuration file",
    )
    parser.add_argument(
        "--db-url", type=str,
        help="Database URL (overrides config and TIMESHEET_AUDIT_DATABASE_URL)",
    )
    parser.add_argument(
        "--database", type=str,
        help="Dataset (database name) to audit on the server",
    )
    parser.add_argument(
        "--weeks-ago", type=_non_negative_int,
        help="Audit the period this many weeks before the current one",
    )
    parser.add_argument(
        "--person", type=str,
        help="Only audit this person's entries",
    )
    parser.add_argument(
        "--timezone", type=str,
        help="IANA timezone for local times (e.g. America/Chicago)",
    )
    parser.add_argument(
        "--as-of", type=_iso_date,
        help="Resolve the current period as of this date instead of today",
    )
    parser.add_argument(
        "--format", choices=FORMATS, default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--output", type=Path,
        help="Write the report to this file instead of stdout",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Emit structured JSON logs to stderr",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    from sqlalchemy.exc import SQLAlchemyError

    from timesheet_config import get_audit_config
    from timesheet_config.bridges import build_database_target, resolve_timezone
    from timesheet_kernel.db.engine import init_engine_from_url, reset_engine, session_scope
    from timesheet_kernel.domain.clock import DeterministicClock, SystemClock
    from timesheet_kernel.exceptions import TimesheetAuditError
    from timesheet_kernel.logging_config import configure_logging
    from timesheet_services import TimesheetAuditService, render_report

    configure_logging(level=logging.INFO if args.verbose else logging.WARNING)

    try:
        config = get_audit_config(
            args.config,
            overrides={
                "database": {"url": args.db_url, "name": args.database},
                "audit": {
                    "weeks_ago": args.weeks_ago,
                    "person_id": args.person,
                    "timezone": args.timezone,
                },
            },
        )
    except (TimesheetAuditError, FileNotFoundError) as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1

    clock = SystemClock()
    if args.as_of is not None:
        clock = DeterministicClock(
            datetime.combine(args.as_of, time(12, 0), tzinfo=resolve_timezone(config))
        )

    try:
        init_engine_from_url(build_database_target(config), echo=config.database.echo)
    except Exception as exc:
        print(f"  ERROR: Cannot connect to database: {exc}", file=sys.stderr)
        return 1

    try:
        with session_scope() as session:
            report = TimesheetAuditService(session, config, clock).run()
    except TimesheetAuditError as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1
    except SQLAlchemyError as exc:
        print(f"  ERROR: Database query failed: {exc}", file=sys.stderr)
        return 1
    finally:
        reset_engine()

    output = render_report(report, args.format)
    if args.output is not None:
        args.output.write_text(output, encoding="utf-8")
        print(
            f"  Wrote {len(report.findings)} finding(s) to {args.output}",
            file=sys.stderr,
        )
    else:
        sys.stdout.write(output)

    if report.failed_persons:
        print(
            f"  ERROR: {len(report.failed_persons)} person(s) could not be scanned",
            file=sys.stderr,
        )
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
