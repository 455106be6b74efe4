"""
Pytest fixtures for the timesheet audit test suite.

Provides:
- A fresh in-memory SQLite database per test (through the kernel engine module)
- Session, period service and selector fixtures
- Time entry factories
- Structured log capture
"""

import json
import logging
from collections.abc import Callable
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO

import pytest
from sqlalchemy.orm import Session

from timesheet_config.schema import AuditConfig, AuditSettings
from timesheet_kernel.db.engine import (
    create_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from timesheet_kernel.domain.clock import DeterministicClock
from timesheet_kernel.domain.dtos import TimeEntry
from timesheet_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from timesheet_kernel.models.time_entry import TimeEntryRecord
from timesheet_kernel.selectors.time_entry_selector import TimeEntrySelector
from timesheet_kernel.services.period_service import PeriodService


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture timesheet_audit logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ...
            logs = captured_logs()
            assert any(r["message"] == "audit_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("timesheet_audit")
    previous_level = root.level
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite database with the audit tables."""
    eng = init_engine_from_url("sqlite://")
    create_tables()
    yield eng
    reset_engine()


@pytest.fixture
def session(db_engine) -> Session:
    sess = get_session()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    # Wednesday of the week 2026-10-11 .. 2026-10-17
    return DeterministicClock(datetime(2026, 10, 14, 15, 0, tzinfo=timezone.utc))


@pytest.fixture
def period_service(session, deterministic_clock) -> PeriodService:
    return PeriodService(session, deterministic_clock)


@pytest.fixture
def entry_selector(session) -> TimeEntrySelector:
    return TimeEntrySelector(session)


@pytest.fixture
def weekly_calendar(period_service) -> PeriodService:
    """Three consecutive Sunday-to-Saturday periods around the test clock."""
    period_service.create_period("2026-W41", 41, date(2026, 10, 4), date(2026, 10, 10))
    period_service.create_period("2026-W42", 42, date(2026, 10, 11), date(2026, 10, 17))
    period_service.create_period("2026-W43", 43, date(2026, 10, 18), date(2026, 10, 24))
    return period_service


@pytest.fixture
def audit_config() -> AuditConfig:
    return AuditConfig(audit=AuditSettings(timezone="UTC"))


# =============================================================================
# Entry factories
# =============================================================================


def utc(year: int, month: int, day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def make_entry() -> Callable[..., TimeEntry]:
    """Build TimeEntry DTOs on 2026-10-12 from hh:mm strings."""
    counter = iter(range(1, 10_000))

    def _make(
        start: str = "09:00",
        end: str = "10:00",
        actual_hours: str | None = "1.00",
        work_type: str | None = "Remote",
        billable_code: str | None = "B",
        notes: str | None = "worked on ticket",
        person_id: str = "jdoe",
        day: int = 12,
        record_number: int | None = None,
    ) -> TimeEntry:
        sh, sm = (int(p) for p in start.split(":"))
        eh, em = (int(p) for p in end.split(":"))
        return TimeEntry(
            record_number=record_number if record_number is not None else next(counter),
            person_id=person_id,
            start_utc=utc(2026, 10, day, sh, sm),
            end_utc=utc(2026, 10, day, eh, em),
            actual_hours=Decimal(actual_hours) if actual_hours is not None else None,
            work_type=work_type,
            billable_code=billable_code,
            notes=notes,
        )

    return _make


@pytest.fixture
def add_entry(session, make_entry) -> Callable[..., TimeEntryRecord]:
    """Persist a time entry row built with the same arguments as make_entry."""

    def _add(**kwargs) -> TimeEntryRecord:
        dto = make_entry(**kwargs)
        record = TimeEntryRecord(
            record_number=dto.record_number,
            person_id=dto.person_id,
            start_utc=dto.start_utc,
            end_utc=dto.end_utc,
            actual_hours=dto.actual_hours,
            work_type=dto.work_type,
            billable_code=dto.billable_code,
            notes=dto.notes,
        )
        session.add(record)
        session.flush()
        return record

    return _add
