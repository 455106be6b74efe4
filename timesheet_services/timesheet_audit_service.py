"""
TimesheetAuditService -- one audit run over a reporting period.

Responsibility:
    Resolves the reporting period, fetches the period's time entries,
    groups them by person and runs the timesheet scanner once per person.
    Returns a frozen ``TimesheetAuditReport`` for rendering.

Architecture position:
    Services -- imperative shell.  Composes ``PeriodService`` and
    ``TimeEntrySelector`` (kernel) with ``scan_person_entries`` (engines).
    Receives its session from the caller and never commits.

Invariants enforced:
    - A missing period aborts the run with ``PeriodNotFoundError`` before
      any entries are read.
    - Scans are isolated: an exception while scanning one person is logged,
      recorded in ``failed_persons`` and does not touch other persons'
      findings.
    - Read-only: nothing is written to the source tables.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from itertools import groupby
from uuid import uuid4

from sqlalchemy.orm import Session

from timesheet_config.bridges import build_scan_rules, resolve_timezone
from timesheet_config.schema import AuditConfig
from timesheet_engines.scanner_types import AnnotatedEntry, ErrorKind
from timesheet_engines.timesheet_scanner import scan_person_entries
from timesheet_kernel.domain.clock import Clock, SystemClock
from timesheet_kernel.domain.dtos import ReportingPeriod, TimeEntry
from timesheet_kernel.exceptions import PersonScanError
from timesheet_kernel.logging_config import LogContext, get_logger
from timesheet_kernel.selectors.time_entry_selector import TimeEntrySelector
from timesheet_kernel.services.period_service import PeriodService

logger = get_logger("services.timesheet_audit")


@dataclass(frozen=True)
class TimesheetAuditReport:
    """Outcome of one audit run."""

    run_id: str
    period: ReportingPeriod
    findings: tuple[AnnotatedEntry, ...]
    persons_scanned: int
    entries_scanned: int
    failed_persons: tuple[PersonScanError, ...] = ()

    @property
    def is_clean(self) -> bool:
        return not self.findings and not self.failed_persons

    def error_counts(self) -> dict[ErrorKind, int]:
        """Number of findings per error kind, in taxonomy order."""
        counts = Counter(f.error_kind for f in self.findings)
        return {kind: counts[kind] for kind in ErrorKind if counts[kind]}

    def findings_for(self, person_id: str) -> tuple[AnnotatedEntry, ...]:
        return tuple(f for f in self.findings if f.person_id == person_id)


class TimesheetAuditService:
    """
    Runs the timesheet audit for one reporting period.

    Contract:
        ``run()`` resolves the period, fetches entries and scans them per
        person.  Period errors propagate; per-person scan errors do not.
    """

    def __init__(
        self,
        session: Session,
        config: AuditConfig,
        clock: Clock | None = None,
    ):
        self.session = session
        self._config = config
        self._clock = clock or SystemClock()
        self._periods = PeriodService(session, self._clock)
        self._entries = TimeEntrySelector(session)
        self._rules = build_scan_rules(config)
        self._local_tz = resolve_timezone(config)

    def run(
        self,
        weeks_ago: int | None = None,
        person_id: str | None = None,
    ) -> TimesheetAuditReport:
        """
        Audit the period ``weeks_ago`` weeks before the current one.

        Args:
            weeks_ago: Overrides ``config.audit.weeks_ago`` when given.
            person_id: Overrides ``config.audit.person_id`` when given.

        Raises:
            PeriodNotFoundError: No reporting period covers today.
        """
        weeks = self._config.audit.weeks_ago if weeks_ago is None else weeks_ago
        person = self._config.audit.person_id if person_id is None else person_id
        run_id = str(uuid4())

        with LogContext.bind(run_id=run_id):
            logger.info(
                "audit_started",
                extra={"weeks_ago": weeks, "person_filter": person},
            )
            period = self._periods.resolve_for_clock(weeks, self._local_tz)

            with LogContext.bind(period_code=period.period_code):
                entries = self._entries.fetch_entries(
                    period.start, period.end, person_id=person
                )
                report = self._scan(run_id, period, entries)

                logger.info(
                    "audit_completed",
                    extra={
                        "persons_scanned": report.persons_scanned,
                        "entries_scanned": report.entries_scanned,
                        "finding_count": len(report.findings),
                        "failed_person_count": len(report.failed_persons),
                    },
                )
        return report

    def _scan(
        self,
        run_id: str,
        period: ReportingPeriod,
        entries: tuple[TimeEntry, ...],
    ) -> TimesheetAuditReport:
        findings: list[AnnotatedEntry] = []
        failures: list[PersonScanError] = []
        persons = 0

        # Selector output is ordered by person, then start time.
        for person_id, group in groupby(entries, key=lambda e: e.person_id):
            person_entries = tuple(group)
            persons += 1
            with LogContext.bind(person_id=person_id):
                try:
                    person_findings = scan_person_entries(
                        person_entries,
                        rules=self._rules,
                        local_tz=self._local_tz,
                        display_format=self._config.audit.display_format,
                    )
                except Exception as exc:
                    error = PersonScanError(person_id, len(person_entries), repr(exc))
                    logger.error("person_scan_failed", exc_info=True)
                    failures.append(error)
                    continue

                findings.extend(person_findings)
                logger.debug(
                    "person_scanned",
                    extra={
                        "entry_count": len(person_entries),
                        "finding_count": len(person_findings),
                    },
                )

        return TimesheetAuditReport(
            run_id=run_id,
            period=period,
            findings=tuple(findings),
            persons_scanned=persons,
            entries_scanned=len(entries),
            failed_persons=tuple(failures),
        )
