"""
Timesheet Error Scanner (``timesheet_engines.timesheet_scanner``).

Responsibility
--------------
Pure sequential scan over one person's time entries that flags suspected
data-entry errors:

* Possible Overlap -- an entry starts before the previous entry ends, or
  continues a chain of overlaps still under the high-water mark
* Blank -- the entry has no notes
* No Charge -- a "Travel From" entry is not billed as no-charge
* Onsite -- the entry after a "Travel To" is not classified "Onsite"

An overlap fully explained by the previous entry's deduction is classified
"Deducted", logged, and not reported.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO database,
ZERO clock reads.  The local timezone is passed as an explicit parameter.

Invariants enforced
-------------------
* Input is never reordered or dropped; only flagged entries are emitted.
* Clock in/out and zero-hour entries never fire a rule but still move the
  high-water mark (and, by default, become the previous entry).
* State lives in a frozen ``ScanState`` created per person, so repeated
  scans of the same input give identical output.

Failure modes
-------------
* End-before-start entries produce negative computed hours and an
  oversized deduction; they are not rejected.
* Raises ``ValueError`` only for programming errors (mixed persons passed
  to ``scan_person_entries``).
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone, tzinfo
from decimal import ROUND_HALF_UP, Decimal

from timesheet_engines.scanner_types import (
    AnnotatedEntry,
    ErrorKind,
    ScannedEntry,
    ScanRules,
    ScanState,
)
from timesheet_engines.tracer import traced_engine
from timesheet_kernel.domain.dtos import TimeEntry
from timesheet_kernel.logging_config import LogContext, get_logger

logger = get_logger("engines.timesheet_scanner")

DEFAULT_RULES = ScanRules()
DEFAULT_DISPLAY_FORMAT = "%Y-%m-%d %H:%M"

_HUNDREDTH = Decimal("0.01")
_MICROSECONDS_PER_HOUR = Decimal(3_600_000_000)
_ZERO = Decimal("0")


# ---------------------------------------------------------------------------
# Per-entry computation
# ---------------------------------------------------------------------------


def compute_elapsed_hours(local_start: datetime, local_end: datetime) -> Decimal:
    """Wall-clock hours between two local times, rounded half-up to 0.01.

    Offsets are dropped before subtracting, so a span across a DST change
    counts the hours shown on the wall clock.
    """
    delta = local_end.replace(tzinfo=None) - local_start.replace(tzinfo=None)
    micros = Decimal(delta // timedelta(microseconds=1))
    return (micros / _MICROSECONDS_PER_HOUR).quantize(_HUNDREDTH, rounding=ROUND_HALF_UP)


def _actual_hours(entry: TimeEntry) -> Decimal:
    return entry.actual_hours if entry.actual_hours is not None else _ZERO


def _scan_entry(entry: TimeEntry, local_tz: tzinfo) -> ScannedEntry:
    local_start = entry.start_utc.astimezone(local_tz)
    local_end = entry.end_utc.astimezone(local_tz)
    computed = compute_elapsed_hours(local_start, local_end)
    return ScannedEntry(
        entry=entry,
        local_start=local_start,
        local_end=local_end,
        computed_hours=computed,
        deduction=computed - _actual_hours(entry),
    )


def _is_skipped(entry: TimeEntry, rules: ScanRules) -> bool:
    return (
        entry.work_type == rules.clock_in_out_work_type
        or _actual_hours(entry) == _ZERO
    )


def _annotate(
    scanned: ScannedEntry,
    previous: ScannedEntry | None,
    kind: ErrorKind,
    display_format: str,
) -> AnnotatedEntry:
    return AnnotatedEntry(
        entry=scanned.entry,
        local_start=scanned.local_start,
        local_end=scanned.local_end,
        start_display=scanned.local_start.strftime(display_format),
        end_display=scanned.local_end.strftime(display_format),
        computed_hours=scanned.computed_hours,
        deduction=scanned.deduction,
        previous_deduction=previous.deduction if previous is not None else None,
        error_kind=kind,
    )


# ---------------------------------------------------------------------------
# Step function
# ---------------------------------------------------------------------------


def scan_step(
    state: ScanState,
    entry: TimeEntry,
    *,
    rules: ScanRules = DEFAULT_RULES,
    local_tz: tzinfo = timezone.utc,
    display_format: str = DEFAULT_DISPLAY_FORMAT,
) -> tuple[ScanState, tuple[AnnotatedEntry, ...]]:
    """Process one entry: return the next state and zero or more findings.

    An entry matching several rules yields one ``AnnotatedEntry`` per rule,
    in rule order (overlap, blank, no charge, onsite).
    """
    scanned = _scan_entry(entry, local_tz)
    previous = state.previous
    in_overlap = state.in_overlap
    kinds: list[ErrorKind] = []
    skipped = _is_skipped(entry, rules)

    if not skipped:
        if previous is not None and scanned.local_start < previous.local_end:
            if previous.deduction == _actual_hours(entry):
                # Overlap already taken out of the previous entry's hours.
                logger.debug(
                    "overlap_deducted",
                    extra={
                        "previous_record": previous.entry.record_number,
                        "deduction": previous.deduction,
                    },
                )
                in_overlap = False
            else:
                kinds.append(ErrorKind.POSSIBLE_OVERLAP)
                in_overlap = True
        elif in_overlap and scanned.local_start < state.high_water_end:
            kinds.append(ErrorKind.POSSIBLE_OVERLAP)
        else:
            in_overlap = False

        if not entry.notes:
            kinds.append(ErrorKind.BLANK)

        if (
            entry.work_type == rules.travel_from_work_type
            and entry.billable_code is not None
            and entry.billable_code != rules.no_charge_code
        ):
            kinds.append(ErrorKind.NO_CHARGE)

        if (
            previous is not None
            and previous.entry.work_type == rules.travel_to_work_type
            and entry.work_type is not None
            and entry.work_type != rules.onsite_work_type
        ):
            kinds.append(ErrorKind.ONSITE)

    if skipped and not rules.skipped_entries_advance_previous:
        next_previous = previous
    else:
        next_previous = scanned

    next_state = ScanState(
        previous=next_previous,
        high_water_end=max(state.high_water_end, scanned.local_end),
        in_overlap=in_overlap,
    )
    findings = tuple(
        _annotate(scanned, previous, kind, display_format) for kind in kinds
    )
    return next_state, findings


# ---------------------------------------------------------------------------
# Scans
# ---------------------------------------------------------------------------


def sort_entries(entries: Iterable[TimeEntry]) -> tuple[TimeEntry, ...]:
    """Order entries by start time, ties broken by source record number."""
    return tuple(sorted(entries, key=lambda e: (e.start_utc, e.record_number)))


@traced_engine("timesheet_scanner", "1.0", fingerprint_fields=("entries",))
def scan_person_entries(
    entries: Iterable[TimeEntry],
    *,
    rules: ScanRules = DEFAULT_RULES,
    local_tz: tzinfo = timezone.utc,
    display_format: str = DEFAULT_DISPLAY_FORMAT,
) -> tuple[AnnotatedEntry, ...]:
    """Scan one person's entries, already sorted by start time.

    Args:
        entries: The person's entries in ascending start order.
        rules: Work type / billing labels and the skipped-entry policy.
        local_tz: Timezone used for local times and elapsed hours.
        display_format: ``strftime`` format for the display columns.

    Returns:
        The flagged entries; empty when nothing is flagged or no entries
        were given.

    Raises:
        ValueError: If the entries belong to more than one person.
    """
    entries = tuple(entries)
    if not entries:
        return ()

    person_ids = {e.person_id for e in entries}
    if len(person_ids) > 1:
        raise ValueError(
            f"scan_person_entries expects one person, got {sorted(person_ids)}"
        )

    state = ScanState()
    findings: list[AnnotatedEntry] = []
    with LogContext.bind(person_id=entries[0].person_id):
        for entry in entries:
            with LogContext.bind(record_number=str(entry.record_number)):
                state, emitted = scan_step(
                    state,
                    entry,
                    rules=rules,
                    local_tz=local_tz,
                    display_format=display_format,
                )
            findings.extend(emitted)
    return tuple(findings)


def scan_entries(
    entries: Iterable[TimeEntry],
    *,
    rules: ScanRules = DEFAULT_RULES,
    local_tz: tzinfo = timezone.utc,
    display_format: str = DEFAULT_DISPLAY_FORMAT,
) -> tuple[AnnotatedEntry, ...]:
    """Scan a multi-person sequence, one independent scan per person.

    Persons are reported in order of first appearance; each person's
    entries keep their relative input order.
    """
    by_person: dict[str, list[TimeEntry]] = {}
    for entry in entries:
        by_person.setdefault(entry.person_id, []).append(entry)

    findings: list[AnnotatedEntry] = []
    for person_entries in by_person.values():
        findings.extend(
            scan_person_entries(
                person_entries,
                rules=rules,
                local_tz=local_tz,
                display_format=display_format,
            )
        )
    return tuple(findings)
