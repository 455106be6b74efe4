"""
Tests for the Timesheet Error Scanner.

Covers:
- Overlap detection, chained overlaps and the high-water mark
- Deducted overlaps (computed and logged, never reported)
- Blank, No Charge and Onsite rules
- Skipped entries (clock in/out, zero or missing hours)
- Skipped-entry policy both ways
- Elapsed-hour rounding and wall-clock (DST) arithmetic
- Multi-person scans and input validation
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from timesheet_engines.scanner_types import ErrorKind, ScanRules, ScanState
from timesheet_engines.timesheet_scanner import (
    compute_elapsed_hours,
    scan_entries,
    scan_person_entries,
    scan_step,
    sort_entries,
)
from timesheet_kernel.domain.dtos import TimeEntry
from timesheet_kernel.logging_config import LogContext


def kinds(findings):
    return [(f.record_number, f.error_kind) for f in findings]


class TestOverlap:
    """Tests for the Possible Overlap rule."""

    def test_simple_overlap_flags_later_entry(self, make_entry):
        """A later entry starting inside the previous one is flagged."""
        a = make_entry("09:00", "10:00", "1.00", notes="x")
        b = make_entry("09:30", "10:30", "1.00", notes="y")

        findings = scan_person_entries([a, b])

        assert kinds(findings) == [(b.record_number, ErrorKind.POSSIBLE_OVERLAP)]
        assert findings[0].previous_deduction == Decimal("0.00")

    def test_adjacent_entries_do_not_overlap(self, make_entry):
        a = make_entry("09:00", "10:00")
        b = make_entry("10:00", "11:00")

        assert scan_person_entries([a, b]) == ()

    def test_chain_overlap_under_high_water_mark(self, make_entry):
        """An entry after an overlap is flagged while it starts before the high-water mark."""
        a = make_entry("09:00", "12:00", "3.00")
        b = make_entry("10:00", "11:00", "1.00")
        c = make_entry("11:00", "11:30", "0.50")
        d = make_entry("12:00", "13:00", "1.00")

        findings = scan_person_entries([a, b, c, d])

        assert kinds(findings) == [
            (b.record_number, ErrorKind.POSSIBLE_OVERLAP),
            (c.record_number, ErrorKind.POSSIBLE_OVERLAP),
        ]

    def test_chain_ends_when_entry_clears_high_water_mark(self, make_entry):
        a = make_entry("09:00", "10:00")
        b = make_entry("09:30", "10:30")
        c = make_entry("11:00", "12:00")
        d = make_entry("11:30", "12:30", "1.00")

        findings = scan_person_entries([a, b, c, d])

        # d overlaps c directly; c itself is clean
        assert kinds(findings) == [
            (b.record_number, ErrorKind.POSSIBLE_OVERLAP),
            (d.record_number, ErrorKind.POSSIBLE_OVERLAP),
        ]

    def test_overlap_matching_previous_deduction_is_not_reported(self, make_entry):
        """The previous entry already deducted exactly this entry's hours."""
        a = make_entry("09:00", "11:00", "1.50")
        b = make_entry("10:30", "11:30", "0.50")

        assert scan_person_entries([a, b]) == ()

    def test_deducted_overlap_is_logged(self, make_entry, captured_logs):
        a = make_entry("09:00", "11:00", "1.50")
        b = make_entry("10:30", "11:30", "0.50")

        scan_person_entries([a, b])

        deducted = [r for r in captured_logs() if r["message"] == "overlap_deducted"]
        assert len(deducted) == 1
        assert deducted[0]["record_number"] == str(b.record_number)
        assert deducted[0]["previous_record"] == a.record_number
        assert deducted[0]["deduction"] == "0.50"
        assert deducted[0]["person_id"] == "jdoe"

    def test_record_number_unbound_after_scan(self, make_entry):
        scan_person_entries([make_entry("09:00", "10:00")])

        assert "record_number" not in LogContext.get_all()

    def test_deducted_overlap_resets_chain(self, make_entry):
        a = make_entry("09:00", "12:00", "3.00")
        b = make_entry("10:00", "11:00", "0.50")
        c = make_entry("10:30", "11:30", "0.50")
        d = make_entry("11:30", "12:30", "1.00")

        findings = scan_person_entries([a, b, c, d])

        # d still starts under the 12:00 high-water mark
        assert kinds(findings) == [(b.record_number, ErrorKind.POSSIBLE_OVERLAP)]

    def test_deducted_kind_is_never_emitted(self, make_entry):
        a = make_entry("09:00", "11:00", "1.50")
        b = make_entry("10:30", "11:30", "0.50")
        c = make_entry("11:00", "12:00", "1.00", notes=None)

        findings = scan_person_entries([a, b, c])

        assert ErrorKind.DEDUCTED not in {f.error_kind for f in findings}
        assert ErrorKind.NONE not in {f.error_kind for f in findings}


class TestFieldRules:
    """Tests for the Blank, No Charge and Onsite rules."""

    def test_missing_notes_is_blank(self, make_entry):
        entry = make_entry(notes="")

        findings = scan_person_entries([entry])

        assert kinds(findings) == [(entry.record_number, ErrorKind.BLANK)]
        assert findings[0].previous_deduction is None

    def test_null_notes_is_blank(self, make_entry):
        entry = make_entry(notes=None)

        assert kinds(scan_person_entries([entry])) == [
            (entry.record_number, ErrorKind.BLANK),
        ]

    def test_whitespace_notes_are_not_blank(self, make_entry):
        assert scan_person_entries([make_entry(notes="   ")]) == ()

    def test_travel_from_billed_is_no_charge(self, make_entry):
        entry = make_entry(work_type="Travel From", billable_code="C")

        assert kinds(scan_person_entries([entry])) == [
            (entry.record_number, ErrorKind.NO_CHARGE),
        ]

    def test_travel_from_with_no_charge_code_is_clean(self, make_entry):
        entry = make_entry(work_type="Travel From", billable_code="NC")

        assert scan_person_entries([entry]) == ()

    def test_travel_from_without_billable_code_is_clean(self, make_entry):
        entry = make_entry(work_type="Travel From", billable_code=None)

        assert scan_person_entries([entry]) == ()

    def test_work_after_travel_to_must_be_onsite(self, make_entry):
        travel = make_entry("07:00", "09:00", "2.00", work_type="Travel To")
        training = make_entry("09:00", "12:00", "3.00", work_type="Training")

        findings = scan_person_entries([travel, training])

        assert kinds(findings) == [(training.record_number, ErrorKind.ONSITE)]
        assert findings[0].previous_deduction == Decimal("0.00")

    def test_onsite_after_travel_to_is_clean(self, make_entry):
        travel = make_entry("07:00", "09:00", "2.00", work_type="Travel To")
        onsite = make_entry("09:00", "12:00", "3.00", work_type="Onsite")

        assert scan_person_entries([travel, onsite]) == ()

    def test_unknown_work_type_after_travel_to_is_clean(self, make_entry):
        travel = make_entry("07:00", "09:00", "2.00", work_type="Travel To")
        unknown = make_entry("09:00", "12:00", "3.00", work_type=None)

        assert scan_person_entries([travel, unknown]) == ()

    def test_one_finding_per_matching_rule_in_rule_order(self, make_entry):
        a = make_entry("09:00", "10:00", work_type="Travel To")
        b = make_entry(
            "09:30", "10:30", work_type="Travel From", billable_code="B", notes=None
        )

        findings = scan_person_entries([a, b])

        assert kinds(findings) == [
            (b.record_number, ErrorKind.POSSIBLE_OVERLAP),
            (b.record_number, ErrorKind.BLANK),
            (b.record_number, ErrorKind.NO_CHARGE),
            (b.record_number, ErrorKind.ONSITE),
        ]
        assert all(f.entry is b for f in findings)

    def test_custom_rule_labels(self, make_entry):
        rules = ScanRules(travel_from_work_type="Return Trip", no_charge_code="NB")
        billed = make_entry(work_type="Return Trip", billable_code="NC")
        unbilled = make_entry("11:00", "12:00", work_type="Return Trip", billable_code="NB")

        findings = scan_person_entries([billed, unbilled], rules=rules)

        assert kinds(findings) == [(billed.record_number, ErrorKind.NO_CHARGE)]


class TestSkippedEntries:
    """Tests for clock in/out and zero-hour entries."""

    def test_clock_in_out_never_flagged(self, make_entry):
        a = make_entry("09:00", "10:00")
        clock = make_entry("09:30", "09:30", "0", work_type="Clock In/Out", notes=None)

        assert scan_person_entries([a, clock]) == ()

    def test_clock_in_out_with_hours_is_still_skipped(self, make_entry):
        a = make_entry("09:00", "10:00")
        clock = make_entry("09:30", "10:30", "1.00", work_type="Clock In/Out", notes="")

        assert scan_person_entries([a, clock]) == ()

    def test_zero_hour_entry_is_skipped(self, make_entry):
        entry = make_entry(actual_hours="0.00", notes=None, work_type="Travel From")

        assert scan_person_entries([entry]) == ()

    def test_missing_hours_entry_is_skipped(self, make_entry):
        entry = make_entry(actual_hours=None, notes=None)

        assert scan_person_entries([entry]) == ()

    def test_skipped_entry_becomes_previous_by_default(self, make_entry):
        travel = make_entry("07:00", "09:00", "2.00", work_type="Travel To")
        clock = make_entry("09:00", "09:00", "0", work_type="Clock In/Out")
        training = make_entry("09:30", "11:00", "1.50", work_type="Training")

        assert scan_person_entries([travel, clock, training]) == ()

    def test_skipped_entry_can_be_looked_past(self, make_entry):
        rules = ScanRules(skipped_entries_advance_previous=False)
        travel = make_entry("07:00", "09:00", "2.00", work_type="Travel To")
        clock = make_entry("09:00", "09:00", "0", work_type="Clock In/Out")
        training = make_entry("09:30", "11:00", "1.50", work_type="Training")

        findings = scan_person_entries([travel, clock, training], rules=rules)

        assert kinds(findings) == [(training.record_number, ErrorKind.ONSITE)]

    def test_skipped_entry_moves_high_water_mark(self, make_entry):
        rules = ScanRules(skipped_entries_advance_previous=False)
        a = make_entry("09:00", "10:00")
        b = make_entry("09:30", "10:30")
        clock = make_entry("10:30", "14:00", "0", work_type="Clock In/Out")
        d = make_entry("11:00", "12:00")

        with_clock = scan_person_entries([a, b, clock, d], rules=rules)
        without_clock = scan_person_entries([a, b, d], rules=rules)

        assert kinds(with_clock) == [
            (b.record_number, ErrorKind.POSSIBLE_OVERLAP),
            (d.record_number, ErrorKind.POSSIBLE_OVERLAP),
        ]
        assert kinds(without_clock) == [(b.record_number, ErrorKind.POSSIBLE_OVERLAP)]


class TestScanStep:
    """Tests for the single-entry step function."""

    def test_step_returns_next_state(self, make_entry):
        entry = make_entry("09:00", "10:00")

        state, findings = scan_step(ScanState(), entry)

        assert findings == ()
        assert state.previous.entry is entry
        assert state.high_water_end == entry.end_utc
        assert state.in_overlap is False

    def test_step_does_not_mutate_input_state(self, make_entry):
        start = ScanState()
        scan_step(start, make_entry())

        assert start == ScanState()

    def test_high_water_mark_never_decreases(self, make_entry):
        long = make_entry("09:00", "17:00", "8.00")
        short = make_entry("10:00", "11:00")

        state, _ = scan_step(ScanState(), long)
        state, _ = scan_step(state, short)

        assert state.high_water_end == long.end_utc


class TestComputedHours:
    """Tests for elapsed-hour arithmetic and display values."""

    @pytest.mark.parametrize(
        "minutes, seconds, expected",
        [
            (60, 0, Decimal("1.00")),
            (20, 0, Decimal("0.33")),
            (50, 0, Decimal("0.83")),
            (7, 30, Decimal("0.13")),
            (0, 0, Decimal("0.00")),
        ],
    )
    def test_rounding_half_up_to_hundredths(self, minutes, seconds, expected):
        start = datetime(2026, 10, 12, 9, 0, tzinfo=timezone.utc)
        end = start + timedelta(minutes=minutes, seconds=seconds)

        assert compute_elapsed_hours(start, end) == expected

    def test_end_before_start_is_negative(self):
        start = datetime(2026, 10, 12, 10, 0, tzinfo=timezone.utc)
        end = datetime(2026, 10, 12, 9, 0, tzinfo=timezone.utc)

        assert compute_elapsed_hours(start, end) == Decimal("-1.00")

    def test_negative_span_yields_negative_deduction(self, make_entry):
        entry = make_entry("10:00", "09:00", "1.00", notes=None)

        (finding,) = scan_person_entries([entry])

        assert finding.computed_hours == Decimal("-1.00")
        assert finding.deduction == Decimal("-2.00")

    def test_dst_fall_back_counts_wall_clock_hours(self):
        chicago = ZoneInfo("America/Chicago")
        # 01:00 CDT to 02:00 CST on 2026-11-01: two real hours, one on the wall
        entry = TimeEntry(
            record_number=1,
            person_id="jdoe",
            start_utc=datetime(2026, 11, 1, 6, 0, tzinfo=timezone.utc),
            end_utc=datetime(2026, 11, 1, 8, 0, tzinfo=timezone.utc),
            actual_hours=Decimal("2.00"),
            notes=None,
        )

        (finding,) = scan_person_entries([entry], local_tz=chicago)

        assert finding.computed_hours == Decimal("1.00")
        assert finding.deduction == Decimal("-1.00")

    def test_local_times_and_display_use_timezone(self, make_entry):
        chicago = ZoneInfo("America/Chicago")
        entry = make_entry("14:00", "15:30", "1.50", notes=None)

        (finding,) = scan_person_entries([entry], local_tz=chicago)

        assert finding.local_start.utcoffset() == timedelta(hours=-5)
        assert finding.start_display == "2026-10-12 09:00"
        assert finding.end_display == "2026-10-12 10:30"
        assert finding.computed_hours == Decimal("1.50")

    def test_custom_display_format(self, make_entry):
        entry = make_entry("09:05", "10:00", notes=None)

        (finding,) = scan_person_entries([entry], display_format="%m/%d %I:%M %p")

        assert finding.start_display == "10/12 09:05 AM"


class TestScanBoundaries:
    """Tests for empty input, person grouping and ordering."""

    def test_empty_input_yields_nothing(self):
        assert scan_person_entries([]) == ()
        assert scan_entries([]) == ()

    def test_mixed_persons_rejected(self, make_entry):
        with pytest.raises(ValueError, match="one person"):
            scan_person_entries([make_entry(person_id="a"), make_entry(person_id="b")])

    def test_persons_scanned_independently(self, make_entry):
        a1 = make_entry("09:00", "12:00", "3.00", person_id="jdoe")
        b1 = make_entry("10:00", "11:00", "1.00", person_id="asmith")
        a2 = make_entry("12:00", "13:00", "1.00", person_id="jdoe")

        assert scan_entries([a1, b1, a2]) == ()

    def test_findings_grouped_by_first_appearance(self, make_entry):
        b1 = make_entry("09:00", "10:00", person_id="zed", notes=None)
        a1 = make_entry("09:00", "10:00", person_id="amy", notes=None)
        b2 = make_entry("11:00", "12:00", person_id="zed", notes=None)

        findings = scan_entries([b1, a1, b2])

        assert [f.entry for f in findings] == [b1, b2, a1]

    def test_sort_entries_breaks_ties_by_record_number(self, make_entry):
        late = make_entry("10:00", "11:00", record_number=3)
        tie_hi = make_entry("09:00", "10:00", record_number=7)
        tie_lo = make_entry("09:00", "09:30", record_number=5)

        assert sort_entries([late, tie_hi, tie_lo]) == (tie_lo, tie_hi, late)

    def test_engine_trace_emitted(self, make_entry, captured_logs):
        scan_person_entries([make_entry(notes=None)])

        traces = [
            r for r in captured_logs() if r["message"] == "TIMESHEET_ENGINE_TRACE"
        ]
        assert len(traces) == 1
        assert traces[0]["engine_name"] == "timesheet_scanner"
        assert traces[0]["result_count"] == 1
        assert len(traces[0]["input_fingerprint"]) == 16
