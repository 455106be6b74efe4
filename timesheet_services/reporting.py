"""
Report rendering for timesheet audit findings.

Renders a ``TimesheetAuditReport`` as an aligned console table, CSV, JSON
or a standalone HTML table.  Every format uses the same column set, in the
same order as ``COLUMNS``.

Persons whose scan failed are never dropped.  CSV and HTML show them as a
"Scan Failed" row; text and JSON list them after the findings.
"""

from __future__ import annotations

import csv
import html
import io
import json
from collections.abc import Callable, Sequence
from decimal import Decimal

from timesheet_engines.scanner_types import AnnotatedEntry
from timesheet_kernel.exceptions import PersonScanError
from timesheet_services.timesheet_audit_service import TimesheetAuditReport

COLUMNS: tuple[tuple[str, str], ...] = (
    ("person", "Person"),
    ("entry_start", "Entry Start"),
    ("entry_end", "Entry End"),
    ("computed_hours", "Computed Hours"),
    ("previous_deduction", "Previous Deduction"),
    ("actual_hours", "Actual Hours"),
    ("work_type", "Work Type"),
    ("billable_code", "Billable"),
    ("error_kind", "Error"),
)

FORMATS = ("text", "csv", "json", "html")

# Error column value for persons whose scan raised
SCAN_FAILED = "Scan Failed"


def _fmt_hours(value: Decimal | None) -> str:
    if value is None:
        return ""
    return f"{value:.2f}"


def finding_row(finding: AnnotatedEntry) -> dict[str, str]:
    """Project a finding onto the report columns as display strings."""
    return {
        "person": finding.person_id,
        "entry_start": finding.start_display,
        "entry_end": finding.end_display,
        "computed_hours": _fmt_hours(finding.computed_hours),
        "previous_deduction": _fmt_hours(finding.previous_deduction),
        "actual_hours": _fmt_hours(finding.actual_hours),
        "work_type": finding.work_type or "",
        "billable_code": finding.billable_code or "",
        "error_kind": finding.error_kind.value,
    }


def failure_row(failure: PersonScanError) -> dict[str, str]:
    """A row standing in for a person whose findings are missing."""
    row = {key: "" for key, _ in COLUMNS}
    row["person"] = failure.person_id
    row["error_kind"] = SCAN_FAILED
    return row


def _rows(findings: Sequence[AnnotatedEntry]) -> list[dict[str, str]]:
    return [finding_row(f) for f in findings]


def _report_rows(report: TimesheetAuditReport) -> list[dict[str, str]]:
    return _rows(report.findings) + [failure_row(e) for e in report.failed_persons]


def _period_label(report: TimesheetAuditReport) -> str:
    p = report.period
    return f"{p.period_code} ({p.start} to {p.end})"


def render_text(report: TimesheetAuditReport) -> str:
    rows = _rows(report.findings)
    widths = {
        key: max([len(title)] + [len(r[key]) for r in rows])
        for key, title in COLUMNS
    }
    lines = [
        f"Timesheet audit for period {_period_label(report)}",
        f"  persons scanned: {report.persons_scanned}  "
        f"entries scanned: {report.entries_scanned}  "
        f"findings: {len(report.findings)}",
        "",
    ]
    if not rows:
        lines.append("  No suspected errors found.")
    else:
        lines.append("  ".join(title.ljust(widths[key]) for key, title in COLUMNS).rstrip())
        lines.append("  ".join("-" * widths[key] for key, _ in COLUMNS))
        for row in rows:
            lines.append("  ".join(row[key].ljust(widths[key]) for key, _ in COLUMNS).rstrip())

    for failure in report.failed_persons:
        lines.append(f"  ERROR: {failure}")
    return "\n".join(lines) + "\n"


def render_csv(report: TimesheetAuditReport) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=[key for key, _ in COLUMNS])
    writer.writerow({key: title for key, title in COLUMNS})
    writer.writerows(_report_rows(report))
    return buffer.getvalue()


def render_json(report: TimesheetAuditReport) -> str:
    payload = {
        "run_id": report.run_id,
        "period": {
            "code": report.period.period_code,
            "number": report.period.period,
            "start": report.period.start.isoformat(),
            "end": report.period.end.isoformat(),
        },
        "persons_scanned": report.persons_scanned,
        "entries_scanned": report.entries_scanned,
        "error_counts": {k.value: v for k, v in report.error_counts().items()},
        "findings": [
            dict(finding_row(f), record_number=f.record_number)
            for f in report.findings
        ],
        "failed_persons": [
            {"person": e.person_id, "entry_count": e.entry_count, "cause": e.cause}
            for e in report.failed_persons
        ],
    }
    return json.dumps(payload, indent=2) + "\n"


def render_html(report: TimesheetAuditReport) -> str:
    head = "".join(f"<th>{html.escape(title)}</th>" for _, title in COLUMNS)
    body = "".join(
        "<tr>" + "".join(f"<td>{html.escape(row[key])}</td>" for key, _ in COLUMNS) + "</tr>"
        for row in _report_rows(report)
    )
    title = html.escape(f"Timesheet audit {_period_label(report)}")
    return (
        "<!DOCTYPE html>\n"
        f"<html><head><meta charset=\"utf-8\"><title>{title}</title></head>\n"
        f"<body><h1>{title}</h1>\n"
        f"<table border=\"1\"><thead><tr>{head}</tr></thead>"
        f"<tbody>{body}</tbody></table>\n"
        "</body></html>\n"
    )


_RENDERERS: dict[str, Callable[[TimesheetAuditReport], str]] = {
    "text": render_text,
    "csv": render_csv,
    "json": render_json,
    "html": render_html,
}


def render_report(report: TimesheetAuditReport, fmt: str = "text") -> str:
    """Render a report in one of ``FORMATS``.

    Raises:
        ValueError: If ``fmt`` is not a known format.
    """
    try:
        renderer = _RENDERERS[fmt]
    except KeyError:
        raise ValueError(f"Unknown report format {fmt!r}; expected one of {FORMATS}") from None
    return renderer(report)
