"""
Config -> Engine / Kernel Bridges.

Functions that convert an ``AuditConfig`` into the inputs the scanner engine
and the kernel expect.  They live in timesheet_config (the producer) because
neither the engines nor the kernel import timesheet_config.

Usage:
    from timesheet_config.bridges import build_scan_rules, resolve_timezone

    config = get_audit_config(path)
    rules = build_scan_rules(config)
    local_tz = resolve_timezone(config)
"""

from __future__ import annotations

from zoneinfo import ZoneInfo

from sqlalchemy.engine import URL

from timesheet_config.schema import AuditConfig
from timesheet_engines.scanner_types import ScanRules
from timesheet_kernel.db.engine import build_database_url


def build_scan_rules(config: AuditConfig) -> ScanRules:
    """ScanRules carrying the configured labels and skipped-entry policy."""
    rules = config.rules
    return ScanRules(
        clock_in_out_work_type=rules.clock_in_out_work_type,
        travel_to_work_type=rules.travel_to_work_type,
        travel_from_work_type=rules.travel_from_work_type,
        onsite_work_type=rules.onsite_work_type,
        no_charge_code=rules.no_charge_code,
        skipped_entries_advance_previous=rules.skipped_entries_advance_previous,
    )


def resolve_timezone(config: AuditConfig) -> ZoneInfo:
    return ZoneInfo(config.audit.timezone)


def build_database_target(config: AuditConfig) -> URL:
    """Connection URL with the configured dataset selected."""
    return build_database_url(config.database.url, config.database.name)
