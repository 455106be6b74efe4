"""
Audit configuration schema.

Frozen dataclasses the loader parses YAML, environment variables and CLI
overrides into.  Defaults here are the built-in baseline every other source
layers on top of.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_DATABASE_URL = "sqlite:///timesheet_audit.db"

# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseSettings:
    """Where the time-tracking tables live."""

    url: str = DEFAULT_DATABASE_URL
    name: str | None = None  # dataset identifier; replaces the URL's database
    echo: bool = False


@dataclass(frozen=True)
class AuditSettings:
    """Which period and persons to audit, and how to show times."""

    weeks_ago: int = 0
    person_id: str | None = None
    timezone: str = "UTC"
    display_format: str = "%Y-%m-%d %H:%M"


@dataclass(frozen=True)
class RuleSettings:
    """Labels used by the scanner rules."""

    clock_in_out_work_type: str = "Clock In/Out"
    travel_to_work_type: str = "Travel To"
    travel_from_work_type: str = "Travel From"
    onsite_work_type: str = "Onsite"
    no_charge_code: str = "NC"
    skipped_entries_advance_previous: bool = True


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AuditConfig:
    """Complete configuration for one audit run."""

    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    audit: AuditSettings = field(default_factory=AuditSettings)
    rules: RuleSettings = field(default_factory=RuleSettings)
    source: str = "defaults"  # where the config came from, for logging
