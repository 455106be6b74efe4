"""
timesheet_config -- single public entrypoint for audit configuration.

Responsibility:
    Provides the one way to obtain configuration at runtime through
    ``get_audit_config()``.  Services and scripts never read YAML files or
    TIMESHEET_AUDIT_* environment variables themselves.

Architecture position:
    Configuration -- sits above ``timesheet_kernel`` and ``timesheet_engines``
    and below ``timesheet_services`` / ``scripts``.  The kernel and engines
    MUST NEVER import from ``timesheet_config``; ``bridges`` translates the
    config into their inputs.

Failure modes:
    - ``FileNotFoundError`` -- the requested YAML file does not exist.
    - ``InvalidConfigurationError`` -- unknown keys or invalid values.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from timesheet_config.loader import load_config
from timesheet_config.schema import (
    AuditConfig,
    AuditSettings,
    DatabaseSettings,
    RuleSettings,
)
from timesheet_kernel.logging_config import get_logger

_logger = get_logger("config")


def get_audit_config(
    path: Path | str | None = None,
    *,
    overrides: Mapping[str, Mapping[str, Any]] | None = None,
    environ: Mapping[str, str] | None = None,
) -> AuditConfig:
    """The public configuration entrypoint.

    Emits a ``config_loaded`` log record naming the source, the dataset and
    the timezone (never the full database URL, which may hold credentials).
    """
    config = load_config(path, overrides=overrides, environ=environ)
    _logger.info(
        "config_loaded",
        extra={
            "config_source": config.source,
            "database": config.database.name,
            "timezone": config.audit.timezone,
            "weeks_ago": config.audit.weeks_ago,
        },
    )
    return config


__all__ = [
    "AuditConfig",
    "AuditSettings",
    "DatabaseSettings",
    "RuleSettings",
    "get_audit_config",
]
