"""
Configuration Loader (``timesheet_config.loader``).

Responsibility
--------------
Loads the YAML configuration file, layers environment variables and
explicit overrides on top, and validates the result into a frozen
``AuditConfig``.

Precedence (lowest first): built-in defaults, YAML file, environment,
overrides passed by the caller (CLI flags).

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys or invalid values  -> ``InvalidConfigurationError``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import fields, replace
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from timesheet_config.schema import (
    AuditConfig,
    AuditSettings,
    DatabaseSettings,
    RuleSettings,
)
from timesheet_kernel.exceptions import InvalidConfigurationError

ENV_PREFIX = "TIMESHEET_AUDIT_"

# environment variable suffix -> (section, key)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "DATABASE_URL": ("database", "url"),
    "DATABASE": ("database", "name"),
    "TIMEZONE": ("audit", "timezone"),
    "WEEKS_AGO": ("audit", "weeks_ago"),
}

_SECTIONS: dict[str, type] = {
    "database": DatabaseSettings,
    "audit": AuditSettings,
    "rules": RuleSettings,
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        InvalidConfigurationError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise InvalidConfigurationError(str(path), type(data).__name__, "expected a mapping")
    return data


def _parse_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("1", "true", "yes", "on"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("0", "false", "no", "off"):
        return False
    raise InvalidConfigurationError(key, value, "expected a boolean")


def _parse_weeks_ago(value: Any) -> int:
    if isinstance(value, (bool, float)):
        raise InvalidConfigurationError("audit.weeks_ago", value, "expected an integer")
    try:
        weeks = int(value)
    except (TypeError, ValueError):
        raise InvalidConfigurationError("audit.weeks_ago", value, "expected an integer") from None
    if weeks < 0:
        raise InvalidConfigurationError("audit.weeks_ago", value, "must be a non-negative integer")
    return weeks


def _merge_section(section_name: str, current: Any, values: Mapping[str, Any]) -> Any:
    known = {f.name: f for f in fields(current)}
    updates: dict[str, Any] = {}
    for key, value in values.items():
        qualified = f"{section_name}.{key}"
        if key not in known:
            raise InvalidConfigurationError(qualified, value, "unknown setting")
        if known[key].type in ("bool",):
            value = _parse_bool(qualified, value)
        elif qualified == "audit.weeks_ago":
            value = _parse_weeks_ago(value)
        elif value is not None and not isinstance(value, str):
            value = str(value)
        updates[key] = value
    return replace(current, **updates)


def parse_config(
    data: Mapping[str, Any],
    base: AuditConfig | None = None,
    source: str | None = None,
) -> AuditConfig:
    """Layer a nested mapping ({section: {key: value}}) onto ``base``."""
    config = base or AuditConfig()
    updates: dict[str, Any] = {}
    for section_name, values in data.items():
        if section_name not in _SECTIONS:
            raise InvalidConfigurationError(section_name, values, "unknown section")
        if values is None:
            continue
        if not isinstance(values, Mapping):
            raise InvalidConfigurationError(section_name, values, "expected a mapping")
        current = updates.get(section_name, getattr(config, section_name))
        updates[section_name] = _merge_section(section_name, current, values)
    if source is not None:
        updates["source"] = source
    return replace(config, **updates)


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, dict[str, Any]]:
    """Collect TIMESHEET_AUDIT_* variables as a nested override mapping."""
    environ = os.environ if environ is None else environ
    overrides: dict[str, dict[str, Any]] = {}
    for suffix, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(f"{ENV_PREFIX}{suffix}")
        if value:
            overrides.setdefault(section, {})[key] = value
    return overrides


def validate_config(config: AuditConfig) -> AuditConfig:
    """Check cross-field constraints that parsing alone cannot."""
    if not config.database.url:
        raise InvalidConfigurationError("database.url", config.database.url, "must not be empty")
    try:
        ZoneInfo(config.audit.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidConfigurationError(
            "audit.timezone", config.audit.timezone, "unknown IANA timezone"
        ) from None
    if not config.audit.display_format:
        raise InvalidConfigurationError(
            "audit.display_format", config.audit.display_format, "must not be empty"
        )
    return config


def load_config(
    path: Path | str | None = None,
    *,
    overrides: Mapping[str, Mapping[str, Any]] | None = None,
    environ: Mapping[str, str] | None = None,
) -> AuditConfig:
    """
    Build the effective configuration.

    Args:
        path: Optional YAML file.
        overrides: Nested mapping applied last (CLI flags).  ``None`` values
            are ignored so unset flags do not clear file settings.
        environ: Environment mapping; defaults to ``os.environ``.
    """
    config = AuditConfig()
    if path is not None:
        config = parse_config(load_yaml_file(Path(path)), config, source=str(path))

    env = env_overrides(environ)
    if env:
        config = parse_config(env, config)

    if overrides:
        cleaned = {
            section: {k: v for k, v in values.items() if v is not None}
            for section, values in overrides.items()
        }
        config = parse_config({s: v for s, v in cleaned.items() if v}, config)

    return validate_config(config)
