"""Database layer - engine, base classes, and types."""

from timesheet_kernel.db.base import Base, UUIDString
from timesheet_kernel.db.engine import (
    build_database_url,
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    session_scope,
)

__all__ = [
    "Base",
    "UUIDString",
    "build_database_url",
    "create_tables",
    "get_engine",
    "get_session",
    "init_engine_from_url",
    "session_scope",
]
