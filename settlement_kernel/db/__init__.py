"""Database layer - engine, base classes, record store, and immutability."""

from settlement_kernel.db.base import UUID, Base, MoneyDecimal, TrackedBase, UTCDateTime, UUIDString
from settlement_kernel.db.engine import (
    build_engine,
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    session_scope,
)
from settlement_kernel.db.record_store import RecordStore

__all__ = [
    "build_engine",
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "MoneyDecimal",
    "UTCDateTime",
    "UUID",
    "RecordStore",
]
