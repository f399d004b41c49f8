"""Persistent store: ORM models, engine/session management, migrations and live queries."""

from .session import (
    Base,
    SessionLocal,
    create_tables,
    get_change_notifier,
    get_db,
    get_engine,
    get_sessionmaker,
    store_transaction,
)

__all__ = [
    "Base",
    "SessionLocal",
    "create_tables",
    "get_change_notifier",
    "get_db",
    "get_engine",
    "get_sessionmaker",
    "store_transaction",
]
