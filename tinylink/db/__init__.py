"""Database module for the TinyLink service."""
from tinylink.db.base import (
    engine,
    get_engine,
    async_session_factory,
    make_session_factory,
    create_tables,
    dispose_engine,
    DatabaseHealthCheck,
)
from tinylink.db.session import get_db, db_transaction, safe_rollback

__all__ = [
    "engine",
    "get_engine",
    "async_session_factory",
    "make_session_factory",
    "create_tables",
    "dispose_engine",
    "DatabaseHealthCheck",
    "get_db",
    "db_transaction",
    "safe_rollback",
]
