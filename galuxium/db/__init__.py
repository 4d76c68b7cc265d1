"""Database package: shared engine, session factory, and artifact store."""

from galuxium.db.base import Base, close_db, get_session_factory, init_db, ping

__all__ = [
    "Base",
    "close_db",
    "get_session_factory",
    "init_db",
    "ping",
]
