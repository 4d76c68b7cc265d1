"""Declarative base, the app-wide async engine, and schema bootstrap.

Production runs on Postgres through asyncpg; tests and local runs may point
DATABASE_URL at SQLite through aiosqlite. Tables are created on startup with
`create_all`, there are no migrations.
"""

from typing import Any

from sqlalchemy import JSON, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from galuxium.core.config import get_settings

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    pass


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def engine_options(db_url: str, echo: bool = False) -> dict[str, Any]:
    """create_async_engine kwargs for the given backend.

    In-memory SQLite needs one shared connection or every session sees an
    empty database; pool_pre_ping only makes sense for networked servers.
    """
    options: dict[str, Any] = {"echo": echo}
    if db_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        if ":memory:" in db_url:
            options["poolclass"] = StaticPool
    else:
        options["pool_pre_ping"] = True
    return options


async def init_db(url: str | None = None) -> None:
    """Create the engine and session factory once, then create missing tables."""
    global _engine, _session_factory

    if _engine is not None:
        return

    settings = get_settings()
    db_url = url or settings.database_url

    _engine = create_async_engine(db_url, **engine_options(db_url, echo=settings.debug))
    _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)

    # Populate metadata before create_all
    import galuxium.db.models  # noqa: F401

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the configured session factory.

    Raises RuntimeError if init_db() has not been called.
    """
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _session_factory


async def ping(session_factory: async_sessionmaker[AsyncSession]) -> None:
    """Round-trip a trivial query. Raises whatever the driver raises."""
    async with session_factory() as session:
        await session.execute(text("SELECT 1"))
