"""Async database engine, session factory and the single-writer session dependency."""

from __future__ import annotations

import asyncio

from sqlalchemy import event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .config import settings
from .errors import StoreError


def build_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine; SQLite connections get foreign keys and a busy timeout."""
    eng = create_async_engine(database_url, echo=echo)

    @event.listens_for(eng.sync_engine, "handle_error")
    def _wrap_store_errors(context):
        # Constraint violations stay IntegrityError; the callers map them to conflicts.
        if isinstance(context.sqlalchemy_exception, IntegrityError):
            return None
        raise StoreError(
            f"Store operation failed: {context.original_exception}"
        ) from (context.sqlalchemy_exception or context.original_exception)

    if database_url.startswith("sqlite"):

        @event.listens_for(eng.sync_engine, "connect")
        def _sqlite_pragmas(dbapi_conn, _record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute(f"PRAGMA busy_timeout={int(settings.sqlite_busy_timeout_ms)}")
            cursor.close()

    return eng


engine = build_engine(settings.database_url, echo=settings.echo_sql)
async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

# Every request's store work runs behind this lock: one logical writer per process.
write_lock = asyncio.Lock()


async def get_db():
    """FastAPI dependency that yields an async session while holding the writer lock."""
    async with write_lock:
        async with async_session_factory() as session:
            yield session
