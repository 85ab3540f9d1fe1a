"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode — create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.

There is no module-level engine. create_app() builds one Database handle,
stores it on app.state, and the lifespan disposes it at shutdown. get_db()
pulls the handle off the running app, so every request talks to the pool
owned by the app that received it.
"""

from collections.abc import AsyncIterator

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskflow.db.models import Base


class Database:
    """Engine + session factory for one process lifetime."""

    def __init__(self, url: str, *, echo: bool = False):
        self.url = url
        engine_kwargs: dict = {"echo": echo}
        if not url.startswith("sqlite"):
            # Connection pool: min 5, max 20 connections.
            engine_kwargs.update(pool_size=5, max_overflow=15, pool_pre_ping=True)
        self.engine = create_async_engine(url, **engine_kwargs)

        if url.startswith("sqlite"):
            # SQLite ignores ON DELETE CASCADE unless foreign keys are enabled.
            @event.listens_for(self.engine.sync_engine, "connect")
            def _enable_sqlite_foreign_keys(dbapi_connection, _record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        # Session factory: each request gets its own session.
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        """Create every table (development/tests — use Alembic in production)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency — yields a session per request, auto-closes."""
    database: Database = request.app.state.db
    async with database.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
