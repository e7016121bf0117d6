"""
Database engine and session management.

PostgreSQL (asyncpg) in deployment; SQLite (aiosqlite) for local runs and
tests. SQLite connections get foreign keys switched on so tenant deletes
cascade the same way on both backends.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from app.core.config import get_settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine, applying per-backend connection settings."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_async_engine(database_url, echo=echo, pool_pre_ping=True)

    kwargs = {"echo": echo, "connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        # One shared connection, otherwise every checkout sees an empty database
        kwargs["poolclass"] = StaticPool
    sqlite_engine = create_async_engine(database_url, **kwargs)
    event.listen(sqlite_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return sqlite_engine


settings = get_settings()

engine = build_engine(settings.database_url, echo=settings.debug)

async_session_factory = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db(target: AsyncEngine | None = None):
    """Create all tables from model metadata."""
    import app.models  # noqa: F401

    async with (target or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def check_db() -> None:
    """Round-trip a trivial query; raises when the database is unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def close_db() -> None:
    await engine.dispose()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def get_session_context():
    """Session for scripts and other code outside a request."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
