"""
Async SQLAlchemy engine and per-request sessions.

The engine is built on first use so importing models never opens a
connection.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from civic.config import get_settings


class Base(DeclarativeBase):
    """Declarative base shared by every ORM model (petitions, surveys)."""


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    options: dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
    # sqlite (tests, local dev) cannot take a sized pool
    if make_url(database_url).get_backend_name() != "sqlite":
        options.update(pool_size=5, max_overflow=10)
    return create_async_engine(database_url, **options)


class Database:
    """One engine and its session factory."""

    def __init__(self, database_url: str, echo: bool = False) -> None:
        self.database_url = database_url
        self._echo = echo
        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker[AsyncSession] | None = None

    def _factory(self) -> async_sessionmaker[AsyncSession]:
        if self._sessions is None:
            self._engine = build_engine(self.database_url, self._echo)
            self._sessions = async_sessionmaker(
                self._engine,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._sessions

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session committed on success and rolled back on error."""
        async with self._factory()() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._sessions = None


_database: Database | None = None


def get_database() -> Database:
    global _database
    if _database is None:
        settings = get_settings()
        _database = Database(settings.database_url, echo=settings.debug)
    return _database


async def close_database() -> None:
    global _database
    if _database is not None:
        await _database.dispose()
        _database = None


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    async with get_database().session() as session:
        yield session
