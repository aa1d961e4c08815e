"""Database connections and session management.

Two independent databases back the service: one for the movie library and
one for the manga library. Both engines are created at startup and kept on
``app.state``; handlers receive sessions through the dependencies below.
"""

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from mediavault.config import Settings
from mediavault.models.base import MangaBase, MovieBase


@dataclass
class Databases:
    """Engines and session factories for both libraries."""

    movies_engine: AsyncEngine
    manga_engine: AsyncEngine
    movies_session_maker: async_sessionmaker[AsyncSession]
    manga_session_maker: async_sessionmaker[AsyncSession]

    async def dispose(self) -> None:
        await self.movies_engine.dispose()
        await self.manga_engine.dispose()


def _engine_options(url: str, echo: bool) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
    if make_url(url).get_backend_name() != "sqlite":
        options.update(pool_size=10, max_overflow=20, pool_timeout=30, pool_recycle=1800)
    return options


def _ensure_sqlite_dir(url: str) -> None:
    """SQLite creates the file but not its parent directory."""
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database and parsed.database != ":memory:":
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)


def make_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


def create_databases(settings: Settings) -> Databases:
    """Create both engines from settings."""
    echo = settings.is_development
    for url in (settings.movies_database_url, settings.manga_database_url):
        _ensure_sqlite_dir(url)

    movies_engine = create_async_engine(
        settings.movies_database_url, **_engine_options(settings.movies_database_url, echo)
    )
    manga_engine = create_async_engine(
        settings.manga_database_url, **_engine_options(settings.manga_database_url, echo)
    )
    return Databases(
        movies_engine=movies_engine,
        manga_engine=manga_engine,
        movies_session_maker=make_session_maker(movies_engine),
        manga_session_maker=make_session_maker(manga_engine),
    )


async def init_db(databases: Databases) -> None:
    """Create missing tables in both databases.

    The scanner normally owns the schema; this only fills gaps for a fresh
    local setup and never alters existing tables.
    """
    async with databases.movies_engine.begin() as conn:
        await conn.run_sync(MovieBase.metadata.create_all)
    async with databases.manga_engine.begin() as conn:
        await conn.run_sync(MangaBase.metadata.create_all)


async def get_movies_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting a movies database session."""
    databases: Databases = request.app.state.databases
    async with databases.movies_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_manga_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting a manga database session."""
    databases: Databases = request.app.state.databases
    async with databases.manga_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
