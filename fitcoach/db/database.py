"""Database engine and session management.

A single :class:`Database` is built when the application starts and stored on
``app.state``; request handlers receive sessions from it through the
:func:`get_db` dependency instead of reaching for a module-level engine.
"""
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from fitcoach.config.settings import Settings
from fitcoach.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def _engine_options(url: str, settings: Settings | None) -> dict:
    if url.startswith("sqlite"):
        # In-memory SQLite lives in a single connection, share it across sessions.
        options: dict = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.endswith("://"):
            options["poolclass"] = StaticPool
        return options
    return {
        "pool_size": settings.database_pool_size if settings else 10,
        "max_overflow": settings.database_max_overflow if settings else 10,
        "pool_timeout": 30,
        "pool_recycle": 300,
        "pool_pre_ping": True,
    }


class Database:
    """Owns the async engine and session factory for the process lifetime."""

    def __init__(self, url: str, echo: bool = False, settings: Settings | None = None):
        if not url:
            raise ConfigurationError("DATABASE_URL is not set")
        self.url = url
        self.engine: AsyncEngine = create_async_engine(
            url,
            echo=echo,
            **_engine_options(url, settings),
        )
        self.session_maker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.database_url, echo=settings.debug, settings=settings)

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    async def create_all(self) -> None:
        """Create tables for every model registered on ``Base``."""
        # Import models so their tables are attached to the metadata.
        import fitcoach.models  # noqa: F401

        async with self.engine.begin() as conn:
            if self.is_sqlite:
                await conn.execute(text("PRAGMA foreign_keys=ON"))
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Session scope that commits on success and rolls back on error."""
        async with self.session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(text("SELECT 1"))
                return result.scalar() == 1
        except Exception as e:
            logger.warning(f"Database health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise ConfigurationError("Database is not initialized")
    return database


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Dependency that provides a request-scoped session.

    Everything a request writes is committed together when the handler
    returns, or rolled back if it raises.
    """
    database = get_database(request)
    async with database.session() as session:
        yield session
