# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Database engine management.

Supports:
- PostgreSQL via asyncpg (production)
- SQLite via aiosqlite (development / tests)

The active backend is determined by DATABASE_URL in settings. A single
Database instance is created at process start and handed to the services
that need a session factory.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..core.settings import DatabaseSettings

logger = logging.getLogger(__name__)


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


class Database:
    """Owns the async engine and session factory."""

    def __init__(self, settings: DatabaseSettings):
        self.settings = settings
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def url(self) -> str:
        return self.settings.url

    async def init(self, create_tables: bool | None = None) -> None:
        """Create the async engine and session factory.

        For SQLite, also creates tables directly from metadata
        unless create_tables is False. PostgreSQL uses Alembic.
        """
        url = self.settings.url
        engine_kwargs: dict = {}

        if _is_sqlite(url):
            engine_kwargs.update(
                connect_args={"check_same_thread": False},
                pool_pre_ping=False,
            )
            logger.info("Initializing SQLite database: %s", url)
        else:
            engine_kwargs.update(
                pool_size=self.settings.pool_size,
                max_overflow=self.settings.max_overflow,
                pool_pre_ping=True,
            )
            logger.info("Initializing PostgreSQL database")

        self._engine = create_async_engine(url, echo=self.settings.echo, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        if create_tables is None:
            create_tables = _is_sqlite(url)
        if create_tables:
            await self.create_all()

        logger.info("Database initialized")

    async def create_all(self) -> None:
        """Create tables from ORM metadata."""
        from .models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Tables created from ORM metadata")

    async def close(self) -> None:
        """Dispose the engine and release all connections."""
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("Database connections closed")
        self._engine = None
        self._session_factory = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self._session_factory

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session committed on success and rolled back on exception."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise


__all__ = ["Database"]
