"""
Polystore CRUD API — Relational Store (MySQL) Connection Manager
=================================================================

What:  Async SQLAlchemy engine, session factory, and schema bootstrap for
       the `produto` table.
Why:   Centralizes all MySQL connection logic in one injectable object.
How:   RelationalStore wraps an async engine with a bounded connection pool
       and hands out sessions that commit on success and roll back on error.
Who:   Built by the app lifespan (or injected by tests); reached by route
       handlers through crud_api.deps.
When:  Engine is created once at startup; sessions are created per-request.

Connection Pooling Strategy:
    pool_size=10:      Fixed number of pooled connections
    max_overflow=0:    Bounded; no temporary connections beyond the pool
    pool_timeout:      Long wait (default 1h) so waiting requests queue up
                       instead of being rejected when the pool is exhausted
    pool_pre_ping:     Validates connections before use (catches stale connections)
    pool_recycle=3600: Recycles connections every hour (MySQL wait_timeout)
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from crud_api.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    The shared metadata is what POST /init-db creates, so every model must
    be imported before RelationalStore.init_schema() runs (crud_api.models
    modules are imported by the product service).
    """
    pass


def build_engine(config: Settings) -> AsyncEngine:
    """
    Create the async engine for the configured URL.

    Pool arguments are only passed for server databases; SQLite (used by the
    test suite through aiosqlite) manages its own pool.
    """
    url = config.sqlalchemy_url
    engine_kwargs = {"echo": config.log_level == "DEBUG"}
    if make_url(url).get_backend_name() != "sqlite":
        engine_kwargs.update(
            pool_size=config.db_pool_size,
            max_overflow=0,
            pool_timeout=config.db_pool_timeout,
            pool_pre_ping=config.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(url, **engine_kwargs)


class RelationalStore:
    """
    Long-lived handle to the MySQL pool.

    Operations:
        - session():      request-scoped AsyncSession (commit / rollback / close)
        - ping():         SELECT 1 connectivity check
        - init_schema():  CREATE TABLE IF NOT EXISTS for all registered models
        - dispose():      close all pooled connections at shutdown
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        # expire_on_commit=False: attributes stay readable after the commit
        # performed at the end of the request
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "RelationalStore":
        config = config or default_settings
        store = cls(build_engine(config))
        logger.info(
            "Relational store configured: %s",
            make_url(config.sqlalchemy_url).render_as_string(hide_password=True),
        )
        return store

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Yield a session, commit on success, roll back on any error.

        Each handler issues a single statement, so the transaction boundary
        is exactly that statement. Write paths commit explicitly before
        returning; the final commit here only closes read transactions.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1 AS test"))

    async def init_schema(self) -> None:
        """
        Create missing tables.

        How:  MetaData.create_all with checkfirst=True, i.e. CREATE TABLE only
              for tables that do not exist yet. Calling it twice leaves the
              schema unchanged.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)

    async def dispose(self) -> None:
        """Closes all connections in the pool (called at shutdown)."""
        await self.engine.dispose()
