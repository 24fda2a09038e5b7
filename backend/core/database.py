"""
Async storage for ingested matches, players and combat log entries.

One engine per process. Ingestion services commit once per finalized match
on the session handed to them; the session context below only commits what
is left at the end (player flushes, enrichment updates).
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

logger = logging.getLogger(__name__)

SQLITE_ASYNC_PREFIX = "sqlite+aiosqlite"


class DatabaseManager:
    """Engine and session factory for the match store."""

    def __init__(self, database_url: str) -> None:
        self._database_url = database_url
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None

    async def init(self) -> None:
        if self._engine is not None:
            return

        logger.info("Opening match store engine")
        self._engine = create_async_engine(
            self._database_url,
            echo=False,
            future=True,
        )

        if self._database_url.startswith(SQLITE_ASYNC_PREFIX):

            @event.listens_for(self._engine.sync_engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record) -> None:  # type: ignore[override]  # pragma: no cover
                # Entries and results reference matches and players; WAL lets
                # reads run while an upload is being committed match by match.
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                try:
                    cursor.execute("PRAGMA journal_mode=WAL")
                except Exception:
                    # in-memory databases reject WAL
                    logger.debug("SQLite WAL journal_mode not applied")
                finally:
                    cursor.close()

        # Matches returned from an upload are read after their commit.
        self._sessionmaker = async_sessionmaker(
            self._engine,
            expire_on_commit=False,
            class_=AsyncSession,
        )
        logger.info("Match store ready")

    async def create_schema(self) -> None:
        """Create the players, matches, match_results and combat_log_entries tables if missing."""
        if self._engine is None:
            raise RuntimeError("DatabaseManager is not initialized. Call init() first.")

        from models import Base

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Match store schema ensured (%s)", ", ".join(sorted(Base.metadata.tables)))

    async def dispose(self) -> None:
        if self._engine is not None:
            logger.info("Closing match store engine")
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session for one upload.

        Commits on success and rolls back on errors, including task
        cancellation, so the match in progress never lingers in the session.
        Matches committed earlier in the same upload are not affected.
        """
        if self._sessionmaker is None:
            raise RuntimeError("DatabaseManager is not initialized. Call init() first.")

        session: AsyncSession = self._sessionmaker()
        try:
            yield session
            await session.commit()
        except BaseException:
            await session.rollback()
            raise
        finally:
            await session.close()

    @property
    def engine(self) -> Optional[AsyncEngine]:
        return self._engine


_db_manager: Optional[DatabaseManager] = None


async def init_database(database_url: str) -> None:
    """Open the process-wide match store (no-op when already open)."""
    global _db_manager

    if _db_manager is None:
        _db_manager = DatabaseManager(database_url)
    await _db_manager.init()


async def create_schema() -> None:
    await get_database_manager().create_schema()


async def dispose_database() -> None:
    """Close the process-wide match store."""
    global _db_manager

    if _db_manager is not None:
        await _db_manager.dispose()
        _db_manager = None


def get_database_manager() -> DatabaseManager:
    if _db_manager is None:
        raise RuntimeError("Match store is not initialized; call init_database() first.")
    return _db_manager
