"""Async SQLite access layer for the world store.

Every ``aiosqlite``/``sqlite3`` failure leaves this module as a
``StorageError``. The connection runs in autocommit mode; multi-statement
writes and multi-query reads go through ``transaction()``.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Iterable

import aiosqlite

from core.errors import StorageError

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


class Database:
    """A single process-lifetime aiosqlite connection."""

    def __init__(self, connection: aiosqlite.Connection, db_path: str):
        self.db_path = db_path
        self._conn = connection
        self._lock = asyncio.Lock()
        self._owner: asyncio.Task | None = None

    @classmethod
    async def open(cls, db_path: str) -> Database:
        """Open (and create if needed) the database at ``db_path``."""
        if db_path != MEMORY_DB:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = await aiosqlite.connect(db_path, isolation_level=None)
            conn.row_factory = aiosqlite.Row
            await conn.execute("PRAGMA foreign_keys = ON")
        except aiosqlite.Error as e:
            raise StorageError(f"Unable to open database {db_path}: {e}") from e
        logger.info("Database opened at %s", db_path)
        return cls(conn, db_path)

    async def close(self) -> None:
        try:
            await self._conn.close()
        except aiosqlite.Error as e:
            raise StorageError(f"Unable to close database: {e}") from e
        logger.info("Database closed")

    async def execute(self, sql: str, params: Iterable[Any] = ()) -> int | None:
        """Run a statement; returns ``lastrowid``."""
        try:
            cursor = await self._conn.execute(sql, tuple(params))
            rowid = cursor.lastrowid
            await cursor.close()
            return rowid
        except aiosqlite.Error as e:
            raise StorageError(f"Statement failed: {e}") from e

    async def fetchone(self, sql: str, params: Iterable[Any] = ()) -> aiosqlite.Row | None:
        try:
            async with self._conn.execute(sql, tuple(params)) as cursor:
                return await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageError(f"Query failed: {e}") from e

    async def fetchall(self, sql: str, params: Iterable[Any] = ()) -> list[aiosqlite.Row]:
        try:
            async with self._conn.execute(sql, tuple(params)) as cursor:
                return list(await cursor.fetchall())
        except aiosqlite.Error as e:
            raise StorageError(f"Query failed: {e}") from e

    async def iterate(self, sql: str, params: Iterable[Any] = ()) -> AsyncIterator[aiosqlite.Row]:
        """Yield rows lazily. Finite and not restartable."""
        try:
            async with self._conn.execute(sql, tuple(params)) as cursor:
                async for row in cursor:
                    yield row
        except aiosqlite.Error as e:
            raise StorageError(f"Query failed: {e}") from e

    @asynccontextmanager
    async def transaction(self):
        """Run the block atomically.

        Re-entrant for the task that already holds the transaction; nested
        blocks simply join the outer one.
        """
        task = asyncio.current_task()
        if self._owner is not None and self._owner is task:
            yield self
            return

        async with self._lock:
            self._owner = task
            try:
                await self.execute("BEGIN")
                try:
                    yield self
                except BaseException:
                    await self._rollback()
                    raise
                await self.execute("COMMIT")
            finally:
                self._owner = None

    async def _rollback(self) -> None:
        try:
            await self._conn.execute("ROLLBACK")
        except aiosqlite.Error:
            logger.exception("Unable to roll back transaction")


@asynccontextmanager
async def get_db(db_path: str):
    """Async context manager yielding an open ``Database``."""
    db = await Database.open(db_path)
    try:
        yield db
    finally:
        await db.close()
