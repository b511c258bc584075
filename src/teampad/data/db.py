"""aiosqlite connection for TeamPad's on-device storage."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from types import TracebackType
from typing import Any

import aiosqlite

logger = logging.getLogger(__name__)

MEMORY = ":memory:"

# version -> DDL bringing the previous version up to it
MIGRATIONS: dict[int, str] = {
    1: """
    CREATE TABLE IF NOT EXISTS kv (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
    );
    """,
}
SCHEMA_VERSION = max(MIGRATIONS)


class Database:
    """One aiosqlite connection to ``storage.db`` (or ``:memory:`` in tests).

    Use as ``async with Database(path) as db:``; the schema is migrated on
    connect. Rows come back as ``aiosqlite.Row`` so columns read by name.
    """

    def __init__(self, db_path: Path) -> None:
        self._path = db_path
        self._conn: aiosqlite.Connection | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def in_memory(self) -> bool:
        return str(self._path) == MEMORY

    @property
    def connected(self) -> bool:
        return self._conn is not None

    @property
    def conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            msg = f"Storage at {self._path} is not open; connect() it first"
            raise RuntimeError(msg)
        return self._conn

    async def __aenter__(self) -> Database:
        return await self.connect()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def connect(self) -> Database:
        if self._conn is not None:
            return self
        if not self.in_memory:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(str(self._path))
        conn.row_factory = aiosqlite.Row
        if not self.in_memory:
            await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA synchronous=NORMAL")
        self._conn = conn
        await self._migrate()
        logger.debug("Opened storage at %s (schema v%d)", self._path, SCHEMA_VERSION)
        return self

    async def close(self) -> None:
        conn, self._conn = self._conn, None
        if conn is not None:
            await conn.close()

    async def execute(self, sql: str, params: tuple[Any, ...] = ()) -> aiosqlite.Cursor:
        return await self.conn.execute(sql, params)

    async def fetch_all(self, sql: str, params: tuple[Any, ...] = ()) -> list[aiosqlite.Row]:
        async with self.conn.execute(sql, params) as cursor:
            return list(await cursor.fetchall())

    async def fetch_one(self, sql: str, params: tuple[Any, ...] = ()) -> aiosqlite.Row | None:
        async with self.conn.execute(sql, params) as cursor:
            return await cursor.fetchone()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Database]:
        """Commit the statements run inside the block, or roll them all back."""
        conn = self.conn
        try:
            yield self
        except BaseException:
            await conn.rollback()
            raise
        await conn.commit()

    async def schema_version(self) -> int:
        row = await self.fetch_one("SELECT value FROM app_meta WHERE key = 'schema_version'")
        if row is None or not str(row["value"]).isdigit():
            return 0
        return int(row["value"])

    async def _migrate(self) -> None:
        await self.conn.execute(
            "CREATE TABLE IF NOT EXISTS app_meta (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
        )
        found = await self.schema_version()
        if found > SCHEMA_VERSION:
            # Written by a newer TeamPad; values are opaque strings, so keep going.
            logger.warning(
                "Storage schema v%d is newer than v%d; leaving it as is", found, SCHEMA_VERSION
            )
            await self.conn.commit()
            return
        for version in range(found + 1, SCHEMA_VERSION + 1):
            logger.info("Migrating storage schema to v%d", version)
            await self.conn.executescript(MIGRATIONS[version])
            await self.conn.execute(
                "INSERT OR REPLACE INTO app_meta (key, value) VALUES ('schema_version', ?)",
                (str(version),),
            )
        await self.conn.commit()
