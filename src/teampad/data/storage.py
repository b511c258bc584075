"""Key-value stores backing sessions, accounts and project collections."""

from __future__ import annotations

from typing import TYPE_CHECKING

import aiosqlite

from teampad.models.errors import StorageFault

if TYPE_CHECKING:
    from teampad.data.protocols import DatabaseProtocol


class SqliteKeyValueStore:
    """Key-value store on the ``kv`` table.

    Every ``set`` is one ``INSERT OR REPLACE`` committed on its own, so a
    reader sees either the previous value or the new one.
    """

    def __init__(self, db: DatabaseProtocol) -> None:
        self._db = db

    async def get(self, key: str) -> str | None:
        try:
            row = await self._db.fetch_one("SELECT value FROM kv WHERE key = ?", (key,))
        except (aiosqlite.Error, RuntimeError) as exc:
            raise StorageFault(key, f"read failed: {exc}") from exc
        if row is None:
            return None
        return str(row["value"])

    async def set(self, key: str, value: str) -> None:
        try:
            async with self._db.transaction():
                await self._db.execute(
                    """INSERT OR REPLACE INTO kv (key, value, updated_at)
                       VALUES (?, ?, strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))""",
                    (key, value),
                )
        except (aiosqlite.Error, RuntimeError) as exc:
            raise StorageFault(key, f"write failed: {exc}") from exc

    async def delete(self, key: str) -> None:
        try:
            async with self._db.transaction():
                await self._db.execute("DELETE FROM kv WHERE key = ?", (key,))
        except (aiosqlite.Error, RuntimeError) as exc:
            raise StorageFault(key, f"delete failed: {exc}") from exc


class MemoryKeyValueStore:
    """In-process store; nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)
