"""Protocol definitions for data access."""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol


class DatabaseProtocol(Protocol):
    """The slice of ``Database`` the key-value store relies on."""

    async def execute(self, sql: str, params: tuple[Any, ...] = ()) -> Any: ...

    async def fetch_all(self, sql: str, params: tuple[Any, ...] = ()) -> list[Any]: ...

    async def fetch_one(self, sql: str, params: tuple[Any, ...] = ()) -> Any | None: ...

    def transaction(self) -> AbstractAsyncContextManager[Any]: ...


class KeyValueStore(Protocol):
    """Local key to string storage, the device-storage boundary.

    A missing key is a valid empty state and reads as ``None``. Failures
    raise ``StorageFault``.
    """

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...

