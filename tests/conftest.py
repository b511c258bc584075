"""Shared fixtures for TeamPad tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any

import argon2
import pytest

from teampad.config import Config
from teampad.data.db import Database
from teampad.data.storage import MemoryKeyValueStore, SqliteKeyValueStore
from teampad.models.errors import ProviderError, StorageFault
from teampad.models.identity import AuthProvider
from teampad.providers.base import FederatedCredential
from teampad.providers.local import LocalIdentityProvider
from teampad.services.session_controller import SessionController


class FakeProvider:
    """Identity provider double that records calls and emits on demand."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.listeners: list[Callable[[dict[str, Any] | None], None]] = []
        self.persisted: dict[str, Any] | None = None
        self.error: ProviderError | None = None
        self.emit_on_success = True

    def on_session_change(
        self, listener: Callable[[dict[str, Any] | None], None]
    ) -> Callable[[], None]:
        self.listeners.append(listener)
        return lambda: self.listeners.remove(listener)

    def emit(self, user: dict[str, Any] | None) -> None:
        for listener in list(self.listeners):
            listener(user)

    async def restore_session(self) -> None:
        self.emit(self.persisted)

    async def create_account(self, email: str, password: str) -> dict[str, Any]:
        return self._succeed("create_account", {"email": email, "providerId": "password"})

    async def authenticate(self, email: str, password: str) -> dict[str, Any]:
        return self._succeed("authenticate", {"email": email, "providerId": "password"})

    async def authenticate_federated(self, provider_id: str) -> dict[str, Any]:
        return self._succeed(
            "authenticate_federated",
            {"email": "fed@example.com", "providerId": provider_id, "displayName": "Fed"},
        )

    async def end_session(self) -> None:
        self.calls.append(("end_session", ()))
        self.emit(None)

    def _succeed(self, name: str, user: dict[str, Any]) -> dict[str, Any]:
        self.calls.append((name, (user["email"],)))
        if self.error is not None:
            raise self.error
        if self.emit_on_success:
            self.emit(user)
        return user


class FlakyStore(MemoryKeyValueStore):
    """Memory store whose reads or writes can be made to fail."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        super().__init__(initial)
        self.fail_reads = False
        self.fail_writes = False
        self.writes = 0

    async def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise StorageFault(key, "disk unavailable")
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageFault(key, "disk full")
        self.writes += 1
        await super().set(key, value)


@pytest.fixture
def fast_hasher() -> argon2.PasswordHasher:
    """Argon2 hasher with minimal cost so tests stay fast."""
    return argon2.PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def consent_answers() -> list[FederatedCredential | None]:
    """Queue of answers the fake consent flow gives, in order."""
    return []


@pytest.fixture
def local_provider(
    memory_store: MemoryKeyValueStore,
    fast_hasher: argon2.PasswordHasher,
    consent_answers: list[FederatedCredential | None],
) -> LocalIdentityProvider:
    async def consent(provider: AuthProvider) -> FederatedCredential | None:
        return consent_answers.pop(0) if consent_answers else None

    return LocalIdentityProvider(memory_store, consent=consent, hasher=fast_hasher)


@pytest.fixture
async def controller(
    local_provider: LocalIdentityProvider,
) -> AsyncGenerator[SessionController]:
    """Started controller on the local provider, resolved to SignedOut."""
    session = SessionController(local_provider)
    await session.start()
    await session.settle()
    yield session  # type: ignore[misc]
    await session.close()


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
async def in_memory_db() -> AsyncGenerator[Database]:
    """SQLite in-memory database for fast unit/integration tests."""
    db = Database(Path(":memory:"))
    await db.__aenter__()
    yield db  # type: ignore[misc]
    await db.__aexit__(None, None, None)


@pytest.fixture
def sqlite_store(in_memory_db: Database) -> SqliteKeyValueStore:
    return SqliteKeyValueStore(in_memory_db)


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Config pointing at a temporary data directory."""
    return Config(data_dir=tmp_path / "data")
