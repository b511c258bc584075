"""Per-identity project storage on the local key-value store."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pydantic
from result import Err, Ok, Result

from teampad.models.errors import StorageFault, ValidationError
from teampad.models.projects import (
    Project,
    ProjectCollection,
    projects_key,
)
from teampad.services.forms import validate_project

if TYPE_CHECKING:
    from teampad.data.protocols import KeyValueStore

logger = logging.getLogger(__name__)

type StorageFaultCallback = Callable[[StorageFault], None]


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class ProjectRepository:
    """Create and list projects, partitioned by identity key.

    The collection for an identity is read once per repository and then
    kept in memory; every create rewrites the whole collection with a
    single store write. Writes for one identity run one at a time.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        on_storage_fault: StorageFaultCallback | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._store = store
        self._on_storage_fault = on_storage_fault
        self._clock = clock
        self._collections: dict[str, list[Project]] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def set_storage_fault_callback(self, callback: StorageFaultCallback | None) -> None:
        self._on_storage_fault = callback

    async def list(self, identity_key: str) -> list[Project]:
        """Projects of ``identity_key`` in creation order; empty when none exist."""
        _require_key(identity_key)
        return list(await self._load(identity_key))

    async def create(
        self, identity_key: str, title: str, description: str
    ) -> Result[Project, ValidationError]:
        """Validate, append and persist a new project."""
        _require_key(identity_key)
        invalid = validate_project(title, description)
        if invalid is not None:
            return Err(invalid)

        async with self._lock_for(identity_key):
            current = await self._load(identity_key)
            project = Project(
                id=self._next_id(current),
                title=title.strip(),
                description=description.strip(),
                created_at=datetime.now(tz=UTC),
                owner_key=identity_key,
            )
            updated = [*current, project]
            self._collections[identity_key] = updated
            await self._persist(identity_key, updated)

        logger.info("Created project %s for %s", project.id, identity_key)
        return Ok(project)

    def _lock_for(self, identity_key: str) -> asyncio.Lock:
        lock = self._locks.get(identity_key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[identity_key] = lock
        return lock

    def _next_id(self, current: list[Project]) -> str:
        candidate = self._clock()
        for project in current:
            if project.id.isdigit():
                candidate = max(candidate, int(project.id) + 1)
        return str(candidate)

    async def _load(self, identity_key: str) -> list[Project]:
        cached = self._collections.get(identity_key)
        if cached is not None:
            return cached
        key = projects_key(identity_key)
        try:
            raw = await self._store.get(key)
        except StorageFault as exc:
            logger.warning("Reading %s failed; showing no projects: %s", key, exc.message)
            self._report(exc)
            return []
        projects: list[Project] = []
        if raw:
            try:
                projects = ProjectCollection.validate_json(raw)
            except pydantic.ValidationError:
                logger.warning("Stored projects under %s are corrupted; treating as empty", key)
                projects = []
        visible = [p for p in projects if p.owner_key == identity_key]
        if len(visible) != len(projects):
            logger.warning("Dropped %d foreign projects from %s", len(projects) - len(visible), key)
        self._collections[identity_key] = visible
        return visible

    async def _persist(self, identity_key: str, projects: list[Project]) -> None:
        key = projects_key(identity_key)
        payload = ProjectCollection.dump_json(projects, by_alias=True).decode()
        try:
            await self._store.set(key, payload)
        except StorageFault as exc:
            logger.warning("Saving %s failed; keeping projects in memory: %s", key, exc.message)
            self._report(exc)

    def _report(self, fault: StorageFault) -> None:
        if self._on_storage_fault is not None:
            self._on_storage_fault(fault)


def _require_key(identity_key: str) -> None:
    if not identity_key:
        msg = "identity_key is required; projects are only reachable for a signed-in identity"
        raise ValueError(msg)
