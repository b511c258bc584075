"""Service container with DI wiring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from teampad.data.db import Database
from teampad.data.storage import SqliteKeyValueStore
from teampad.providers.firebase import FirebaseIdentityProvider
from teampad.providers.local import LocalIdentityProvider
from teampad.services.navigation import Navigator
from teampad.services.project_repository import ProjectRepository
from teampad.services.session_controller import SessionController, Subscription

if TYPE_CHECKING:
    from teampad.config import Config
    from teampad.providers.base import ConsentFlow

BACKENDS = ("local", "firebase")


@dataclass
class ServiceContainer:
    """Holds all application services. Built once at startup, passed explicitly."""

    config: Config
    db: Database
    store: SqliteKeyValueStore
    provider: LocalIdentityProvider | FirebaseIdentityProvider
    session: SessionController
    navigator: Navigator
    projects: ProjectRepository
    navigation_subscription: Subscription

    @classmethod
    async def create(cls, config: Config, consent: ConsentFlow | None = None) -> ServiceContainer:
        """Async factory that wires all dependencies and resolves the session."""
        if config.backend not in BACKENDS:
            msg = f"Unknown identity backend {config.backend!r}; expected one of {BACKENDS}"
            raise ValueError(msg)
        db = Database(config.db_path)
        await db.connect()
        store = SqliteKeyValueStore(db)

        provider: LocalIdentityProvider | FirebaseIdentityProvider
        if config.backend == "firebase":
            provider = FirebaseIdentityProvider(store, config.firebase_api_key, consent=consent)
        else:
            provider = LocalIdentityProvider(store, consent=consent)

        session = SessionController(provider, min_password_length=config.min_password_length)
        navigator = Navigator()
        navigation_subscription = session.subscribe(navigator.on_session_change)
        projects = ProjectRepository(store)
        await session.start()

        return cls(
            config=config,
            db=db,
            store=store,
            provider=provider,
            session=session,
            navigator=navigator,
            projects=projects,
            navigation_subscription=navigation_subscription,
        )

    async def close(self) -> None:
        """Shut down all services."""
        self.navigation_subscription()
        await self.session.close()
        if isinstance(self.provider, FirebaseIdentityProvider):
            await self.provider.aclose()
        await self.db.close()
