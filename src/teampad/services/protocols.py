"""Protocol definitions for services."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from result import Result

from teampad.models.errors import AuthError, ValidationError
from teampad.models.identity import AuthProvider, Identity
from teampad.models.projects import Project
from teampad.models.session import SessionState


class SessionControllerProtocol(Protocol):
    """Interface for authentication commands and session observation."""

    @property
    def state(self) -> SessionState: ...

    async def sign_up(
        self, email: str, password: str
    ) -> Result[Identity, ValidationError | AuthError]: ...

    async def sign_in(
        self, email: str, password: str
    ) -> Result[Identity, ValidationError | AuthError]: ...

    async def sign_in_federated(
        self, provider: AuthProvider | str
    ) -> Result[Identity, ValidationError | AuthError]: ...

    async def sign_out(self) -> None: ...

    def subscribe(self, on_change: Callable[[SessionState], None]) -> Callable[[], None]: ...

    def require_identity(self) -> Identity: ...


class ProjectRepositoryProtocol(Protocol):
    """Interface for per-identity project storage."""

    async def list(self, identity_key: str) -> list[Project]: ...

    async def create(
        self, identity_key: str, title: str, description: str
    ) -> Result[Project, ValidationError]: ...
