"""Protocol definitions for identity providers."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

type ProviderUser = dict[str, Any]
type SessionListener = Callable[[ProviderUser | None], None]


class IdentityProvider(Protocol):
    """External identity service boundary.

    Calls return provider-native user records and raise ``ProviderError``
    with a provider code on failure. Session changes are reported only
    through ``on_session_change`` listeners (``None`` means signed out).
    """

    async def create_account(self, email: str, password: str) -> ProviderUser: ...

    async def authenticate(self, email: str, password: str) -> ProviderUser: ...

    async def authenticate_federated(self, provider_id: str) -> ProviderUser: ...

    async def end_session(self) -> None: ...

    async def restore_session(self) -> None: ...

    def on_session_change(self, listener: SessionListener) -> Callable[[], None]: ...
