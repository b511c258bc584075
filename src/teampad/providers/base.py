"""Provider codes and the persisted-session base shared by identity providers."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from pydantic import BaseModel

from teampad.models.errors import StorageFault
from teampad.models.identity import AuthProvider

if TYPE_CHECKING:
    from teampad.data.protocols import KeyValueStore
    from teampad.providers.protocols import ProviderUser, SessionListener

logger = logging.getLogger(__name__)

# Firebase Auth error codes, used as the provider error vocabulary.
INVALID_CREDENTIAL = "auth/invalid-credential"
WRONG_PASSWORD = "auth/wrong-password"
USER_NOT_FOUND = "auth/user-not-found"
USER_DISABLED = "auth/user-disabled"
INVALID_EMAIL = "auth/invalid-email"
WEAK_PASSWORD = "auth/weak-password"
EMAIL_IN_USE = "auth/email-already-in-use"
POPUP_CLOSED = "auth/popup-closed-by-user"
POPUP_CANCELLED = "auth/cancelled-popup-request"
ACCOUNT_EXISTS = "auth/account-exists-with-different-credential"
NETWORK_FAILED = "auth/network-request-failed"
TOO_MANY_REQUESTS = "auth/too-many-requests"
OPERATION_NOT_ALLOWED = "auth/operation-not-allowed"
INTERNAL_ERROR = "auth/internal-error"

SESSION_KEY = "auth_user"

# Fields of a user record that are safe to persist and hand to listeners.
_PUBLIC_FIELDS = ("email", "displayName", "providerId", "localId", "refreshToken")


class FederatedCredential(BaseModel):
    """What an interactive consent flow hands back to a provider."""

    provider: AuthProvider
    email: str = ""
    display_name: str | None = None
    id_token: str = ""


type ConsentFlow = Callable[[AuthProvider], Awaitable[FederatedCredential | None]]


def public_user(record: ProviderUser) -> ProviderUser:
    return {k: record[k] for k in _PUBLIC_FIELDS if record.get(k) is not None}


class PersistedSessionProvider:
    """Keeps the signed-in user record in local storage and notifies listeners.

    Mirrors the client SDK behaviour: a successful sign-up or sign-in makes
    that user current, the record survives restarts, and every change is
    announced to ``on_session_change`` listeners.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._listeners: list[SessionListener] = []
        self._current: ProviderUser | None = None

    @property
    def current_user(self) -> ProviderUser | None:
        return self._current

    def on_session_change(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def restore_session(self) -> None:
        """Announce the persisted user, or signed-out when there is none."""
        record: ProviderUser | None = None
        try:
            raw = await self._store.get(SESSION_KEY)
        except StorageFault:
            logger.warning("Could not read persisted session; starting signed out", exc_info=True)
            raw = None
        if raw:
            try:
                loaded = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("Discarding corrupted persisted session record")
                loaded = None
            if isinstance(loaded, dict) and loaded.get("email"):
                record = loaded
        self._current = record
        self._emit(record)

    async def end_session(self) -> None:
        if self._current is None:
            logger.info("end_session called while signed out; nothing to do")
            return
        try:
            await self._store.delete(SESSION_KEY)
        except StorageFault:
            logger.warning("Could not clear persisted session", exc_info=True)
        self._current = None
        self._emit(None)

    async def _sign_in_user(self, record: ProviderUser) -> ProviderUser:
        user = public_user(record)
        try:
            await self._store.set(SESSION_KEY, json.dumps(user))
        except StorageFault:
            logger.warning("Could not persist session; it will not survive a restart")
        self._current = user
        self._emit(user)
        return user

    def _emit(self, user: ProviderUser | None) -> None:
        for listener in list(self._listeners):
            listener(user)
