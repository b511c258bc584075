"""Offline identity provider backed by the local key-value store."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import argon2

from teampad.models.errors import ProviderError, StorageFault
from teampad.models.identity import AuthProvider, normalize_email
from teampad.providers.base import (
    ACCOUNT_EXISTS,
    EMAIL_IN_USE,
    INTERNAL_ERROR,
    INVALID_CREDENTIAL,
    INVALID_EMAIL,
    OPERATION_NOT_ALLOWED,
    POPUP_CLOSED,
    WEAK_PASSWORD,
    ConsentFlow,
    PersistedSessionProvider,
)

if TYPE_CHECKING:
    from teampad.data.protocols import KeyValueStore
    from teampad.providers.protocols import ProviderUser

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_ACCOUNT_PREFIX = "account_"
MIN_PASSWORD_LENGTH = 6


def account_key(email: str) -> str:
    return f"{_ACCOUNT_PREFIX}{normalize_email(email)}"


class LocalIdentityProvider(PersistedSessionProvider):
    """Password and federated accounts stored on this device.

    Passwords are hashed with Argon2id. Federated sign-in delegates the
    interactive part to a ``ConsentFlow``; a flow returning ``None`` means
    the user closed it.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        consent: ConsentFlow | None = None,
        hasher: argon2.PasswordHasher | None = None,
    ) -> None:
        super().__init__(store)
        self._consent = consent
        self._hasher = hasher or argon2.PasswordHasher()

    async def create_account(self, email: str, password: str) -> ProviderUser:
        key = normalize_email(email)
        if not _EMAIL_RE.match(key):
            raise ProviderError(INVALID_EMAIL, "The email address is badly formatted.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ProviderError(WEAK_PASSWORD, "Password should be at least 6 characters.")
        if await self._load_account(key) is not None:
            raise ProviderError(EMAIL_IN_USE, "The email address is already in use.")
        password_hash = await asyncio.to_thread(self._hasher.hash, password)
        record = {
            "email": key,
            "providerId": AuthProvider.PASSWORD.value,
            "passwordHash": password_hash,
            "createdAt": datetime.now(tz=UTC).isoformat(),
        }
        await self._save_account(record)
        logger.info("Created local account for %s", key)
        return await self._sign_in_user(record)

    async def authenticate(self, email: str, password: str) -> ProviderUser:
        key = normalize_email(email)
        account = await self._load_account(key)
        if account is None or account.get("providerId") != AuthProvider.PASSWORD.value:
            raise ProviderError(INVALID_CREDENTIAL, "Invalid email or password.")
        if not await asyncio.to_thread(self._verify, str(account.get("passwordHash", "")), password):
            raise ProviderError(INVALID_CREDENTIAL, "Invalid email or password.")
        return await self._sign_in_user(account)

    async def authenticate_federated(self, provider_id: str) -> ProviderUser:
        try:
            provider = AuthProvider(provider_id)
        except ValueError as exc:
            raise ProviderError(OPERATION_NOT_ALLOWED, f"Unknown provider {provider_id}") from exc
        if self._consent is None or not provider.is_federated:
            raise ProviderError(OPERATION_NOT_ALLOWED, f"{provider.label} sign-in is not enabled.")
        credential = await self._consent(provider)
        if credential is None:
            raise ProviderError(POPUP_CLOSED, "The sign-in window was closed.")
        key = normalize_email(credential.email)
        if not _EMAIL_RE.match(key):
            raise ProviderError(INVALID_EMAIL, "The provider returned no usable email.")
        account = await self._load_account(key)
        if account is not None:
            if account.get("providerId") != provider.value:
                raise ProviderError(
                    ACCOUNT_EXISTS,
                    "An account already exists with the same email address.",
                )
            return await self._sign_in_user(account)
        record: ProviderUser = {
            "email": key,
            "providerId": provider.value,
            "createdAt": datetime.now(tz=UTC).isoformat(),
        }
        if credential.display_name:
            record["displayName"] = credential.display_name
        await self._save_account(record)
        logger.info("Created local %s account for %s", provider.label, key)
        return await self._sign_in_user(record)

    def _verify(self, password_hash: str, password: str) -> bool:
        try:
            return self._hasher.verify(password_hash, password)
        except argon2.exceptions.VerifyMismatchError:
            return False
        except argon2.exceptions.InvalidHashError:
            return False

    async def _load_account(self, key: str) -> ProviderUser | None:
        try:
            raw = await self._store.get(account_key(key))
        except StorageFault as exc:
            raise ProviderError(INTERNAL_ERROR, exc.message) from exc
        if raw is None:
            return None
        try:
            record = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ProviderError(INTERNAL_ERROR, f"Corrupted account record for {key}") from exc
        return record if isinstance(record, dict) else None

    async def _save_account(self, record: ProviderUser) -> None:
        try:
            await self._store.set(account_key(record["email"]), json.dumps(record))
        except StorageFault as exc:
            raise ProviderError(INTERNAL_ERROR, exc.message) from exc
