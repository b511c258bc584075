"""Signed-in principal models."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict


class AuthProvider(StrEnum):
    """How an identity authenticated. Values follow Firebase provider ids."""

    PASSWORD = "password"
    GOOGLE = "google.com"
    APPLE = "apple.com"

    @property
    def is_federated(self) -> bool:
        return self is not AuthProvider.PASSWORD

    @property
    def label(self) -> str:
        match self:
            case AuthProvider.GOOGLE:
                return "Google"
            case AuthProvider.APPLE:
                return "Apple"
            case _:
                return "Email"


FEDERATED_PROVIDERS = (AuthProvider.GOOGLE, AuthProvider.APPLE)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class Identity(BaseModel):
    """The signed-in principal. ``key`` partitions per-user data."""

    model_config = ConfigDict(frozen=True)

    key: str
    display_name: str | None = None
    provider: AuthProvider = AuthProvider.PASSWORD

    @classmethod
    def from_provider_user(cls, payload: Mapping[str, Any]) -> Identity:
        """Convert a provider-native user record into an Identity.

        Accepts both the REST shape (``email``/``displayName``/``providerId``)
        and snake_case keys. A record without an email cannot be keyed and
        is rejected with ``ValueError``.
        """
        email = str(payload.get("email") or "")
        key = normalize_email(email)
        if not key:
            msg = "Provider user record has no email"
            raise ValueError(msg)
        display_name = payload.get("displayName", payload.get("display_name")) or None
        raw_provider = str(
            payload.get("providerId", payload.get("provider_id")) or AuthProvider.PASSWORD
        )
        try:
            provider = AuthProvider(raw_provider)
        except ValueError:
            provider = AuthProvider.PASSWORD
        return cls(
            key=key,
            display_name=str(display_name) if display_name else None,
            provider=provider,
        )

    @property
    def greeting_name(self) -> str:
        return self.display_name or self.key
