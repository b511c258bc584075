"""Firebase Authentication over the Identity Toolkit REST API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

import httpx

from teampad.models.errors import ProviderError
from teampad.models.identity import AuthProvider
from teampad.providers.base import (
    ACCOUNT_EXISTS,
    EMAIL_IN_USE,
    INTERNAL_ERROR,
    INVALID_CREDENTIAL,
    INVALID_EMAIL,
    NETWORK_FAILED,
    OPERATION_NOT_ALLOWED,
    POPUP_CLOSED,
    TOO_MANY_REQUESTS,
    USER_DISABLED,
    USER_NOT_FOUND,
    WEAK_PASSWORD,
    WRONG_PASSWORD,
    ConsentFlow,
    PersistedSessionProvider,
)

if TYPE_CHECKING:
    from teampad.data.protocols import KeyValueStore
    from teampad.providers.protocols import ProviderUser

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"

_REST_ERRORS = {
    "EMAIL_EXISTS": EMAIL_IN_USE,
    "INVALID_EMAIL": INVALID_EMAIL,
    "MISSING_EMAIL": INVALID_EMAIL,
    "WEAK_PASSWORD": WEAK_PASSWORD,
    "MISSING_PASSWORD": INVALID_CREDENTIAL,
    "EMAIL_NOT_FOUND": USER_NOT_FOUND,
    "INVALID_PASSWORD": WRONG_PASSWORD,
    "INVALID_LOGIN_CREDENTIALS": INVALID_CREDENTIAL,
    "INVALID_IDP_RESPONSE": INVALID_CREDENTIAL,
    "USER_DISABLED": USER_DISABLED,
    "TOO_MANY_ATTEMPTS_TRY_LATER": TOO_MANY_REQUESTS,
    "OPERATION_NOT_ALLOWED": OPERATION_NOT_ALLOWED,
    "FEDERATED_USER_ID_ALREADY_LINKED": ACCOUNT_EXISTS,
}


def rest_error_code(message: str) -> str:
    """Map an Identity Toolkit error message to a provider code.

    Messages look like ``EMAIL_EXISTS`` or ``WEAK_PASSWORD : Password should
    be at least 6 characters``; only the leading token matters.
    """
    token = message.split(":", 1)[0].strip()
    return _REST_ERRORS.get(token, INTERNAL_ERROR)


class FirebaseIdentityProvider(PersistedSessionProvider):
    """Password and federated sign-in against a Firebase project.

    Federated sign-in needs a ``ConsentFlow`` that returns the identity
    provider's ID token; it is exchanged with ``accounts:signInWithIdp``.
    """

    def __init__(
        self,
        store: KeyValueStore,
        api_key: str,
        *,
        consent: ConsentFlow | None = None,
        client: httpx.AsyncClient | None = None,
        base_url: str = IDENTITY_TOOLKIT_URL,
    ) -> None:
        super().__init__(store)
        if not api_key:
            msg = "Firebase backend requires an API key (TEAMPAD_FIREBASE_API_KEY)"
            raise ValueError(msg)
        self._api_key = api_key
        self._consent = consent
        self._client = client or httpx.AsyncClient(timeout=15.0)
        self._base_url = base_url.rstrip("/")

    async def aclose(self) -> None:
        await self._client.aclose()

    async def create_account(self, email: str, password: str) -> ProviderUser:
        data = await self._call(
            "signUp",
            {"email": email.strip(), "password": password, "returnSecureToken": True},
        )
        return await self._accept_user(data, AuthProvider.PASSWORD)

    async def authenticate(self, email: str, password: str) -> ProviderUser:
        data = await self._call(
            "signInWithPassword",
            {"email": email.strip(), "password": password, "returnSecureToken": True},
        )
        return await self._accept_user(data, AuthProvider.PASSWORD)

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
        if not credential.id_token:
            raise ProviderError(INVALID_CREDENTIAL, "The provider returned no ID token.")
        data = await self._call(
            "signInWithIdp",
            {
                "postBody": urlencode(
                    {"id_token": credential.id_token, "providerId": provider.value}
                ),
                "requestUri": "http://localhost",
                "returnIdpCredential": True,
                "returnSecureToken": True,
            },
        )
        if data.get("needConfirmation"):
            raise ProviderError(
                ACCOUNT_EXISTS,
                "An account already exists with the same email address.",
            )
        return await self._accept_user(data, provider)

    async def _accept_user(self, data: dict[str, Any], provider: AuthProvider) -> ProviderUser:
        if not str(data.get("email") or "").strip():
            logger.warning("Firebase returned a %s user without an email", provider.label)
            raise ProviderError(INVALID_EMAIL, "The account has no email address.")
        data.setdefault("providerId", provider.value)
        return await self._sign_in_user(data)

    async def _call(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self._base_url}/accounts:{method}"
        try:
            response = await self._client.post(url, params={"key": self._api_key}, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("Firebase %s request failed: %s", method, exc)
            raise ProviderError(NETWORK_FAILED, str(exc)) from exc
        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.is_error:
            error = body.get("error") if isinstance(body, dict) else None
            message = str(error.get("message", "")) if isinstance(error, dict) else ""
            code = rest_error_code(message) if message else INTERNAL_ERROR
            logger.info("Firebase %s rejected: %s", method, message or response.status_code)
            raise ProviderError(code, message or f"HTTP {response.status_code}")
        if not isinstance(body, dict):
            raise ProviderError(INTERNAL_ERROR, f"Unexpected {method} response")
        return body
