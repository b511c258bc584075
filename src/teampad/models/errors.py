"""Error taxonomy shared by services, providers and the UI."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


@dataclass(frozen=True)
class ValidationError:
    """Local input problem detected before any provider or storage call."""

    field: str
    message: str

    def __str__(self) -> str:
        return self.message


class AuthErrorKind(StrEnum):
    INVALID_CREDENTIALS = "invalid_credentials"
    WEAK_PASSWORD = "weak_password"
    DUPLICATE_ACCOUNT = "duplicate_account"
    CANCELLED_BY_USER = "cancelled_by_user"
    ACCOUNT_EXISTS_DIFFERENT_CREDENTIAL = "account_exists_different_credential"
    TRANSPORT = "transport"
    UNKNOWN = "unknown"


AUTH_ERROR_MESSAGES: dict[AuthErrorKind, str] = {
    AuthErrorKind.INVALID_CREDENTIALS: "Invalid email or password.",
    AuthErrorKind.WEAK_PASSWORD: "Password is too weak. Use at least 6 characters.",
    AuthErrorKind.DUPLICATE_ACCOUNT: "An account with this email already exists.",
    AuthErrorKind.CANCELLED_BY_USER: "Sign-in was cancelled.",
    AuthErrorKind.ACCOUNT_EXISTS_DIFFERENT_CREDENTIAL: (
        "An account already exists with this email using a different sign-in method."
    ),
    AuthErrorKind.TRANSPORT: "Network error. Check your connection and try again.",
    AuthErrorKind.UNKNOWN: "Something went wrong. Please try again.",
}


@dataclass(frozen=True)
class AuthError:
    """Provider-reported authentication failure, ready for display."""

    kind: AuthErrorKind
    message: str = ""
    code: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            object.__setattr__(self, "message", AUTH_ERROR_MESSAGES[self.kind])

    def __str__(self) -> str:
        return self.message


class StorageFault(Exception):
    """Local persistence read or write failure."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"{key}: {message}")
        self.key = key
        self.message = message


class ProviderError(Exception):
    """Failure reported by an identity provider, carrying its error code."""

    def __init__(self, code: str, message: str = "") -> None:
        super().__init__(message or code)
        self.code = code
        self.message = message or code


class InvalidTransitionError(RuntimeError):
    """A state machine received an event that is not valid in its state."""


class NotSignedInError(RuntimeError):
    """Signed-in-only code was reached without a resolved identity."""


class GatedRouteError(RuntimeError):
    """Navigation tried to cross the signed-in/signed-out route boundary."""
