"""Pydantic models and value types for TeamPad."""

from teampad.models.errors import (
    AuthError,
    AuthErrorKind,
    GatedRouteError,
    InvalidTransitionError,
    NotSignedInError,
    ProviderError,
    StorageFault,
    ValidationError,
)
from teampad.models.identity import FEDERATED_PROVIDERS, AuthProvider, Identity
from teampad.models.projects import DESCRIPTION_MAX_LENGTH, Project, ProjectCollection
from teampad.models.session import SessionState, SignedIn, SignedOut, Unknown

__all__ = [
    "AuthError",
    "AuthErrorKind",
    "AuthProvider",
    "GatedRouteError",
    "Identity",
    "InvalidTransitionError",
    "NotSignedInError",
    "Project",
    "ProjectCollection",
    "ProviderError",
    "SessionState",
    "SignedIn",
    "SignedOut",
    "StorageFault",
    "Unknown",
    "ValidationError",
    "DESCRIPTION_MAX_LENGTH",
    "FEDERATED_PROVIDERS",
]
