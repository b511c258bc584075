"""Session state variants."""

from __future__ import annotations

from dataclasses import dataclass

from teampad.models.identity import Identity


@dataclass(frozen=True)
class Unknown:
    """Provider has not reported yet."""


@dataclass(frozen=True)
class SignedOut:
    """No identity is signed in."""


@dataclass(frozen=True)
class SignedIn:
    """An identity is signed in."""

    identity: Identity


type SessionState = Unknown | SignedOut | SignedIn


def describe_state(state: SessionState) -> str:
    match state:
        case SignedIn(identity=identity):
            return f"signed in as {identity.key}"
        case SignedOut():
            return "signed out"
        case _:
            return "unknown"
