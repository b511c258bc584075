"""Owns the authentication state and the one path that changes it."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from types import TracebackType
from typing import TYPE_CHECKING

from result import Err, Ok, Result

from teampad.models.errors import (
    AuthError,
    AuthErrorKind,
    InvalidTransitionError,
    NotSignedInError,
    ProviderError,
    ValidationError,
)
from teampad.models.identity import AuthProvider, Identity
from teampad.models.session import SessionState, SignedIn, SignedOut, Unknown, describe_state
from teampad.providers import base as codes
from teampad.services.forms import MIN_PASSWORD_LENGTH, validate_credentials

if TYPE_CHECKING:
    from teampad.providers.protocols import IdentityProvider, ProviderUser

logger = logging.getLogger(__name__)

type SessionListener = Callable[[SessionState], None]

_PROVIDER_ERRORS: dict[str, AuthErrorKind] = {
    codes.INVALID_CREDENTIAL: AuthErrorKind.INVALID_CREDENTIALS,
    codes.WRONG_PASSWORD: AuthErrorKind.INVALID_CREDENTIALS,
    codes.USER_NOT_FOUND: AuthErrorKind.INVALID_CREDENTIALS,
    codes.USER_DISABLED: AuthErrorKind.INVALID_CREDENTIALS,
    codes.INVALID_EMAIL: AuthErrorKind.INVALID_CREDENTIALS,
    codes.WEAK_PASSWORD: AuthErrorKind.WEAK_PASSWORD,
    codes.EMAIL_IN_USE: AuthErrorKind.DUPLICATE_ACCOUNT,
    codes.POPUP_CLOSED: AuthErrorKind.CANCELLED_BY_USER,
    codes.POPUP_CANCELLED: AuthErrorKind.CANCELLED_BY_USER,
    codes.ACCOUNT_EXISTS: AuthErrorKind.ACCOUNT_EXISTS_DIFFERENT_CREDENTIAL,
    codes.NETWORK_FAILED: AuthErrorKind.TRANSPORT,
}

_VALID_TRANSITIONS: dict[type, tuple[type, ...]] = {
    Unknown: (SignedIn, SignedOut),
    SignedIn: (SignedOut,),
    SignedOut: (SignedIn,),
}


def map_provider_error(exc: ProviderError) -> AuthError:
    """Translate a provider code into the displayable AuthError taxonomy."""
    kind = _PROVIDER_ERRORS.get(exc.code, AuthErrorKind.UNKNOWN)
    if exc.code == codes.INVALID_EMAIL:
        return AuthError(kind, "The email address is badly formatted.", code=exc.code)
    return AuthError(kind, code=exc.code)


class Subscription:
    """Disposer returned by ``subscribe``. Calling it more than once is harmless."""

    def __init__(self, dispose: Callable[[], None]) -> None:
        self._dispose = dispose
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __call__(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._dispose()

    def __enter__(self) -> Subscription:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self()


class SessionController:
    """Single source of truth for who, if anyone, is signed in.

    Commands (sign up, sign in, sign out) only talk to the identity
    provider. The state changes when the provider's session-change event
    arrives on the internal queue and the pump task applies it; listeners
    registered with ``subscribe`` then see the new state. A command's own
    return value never moves the state.
    """

    def __init__(
        self,
        provider: IdentityProvider,
        *,
        min_password_length: int = MIN_PASSWORD_LENGTH,
    ) -> None:
        self._provider = provider
        self._min_password_length = min_password_length
        self._state: SessionState = Unknown()
        self._listeners: list[SessionListener] = []
        self._events: asyncio.Queue[ProviderUser | None] | None = None
        self._pump: asyncio.Task[None] | None = None
        self._detach: Callable[[], None] | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def identity(self) -> Identity | None:
        if isinstance(self._state, SignedIn):
            return self._state.identity
        return None

    @property
    def started(self) -> bool:
        return self._pump is not None

    # ── Lifecycle ──

    async def __aenter__(self) -> SessionController:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def start(self) -> SessionController:
        """Attach to the provider's change stream and resolve the initial state."""
        if self._pump is not None:
            msg = "SessionController already started"
            raise RuntimeError(msg)
        self._events = asyncio.Queue()
        self._detach = self._provider.on_session_change(self._on_provider_event)
        self._pump = asyncio.create_task(self._run_pump(), name="teampad-session-pump")
        self._pump.add_done_callback(_log_pump_exit)
        await self._provider.restore_session()
        return self

    async def close(self) -> None:
        """Detach from the provider and stop the pump."""
        if self._detach is not None:
            self._detach()
            self._detach = None
        if self._pump is not None:
            self._pump.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._pump
            self._pump = None
        self._events = None
        self._listeners.clear()

    async def settle(self) -> None:
        """Wait until every provider event received so far has been applied."""
        if self._events is not None:
            await self._events.join()

    # ── Subscription ──

    def subscribe(self, on_change: SessionListener) -> Subscription:
        """Register ``on_change``; it is called with the current state right away."""
        self._listeners.append(on_change)
        on_change(self._state)

        def dispose() -> None:
            if on_change in self._listeners:
                self._listeners.remove(on_change)

        return Subscription(dispose)

    def apply(self, state: SessionState) -> None:
        """Apply one provider-delivered state.

        A repeat of the current state is dropped so listeners hear about each
        real transition once. Transitions outside the state machine raise
        ``InvalidTransitionError``.
        """
        current = self._state
        if state == current:
            logger.debug("Ignoring repeated session state: %s", describe_state(state))
            return
        if not isinstance(state, _VALID_TRANSITIONS[type(current)]):
            msg = f"Invalid session transition: {describe_state(current)} -> {describe_state(state)}"
            raise InvalidTransitionError(msg)
        self._state = state
        logger.info("Session %s", describe_state(state))
        for listener in list(self._listeners):
            listener(state)

    def require_identity(self) -> Identity:
        identity = self.identity
        if identity is None:
            msg = "No signed-in identity; gated screen reached while signed out"
            raise NotSignedInError(msg)
        return identity

    # ── Commands ──

    async def sign_up(
        self, email: str, password: str
    ) -> Result[Identity, ValidationError | AuthError]:
        """Create an account. The session follows via the provider's event."""
        invalid = validate_credentials(
            email, password, min_password_length=self._min_password_length
        )
        if invalid is not None:
            return Err(invalid)
        try:
            user = await self._provider.create_account(email.strip(), password)
        except ProviderError as exc:
            logger.info("Sign-up rejected (%s): %s", exc.code, exc.message)
            return Err(map_provider_error(exc))
        return _identity_result(user)

    async def sign_in(
        self, email: str, password: str
    ) -> Result[Identity, ValidationError | AuthError]:
        """Authenticate with email and password."""
        invalid = validate_credentials(
            email, password, min_password_length=self._min_password_length
        )
        if invalid is not None:
            return Err(invalid)
        try:
            user = await self._provider.authenticate(email.strip(), password)
        except ProviderError as exc:
            logger.info("Sign-in rejected (%s): %s", exc.code, exc.message)
            return Err(map_provider_error(exc))
        return _identity_result(user)

    async def sign_in_federated(
        self, provider: AuthProvider | str
    ) -> Result[Identity, ValidationError | AuthError]:
        """Run the provider's interactive consent flow."""
        try:
            provider = AuthProvider(provider)
        except ValueError:
            return Err(ValidationError("provider", f"Unsupported sign-in provider: {provider}"))
        if not provider.is_federated:
            return Err(ValidationError("provider", "Use email and password to sign in."))
        try:
            user = await self._provider.authenticate_federated(provider.value)
        except ProviderError as exc:
            logger.info("%s sign-in failed (%s): %s", provider.label, exc.code, exc.message)
            return Err(map_provider_error(exc))
        return _identity_result(user)

    async def sign_out(self) -> None:
        """Ask the provider to end the session."""
        await self._provider.end_session()

    # ── Event pump ──

    def _on_provider_event(self, user: ProviderUser | None) -> None:
        if self._events is None:
            logger.warning("Dropping session event received after close")
            return
        self._events.put_nowait(user)

    async def _run_pump(self) -> None:
        events = self._events
        if events is None:
            return
        while True:
            user = await events.get()
            try:
                if user is None:
                    self.apply(SignedOut())
                    continue
                try:
                    identity = Identity.from_provider_user(user)
                except ValueError as exc:
                    logger.warning("Skipping session event with an unusable user record: %s", exc)
                    continue
                self.apply(SignedIn(identity))
            finally:
                events.task_done()


def _identity_result(user: ProviderUser) -> Result[Identity, ValidationError | AuthError]:
    try:
        return Ok(Identity.from_provider_user(user))
    except ValueError as exc:
        logger.warning("Provider returned an unusable user record: %s", exc)
        return Err(
            AuthError(
                AuthErrorKind.INVALID_CREDENTIALS,
                "The account has no email address.",
                code=codes.INVALID_EMAIL,
            )
        )


def _log_pump_exit(task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Session event pump stopped", exc_info=exc)
