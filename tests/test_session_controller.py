"""SessionController tests: event-driven state, validation and error mapping."""

from __future__ import annotations

import pytest
from result import Err, Ok

from teampad.data.storage import MemoryKeyValueStore
from teampad.models.errors import (
    AuthError,
    AuthErrorKind,
    InvalidTransitionError,
    NotSignedInError,
    ProviderError,
    ValidationError,
)
from teampad.models.identity import AuthProvider, Identity
from teampad.models.session import SessionState, SignedIn, SignedOut, Unknown
from teampad.providers import base as codes
from teampad.providers.base import FederatedCredential
from teampad.providers.local import LocalIdentityProvider
from teampad.services.project_repository import ProjectRepository
from teampad.services.session_controller import (
    SessionController,
    Subscription,
    map_provider_error,
)

from conftest import FakeProvider

EMAIL = "ada@example.com"
PASSWORD = "correct horse"


@pytest.mark.asyncio
async def test_state_is_unknown_until_provider_reports(fake_provider: FakeProvider) -> None:
    session = SessionController(fake_provider)
    assert session.state == Unknown()
    await session.start()
    assert session.started
    await session.settle()
    assert session.state == SignedOut()
    await session.close()
    assert not session.started


@pytest.mark.asyncio
async def test_start_twice_is_rejected(fake_provider: FakeProvider) -> None:
    async with SessionController(fake_provider) as session:
        with pytest.raises(RuntimeError):
            await session.start()


@pytest.mark.asyncio
async def test_sign_up_yields_signed_in_identity(controller: SessionController) -> None:
    result = await controller.sign_up(EMAIL, PASSWORD)
    assert isinstance(result, Ok)
    assert result.ok_value.key == EMAIL

    await controller.settle()
    assert isinstance(controller.state, SignedIn)
    assert controller.state.identity.key == EMAIL
    assert controller.require_identity().key == EMAIL


@pytest.mark.asyncio
async def test_command_result_does_not_move_state(fake_provider: FakeProvider) -> None:
    async with SessionController(fake_provider) as session:
        await session.settle()
        result = await session.sign_in(EMAIL, PASSWORD)
        assert isinstance(result, Ok)
        assert session.state == SignedOut()
        await session.settle()
        assert session.state == SignedIn(Identity(key=EMAIL))


@pytest.mark.asyncio
async def test_short_password_never_reaches_provider(fake_provider: FakeProvider) -> None:
    async with SessionController(fake_provider) as session:
        for command in (session.sign_up, session.sign_in):
            result = await command(EMAIL, "12345")
            assert isinstance(result, Err)
            assert isinstance(result.err_value, ValidationError)
            assert result.err_value.field == "password"
        empty = await session.sign_in("", PASSWORD)
        assert isinstance(empty, Err)
        assert empty.err_value.message == "Email and password are required."
        assert fake_provider.calls == []


@pytest.mark.asyncio
async def test_duplicate_and_wrong_password(controller: SessionController) -> None:
    await controller.sign_up(EMAIL, PASSWORD)
    await controller.sign_out()
    await controller.settle()

    again = await controller.sign_up(EMAIL, "another secret")
    assert isinstance(again, Err)
    assert again.err_value == AuthError(
        AuthErrorKind.DUPLICATE_ACCOUNT, code=codes.EMAIL_IN_USE
    )

    wrong = await controller.sign_in(EMAIL, "not the password")
    assert isinstance(wrong, Err)
    assert isinstance(wrong.err_value, AuthError)
    assert wrong.err_value.kind is AuthErrorKind.INVALID_CREDENTIALS

    unknown = await controller.sign_in("nobody@example.com", PASSWORD)
    assert isinstance(unknown, Err)
    assert unknown.err_value.kind is AuthErrorKind.INVALID_CREDENTIALS  # type: ignore[union-attr]
    await controller.settle()
    assert controller.state == SignedOut()


@pytest.mark.asyncio
async def test_malformed_email_is_reported_as_invalid_credentials(
    controller: SessionController,
) -> None:
    result = await controller.sign_up("not-an-email", PASSWORD)
    assert isinstance(result, Err)
    assert result.err_value.kind is AuthErrorKind.INVALID_CREDENTIALS  # type: ignore[union-attr]
    assert result.err_value.message == "The email address is badly formatted."


@pytest.mark.asyncio
async def test_cancelled_federated_sign_in_stays_signed_out(
    controller: SessionController,
) -> None:
    result = await controller.sign_in_federated(AuthProvider.GOOGLE)
    assert isinstance(result, Err)
    assert result.err_value.kind is AuthErrorKind.CANCELLED_BY_USER  # type: ignore[union-attr]
    await controller.settle()
    assert controller.state == SignedOut()


@pytest.mark.asyncio
async def test_federated_sign_in_creates_identity(
    controller: SessionController,
    consent_answers: list[FederatedCredential | None],
) -> None:
    consent_answers.append(
        FederatedCredential(provider=AuthProvider.APPLE, email="Eve@Example.com", display_name="Eve")
    )
    result = await controller.sign_in_federated("apple.com")
    assert isinstance(result, Ok)
    await controller.settle()
    identity = controller.require_identity()
    assert identity.key == "eve@example.com"
    assert identity.provider is AuthProvider.APPLE
    assert identity.display_name == "Eve"


@pytest.mark.asyncio
async def test_federated_email_taken_by_password_account(
    controller: SessionController,
    consent_answers: list[FederatedCredential | None],
) -> None:
    await controller.sign_up(EMAIL, PASSWORD)
    await controller.sign_out()
    consent_answers.append(FederatedCredential(provider=AuthProvider.GOOGLE, email=EMAIL))

    result = await controller.sign_in_federated(AuthProvider.GOOGLE)
    assert isinstance(result, Err)
    assert (
        result.err_value.kind  # type: ignore[union-attr]
        is AuthErrorKind.ACCOUNT_EXISTS_DIFFERENT_CREDENTIAL
    )
    await controller.settle()
    assert controller.state == SignedOut()


@pytest.mark.asyncio
async def test_federated_rejects_non_federated_providers(fake_provider: FakeProvider) -> None:
    async with SessionController(fake_provider) as session:
        for provider in ("password", "github.com"):
            result = await session.sign_in_federated(provider)
            assert isinstance(result, Err)
            assert isinstance(result.err_value, ValidationError)
        assert fake_provider.calls == []


@pytest.mark.asyncio
async def test_provider_errors_are_mapped(fake_provider: FakeProvider) -> None:
    async with SessionController(fake_provider) as session:
        fake_provider.error = ProviderError(codes.NETWORK_FAILED, "offline")
        result = await session.sign_in(EMAIL, PASSWORD)
        assert result.err_value.kind is AuthErrorKind.TRANSPORT  # type: ignore[union-attr]

        fake_provider.error = ProviderError("auth/something-new")
        result = await session.sign_up(EMAIL, PASSWORD)
        assert result.err_value.kind is AuthErrorKind.UNKNOWN  # type: ignore[union-attr]
        assert result.err_value.code == "auth/something-new"  # type: ignore[union-attr]


def test_map_provider_error_table() -> None:
    expected = {
        codes.INVALID_CREDENTIAL: AuthErrorKind.INVALID_CREDENTIALS,
        codes.WRONG_PASSWORD: AuthErrorKind.INVALID_CREDENTIALS,
        codes.USER_NOT_FOUND: AuthErrorKind.INVALID_CREDENTIALS,
        codes.WEAK_PASSWORD: AuthErrorKind.WEAK_PASSWORD,
        codes.EMAIL_IN_USE: AuthErrorKind.DUPLICATE_ACCOUNT,
        codes.POPUP_CLOSED: AuthErrorKind.CANCELLED_BY_USER,
        codes.POPUP_CANCELLED: AuthErrorKind.CANCELLED_BY_USER,
        codes.ACCOUNT_EXISTS: AuthErrorKind.ACCOUNT_EXISTS_DIFFERENT_CREDENTIAL,
        codes.NETWORK_FAILED: AuthErrorKind.TRANSPORT,
        codes.INTERNAL_ERROR: AuthErrorKind.UNKNOWN,
    }
    for code, kind in expected.items():
        assert map_provider_error(ProviderError(code)).kind is kind


@pytest.mark.asyncio
async def test_sign_out_round_trip_keeps_projects(
    memory_store: MemoryKeyValueStore,
    local_provider: LocalIdentityProvider,
) -> None:
    async with SessionController(local_provider) as session:
        await session.sign_up(EMAIL, PASSWORD)
        await session.settle()
        key = session.require_identity().key
        await ProjectRepository(memory_store).create(key, "Keep me", "across sessions")

        assert await session.sign_out() is None
        await session.settle()
        assert session.state == SignedOut()
        with pytest.raises(NotSignedInError):
            session.require_identity()

        await session.sign_in(EMAIL, PASSWORD)
        await session.settle()
        assert session.require_identity().key == key

    titles = [p.title for p in await ProjectRepository(memory_store).list(key)]
    assert titles == ["Keep me"]


@pytest.mark.asyncio
async def test_persisted_session_is_restored(
    memory_store: MemoryKeyValueStore,
    local_provider: LocalIdentityProvider,
    fast_hasher,
) -> None:
    async with SessionController(local_provider) as session:
        await session.sign_up(EMAIL, PASSWORD)
        await session.settle()

    restarted = LocalIdentityProvider(memory_store, hasher=fast_hasher)
    async with SessionController(restarted) as session:
        await session.settle()
        assert session.state == SignedIn(Identity(key=EMAIL))


@pytest.mark.asyncio
async def test_subscribe_replays_current_state_and_disposes(
    fake_provider: FakeProvider,
) -> None:
    seen: list[SessionState] = []
    session = SessionController(fake_provider)
    subscription = session.subscribe(seen.append)
    assert seen == [Unknown()]

    await session.start()
    await session.settle()
    await session.sign_in(EMAIL, PASSWORD)
    await session.settle()
    assert seen == [Unknown(), SignedOut(), SignedIn(Identity(key=EMAIL))]

    subscription()
    assert subscription.closed
    subscription()
    await session.sign_out()
    await session.settle()
    assert len(seen) == 3
    assert session.state == SignedOut()
    await session.close()


@pytest.mark.asyncio
async def test_subscription_as_context_manager(fake_provider: FakeProvider) -> None:
    seen: list[SessionState] = []
    async with SessionController(fake_provider) as session:
        await session.settle()
        with session.subscribe(seen.append) as subscription:
            assert isinstance(subscription, Subscription)
            await session.sign_in(EMAIL, PASSWORD)
            await session.settle()
        await session.sign_out()
        await session.settle()
    assert seen == [SignedOut(), SignedIn(Identity(key=EMAIL))]


@pytest.mark.asyncio
async def test_repeated_state_notifies_once(fake_provider: FakeProvider) -> None:
    seen: list[SessionState] = []
    async with SessionController(fake_provider) as session:
        await session.settle()
        session.subscribe(seen.append)
        fake_provider.emit(None)
        fake_provider.emit(None)
        await session.settle()
    assert seen == [SignedOut()]


def test_invalid_transitions_raise() -> None:
    session = SessionController(FakeProvider())
    ada = SignedIn(Identity(key="ada@example.com"))
    bob = SignedIn(Identity(key="bob@example.com"))

    session.apply(ada)
    with pytest.raises(InvalidTransitionError):
        session.apply(bob)
    with pytest.raises(InvalidTransitionError):
        session.apply(Unknown())

    session.apply(SignedOut())
    with pytest.raises(InvalidTransitionError):
        session.apply(Unknown())
    assert session.state == SignedOut()


@pytest.mark.asyncio
async def test_events_after_close_are_dropped(fake_provider: FakeProvider) -> None:
    session = SessionController(fake_provider)
    await session.start()
    listener = fake_provider.listeners[0]
    await session.close()
    assert fake_provider.listeners == []
    listener({"email": EMAIL})
    assert session.state == Unknown()


@pytest.mark.asyncio
async def test_pump_skips_events_without_an_email(fake_provider: FakeProvider) -> None:
    seen: list[SessionState] = []
    async with SessionController(fake_provider) as session:
        await session.settle()
        session.subscribe(seen.append)
        fake_provider.emit({"displayName": "No Email", "providerId": "apple.com"})
        await session.settle()
        assert session.state == SignedOut()

        assert isinstance(await session.sign_in(EMAIL, PASSWORD), Ok)
        await session.settle()
        assert session.state == SignedIn(Identity(key=EMAIL, provider=AuthProvider.PASSWORD))
    assert seen == [SignedOut(), session.state]


class _EmaillessProvider(FakeProvider):
    def _succeed(self, name: str, user: dict) -> dict:  # type: ignore[override]
        self.calls.append((name, (user["email"],)))
        return {"providerId": user["providerId"]}


@pytest.mark.asyncio
async def test_commands_reject_provider_users_without_an_email() -> None:
    provider = _EmaillessProvider()
    async with SessionController(provider) as session:
        await session.settle()
        outcomes = [
            await session.sign_up(EMAIL, PASSWORD),
            await session.sign_in(EMAIL, PASSWORD),
            await session.sign_in_federated(AuthProvider.APPLE),
        ]
        for outcome in outcomes:
            assert isinstance(outcome, Err)
            assert isinstance(outcome.err_value, AuthError)
            assert outcome.err_value.kind == AuthErrorKind.INVALID_CREDENTIALS
            assert outcome.err_value.code == codes.INVALID_EMAIL
        await session.sign_out()
        await session.settle()
        assert session.state == SignedOut()
    assert [name for name, _ in provider.calls][-1] == "end_session"
