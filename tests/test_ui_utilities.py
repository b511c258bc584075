"""Tests for UI utility modules without rendering-heavy dependencies."""

from __future__ import annotations

import asyncio

import pytest
from result import Err, Ok

from teampad.models.identity import Identity
from teampad.services.forms import CredentialsForm
from teampad.services.navigation import Route
from teampad.services.session_controller import SessionController
from teampad.ui import async_bridge
from teampad.ui.pages.auth import SUCCESS_MESSAGES, submit_credentials
from teampad.ui.theme import COLORS, banner_style, build_stylesheet

from conftest import FakeProvider


def test_theme_stylesheet_and_banner_styles() -> None:
    sheet = build_stylesheet()
    assert "QMainWindow" in sheet
    assert COLORS["primary"] in sheet

    assert COLORS["error"] in banner_style("error")
    assert COLORS["warning"] in banner_style("warning")
    assert COLORS["success"] in banner_style("success")
    assert banner_style("anything") == banner_style("success")


def test_async_bridge_create_event_loop(monkeypatch) -> None:
    created: dict[str, object] = {}

    class FakeLoop:
        pass

    def fake_qeventloop(app) -> FakeLoop:  # type: ignore[no-untyped-def]
        created["app"] = app
        return FakeLoop()

    monkeypatch.setattr("teampad.ui.async_bridge.QEventLoop", fake_qeventloop)
    monkeypatch.setattr(
        "teampad.ui.async_bridge.asyncio.set_event_loop",
        lambda loop: created.setdefault("loop", loop),
    )
    loop = async_bridge.create_event_loop(object())  # type: ignore[arg-type]
    assert isinstance(loop, FakeLoop)
    assert created["loop"] is loop


@pytest.mark.asyncio
async def test_async_bridge_schedule_and_cancel() -> None:
    async def sleeper() -> int:
        await asyncio.sleep(0.5)
        return 1

    task = async_bridge.schedule(sleeper())
    assert task in async_bridge._PENDING
    assert async_bridge.pending_count() >= 1
    async_bridge.cancel_all_tasks()
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    assert task.cancelled() or task.done()
    assert task not in async_bridge._PENDING


@pytest.mark.asyncio
async def test_async_slot_decorator_runs_coroutine() -> None:
    called = {"value": 0}

    @async_bridge.async_slot
    async def _slot(value: int) -> None:
        called["value"] = value

    _slot(7)
    await asyncio.sleep(0)
    assert called["value"] == 7


@pytest.mark.asyncio
async def test_failed_task_is_logged_and_untracked(caplog) -> None:  # type: ignore[no-untyped-def]
    async def boom() -> None:
        raise RuntimeError("boom")

    task = async_bridge.schedule(boom())
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    assert task.done()
    assert task not in async_bridge._PENDING
    assert "Unhandled exception in UI task" in caplog.text


@pytest.mark.asyncio
async def test_submit_credentials_runs_the_screen_command() -> None:
    provider = FakeProvider()
    form = CredentialsForm(email="ada@example.com", password="secret1")
    async with SessionController(provider) as session:
        await session.settle()
        signed_up = await submit_credentials(session, Route.SIGN_UP, form)
        await session.sign_out()
        signed_in = await submit_credentials(session, Route.SIGN_IN, form)
        with pytest.raises(ValueError, match="not a credentials screen"):
            await submit_credentials(session, Route.HOME, form)

    assert signed_up == Ok(Identity(key="ada@example.com"))
    assert signed_in == Ok(Identity(key="ada@example.com"))
    assert [name for name, _ in provider.calls] == ["create_account", "end_session", "authenticate"]

    form.password = "short"
    async with SessionController(provider) as session:
        assert isinstance(await submit_credentials(session, Route.SIGN_IN, form), Err)
    assert set(SUCCESS_MESSAGES) == {Route.SIGN_IN, Route.SIGN_UP}
