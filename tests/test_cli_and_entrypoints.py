"""CLI and entrypoint tests."""

from __future__ import annotations

import asyncio
import runpy
from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from teampad.cli import _do_list_projects, app
from teampad.config import Config
from teampad.data.db import Database
from teampad.data.storage import SqliteKeyValueStore
from teampad.services.project_repository import ProjectRepository


def test_cli_serve_invokes_run_app(monkeypatch, tmp_path: Path) -> None:
    called: dict[str, object] = {}

    def fake_run_app(config) -> None:  # type: ignore[no-untyped-def]
        called["config"] = config

    monkeypatch.setattr("teampad.ui.app.run_app", fake_run_app)
    runner = CliRunner()
    result = runner.invoke(app, ["--data-dir", str(tmp_path), "--backend", "local"])
    assert result.exit_code == 0
    config = called["config"]
    assert isinstance(config, Config)
    assert config.data_dir == tmp_path
    assert config.backend == "local"


def test_cli_projects_lists_stored_projects(tmp_path: Path) -> None:
    async def seed() -> None:
        async with Database(Config(data_dir=tmp_path).db_path) as db:
            repository = ProjectRepository(SqliteKeyValueStore(db))
            await repository.create("a@example.com", "Roadmap", "Plan the quarter")

    asyncio.run(seed())
    runner = CliRunner()
    result = runner.invoke(app, ["projects", "A@Example.com", "--data-dir", str(tmp_path)])
    assert result.exit_code == 0
    assert "Roadmap" in result.output
    assert "    Plan the quarter" in result.output


def test_cli_projects_empty(tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["projects", "b@example.com", "--data-dir", str(tmp_path)])
    assert result.exit_code == 0
    assert "No projects for b@example.com." in result.output


@pytest.mark.asyncio
async def test_do_list_projects_rejects_blank_email(tmp_path: Path) -> None:
    with pytest.raises(typer.BadParameter):
        await _do_list_projects(Config(data_dir=tmp_path), "   ")


def test_main_module_invokes_cli(monkeypatch) -> None:
    called = {"count": 0}

    def fake_app() -> None:
        called["count"] += 1

    monkeypatch.setattr("teampad.cli.app", fake_app)
    runpy.run_module("teampad.__main__", run_name="__main__")
    assert called["count"] == 1
