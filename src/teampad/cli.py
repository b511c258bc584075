"""Typer CLI for TeamPad: launch the app and inspect stored projects."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer

from teampad.config import Config

app = typer.Typer(
    name="teampad",
    help="TeamPad: sign in and keep a private list of projects on this device.",
    invoke_without_command=True,
)

DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", help="Directory holding TeamPad's local storage"),
]


@app.callback(invoke_without_command=True)
def serve(
    ctx: typer.Context,
    data_dir: DataDirOption = None,
    backend: Annotated[
        str | None,
        typer.Option("--backend", help="Identity backend: local or firebase"),
    ] = None,
) -> None:
    """Start the TeamPad desktop application."""
    if ctx.invoked_subcommand is not None:
        return
    config = Config.from_env(data_dir=data_dir, backend=backend)
    from teampad.ui.app import run_app

    run_app(config)


@app.command()
def projects(
    email: Annotated[str, typer.Argument(help="Identity whose projects to list")],
    data_dir: DataDirOption = None,
) -> None:
    """Print the projects stored on this device for EMAIL."""
    config = Config.from_env(data_dir=data_dir)
    asyncio.run(_do_list_projects(config, email))


async def _do_list_projects(config: Config, email: str) -> None:
    """Read one identity's project collection."""
    from teampad.data.db import Database
    from teampad.data.storage import SqliteKeyValueStore
    from teampad.models.identity import normalize_email
    from teampad.services.project_repository import ProjectRepository

    key = normalize_email(email)
    if not key:
        raise typer.BadParameter("email must not be empty")
    async with Database(config.db_path) as db:
        repository = ProjectRepository(SqliteKeyValueStore(db))
        stored = await repository.list(key)

    if not stored:
        typer.echo(f"No projects for {key}.")
        return
    for project in stored:
        created = project.created_at.date().isoformat()
        typer.echo(f"{project.id}  {created}  {project.title}")
        typer.echo(f"    {project.description}")
