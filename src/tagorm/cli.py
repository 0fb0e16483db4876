"""
Command-line interface for tagorm.

    tagorm schema myapp.models:User myapp.models:Post --dialect postgres
    tagorm migrate myapp.models:User myapp.models:Post --database-url postgresql://...
"""

from __future__ import annotations

import asyncio
import importlib
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from tagorm.dialect import get_dialect
from tagorm.errors import OrmError
from tagorm.logging import configure_logging
from tagorm.migration import MigrationResult, MigrationSession
from tagorm.settings import OrmSettings

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="tagorm",
    help="tagorm - derive SQL schemas and statements from tagged dataclasses.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Helpers ──────────────────────────────────────────────────────────────


def load_model(ref: str) -> Any:
    """Resolve ``package.module:ClassName`` to the class."""
    module_name, sep, attr = ref.partition(":")
    if not sep or not module_name or not attr:
        raise typer.BadParameter(f"expected MODULE:CLASS, got {ref!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise typer.BadParameter(f"cannot import {module_name!r}: {e}") from e
    try:
        return getattr(module, attr)
    except AttributeError as e:
        raise typer.BadParameter(f"{module_name!r} has no attribute {attr!r}") from e


def _fail(error: OrmError) -> None:
    err_console.print(f"[red]{error.__class__.__name__}:[/red] {error.message}")
    raise typer.Exit(code=1)


def render_result(result: MigrationResult) -> None:
    table = Table(title="Migration")
    table.add_column("Table")
    table.add_column("Status")
    table.add_column("Detail", overflow="fold")
    for name in result.created:
        table.add_row(name, "[green]created[/green]", "")
    for name, message in result.failed.items():
        table.add_row(name, "[red]failed[/red]", message)
    console.print(table)
    if result.constraints_applied:
        console.print(f"constraints added: {', '.join(result.constraints_applied)}")
    if result.constraints_existing:
        console.print(f"constraints already present: {', '.join(result.constraints_existing)}")


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from tagorm import __version__

        typer.echo(f"tagorm {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """tagorm CLI - print or apply the schema of your models."""


# ── Commands ─────────────────────────────────────────────────────────────


@app.command()
def schema(
    models: list[str] = typer.Argument(..., help="Models as MODULE:CLASS."),
    dialect: str = typer.Option("postgres", "--dialect", "-d", help="postgres, mysql or sqlite."),
) -> None:
    """Print CREATE TABLE and foreign-key statements."""
    try:
        target = get_dialect(dialect)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--dialect") from e

    session = MigrationSession(target)
    try:
        for ref in models:
            session.add(load_model(ref))
    except OrmError as e:
        _fail(e)

    typer.echo("\n\n".join(session.statements()))


@app.command()
def migrate(
    models: list[str] = typer.Argument(..., help="Models as MODULE:CLASS."),
    database_url: str | None = typer.Option(  # noqa: UP007
        None, "--database-url", envvar="TAGORM_DATABASE_URL", help="PostgreSQL connection URL."
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not echo statements."),
) -> None:
    """Create the tables and foreign keys of the given models."""
    from tagorm.orm import Orm

    overrides: dict[str, Any] = {}
    if database_url:
        overrides["database_url"] = database_url
    if quiet:
        overrides["echo_statements"] = False
    settings = OrmSettings(**overrides)
    configure_logging(level=settings.log_level, json_format=settings.log_format == "json")

    loaded = [load_model(ref) for ref in models]

    async def _run() -> MigrationResult:
        orm = await Orm.connect(settings)
        async with orm:
            return await orm.auto_migrate(*loaded)

    try:
        result = asyncio.run(_run())
    except OrmError as e:
        _fail(e)
        return

    render_result(result)
    if not result.ok:
        raise typer.Exit(code=1)


__all__ = ["app", "load_model"]
