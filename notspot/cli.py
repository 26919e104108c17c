"""NotSpot CLI - serve the emulator and manage its store."""

from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console
from rich.table import Table

from .config import settings

app = typer.Typer(
    name="notspot",
    help="NotSpot: local HubSpot CRM API emulator",
    no_args_is_help=True,
)
console = Console()


def _configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def _seed(drop: bool = False) -> dict[str, int]:
    from .database import async_session_factory, engine
    from .models import Base
    from .services import seed_svc

    try:
        async with engine.begin() as conn:
            if drop:
                await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        async with async_session_factory() as db:
            return await seed_svc.seed_all(db)
    finally:
        await engine.dispose()


def _print_counts(title: str, counts: dict[str, int]) -> None:
    table = Table(title=title)
    table.add_column("Step", style="cyan")
    table.add_column("Rows created", justify="right")
    for step, count in counts.items():
        table.add_row(step, str(count))
    console.print(table)


@app.command("serve")
def serve(
    port: int = typer.Option(settings.port, "--port", "-p", help="Port to run on"),
    host: str = typer.Option(settings.host, "--host", help="Host to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Launch the emulator's HTTP API."""
    import uvicorn

    _configure_logging()
    console.print(f"[bold cyan]Starting NotSpot at http://{host}:{port}[/bold cyan]")
    uvicorn.run(
        "notspot.app:app", host=host, port=port, reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command("seed")
def seed():
    """Create missing tables and insert the builtin catalogue (idempotent)."""
    _configure_logging()
    counts = asyncio.run(_seed())
    _print_counts("Seed", counts)


@app.command("reset")
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """Drop every table, recreate the schema and reseed."""
    _configure_logging()
    if not yes:
        typer.confirm(f"Drop all data in {settings.database_url}?", abort=True)
    counts = asyncio.run(_seed(drop=True))
    console.print("[yellow]Store reset.[/yellow]")
    _print_counts("Seed", counts)


@app.command("types")
def types(
    custom: bool = typer.Option(False, "--custom", help="Only custom object types"),
):
    """List registered object types."""
    from .database import async_session_factory, engine
    from .services import type_svc

    async def _list():
        try:
            async with async_session_factory() as db:
                return await type_svc.list_object_types(db, custom_only=custom)
        finally:
            await engine.dispose()

    table = Table(title="Object types")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Label")
    table.add_column("Custom", justify="center")
    for ot in asyncio.run(_list()):
        table.add_row(ot.id, ot.name, ot.label_plural, "yes" if ot.is_custom else "")
    console.print(table)


if __name__ == "__main__":
    app()
