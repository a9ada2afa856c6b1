"""CLI command: nohttp history — list recorded scans."""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from nohttp.config import NoHttpConfig
from nohttp.storage.db import DB_FILENAME, get_db
from nohttp.storage.repos import ScanRepo

console = Console(stderr=True)


@click.command()
@click.option(
    "--limit",
    "-n",
    type=click.IntRange(min=1),
    default=20,
    help="Number of scans to show.",
)
def history(limit: int) -> None:
    """Show scans saved with ``nohttp check --record``."""
    db_path = NoHttpConfig().data_dir / DB_FILENAME
    if not db_path.exists():
        console.print("[dim]No scans recorded yet.[/dim]")
        return

    rows = asyncio.run(_list(db_path, limit))
    if not rows:
        console.print("[dim]No scans recorded yet.[/dim]")
        return

    table = Table(title="Scan history", show_lines=False)
    table.add_column("ID", style="cyan")
    table.add_column("When")
    table.add_column("Roots")
    table.add_column("Files", justify="right")
    table.add_column("Violations", justify="right")
    table.add_column("Result")

    for row in rows:
        when = datetime.fromtimestamp(row["timestamp"]).strftime("%Y-%m-%d %H:%M:%S")
        result = "[green]passed[/green]" if row["passed"] else "[red]failed[/red]"
        table.add_row(
            row["id"],
            when,
            escape(", ".join(row["roots"])),
            str(row["files_scanned"]),
            str(row["violation_count"]),
            result,
        )

    console.print(table)


async def _list(db_path: Path, limit: int) -> list[dict]:
    db = await get_db(db_path)
    try:
        return await ScanRepo(db).list_all(limit=limit)
    finally:
        await db.close()
