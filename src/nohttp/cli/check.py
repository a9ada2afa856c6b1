"""CLI command: nohttp check [PROJECT_DIR] — find disallowed http:// URLs."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click
from rich.markup import escape

from nohttp.cli.options import build_config, build_engine, console, fail, scan_options
from nohttp.errors import NoHttpError, ScanTimeoutError
from nohttp.report.console import print_report
from nohttp.report.sink import ReportSink, exit_code, summary_line
from nohttp.scanner.models import ScanReport
from nohttp.storage.cache import run_cached
from nohttp.storage.db import DB_FILENAME, get_db
from nohttp.storage.repos import ScanRepo


@click.command()
@scan_options
@click.option(
    "--report-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Where nohttp.xml and nohttp.html are written.",
)
@click.option("--no-reports", is_flag=True, help="Do not write report files.")
@click.option(
    "--cache/--no-cache",
    default=False,
    help="Reuse the stored report when nothing changed.",
)
@click.option("--record", is_flag=True, help="Save this scan to the history.")
@click.pass_context
def check(
    ctx: click.Context,
    project_dir: str,
    roots: tuple[str, ...],
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    whitelist: str | None,
    workers: int | None,
    timeout: float | None,
    report_dir: str | None,
    no_reports: bool,
    cache: bool,
    record: bool,
) -> None:
    """Check source files for http:// URLs that are not whitelisted."""
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    try:
        config = build_config(
            ctx, project_dir, roots, include, exclude, whitelist, workers, timeout
        )
        if report_dir:
            config.report_dir = report_dir
        if no_reports:
            config.reports = False

        engine = build_engine(config)
        console.print(
            f"[bold]nohttp[/bold] checking [cyan]{escape(str(config.project_dir))}[/cyan]\n"
        )

        db_path = config.data_dir / DB_FILENAME
        if cache:
            report, hit = run_cached(engine, db_path)
            if hit:
                console.print("[dim]Nothing changed since the last scan, using cached report.[/dim]")
        else:
            report = engine.run()
    except ScanTimeoutError as e:
        console.print(
            f"[dim]Partial scan: {e.report.files_scanned} files, "
            f"{e.report.violation_count} violation(s) before the timeout.[/dim]"
        )
        fail(ctx, e)
        return
    except NoHttpError as e:
        fail(ctx, e)
        return

    print_report(report, console, verbose=verbose)

    if config.reports:
        sink = ReportSink(config.resolve_report_dir())
        for path in sink.write(report):
            console.print(f"[dim]Report written to {escape(str(path))}[/dim]")

    if record:
        scan_id = asyncio.run(_record(db_path, report))
        console.print(f"[dim]Recorded as scan {scan_id}[/dim]")

    if not report.passed:
        console.print(f"\n[red]{summary_line(report)}[/red]")
        sys.exit(exit_code(report))
    console.print(summary_line(report))


async def _record(db_path: Path, report: ScanReport) -> str:
    db = await get_db(db_path)
    try:
        return await ScanRepo(db).save_report(report)
    finally:
        await db.close()
