"""CLI command: nohttp replace [PROJECT_DIR] — rewrite http:// to https://."""

from __future__ import annotations

import click
from rich.markup import escape

from nohttp.cli.options import build_config, build_engine, console, fail, scan_options
from nohttp.errors import NoHttpError
from nohttp.scanner.replacer import HttpReplacer


@click.command()
@scan_options
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would change without touching any file.",
)
@click.pass_context
def replace(
    ctx: click.Context,
    project_dir: str,
    roots: tuple[str, ...],
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    whitelist: str | None,
    workers: int | None,
    timeout: float | None,
    dry_run: bool,
) -> None:
    """Replace every non-whitelisted http:// with https:// in place."""
    try:
        config = build_config(
            ctx, project_dir, roots, include, exclude, whitelist, workers, timeout
        )
        report = build_engine(config).run()
    except NoHttpError as e:
        fail(ctx, e)
        return

    result = HttpReplacer(dry_run=dry_run).apply(report)

    if not result.files_changed:
        console.print("[green]Nothing to replace.[/green]")
        return

    verb = "Would update" if dry_run else "Updated"
    for path in result.files_changed:
        console.print(f"  {verb} [cyan]{escape(str(path))}[/cyan]")
    console.print(
        f"\n{result.replacements} replacement(s) in "
        f"{len(result.files_changed)} file(s)"
        + (" [dim](dry run)[/dim]" if dry_run else "")
    )
