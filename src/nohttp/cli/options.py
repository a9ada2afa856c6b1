"""Scan options shared by ``check`` and ``replace``."""

from __future__ import annotations

from collections.abc import Callable

import click
from rich.console import Console
from rich.markup import escape

from nohttp.config import NoHttpConfig
from nohttp.errors import NoHttpError
from nohttp.report.sink import EXIT_CONFIG_ERROR
from nohttp.scanner.engine import ScanEngine
from nohttp.whitelist.loader import load_whitelist

console = Console(stderr=True)


def scan_options(func: Callable) -> Callable:
    """Attach the project/root/include/exclude/whitelist options."""
    options = [
        click.argument(
            "project_dir",
            type=click.Path(exists=True, file_okay=False),
            default=".",
        ),
        click.option(
            "--root",
            "-r",
            "roots",
            multiple=True,
            help="Directory to scan, relative to PROJECT_DIR. Repeatable. Default: PROJECT_DIR.",
        ),
        click.option(
            "--include",
            "-i",
            multiple=True,
            help="Only scan files matching this glob. Repeatable.",
        ),
        click.option(
            "--exclude",
            "-e",
            multiple=True,
            help="Skip files matching this glob (added to the defaults). Repeatable.",
        ),
        click.option(
            "--whitelist",
            "-w",
            type=click.Path(dir_okay=False),
            default=None,
            help="Whitelist file. Default: config/nohttp/nohttp.txt if present.",
        ),
        click.option(
            "--workers",
            type=click.IntRange(min=1),
            default=None,
            help="Number of files scanned in parallel. Default: CPU count.",
        ),
        click.option(
            "--timeout",
            type=click.FloatRange(min=0, min_open=True),
            default=None,
            help="Abort the whole scan after this many seconds.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_config(
    ctx: click.Context,
    project_dir: str,
    roots: tuple[str, ...],
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    whitelist: str | None,
    workers: int | None,
    timeout: float | None,
) -> NoHttpConfig:
    """Settings file first, then command-line flags on top."""
    config_file = ctx.obj.get("config_file") if ctx.obj else None
    config = NoHttpConfig.load(project_dir, config_file=config_file)

    if roots:
        config.roots = list(roots)
    config.include.extend(include)
    config.exclude.extend(exclude)
    if whitelist:
        config.whitelist_file = whitelist
    if workers:
        config.workers = workers
    if timeout:
        config.timeout = timeout
    return config


def build_engine(config: NoHttpConfig) -> ScanEngine:
    whitelist = load_whitelist(config.resolve_whitelist_path())
    return ScanEngine(
        config.to_target(),
        whitelist,
        workers=config.workers,
        max_file_size=config.max_file_size,
        timeout=config.timeout,
    )


def fail(ctx: click.Context, error: NoHttpError) -> None:
    """Report a configuration error and exit without a traceback."""
    console.print(f"[red]Error:[/red] {escape(str(error))}")
    ctx.exit(EXIT_CONFIG_ERROR)
