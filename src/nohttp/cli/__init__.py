"""CLI entry point — Click group with global options."""

from __future__ import annotations

import logging

import click

from nohttp import __version__


@click.group()
@click.version_option(version=__version__, prog_name="nohttp")
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a .nohttp.yaml settings file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, config_file: str | None, verbose: bool) -> None:
    """nohttp — find http:// references that should be https://."""
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _register_commands() -> None:
    from nohttp.cli.check import check  # noqa: F811
    from nohttp.cli.history import history  # noqa: F811
    from nohttp.cli.replace import replace  # noqa: F811

    main.add_command(check)
    main.add_command(replace)
    main.add_command(history)


_register_commands()
