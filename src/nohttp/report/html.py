"""Renders the console report to HTML through a recording Rich console."""

from __future__ import annotations

import io

from rich.console import Console
from rich.markup import escape

from nohttp import __version__
from nohttp.report.console import print_report
from nohttp.scanner.models import ScanReport

_HTML_WIDTH = 140


def render_html(report: ScanReport) -> str:
    console = Console(
        record=True,
        file=io.StringIO(),
        width=_HTML_WIDTH,
        force_terminal=True,
        color_system="truecolor",
    )
    status = "[green]PASSED[/green]" if report.passed else "[red]FAILED[/red]"
    console.print(f"[bold]nohttp {__version__}[/bold]: {status}")
    for root in report.roots:
        console.print(f"Root: [cyan]{escape(root)}[/cyan]")
    console.print()
    print_report(report, console, verbose=True)
    return console.export_html(inline_styles=True)
