"""Console rendering of scan reports with Rich."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from nohttp.scanner.models import DiagnosticLevel, ScanReport

_MAX_LINE_WIDTH = 80


def build_table(report: ScanReport) -> Table:
    """One row per violation, in report order."""
    multi_root = len(report.roots) > 1
    table = Table(title="http:// violations", show_lines=False)
    table.add_column("File", style="cyan")
    table.add_column("Line", justify="right")
    table.add_column("Col", justify="right")
    table.add_column("Text", max_width=_MAX_LINE_WIDTH)

    for v in report.violations:
        file_label = str(Path(v.root) / v.file_path) if multi_root else v.file_path
        table.add_row(
            escape(file_label),
            str(v.line_number),
            str(v.column_offset + 1),
            escape(v.line_text.strip()[:_MAX_LINE_WIDTH]),
        )
    return table


def print_report(report: ScanReport, console: Console, verbose: bool = False) -> None:
    """Print violations, diagnostics and the summary."""
    if report.violations:
        console.print(build_table(report))
    else:
        console.print("[green]No http:// violations found.[/green]")

    warnings = [d for d in report.diagnostics if d.level == DiagnosticLevel.WARNING]
    shown = report.diagnostics if verbose else tuple(warnings)
    for d in shown:
        where = d.path if d.line_number is None else f"{d.path}:{d.line_number}"
        color = "yellow" if d.level == DiagnosticLevel.WARNING else "dim"
        console.print(f"[{color}]{d.level.value}[/{color}] {escape(where)}: {escape(d.message)}")

    console.print(
        f"\nScanned {report.files_scanned} files "
        f"({report.files_skipped} skipped) "
        f"in {report.duration:.2f}s"
    )
    console.print(f"Total violations: {report.violation_count}")
