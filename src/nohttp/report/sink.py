"""Report sink — writes report files and decides the exit status."""

from __future__ import annotations

import logging
from pathlib import Path

from nohttp.report.checkstyle import render_checkstyle_xml
from nohttp.report.html import render_html
from nohttp.scanner.models import ScanReport

logger = logging.getLogger(__name__)

REPORT_BASENAME = "nohttp"

EXIT_OK = 0
EXIT_VIOLATIONS = 1
EXIT_CONFIG_ERROR = 2


def summary_line(report: ScanReport) -> str:
    return f"Checkstyle files with violations: {report.files_with_violations}"


def exit_code(report: ScanReport) -> int:
    return EXIT_OK if report.passed else EXIT_VIOLATIONS


class ReportSink:
    """Writes ``nohttp.xml`` and ``nohttp.html`` into a report directory."""

    def __init__(self, report_dir: str | Path, xml: bool = True, html: bool = True) -> None:
        self.report_dir = Path(report_dir)
        self.xml = xml
        self.html = html

    def write(self, report: ScanReport) -> list[Path]:
        written: list[Path] = []
        if not (self.xml or self.html):
            return written

        self.report_dir.mkdir(parents=True, exist_ok=True)
        if self.xml:
            path = self.report_dir / f"{REPORT_BASENAME}.xml"
            path.write_text(render_checkstyle_xml(report), encoding="utf-8")
            written.append(path)
        if self.html:
            path = self.report_dir / f"{REPORT_BASENAME}.html"
            path.write_text(render_html(report), encoding="utf-8")
            written.append(path)

        for path in written:
            logger.debug("Wrote %s", path)
        return written
