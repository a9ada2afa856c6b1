"""Checkstyle XML rendering, readable by CI tooling that understands Checkstyle."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from pathlib import Path

from nohttp.scanner.models import ScanReport

CHECKSTYLE_VERSION = "8.29"
SOURCE = "nohttp"

# Characters XML 1.0 cannot carry, escaped or not
_INVALID_XML_CHARS = re.compile(
    "[^\x09\x0a\x0d\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]"
)


def _xml_safe(text: str) -> str:
    return _INVALID_XML_CHARS.sub("\ufffd", text)


def render_checkstyle_xml(report: ScanReport) -> str:
    """Render violations as a Checkstyle report document.

    Columns are 1-based, as Checkstyle reports them. Control characters
    that XML 1.0 forbids (ANSI escapes, vertical tabs) become U+FFFD.
    """
    root = ET.Element("checkstyle", version=CHECKSTYLE_VERSION)

    for (scan_root, file_path), violations in report.violations_by_file().items():
        name = str(Path(scan_root) / file_path) if scan_root else file_path
        file_el = ET.SubElement(root, "file", name=_xml_safe(name))
        for v in violations:
            ET.SubElement(
                file_el,
                "error",
                line=str(v.line_number),
                column=str(v.column_offset + 1),
                severity="error",
                message=_xml_safe(f"http:// is not allowed: {v.line_text.strip()}"),
                source=SOURCE,
            )

    ET.indent(root)
    body = ET.tostring(root, encoding="unicode")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + body + "\n"
