"""Rewrite reported ``http://`` occurrences to ``https://`` in place."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from nohttp.scanner.lines import DISALLOWED, HTTPS
from nohttp.scanner.models import ScanReport, Violation

logger = logging.getLogger(__name__)

_LINE_WITH_BREAK = re.compile(r"[^\r\n]*(?:\r\n|\r|\n)|[^\r\n]+")
_UTF8_BOM = "\ufeff"


@dataclass
class ReplaceResult:
    """What a replace pass changed (or would change, for a dry run)."""

    files_changed: list[str] = field(default_factory=list)
    replacements: int = 0
    dry_run: bool = False


class HttpReplacer:
    """Applies ``http://`` → ``https://`` to the violations of a report.

    Only the exact positions in the report are touched, so whitelisted
    occurrences (which never reach the report) stay as they are.
    """

    def __init__(self, dry_run: bool = False) -> None:
        self.dry_run = dry_run

    def apply(self, report: ScanReport) -> ReplaceResult:
        result = ReplaceResult(dry_run=self.dry_run)

        for (root, file_path), violations in report.violations_by_file().items():
            path = Path(root) / file_path
            count = self.replace_in_file(path, violations)
            if count:
                result.files_changed.append(str(path))
                result.replacements += count

        return result

    def replace_in_file(self, path: Path, violations: list[Violation]) -> int:
        """Rewrite the given occurrences in ``path``. Returns the count."""
        with path.open(encoding="utf-8", newline="") as fh:
            original = fh.read()

        bom = _UTF8_BOM if original.startswith(_UTF8_BOM) else ""
        lines = _LINE_WITH_BREAK.findall(original[len(bom):])

        by_line: dict[int, list[int]] = {}
        for v in violations:
            by_line.setdefault(v.line_number, []).append(v.column_offset)

        count = 0
        for line_number, offsets in by_line.items():
            index = line_number - 1
            if index >= len(lines):
                logger.warning("%s changed since it was scanned, skipping line %d", path, line_number)
                continue
            line = lines[index]
            # Right to left keeps earlier offsets valid
            for offset in sorted(set(offsets), reverse=True):
                if line[offset : offset + len(DISALLOWED)] != DISALLOWED:
                    logger.warning(
                        "%s:%d changed since it was scanned, skipping column %d",
                        path,
                        line_number,
                        offset + 1,
                    )
                    continue
                line = line[:offset] + HTTPS + line[offset + len(DISALLOWED) :]
                count += 1
            lines[index] = line

        if count and not self.dry_run:
            with path.open("w", encoding="utf-8", newline="") as fh:
                fh.write(bom + "".join(lines))
            logger.info("Replaced %d occurrence(s) in %s", count, path)

        return count
