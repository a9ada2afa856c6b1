"""Load Whitelist objects from ``<path>[:<line>]`` text files."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from nohttp.errors import MalformedWhitelistEntryError, WhitelistLoadError
from nohttp.scanner.models import Diagnostic, DiagnosticKind, DiagnosticLevel
from nohttp.whitelist.models import Whitelist, WhitelistEntry

logger = logging.getLogger(__name__)

_COMMENT_PREFIX = "#"
_DUPLICATE_SLASHES = re.compile(r"/{2,}")


def load_whitelist(path: str | Path | None) -> Whitelist:
    """Load a whitelist file. ``None`` or ``""`` gives an empty whitelist."""
    if path is None or str(path) == "":
        return Whitelist.empty()

    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as e:
        raise WhitelistLoadError(f"Whitelist file {str(path)!r} does not exist") from e
    except (OSError, UnicodeDecodeError) as e:
        raise WhitelistLoadError(f"Could not read whitelist {str(path)!r}: {e}") from e

    whitelist = load_whitelist_from_string(text, source=str(path))
    logger.debug("Loaded %d whitelist entries from %s", len(whitelist), path)
    return whitelist


def load_whitelist_from_string(text: str, source: str = "") -> Whitelist:
    """Parse whitelist text, skipping (and recording) malformed lines."""
    entries: list[WhitelistEntry] = []
    diagnostics: list[Diagnostic] = []

    for line_num, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith(_COMMENT_PREFIX):
            continue
        try:
            entries.append(parse_entry(line))
        except MalformedWhitelistEntryError as e:
            logger.warning("%s:%d: skipping whitelist entry: %s", source or "<whitelist>", line_num, e)
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.MALFORMED_WHITELIST_ENTRY,
                    level=DiagnosticLevel.WARNING,
                    path=source,
                    message=str(e),
                    line_number=line_num,
                )
            )

    return Whitelist(
        entries=tuple(entries),
        source=source,
        diagnostics=tuple(diagnostics),
    )


def parse_entry(line: str) -> WhitelistEntry:
    """Parse one ``<filePattern>[:<lineNumber>]`` entry."""
    line = line.strip()
    file_part, sep, number_part = line.rpartition(":")
    if not sep:
        file_part, number_part = line, ""

    line_number: int | None = None
    if sep:
        number_part = number_part.strip()
        if not (number_part.isascii() and number_part.isdigit()):
            raise MalformedWhitelistEntryError(line, "Line number suffix is not a number")
        line_number = int(number_part)
        if line_number < 1:
            raise MalformedWhitelistEntryError(line, "Line numbers start at 1")

    file_pattern = normalize_path(file_part)
    if not file_pattern:
        raise MalformedWhitelistEntryError(line, "Missing file path")

    return WhitelistEntry(file_pattern=file_pattern, line_number=line_number)


def normalize_path(path: str) -> str:
    """Forward slashes, no leading ``./``, no duplicate separators."""
    path = path.strip().replace("\\", "/")
    path = _DUPLICATE_SLASHES.sub("/", path)
    while path.startswith("./"):
        path = path[2:]
    return path
