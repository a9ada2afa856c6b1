"""Literal ``http://`` search over file content."""

from __future__ import annotations

import re
from pathlib import Path

from nohttp.errors import BinarySkipWarning, FileUnreadableWarning
from nohttp.scanner.models import Violation

DISALLOWED = "http://"
HTTPS = "https://"

# Same window git uses to guess whether a blob is binary
BINARY_SNIFF_BYTES = 8000

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_UTF8_BOM = b"\xef\xbb\xbf"


def split_lines(content: str) -> list[str]:
    """Split on ``\\r\\n``, ``\\r`` and ``\\n`` only.

    ``str.splitlines`` also breaks on form feeds and Unicode separators,
    which would shift line numbers.
    """
    lines = _LINE_BREAK.split(content)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def find_occurrences(line: str, needle: str = DISALLOWED) -> list[int]:
    """0-based offsets of every non-overlapping occurrence of ``needle``."""
    offsets: list[int] = []
    start = line.find(needle)
    while start != -1:
        offsets.append(start)
        start = line.find(needle, start + len(needle))
    return offsets


def scan_lines(file_path: str, content: str, root: str = "") -> list[Violation]:
    """Return one raw violation per ``http://`` occurrence, in line order."""
    violations: list[Violation] = []

    for line_num, line in enumerate(split_lines(content), start=1):
        if DISALLOWED not in line:
            continue
        for offset in find_occurrences(line):
            violations.append(
                Violation(
                    file_path=file_path,
                    line_number=line_num,
                    column_offset=offset,
                    line_text=line,
                    root=root,
                )
            )

    return violations


def read_scannable(path: str | Path, max_bytes: int = DEFAULT_MAX_FILE_SIZE) -> str:
    """Read a text file for scanning.

    Raises ``FileUnreadableWarning`` if the file cannot be read or is larger
    than ``max_bytes``, and ``BinarySkipWarning`` if it looks binary.
    """
    path = Path(path)
    try:
        with path.open("rb") as fh:
            data = fh.read(max_bytes + 1)
    except OSError as e:
        raise FileUnreadableWarning(str(path), e.strerror or str(e)) from e

    if len(data) > max_bytes:
        raise FileUnreadableWarning(str(path), f"larger than {max_bytes} bytes")

    if b"\x00" in data[:BINARY_SNIFF_BYTES]:
        raise BinarySkipWarning(str(path), "NUL byte found, treating as binary")

    if data.startswith(_UTF8_BOM):
        data = data[len(_UTF8_BOM):]

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise BinarySkipWarning(str(path), f"not valid UTF-8 ({e.reason})") from e
