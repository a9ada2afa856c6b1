"""Exception and warning types.

Configuration-level problems derive from ``NoHttpError`` and abort a run.
Per-file conditions derive from ``NoHttpWarning``; they are caught by the
scan engine and turned into report diagnostics.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nohttp.scanner.models import ScanReport


class NoHttpError(Exception):
    """Base class for errors that abort a scan."""


class InvalidRootError(NoHttpError):
    """A configured scan root is missing or is not a directory."""

    def __init__(self, root: str, reason: str = "is not a directory") -> None:
        self.root = root
        super().__init__(f"Scan root {root!r} {reason}")


class WhitelistLoadError(NoHttpError):
    """A whitelist file was configured but cannot be read."""


class ConfigError(NoHttpError):
    """The YAML configuration file is malformed."""


class MalformedWhitelistEntryError(NoHttpError, ValueError):
    """One whitelist line could not be parsed."""

    def __init__(self, line: str, reason: str) -> None:
        self.line = line
        self.reason = reason
        super().__init__(f"{reason}: {line!r}")


class ScanTimeoutError(NoHttpError):
    """The scan did not finish within the configured timeout."""

    def __init__(self, timeout: float, report: ScanReport) -> None:
        self.timeout = timeout
        self.report = report
        super().__init__(
            f"Scan timed out after {timeout:g}s "
            f"({report.files_scanned} files scanned before abort)"
        )


class NoHttpWarning(UserWarning):
    """Base class for recoverable per-file conditions."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


class FileUnreadableWarning(NoHttpWarning):
    """A file could not be opened, read, or is too large to scan."""


class BinarySkipWarning(NoHttpWarning):
    """A file looks binary and was not scanned."""
