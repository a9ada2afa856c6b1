"""Whitelist data models, immutable once loaded."""

from __future__ import annotations

from dataclasses import dataclass, replace

from nohttp.scanner.models import Diagnostic


@dataclass(frozen=True)
class WhitelistEntry:
    """Allows ``http://`` occurrences in one file.

    With neither ``line_number`` nor ``line_content`` the whole file is
    allowed. ``line_content`` can only be set programmatically; the text
    file format has no syntax for it.
    """

    file_pattern: str
    line_number: int | None = None
    line_content: str | None = None

    @property
    def whole_file(self) -> bool:
        return self.line_number is None and self.line_content is None

    def __str__(self) -> str:
        if self.line_number is None:
            return self.file_pattern
        return f"{self.file_pattern}:{self.line_number}"


@dataclass(frozen=True)
class Whitelist:
    """An ordered, immutable collection of whitelist entries."""

    entries: tuple[WhitelistEntry, ...] = ()
    source: str = ""
    diagnostics: tuple[Diagnostic, ...] = ()

    @classmethod
    def empty(cls) -> Whitelist:
        return cls()

    def with_entries(self, *entries: WhitelistEntry) -> Whitelist:
        """Return a copy with extra entries appended."""
        return replace(self, entries=self.entries + tuple(entries))

    def __len__(self) -> int:
        return len(self.entries)
