"""Decides whether a violation is covered by a whitelist entry."""

from __future__ import annotations

from collections.abc import Iterable

from nohttp.scanner.models import Violation
from nohttp.whitelist.models import Whitelist, WhitelistEntry


class WhitelistMatcher:
    """Matches violations against whitelist entries. First-match-wins.

    Entries are indexed by their exact file path; a violation is only
    compared with the entries for its own file.
    """

    def __init__(self, whitelist: Whitelist) -> None:
        self.whitelist = whitelist
        self._by_path: dict[str, list[WhitelistEntry]] = {}
        for entry in whitelist.entries:
            self._by_path.setdefault(entry.file_pattern, []).append(entry)

    def is_whitelisted(self, violation: Violation) -> bool:
        for entry in self._by_path.get(violation.file_path, ()):
            if _matches(entry, violation):
                return True
        return False

    def filter(self, violations: Iterable[Violation]) -> list[Violation]:
        """Keep the violations no entry covers, in their original order."""
        if not self._by_path:
            return list(violations)
        return [v for v in violations if not self.is_whitelisted(v)]


def is_whitelisted(violation: Violation, whitelist: Whitelist) -> bool:
    """One-off check without building an index."""
    return any(
        entry.file_pattern == violation.file_path and _matches(entry, violation)
        for entry in whitelist.entries
    )


def _matches(entry: WhitelistEntry, violation: Violation) -> bool:
    if entry.line_number is not None and entry.line_number != violation.line_number:
        return False
    if entry.line_content is not None and entry.line_content != violation.line_text.strip():
        return False
    return True
