"""Scanner data models — targets, violations, diagnostics and reports."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from typing import Any

DEFAULT_BUILD_DIR = "build"


def default_excludes(build_dir: str = DEFAULT_BUILD_DIR) -> tuple[str, ...]:
    """Exclusions that are always active, whatever the user configures."""
    build_dir = build_dir.strip("/") or DEFAULT_BUILD_DIR
    return (
        ".git/**",
        ".idea/**",
        "**/*.class",
        "**/*.jks",
        f"{build_dir}/**",
        # Spring namespace handler metadata holds http:// namespace URIs
        "**/META-INF/spring.handlers",
        "**/META-INF/spring.schemas",
    )


class DiagnosticKind(enum.Enum):
    """Why something was skipped."""

    MALFORMED_WHITELIST_ENTRY = "malformed_whitelist_entry"
    FILE_UNREADABLE = "file_unreadable"
    BINARY_SKIP = "binary_skip"


class DiagnosticLevel(enum.Enum):
    INFO = "info"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """A recovered, non-fatal condition recorded during a scan."""

    kind: DiagnosticKind
    level: DiagnosticLevel
    path: str
    message: str
    line_number: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "level": self.level.value,
            "path": self.path,
            "message": self.message,
            "line_number": self.line_number,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Diagnostic:
        return cls(
            kind=DiagnosticKind(data["kind"]),
            level=DiagnosticLevel(data["level"]),
            path=data["path"],
            message=data["message"],
            line_number=data.get("line_number"),
        )


@dataclass(frozen=True)
class ScanTarget:
    """What to scan: roots plus include/exclude globs."""

    roots: tuple[str, ...]
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    build_dir: str = DEFAULT_BUILD_DIR

    @property
    def effective_excludes(self) -> tuple[str, ...]:
        """Default excludes first, then user excludes (never replaced)."""
        defaults = default_excludes(self.build_dir)
        extra = tuple(p for p in self.exclude if p not in defaults)
        return defaults + extra


@dataclass(frozen=True)
class Violation:
    """A non-whitelisted ``http://`` occurrence."""

    file_path: str
    line_number: int
    column_offset: int
    line_text: str
    root: str = ""

    @property
    def location(self) -> str:
        return f"{self.file_path}:{self.line_number}:{self.column_offset + 1}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_path": self.file_path,
            "line_number": self.line_number,
            "column_offset": self.column_offset,
            "line_text": self.line_text,
            "root": self.root,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Violation:
        return cls(
            file_path=data["file_path"],
            line_number=data["line_number"],
            column_offset=data["column_offset"],
            line_text=data["line_text"],
            root=data.get("root", ""),
        )


@dataclass
class ScanReport:
    """Aggregate result of a scan. Passes iff there are no violations."""

    violations: tuple[Violation, ...] = ()
    files_scanned: int = 0
    files_skipped: int = 0
    diagnostics: tuple[Diagnostic, ...] = ()
    roots: tuple[str, ...] = ()
    duration: float = 0.0
    timestamp: float = field(default_factory=time.time)

    @property
    def passed(self) -> bool:
        return not self.violations

    @property
    def violation_count(self) -> int:
        return len(self.violations)

    @property
    def files_with_violations(self) -> int:
        return len({(v.root, v.file_path) for v in self.violations})

    def violations_by_file(self) -> dict[tuple[str, str], list[Violation]]:
        """Group violations by ``(root, file_path)``, keeping report order."""
        grouped: dict[tuple[str, str], list[Violation]] = {}
        for v in self.violations:
            grouped.setdefault((v.root, v.file_path), []).append(v)
        return grouped

    def to_dict(self) -> dict[str, Any]:
        return {
            "violations": [v.to_dict() for v in self.violations],
            "files_scanned": self.files_scanned,
            "files_skipped": self.files_skipped,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "roots": list(self.roots),
            "duration": self.duration,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScanReport:
        return cls(
            violations=tuple(Violation.from_dict(v) for v in data.get("violations", [])),
            files_scanned=data.get("files_scanned", 0),
            files_skipped=data.get("files_skipped", 0),
            diagnostics=tuple(
                Diagnostic.from_dict(d) for d in data.get("diagnostics", [])
            ),
            roots=tuple(data.get("roots", ())),
            duration=data.get("duration", 0.0),
            timestamp=data.get("timestamp", 0.0),
        )
