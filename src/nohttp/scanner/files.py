"""File set resolver — walks scan roots and applies include/exclude globs."""

from __future__ import annotations

import functools
import logging
import os
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from nohttp.errors import InvalidRootError
from nohttp.scanner.models import Diagnostic, DiagnosticKind, DiagnosticLevel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedFile:
    """A file selected for scanning."""

    root: str
    relative_path: str

    @property
    def path(self) -> Path:
        return Path(self.root) / self.relative_path


@dataclass
class ResolvedFileSet:
    files: list[ResolvedFile] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


@functools.lru_cache(maxsize=256)
def compile_glob(pattern: str) -> re.Pattern[str]:
    """Translate a glob into a regex over a root-relative POSIX path.

    ``*`` and ``?`` never cross ``/``; ``**`` does. ``**/`` may also match
    nothing, so ``**/*.jks`` matches ``a.jks`` at the root.
    """
    pattern = pattern.strip().replace("\\", "/")
    while pattern.startswith("./"):
        pattern = pattern[2:]

    out: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                i += 2
                if i < n and pattern[i] == "/":
                    i += 1
                    out.append("(?:.*/)?")
                else:
                    out.append(".*")
                continue
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            j = pattern.find("]", i + 1)
            if j == -1 or j == i + 1:
                out.append(re.escape(c))
            else:
                body = pattern[i + 1 : j]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append("[" + body + "]")
                i = j + 1
                continue
        else:
            out.append(re.escape(c))
        i += 1

    return re.compile("".join(out) + r"\Z")


def matches_any(relative_path: str, patterns: Iterable[str]) -> bool:
    return any(compile_glob(p).match(relative_path) for p in patterns)


def _subtree_globs(patterns: Iterable[str]) -> list[re.Pattern[str]]:
    """Globs of directories whose whole subtree a ``<glob>/**`` excludes."""
    prunes: list[re.Pattern[str]] = []
    for p in patterns:
        p = p.strip().replace("\\", "/")
        if p.endswith("/**") and len(p) > 3:
            prunes.append(compile_glob(p[:-3]))
    return prunes


def resolve(
    roots: Sequence[str | Path],
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
) -> ResolvedFileSet:
    """Enumerate files under ``roots`` in depth-first, sorted order.

    A file is kept iff it matches some include glob (all files when there
    are none) and no exclude glob. Callers pass the effective excludes,
    default ones included.
    """
    result = ResolvedFileSet()
    for root in roots:
        root_path = Path(root)
        if not root_path.exists():
            raise InvalidRootError(str(root), "does not exist")
        if not root_path.is_dir():
            raise InvalidRootError(str(root))
        _walk_root(root_path, list(include), list(exclude), result)
    return result


def _walk_root(
    root: Path,
    include: list[str],
    exclude: list[str],
    result: ResolvedFileSet,
) -> None:
    prunes = _subtree_globs(exclude)
    visited: set[str] = set()
    root_str = str(root)

    def warn(rel: str, message: str) -> None:
        logger.warning("Skipping %s: %s", os.path.join(root_str, rel), message)
        result.diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.FILE_UNREADABLE,
                level=DiagnosticLevel.WARNING,
                path=rel or ".",
                message=message,
            )
        )

    def walk(directory: Path, rel_dir: str) -> None:
        real = os.path.realpath(directory)
        if real in visited:
            logger.debug("Already visited %s, not following again", directory)
            return
        visited.add(real)

        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            warn(rel_dir, f"cannot list directory ({e.strerror or e})")
            return

        for entry in entries:
            rel = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            try:
                is_dir = entry.is_dir()
                is_file = not is_dir and entry.is_file()
            except OSError as e:
                warn(rel, e.strerror or str(e))
                continue

            if is_dir:
                if any(p.match(rel) for p in prunes):
                    continue
                walk(Path(entry.path), rel)
            elif is_file:
                if include and not matches_any(rel, include):
                    continue
                if matches_any(rel, exclude):
                    continue
                result.files.append(ResolvedFile(root=root_str, relative_path=rel))
            elif entry.is_symlink():
                warn(rel, "dangling symbolic link")

    walk(root, "")
