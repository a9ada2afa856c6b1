"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from nohttp.scanner.models import ScanTarget
from nohttp.whitelist.models import Whitelist, WhitelistEntry


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the history database and env overrides out of the real home."""
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))
    for name in ("NOHTTP_WORKERS", "NOHTTP_TIMEOUT", "NOHTTP_MAX_FILE_SIZE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def write_file() -> Callable[..., Path]:
    def _write(root: Path, relative: str, content: str | bytes = "") -> Path:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8", newline="")
        return path

    return _write


@pytest.fixture
def project(tmp_path: Path, write_file) -> Path:
    """A small project with one clean file and one offending file."""
    root = tmp_path / "project"
    write_file(root, "README.md", "Docs live at https://example.com\n")
    write_file(
        root,
        "src/app.py",
        'API = "http://api.example.com"\n'
        'DOCS = "https://docs.example.com"\n'
        'LEGACY = "http://legacy.example.com"\n',
    )
    return root


@pytest.fixture
def project_target(project: Path) -> ScanTarget:
    return ScanTarget(roots=(str(project),))


@pytest.fixture
def legacy_whitelist() -> Whitelist:
    return Whitelist(entries=(WhitelistEntry("src/app.py", line_number=3),))
