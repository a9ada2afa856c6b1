"""Content-hash report cache, kept outside the scan engine.

The key covers the scan target, the resolved file set with each file's
content hash, and the whitelist entries. Any change to one of those gives
a new key, so a hit can be returned without scanning.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from pathlib import Path

from nohttp.scanner.engine import ScanEngine
from nohttp.scanner.files import ResolvedFile
from nohttp.scanner.models import ScanReport, ScanTarget
from nohttp.storage.db import get_db
from nohttp.storage.repos import ReportCacheRepo
from nohttp.whitelist.models import Whitelist

logger = logging.getLogger(__name__)

_CHUNK = 1 << 16


def fingerprint_files(files: list[ResolvedFile], seed: str = "") -> str:
    digest = hashlib.sha256(seed.encode())
    for f in files:
        digest.update(f"{f.root}\0{f.relative_path}\0".encode())
        try:
            with f.path.open("rb") as fh:
                for chunk in iter(lambda: fh.read(_CHUNK), b""):
                    digest.update(chunk)
        except OSError as e:
            digest.update(f"<unreadable:{e.errno}>".encode())
        digest.update(b"\0")
    return digest.hexdigest()


def fingerprint_whitelist(whitelist: Whitelist) -> str:
    digest = hashlib.sha256()
    for entry in whitelist.entries:
        digest.update(
            f"{entry.file_pattern}\0{entry.line_number}\0{entry.line_content}\n".encode()
        )
    return digest.hexdigest()


def fingerprint_target(target: ScanTarget, max_file_size: int) -> str:
    parts = [
        "roots", *target.roots,
        "include", *target.include,
        "exclude", *target.effective_excludes,
        "max", str(max_file_size),
    ]
    return hashlib.sha256("\0".join(parts).encode()).hexdigest()


def cache_key(engine: ScanEngine, files: list[ResolvedFile]) -> str:
    """``<file set fingerprint>:<whitelist fingerprint>``."""
    target = fingerprint_target(engine.target, engine.max_file_size)
    file_set = fingerprint_files(files, seed=target)
    return f"{file_set}:{fingerprint_whitelist(engine.whitelist)}"


async def _lookup(db_path: Path, key: str) -> ScanReport | None:
    db = await get_db(db_path)
    try:
        return await ReportCacheRepo(db).get(key)
    finally:
        await db.close()


async def _store(db_path: Path, key: str, report: ScanReport) -> None:
    db = await get_db(db_path)
    try:
        await ReportCacheRepo(db).put(key, report)
    finally:
        await db.close()


def run_cached(engine: ScanEngine, db_path: str | Path) -> tuple[ScanReport, bool]:
    """Return ``(report, hit)``, scanning only on a cache miss."""
    db_path = Path(db_path)
    resolved = engine.resolve_files()
    key = cache_key(engine, resolved[0])

    cached = asyncio.run(_lookup(db_path, key))
    if cached is not None:
        logger.info("Inputs unchanged, reusing cached report")
        return cached, True

    report = engine.run(resolved)
    asyncio.run(_store(db_path, key, report))
    return report, False
