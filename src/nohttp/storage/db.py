"""SQLite database connection management and schema migrations."""

from __future__ import annotations

import logging
from pathlib import Path

import aiosqlite

logger = logging.getLogger(__name__)

DB_FILENAME = "nohttp.db"

SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS scan_reports (
    id TEXT PRIMARY KEY,
    roots TEXT NOT NULL,
    files_scanned INTEGER NOT NULL DEFAULT 0,
    files_skipped INTEGER NOT NULL DEFAULT 0,
    violation_count INTEGER NOT NULL DEFAULT 0,
    passed INTEGER NOT NULL DEFAULT 1,
    duration REAL NOT NULL DEFAULT 0,
    timestamp REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS scan_violations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    scan_id TEXT NOT NULL,
    root TEXT NOT NULL DEFAULT '',
    file_path TEXT NOT NULL,
    line INTEGER NOT NULL,
    col INTEGER NOT NULL DEFAULT 0,
    line_text TEXT NOT NULL DEFAULT '',
    FOREIGN KEY (scan_id) REFERENCES scan_reports(id)
);

CREATE TABLE IF NOT EXISTS report_cache (
    key TEXT PRIMARY KEY,
    report_json TEXT NOT NULL,
    created_at REAL NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_violations_scan
    ON scan_violations(scan_id);
"""


async def get_db(db_path: str | Path) -> aiosqlite.Connection:
    """Open (or create) the database and run migrations."""
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    db = await aiosqlite.connect(str(db_path))
    db.row_factory = aiosqlite.Row
    await db.execute("PRAGMA journal_mode=WAL")
    await db.execute("PRAGMA foreign_keys=ON")

    await _migrate(db)
    return db


async def _migrate(db: aiosqlite.Connection) -> None:
    """Run schema migrations if needed."""
    cursor = await db.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
    )
    row = await cursor.fetchone()

    if row is None:
        await db.executescript(SCHEMA_SQL)
        await db.execute(
            "INSERT INTO schema_version (version) VALUES (?)",
            (SCHEMA_VERSION,),
        )
        await db.commit()
        logger.info("Database initialized at schema version %d", SCHEMA_VERSION)
        return

    cursor = await db.execute("SELECT version FROM schema_version")
    row = await cursor.fetchone()
    current = row[0] if row else 0

    if current < SCHEMA_VERSION:
        logger.info(
            "Migrating database from version %d to %d",
            current,
            SCHEMA_VERSION,
        )
        # Reached for databases stamped with an older version, or whose
        # schema_version row is missing. Every statement is IF NOT EXISTS,
        # so re-running adds missing tables and keeps existing rows.
        await db.executescript(SCHEMA_SQL)
        await db.execute("DELETE FROM schema_version")
        await db.execute(
            "INSERT INTO schema_version (version) VALUES (?)",
            (SCHEMA_VERSION,),
        )
        await db.commit()
