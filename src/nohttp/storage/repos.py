"""Repository classes for async CRUD operations on SQLite."""

from __future__ import annotations

import json
import time
import uuid

import aiosqlite

from nohttp.scanner.models import ScanReport


class ScanRepo:
    """Scan history: one row per report plus its violations."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def save_report(self, report: ScanReport) -> str:
        scan_id = uuid.uuid4().hex[:12]
        await self._db.execute(
            "INSERT INTO scan_reports "
            "(id, roots, files_scanned, files_skipped, "
            "violation_count, passed, duration, timestamp) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                scan_id,
                json.dumps(list(report.roots)),
                report.files_scanned,
                report.files_skipped,
                report.violation_count,
                int(report.passed),
                report.duration,
                report.timestamp,
            ),
        )

        await self._db.executemany(
            "INSERT INTO scan_violations "
            "(scan_id, root, file_path, line, col, line_text) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            [
                (
                    scan_id,
                    v.root,
                    v.file_path,
                    v.line_number,
                    v.column_offset,
                    v.line_text,
                )
                for v in report.violations
            ],
        )

        await self._db.commit()
        return scan_id

    async def get(self, scan_id: str) -> dict | None:
        cursor = await self._db.execute(
            "SELECT * FROM scan_reports WHERE id = ?", (scan_id,)
        )
        row = await cursor.fetchone()
        if not row:
            return None

        result = dict(row)
        result["roots"] = json.loads(result["roots"])
        cursor = await self._db.execute(
            "SELECT * FROM scan_violations WHERE scan_id = ? ORDER BY id",
            (scan_id,),
        )
        result["violations"] = [dict(r) async for r in cursor]
        return result

    async def list_all(self, limit: int = 50, offset: int = 0) -> list[dict]:
        cursor = await self._db.execute(
            "SELECT * FROM scan_reports ORDER BY timestamp DESC LIMIT ? OFFSET ?",
            (limit, offset),
        )
        rows = [dict(row) async for row in cursor]
        for row in rows:
            row["roots"] = json.loads(row["roots"])
        return rows


class ReportCacheRepo:
    """Reports keyed by input fingerprint."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def get(self, key: str) -> ScanReport | None:
        cursor = await self._db.execute(
            "SELECT report_json FROM report_cache WHERE key = ?", (key,)
        )
        row = await cursor.fetchone()
        if not row:
            return None
        return ScanReport.from_dict(json.loads(row["report_json"]))

    async def put(self, key: str, report: ScanReport) -> None:
        await self._db.execute(
            "INSERT OR REPLACE INTO report_cache (key, report_json, created_at) "
            "VALUES (?, ?, ?)",
            (key, json.dumps(report.to_dict()), time.time()),
        )
        await self._db.commit()

    async def clear(self) -> None:
        await self._db.execute("DELETE FROM report_cache")
        await self._db.commit()
