"""Tests for the scan engine."""

from __future__ import annotations

import itertools
import os
import threading
from pathlib import Path

import pytest

from nohttp.errors import InvalidRootError, ScanTimeoutError
from nohttp.scanner import engine as engine_module
from nohttp.scanner.engine import ScanEngine
from nohttp.scanner.models import DiagnosticKind, DiagnosticLevel, ScanTarget
from nohttp.whitelist import Whitelist, WhitelistEntry, load_whitelist_from_string


def _locations(report) -> list[tuple[str, int, int]]:
    return [(v.file_path, v.line_number, v.column_offset) for v in report.violations]


class TestScanEngine:
    def test_finds_violations(self, project_target: ScanTarget):
        report = ScanEngine(project_target).run()
        assert _locations(report) == [("src/app.py", 1, 7), ("src/app.py", 3, 10)]
        assert report.files_scanned == 2
        assert report.files_skipped == 0
        assert not report.passed
        assert report.files_with_violations == 1
        assert report.roots == project_target.roots

    def test_clean_project_passes(self, tmp_path: Path, write_file):
        write_file(tmp_path, "a.txt", "https://example.com\n")
        report = ScanEngine(ScanTarget(roots=(str(tmp_path),))).run()
        assert report.passed
        assert report.violation_count == 0
        assert report.files_scanned == 1

    def test_whitelisted_line(self, project_target, legacy_whitelist):
        report = ScanEngine(project_target, legacy_whitelist).run()
        assert _locations(report) == [("src/app.py", 1, 7)]

    def test_whitelisted_neighbouring_line_does_not_apply(self, project_target):
        whitelist = load_whitelist_from_string("src/app.py:2")
        report = ScanEngine(project_target, whitelist).run()
        assert report.violation_count == 2

    def test_whole_file_whitelisted(self, project_target):
        whitelist = Whitelist(entries=(WhitelistEntry("src/app.py"),))
        report = ScanEngine(project_target, whitelist).run()
        assert report.passed
        assert report.files_scanned == 2

    def test_repeated_runs_are_identical(self, project_target):
        engine = ScanEngine(project_target)
        first = engine.run()
        second = engine.run()
        assert first.violations == second.violations
        assert first.diagnostics == second.diagnostics

    def test_parallel_matches_sequential(self, tmp_path: Path, write_file):
        for i in range(25):
            lines = "\n".join(
                f"line {n} http://host{i}.example.com/{n}" if n % 3 == 0 else f"line {n}"
                for n in range(10)
            )
            write_file(tmp_path, f"pkg{i % 4}/file{i:02d}.txt", lines)
        write_file(tmp_path, "blob.bin", b"\x00http://x")
        target = ScanTarget(roots=(str(tmp_path),))

        sequential = ScanEngine(target, workers=1).run()
        parallel = ScanEngine(target, workers=8).run()

        assert parallel.violations == sequential.violations
        assert parallel.diagnostics == sequential.diagnostics
        assert parallel.files_scanned == sequential.files_scanned == 25
        assert parallel.files_skipped == sequential.files_skipped == 1

    def test_report_order_is_file_then_line(self, tmp_path: Path, write_file):
        write_file(tmp_path, "b.txt", "http://b\n\nhttp://b")
        write_file(tmp_path, "a/z.txt", "http://z")
        write_file(tmp_path, "a.txt", "x\nhttp://a")
        report = ScanEngine(ScanTarget(roots=(str(tmp_path),)), workers=4).run()
        assert [(v.file_path, v.line_number) for v in report.violations] == [
            ("a/z.txt", 1),
            ("a.txt", 2),
            ("b.txt", 1),
            ("b.txt", 3),
        ]

    def test_binary_file_is_skipped_with_info(self, tmp_path: Path, write_file):
        write_file(tmp_path, "image.png", b"\x89PNG\x00http://x")
        write_file(tmp_path, "a.txt", "ok")
        report = ScanEngine(ScanTarget(roots=(str(tmp_path),))).run()
        assert report.passed
        assert report.files_scanned == 1
        assert report.files_skipped == 1
        assert [(d.kind, d.level, d.path) for d in report.diagnostics] == [
            (DiagnosticKind.BINARY_SKIP, DiagnosticLevel.INFO, "image.png")
        ]

    def test_oversized_file_is_skipped_with_warning(self, tmp_path: Path, write_file):
        write_file(tmp_path, "big.txt", "http://x " * 10)
        report = ScanEngine(ScanTarget(roots=(str(tmp_path),)), max_file_size=16).run()
        assert report.passed
        assert report.files_skipped == 1
        assert report.diagnostics[0].kind == DiagnosticKind.FILE_UNREADABLE
        assert report.diagnostics[0].level == DiagnosticLevel.WARNING

    def test_whitelist_diagnostics_reach_the_report(self, project_target):
        whitelist = load_whitelist_from_string("src/app.py:x\n", source="nohttp.txt")
        report = ScanEngine(project_target, whitelist).run()
        kinds = [d.kind for d in report.diagnostics]
        assert kinds == [DiagnosticKind.MALFORMED_WHITELIST_ENTRY]
        assert report.violation_count == 2

    def test_excluded_files_are_not_scanned(self, project):
        target = ScanTarget(roots=(str(project),), exclude=("src/**",))
        report = ScanEngine(target).run()
        assert report.passed
        assert report.files_scanned == 1

    def test_invalid_root_raises(self, tmp_path: Path):
        with pytest.raises(InvalidRootError):
            ScanEngine(ScanTarget(roots=(str(tmp_path / "missing"),))).run()

    def test_timeout_carries_partial_report(self, project_target, monkeypatch):
        clock = itertools.count(0, 10)
        monkeypatch.setattr(engine_module.time, "time", lambda: next(clock))

        engine = ScanEngine(project_target, workers=1, timeout=1.0)
        with pytest.raises(ScanTimeoutError) as exc_info:
            engine.run()

        assert exc_info.value.timeout == 1.0
        assert exc_info.value.report.files_scanned < 2
        assert "timed out" in str(exc_info.value)

    def test_parallel_timeout_counts_resolution_time(self, project_target, monkeypatch):
        clock = itertools.count(0, 10)
        monkeypatch.setattr(engine_module.time, "time", lambda: next(clock))

        gate = threading.Event()
        scan_file = ScanEngine._scan_file

        def slow_scan_file(self, resolved):
            gate.wait(0.5)
            return scan_file(self, resolved)

        monkeypatch.setattr(ScanEngine, "_scan_file", slow_scan_file)

        # Resolving alone uses up the budget, so nothing is waited for
        engine = ScanEngine(project_target, workers=4, timeout=1.0)
        with pytest.raises(ScanTimeoutError) as exc_info:
            engine.run()

        assert exc_info.value.report.files_scanned == 0

    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        reason="needs POSIX permissions and a non-root user",
    )
    def test_unreadable_file_is_skipped_with_warning(self, tmp_path: Path, write_file):
        write_file(tmp_path, "a.txt", "http://a")
        locked = write_file(tmp_path, "locked.txt", "http://secret")
        locked.chmod(0)
        try:
            report = ScanEngine(ScanTarget(roots=(str(tmp_path),)), workers=1).run()
        finally:
            locked.chmod(0o644)

        assert [v.file_path for v in report.violations] == ["a.txt"]
        assert report.files_scanned == 1
        assert report.files_skipped == 1
        assert [(d.kind, d.level, d.path) for d in report.diagnostics] == [
            (DiagnosticKind.FILE_UNREADABLE, DiagnosticLevel.WARNING, "locked.txt")
        ]
