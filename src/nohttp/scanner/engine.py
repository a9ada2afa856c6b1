"""Scan engine — orchestrates file resolution, line scanning and whitelisting."""

from __future__ import annotations

import concurrent.futures
import logging
import os
import time
from dataclasses import dataclass

from nohttp.errors import BinarySkipWarning, FileUnreadableWarning, ScanTimeoutError
from nohttp.scanner.files import ResolvedFile, resolve
from nohttp.scanner.lines import DEFAULT_MAX_FILE_SIZE, read_scannable, scan_lines
from nohttp.scanner.models import (
    Diagnostic,
    DiagnosticKind,
    DiagnosticLevel,
    ScanReport,
    ScanTarget,
    Violation,
)
from nohttp.whitelist.matcher import WhitelistMatcher
from nohttp.whitelist.models import Whitelist

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _FileOutcome:
    """Result slot for one file; written once by the task that owns it."""

    violations: tuple[Violation, ...] = ()
    diagnostic: Diagnostic | None = None

    @property
    def skipped(self) -> bool:
        return self.diagnostic is not None


class ScanEngine:
    """Scans a target for non-whitelisted ``http://`` occurrences."""

    def __init__(
        self,
        target: ScanTarget,
        whitelist: Whitelist | None = None,
        workers: int | None = None,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        timeout: float | None = None,
    ) -> None:
        self.target = target
        self.whitelist = whitelist if whitelist is not None else Whitelist.empty()
        self._matcher = WhitelistMatcher(self.whitelist)
        self._workers = workers if workers and workers > 0 else (os.cpu_count() or 1)
        self.max_file_size = max_file_size
        self._timeout = timeout

    def resolve_files(self) -> tuple[list[ResolvedFile], list[Diagnostic]]:
        file_set = resolve(
            self.target.roots,
            self.target.include,
            self.target.effective_excludes,
        )
        return file_set.files, file_set.diagnostics

    def run(
        self,
        resolved: tuple[list[ResolvedFile], list[Diagnostic]] | None = None,
    ) -> ScanReport:
        """Scan every resolved file and return the aggregated report.

        ``resolved`` may carry the output of an earlier ``resolve_files()``
        call to avoid walking the roots twice.

        Raises ``InvalidRootError`` for bad roots and ``ScanTimeoutError``
        (with the partial report attached) when the timeout expires.
        """
        start = time.time()
        files, diagnostics = resolved if resolved is not None else self.resolve_files()
        diagnostics = list(diagnostics)
        logger.debug("Resolved %d files under %s", len(files), ", ".join(self.target.roots))

        slots: list[_FileOutcome | None] = [None] * len(files)
        timed_out = False

        if self._workers == 1 or len(files) <= 1:
            for index, resolved in enumerate(files):
                if self._timeout is not None and time.time() - start > self._timeout:
                    timed_out = True
                    break
                slots[index] = self._scan_file(resolved)
        else:
            timed_out = self._run_parallel(files, slots, start)

        report = self._merge(slots, list(self.whitelist.diagnostics) + diagnostics)
        report.roots = tuple(self.target.roots)
        report.duration = time.time() - start

        if timed_out:
            raise ScanTimeoutError(self._timeout or 0.0, report)

        logger.info(
            "Scanned %d files (%d skipped) in %.2fs: %d violation(s)",
            report.files_scanned,
            report.files_skipped,
            report.duration,
            report.violation_count,
        )
        return report

    def _run_parallel(
        self,
        files: list[ResolvedFile],
        slots: list[_FileOutcome | None],
        start: float,
    ) -> bool:
        """Fill ``slots`` using a thread pool. Returns True on timeout.

        The timeout budget is shared with file resolution, so only what is
        left of it since ``start`` is waited for. Files not yet started are
        cancelled; reads already in flight finish before this returns, and
        their results are discarded.
        """
        remaining = None
        if self._timeout is not None:
            remaining = max(0.0, self._timeout - (time.time() - start))

        pool = concurrent.futures.ThreadPoolExecutor(
            max_workers=self._workers,
            thread_name_prefix="nohttp-scan",
        )
        try:
            futures = {
                pool.submit(self._scan_file, resolved): index
                for index, resolved in enumerate(files)
            }
            done, pending = concurrent.futures.wait(futures, timeout=remaining)
            for future in done:
                slots[futures[future]] = future.result()
            for future in pending:
                future.cancel()
            return bool(pending)
        finally:
            pool.shutdown(wait=True, cancel_futures=True)

    def _scan_file(self, resolved: ResolvedFile) -> _FileOutcome:
        try:
            content = read_scannable(resolved.path, self.max_file_size)
        except BinarySkipWarning as w:
            logger.debug("Skipping binary file %s: %s", resolved.path, w.message)
            return _FileOutcome(
                diagnostic=Diagnostic(
                    kind=DiagnosticKind.BINARY_SKIP,
                    level=DiagnosticLevel.INFO,
                    path=resolved.relative_path,
                    message=w.message,
                )
            )
        except FileUnreadableWarning as w:
            logger.warning("Skipping %s: %s", resolved.path, w.message)
            return _FileOutcome(
                diagnostic=Diagnostic(
                    kind=DiagnosticKind.FILE_UNREADABLE,
                    level=DiagnosticLevel.WARNING,
                    path=resolved.relative_path,
                    message=w.message,
                )
            )

        raw = scan_lines(resolved.relative_path, content, root=resolved.root)
        return _FileOutcome(violations=tuple(self._matcher.filter(raw)))

    @staticmethod
    def _merge(
        slots: list[_FileOutcome | None],
        diagnostics: list[Diagnostic],
    ) -> ScanReport:
        """Assemble the report in file-enumeration order."""
        violations: list[Violation] = []
        scanned = skipped = 0
        for outcome in slots:
            if outcome is None:
                continue
            if outcome.skipped:
                skipped += 1
                diagnostics.append(outcome.diagnostic)
                continue
            scanned += 1
            violations.extend(outcome.violations)

        return ScanReport(
            violations=tuple(violations),
            files_scanned=scanned,
            files_skipped=skipped,
            diagnostics=tuple(diagnostics),
        )
