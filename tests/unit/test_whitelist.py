"""Tests for whitelist loading and matching."""

from __future__ import annotations

from pathlib import Path

import pytest

from nohttp.errors import MalformedWhitelistEntryError, WhitelistLoadError
from nohttp.scanner.models import DiagnosticKind, DiagnosticLevel, Violation
from nohttp.whitelist import (
    Whitelist,
    WhitelistEntry,
    WhitelistMatcher,
    is_whitelisted,
    load_whitelist,
    load_whitelist_from_string,
)
from nohttp.whitelist.loader import normalize_path, parse_entry


def _violation(path: str = "src/a.txt", line: int = 5, text: str = "x = http://a") -> Violation:
    return Violation(file_path=path, line_number=line, column_offset=4, line_text=text)


class TestParseEntry:
    def test_whole_file(self):
        entry = parse_entry("src/a.txt")
        assert entry.file_pattern == "src/a.txt"
        assert entry.line_number is None
        assert entry.whole_file

    def test_with_line_number(self):
        entry = parse_entry("src/a.txt:5")
        assert entry.file_pattern == "src/a.txt"
        assert entry.line_number == 5
        assert not entry.whole_file
        assert str(entry) == "src/a.txt:5"

    def test_path_is_normalized(self):
        assert parse_entry(".\\src\\\\a.txt").file_pattern == "src/a.txt"

    @pytest.mark.parametrize("line", ["a.txt:0", "a.txt:abc", "a.txt:", ":5", "a.txt:-1"])
    def test_malformed(self, line: str):
        with pytest.raises(MalformedWhitelistEntryError):
            parse_entry(line)

    def test_malformed_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_entry("a.txt:x")

    def test_normalize_path(self):
        assert normalize_path("./a//b\\c") == "a/b/c"


class TestLoadWhitelist:
    def test_skips_comments_and_blank_lines(self):
        whitelist = load_whitelist_from_string(
            "# comment\n\nsrc/a.txt\n   \nsrc/b.txt:12\n"
        )
        assert [str(e) for e in whitelist.entries] == ["src/a.txt", "src/b.txt:12"]
        assert whitelist.diagnostics == ()

    def test_malformed_lines_become_diagnostics(self):
        whitelist = load_whitelist_from_string(
            "src/a.txt\nsrc/b.txt:zero\nsrc/c.txt:3\n", source="nohttp.txt"
        )
        assert len(whitelist) == 2
        assert len(whitelist.diagnostics) == 1
        diag = whitelist.diagnostics[0]
        assert diag.kind == DiagnosticKind.MALFORMED_WHITELIST_ENTRY
        assert diag.level == DiagnosticLevel.WARNING
        assert diag.path == "nohttp.txt"
        assert diag.line_number == 2

    def test_none_gives_empty_whitelist(self):
        whitelist = load_whitelist(None)
        assert len(whitelist) == 0
        assert whitelist.entries == ()

    def test_load_from_file(self, tmp_path: Path):
        path = tmp_path / "nohttp.txt"
        path.write_text("src/a.txt:1\n", encoding="utf-8")
        whitelist = load_whitelist(path)
        assert whitelist.source == str(path)
        assert whitelist.entries == (WhitelistEntry("src/a.txt", line_number=1),)

    def test_bom_does_not_hide_first_entry(self, tmp_path: Path):
        path = tmp_path / "nohttp.txt"
        path.write_bytes(b"\xef\xbb\xbfa.txt\nb.txt:2\n")
        whitelist = load_whitelist(path)
        assert [e.file_pattern for e in whitelist.entries] == ["a.txt", "b.txt"]
        matcher = WhitelistMatcher(whitelist)
        assert matcher.is_whitelisted(_violation(path="a.txt", line=1))

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(WhitelistLoadError, match="does not exist"):
            load_whitelist(tmp_path / "missing.txt")

    def test_with_entries_returns_copy(self):
        base = load_whitelist_from_string("a.txt\n")
        extended = base.with_entries(WhitelistEntry("b.txt"))
        assert len(base) == 1
        assert len(extended) == 2


class TestMatcher:
    def test_line_entry_suppresses_only_that_line(self):
        matcher = WhitelistMatcher(load_whitelist_from_string("src/a.txt:5"))
        assert matcher.is_whitelisted(_violation(line=5))
        assert not matcher.is_whitelisted(_violation(line=6))

    def test_whole_file_entry(self):
        matcher = WhitelistMatcher(load_whitelist_from_string("src/a.txt"))
        assert matcher.is_whitelisted(_violation(line=1))
        assert matcher.is_whitelisted(_violation(line=999))

    def test_exact_path_only(self):
        matcher = WhitelistMatcher(load_whitelist_from_string("a.txt"))
        assert not matcher.is_whitelisted(_violation(path="src/a.txt"))
        assert not matcher.is_whitelisted(_violation(path="a.txt.bak"))

    def test_no_glob_support(self):
        matcher = WhitelistMatcher(load_whitelist_from_string("src/*.txt"))
        assert not matcher.is_whitelisted(_violation(path="src/a.txt"))

    def test_line_content(self):
        whitelist = Whitelist(
            entries=(WhitelistEntry("src/a.txt", line_content="x = http://a"),)
        )
        matcher = WhitelistMatcher(whitelist)
        assert matcher.is_whitelisted(_violation(text="   x = http://a  "))
        assert not matcher.is_whitelisted(_violation(text="y = http://a"))

    def test_line_number_and_content_must_both_match(self):
        whitelist = Whitelist(
            entries=(WhitelistEntry("src/a.txt", line_number=5, line_content="x = http://a"),)
        )
        matcher = WhitelistMatcher(whitelist)
        assert matcher.is_whitelisted(_violation(line=5))
        assert not matcher.is_whitelisted(_violation(line=6))
        assert not matcher.is_whitelisted(_violation(line=5, text="other"))

    def test_filter_keeps_order(self):
        matcher = WhitelistMatcher(load_whitelist_from_string("src/a.txt:2"))
        violations = [_violation(line=n) for n in (1, 2, 3)]
        assert [v.line_number for v in matcher.filter(violations)] == [1, 3]

    def test_empty_whitelist_filters_nothing(self):
        matcher = WhitelistMatcher(Whitelist.empty())
        violations = [_violation(line=1)]
        assert matcher.filter(violations) == violations

    def test_module_level_is_whitelisted(self):
        whitelist = load_whitelist_from_string("src/a.txt:5")
        assert is_whitelisted(_violation(line=5), whitelist)
        assert not is_whitelisted(_violation(line=4), whitelist)
