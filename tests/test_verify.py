"""Tests for verification against a recorded digest list."""

import pytest

from fastcheck.errors import ChecklistParseError, StrictModeError
from fastcheck.hashing import Algorithm, compute_file_digest, format_digest
from fastcheck.verify import ChecklistEntry, parse_checklist, verify_entries


class TestParseChecklist:
    """Test checklist parsing."""

    def test_sorted_by_path(self):
        text = "0101010101010101 /b\n0202020202020202 /a\n"

        entries = parse_checklist(text)

        assert entries == [
            ChecklistEntry(path="/a", expected=b"\x02" * 8),
            ChecklistEntry(path="/b", expected=b"\x01" * 8),
        ]

    def test_colon_digests(self):
        entries = parse_checklist("01:01:01:01:01:01:01:01 /a\n")

        assert entries[0].expected == b"\x01" * 8

    @pytest.mark.parametrize("line", ["/only-path", "0101010101010101 /a extra", "zz /a", "0101 /a"])
    def test_malformed_line_is_fatal(self, line):
        with pytest.raises(ChecklistParseError):
            parse_checklist(f"0101010101010101 /ok\n{line}\n")

    def test_sha256_size(self):
        with pytest.raises(ChecklistParseError):
            parse_checklist("0101010101010101 /a\n", Algorithm.SHA256)
        assert parse_checklist("00" * 32 + " /a\n", Algorithm.SHA256)[0].path == "/a"


class TestVerifyEntries:
    """Test re-hashing against expectations."""

    def _checklist(self, *paths):
        return [ChecklistEntry(path=str(p), expected=compute_file_digest(p)) for p in paths]

    def test_success(self, write_file, make_config):
        entries = self._checklist(write_file("a.txt", "A"), write_file("b.txt", "B"))

        result = verify_entries(entries, make_config())

        assert result.ok
        assert result.checked == 2
        assert result.mismatches == []

    def test_mismatch_reported_without_stopping(self, write_file, make_config):
        a = write_file("a.txt", "A")
        b = write_file("b.txt", "B")
        c = write_file("c.txt", "C")
        entries = self._checklist(a, b, c)
        a.write_text("changed")
        c.write_text("changed too")

        result = verify_entries(entries, make_config(cores=1))

        assert not result.ok
        assert result.mismatches == [str(a), str(c)]
        assert result.checked == 3

    def test_unreadable_file_fails_without_marker(self, tmp_path, write_file, make_config):
        a = write_file("a.txt", "A")
        entries = self._checklist(a) + [ChecklistEntry(path=str(tmp_path / "gone"), expected=b"\x00" * 8)]

        result = verify_entries(entries, make_config())

        assert not result.ok
        assert result.mismatches == []
        assert [f.path for f in result.unreadable] == [str(tmp_path / "gone")]

    def test_unreadable_file_strict(self, tmp_path, make_config):
        entries = [ChecklistEntry(path=str(tmp_path / "gone"), expected=b"\x00" * 8)]

        with pytest.raises(StrictModeError):
            verify_entries(entries, make_config(strict=True))

    def test_round_trip_with_formatted_digests(self, write_file, make_config):
        a = write_file("a.txt", "A")
        text = f"{format_digest(compute_file_digest(a), colon=True)} {a}\n"

        assert verify_entries(parse_checklist(text), make_config()).ok
