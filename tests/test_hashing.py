"""Tests for hashing module."""

import hashlib
import os

import pytest
import xxhash

from fastcheck.hashing import (
    Algorithm,
    ScratchBuffer,
    compute_file_digest,
    digest_bytes,
    format_digest,
    parse_digest,
)


class TestDigestPrimitive:
    """Test byte-buffer digests."""

    def test_digest_sizes(self):
        """Fast digests are 8 bytes, SHA256 digests 32."""
        assert len(digest_bytes(b"abc", Algorithm.XXH3)) == 8
        assert len(digest_bytes(b"abc", Algorithm.SHA256)) == 32
        assert Algorithm.XXH3.digest_size == 8
        assert Algorithm.SHA256.digest_size == 32

    def test_fast_digest_is_little_endian_xxh3(self):
        """XXH3-64 value is encoded little-endian."""
        expected = xxhash.xxh3_64_intdigest(b"abc").to_bytes(8, "little")
        assert digest_bytes(b"abc") == expected

    def test_sha256_matches_hashlib(self):
        assert digest_bytes(b"abc", Algorithm.SHA256) == hashlib.sha256(b"abc").digest()

    def test_algorithm_from_string(self):
        assert Algorithm("sha256") is Algorithm.SHA256
        assert Algorithm("xxh3") is Algorithm.XXH3


class TestFileDigest:
    """Test file-based hashing."""

    @pytest.mark.parametrize("algorithm", [Algorithm.XXH3, Algorithm.SHA256])
    def test_file_digest_matches_content_digest(self, tmp_path, algorithm):
        path = tmp_path / "data.bin"
        path.write_bytes(b"\x00\x01\x02\x03payload")

        assert compute_file_digest(path, algorithm) == digest_bytes(b"\x00\x01\x02\x03payload", algorithm)

    def test_file_digest_detects_changes(self, tmp_path):
        """Any byte change alters the digest."""
        path = tmp_path / "test.py"
        path.write_text("def foo():\n    return 42")
        before = compute_file_digest(path)

        path.write_text("def foo():\n    return 43")

        assert compute_file_digest(path) != before

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty"
        path.write_bytes(b"")

        assert compute_file_digest(path) == digest_bytes(b"")

    def test_scratch_buffer_reuse(self, tmp_path):
        """A reused buffer must not leak bytes from a larger earlier file."""
        big = tmp_path / "big"
        big.write_bytes(b"x" * 200_000)
        small = tmp_path / "small"
        small.write_bytes(b"tiny")
        scratch = ScratchBuffer(size=16)

        assert compute_file_digest(big, scratch=scratch) == digest_bytes(b"x" * 200_000)
        assert len(scratch.data) > 200_000
        assert compute_file_digest(small, scratch=scratch) == digest_bytes(b"tiny")

    def test_salt_with_path(self, tmp_path):
        """Salting makes identical content at two paths differ."""
        first = tmp_path / "one.txt"
        second = tmp_path / "two.txt"
        first.write_text("same")
        second.write_text("same")

        assert compute_file_digest(first) == compute_file_digest(second)
        salted_first = compute_file_digest(first, salt_with_path=True)
        salted_second = compute_file_digest(second, salt_with_path=True)
        assert salted_first != salted_second
        assert salted_first == digest_bytes(b"same" + os.fsencode(str(first)))

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(OSError):
            compute_file_digest(tmp_path / "missing")


class TestFormatting:
    """Test hex rendering and parsing."""

    def test_format_upper_hex(self):
        assert format_digest(bytes([0x0A, 0xFF, 0x00])) == "0AFF00"

    def test_format_colon(self):
        assert format_digest(bytes([0x0A, 0xFF, 0x00]), colon=True) == "0A:FF:00"

    def test_parse_accepts_colons_and_lowercase(self):
        assert parse_digest("0a:ff:00") == bytes([0x0A, 0xFF, 0x00])
        assert parse_digest("0AFF00") == bytes([0x0A, 0xFF, 0x00])

    def test_parse_checks_size(self):
        with pytest.raises(ValueError, match="8 bytes"):
            parse_digest("0AFF", Algorithm.XXH3)
        assert len(parse_digest("00" * 32, Algorithm.SHA256)) == 32

    def test_parse_rejects_non_hex(self):
        with pytest.raises(ValueError, match="decode"):
            parse_digest("not-hex")
