"""Digest primitives for file and aggregate fingerprints.

Two strengths are supported: XXH3-64 for fast change detection (8 bytes, the
little-endian encoding of the 64-bit hash value) and SHA256 where higher
collision resistance is needed (32 bytes).
"""

import hashlib
import os
from enum import Enum
from pathlib import Path
from typing import Optional, Union

import xxhash

from .constants import FAST_DIGEST_SIZE, INITIAL_BUFFER_SIZE, SHA256_DIGEST_SIZE


class Algorithm(str, Enum):
    """Supported digest algorithms."""

    XXH3 = "xxh3"
    SHA256 = "sha256"

    @property
    def digest_size(self) -> int:
        if self is Algorithm.SHA256:
            return SHA256_DIGEST_SIZE
        return FAST_DIGEST_SIZE


class _Xxh3Hasher:
    """hashlib-style wrapper producing the little-endian XXH3-64 encoding."""

    def __init__(self):
        self._h = xxhash.xxh3_64()

    def update(self, data) -> None:
        self._h.update(data)

    def digest(self) -> bytes:
        return self._h.intdigest().to_bytes(FAST_DIGEST_SIZE, "little")


def new_hasher(algorithm: Algorithm):
    """Create an incremental hasher with ``update``/``digest``."""
    if algorithm is Algorithm.SHA256:
        return hashlib.sha256()
    return _Xxh3Hasher()


def digest_bytes(data, algorithm: Algorithm = Algorithm.XXH3) -> bytes:
    """Digest a byte buffer.

    Args:
        data: Any object supporting the buffer protocol
        algorithm: Digest algorithm

    Returns:
        Fixed-size digest (``algorithm.digest_size`` bytes)
    """
    h = new_hasher(algorithm)
    h.update(data)
    return h.digest()


class ScratchBuffer:
    """Growable read buffer private to one worker.

    Reused across the files of a batch so large files do not cost one
    allocation each.
    """

    def __init__(self, size: int = INITIAL_BUFFER_SIZE):
        self.data = bytearray(size)

    def reserve(self, size: int) -> None:
        if size > len(self.data):
            self.data = bytearray(size)

    def grow(self) -> None:
        self.data.extend(bytes(max(len(self.data), INITIAL_BUFFER_SIZE)))


def _read_into(handle, scratch: ScratchBuffer) -> int:
    """Read the whole file into ``scratch`` and return the byte count."""
    size = os.fstat(handle.fileno()).st_size
    # One spare byte so a file at exactly its stat size hits EOF without a resize
    scratch.reserve(size + 1)
    filled = 0
    while True:
        if filled == len(scratch.data):
            # File grew after fstat
            scratch.grow()
        with memoryview(scratch.data)[filled:] as window:
            n = handle.readinto(window)
        if not n:
            return filled
        filled += n


def compute_file_digest(
    path: Union[str, Path],
    algorithm: Algorithm = Algorithm.XXH3,
    scratch: Optional[ScratchBuffer] = None,
    salt_with_path: bool = False,
) -> bytes:
    """Compute the digest of a file's contents.

    Every call re-reads the file from storage; nothing is cached.

    Args:
        path: File to hash
        algorithm: Digest algorithm
        scratch: Worker buffer to read into (a fresh one is used if omitted)
        salt_with_path: Append the UTF-8 path to the hashed bytes so equal
            content at different paths produces different digests

    Returns:
        Raw digest bytes

    Raises:
        OSError: If the file cannot be opened, stat'ed or read
    """
    if scratch is None:
        scratch = ScratchBuffer()
    with open(path, "rb") as handle:
        filled = _read_into(handle, scratch)
    h = new_hasher(algorithm)
    with memoryview(scratch.data)[:filled] as content:
        h.update(content)
    if salt_with_path:
        h.update(os.fsencode(str(path)))
    return h.digest()


def format_digest(digest: bytes, colon: bool = False) -> str:
    """Render a digest as upper-case hex, optionally ``AB:CD:..`` separated."""
    if colon:
        return ":".join(f"{b:02X}" for b in digest)
    return digest.hex().upper()


def parse_digest(text: str, algorithm: Optional[Algorithm] = None) -> bytes:
    """Decode a hex digest, with or without colon separators.

    Raises:
        ValueError: If the text is not hex or has the wrong size for ``algorithm``
    """
    raw = text.replace(":", "")
    try:
        digest = bytes.fromhex(raw)
    except ValueError:
        raise ValueError(f"Unable to decode hex: {text}")
    if algorithm is not None and len(digest) != algorithm.digest_size:
        raise ValueError(f"Hash should have {algorithm.digest_size} bytes")
    return digest


__all__ = [
    "Algorithm",
    "ScratchBuffer",
    "compute_file_digest",
    "digest_bytes",
    "format_digest",
    "new_hasher",
    "parse_digest",
]
