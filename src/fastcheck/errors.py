"""Custom exceptions for fastcheck.

This module defines typed exceptions for better error handling and clearer
error messages throughout the application.
"""

from typing import List


class FastcheckError(RuntimeError):
    """Base class for all fastcheck errors."""
    pass


# Configuration Errors
class ConfigError(FastcheckError):
    """Missing, unreadable or invalid configuration."""
    pass


class InvalidPatternError(ConfigError):
    """Exclude pattern is not a usable glob."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid exclude pattern {pattern!r}: {reason}")


# Traversal Errors
class TraversalError(FastcheckError):
    """Enumeration of a root failed."""

    def __init__(self, root: str, path: str, cause: object):
        self.root = root
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot enumerate {root}: {path}: {cause}")


class SymlinkCycleError(TraversalError):
    """Symlink resolution looped or exceeded the hop limit."""

    def __init__(self, root: str, path: str, chain: List[str]):
        self.chain = chain
        super().__init__(root, path, "symlink cycle via " + " -> ".join(chain))


class BrokenSymlinkError(TraversalError):
    """Followed symlink points at nothing."""

    def __init__(self, root: str, path: str, target: str):
        self.target = target
        super().__init__(root, path, f"broken symlink to {target}")


# Per-file Errors
class FileReadError(FastcheckError):
    """A single file could not be stat'ed or read."""

    def __init__(self, path: str, cause: object):
        self.path = path
        self.cause = cause
        super().__init__(f"{path}: {cause}")


class StrictModeError(FastcheckError):
    """A per-file failure aborted the run because strict mode is on."""

    def __init__(self, failures: list):
        self.failures = failures
        first = failures[0]
        more = f" (and {len(failures) - 1} more)" if len(failures) > 1 else ""
        super().__init__(f"Aborted in strict mode: {first.path}: {first.message}{more}")


# Parse Errors
class ParseError(FastcheckError):
    """A record stream contained a malformed line."""

    def __init__(self, source: str, line_no: int, line: str, reason: str):
        self.source = source
        self.line_no = line_no
        self.line = line
        self.reason = reason
        super().__init__(f"{source}:{line_no}: {reason}: {line!r}")


class SnapshotParseError(ParseError):
    """Malformed snapshot / diff-source line."""
    pass


class ChecklistParseError(ParseError):
    """Malformed verification list line."""
    pass


# Snapshot Errors
class SnapshotError(FastcheckError):
    """Snapshot file could not be read or written."""

    def __init__(self, path: str, cause: object):
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot access snapshot {path}: {cause}")
