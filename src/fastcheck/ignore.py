"""Exclusion rules for tree enumeration."""

import fnmatch
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

from pathspec import PathSpec
from pathspec.patterns import GitWildMatchPattern

from .constants import IGNORE_FILE
from .errors import InvalidPatternError

logger = logging.getLogger(__name__)


def validate_pattern(pattern: str) -> None:
    """Reject exclude globs that cannot mean what was intended.

    fnmatch silently treats an unterminated ``[`` as a literal, which hides
    typos like ``*.[ch``; those are reported instead.

    Raises:
        InvalidPatternError: If the pattern is empty or has an unclosed class
    """
    if not pattern or not pattern.strip():
        raise InvalidPatternError(pattern, "empty pattern")
    i, n = 0, len(pattern)
    while i < n:
        if pattern[i] == "[":
            j = i + 1
            if j < n and pattern[j] == "!":
                j += 1
            if j < n and pattern[j] == "]":
                j += 1
            close = pattern.find("]", j)
            if close < 0:
                raise InvalidPatternError(pattern, "unclosed '[' character class")
            i = close
        i += 1


def _load_ignore_file(root: Path) -> List[str]:
    ignore_file = root / IGNORE_FILE
    if not ignore_file.is_file():
        return []
    patterns = []
    for line in ignore_file.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)
    logger.debug("Loaded %d patterns from %s", len(patterns), ignore_file)
    return patterns


class IgnoreSpec:
    """Decides which entries under one root are excluded.

    Configured globs are matched against an entry's full path and against its
    base name; any match excludes it. Patterns from ``<root>/.fastcheckignore``
    use gitignore semantics against the root-relative POSIX path.
    """

    def __init__(self, root: Path, excludes: Iterable[str] = (), use_ignore_file: bool = True):
        """Build the exclusion rules for a root.

        Args:
            root: Root directory being enumerated
            excludes: Configured glob patterns
            use_ignore_file: Also read the root's ignore file if present
        """
        self.root = root
        self.excludes = list(excludes)
        for pattern in self.excludes:
            validate_pattern(pattern)

        file_patterns = _load_ignore_file(root) if use_ignore_file else []
        try:
            self.spec: Optional[PathSpec] = (
                PathSpec.from_lines(GitWildMatchPattern, file_patterns) if file_patterns else None
            )
        except ValueError as e:
            raise InvalidPatternError(str(root / IGNORE_FILE), str(e)) from e

    def matches_glob(self, path: str) -> bool:
        """Check configured globs against full path, then base name."""
        name = os.path.basename(path)
        for pattern in self.excludes:
            if fnmatch.fnmatch(path, pattern) or fnmatch.fnmatch(name, pattern):
                return True
        return False

    def is_excluded(self, path: str, is_dir: bool = False) -> bool:
        """Check if an absolute entry path under the root should be skipped.

        Args:
            path: Absolute path of the entry
            is_dir: Entry is a directory (gitignore ``dir/`` patterns apply)

        Returns:
            True if any exclusion rule matches
        """
        if self.matches_glob(path):
            return True
        if self.spec is None:
            return False
        try:
            rel = Path(path).relative_to(self.root).as_posix()
        except ValueError:
            return False
        if is_dir:
            rel += "/"
        return self.spec.match_file(rel)
