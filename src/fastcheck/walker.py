"""Directory tree enumeration.

Produces the ordered list of regular files under each configured root.
Entries are visited in lexicographic order per directory, depth first, so
the same tree always yields the same list and therefore the same tree digest.
"""

import logging
import os
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Set

from .config import CheckConfig
from .constants import MAX_SYMLINK_DEPTH
from .errors import BrokenSymlinkError, SymlinkCycleError, TraversalError
from .ignore import IgnoreSpec

logger = logging.getLogger(__name__)


@dataclass
class EnumerationResult:
    """Files found across all roots plus the roots that failed."""

    paths: List[str] = field(default_factory=list)
    failures: List[TraversalError] = field(default_factory=list)


def resolve_symlink(path: str, root: str = "", max_depth: int = MAX_SYMLINK_DEPTH) -> str:
    """Follow a chain of symlinks to the path that is not a link.

    Args:
        path: Entry that may be a symlink
        root: Root being enumerated, for error messages
        max_depth: Maximum number of hops

    Returns:
        Final non-link path (which may not exist)

    Raises:
        SymlinkCycleError: If the chain revisits a link or exceeds max_depth
    """
    chain: List[str] = []
    seen: Set[str] = set()
    current = path
    while os.path.islink(current):
        if current in seen or len(chain) >= max_depth:
            raise SymlinkCycleError(root, path, chain + [current])
        seen.add(current)
        chain.append(current)
        current = os.path.join(os.path.dirname(current), os.readlink(current))
    return current


class _RootWalker:
    """Walks one root; any OS error aborts the walk with TraversalError."""

    def __init__(self, root: str, config: CheckConfig):
        self.root = root
        self.follow_symlinks = config.follow_symlinks
        self.max_depth = config.max_symlink_depth
        self.ignore = IgnoreSpec(Path(root), config.excludes)
        self.paths: List[str] = []

    def run(self) -> List[str]:
        try:
            st = os.stat(self.root) if self.follow_symlinks else os.lstat(self.root)
        except OSError as e:
            raise TraversalError(self.root, self.root, e) from e
        if stat.S_ISLNK(st.st_mode):
            logger.debug("Skipping symlinked root %s", self.root)
            return self.paths
        if stat.S_ISREG(st.st_mode):
            if not self.ignore.matches_glob(self.root):
                self.paths.append(self.root)
            return self.paths
        if not stat.S_ISDIR(st.st_mode):
            raise TraversalError(self.root, self.root, "not a directory or regular file")
        self._walk(self.root, {os.path.realpath(self.root)})
        return self.paths

    def _walk(self, directory: str, ancestors: Set[str]) -> None:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise TraversalError(self.root, directory, e) from e

        for entry in entries:
            self._visit(entry.path, ancestors)

    def _visit(self, path: str, ancestors: Set[str]) -> None:
        try:
            st = os.lstat(path)
        except OSError as e:
            raise TraversalError(self.root, path, e) from e

        # Globs need no file type, so excluded links are never resolved
        if self.ignore.matches_glob(path):
            logger.debug("Excluded %s", path)
            return

        if stat.S_ISLNK(st.st_mode):
            if not self.follow_symlinks:
                logger.debug("Skipping symlink %s", path)
                return
            target = resolve_symlink(path, self.root, self.max_depth)
            try:
                st = os.stat(target)
            except FileNotFoundError as e:
                raise BrokenSymlinkError(self.root, path, target) from e
            except OSError as e:
                raise TraversalError(self.root, path, e) from e

        is_dir = stat.S_ISDIR(st.st_mode)
        if self.ignore.is_excluded(path, is_dir=is_dir):
            logger.debug("Excluded %s", path)
            return

        if is_dir:
            real = os.path.realpath(path)
            if real in ancestors:
                raise SymlinkCycleError(self.root, path, [path, real])
            self._walk(path, ancestors | {real})
        elif stat.S_ISREG(st.st_mode):
            self.paths.append(path)
        else:
            logger.debug("Skipping non-regular file %s", path)


def enumerate_root(root: str, config: CheckConfig) -> List[str]:
    """List regular files under one root.

    Args:
        root: Directory (or single file) to enumerate
        config: Run configuration (excludes, symlink policy)

    Returns:
        Absolute file paths in traversal order

    Raises:
        TraversalError: On any stat/listing failure, symlink cycle or
            broken followed symlink
    """
    return _RootWalker(os.path.abspath(root), config).run()


def enumerate_roots(config: CheckConfig) -> EnumerationResult:
    """Enumerate every configured root in order.

    Roots are independent: in lenient mode a failing root is recorded and
    contributes no files while the others continue. In strict mode the first
    failure is raised.
    """
    result = EnumerationResult()
    for root in config.roots:
        try:
            paths = enumerate_root(root, config)
        except TraversalError as e:
            if config.strict:
                raise
            logger.warning("Skipping root %s: %s", root, e)
            result.failures.append(e)
            continue
        logger.debug("Enumerated %d files under %s", len(paths), root)
        result.paths.extend(paths)
    return result
