"""Core data models for fastcheck.

Tasks live in one flat list owned by the run. Batches never hold tasks
directly; they are contiguous index ranges into that list, so handing a
batch to a worker transfers ownership of exactly those slots and no two
workers ever touch the same task.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel


# ============= Fingerprinting =============

@dataclass(slots=True)
class Task:
    """A file to fingerprint."""

    path: str  # absolute path
    digest: Optional[bytes] = None

    @property
    def done(self) -> bool:
        return self.digest is not None

    def assign(self, digest: bytes) -> None:
        """Record the digest; a task is written exactly once."""
        if self.digest is not None:
            raise RuntimeError(f"Digest for {self.path} already assigned")
        self.digest = digest


@dataclass(slots=True)
class Batch:
    """Contiguous slice ``[start, stop)`` of the task list."""

    index: int
    start: int
    stop: int
    digest: Optional[bytes] = None

    def __len__(self) -> int:
        return self.stop - self.start

    @property
    def indices(self) -> range:
        return range(self.start, self.stop)


@dataclass(frozen=True)
class FileFailure:
    """A per-file error collected by a worker."""

    index: int
    path: str
    message: str


@dataclass
class BatchOutcome:
    """What a worker hands back after its slice is done."""

    batch: Batch
    hashed: int = 0
    failures: List[FileFailure] = field(default_factory=list)
    aborted: bool = False


# ============= Change Detection =============

class ChangeType(str, Enum):
    """Classification of a path between two fingerprint sets."""

    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"
    UNCHANGED = "unchanged"

    @property
    def marker(self) -> str:
        return _MARKERS[self]


_MARKERS = {
    ChangeType.ADDED: "+",
    ChangeType.REMOVED: "-",
    ChangeType.CHANGED: "~",
    ChangeType.UNCHANGED: " ",
}


class FileChange(BaseModel):
    """Single path difference."""

    path: str
    change_type: ChangeType
    previous: Optional[str] = None  # hex digest in the baseline
    current: Optional[str] = None  # hex digest in this run

    @property
    def digest(self) -> str:
        """Digest shown for the change: the current one unless the path is gone."""
        return self.current if self.current is not None else self.previous


class DiffResult(BaseModel):
    """Result of comparing a baseline snapshot with the current run.

    ``changes`` never contains UNCHANGED entries and is ordered by category
    (added, removed, changed) then path.
    """

    changes: List[FileChange]
    unchanged: int = 0

    def _of(self, change_type: ChangeType) -> List[FileChange]:
        return [c for c in self.changes if c.change_type == change_type]

    @property
    def added(self) -> List[FileChange]:
        return self._of(ChangeType.ADDED)

    @property
    def removed(self) -> List[FileChange]:
        return self._of(ChangeType.REMOVED)

    @property
    def changed(self) -> List[FileChange]:
        return self._of(ChangeType.CHANGED)

    @property
    def is_empty(self) -> bool:
        return not self.changes

    @property
    def summary(self) -> Dict[ChangeType, int]:
        """Get counts by change type."""
        counts = {}
        for change in self.changes:
            counts[change.change_type] = counts.get(change.change_type, 0) + 1
        return counts


# ============= Verification =============

@dataclass
class VerifyResult:
    """Outcome of checking files against a recorded list."""

    checked: int = 0
    mismatches: List[str] = field(default_factory=list)
    unreadable: List[FileFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.mismatches and not self.unreadable
