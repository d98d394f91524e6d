"""Verification of files against a recorded ``<digest> <path>`` list."""

from dataclasses import dataclass
from typing import List, Optional

from .config import CheckConfig
from .core import Task, VerifyResult
from .errors import ChecklistParseError
from .hashing import Algorithm, parse_digest
from .scheduler import FailureCallback, WorkScheduler


@dataclass(frozen=True)
class ChecklistEntry:
    """Expected digest for one path."""

    path: str
    expected: bytes


def parse_checklist(
    text: str,
    algorithm: Algorithm = Algorithm.XXH3,
    source: str = "<checklist>",
) -> List[ChecklistEntry]:
    """Parse a verification list.

    Each non-blank line is ``<digest> <path>``; digests may use colon
    separators and must have the algorithm's size. Entries come back sorted
    by path.

    Raises:
        ChecklistParseError: On the first malformed line
    """
    entries = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        fields = line.split()
        if len(fields) != 2:
            raise ChecklistParseError(source, line_no, line, "Incorrect line format")
        digest_hex, path = fields
        try:
            expected = parse_digest(digest_hex, algorithm)
        except ValueError as e:
            raise ChecklistParseError(source, line_no, line, str(e)) from e
        entries.append(ChecklistEntry(path=path, expected=expected))
    entries.sort(key=lambda entry: entry.path)
    return entries


def verify_entries(
    entries: List[ChecklistEntry],
    config: CheckConfig,
    on_failure: Optional[FailureCallback] = None,
) -> VerifyResult:
    """Re-hash every listed file and compare with its recorded digest.

    A mismatch is not an error: it is collected and the remaining files are
    still checked. Unreadable files follow the scheduler's strict/lenient
    policy and, when skipped, still make the result fail.
    """
    tasks = [Task(path=entry.path) for entry in entries]
    scheduled = WorkScheduler(config, on_failure=on_failure).run(tasks)

    result = VerifyResult(checked=scheduled.hashed, unreadable=scheduled.failures)
    for task, entry in zip(tasks, entries):
        if task.digest is not None and task.digest != entry.expected:
            result.mismatches.append(task.path)
    return result
