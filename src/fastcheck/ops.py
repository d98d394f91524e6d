"""Core operations for fastcheck."""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, TextIO

from .aggregate import tree_digest
from .config import CheckConfig
from .core import Batch, DiffResult, FileFailure, Task
from .diffing import compute_diff
from .errors import ConfigError, TraversalError
from .scheduler import FailureCallback, WorkScheduler
from .snapshot import FingerprintSnapshot
from .walker import enumerate_roots

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Everything one fingerprinting run produced."""

    tasks: List[Task]
    batches: List[Batch] = field(default_factory=list)
    failures: List[FileFailure] = field(default_factory=list)
    root_failures: List[TraversalError] = field(default_factory=list)
    tree_digest: Optional[bytes] = None

    @property
    def hashed(self) -> List[Task]:
        """Tasks that received a digest, in enumeration order."""
        return [task for task in self.tasks if task.digest is not None]

    @property
    def is_empty(self) -> bool:
        return not self.hashed

    @property
    def has_errors(self) -> bool:
        return bool(self.failures or self.root_failures)

    def snapshot(self) -> FingerprintSnapshot:
        return FingerprintSnapshot.from_tasks(self.tasks)


def fingerprint_tasks(
    tasks: List[Task],
    config: CheckConfig,
    on_failure: Optional[FailureCallback] = None,
) -> RunResult:
    """Hash the tasks in parallel and reduce them to a tree digest.

    Raises:
        StrictModeError: If strict mode is on and any file failed
    """
    scheduled = WorkScheduler(config, on_failure=on_failure).run(tasks)
    return RunResult(
        tasks=tasks,
        batches=scheduled.batches,
        failures=scheduled.failures,
        tree_digest=tree_digest(scheduled.batches, config.algorithm),
    )


def fingerprint_tree(config: CheckConfig, on_failure: Optional[FailureCallback] = None) -> RunResult:
    """Enumerate the configured roots and fingerprint every file found.

    Raises:
        ConfigError: If no roots are configured
        TraversalError: If a root fails in strict mode
        StrictModeError: If a file fails in strict mode
    """
    if not config.roots:
        raise ConfigError("No roots configured")

    enumerated = enumerate_roots(config)
    tasks = [Task(path=path) for path in enumerated.paths]
    result = fingerprint_tasks(tasks, config, on_failure=on_failure)
    result.root_failures = enumerated.failures

    if config.save_snapshot:
        result.snapshot().save(config.snapshot_path)
    return result


def read_path_list(stream: TextIO) -> List[str]:
    """Read newline-delimited paths, dropping blank lines, sorted."""
    paths = [line.rstrip("\r\n") for line in stream]
    return sorted(p for p in paths if p.strip())


def fingerprint_paths(
    paths: Iterable[str],
    config: CheckConfig,
    on_failure: Optional[FailureCallback] = None,
) -> RunResult:
    """Fingerprint an explicit list of files instead of walking a tree."""
    tasks = [Task(path=path) for path in paths]
    return fingerprint_tasks(tasks, config, on_failure=on_failure)


def diff_against(baseline: FingerprintSnapshot, result: RunResult) -> DiffResult:
    """Compare a baseline snapshot with the fingerprints of a run."""
    return compute_diff(baseline.records, result.snapshot().persisted_records())
