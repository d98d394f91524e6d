"""Fork-join fingerprinting of a task list.

The task list is cut into contiguous, disjoint index ranges and each range is
handed to its own worker thread. Workers only write the tasks inside their
range, so the list is shared without locks. The scheduler waits for every
worker before returning.
"""

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .aggregate import batch_digest
from .config import CheckConfig
from .core import Batch, BatchOutcome, FileFailure, Task
from .errors import StrictModeError
from .hashing import ScratchBuffer, compute_file_digest

logger = logging.getLogger(__name__)

FailureCallback = Callable[[FileFailure], None]


def effective_workers(cap: int, task_count: int) -> int:
    """Parallelism budget: min(cap, hardware threads, task count).

    A cap of 0 means "use all hardware threads".
    """
    if task_count <= 0:
        return 0
    hardware = os.cpu_count() or 1
    budget = min(cap, hardware) if cap > 0 else hardware
    return max(1, min(budget, task_count))


def partition(task_count: int, batch_count: int) -> List[Batch]:
    """Split ``range(task_count)`` into contiguous batches.

    Every batch but the last has ``ceil(task_count / batch_count)`` tasks.
    The same inputs always give the same boundaries.
    """
    if task_count <= 0 or batch_count <= 0:
        return []
    size = -(-task_count // batch_count)
    return [
        Batch(index=index, start=start, stop=min(start + size, task_count))
        for index, start in enumerate(range(0, task_count, size))
    ]


@dataclass
class ScheduleResult:
    """Batches (with digests) and every per-file failure, in task order."""

    batches: List[Batch]
    failures: List[FileFailure] = field(default_factory=list)
    hashed: int = 0


class WorkScheduler:
    """Runs one worker per batch and applies the failure policy.

    Workers never raise on file errors; they record a FileFailure and move on.
    The scheduler alone decides what a failure means: in strict mode the
    first one stops the remaining workers and the run raises StrictModeError
    after all workers have returned.
    """

    def __init__(self, config: CheckConfig, on_failure: Optional[FailureCallback] = None):
        self.config = config
        self.on_failure = on_failure

    def run(self, tasks: List[Task]) -> ScheduleResult:
        workers = effective_workers(self.config.cores, len(tasks))
        batches = partition(len(tasks), workers)
        if not batches:
            return ScheduleResult(batches=[])

        logger.debug(
            "Hashing %d files in %d batches of up to %d",
            len(tasks), len(batches), len(batches[0]),
        )
        abort = threading.Event()
        with ThreadPoolExecutor(max_workers=len(batches), thread_name_prefix="fastcheck") as executor:
            futures = [executor.submit(self._work, tasks, batch, abort) for batch in batches]
            outcomes: List[BatchOutcome] = [f.result() for f in futures]

        failures = sorted(
            (failure for outcome in outcomes for failure in outcome.failures),
            key=lambda failure: failure.index,
        )
        if self.config.strict and failures:
            raise StrictModeError(failures)

        return ScheduleResult(
            batches=batches,
            failures=failures,
            hashed=sum(outcome.hashed for outcome in outcomes),
        )

    def _record_failure(self, failure: FileFailure, abort: threading.Event) -> None:
        logger.debug("Failed to hash %s: %s", failure.path, failure.message)
        if self.on_failure is not None:
            self.on_failure(failure)
        if self.config.strict:
            abort.set()

    def _work(self, tasks: List[Task], batch: Batch, abort: threading.Event) -> BatchOutcome:
        """Hash every task in the batch, in index order, then reduce the batch."""
        outcome = BatchOutcome(batch=batch)
        scratch = ScratchBuffer()
        algorithm = self.config.algorithm
        salt = self.config.salt_with_path

        for i in batch.indices:
            if abort.is_set():
                outcome.aborted = True
                return outcome
            task = tasks[i]
            try:
                digest = compute_file_digest(task.path, algorithm, scratch, salt_with_path=salt)
            except OSError as e:
                failure = FileFailure(index=i, path=task.path, message=e.strerror or str(e))
                outcome.failures.append(failure)
                self._record_failure(failure, abort)
                continue
            task.assign(digest)
            outcome.hashed += 1

        batch.digest = batch_digest(tasks, batch, algorithm)
        return outcome
