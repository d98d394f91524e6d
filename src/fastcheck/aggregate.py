"""Hierarchical reduction of per-file digests.

Batch digest = H(d_0 || d_1 || ... ) over the task digests of one batch in
task order. Tree digest = H(b_0 || b_1 || ...) over the batch digests in
batch order. Each d_i / b_i is the fixed-width encoding produced by
``hashing`` (little-endian for XXH3-64), so the concatenation is unambiguous.

A batch can be reduced as soon as its worker finishes; the tree reduction
waits for all of them.
"""

from typing import Optional, Sequence

from .core import Batch, Task
from .hashing import Algorithm, format_digest, new_hasher
from .constants import ZERO_OUTPUT


def batch_digest(tasks: Sequence[Task], batch: Batch, algorithm: Algorithm = Algorithm.XXH3) -> bytes:
    """Reduce the digests of one batch.

    Tasks whose digest was never set (skipped after a read error) take no
    part in the reduction.
    """
    h = new_hasher(algorithm)
    for i in batch.indices:
        digest = tasks[i].digest
        if digest is not None:
            h.update(digest)
    return h.digest()


def tree_digest(batches: Sequence[Batch], algorithm: Algorithm = Algorithm.XXH3) -> Optional[bytes]:
    """Reduce batch digests, in batch order, to one tree digest.

    Returns:
        The tree digest, or None when there are no batches

    Raises:
        ValueError: If a batch has not been reduced yet
    """
    if not batches:
        return None
    h = new_hasher(algorithm)
    for batch in batches:
        if batch.digest is None:
            raise ValueError(f"Batch {batch.index} has no digest")
        h.update(batch.digest)
    return h.digest()


def format_tree_digest(digest: Optional[bytes], colon: bool = False) -> str:
    """Render a tree digest; an empty run renders as the zero value."""
    if digest is None:
        return ZERO_OUTPUT
    return format_digest(digest, colon)
