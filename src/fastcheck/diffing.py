"""Diff computation between two fingerprint mappings."""

from typing import List, Mapping

from .core import ChangeType, DiffResult, FileChange

# Emission order of categories in a diff report
_ORDER = (ChangeType.ADDED, ChangeType.REMOVED, ChangeType.CHANGED)


def classify(previous: Mapping[str, str], current: Mapping[str, str], path: str) -> ChangeType:
    """Classify one path; it must be present in at least one mapping."""
    in_prev = path in previous
    in_curr = path in current
    if in_curr and not in_prev:
        return ChangeType.ADDED
    if in_prev and not in_curr:
        return ChangeType.REMOVED
    if not in_prev:
        raise KeyError(path)
    if previous[path].upper() != current[path].upper():
        return ChangeType.CHANGED
    return ChangeType.UNCHANGED


def compute_diff(previous: Mapping[str, str], current: Mapping[str, str]) -> DiffResult:
    """
    Compare a baseline fingerprint mapping with the current one.

    Args:
        previous: ``path -> hex digest`` from the baseline snapshot.
        current: ``path -> hex digest`` from this run.

    Returns:
        DiffResult whose changes are grouped added, removed, changed and
        sorted by path inside each group. Unchanged paths are only counted.
    """
    groups = {change_type: [] for change_type in _ORDER}
    unchanged = 0

    for path in previous.keys() | current.keys():
        change_type = classify(previous, current, path)
        if change_type == ChangeType.UNCHANGED:
            unchanged += 1
            continue
        groups[change_type].append(FileChange(
            path=path,
            change_type=change_type,
            previous=previous.get(path),
            current=current.get(path),
        ))

    changes: List[FileChange] = []
    for change_type in _ORDER:
        changes.extend(sorted(groups[change_type], key=lambda c: c.path))
    return DiffResult(changes=changes, unchanged=unchanged)


def format_diff(diff: DiffResult) -> List[str]:
    """Render ``<marker><path> <digest>`` lines (``+`` added, ``-`` removed, ``~`` changed)."""
    return [f"{c.change_type.marker}{c.path} {c.digest}" for c in diff.changes]
