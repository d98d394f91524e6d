"""Persisted fingerprint lists.

A snapshot is plain text, one ``<absolutePath> <HEX digest>`` record per
line, in enumeration order, with no header or trailer. Reading one back gives
a ``path -> digest`` mapping where the last record for a path wins. Any
malformed line makes the whole snapshot unusable.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

from pydantic import BaseModel, Field

from .core import Task
from .errors import SnapshotError, SnapshotParseError
from .hashing import Algorithm, format_digest, parse_digest

logger = logging.getLogger(__name__)


def _atomic_write_text(path: Path, text: str) -> None:
    """Write text to path via temp file + rename so readers never see a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w",
        delete=False,
        dir=path.parent,
        prefix=f".{path.name}.tmp-",
        suffix="",
        encoding="utf-8",
    ) as f:
        f.write(text)
        f.flush()
        os.fsync(f.fileno())
        tmp = Path(f.name)

    try:
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def _representable(path: str) -> bool:
    return len(path.split()) == 1 and path == path.strip()


class FingerprintSnapshot(BaseModel):
    """Fingerprints of one run, keyed by absolute path (hex digests)."""

    records: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_tasks(cls, tasks: Iterable[Task]) -> "FingerprintSnapshot":
        """Collect every hashed task; tasks skipped after an error are left out."""
        records = {}
        for task in tasks:
            if task.digest is not None:
                records[task.path] = format_digest(task.digest)
        return cls(records=records)

    @classmethod
    def parse(
        cls,
        text: str,
        source: str = "<snapshot>",
        algorithm: Optional[Algorithm] = None,
    ) -> "FingerprintSnapshot":
        """Parse snapshot text.

        Blank lines are ignored. Every other line must split into exactly two
        whitespace-separated fields, the second a hex digest (of
        ``algorithm``'s size when given).

        Raises:
            SnapshotParseError: On the first malformed line
        """
        records: Dict[str, str] = {}
        for line_no, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            fields = line.split()
            if len(fields) != 2:
                raise SnapshotParseError(source, line_no, line, "expected '<path> <digest>'")
            path, digest_hex = fields
            try:
                digest = parse_digest(digest_hex, algorithm)
            except ValueError as e:
                raise SnapshotParseError(source, line_no, line, str(e)) from e
            # Later records for the same path replace earlier ones
            records.pop(path, None)
            records[path] = format_digest(digest)
        return cls(records=records)

    @classmethod
    def load(cls, path: Union[str, Path], algorithm: Optional[Algorithm] = None) -> "FingerprintSnapshot":
        """Read and parse a snapshot file.

        Raises:
            SnapshotError: If the file cannot be read
            SnapshotParseError: If any line is malformed
        """
        p = Path(path)
        try:
            text = p.read_text(encoding="utf-8")
        except OSError as e:
            raise SnapshotError(str(p), e.strerror or e) from e
        return cls.parse(text, source=str(p), algorithm=algorithm)

    def persisted_records(self) -> Dict[str, str]:
        """Records that survive a save and reload, in record order."""
        return {path: digest for path, digest in self.records.items() if _representable(path)}

    def to_text(self) -> str:
        """Serialize in record order.

        Paths containing whitespace cannot be read back from the two-field
        format and are left out with a warning.
        """
        for path in self.records:
            if not _representable(path):
                logger.warning("Path %r contains whitespace; omitted from snapshot", path)
        return "".join(f"{path} {digest}\n" for path, digest in self.persisted_records().items())

    def save(self, path: Union[str, Path]) -> None:
        """Write the snapshot, replacing any previous one."""
        p = Path(path)
        try:
            _atomic_write_text(p, self.to_text())
        except OSError as e:
            raise SnapshotError(str(p), e.strerror or e) from e
        logger.debug("Wrote %d snapshot records to %s", len(self.records), p)
