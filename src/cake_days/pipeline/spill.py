"""Transient on-disk spill store for per-chunk cake days.

Each chunk's engine output is appended as JSON lines, one
``SpillRecord`` per cake day.  The store is a context manager: the file is
created on entry and removed on every exit path, including errors.

File layout::

    {"date": "2025-01-07", "small": 1, "large": 0, "names": ["Dave"]}
    {"date": "2025-01-09", "small": 0, "large": 1, "names": ["Rob", "Sam"]}
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from types import TracebackType
from typing import Iterable, Iterator

from pydantic import ValidationError

from cake_days.core.errors import SpillStoreIOError
from cake_days.core.file_io import safe_append_lines
from cake_days.core.models import CakeDay, SpillRecord

logger = logging.getLogger(__name__)


class SpillStore:
    """Append-only JSONL file owned by a single pipeline invocation.

    Args:
        directory: Where to create the file.  ``None`` uses the system
            temp directory.
        prefix: File name prefix; a unique suffix is always added.
    """

    def __init__(self, directory: str | Path | None = None, prefix: str = "cake_days_") -> None:
        self._directory = Path(directory) if directory is not None else None
        self._prefix = prefix
        self._path: Path | None = None
        self._appends = 0

    @property
    def path(self) -> Path:
        if self._path is None:
            raise SpillStoreIOError("Spill store is not open")
        return self._path

    @property
    def appends(self) -> int:
        return self._appends

    # -- lifecycle -----------------------------------------------------------

    def open(self) -> SpillStore:
        try:
            fd, name = tempfile.mkstemp(
                prefix=self._prefix, suffix=".jsonl", dir=self._directory
            )
            os.close(fd)
        except OSError as exc:
            raise SpillStoreIOError(f"Unable to create spill file: {exc}") from exc
        self._path = Path(name)
        self._appends = 0
        logger.debug("Spill store created", extra={"path": str(self._path)})
        return self

    def cleanup(self) -> None:
        if self._path is None:
            return
        path, self._path = self._path, None
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise SpillStoreIOError(f"Unable to remove spill file {path}: {exc}") from exc
        logger.debug("Spill store removed", extra={"path": str(path)})

    def __enter__(self) -> SpillStore:
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc is None:
            self.cleanup()
            return
        # The error that aborted the run wins over a failed removal.
        try:
            self.cleanup()
        except SpillStoreIOError:
            logger.exception("Spill cleanup failed while handling %s", type(exc).__name__)

    # -- write ---------------------------------------------------------------

    def append(self, cake_days: Iterable[CakeDay]) -> int:
        """Append one chunk's cake days.  Returns the number of records."""
        lines = (SpillRecord.from_cake_day(cd).model_dump_json() for cd in cake_days)
        try:
            written = safe_append_lines(self.path, lines)
        except OSError as exc:
            raise SpillStoreIOError(f"Unable to write spill file {self.path}: {exc}") from exc
        self._appends += 1
        return written

    # -- read ----------------------------------------------------------------

    def records(self) -> Iterator[SpillRecord]:
        """Stream every record back, one line at a time."""
        path = self.path
        try:
            with open(path, encoding="utf-8") as f:
                for line_number, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        yield SpillRecord.model_validate_json(line)
                    except ValidationError as exc:
                        raise SpillStoreIOError(
                            f"Corrupt spill record at {path}:{line_number}"
                        ) from exc
        except OSError as exc:
            raise SpillStoreIOError(f"Unable to read spill file {path}: {exc}") from exc

    def cake_days(self) -> Iterator[CakeDay]:
        for record in self.records():
            yield CakeDay.for_attendees(record.date, record.names)
