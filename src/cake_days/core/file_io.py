"""Safe file I/O utilities.

Provides locked append of JSONL batches (``fcntl``) with ``fsync`` so a
spilled chunk lands as one contiguous block.
"""

from __future__ import annotations

import fcntl
import os
from pathlib import Path
from typing import Iterable


def safe_append_lines(path: Path, lines: Iterable[str]) -> int:
    """Append a batch of lines to a file with locking and fsync.

    * ``fcntl.LOCK_EX`` keeps one batch contiguous if several writers
      ever share the file.
    * ``os.fsync`` makes the batch durable before the lock is released.
    * The caller is responsible for creating parent directories.

    Returns the number of lines written.
    """
    written = 0
    with open(path, "a", encoding="utf-8") as f:
        fcntl.flock(f.fileno(), fcntl.LOCK_EX)
        try:
            for line in lines:
                f.write(line + "\n")
                written += 1
            f.flush()
            os.fsync(f.fileno())
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    return written
