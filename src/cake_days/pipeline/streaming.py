"""Streaming pipeline: chunked parse -> engine -> spill -> consolidate.

Memory during the parse+spill phase does not depend on input size: only
one chunk of persons and its cake days are alive at a time.  Final
consolidation holds one entry per distinct date.

By default the final step groups strictly by exact date and does not
re-run merge/postponement across chunk boundaries, so two chunks can
leave cake days on adjacent working days.  ``reapply_rules=True`` runs
the consolidated set through the engine's fixed point as well.
"""

from __future__ import annotations

import logging
import time
import tracemalloc
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from cake_days.core.errors import DataError
from cake_days.core.models import CakeDay, Person
from cake_days.engine.batch import BatchScheduler
from cake_days.engine.chunking import Chunker
from cake_days.engine.grouping import consolidate_by_date

from .parser import PersonParser
from .spill import SpillStore

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 100


def _megabytes(size_bytes: int) -> float:
    return round(size_bytes / 1024 / 1024, 2)


@dataclass
class ProcessingResult:
    """Final cake days plus run statistics."""

    cake_days: list[CakeDay] = field(default_factory=list)
    total_persons: int = 0
    total_chunks: int = 0
    converged: bool = True
    processing_time_seconds: float = 0.0
    peak_memory_bytes: int = 0
    input_size_bytes: int = 0

    @property
    def total_cake_days(self) -> int:
        return len(self.cake_days)

    @property
    def total_small_cakes(self) -> int:
        return sum(cd.small_cakes for cd in self.cake_days)

    @property
    def total_large_cakes(self) -> int:
        return sum(cd.large_cakes for cd in self.cake_days)

    @property
    def formatted_processing_time(self) -> str:
        return f"{self.processing_time_seconds:.2f} seconds"

    @property
    def peak_memory_mb(self) -> float:
        """Peak traced Python allocation during the run, in MB."""
        return _megabytes(self.peak_memory_bytes)

    @property
    def input_size_mb(self) -> float:
        return _megabytes(self.input_size_bytes)


class StreamingPipeline:
    """Compute cake days for a source of unknown size.

    Args:
        scheduler: Batch scheduler run once per chunk.
        parser: Record parser used by :meth:`run_file`.
        chunk_size: Persons per chunk.
        spill_dir: Directory for the spill file (``None`` = system temp).
        reapply_rules: Re-run merge/postponement after consolidation.
    """

    def __init__(
        self,
        scheduler: BatchScheduler | None = None,
        parser: PersonParser | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        spill_dir: str | Path | None = None,
        reapply_rules: bool = False,
    ) -> None:
        self._scheduler = scheduler or BatchScheduler()
        self._parser = parser or PersonParser()
        self._chunker = Chunker(chunk_size)
        self._spill_dir = spill_dir
        self._reapply_rules = reapply_rules

    def run_file(self, path: str | Path, year: int) -> ProcessingResult:
        """Parse *path* lazily and process it.

        Raises:
            DataError: *path* cannot be read or is empty.
        """
        path = Path(path)
        try:
            size = path.stat().st_size
        except OSError as exc:
            raise DataError(f"Unable to read input file {path}: {exc}") from exc
        if size == 0:
            raise DataError(f"File is empty: {path}")

        result = self.run(self._parser.parse_file(path), year)
        result.input_size_bytes = size
        return result

    def run(self, persons: Iterable[Person], year: int) -> ProcessingResult:
        """Process a single-pass stream of persons for *year*.

        Peak memory is measured with ``tracemalloc``, which is switched on
        for the run unless it is already tracing.
        """
        owns_tracing = not tracemalloc.is_tracing()
        if owns_tracing:
            tracemalloc.start()
        tracemalloc.reset_peak()
        try:
            result = self._process(persons, year)
            _, result.peak_memory_bytes = tracemalloc.get_traced_memory()
        finally:
            if owns_tracing:
                tracemalloc.stop()
        logger.info(
            "Pipeline finished",
            extra={"persons": result.total_persons, "chunks": result.total_chunks,
                   "cake_days": result.total_cake_days, "converged": result.converged,
                   "peak_memory_mb": result.peak_memory_mb},
        )
        return result

    def _process(self, persons: Iterable[Person], year: int) -> ProcessingResult:
        started = time.monotonic()
        total_persons = 0
        total_chunks = 0
        converged = True

        with SpillStore(self._spill_dir) as spill:
            for chunk in self._chunker.chunks(persons):
                result = self._scheduler.schedule(chunk, year)
                spill.append(result.cake_days)
                total_persons += len(chunk)
                total_chunks += 1
                converged = converged and result.converged
                logger.debug(
                    "Chunk spilled",
                    extra={"chunk": total_chunks, "persons": len(chunk),
                           "cake_days": len(result.cake_days)},
                )

            cake_days = consolidate_by_date(spill.cake_days())

        if self._reapply_rules:
            final = self._scheduler.engine.stabilize(cake_days)
            cake_days = final.cake_days
            converged = converged and final.converged

        return ProcessingResult(
            cake_days=cake_days,
            total_persons=total_persons,
            total_chunks=total_chunks,
            converged=converged,
            processing_time_seconds=time.monotonic() - started,
        )
