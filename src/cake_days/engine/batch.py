"""Batch scheduler: bound the number of persons one engine run holds.

Above the ceiling the persons are split into sub-batches, each run to its
own fixed point.  Sub-batch outputs are then merged by exact date and
stabilised once more, because partitioning can split one date group over
several sub-batches and hides adjacency between them.
"""

from __future__ import annotations

import logging
from typing import Iterable

from cake_days.core.models import CakeDay, Person

from .chunking import Chunker
from .grouping import consolidate_by_date
from .rules import EngineResult, RuleEngine

logger = logging.getLogger(__name__)

DEFAULT_BATCH_CEILING = 2000


class BatchScheduler:
    """Run the rule engine over an in-memory person set of any size.

    Args:
        engine: Rule engine to run per sub-batch and for the final pass.
        ceiling: Maximum persons per engine run.
    """

    def __init__(
        self,
        engine: RuleEngine | None = None,
        ceiling: int = DEFAULT_BATCH_CEILING,
    ) -> None:
        self._engine = engine or RuleEngine()
        self._chunker = Chunker(ceiling)

    @property
    def engine(self) -> RuleEngine:
        return self._engine

    @property
    def ceiling(self) -> int:
        return self._chunker.size

    def schedule(self, persons: Iterable[Person], year: int) -> EngineResult:
        people = list(persons)
        if not self._chunker.exceeds(len(people)):
            return self._engine.run(people, year)

        partial: list[CakeDay] = []
        converged = True
        batches = 0
        for batch in self._chunker.chunks(people):
            result = self._engine.run(batch, year)
            partial.extend(result.cake_days)
            converged = converged and result.converged
            batches += 1

        logger.info(
            "Reconsolidating sub-batches",
            extra={"persons": len(people), "batches": batches, "cake_days": len(partial)},
        )
        final = self._engine.stabilize(consolidate_by_date(partial))
        return EngineResult(
            cake_days=final.cake_days,
            converged=converged and final.converged,
            rounds=final.rounds,
        )
