"""Cake day rule engine.

Key components
--------------
CakeDateResolver  Person + year -> candidate cake date
DateIndex         Date-keyed attendee grouping
RuleEngine        Group, merge and postpone until a fixed point
Chunker           Bounded chunking shared by both batching tiers
BatchScheduler    Sub-batch large person sets and reconsolidate
"""

from .batch import BatchScheduler
from .chunking import Chunker
from .grouping import DateIndex, consolidate_by_date
from .resolver import CakeDateResolver
from .rules import EngineResult, RuleEngine, fingerprint

__all__ = [
    "BatchScheduler",
    "CakeDateResolver",
    "Chunker",
    "DateIndex",
    "EngineResult",
    "RuleEngine",
    "consolidate_by_date",
    "fingerprint",
]
