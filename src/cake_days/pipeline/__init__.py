"""Bounded-memory processing of large person sources.

PersonParser       Lazy ``name,yyyy-mm-dd`` record parsing
SpillStore         Transient JSONL store for per-chunk results
StreamingPipeline  Chunk -> engine -> spill -> consolidate
CakeDayExporter    CSV/JSON output
"""

from .export import CakeDayExporter
from .parser import PersonParser
from .spill import SpillStore
from .streaming import ProcessingResult, StreamingPipeline

__all__ = [
    "CakeDayExporter",
    "PersonParser",
    "ProcessingResult",
    "SpillStore",
    "StreamingPipeline",
]
