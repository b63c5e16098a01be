"""Bounded chunking shared by the batch scheduler and streaming pipeline.

Both tiers do the same thing at different sizes: pull at most ``size``
items from a source, work on them, and hand the partial results to a
date-keyed reconsolidation step.  ``Chunker`` owns the first half.
"""

from __future__ import annotations

from itertools import islice
from typing import Iterable, Iterator, TypeVar

T = TypeVar("T")


class Chunker:
    """Split an iterable into lists of at most ``size`` items.

    The source is consumed lazily, one chunk at a time, so a generator
    over a large file is never materialised whole.
    """

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError(f"Chunk size must be positive, got {size}")
        self._size = size

    @property
    def size(self) -> int:
        return self._size

    def exceeds(self, count: int) -> bool:
        """True when *count* items do not fit in a single chunk."""
        return count > self._size

    def chunks(self, items: Iterable[T]) -> Iterator[list[T]]:
        iterator = iter(items)
        while True:
            chunk = list(islice(iterator, self._size))
            if not chunk:
                return
            yield chunk
