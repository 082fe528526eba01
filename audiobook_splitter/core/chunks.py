"""Pure partitioning of intervals into fixed-size batches."""
from __future__ import annotations

from typing import List, Sequence

from .models import Chunk, Interval

DEFAULT_CHUNK_SIZE = 25


def chunk_intervals(intervals: Sequence[Interval], size: int = DEFAULT_CHUNK_SIZE) -> List[Chunk]:
    """Split ``intervals`` into contiguous chunks of ``size`` items.

    Order is preserved and the last chunk may be shorter. Raises
    ``ValueError`` when ``size`` is lower than 1.
    """
    if size < 1:
        raise ValueError("chunk size must be at least 1")
    intervals = list(intervals)
    return [
        Chunk(number=number, base=base, intervals=tuple(intervals[base:base + size]))
        for number, base in enumerate(range(0, len(intervals), size))
    ]
