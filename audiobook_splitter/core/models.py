"""Immutable value types shared by the core and the services."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple


@dataclass(frozen=True)
class Cue:
    """A timed transcript entry. Times are milliseconds."""
    index: int
    start: int
    end: int
    text: str = ""


@dataclass(frozen=True)
class Interval:
    """Corrected playback span requested for one cue."""
    index: int
    start: int
    end: int
    text: str = ""

    @property
    def degenerate(self) -> bool:
        return self.start >= self.end


@dataclass(frozen=True)
class Chunk:
    """Contiguous batch of intervals handled by one worker.

    ``base`` is the position of the first interval in the full list.
    """
    number: int
    base: int
    intervals: Tuple[Interval, ...]

    def __len__(self) -> int:
        return len(self.intervals)

    def numbered(self) -> Iterator[Tuple[int, Interval]]:
        """Yield ``(ordinal, interval)`` pairs, ordinals being 1-based list positions."""
        return enumerate(self.intervals, start=self.base + 1)
