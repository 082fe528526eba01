"""Derive playback intervals from sorted cues.

Each cue is stretched forward to the start of the following cue, so that no
audio between two adjacent clips is lost, and both boundaries are shifted by
the configured offset. The last cue is taken as-is.
"""
from __future__ import annotations

from typing import List, Sequence

from audiobook_splitter.services.errors import EmptyInputError
from .models import Cue, Interval


def build_intervals(cues: Sequence[Cue], start_offset: int, end_offset: int = 0) -> List[Interval]:
    """Build one interval per cue.

    ``start_offset`` moves the start of a cue only when the cue begins later
    than ``abs(start_offset)``, which keeps the first clips from starting
    before zero. The end of every non-terminal interval is the next cue's
    start plus ``start_offset`` and ``end_offset``.

    Raises ``EmptyInputError`` if ``cues`` is empty.
    """
    cues = list(cues)
    if not cues:
        raise EmptyInputError("No cues to build intervals from")

    mintime = abs(start_offset)
    intervals: List[Interval] = []
    for cue, following in zip(cues, cues[1:]):
        start = cue.start + start_offset if cue.start > mintime else cue.start
        end = following.start + start_offset + end_offset
        intervals.append(Interval(index=cue.index, start=start, end=end, text=cue.text))

    last = cues[-1]
    intervals.append(Interval(index=last.index, start=last.start, end=last.end, text=last.text))
    return intervals
