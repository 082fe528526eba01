"""
Core utilities and domain helpers for the audiobook splitter.

This package hosts pure, side-effect-free logic (interval arithmetic,
chunking and time formatting) so it can be tested without audio or ffmpeg.
"""

__all__ = [
    "Cue",
    "Interval",
    "Chunk",
    "build_intervals",
    "chunk_intervals",
    "DEFAULT_CHUNK_SIZE",
    "format_ms",
    "format_clock",
    "timedelta_to_ms",
]

from .models import Cue, Interval, Chunk
from .intervals import build_intervals
from .chunks import chunk_intervals, DEFAULT_CHUNK_SIZE
from .timeutils import format_ms, format_clock, timedelta_to_ms
