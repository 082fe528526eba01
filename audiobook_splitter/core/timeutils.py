"""Pure time utility helpers used across the CLI and services.

All timestamps inside the package are integer milliseconds.
"""
from __future__ import annotations

from datetime import timedelta


def timedelta_to_ms(value: timedelta) -> int:
    """Convert a ``timedelta`` (as produced by the SRT parser) to milliseconds."""
    return value // timedelta(milliseconds=1)


def format_ms(ms: int) -> str:
    """Format milliseconds as ``seconds.milliseconds`` for ffmpeg.

    Always uses a decimal point, e.g. ``1800`` -> ``"1.800"``.
    """
    sign = '-' if ms < 0 else ''
    secs, millis = divmod(abs(ms), 1000)
    return f"{sign}{secs}.{millis:03d}"


def format_clock(ms: int) -> str:
    """Format milliseconds as ``HH:MM:SS.mmm``.

    Keeps the sign for negative values.
    """
    sign = '-' if ms < 0 else ''
    rest = abs(ms)
    hours, rest = divmod(rest, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    return f"{sign}{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"
