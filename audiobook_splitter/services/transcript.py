"""Transcript loading services.

Split between file I/O (``load_cues``) and a pure parsing helper
(``parse_cues``) that operates on SRT text, so tests can supply SRT strings
directly.
"""
from __future__ import annotations

from dataclasses import replace
from typing import List
import logging

import srt

from audiobook_splitter.core import Cue, timedelta_to_ms
from .errors import CueParseError

logger = logging.getLogger(__name__)


def parse_cues(srt_text: str) -> List[Cue]:
    """Parse SRT text into cues sorted by start time.

    Exact duplicates (same timing and text) are dropped and the remaining
    cues are renumbered 1..N in playback order, as SRT files may repeat or
    skip indices. Raises ``CueParseError`` for malformed input or when no
    cue is found.
    """
    try:
        subtitles = list(srt.parse(srt_text))
    except (srt.SRTParseError, ValueError) as e:
        raise CueParseError(str(e)) from e

    cues: List[Cue] = []
    seen = set()
    for sub in subtitles:
        cue = Cue(
            index=sub.index,
            start=timedelta_to_ms(sub.start),
            end=timedelta_to_ms(sub.end),
            text=sub.content.strip(),
        )
        key = (cue.start, cue.end, cue.text)
        if key in seen:
            logger.debug("Dropping duplicate cue %d", cue.index)
            continue
        seen.add(key)
        cues.append(cue)

    if not cues:
        raise CueParseError("Subtitle contains no cues")

    cues.sort(key=lambda c: (c.start, c.end, c.index))
    return [replace(cue, index=n) for n, cue in enumerate(cues, start=1)]


def load_cues(path: str) -> List[Cue]:
    """Read an UTF-8 SRT file (BOM tolerated) and return its cues."""
    logger.info("Loading subtitle: %s", path)
    try:
        with open(path, 'r', encoding='utf-8-sig') as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Failed to read subtitle %s: %s", path, e)
        raise CueParseError(str(e)) from e
    cues = parse_cues(text)
    logger.debug("Loaded %d cues from %s", len(cues), path)
    return cues
