"""Per-interval planning and per-chunk execution.

The planner decides, for each interval, whether its clip already exists,
has to be replaced by the silent placeholder, or must be cut by ffmpeg. The
executor applies those decisions for a whole chunk, cutting every clip of
the chunk with a single ffmpeg process.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from audiobook_splitter.core import Chunk, Interval, format_ms
from .assets import write_placeholder
from .errors import ExternalToolError, PlaceholderWriteError
from .ffmpeg import trim_batch

logger = logging.getLogger(__name__)


class ActionKind(str, Enum):
    SKIP = "skip"
    PLACEHOLDER = "placeholder"
    TRIM = "trim"


class OutcomeStatus(str, Enum):
    SKIPPED = "skipped"
    PLACEHOLDER = "placeholder"
    TRIMMED = "trimmed"
    FAILED = "failed"


@dataclass(frozen=True)
class PlannedAction:
    kind: ActionKind
    index: int
    output_path: str
    start: Optional[str] = None
    end: Optional[str] = None


@dataclass(frozen=True)
class SegmentOutcome:
    index: int
    status: OutcomeStatus
    output_path: str
    reason: Optional[str] = None


@dataclass
class ChunkResult:
    processed: int
    outcomes: List[SegmentOutcome] = field(default_factory=list)


def output_path_for(output_dir: str, prefix: str, ordinal: int, extension: str = "mp3") -> str:
    return os.path.join(output_dir, f"{prefix}-{ordinal}.{extension}")


def clip_exists(path: str) -> bool:
    """A clip counts as produced only if the file exists and is not empty."""
    try:
        return os.path.getsize(path) > 0
    except OSError:
        return False


def plan_segment(ordinal: int, interval: Interval, output_path: str) -> PlannedAction:
    """Decide what to do for ``interval``. Only reads the filesystem."""
    if clip_exists(output_path):
        return PlannedAction(ActionKind.SKIP, ordinal, output_path)
    if interval.degenerate:
        return PlannedAction(ActionKind.PLACEHOLDER, ordinal, output_path)
    return PlannedAction(
        ActionKind.TRIM,
        ordinal,
        output_path,
        start=format_ms(interval.start),
        end=format_ms(interval.end),
    )


def execute_chunk(
    chunk: Chunk,
    audio_path: str,
    prefix: str,
    output_dir: str,
    *,
    extension: str = "mp3",
    ffmpeg: str = "ffmpeg",
    timeout: Optional[float] = None,
    loglevel: str = "error",
) -> ChunkResult:
    """Produce every clip of ``chunk``.

    Clips are named after their position in the full interval list, so
    chunks never share an output file whatever the cue numbering. Failures
    are recorded as ``FAILED`` outcomes and never raised, so one chunk
    cannot stop its siblings.
    """
    outcomes: List[SegmentOutcome] = []
    trims: List[PlannedAction] = []

    for ordinal, interval in chunk.numbered():
        path = output_path_for(output_dir, prefix, ordinal, extension)
        action = plan_segment(ordinal, interval, path)
        if action.kind is ActionKind.SKIP:
            outcomes.append(SegmentOutcome(ordinal, OutcomeStatus.SKIPPED, path))
        elif action.kind is ActionKind.PLACEHOLDER:
            try:
                write_placeholder(path)
            except PlaceholderWriteError as e:
                outcomes.append(SegmentOutcome(ordinal, OutcomeStatus.FAILED, path, str(e)))
            else:
                outcomes.append(SegmentOutcome(ordinal, OutcomeStatus.PLACEHOLDER, path))
        else:
            trims.append(action)

    if trims:
        logger.debug("Chunk %d: cutting %d clips", chunk.number, len(trims))
        try:
            trim_batch(
                audio_path,
                [(a.start, a.end, a.output_path) for a in trims],
                ffmpeg=ffmpeg,
                timeout=timeout,
                loglevel=loglevel,
            )
        except ExternalToolError as e:
            logger.error("Chunk %d: ffmpeg failed: %s", chunk.number, e)
            outcomes.extend(
                SegmentOutcome(a.index, OutcomeStatus.FAILED, a.output_path, str(e)) for a in trims
            )
        else:
            outcomes.extend(
                SegmentOutcome(a.index, OutcomeStatus.TRIMMED, a.output_path) for a in trims
            )

    return ChunkResult(processed=len(outcomes), outcomes=outcomes)
