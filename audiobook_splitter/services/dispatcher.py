"""Parallel dispatch of chunks over a thread pool.

Workers spend their time blocked on ffmpeg, so plain threads are enough.
Chunks cover disjoint position ranges and clips are named by position, hence
no two workers ever write the same file.
"""
from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from audiobook_splitter.core import Chunk, Interval, chunk_intervals, DEFAULT_CHUNK_SIZE
from .errors import DirectoryCreationError
from .progress import ProgressReporter, RunContext
from .segments import ChunkResult, OutcomeStatus, SegmentOutcome, execute_chunk, output_path_for

logger = logging.getLogger(__name__)


@dataclass
class SegmentationSummary:
    total: int
    counts: Dict[str, int] = field(default_factory=lambda: {s.value: 0 for s in OutcomeStatus})
    failures: Dict[int, str] = field(default_factory=dict)
    cancelled: List[int] = field(default_factory=list)

    def add(self, result: ChunkResult) -> None:
        for outcome in result.outcomes:
            self.counts[outcome.status.value] += 1
            if outcome.status is OutcomeStatus.FAILED:
                self.failures[outcome.index] = outcome.reason or "unknown error"

    @property
    def failed_ordinals(self) -> List[int]:
        return sorted(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures and not self.cancelled


def run_segmentation(
    intervals: Sequence[Interval],
    *,
    audio_path: str,
    prefix: str,
    output_dir: str,
    context: Optional[RunContext] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    workers: Optional[int] = None,
    extension: str = "mp3",
    ffmpeg: str = "ffmpeg",
    timeout: Optional[float] = None,
    loglevel: str = "error",
) -> SegmentationSummary:
    """Cut one clip per interval into ``output_dir``.

    Returns once every chunk has been executed or skipped because of a
    cancellation request on ``context``. Raises ``DirectoryCreationError``
    before any work is dispatched if ``output_dir`` cannot be created.
    """
    intervals = list(intervals)
    context = context if context is not None else RunContext()

    try:
        os.makedirs(output_dir, exist_ok=True)
    except OSError as e:
        raise DirectoryCreationError(f"Cannot create {output_dir}: {e}") from e

    chunks = chunk_intervals(intervals, chunk_size)
    reporter = ProgressReporter(context.progress, len(intervals), context.channel)
    summary = SegmentationSummary(total=len(intervals))
    logger.info("Splitting %d intervals in %d chunks", len(intervals), len(chunks))

    def _work(chunk: Chunk) -> Tuple[Chunk, Optional[ChunkResult]]:
        if context.cancelled:
            logger.info("Chunk %d skipped: run cancelled", chunk.number)
            reporter.report(0)
            return chunk, None
        try:
            result = execute_chunk(
                chunk,
                audio_path,
                prefix,
                output_dir,
                extension=extension,
                ffmpeg=ffmpeg,
                timeout=timeout,
                loglevel=loglevel,
            )
        except Exception as e:
            logger.exception("Chunk %d crashed", chunk.number)
            result = ChunkResult(
                processed=len(chunk),
                outcomes=[
                    SegmentOutcome(
                        ordinal,
                        OutcomeStatus.FAILED,
                        output_path_for(output_dir, prefix, ordinal, extension),
                        str(e),
                    )
                    for ordinal, _ in chunk.numbered()
                ],
            )
        reporter.report(result.processed)
        return chunk, result

    with ThreadPoolExecutor(max_workers=workers) as executor:
        future_map = {executor.submit(_work, chunk): chunk for chunk in chunks}
        for future in as_completed(future_map):
            chunk, result = future.result()
            if result is None:
                summary.cancelled.extend(ordinal for ordinal, _ in chunk.numbered())
            else:
                summary.add(result)

    summary.cancelled.sort()
    logger.info(
        "Split done: %s, %d cancelled",
        ", ".join(f"{k}={v}" for k, v in summary.counts.items()),
        len(summary.cancelled),
    )
    return summary
