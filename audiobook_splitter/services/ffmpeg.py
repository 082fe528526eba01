"""ffmpeg invocation helpers.

A single ffmpeg process can write several outputs from one input, each one
preceded by its own ``-c copy -ss -to`` options. The splitter uses that to
cut a whole chunk of clips with one process.
"""
from __future__ import annotations

import logging
import subprocess
from typing import Iterable, List, Optional, Tuple

from .errors import ExternalToolError

logger = logging.getLogger(__name__)

# (start, end, output_path), start/end already formatted as seconds.millis
TrimRequest = Tuple[str, str, str]


def run_ffmpeg(args: Iterable[str], *, ffmpeg: str = "ffmpeg",
               timeout: Optional[float] = None) -> subprocess.CompletedProcess:
    """Run ffmpeg with ``args`` and raise ``ExternalToolError`` on failure."""
    cmd = [ffmpeg, *args]
    logger.debug("Running %s", " ".join(cmd))
    try:
        proc = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=False,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise ExternalToolError(f"{ffmpeg} timed out after {e.timeout}s") from e
    except OSError as e:
        raise ExternalToolError(f"Cannot run {ffmpeg}: {e}") from e
    if proc.returncode != 0:
        message = (proc.stderr or "").strip() or f"{ffmpeg} exited with code {proc.returncode}"
        raise ExternalToolError(message)
    return proc


def build_trim_args(audio_path: str, requests: Iterable[TrimRequest], *,
                    loglevel: str = "error") -> List[str]:
    args = ["-hide_banner", "-loglevel", loglevel, "-vn", "-y", "-i", str(audio_path)]
    for start, end, output_path in requests:
        args.extend(["-c", "copy", "-ss", start, "-to", end, str(output_path)])
    return args


def trim_batch(audio_path: str, requests: List[TrimRequest], *, ffmpeg: str = "ffmpeg",
               timeout: Optional[float] = None, loglevel: str = "error") -> None:
    """Cut every request out of ``audio_path`` in one ffmpeg process."""
    if not requests:
        return
    run_ffmpeg(build_trim_args(audio_path, requests, loglevel=loglevel),
               ffmpeg=ffmpeg, timeout=timeout)
