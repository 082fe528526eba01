"""Asset-related services (placeholder clip and cover art).

Filesystem and subprocess I/O is isolated here to keep the executor and the
CLI flow clean and mockable.
"""
from __future__ import annotations

import logging
import os
import tempfile
from typing import Optional

from PIL import Image

from .errors import CoverExtractionError, ExternalToolError, PlaceholderWriteError
from .ffmpeg import run_ffmpeg


logger = logging.getLogger(__name__)

# MPEG-1 Layer III frame, 32 kbit/s, 44.1 kHz, mono, all-zero side info and
# payload: decodes to 1152 samples of silence.
_SILENT_FRAME = b"\xff\xfb\x10\xc0" + bytes(100)

# About half a second of silence, written verbatim for degenerate intervals.
SILENCE_MP3 = _SILENT_FRAME * 20


def write_placeholder(output_path: str, data: bytes = SILENCE_MP3) -> str:
    """Write the silent placeholder clip to ``output_path``.

    Returns ``output_path``. Raises ``PlaceholderWriteError`` on failure.
    """
    try:
        with open(output_path, "wb") as f:
            f.write(data)
    except OSError as e:
        logger.error("Failed to write placeholder %s: %s", output_path, e)
        raise PlaceholderWriteError(str(e)) from e
    logger.debug("Placeholder written to %s", output_path)
    return output_path


def extract_cover(audio_path: str, output_path: str, *, ffmpeg: str = "ffmpeg",
                  timeout: Optional[float] = None) -> str:
    """Extract the attached picture of ``audio_path`` as a JPEG file.

    The picture stream is copied out with ffmpeg, then checked and re-saved
    with Pillow so the result is always a real JPEG. Returns ``output_path``.
    """
    logger.info("Extracting cover: %s -> %s", audio_path, output_path)
    with tempfile.TemporaryDirectory() as temp_dir:
        raw_path = os.path.join(temp_dir, "cover.jpg")
        try:
            run_ffmpeg(
                ["-hide_banner", "-loglevel", "error", "-y", "-i", str(audio_path),
                 "-an", "-vcodec", "copy", raw_path],
                ffmpeg=ffmpeg,
                timeout=timeout,
            )
            with Image.open(raw_path) as image:
                image.convert("RGB").save(output_path, "JPEG")
        except (ExternalToolError, OSError) as e:
            logger.error("Failed to extract cover from %s: %s", audio_path, e)
            raise CoverExtractionError(str(e)) from e
    logger.debug("Cover saved to %s", output_path)
    return output_path
