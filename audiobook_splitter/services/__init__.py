"""Service layer modules (filesystem, subprocess and threading I/O).

Includes cue loading, ffmpeg invocation, per-chunk execution, progress
reporting and the parallel dispatcher.
"""

__all__ = [
    "transcript",
    "ffmpeg",
    "segments",
    "progress",
    "dispatcher",
    "assets",
    "notes",
]
