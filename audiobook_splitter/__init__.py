"""Split an audiobook into one audio clip per subtitle cue."""

__version__ = "0.1.0"
