"""Custom exceptions for core and service layer operations."""


class SplitterError(Exception):
    """Base class for every error raised by the splitter."""


class EmptyInputError(SplitterError):
    """Raised when there are no cues to build intervals from."""


class DirectoryCreationError(SplitterError):
    """Raised when the output directory cannot be created."""


class PlaceholderWriteError(SplitterError):
    """Raised when the silent placeholder clip cannot be written."""


class ExternalToolError(SplitterError):
    """Raised when ffmpeg cannot be spawned, times out or exits non-zero."""


class ChannelSendError(SplitterError):
    """Raised when the progress channel consumer has disconnected."""


class CueParseError(SplitterError):
    """Raised when reading/parsing the subtitle file fails."""


class ConversionError(SplitterError):
    """Raised when converting the audiobook to a splittable format fails."""


class CoverExtractionError(SplitterError):
    """Raised when extracting the cover art from the audiobook fails."""


class ConfigError(SplitterError):
    """Raised when the configuration cannot be loaded or is invalid."""
