"""
Defines custom exceptions for the application to allow for more specific error handling.

Setup-phase errors (``SetupError``, ``ParseError``) abort the whole run.
Per-track errors (``TrackError``) are caught at the unit boundary and counted.
"""


class SongSplitterError(Exception):
    """Base exception for all application-specific errors."""


class SetupError(SongSplitterError):
    """Raised when the run cannot start: bad flags, unreadable files, refused output dir."""


class ConfigurationError(SetupError):
    """Raised when command-line options fail validation."""


class ProbeError(SetupError):
    """Raised when the total duration of the input media cannot be determined."""


class ParseError(SongSplitterError):
    """Raised for a malformed tracklist line."""

    def __init__(self, message: str, line_number: int | None = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class TrackError(SongSplitterError):
    """Base for failures that affect a single track only."""


class TimeRangeError(TrackError):
    """Raised when a track's end time is not after its start time."""


class InvocationError(TrackError):
    """Raised when ffmpeg fails to produce a track file."""

    def __init__(
        self,
        message: str,
        output: str = "",
        returncode: int | None = None,
        cancelled: bool = False,
    ):
        super().__init__(message)
        self.output = output
        self.returncode = returncode
        self.cancelled = cancelled


class OutputIntegrityError(TrackError):
    """Raised when a produced file fails the post-extraction integrity check."""
