"""
Helper functions for formatting times into human-readable strings.
"""


def _split_hms(seconds: float) -> tuple[int, int, int]:
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    return hours, minutes, secs


def format_duration(seconds: float) -> str:
    """
    Formats an elapsed time as e.g. '2h 34m 12s'; zero units are left out.
    """
    units = zip(_split_hms(seconds), "hms")
    parts = [f"{value}{unit}" for value, unit in units if value > 0]
    return " ".join(parts) or "0s"


def format_timestamp(seconds: float | None) -> str:
    """Formats seconds as ``H:MM:SS``, the notation used in tracklists."""
    if seconds is None:
        return "?"
    hours, minutes, secs = _split_hms(seconds)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def format_seconds_arg(seconds: float) -> str:
    """Formats seconds for an ffmpeg time argument."""
    return f"{seconds:.6f}"
