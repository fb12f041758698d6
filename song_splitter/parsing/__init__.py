"""
Tracklist Parsing Layer.

Turns the loosely structured tracklist text into ordered track descriptors.
"""

from .tracklist import (
    LineKind,
    classify_line,
    parse_artist_title,
    parse_timestamp,
    parse_tracklist,
    read_tracklist,
)

__all__ = [
    "LineKind",
    "classify_line",
    "parse_artist_title",
    "parse_timestamp",
    "parse_tracklist",
    "read_tracklist",
]
