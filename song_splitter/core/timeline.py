"""
Computes track boundaries and output file names from the parsed tracklist.
"""

from pathlib import Path

from song_splitter.models.track import TrackDescriptor
from song_splitter.utils.path import sanitize_component


def resolve_end_times(
    tracks: list[TrackDescriptor], total_duration: float | None
) -> list[TrackDescriptor]:
    """
    Sets each track's end to the next track's start; the last track ends at
    ``total_duration`` (left open when it is None). Tracks are updated in
    place and returned.

    No validation happens here: a non-increasing sequence yields a range the
    pipeline later rejects.
    """
    for current, following in zip(tracks, tracks[1:]):
        current.end_time = following.start_time
    if tracks:
        tracks[-1].end_time = total_duration
    return tracks


def build_filename(position: int, track: TrackDescriptor, extension: str) -> str:
    """Builds ``NN - Artist - Title.ext`` for a 1-based position."""
    artist = sanitize_component(track.main_artist)
    title = sanitize_component(track.main_title)
    return f"{position:02d} - {artist} - {title}{extension}"


def create_filenames(
    tracks: list[TrackDescriptor], extension: str, output_dir: Path
) -> list[TrackDescriptor]:
    """Assigns every track its output path, numbered by position in the list."""
    for position, track in enumerate(tracks, start=1):
        track.output_filename = output_dir / build_filename(position, track, extension)
    return tracks
