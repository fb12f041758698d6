"""
Dataclasses describing the segments of a recording and the album they belong to.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class OutputMode(str, Enum):
    """Kind of file produced for each track."""

    AUDIO = "audio"
    VIDEO = "video"

    @property
    def extension(self) -> str:
        return ".mp3" if self is OutputMode.AUDIO else ".mp4"


@dataclass(frozen=True)
class AdditionalTrack:
    """A work mixed into a segment, listed on a ``w/`` line."""

    artist: str
    title: str
    label: str = ""


@dataclass
class TrackDescriptor:
    """
    One segment of the source media.

    ``end_time`` and ``output_filename`` are filled in by the timeline
    resolver once the whole ordered sequence is known.
    """

    start_time: float
    main_artist: str
    main_title: str
    main_label: str = ""
    additional_tracks: list[AdditionalTrack] = field(default_factory=list)
    end_time: float | None = None
    output_filename: Path | None = None

    @property
    def duration(self) -> float | None:
        if self.end_time is None:
            return None
        return self.end_time - self.start_time

    @property
    def display_title(self) -> str:
        return f"{self.main_artist} - {self.main_title}"


@dataclass(frozen=True)
class AlbumContext:
    """Run-scoped, read-only metadata shared by every extraction job."""

    album: str
    total_duration: float
    mode: OutputMode
    output_dir: Path
    input_path: Path
    release_year: int
