"""
Builds the ffmpeg invocation that extracts one track from the source media.
"""

from dataclasses import dataclass, field
from pathlib import Path

from song_splitter.models.track import AlbumContext, OutputMode, TrackDescriptor
from song_splitter.utils.formatting import format_seconds_arg

# Encoding arguments per output mode
ENCODING_PROFILES: dict[OutputMode, tuple[str, ...]] = {
    OutputMode.AUDIO: (
        "-vn",
        "-c:a", "libmp3lame",
        "-q:a", "2",
    ),
    OutputMode.VIDEO: (
        "-c:v", "libx264",
        "-preset", "veryfast",
        "-crf", "23",
        "-fps_mode", "cfr",
        "-profile:v", "baseline",
        "-level", "3.0",
        "-tune", "fastdecode",
        "-pix_fmt", "yuv420p",
        "-c:a", "aac",
        "-b:a", "192k",
        "-ac", "2",
        "-ar", "48000",
        "-movflags", "+faststart",
    ),
}


@dataclass(frozen=True)
class ExtractionCommand:
    """Everything needed to run ffmpeg for a single track."""

    program: str
    input_path: Path
    output_path: Path
    start: float
    duration: float
    encoding_args: tuple[str, ...]
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def metadata_args(self) -> list[str]:
        args: list[str] = []
        for key, value in self.metadata.items():
            args.extend(["-metadata", f"{key}={value}"])
        return args

    @property
    def argv(self) -> list[str]:
        return [
            self.program,
            "-nostdin",
            "-v", "warning",
            "-ss", format_seconds_arg(self.start),
            "-i", str(self.input_path),
            "-t", format_seconds_arg(self.duration),
            "-max_muxing_queue_size", "1024",
            "-threads", "2",
            *self.encoding_args,
            *self.metadata_args,
            "-y",
            str(self.output_path),
        ]


def build_title(track: TrackDescriptor) -> str:
    """Main title followed by the titles of the mixed-in works."""
    return " / ".join([track.main_title, *(t.title for t in track.additional_tracks)])


def build_comment(track: TrackDescriptor) -> str:
    entries = [f"{t.artist} - {t.title} [{t.label}]" for t in track.additional_tracks]
    return "Additional tracks: " + "; ".join(entries)


def build_metadata(track: TrackDescriptor, context: AlbumContext) -> dict[str, str]:
    metadata = {
        "title": build_title(track),
        "artist": track.main_artist,
        "album": context.album,
        "date": str(context.release_year),
        "comment": build_comment(track),
    }
    if track.main_label:
        metadata["publisher"] = track.main_label
    return metadata


def build_invocation(
    track: TrackDescriptor, context: AlbumContext, program: str = "ffmpeg"
) -> ExtractionCommand:
    """
    Maps a resolved track to its ffmpeg command. Pure: validating the time
    range is left to the caller.
    """
    duration = track.duration if track.duration is not None else 0.0
    output = track.output_filename
    if output is None:
        output = context.output_dir / f"{track.display_title}{context.mode.extension}"
    return ExtractionCommand(
        program=program,
        input_path=context.input_path,
        output_path=output,
        start=track.start_time,
        duration=duration,
        encoding_args=ENCODING_PROFILES[context.mode],
        metadata=build_metadata(track, context),
    )
