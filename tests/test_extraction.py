from __future__ import annotations

from dataclasses import replace

from song_splitter.core.extraction import (
    ENCODING_PROFILES,
    build_comment,
    build_invocation,
    build_title,
)
from song_splitter.models.track import AdditionalTrack, OutputMode, TrackDescriptor


def _track(output_dir, label: str = "Revealed") -> TrackDescriptor:
    return TrackDescriptor(
        start_time=300.0,
        end_time=540.5,
        main_artist="Hardwell",
        main_title="Spaceman",
        main_label=label,
        additional_tracks=[
            AdditionalTrack("Tiesto", "Red Lights", "Musical Freedom"),
            AdditionalTrack("Avicii", "Levels", ""),
        ],
        output_filename=output_dir / "02 - Hardwell - Spaceman.mp3",
    )


def test_title_and_comment_include_additional_tracks(album_context) -> None:
    track = _track(album_context.output_dir)

    assert build_title(track) == "Spaceman / Red Lights / Levels"
    assert build_comment(track) == (
        "Additional tracks: Tiesto - Red Lights [Musical Freedom]; Avicii - Levels []"
    )


def test_metadata_fields(album_context) -> None:
    command = build_invocation(_track(album_context.output_dir), album_context)

    assert command.metadata == {
        "title": "Spaceman / Red Lights / Levels",
        "artist": "Hardwell",
        "album": "Ultra Europe 2025",
        "date": "2025",
        "comment": (
            "Additional tracks: Tiesto - Red Lights [Musical Freedom]; Avicii - Levels []"
        ),
        "publisher": "Revealed",
    }


def test_publisher_omitted_without_label(album_context) -> None:
    command = build_invocation(_track(album_context.output_dir, label=""), album_context)

    assert "publisher" not in command.metadata
    assert not any(arg.startswith("publisher=") for arg in command.argv)


def test_audio_command_ranges_and_output(album_context) -> None:
    track = _track(album_context.output_dir)
    command = build_invocation(track, album_context, program="/usr/bin/ffmpeg")
    argv = command.argv

    assert argv[0] == "/usr/bin/ffmpeg"
    assert argv[argv.index("-ss") + 1] == "300.000000"
    assert argv[argv.index("-i") + 1] == str(album_context.input_path)
    assert argv[argv.index("-t") + 1] == "240.500000"
    assert argv[argv.index("-c:a") + 1] == "libmp3lame"
    assert "-c:v" not in argv
    assert argv[-1] == str(track.output_filename)
    assert argv[argv.index("-metadata") + 1] == "title=Spaceman / Red Lights / Levels"


def test_video_profile_is_constant_frame_rate(album_context) -> None:
    context = replace(album_context, mode=OutputMode.VIDEO)
    command = build_invocation(_track(album_context.output_dir), context)

    assert command.encoding_args == ENCODING_PROFILES[OutputMode.VIDEO]
    assert command.argv[command.argv.index("-fps_mode") + 1] == "cfr"
    assert command.argv[command.argv.index("-c:v") + 1] == "libx264"


def test_build_invocation_is_deterministic(album_context) -> None:
    track = _track(album_context.output_dir)

    first = build_invocation(track, album_context)
    second = build_invocation(track, album_context)

    assert first == second
    assert first.argv == second.argv
