"""
Parses the human-authored tracklist format into ordered track descriptors.

The format is line oriented::

    <album title>
    [1:02:03] Artist - Title [Label]
    w/ Other Artist - Other Title [Other Label]
    [1:05:00] Artist - Title

Every line is classified by ``classify_line`` into one of a small set of
kinds; the first kind that matches wins.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from song_splitter.exceptions import ParseError, SetupError
from song_splitter.models.track import AdditionalTrack, TrackDescriptor

log = logging.getLogger(__name__)

CONTINUATION_MARKER = "w/ "
STAGE_SUFFIX = "On Stage"
ARTIST_TITLE_SEPARATOR = " - "
# Weights for the rightmost, middle and leftmost timestamp fields
TIMESTAMP_WEIGHTS = (1, 60, 3600)


class LineKind(str, Enum):
    BLANK = "blank"
    TRACK_START = "track_start"
    CONTINUATION = "continuation"
    OTHER = "other"


@dataclass(frozen=True)
class TracklistLine:
    """A classified tracklist line with its raw fields split out."""

    kind: LineKind
    timestamp: str = ""
    body: str = ""
    label: str = ""

    @property
    def is_stage_announcement(self) -> bool:
        return self.kind is LineKind.TRACK_START and self.body.endswith(STAGE_SUFFIX)


def split_label(text: str) -> tuple[str, str]:
    """
    Separates a trailing ``[label]`` from ``text``.

    The label is everything between the last ``[`` (which must follow
    whitespace) and the closing ``]`` at the end of the text.
    """
    if not text.endswith("]"):
        return text, ""
    start = text.rfind("[")
    if start <= 0 or not text[start - 1].isspace():
        return text, ""
    label = text[start + 1 : -1].strip()
    if not label:
        return text, ""
    return text[:start].rstrip(), label


def classify_line(raw_line: str) -> TracklistLine:
    """Classifies a single line; performs no validation of the fields."""
    line = raw_line.strip()
    if not line:
        return TracklistLine(LineKind.BLANK)

    if line.startswith("["):
        close = line.find("]")
        if close > 0 and line[close + 1 : close + 2].isspace():
            rest = line[close + 2 :].strip()
            if rest:
                body, label = split_label(rest)
                return TracklistLine(
                    LineKind.TRACK_START,
                    timestamp=line[1:close].strip(),
                    body=body,
                    label=label,
                )

    if line.startswith(CONTINUATION_MARKER):
        rest = line[len(CONTINUATION_MARKER) :].strip()
        body, label = split_label(rest)
        return TracklistLine(LineKind.CONTINUATION, body=body, label=label)

    return TracklistLine(LineKind.OTHER, body=line)


def parse_timestamp(timestamp: str) -> float:
    """
    Converts ``SS``, ``MM:SS`` or ``HH:MM:SS`` into seconds.

    Raises:
        ParseError: If a field is not a non-negative integer or there are
        more than three fields.
    """
    fields = timestamp.split(":")
    if len(fields) > len(TIMESTAMP_WEIGHTS):
        raise ParseError(f"invalid timestamp '{timestamp}': too many fields")

    total = 0
    for weight, value in zip(TIMESTAMP_WEIGHTS, reversed(fields)):
        value = value.strip()
        if not value.isdecimal():
            raise ParseError(f"invalid timestamp '{timestamp}'")
        total += int(value) * weight
    return float(total)


def parse_artist_title(text: str) -> tuple[str, str]:
    """Splits ``Artist - Title`` on the first separator."""
    artist, sep, title = text.partition(ARTIST_TITLE_SEPARATOR)
    artist, title = artist.strip(), title.strip()
    if not sep or not artist or not title:
        raise ParseError(f"invalid artist/title format: {text}")
    return artist, title


def parse_tracklist(text: str) -> tuple[list[TrackDescriptor], str]:
    """
    Parses tracklist text into ``(tracks, album_title)``.

    Tracks are returned in the order they were opened in the text. Stage
    announcements and continuation lines without an open track are dropped.

    Raises:
        ParseError: On a malformed track-start line, an unusable continuation
        line, or a tracklist without any track.
    """
    lines = text.lstrip("\ufeff").splitlines()

    album = ""
    body_start = len(lines)
    for index, raw in enumerate(lines):
        if raw.strip():
            album = raw.strip()
            body_start = index + 1
            break
    if not album:
        raise ParseError("tracklist is empty")

    tracks: list[TrackDescriptor] = []
    current: TrackDescriptor | None = None

    for line_number, raw in enumerate(lines[body_start:], start=body_start + 1):
        line = classify_line(raw)

        if line.kind is LineKind.TRACK_START:
            try:
                start = parse_timestamp(line.timestamp)
                if line.is_stage_announcement:
                    log.debug(f"Skipping stage announcement on line {line_number}")
                    continue
                artist, title = parse_artist_title(line.body)
            except ParseError as e:
                raise ParseError(str(e), line_number) from e

            if current is not None:
                tracks.append(current)
            current = TrackDescriptor(
                start_time=start,
                main_artist=artist,
                main_title=title,
                main_label=line.label,
            )

        elif line.kind is LineKind.CONTINUATION:
            if current is None or not line.body:
                log.debug(f"Ignoring continuation line {line_number}")
                continue
            try:
                artist, title = parse_artist_title(line.body)
            except ParseError as e:
                raise ParseError(str(e), line_number) from e
            current.additional_tracks.append(
                AdditionalTrack(artist=artist, title=title, label=line.label)
            )

    if current is not None:
        tracks.append(current)

    if not tracks:
        raise ParseError("tracklist contains no tracks")
    return tracks, album


def read_tracklist(path: Path) -> tuple[list[TrackDescriptor], str]:
    """Reads and parses a tracklist file."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SetupError(f"Could not read tracklist '{path}': {e}") from e
    return parse_tracklist(text)
