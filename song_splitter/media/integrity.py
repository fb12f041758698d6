"""
Post-extraction checks that a produced track is a playable media file.
"""

import logging
from pathlib import Path

from mutagen import FileType, MutagenError
from mutagen.mp3 import MP3
from mutagen.mp4 import MP4

from song_splitter.exceptions import OutputIntegrityError
from song_splitter.models.track import OutputMode

log = logging.getLogger(__name__)

# Container reader used to open the output of each mode
_READERS: dict[OutputMode, type[FileType]] = {
    OutputMode.AUDIO: MP3,
    OutputMode.VIDEO: MP4,
}


class FileIntegrityChecker:
    """Opens extracted files with mutagen and checks their stream length."""

    @staticmethod
    def stream_length(filepath: Path, mode: OutputMode) -> float:
        """
        Returns the stream length in seconds reported by mutagen, or 0.0 when
        the file cannot be read as the container expected for ``mode``.
        """
        reader = _READERS[mode]
        try:
            media = reader(str(filepath))
        except MutagenError as e:
            log.debug(f"{reader.__name__} could not read '{filepath.name}': {e}")
            return 0.0
        if media.info is None:
            return 0.0
        return float(getattr(media.info, "length", 0.0) or 0.0)

    @classmethod
    def is_playable(cls, filepath: Path, mode: OutputMode) -> bool:
        length = cls.stream_length(filepath, mode)
        if length <= 0:
            log.warning(
                f"Integrity check failed for '{filepath.name}': no {mode.value} stream found."
            )
            return False
        return True

    @classmethod
    def verify(cls, path: Path, mode: OutputMode) -> None:
        """
        Raises:
            OutputIntegrityError: If ``path`` is missing or not a playable file
            for ``mode``. The broken file is removed.
        """
        if not path.is_file():
            raise OutputIntegrityError(f"Output file was not created: {path.name}")
        if not cls.is_playable(path, mode):
            path.unlink(missing_ok=True)
            raise OutputIntegrityError(f"Output file failed integrity check: {path.name}")
