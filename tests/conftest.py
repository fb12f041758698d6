from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from song_splitter.exceptions import InvocationError
from song_splitter.models.track import AlbumContext, OutputMode, TrackDescriptor
from song_splitter.utils.structured_logger import SplitLogger, StructuredLogger


class FakeRunner:
    """Stands in for ffmpeg: records commands and writes a small output file."""

    def __init__(self, fail_titles=(), delay: float = 0.01, cancel_on_first: bool = False):
        self.fail_titles = set(fail_titles)
        self.delay = delay
        self.cancel_on_first = cancel_on_first
        self.calls = []
        self.active = 0
        self.peak = 0

    async def run(self, command, token) -> None:
        self.calls.append(command)
        call_number = len(self.calls)
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delay)
            if self.cancel_on_first and call_number == 1:
                token.cancel("test interrupt")
            if command.metadata["artist"] in self.fail_titles:
                raise InvocationError(
                    "ffmpeg exited with status 1",
                    output="Invalid data found when processing input",
                    returncode=1,
                )
            command.output_path.write_bytes(b"fake media")
        finally:
            self.active -= 1


@pytest.fixture
def structured_logger() -> StructuredLogger:
    return StructuredLogger("song_splitter.tests", enable_json=False)


@pytest.fixture
def split_logger(structured_logger: StructuredLogger) -> SplitLogger:
    return SplitLogger(structured_logger)


@pytest.fixture
def album_context(tmp_path: Path) -> AlbumContext:
    output_dir = tmp_path / "output"
    output_dir.mkdir()
    return AlbumContext(
        album="Ultra Europe 2025",
        total_duration=600.0,
        mode=OutputMode.AUDIO,
        output_dir=output_dir,
        input_path=tmp_path / "set.mp4",
        release_year=2025,
    )


def make_tracks(starts: list[float]) -> list[TrackDescriptor]:
    return [
        TrackDescriptor(
            start_time=start,
            main_artist=f"Artist {i}",
            main_title=f"Title {i}",
        )
        for i, start in enumerate(starts, start=1)
    ]
