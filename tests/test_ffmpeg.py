from __future__ import annotations

import asyncio
import json
import subprocess
import sys
from pathlib import Path

import pytest

from song_splitter.core.cancellation import CancellationToken
from song_splitter.core.extraction import ENCODING_PROFILES, ExtractionCommand
from song_splitter.exceptions import InvocationError, ProbeError
from song_splitter.media import ffmpeg as ffmpeg_module
from song_splitter.media.ffmpeg import FFmpegRunner, probe_duration
from song_splitter.models.track import OutputMode

posix_only = pytest.mark.skipif(
    sys.platform == "win32", reason="fake ffmpeg relies on a shebang script"
)


def _completed(stdout: str) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=["ffprobe"], returncode=0, stdout=stdout, stderr="")


@pytest.fixture
def media_file(tmp_path: Path) -> Path:
    path = tmp_path / "set.mp4"
    path.write_bytes(b"\x00")
    return path


def test_probe_duration_reads_format_duration(monkeypatch, media_file) -> None:
    seen = {}

    def fake_run(command, **kwargs):
        seen["command"] = command
        return _completed(json.dumps({"format": {"duration": "3723.480000"}}))

    monkeypatch.setattr(ffmpeg_module.subprocess, "run", fake_run)

    assert probe_duration(media_file, "my-ffprobe") == pytest.approx(3723.48)
    assert seen["command"][0] == "my-ffprobe"
    assert seen["command"][-1] == str(media_file)


def test_probe_duration_missing_file(tmp_path) -> None:
    with pytest.raises(ProbeError, match="not found"):
        probe_duration(tmp_path / "missing.mp4")


@pytest.mark.parametrize(
    "payload",
    [
        {"format": {}},
        {"format": {"duration": ""}},
        {"format": {"duration": "N/A"}},
        {},
    ],
)
def test_probe_duration_without_usable_duration(monkeypatch, media_file, payload) -> None:
    monkeypatch.setattr(
        ffmpeg_module.subprocess, "run", lambda command, **kwargs: _completed(json.dumps(payload))
    )

    with pytest.raises(ProbeError, match="duration"):
        probe_duration(media_file)


def test_probe_duration_invalid_json(monkeypatch, media_file) -> None:
    monkeypatch.setattr(
        ffmpeg_module.subprocess, "run", lambda command, **kwargs: _completed("not json")
    )

    with pytest.raises(ProbeError, match="invalid JSON"):
        probe_duration(media_file)


def test_probe_duration_ffprobe_failure(monkeypatch, media_file) -> None:
    def fake_run(command, **kwargs):
        raise subprocess.CalledProcessError(
            1, command, output="", stderr="moov atom not found"
        )

    monkeypatch.setattr(ffmpeg_module.subprocess, "run", fake_run)

    with pytest.raises(ProbeError, match="moov atom not found"):
        probe_duration(media_file)


def test_probe_duration_ffprobe_not_installed(monkeypatch, media_file) -> None:
    def fake_run(command, **kwargs):
        raise FileNotFoundError(command[0])

    monkeypatch.setattr(ffmpeg_module.subprocess, "run", fake_run)

    with pytest.raises(ProbeError, match="not installed"):
        probe_duration(media_file)


def _fake_ffmpeg(tmp_path: Path, body: str) -> str:
    script = tmp_path / "fake-ffmpeg"
    script.write_text(
        f"#!{sys.executable}\n"
        "import sys, time\n"
        "output = sys.argv[-1]\n"
        f"{body}\n",
        encoding="utf-8",
    )
    script.chmod(0o755)
    return str(script)


def _command(program: str, tmp_path: Path) -> ExtractionCommand:
    return ExtractionCommand(
        program=program,
        input_path=tmp_path / "set.mp4",
        output_path=tmp_path / "01 - Artist - Title.mp3",
        start=0.0,
        duration=30.0,
        encoding_args=ENCODING_PROFILES[OutputMode.AUDIO],
        metadata={"title": "Title", "artist": "Artist"},
    )


@posix_only
def test_runner_success_writes_output(tmp_path) -> None:
    program = _fake_ffmpeg(tmp_path, "open(output, 'wb').write(b'audio')")
    command = _command(program, tmp_path)

    asyncio.run(FFmpegRunner().run(command, CancellationToken()))

    assert command.output_path.read_bytes() == b"audio"


@posix_only
def test_runner_failure_removes_partial_output(tmp_path) -> None:
    program = _fake_ffmpeg(
        tmp_path,
        "open(output, 'wb').write(b'partial')\n"
        "print('Invalid data found when processing input', file=sys.stderr)\n"
        "sys.exit(1)",
    )
    command = _command(program, tmp_path)

    with pytest.raises(InvocationError) as excinfo:
        asyncio.run(FFmpegRunner().run(command, CancellationToken()))

    assert excinfo.value.returncode == 1
    assert "Invalid data found" in excinfo.value.output
    assert not excinfo.value.cancelled
    assert not command.output_path.exists()


@posix_only
def test_runner_cancellation_terminates_process(tmp_path) -> None:
    program = _fake_ffmpeg(
        tmp_path,
        "open(output, 'wb').write(b'partial')\n"
        "time.sleep(30)",
    )
    command = _command(program, tmp_path)

    async def _run():
        token = CancellationToken()
        task = asyncio.create_task(FFmpegRunner(grace_period=2.0).run(command, token))
        while not command.output_path.exists():
            await asyncio.sleep(0.05)
        token.cancel("test interrupt")
        await task

    with pytest.raises(InvocationError) as excinfo:
        asyncio.run(asyncio.wait_for(_run(), timeout=20))

    assert excinfo.value.cancelled
    assert not command.output_path.exists()


def test_runner_does_not_start_when_already_cancelled(tmp_path) -> None:
    command = _command(str(tmp_path / "never-run"), tmp_path)

    async def _run():
        token = CancellationToken()
        token.cancel()
        await FFmpegRunner().run(command, token)

    with pytest.raises(InvocationError) as excinfo:
        asyncio.run(_run())

    assert excinfo.value.cancelled


def test_runner_missing_executable(tmp_path) -> None:
    command = _command(str(tmp_path / "no-such-ffmpeg"), tmp_path)

    with pytest.raises(InvocationError, match="not installed"):
        asyncio.run(FFmpegRunner().run(command, CancellationToken()))
