"""
Wrappers around the external ffprobe and ffmpeg executables.
"""

import asyncio
import json
import logging
import subprocess
from pathlib import Path

from song_splitter.core.cancellation import CancellationToken
from song_splitter.core.extraction import ExtractionCommand
from song_splitter.exceptions import InvocationError, ProbeError

log = logging.getLogger(__name__)

PROBE_TIMEOUT = 30
# Seconds a terminated ffmpeg gets to exit before it is killed
TERMINATE_GRACE_PERIOD = 5.0


def probe_duration(file_path: Path, ffprobe_path: str = "ffprobe") -> float:
    """
    Return media duration in seconds using ``ffprobe`` JSON output.

    Raises:
        ProbeError: If the file is missing, ``ffprobe`` fails or is not
        installed, or the duration is missing or not numeric.
    """
    if not Path(file_path).is_file():
        raise ProbeError(f"Input file not found: {file_path}")

    command = [
        ffprobe_path,
        "-v",
        "error",
        "-print_format",
        "json",
        "-show_format",
        str(file_path),
    ]

    try:
        completed = subprocess.run(
            command,
            capture_output=True,
            text=True,
            check=True,
            timeout=PROBE_TIMEOUT,
        )
    except FileNotFoundError as exc:
        raise ProbeError(f"{ffprobe_path} is not installed or not available in PATH") from exc
    except subprocess.TimeoutExpired as exc:
        raise ProbeError(f"ffprobe timed out while probing: {file_path}") from exc
    except subprocess.CalledProcessError as exc:
        stderr_text = (exc.stderr or "").strip()
        raise ProbeError(f"ffprobe failed for {file_path}: {stderr_text or exc}") from exc

    try:
        payload = json.loads(completed.stdout or "{}")
    except json.JSONDecodeError as exc:
        raise ProbeError(f"ffprobe returned invalid JSON for {file_path}") from exc

    duration_value = (payload.get("format") or {}).get("duration")
    if duration_value in (None, ""):
        raise ProbeError(f"ffprobe did not return a duration for {file_path}")

    try:
        duration = float(duration_value)
    except (TypeError, ValueError) as exc:
        raise ProbeError(f"ffprobe returned a non-numeric duration for {file_path}") from exc

    log.debug(f"Probed duration of '{file_path}': {duration:.3f}s")
    return duration


class FFmpegRunner:
    """Runs extraction commands as ffmpeg subprocesses."""

    def __init__(self, grace_period: float = TERMINATE_GRACE_PERIOD):
        self.grace_period = grace_period

    async def run(self, command: ExtractionCommand, token: CancellationToken) -> None:
        """
        Runs ``command`` and waits for it to finish.

        If ``token`` is cancelled while ffmpeg is running, the process is
        asked to terminate (and killed after the grace period), the partial
        output is removed and a cancelled ``InvocationError`` is raised.

        Raises:
            InvocationError: If ffmpeg is missing, exits non-zero, or is
            terminated by cancellation.
        """
        if token.cancelled:
            raise InvocationError("cancelled before ffmpeg was started", cancelled=True)

        argv = command.argv
        log.debug(f"Running: {subprocess.list2cmdline(argv)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except FileNotFoundError as e:
            raise InvocationError(
                f"{command.program} is not installed or not available in PATH"
            ) from e

        communicate = asyncio.ensure_future(process.communicate())
        cancelled = asyncio.ensure_future(token.wait())
        try:
            await asyncio.wait(
                {communicate, cancelled}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            cancelled.cancel()

        if not communicate.done():
            await self._terminate(process)
            output = await self._drain(communicate)
            _remove_partial(command.output_path)
            raise InvocationError(
                "ffmpeg terminated by cancellation",
                output=output,
                returncode=process.returncode,
                cancelled=True,
            )

        stdout, _ = communicate.result()
        output = (stdout or b"").decode("utf-8", errors="replace").strip()
        if process.returncode != 0:
            _remove_partial(command.output_path)
            raise InvocationError(
                f"ffmpeg exited with status {process.returncode}",
                output=output,
                returncode=process.returncode,
            )
        if output:
            log.debug(f"ffmpeg output for '{command.output_path.name}':\n{output}")

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        try:
            process.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(process.wait(), timeout=self.grace_period)
        except asyncio.TimeoutError:
            log.warning(f"ffmpeg (pid {process.pid}) did not exit, killing it")
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.wait()

    @staticmethod
    async def _drain(communicate: asyncio.Future) -> str:
        stdout, _ = await communicate
        return (stdout or b"").decode("utf-8", errors="replace").strip()


def _remove_partial(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        log.warning(f"Could not remove partial output '{path}': {e}")
