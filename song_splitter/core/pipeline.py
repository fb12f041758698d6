"""
The orchestrator that extracts every track over a bounded pool of workers.
"""

import asyncio
import logging
import time
from typing import Protocol

from song_splitter.cli.progress_manager import ProgressManager
from song_splitter.core.cancellation import CancellationToken
from song_splitter.core.extraction import ExtractionCommand, build_invocation
from song_splitter.exceptions import InvocationError, TimeRangeError, TrackError
from song_splitter.media.integrity import FileIntegrityChecker
from song_splitter.models.config import MAX_WORKERS
from song_splitter.models.stats import JobState, PipelineOutcome, SplitStats
from song_splitter.models.track import AlbumContext, TrackDescriptor
from song_splitter.utils.structured_logger import SplitLogger

log = logging.getLogger(__name__)


class ExtractionRunner(Protocol):
    async def run(self, command: ExtractionCommand, token: CancellationToken) -> None:
        ...


class SplitPipeline:
    """
    Runs one extraction per track with at most ``MAX_WORKERS`` in flight.

    Each track is an independent unit: it waits for a capacity slot, checks
    its time range, runs ffmpeg and releases the slot. Failures are logged
    and counted, never raised. When the cancellation token fires, units
    still waiting for a slot are skipped and running ones are asked to stop.
    """

    def __init__(
        self,
        context: AlbumContext,
        runner: ExtractionRunner,
        split_logger: SplitLogger,
        progress: ProgressManager | None = None,
        token: CancellationToken | None = None,
        ffmpeg_path: str = "ffmpeg",
        verify_output: bool = False,
    ):
        self.context = context
        self.runner = runner
        self.split_logger = split_logger
        self.progress = progress
        self.token = token or CancellationToken()
        self.ffmpeg_path = ffmpeg_path
        self.verify_output = verify_output
        self.stats = SplitStats()
        self.states: list[JobState] = []
        self._slots = asyncio.Semaphore(MAX_WORKERS)
        self.token.add_callback(self.split_logger.cancellation_requested)

    async def run(self, tracks: list[TrackDescriptor]) -> PipelineOutcome:
        """Extracts all tracks and returns the aggregated outcome."""
        self.stats.total = len(tracks)
        self.states = [JobState.PENDING] * len(tracks)
        if self.progress:
            self.progress.initialize_session(len(tracks))
        self.split_logger.session_started(
            str(self.context.input_path),
            self.context.mode.value,
            len(tracks),
            MAX_WORKERS,
        )

        states = await asyncio.gather(
            *(
                self._run_unit(position, track)
                for position, track in enumerate(tracks, start=1)
            )
        )

        outcome = PipelineOutcome.from_stats(self.stats, self.token.cancelled, states)
        self.split_logger.session_completed(
            outcome.succeeded, outcome.failed, outcome.skipped, outcome.duration_seconds
        )
        if outcome.failed:
            self.split_logger.completed_with_errors(outcome.failed)
        return outcome

    async def _acquire_slot(self) -> bool:
        """
        Waits for a capacity slot or for cancellation, whichever comes first.
        Returns True if a slot is now held by the caller.
        """
        if self.token.cancelled:
            return False

        acquire = asyncio.ensure_future(self._slots.acquire())
        cancelled = asyncio.ensure_future(self.token.wait())
        await asyncio.wait({acquire, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        cancelled.cancel()

        if acquire.done() and not acquire.cancelled():
            if self.token.cancelled:
                self._slots.release()
                return False
            return True

        acquire.cancel()
        try:
            await acquire
        except asyncio.CancelledError:
            return False
        # The slot was granted while the acquisition was being cancelled
        self._slots.release()
        return False

    async def _run_unit(self, position: int, track: TrackDescriptor) -> JobState:
        if not await self._acquire_slot():
            await self.stats.job_skipped()
            if self.progress:
                self.progress.increment_skipped()
            self.split_logger.track_skipped(position, track.display_title, "cancelled")
            return self._settle(position, JobState.SKIPPED)

        self.states[position - 1] = JobState.RUNNING
        await self.stats.job_started()
        task_id = self.progress.add_track_task(position, track) if self.progress else None
        self.split_logger.track_started(
            position, track.display_title, track.start_time, track.end_time
        )
        started = time.monotonic()
        success = False
        try:
            await self._extract(track)
            success = True
        except TrackError as e:
            detail = e.output if isinstance(e, InvocationError) else ""
            self.split_logger.track_failed(position, track.display_title, str(e), detail)
        except Exception as e:
            log.error(
                f"Unexpected error while extracting '{track.display_title}': {e}",
                exc_info=log.getEffectiveLevel() == logging.DEBUG,
            )
            self.split_logger.track_failed(position, track.display_title, str(e))
        finally:
            self._slots.release()

        await self.stats.job_finished(success)
        if self.progress:
            self.progress.remove_task(task_id, success=success)
        if success:
            self.split_logger.track_completed(
                position,
                track.display_title,
                str(track.output_filename),
                time.monotonic() - started,
            )
            return self._settle(position, JobState.SUCCEEDED)
        return self._settle(position, JobState.FAILED)

    def _settle(self, position: int, state: JobState) -> JobState:
        self.states[position - 1] = state
        return state

    async def _extract(self, track: TrackDescriptor) -> None:
        if track.duration is None or track.duration <= 0:
            raise TimeRangeError(
                f"invalid time range: start({track.start_time:f}) >= end({track.end_time})"
            )

        command = build_invocation(track, self.context, self.ffmpeg_path)
        await self.runner.run(command, self.token)

        if self.verify_output:
            await asyncio.to_thread(
                FileIntegrityChecker.verify, command.output_path, self.context.mode
            )
