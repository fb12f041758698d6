"""
Counters and outcome of a pipeline run.
"""

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum


class JobState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class SplitStats:
    """
    Shared counters for a split session.

    Workers update them through the async methods, which serialize access
    with a lock.
    """

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    completed: int = 0
    active: int = 0
    peak_concurrent: int = 0
    start_time: float = field(default_factory=time.monotonic)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    async def job_started(self) -> None:
        async with self._lock:
            self.active += 1
            self.peak_concurrent = max(self.peak_concurrent, self.active)

    async def job_finished(self, success: bool) -> None:
        """Records a completed unit and advances the progress counter once."""
        async with self._lock:
            self.active -= 1
            self.completed += 1
            if success:
                self.succeeded += 1
            else:
                self.failed += 1

    async def job_skipped(self) -> None:
        async with self._lock:
            self.skipped += 1

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.start_time


@dataclass(frozen=True)
class PipelineOutcome:
    """Aggregated, order-independent result of a run."""

    total: int
    succeeded: int
    failed: int
    skipped: int
    cancelled: bool
    duration_seconds: float
    states: tuple[JobState, ...] = ()

    @property
    def completed(self) -> int:
        return self.succeeded + self.failed

    @classmethod
    def from_stats(
        cls, stats: SplitStats, cancelled: bool, states: list[JobState]
    ) -> "PipelineOutcome":
        return cls(
            total=stats.total,
            succeeded=stats.succeeded,
            failed=stats.failed,
            skipped=stats.skipped,
            cancelled=cancelled,
            duration_seconds=round(stats.elapsed, 2),
            states=tuple(states),
        )
