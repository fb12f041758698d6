"""
Manages a Rich Live display for concurrent track extraction.
Shows overall progress, the tracks currently being extracted and session counters.
"""

import asyncio
import time
from typing import Any

from rich.console import Console, Group
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from song_splitter.models.config import MAX_WORKERS
from song_splitter.models.track import TrackDescriptor
from song_splitter.utils.formatting import format_timestamp

TITLE_WIDTH = 55


class ProgressManager:
    """
    Live view of a split session: one spinner per running ffmpeg process and
    an overall bar that advances once per completed track.
    """

    def __init__(self, console: Console, enabled: bool = True):
        self.console = console
        self.enabled = enabled

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}", justify="left"),
            TimeElapsedColumn(),
            console=console,
            transient=False,
        )

        self.overall_progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=40),
            MofNCompleteColumn(),
            "[progress.percentage]{task.percentage:>3.0f}%",
            console=console,
        )

        self._live: Live | None = None
        self._overall_task_id: TaskID | None = None
        self._active_tasks: dict[TaskID, str] = {}

        self._stats: dict[str, Any] = {
            "total_tracks": 0,
            "completed": 0,
            "failed": 0,
            "skipped": 0,
            "active": 0,
            "peak_concurrent": 0,
            "start_time": None,
        }

    @property
    def remaining(self) -> int:
        done = self._stats["completed"] + self._stats["failed"] + self._stats["skipped"]
        return max(self._stats["total_tracks"] - done, 0)

    def _counters(self) -> Table:
        cells = [
            ("Extracted", self._stats["completed"], "green"),
            ("Failed", self._stats["failed"], "red"),
            ("Skipped", self._stats["skipped"], "yellow"),
            ("Remaining", self.remaining, "cyan"),
            ("Running", self._stats["active"], "cyan"),
            ("Peak", self._stats["peak_concurrent"], "magenta"),
        ]
        grid = Table.grid(padding=(0, 2))
        for _ in range(3):
            grid.add_column(style="bold cyan", justify="right")
            grid.add_column()
        for row_start in (0, 3):
            row: list[str] = []
            for label, value, style in cells[row_start : row_start + 3]:
                row.extend([f"{label}:", f"[{style}]{value}[/{style}]"])
            grid.add_row(*row)
        return grid

    def _render(self) -> Group:
        summary = Table.grid()
        summary.add_row(self._counters())
        if self._overall_task_id is not None:
            summary.add_row("")
            summary.add_row(self.overall_progress)
        running: Progress | Text = self.progress
        if not self._active_tasks:
            running = Text("No extraction running.", style="dim italic", justify="center")
        return Group(
            Panel(summary, title="[bold]Split Session[/bold]", border_style="blue"),
            Panel(
                running,
                title=f"[bold]✂ Running ffmpeg ({len(self._active_tasks)}/{MAX_WORKERS})[/bold]",
                border_style="green",
            ),
        )

    def _update_display(self):
        if self._live is not None:
            self._live.update(self._render())

    def _update_overall(self):
        if self._overall_task_id is not None:
            self.overall_progress.update(
                self._overall_task_id,
                completed=self._stats["completed"] + self._stats["failed"],
            )

    def initialize_session(self, total_tracks: int):
        self._stats["total_tracks"] = total_tracks
        self._stats["start_time"] = time.monotonic()
        self._overall_task_id = self.overall_progress.add_task(
            "Tracks", total=total_tracks, start=True
        )
        self._update_display()

    def add_track_task(self, position: int, track: TrackDescriptor) -> TaskID:
        description = f"{position:02d}. {track.display_title}"
        if len(description) > TITLE_WIDTH:
            description = description[: TITLE_WIDTH - 1] + "…"
        span = f"{format_timestamp(track.start_time)} → {format_timestamp(track.end_time)}"
        task_id = self.progress.add_task(
            f"{escape(description)} [dim]{span}[/dim]", total=None, start=True
        )
        self._active_tasks[task_id] = description
        self._stats["active"] = len(self._active_tasks)
        self._stats["peak_concurrent"] = max(
            self._stats["peak_concurrent"], self._stats["active"]
        )
        self._update_display()
        return task_id

    def remove_task(self, task_id: TaskID | None, success: bool = True):
        """Marks a running track as finished and advances the overall bar once."""
        if task_id is None:
            return
        try:
            self.progress.remove_task(task_id)
        except KeyError:
            pass
        self._active_tasks.pop(task_id, None)
        self._stats["active"] = len(self._active_tasks)
        if success:
            self._stats["completed"] += 1
        else:
            self._stats["failed"] += 1
        self._update_overall()
        self._update_display()

    def increment_skipped(self, count: int = 1):
        """Counts tracks abandoned on cancellation; the overall bar does not move."""
        self._stats["skipped"] += count
        self._update_display()

    def get_statistics(self) -> dict:
        return self._stats.copy()

    async def __aenter__(self):
        if not self.enabled:
            return self
        self._live = Live(
            self._render(),
            console=self.console,
            refresh_per_second=8,
            vertical_overflow="visible",
        )
        self._live.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._live:
            await asyncio.sleep(0.1)
            self._live.update(self._render())
            self._live.stop()
            self._live = None
