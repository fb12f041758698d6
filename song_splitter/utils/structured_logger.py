"""
Structured logging system for the split pipeline.
Emits human-readable console lines and, optionally, JSON lines with context.
"""

import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import IO, Any

from rich.markup import escape


class StructuredLogger:
    """
    Event logger with two sinks: a ``[event] key=value`` line through the
    standard logging tree, and a JSON object per event in a ``.jsonl`` file
    under ``log_dir``. Every event is also kept in ``records``.

    Usage:
        logger = StructuredLogger("song_splitter", log_dir=Path("logs"))
        logger.info("track_completed", track="Artist - Title", duration_s=3.2)
    """

    def __init__(
        self,
        name: str,
        log_dir: Path | None = None,
        enable_json: bool = True,
        enable_console: bool = True,
    ):
        self.name = name
        self.log_dir = log_dir
        self.enable_json = enable_json and log_dir is not None
        self.enable_console = enable_console
        self.records: list[dict[str, Any]] = []
        self.json_path: Path | None = None

        self._logger = logging.getLogger(name)
        self._json_file: IO[str] | None = None
        if self.enable_json:
            self._json_file = self._open_json_log(log_dir)

        # Merged into every JSON entry
        self._context: dict[str, Any] = {
            "session_id": f"{int(time.time())}_{id(self)}",
            "session_start": datetime.now().isoformat(),
        }

    def _open_json_log(self, log_dir: Path) -> IO[str]:
        log_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.json_path = log_dir / f"song_splitter_{stamp}.jsonl"
        return open(self.json_path, "a", encoding="utf-8")  # noqa: SIM115

    def set_session_context(self, **kwargs) -> None:
        """Adds fields written with every JSON entry of this session."""
        self._context.update(kwargs)

    @staticmethod
    def _console_line(event: str, context: dict[str, Any]) -> str:
        fields = " ".join(f"{key}={value}" for key, value in context.items())
        return escape(f"[{event}] {fields}".rstrip())

    def _emit(self, level: int, event: str, **context) -> None:
        level_name = logging.getLevelName(level)
        self.records.append({"level": level_name, "event": event, **context})
        if self.enable_console:
            self._logger.log(level, self._console_line(event, context))
        if self._json_file is not None and not self._json_file.closed:
            entry = {
                "timestamp": datetime.now().isoformat(),
                "level": level_name,
                "event": event,
                **self._context,
                **context,
            }
            try:
                self._json_file.write(json.dumps(entry, default=str) + "\n")
                self._json_file.flush()
            except (OSError, TypeError, ValueError) as e:
                print(f"JSON logging failed: {e}", file=sys.stderr)

    def debug(self, event: str, **context) -> None:
        self._emit(logging.DEBUG, event, **context)

    def info(self, event: str, **context) -> None:
        self._emit(logging.INFO, event, **context)

    def warning(self, event: str, **context) -> None:
        self._emit(logging.WARNING, event, **context)

    def error(self, event: str, **context) -> None:
        self._emit(logging.ERROR, event, **context)

    def events(self, event: str) -> list[dict[str, Any]]:
        """Returns the records emitted so far for ``event``."""
        return [r for r in self.records if r["event"] == event]

    def close(self) -> None:
        if self._json_file is not None and not self._json_file.closed:
            self._json_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class SplitLogger:
    """Specialized logger for split session and per-track events."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def tracklist_parsed(self, album: str, track_count: int):
        self.logger.info("tracklist_parsed", album=album, track_count=track_count)

    def session_started(self, input_path: str, mode: str, track_count: int, workers: int):
        self.logger.info(
            "session_started",
            input=input_path,
            mode=mode,
            track_count=track_count,
            workers=workers,
        )

    def track_started(self, position: int, title: str, start: float, end: float | None):
        self.logger.debug(
            "track_started", position=position, track=title, start=start, end=end
        )

    def track_completed(self, position: int, title: str, output: str, duration_s: float):
        self.logger.debug(
            "track_completed",
            position=position,
            track=title,
            output=output,
            duration_s=round(duration_s, 2),
        )

    def track_failed(self, position: int, title: str, error: str, detail: str = ""):
        context: dict[str, Any] = {"position": position, "track": title, "error": error}
        if detail:
            context["detail"] = detail
        self.logger.error("track_failed", **context)

    def track_skipped(self, position: int, title: str, reason: str):
        self.logger.debug("track_skipped", position=position, track=title, reason=reason)

    def cancellation_requested(self, reason: str):
        self.logger.warning("cancellation_requested", reason=reason)

    def session_completed(
        self, succeeded: int, failed: int, skipped: int, duration_s: float
    ):
        self.logger.info(
            "session_completed",
            succeeded=succeeded,
            failed=failed,
            skipped=skipped,
            duration_s=round(duration_s, 2),
        )

    def completed_with_errors(self, error_count: int):
        self.logger.error("completed_with_errors", error_count=error_count)


def create_structured_logger(
    log_dir: Path | None = None, enable_json: bool = False
) -> tuple[StructuredLogger, SplitLogger]:
    """
    Create the structured loggers.

    Returns:
        Tuple of (base_logger, split_logger)
    """
    base = StructuredLogger("song_splitter", log_dir=log_dir, enable_json=enable_json)
    return base, SplitLogger(base)
