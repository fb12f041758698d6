"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from song_splitter import __version__
from song_splitter.core.cancellation import CancellationToken, install_signal_handlers
from song_splitter.core.extraction import build_invocation
from song_splitter.core.pipeline import SplitPipeline
from song_splitter.core.timeline import create_filenames, resolve_end_times
from song_splitter.exceptions import ConfigurationError, SongSplitterError
from song_splitter.media.ffmpeg import FFmpegRunner, probe_duration
from song_splitter.models.config import SplitConfig, load_config
from song_splitter.models.stats import PipelineOutcome
from song_splitter.models.track import AlbumContext, OutputMode, TrackDescriptor
from song_splitter.parsing.tracklist import read_tracklist
from song_splitter.utils.path import prepare_output_dir
from song_splitter.utils.structured_logger import SplitLogger, create_structured_logger

from .formatters import (
    format_error_with_suggestions,
    print_dry_run_plan,
    print_summary_panel,
    print_tracklist_table,
)
from .progress_manager import ProgressManager

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("song_splitter")

app = typer.Typer(
    name="song-splitter",
    help=(
        "Split a long recording into tagged tracks using a tracklist. Use"
        " 'song-splitter <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
):
    """Tracklist-driven media splitter"""
    if version:
        console.print(f"[bold]song-splitter[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("song_splitter").setLevel(log_level)

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def _resolve_tracks(
    tracks: list[TrackDescriptor], duration: float, config: SplitConfig
) -> None:
    resolve_end_times(tracks, duration)
    create_filenames(tracks, config.extension, config.output_dir)


def _build_context(album: str, duration: float, config: SplitConfig) -> AlbumContext:
    return AlbumContext(
        album=config.album_override or album,
        total_duration=duration,
        mode=config.mode,
        output_dir=config.output_dir,
        input_path=config.input_path,
        release_year=config.release_year,
    )


async def _split_async(
    config: SplitConfig,
    context: AlbumContext,
    tracks: list[TrackDescriptor],
    split_logger: SplitLogger,
) -> PipelineOutcome:
    token = CancellationToken()
    restore_signals = install_signal_handlers(token)
    try:
        async with ProgressManager(console=console) as progress_manager:
            pipeline = SplitPipeline(
                context,
                FFmpegRunner(),
                split_logger,
                progress=progress_manager,
                token=token,
                ffmpeg_path=config.ffmpeg_path,
                verify_output=config.verify_output,
            )
            return await pipeline.run(tracks)
    finally:
        restore_signals()


def run_split(config: SplitConfig) -> PipelineOutcome | None:
    """
    Executes a full split session. Setup errors propagate; per-track
    failures are only reflected in the returned outcome.
    """
    base_logger, split_logger = create_structured_logger(
        log_dir=config.log_dir, enable_json=config.log_dir is not None
    )
    with base_logger:
        base_logger.set_session_context(
            input=str(config.input_path), mode=config.mode.value
        )

        tracks, album = read_tracklist(config.tracklist_path)
        split_logger.tracklist_parsed(album, len(tracks))

        duration = probe_duration(config.input_path, config.ffprobe_path)

        if not config.dry_run:
            prepare_output_dir(
                config.output_dir, confirm=typer.confirm, assume_yes=config.assume_yes
            )

        _resolve_tracks(tracks, duration, config)
        context = _build_context(album, duration, config)

        if config.dry_run:
            print_tracklist_table(console, context.album, tracks)
            commands = [
                build_invocation(track, context, config.ffmpeg_path) for track in tracks
            ]
            print_dry_run_plan(console, commands)
            return None

        console.print(
            f"[bold cyan]✂ Splitting[/bold cyan] {len(tracks)} tracks from "
            f"[dim]{config.input_path}[/dim]"
        )
        outcome = asyncio.run(_split_async(config, context, tracks, split_logger))

    print_summary_panel(console, outcome, config.output_dir)
    if outcome.cancelled:
        console.print("\n[yellow]⚠️  Operation cancelled by user.[/yellow]")
    return outcome


@app.command(name="split")
def split_command(
    tracklist: Path | None = typer.Option(
        None, "--tracklist", "-t", help="Path to the tracklist file."
    ),
    input_path: Path | None = typer.Option(
        None, "--input", "-i", help="Media file to split."
    ),
    audio: bool = typer.Option(False, "--audio", help="Output audio tracks (mp3)."),
    video: bool = typer.Option(False, "--video", help="Output video tracks (mp4)."),
    output_dir: Path | None = typer.Option(
        None, "--output-dir", "-o", help="Directory for the tracks (default: output)."
    ),
    year: int | None = typer.Option(
        None, "--year", help="Release year written to the tags (default: this year)."
    ),
    album: str | None = typer.Option(
        None, "--album", help="Album tag; defaults to the tracklist's first line."
    ),
    ffmpeg: str = typer.Option(
        "ffmpeg", "--ffmpeg", envvar="SONG_SPLITTER_FFMPEG", help="ffmpeg executable."
    ),
    ffprobe: str = typer.Option(
        "ffprobe",
        "--ffprobe",
        envvar="SONG_SPLITTER_FFPROBE",
        help="ffprobe executable.",
    ),
    verify: bool = typer.Option(
        True,
        "--verify/--no-verify",
        help="Check every produced file with mutagen after extraction.",
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Replace an existing output directory without asking."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Show the planned tracks and commands without running them."
    ),
    log_dir: Path | None = typer.Option(
        None, "--log-dir", help="Also write JSON-lines event logs to this directory."
    ),
):
    """Split a recording into tracks."""
    try:
        if tracklist is None or input_path is None:
            raise ConfigurationError("Both --tracklist and --input are required.")
        config = load_config(
            {
                "tracklist_path": tracklist,
                "input_path": input_path,
                "audio": audio,
                "video": video,
                "output_dir": output_dir,
                "release_year": year,
                "album_override": album,
                "ffmpeg_path": ffmpeg,
                "ffprobe_path": ffprobe,
                "verify_output": verify,
                "assume_yes": yes,
                "dry_run": dry_run,
                "log_dir": log_dir,
            }
        )
        run_split(config)
    except SongSplitterError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e


@app.command(name="inspect")
def inspect_command(
    tracklist: Path = typer.Option(
        ..., "--tracklist", "-t", help="Path to the tracklist file."
    ),
    input_path: Path | None = typer.Option(
        None, "--input", "-i", help="Media file, used to resolve the last track's end."
    ),
    audio: bool = typer.Option(False, "--audio", help="Show .mp3 file names (default)."),
    video: bool = typer.Option(
        False, "--video", help="Show .mp4 file names instead of .mp3."
    ),
    output_dir: Path = typer.Option(
        Path("output"), "--output-dir", "-o", help="Directory shown in file names."
    ),
    ffprobe: str = typer.Option(
        "ffprobe",
        "--ffprobe",
        envvar="SONG_SPLITTER_FFPROBE",
        help="ffprobe executable.",
    ),
):
    """Show how a tracklist is parsed, without touching any files."""
    try:
        if audio and video:
            raise ConfigurationError("Cannot specify both --audio and --video.")
        tracks, album = read_tracklist(tracklist)
        duration = probe_duration(input_path, ffprobe) if input_path else None
        resolve_end_times(tracks, duration)
        mode = OutputMode.VIDEO if video else OutputMode.AUDIO
        create_filenames(tracks, mode.extension, output_dir)
    except SongSplitterError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e

    print_tracklist_table(console, album, tracks)
    console.print(f"[green]✓[/] {len(tracks)} tracks parsed.")
