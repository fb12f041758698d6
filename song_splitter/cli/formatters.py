"""
Functions for formatting and displaying data in the console using Rich.
"""

import subprocess
from pathlib import Path

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from song_splitter.core.extraction import ExtractionCommand
from song_splitter.models.stats import PipelineOutcome
from song_splitter.models.track import TrackDescriptor
from song_splitter.utils.formatting import format_duration, format_timestamp


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ParseError": [
            "• Track lines look like: [1:02:03] Artist - Title [Label]",
            "• Additional works look like: w/ Artist - Title [Label]",
            "• Artist and title must be separated by ' - '.",
        ],
        "ProbeError": [
            "• Check that the input file exists and is a media file.",
            "• Make sure ffprobe is installed, or pass --ffprobe.",
        ],
        "ConfigurationError": [
            "• Pass exactly one of --audio or --video.",
            "• Both --tracklist and --input are required.",
        ],
        "SetupError": [
            "• Check that the files are readable and the output directory writable.",
            "• Use --yes to replace an existing output directory without asking.",
        ],
    }

    # Subclasses without their own entry fall back to their parent's hints
    suggestions = next(
        (
            suggestions_map[cls.__name__]
            for cls in type(error).__mro__
            if cls.__name__ in suggestions_map
        ),
        ["• Run the command with -vv for detailed logs."],
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        box=box.ROUNDED,
    )


def print_tracklist_table(
    console: Console, album: str, tracks: list[TrackDescriptor]
) -> None:
    """Prints the parsed tracklist, with resolved ends and file names when known."""
    table = Table(
        title=f"[bold cyan]{escape(album)}[/bold cyan]",
        box=box.SIMPLE_HEAVY,
        show_lines=False,
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Artist", style="cyan")
    table.add_column("Title", style="white")
    table.add_column("Label", style="magenta")
    table.add_column("With", style="dim")
    show_files = any(t.output_filename for t in tracks)
    if show_files:
        table.add_column("File", style="green")

    for position, track in enumerate(tracks, start=1):
        additional = "\n".join(
            f"{t.artist} - {t.title}" for t in track.additional_tracks
        )
        row = [
            str(position),
            format_timestamp(track.start_time),
            format_timestamp(track.end_time),
            escape(track.main_artist),
            escape(track.main_title),
            escape(track.main_label),
            escape(additional),
        ]
        if show_files:
            row.append(escape(track.output_filename.name if track.output_filename else ""))
        table.add_row(*row)

    console.print(table)


def print_dry_run_plan(console: Console, commands: list[ExtractionCommand]) -> None:
    """Prints the ffmpeg commands a real run would execute."""
    console.print(f"\n[bold cyan]Dry run:[/bold cyan] {len(commands)} extractions planned")
    for command in commands:
        console.print(
            f"  [cyan]→[/] Would save to [dim]{escape(str(command.output_path))}[/dim]"
        )
        console.print(
            f"    [dim]{escape(subprocess.list2cmdline(command.argv))}[/dim]",
            soft_wrap=True,
        )


def print_summary_panel(
    console: Console, outcome: PipelineOutcome, output_dir: Path
) -> None:
    """Prints the final session summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")
    table.add_row("Tracks:", str(outcome.total))
    table.add_row("Extracted:", f"[green]{outcome.succeeded}[/green]")
    table.add_row("Failed:", f"[red]{outcome.failed}[/red]")
    if outcome.skipped:
        table.add_row("Skipped:", f"[yellow]{outcome.skipped}[/yellow]")
    table.add_row("Duration:", format_duration(outcome.duration_seconds))
    table.add_row("Output:", f"[dim]{escape(str(output_dir))}[/dim]")

    if outcome.cancelled:
        title, style = "[bold yellow]⚠ Split Cancelled[/bold yellow]", "yellow"
    elif outcome.failed:
        title, style = "[bold red]✗ Split Finished With Errors[/bold red]", "red"
    else:
        title, style = "[bold green]✓ Split Complete[/bold green]", "green"

    console.print(Panel(table, title=title, border_style=style, box=box.ROUNDED))
