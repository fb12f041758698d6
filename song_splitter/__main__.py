"""
Console entry point for song-splitter.
Errors that escape the typer app are rendered as a panel and mapped to exit codes.
"""

import asyncio
import logging
import os
import sys

import typer
from rich.console import Console

from song_splitter.cli.app import app
from song_splitter.cli.formatters import format_error_with_suggestions
from song_splitter.exceptions import SongSplitterError

EXIT_OK = 0
EXIT_SETUP_FAILED = 1


def _force_utf8_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.reconfigure(encoding="utf-8")
        except (TypeError, AttributeError):
            pass


def main() -> None:
    if os.name == "nt":
        _force_utf8_streams()

    console = Console(stderr=True)
    try:
        app()
    except (typer.Exit, typer.Abort):
        pass
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print("\n[yellow]⚠️  Interrupted, no further tracks will be started.[/yellow]")
        sys.exit(EXIT_OK)
    except SongSplitterError as e:
        console.print(format_error_with_suggestions(e))
        sys.exit(EXIT_SETUP_FAILED)
    except Exception as e:
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        logging.getLogger("song_splitter").debug("Full traceback:", exc_info=True)
        sys.exit(EXIT_SETUP_FAILED)


if __name__ == "__main__":
    main()
