"""
Utilities for handling file names and the output directory.
"""

import logging
import re
import shutil
from pathlib import Path
from typing import Callable

from song_splitter.exceptions import SetupError

log = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*]')


def sanitize_component(name: str) -> str:
    """Deletes the characters that are not allowed in a file name component."""
    return _UNSAFE_CHARS.sub("", name)


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def prepare_output_dir(
    output_dir: Path,
    confirm: Callable[[str], bool],
    assume_yes: bool = False,
) -> None:
    """
    Creates a fresh, empty output directory.

    If the directory already exists the operator is asked, through
    ``confirm``, whether it may be deleted and recreated.

    Raises:
        SetupError: If the operator refuses, or the directory cannot be
        removed or created.
    """
    if output_dir.exists():
        if not output_dir.is_dir():
            raise SetupError(f"Output path '{output_dir}' exists and is not a directory.")
        if not assume_yes and not confirm(
            f"Output directory '{output_dir}' exists. Delete it?"
        ):
            raise SetupError("User cancelled operation.")
        try:
            shutil.rmtree(output_dir)
        except OSError as e:
            raise SetupError(f"Could not remove '{output_dir}': {e}") from e
        log.debug(f"Removed existing output directory '{output_dir}'")

    try:
        create_dir(output_dir)
    except OSError as e:
        raise SetupError(f"Could not create '{output_dir}': {e}") from e
