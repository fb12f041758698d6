"""
Pydantic model for the run configuration.
Provides validation for all command-line settings and is immutable once built.
"""

from datetime import date
from pathlib import Path
from typing import Any

from pathvalidate import ValidationError as PathValidationError
from pathvalidate import validate_filepath
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from song_splitter.exceptions import ConfigurationError
from song_splitter.models.track import OutputMode

# Upper bound on concurrently running ffmpeg processes
MAX_WORKERS = 4

DEFAULT_OUTPUT_DIR = Path("output")


class SplitConfig(BaseModel):
    """A validated, read-only configuration for one split run."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    # Inputs
    tracklist_path: Path
    input_path: Path
    mode: OutputMode

    # Output Settings
    output_dir: Path = DEFAULT_OUTPUT_DIR
    release_year: int = Field(default_factory=lambda: date.today().year)
    album_override: str | None = None

    # External Tools
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"

    # Behavior
    verify_output: bool = True
    assume_yes: bool = False
    dry_run: bool = False
    log_dir: Path | None = None

    @model_validator(mode="before")
    @classmethod
    def resolve_mode_flags(cls, data: Any) -> Any:
        """
        Translates the mutually exclusive ``audio``/``video`` flags into ``mode``.
        Exactly one of them must be set when ``mode`` is not given directly.
        """
        if not isinstance(data, dict) or "mode" in data:
            return data
        data = dict(data)
        audio = bool(data.pop("audio", False))
        video = bool(data.pop("video", False))
        if audio and video:
            raise ValueError("Cannot specify both --audio and --video.")
        if not audio and not video:
            raise ValueError("Either --audio or --video must be specified.")
        data["mode"] = OutputMode.AUDIO if audio else OutputMode.VIDEO
        return data

    @field_validator("release_year")
    @classmethod
    def validate_year(cls, v: int) -> int:
        if v < 1000 or v > 9999:
            raise ValueError("Release year must be a four-digit year.")
        return v

    @field_validator("output_dir")
    @classmethod
    def validate_output_dir(cls, v: Path) -> Path:
        """Rejects empty, root and malformed output directories."""
        if str(v) in ("", ".", "/", "\\"):
            raise ValueError("Output directory must be a dedicated subdirectory.")
        try:
            validate_filepath(str(v), platform="auto")
        except PathValidationError as e:
            raise ValueError(f"Invalid output directory: {e}") from e
        return v

    @field_validator("album_override")
    @classmethod
    def empty_album_is_none(cls, v: str | None) -> str | None:
        return v or None

    @property
    def extension(self) -> str:
        return self.mode.extension


def load_config(cli_options: dict[str, Any]) -> SplitConfig:
    """
    Builds a validated configuration from command-line options.

    Options whose value is None are left at their defaults.

    Raises:
        ConfigurationError: If validation fails.
    """
    options = {key: value for key, value in cli_options.items() if value is not None}
    try:
        return SplitConfig(**options)
    except ValidationError as e:
        messages = "; ".join(
            error["msg"].removeprefix("Value error, ") for error in e.errors()
        )
        raise ConfigurationError(f"Invalid options: {messages}") from e
