"""
Data Models Layer.

This package contains the data structures used throughout the application:
track descriptors, the run configuration and the pipeline statistics.
"""

from .config import MAX_WORKERS, SplitConfig, load_config
from .stats import JobState, PipelineOutcome, SplitStats
from .track import AdditionalTrack, AlbumContext, OutputMode, TrackDescriptor

__all__ = [
    "MAX_WORKERS",
    "AdditionalTrack",
    "AlbumContext",
    "JobState",
    "OutputMode",
    "PipelineOutcome",
    "SplitConfig",
    "SplitStats",
    "TrackDescriptor",
    "load_config",
]
