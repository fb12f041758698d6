"""
Media Processing Layer.

This package is responsible for all interaction with the external media
tools (probing, extraction) and for validating the files they produce.
"""

from .ffmpeg import FFmpegRunner, probe_duration
from .integrity import FileIntegrityChecker

__all__ = ["FFmpegRunner", "FileIntegrityChecker", "probe_duration"]
