"""
song-splitter: split a long recording into tagged tracks from a tracklist.
"""

__version__ = "0.1.0"
