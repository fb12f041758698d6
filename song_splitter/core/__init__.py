"""
Core application engine for splitting a recording into tracks.

The timeline resolver fixes each track's boundaries and file name, the
extraction module turns a track into an ffmpeg command, and the
`SplitPipeline` runs those commands over a bounded pool of workers.
"""
