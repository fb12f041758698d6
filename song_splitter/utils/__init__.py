"""
Shared helpers: path handling, human-readable formatting and structured logging.
"""
